"""
walkthru.sequencer unit tests
Step ordering, optional skips, fatal aborts, best-effort settling and the
annotate -> capture -> act -> clear -> capture sequence.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from walkthru.document import DocumentAssembler
from walkthru.exceptions import CaptureError, StepResolutionError
from walkthru.narrator import NarrationGenerator, Narrator, OfflineNarrator
from walkthru.resolver import SelectorResolver
from walkthru.sequencer import StepSequencer
from walkthru.steps import ActionKind, StepDescriptor
from helpers import make_locator, make_page


def _step(ordinal, selector, kind=ActionKind.CLICK, **kwargs):
    kwargs.setdefault("slug", f"step-{ordinal}")
    return StepDescriptor(
        ordinal=ordinal,
        target_selector=selector,
        action_kind=kind,
        action_summary=f"Do thing {ordinal}",
        feature="Courses",
        **kwargs,
    )


def _sequencer(run_context):
    document = DocumentAssembler(run_context)
    document.open_document()
    return StepSequencer(
        resolver=SelectorResolver(timeout_ms=10),
        narration=NarrationGenerator(OfflineNarrator()),
        document=document,
        settle_timeout_ms=10,
    )


def _doc(run_context):
    return run_context.document_path.read_text(encoding="utf-8")


@pytest.mark.unit
class TestStepOrdering:

    def test_k_steps_give_k_blocks_in_order(self, run_context):
        steps = [_step(n, f"#s{n}") for n in (1, 2, 3)]
        page = make_page({f"#s{n}": make_locator() for n in (1, 2, 3)})
        sequencer = _sequencer(run_context)

        asyncio.run(sequencer.run(steps, page, run_context))

        text = _doc(run_context)
        positions = [text.index(f"{n}. Step: Perform Do thing {n}") for n in (1, 2, 3)]
        assert positions == sorted(positions)
        assert sequencer.document.blocks_written == 3

    def test_steps_run_by_ordinal_not_list_order(self, run_context):
        steps = [_step(2, "#b"), _step(1, "#a")]
        page = make_page({"#a": make_locator(), "#b": make_locator()})
        sequencer = _sequencer(run_context)

        outcomes = asyncio.run(sequencer.run(steps, page, run_context))

        assert [o.ordinal for o in outcomes] == [1, 2]

    def test_referenced_screenshots_exist(self, run_context):
        steps = [_step(1, "#a", slug="start"), _step(2, "#b", slug="sign-in")]
        page = make_page({"#a": make_locator(), "#b": make_locator()})

        asyncio.run(_sequencer(run_context).run(steps, page, run_context))

        names = ["01-before-start.png", "01-after-start.png", "02-before-sign-in.png", "02-after-sign-in.png"]
        for name in names:
            assert (run_context.run_directory / name).exists()
        assert "(images: 01-before-start.png, 01-after-start.png)" in _doc(run_context)

    def test_capture_records_are_sequenced(self, run_context):
        page = make_page({"#a": make_locator()})
        sequencer = _sequencer(run_context)

        asyncio.run(sequencer.run([_step(1, "#a")], page, run_context))

        assert [c.sequence for c in sequencer.captures] == [1, 2]
        assert all(c.url == page.url for c in sequencer.captures)

    def test_marker_shown_only_in_before_screenshot(self, run_context):
        page = make_page({"#a": make_locator()})

        asyncio.run(_sequencer(run_context).run([_step(1, "#a")], page, run_context))

        order = [c[0] for c in page.mock_calls if c[0] in ("evaluate", "screenshot")]
        assert order == ["evaluate", "screenshot", "evaluate", "screenshot"]


@pytest.mark.unit
class TestResolutionFailures:

    def test_optional_step_is_skipped(self, run_context):
        steps = [_step(1, "#a"), _step(2, "#missing", optional=True), _step(3, "#c")]
        page = make_page({"#a": make_locator(), "#c": make_locator()})
        sequencer = _sequencer(run_context)

        outcomes = asyncio.run(sequencer.run(steps, page, run_context))

        assert [o.skipped for o in outcomes] == [False, True, False]
        text = _doc(run_context)
        assert "2. Step:" not in text
        assert "3. Step:" in text
        assert not list(run_context.run_directory.glob("02-*.png"))

    def test_required_step_aborts_run(self, run_context):
        third = make_locator()
        steps = [_step(1, "#a"), _step(2, "#missing"), _step(3, "#c")]
        page = make_page({"#a": make_locator(), "#c": third})

        with pytest.raises(StepResolutionError) as exc_info:
            asyncio.run(_sequencer(run_context).run(steps, page, run_context))

        assert exc_info.value.ordinal == 2
        assert "#missing" in str(exc_info.value)
        assert "2. Step:" not in _doc(run_context)
        assert "3. Step:" not in _doc(run_context)
        third.first.wait_for.assert_not_awaited()

    def test_fallback_selector_is_used(self, run_context):
        fallback = make_locator()
        step = _step(1, "#gone", fallback_selector="button.start")
        page = make_page({"button.start": fallback})
        sequencer = _sequencer(run_context)

        outcomes = asyncio.run(sequencer.run([step], page, run_context))

        assert outcomes[0].selector == "button.start"
        fallback.first.click.assert_awaited_once()

    def test_failed_action_is_fatal(self, run_context):
        target = make_locator()
        target.first.click = AsyncMock(side_effect=PlaywrightTimeoutError("element is not enabled"))
        page = make_page({"#a": target})

        with pytest.raises(StepResolutionError) as exc_info:
            asyncio.run(_sequencer(run_context).run([_step(1, "#a")], page, run_context))
        assert exc_info.value.ordinal == 1

    def test_capture_failure_is_fatal(self, run_context):
        page = make_page({"#a": make_locator()})
        page.screenshot = AsyncMock(side_effect=PlaywrightError("Target closed"))

        with pytest.raises(CaptureError):
            asyncio.run(_sequencer(run_context).run([_step(1, "#a")], page, run_context))
        assert "1. Step:" not in _doc(run_context)


@pytest.mark.unit
class TestSettling:

    def test_settle_selector_timeout_is_not_fatal(self, run_context, caplog):
        page = make_page({"#a": make_locator()})
        page.wait_for_selector = AsyncMock(side_effect=PlaywrightTimeoutError("Timeout 10ms exceeded."))
        step = _step(1, "#a", settle_selector="#dashboard:not(.hidden)")

        with caplog.at_level("WARNING", logger="walkthru"):
            outcomes = asyncio.run(_sequencer(run_context).run([step], page, run_context))

        assert not outcomes[0].skipped
        assert (run_context.run_directory / "01-after-step-1.png").exists()
        assert "#dashboard:not(.hidden)" in caplog.text

    def test_settle_selector_waits_for_visibility(self, run_context):
        page = make_page({"#a": make_locator()})
        step = _step(1, "#a", settle_selector="#login-page:not(.hidden)")

        asyncio.run(_sequencer(run_context).run([step], page, run_context))

        page.wait_for_selector.assert_awaited_once_with("#login-page:not(.hidden)", state="visible", timeout=10)

    def test_network_idle_timeout_is_not_fatal(self, run_context):
        page = make_page({"#a": make_locator()})
        page.wait_for_load_state = AsyncMock(side_effect=PlaywrightTimeoutError("Timeout 10ms exceeded."))

        outcomes = asyncio.run(_sequencer(run_context).run([_step(1, "#a")], page, run_context))

        assert len(outcomes[0].screenshots) == 2


@pytest.mark.unit
class TestActions:

    def test_fill_uses_value(self, run_context):
        target = make_locator()
        page = make_page({"#user": target})

        asyncio.run(_sequencer(run_context).run([_step(1, "#user", ActionKind.FILL, value="test-user")], page, run_context))

        target.first.fill.assert_awaited_once_with("test-user")

    def test_select_checks_radio(self, run_context):
        target = make_locator(tag="input")
        page = make_page({"#radio": target})

        asyncio.run(_sequencer(run_context).run([_step(1, "#radio", ActionKind.SELECT)], page, run_context))

        target.first.check.assert_awaited_once()
        target.first.select_option.assert_not_awaited()

    def test_select_on_dropdown_picks_option(self, run_context):
        target = make_locator(tag="select")
        page = make_page({"#role": target})

        asyncio.run(
            _sequencer(run_context).run([_step(1, "#role", ActionKind.SELECT, value="teacher")], page, run_context)
        )

        target.first.select_option.assert_awaited_once_with("teacher")

    def test_navigate_clicks_and_waits_for_dom(self, run_context):
        target = make_locator()
        page = make_page({"nav a": target})

        asyncio.run(_sequencer(run_context).run([_step(1, "nav a", ActionKind.NAVIGATE)], page, run_context))

        target.first.click.assert_awaited_once()
        page.wait_for_load_state.assert_any_await("domcontentloaded", timeout=10)

    def test_offline_narration_matches_fallback_exactly(self, run_context):
        page = make_page({"#a": make_locator()})

        outcomes = asyncio.run(_sequencer(run_context).run([_step(1, "#a")], page, run_context))

        assert outcomes[0].narration_degraded
        assert "1. Step: Perform Do thing 1\nExpected Result: Do thing 1 succeeds.\n" in _doc(run_context)


class _BrokenNarrator(Narrator):
    async def narrate(self, prompt):
        raise TimeoutError("backend timed out")


@pytest.mark.unit
def test_narration_crash_still_documents_step(run_context):
    document = DocumentAssembler(run_context)
    document.open_document()
    sequencer = StepSequencer(
        resolver=SelectorResolver(timeout_ms=10),
        narration=NarrationGenerator(_BrokenNarrator()),
        document=document,
        settle_timeout_ms=10,
    )
    page = make_page({"#a": make_locator()})

    outcomes = asyncio.run(sequencer.run([_step(1, "#a", slug="start")], page, run_context))

    assert outcomes[0].narration_degraded
    assert "1. Step: Perform Do thing 1\nExpected Result: Do thing 1 succeeds.\n" in _doc(run_context)
    assert "(images: 01-before-start.png, 01-after-start.png)" in _doc(run_context)
