from dataclasses import asdict, dataclass
from typing import List, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator, Page

from . import annotator
from .capture import capture
from .document import DocumentAssembler
from .exceptions import StepResolutionError
from .logger import logger
from .narrator import NarrationGenerator
from .resolver import SelectorResolver
from .steps import ActionKind, StepDescriptor
from .workspace import RunContext


@dataclass
class CaptureRecord:
    ordinal: int
    sequence: int
    filename: str
    url: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class StepOutcome:
    ordinal: int
    skipped: bool
    selector: Optional[str] = None
    screenshots: Optional[List[str]] = None
    narration_degraded: bool = False


class StepSequencer:
    """
    Runs StepDescriptors strictly in ordinal order against one page.

    Per step: resolve (primary, then fallback), mark the element, capture
    "before", act, clear the mark, wait for the page to settle, capture
    "after", narrate, append to the document. A step's document block is on
    disk before the next step starts.
    """

    def __init__(
        self,
        resolver: SelectorResolver,
        narration: NarrationGenerator,
        document: DocumentAssembler,
        settle_timeout_ms: int = 10000,
    ):
        self.resolver = resolver
        self.narration = narration
        self.document = document
        self.settle_timeout_ms = settle_timeout_ms
        self.captures: List[CaptureRecord] = []
        self.outcomes: List[StepOutcome] = []

    async def run(self, steps: List[StepDescriptor], page: Page, context: RunContext) -> List[StepOutcome]:
        for step in sorted(steps, key=lambda s: s.ordinal):
            logger.info(f"--- Step {step.ordinal}: {step.action_summary} ---")
            outcome = await self.run_step(step, page, context)
            self.outcomes.append(outcome)
        return self.outcomes

    async def run_step(self, step: StepDescriptor, page: Page, context: RunContext) -> StepOutcome:
        resolution = await self.resolver.resolve(page, step.target_selector, step.fallback_selector)
        if not resolution.resolved:
            if step.optional:
                logger.warning(
                    f"Step {step.ordinal} skipped: optional target not found ({', '.join(resolution.attempted)})"
                )
                return StepOutcome(ordinal=step.ordinal, skipped=True)
            raise StepResolutionError(step.ordinal, step.target_selector, self.resolver.timeout_ms)
        if resolution.used_fallback:
            logger.info(f"Step {step.ordinal}: primary selector failed, using '{resolution.selector}'")

        element = resolution.locator
        await annotator.annotate(page, element)
        before = await self._capture(page, context, step, "before")

        try:
            await self._perform(step, element, page)
        except PlaywrightError as e:
            logger.error(f"Step {step.ordinal}: action '{step.action_kind.value}' failed: {e}")
            raise StepResolutionError(step.ordinal, resolution.selector) from e
        await annotator.clear(page)
        await self._settle(step, page)
        after = await self._capture(page, context, step, "after")

        action_summary, feature = step.narration_context
        narration = await self.narration.generate(action_summary, feature)
        screenshots = [before, after]
        self.document.append_step(step.ordinal, narration, screenshots)

        return StepOutcome(
            ordinal=step.ordinal,
            skipped=False,
            selector=resolution.selector,
            screenshots=screenshots,
            narration_degraded=narration.degraded,
        )

    async def _perform(self, step: StepDescriptor, element: Locator, page: Page):
        if step.action_kind is ActionKind.FILL:
            await element.fill(step.value or "")
        elif step.action_kind is ActionKind.SELECT:
            tag = await element.evaluate("el => el.tagName.toLowerCase()")
            if tag == "select":
                await element.select_option(step.value)
            else:
                await element.check()
        elif step.action_kind is ActionKind.CLICK:
            await element.click()
        elif step.action_kind is ActionKind.NAVIGATE:
            await element.click()
            await self._wait_load(page, "domcontentloaded")
        else:
            raise ValueError(f"Unknown action kind: {step.action_kind}")

    async def _settle(self, step: StepDescriptor, page: Page):
        """Best effort: a timeout here is logged and the run carries on."""
        if step.settle_selector:
            try:
                await page.wait_for_selector(
                    step.settle_selector, state="visible", timeout=self.settle_timeout_ms
                )
            except PlaywrightError as e:
                logger.warning(
                    f"Step {step.ordinal}: '{step.settle_selector}' not visible after "
                    f"{self.settle_timeout_ms}ms, capturing current state ({e})"
                )
        else:
            await self._wait_load(page, "networkidle")

    async def _wait_load(self, page: Page, state: str):
        try:
            await page.wait_for_load_state(state, timeout=self.settle_timeout_ms)
        except PlaywrightError as e:
            logger.warning(f"Page did not reach '{state}' within {self.settle_timeout_ms}ms ({e})")

    async def _capture(self, page: Page, context: RunContext, step: StepDescriptor, phase: str) -> str:
        name = f"{step.ordinal:02d}-{phase}-{step.slug}"
        filename = await capture(page, context.run_directory, name)
        self.captures.append(
            CaptureRecord(
                ordinal=step.ordinal,
                sequence=context.next_sequence(),
                filename=filename,
                url=page.url,
            )
        )
        return filename
