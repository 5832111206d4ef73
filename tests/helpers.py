"""Fake Playwright page and locators built from MagicMock / AsyncMock."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

DEFAULT_BOX = {"x": 100, "y": 200, "width": 80, "height": 40}


def make_locator(visible=True, box=DEFAULT_BOX, tag="input"):
    """Object returned by page.locator(selector); the engine works with `.first`."""
    inner = MagicMock(name="locator.first")
    if visible:
        inner.wait_for = AsyncMock(return_value=None)
    else:
        inner.wait_for = AsyncMock(side_effect=PlaywrightTimeoutError("Timeout 5000ms exceeded."))
    inner.bounding_box = AsyncMock(return_value=box)
    inner.evaluate = AsyncMock(return_value=tag)
    inner.fill = AsyncMock()
    inner.click = AsyncMock()
    inner.check = AsyncMock()
    inner.select_option = AsyncMock()
    outer = MagicMock(name="locator")
    outer.first = inner
    return outer


def make_page(locators=None):
    """Selectors missing from `locators` never become visible."""
    locators = dict(locators or {})
    page = MagicMock(name="page")
    page.url = "http://localhost:5500/"
    page.locator = MagicMock(side_effect=lambda selector: locators.get(selector) or make_locator(visible=False))

    async def screenshot(path, full_page=False):
        Path(path).write_bytes(b"\x89PNG\r\n\x1a\n")

    page.screenshot = AsyncMock(side_effect=screenshot)
    page.evaluate = AsyncMock()
    page.wait_for_selector = AsyncMock()
    page.wait_for_load_state = AsyncMock()
    return page
