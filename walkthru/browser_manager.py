from typing import Dict, Optional

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from .logger import logger


class BrowserManager:
    def __init__(self, headless: bool = False, slow_mo_ms: int = 0, viewport: Optional[Dict[str, int]] = None):
        self.headless = headless
        self.slow_mo_ms = slow_mo_ms
        self.viewport = viewport or {"width": 1280, "height": 720}
        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None

    async def start(self) -> Page:
        """Launches Chromium and opens a single page."""
        self.playwright = await async_playwright().start()
        self.browser = await self.playwright.chromium.launch(
            headless=self.headless,
            slow_mo=self.slow_mo_ms,
        )
        self.context = await self.browser.new_context(viewport=self.viewport)
        self.page = await self.context.new_page()
        return self.page

    async def stop(self):
        """Closes the session. Safe to call after a partial start."""
        try:
            if self.context:
                await self.context.close()
            if self.browser:
                await self.browser.close()
        except PlaywrightError as e:
            logger.warning(f"Browser close failed: {e}")
        finally:
            if self.playwright:
                await self.playwright.stop()
            self.page = self.context = self.browser = self.playwright = None

    async def navigate(self, url: str, timeout_ms: int = 10000):
        """Navigates to a URL and waits for the DOM to be ready."""
        if not self.page:
            raise RuntimeError("Browser not started")
        await self.page.goto(url)
        await self.page.wait_for_load_state("domcontentloaded", timeout=timeout_ms)
