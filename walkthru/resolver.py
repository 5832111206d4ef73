"""
Element resolution with a fallback selector.

    RESOLVING_PRIMARY -> RESOLVED
                      -> RESOLVING_FALLBACK -> RESOLVED
                                            -> UNRESOLVED
                      -> UNRESOLVED            (no fallback)

What UNRESOLVED means for the run (skip or abort) is left to the caller.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator, Page

from .logger import logger


class ResolutionState(str, Enum):
    RESOLVING_PRIMARY = "resolving_primary"
    RESOLVING_FALLBACK = "resolving_fallback"
    RESOLVED = "resolved"
    UNRESOLVED = "unresolved"


@dataclass
class Resolution:
    state: ResolutionState
    locator: Optional[Locator] = None
    selector: Optional[str] = None
    used_fallback: bool = False
    attempted: Optional[List[str]] = None

    @property
    def resolved(self) -> bool:
        return self.state is ResolutionState.RESOLVED


class SelectorResolver:
    def __init__(self, timeout_ms: int = 5000):
        self.timeout_ms = timeout_ms

    async def resolve(self, page: Page, primary: str, fallback: Optional[str] = None) -> Resolution:
        attempted = []
        state = ResolutionState.RESOLVING_PRIMARY
        while True:
            if state is ResolutionState.RESOLVING_PRIMARY:
                selector = primary
                next_state = ResolutionState.RESOLVING_FALLBACK if fallback else ResolutionState.UNRESOLVED
            elif state is ResolutionState.RESOLVING_FALLBACK:
                selector = fallback
                next_state = ResolutionState.UNRESOLVED
            else:
                return Resolution(state=state, attempted=attempted)

            attempted.append(selector)
            locator = await self._wait_visible(page, selector)
            if locator is not None:
                return Resolution(
                    state=ResolutionState.RESOLVED,
                    locator=locator,
                    selector=selector,
                    used_fallback=state is ResolutionState.RESOLVING_FALLBACK,
                    attempted=attempted,
                )
            state = next_state

    async def _wait_visible(self, page: Page, selector: str) -> Optional[Locator]:
        locator = page.locator(selector).first
        try:
            await locator.wait_for(state="visible", timeout=self.timeout_ms)
        except PlaywrightError as e:
            # TimeoutError subclasses Error; an invalid selector lands here too.
            logger.debug(f"Selector '{selector}' not actionable: {e}")
            return None
        return locator
