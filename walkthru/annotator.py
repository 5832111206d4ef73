"""Red click marker drawn over the element about to be acted on."""

from typing import Optional, Tuple

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator, Page

from .logger import logger

MARKER_ID = "walkthru-click-marker"
MARKER_SIZE = 40

_INJECT_MARKER = """
({ id, x, y, size }) => {
    document.getElementById(id)?.remove();
    const marker = document.createElement('div');
    marker.id = id;
    Object.assign(marker.style, {
        position: 'fixed',
        left: `${x - size / 2}px`,
        top: `${y - size / 2}px`,
        width: `${size}px`,
        height: `${size}px`,
        borderRadius: '50%',
        border: '4px solid red',
        backgroundColor: 'rgba(255, 0, 0, 0.3)',
        boxSizing: 'border-box',
        zIndex: '999999',
        pointerEvents: 'none',
    });
    document.body.appendChild(marker);
}
"""

_REMOVE_MARKER = "(id) => document.getElementById(id)?.remove()"


async def annotate(page: Page, element: Locator) -> Optional[Tuple[float, float]]:
    """
    Place the marker on the center of `element`'s bounding box.

    Returns the center point, or None when the element has no box
    (detached or display:none), in which case nothing is drawn.
    """
    box = await element.bounding_box()
    if not box:
        logger.debug("No bounding box for element; skipping marker")
        return None

    x = box["x"] + box["width"] / 2
    y = box["y"] + box["height"] / 2
    await page.evaluate(_INJECT_MARKER, {"id": MARKER_ID, "x": x, "y": y, "size": MARKER_SIZE})
    return x, y


async def clear(page: Page):
    """Remove the marker. A page without one is left untouched."""
    try:
        await page.evaluate(_REMOVE_MARKER, MARKER_ID)
    except PlaywrightError as e:
        # The action may have replaced the document, taking the marker with it.
        logger.debug(f"Marker removal skipped: {e}")
