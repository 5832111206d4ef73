from pathlib import Path

from playwright.async_api import Page

from .exceptions import CaptureError
from .logger import logger


async def capture(page: Page, directory: Path, name: str) -> str:
    """Full-page screenshot to <directory>/<name>.png. Returns the file name."""
    filename = f"{name}.png"
    path = Path(directory) / filename
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        await page.screenshot(path=str(path), full_page=True)
    except Exception as e:
        raise CaptureError(str(path), e) from e

    if not path.exists():
        raise CaptureError(str(path))
    logger.info(f"Screenshot saved: {path}")
    return filename
