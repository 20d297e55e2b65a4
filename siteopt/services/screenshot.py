"""
Above-the-fold screenshot of a site, rendered with headless Chromium.

Controlled by FF_USE_SCREENSHOT. If navigation doesn't settle in time,
whatever has rendered so far is captured and flagged as partial.
"""

import base64
import logging
from dataclasses import dataclass

from ..core.errors import ExternalServiceError

logger = logging.getLogger(__name__)

VIEWPORT = {"width": 1280, "height": 800}
NAVIGATION_TIMEOUT_MS = 15_000
SETTLE_MS = 1000
BLOCKED_RESOURCES = {"media", "font", "websocket"}


@dataclass
class Screenshot:
    data_url: str
    partial: bool = False


def _to_data_url(jpeg: bytes) -> str:
    return "data:image/jpeg;base64," + base64.b64encode(jpeg).decode("ascii")


async def _block_heavy_resources(route) -> None:
    if route.request.resource_type in BLOCKED_RESOURCES:
        await route.abort()
    else:
        await route.continue_()


async def capture_screenshot(url: str) -> Screenshot:
    """Raises ExternalServiceError(SCREENSHOT_ERROR) if nothing could be captured."""
    from playwright.async_api import async_playwright

    try:
        async with async_playwright() as pw:
            browser = await pw.chromium.launch(
                headless=True,
                args=["--no-sandbox", "--disable-dev-shm-usage", "--disable-gpu"],
            )
            try:
                page = await browser.new_page(viewport=VIEWPORT)
                await page.route("**/*", _block_heavy_resources)

                partial = False
                try:
                    await page.goto(url, wait_until="networkidle", timeout=NAVIGATION_TIMEOUT_MS)
                    await page.wait_for_timeout(SETTLE_MS)
                except Exception as e:
                    logger.warning("Page did not settle for %s, capturing partial render: %s", url, e)
                    partial = True

                jpeg = await page.screenshot(type="jpeg", quality=80 if partial else 85, full_page=False)
                logger.info("Screenshot captured for %s (%d bytes, partial=%s)", url, len(jpeg), partial)
                return Screenshot(data_url=_to_data_url(jpeg), partial=partial)
            finally:
                await browser.close()
    except Exception as e:
        logger.error("Screenshot failed for %s: %s", url, e)
        raise ExternalServiceError("Failed to capture screenshot", "SCREENSHOT_ERROR") from e
