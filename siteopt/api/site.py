"""
Site API.

POST /v1/analyze    — Extract page content + AI description for a URL
POST /v1/screenshot — Above-the-fold JPEG of a URL (FF_USE_SCREENSHOT)
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict, Field

from ..core.errors import AppError, ValidationError
from ..core.flags import get_flags
from ..schemas.envelope import Envelope, ok
from ..schemas.suggestions import WebsiteInfo
from ..services.analysis import analyze_website
from ..services.screenshot import capture_screenshot

logger = logging.getLogger(__name__)

site_router = APIRouter(tags=["site"])


class UrlRequest(BaseModel):
    url: Optional[str] = None


def _require_url(url: Optional[str]) -> str:
    url = (url or "").strip()
    if not url:
        raise ValidationError("URL is required", "MISSING_URL")
    return url


# ── Analyze ──────────────────────────────────────────────────────────

class AnalyzeData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    website_info: WebsiteInfo = Field(alias="websiteInfo")
    ai_description: str = Field(alias="aiDescription")


@site_router.post("/analyze", response_model=Envelope[AnalyzeData])
async def analyze(request: UrlRequest):
    """Scrape the site and draft a description for step 3."""
    url = _require_url(request.url)
    info, description = await analyze_website(url)
    return ok(AnalyzeData(website_info=info, ai_description=description))


# ── Screenshot ───────────────────────────────────────────────────────

class ScreenshotData(BaseModel):
    screenshot: str
    timestamp: str
    partial: bool = False


@site_router.post("/screenshot", response_model=Envelope[ScreenshotData])
async def screenshot(request: UrlRequest):
    url = _require_url(request.url)
    if not get_flags().use_screenshot:
        raise AppError("Screenshots are disabled", "SCREENSHOT_DISABLED", status_code=503)

    shot = await capture_screenshot(url)
    return ok(ScreenshotData(
        screenshot=shot.data_url,
        timestamp=datetime.now(timezone.utc).isoformat(),
        partial=shot.partial,
    ))
