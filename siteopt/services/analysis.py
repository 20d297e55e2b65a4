"""
Site analysis — extracted content plus a short AI-written description.
The description seeds step 3 (siteDescription) of the wizard.
"""

import logging

from ..core.errors import ExternalServiceError
from ..core.flags import get_flags
from ..schemas.suggestions import WebsiteInfo
from .extractor import scrape_website
from .llm import chat_simple

logger = logging.getLogger(__name__)

DESCRIPTION_EXCERPT_CHARS = 1000

ANALYZER_SYSTEM = (
    "You are a professional website analyzer. Create concise, accurate "
    "descriptions that capture the essence of websites."
)


def build_description_prompt(info: WebsiteInfo) -> str:
    return (
        "Analyze this website and create a concise, professional description "
        "(max 2 sentences) that highlights its main purpose and value proposition.\n\n"
        f"Website Title: {info.title}\n"
        f"Meta Description: {info.meta_description or ''}\n"
        f"Main Headings: {', '.join(info.main_headings)}\n"
        f"Main Content Excerpt: {info.main_content[:DESCRIPTION_EXCERPT_CHARS]}"
    )


async def analyze_website(url: str) -> tuple[WebsiteInfo, str]:
    """
    Returns (website_info, ai_description).
    Raises ExternalServiceError(ANALYSIS_FAILED) if the page or the LLM fails.
    """
    try:
        info = await scrape_website(url)
    except ExternalServiceError as e:
        raise ExternalServiceError(f"Failed to analyze website: {e.message}", "ANALYSIS_FAILED") from e

    if not get_flags().use_ai_description:
        return info, info.description

    try:
        description = await chat_simple(
            prompt=build_description_prompt(info),
            system=ANALYZER_SYSTEM,
            temperature=0.7,
            max_tokens=100,
        )
    except Exception as e:
        logger.error("AI description failed for %s: %s", url, e)
        raise ExternalServiceError("Failed to analyze website", "ANALYSIS_FAILED") from e

    return info, description.strip()
