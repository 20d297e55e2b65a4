"""
Website content extractor. Direct HTTP fetch + HTML parse. One function.
"""

import logging
from typing import Optional

import httpx
from bs4 import BeautifulSoup

from ..core.config import get_settings
from ..core.errors import ExternalServiceError
from ..schemas.suggestions import WebsiteInfo

logger = logging.getLogger(__name__)

MIN_BLOCK_CHARS = 50  # shorter text blocks are nav labels, buttons, captions


def parse_html(html: str, char_budget: int) -> WebsiteInfo:
    """Pull title, meta description, h1/h2 headings and main text out of a page."""
    soup = BeautifulSoup(html, "html.parser")

    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()

    title = soup.title.get_text(strip=True) if soup.title else ""

    meta_description: Optional[str] = None
    meta = soup.find("meta", attrs={"name": "description"})
    if meta and meta.get("content"):
        meta_description = meta["content"].strip()

    headings = [h.get_text(strip=True) for h in soup.find_all(["h1", "h2"])]
    headings = [h for h in headings if h]

    blocks = [el.get_text(" ", strip=True) for el in soup.find_all(["p", "article", "section"])]
    main_content = "\n".join(b for b in blocks if len(b) > MIN_BLOCK_CHARS)[:char_budget]

    return WebsiteInfo(
        title=title,
        description=meta_description or "",
        meta_description=meta_description,
        main_headings=headings,
        main_content=main_content,
    )


async def scrape_website(url: str) -> WebsiteInfo:
    """
    Fetch a page and return its structured content.
    Raises ExternalServiceError if the page can't be fetched.
    """
    settings = get_settings()
    try:
        async with httpx.AsyncClient(
            timeout=settings.scraper_timeout,
            follow_redirects=True,
            headers={"User-Agent": settings.scraper_user_agent},
        ) as client:
            resp = await client.get(url)
            resp.raise_for_status()
    except httpx.HTTPStatusError as e:
        logger.warning("Scrape failed for %s: HTTP %d", url, e.response.status_code)
        raise ExternalServiceError(f"Failed to fetch {url} (HTTP {e.response.status_code})", "SCRAPE_FAILED") from e
    except httpx.HTTPError as e:
        logger.warning("Scrape failed for %s: %s", url, e)
        raise ExternalServiceError(f"Failed to fetch {url}", "SCRAPE_FAILED") from e

    info = parse_html(resp.text, settings.content_char_budget)
    logger.info(
        "Scraped %s: title=%r headings=%d content=%d chars",
        url, info.title[:60], len(info.main_headings), len(info.main_content),
    )
    return info
