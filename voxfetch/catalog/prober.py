"""Book availability check against the ScholarVox catalog page."""

from __future__ import annotations

import logging
import re
import sys
from urllib.parse import quote

from playwright.async_api import Page

from ..config import LOG_LEVEL
from ..constants import (
    AVAILABLE_SOON_MESSAGE,
    ERROR_URL_PATTERN,
    REMOVED_MESSAGE,
    SCHOLARVOX_CATALOG_URL,
    SELECTORS,
)
from ..models.book import BookStatus

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(name)s] %(levelname)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(LOG_LEVEL)


def make_catalog_url(docid: str) -> str:
    return SCHOLARVOX_CATALOG_URL.format(docid=quote(docid, safe=""))


async def _is_visible(page: Page, selector: str) -> bool:
    try:
        return await page.locator(selector).first.is_visible()
    except Exception:
        return False


async def probe_book_status(
    page: Page,
    docid: str,
    timeout_ms: int = 15000,
    title_timeout_ms: int = 5000,
) -> BookStatus:
    """Classify ``docid`` from its catalog page; first matching rule wins.

    Removal and "available soon" markers are checked before the title,
    because a removed book's page can still carry its old title.
    """
    url = make_catalog_url(docid)
    try:
        response = await page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)
    except Exception as e:
        logger.debug(f"Catalog navigation failed: {e}")
        response = None

    if response is None or not response.ok:
        logger.debug(f"Catalog page for {docid} unreachable or not OK")
        return BookStatus.NOT_FOUND

    # Only redirects count: numeric docids can contain "404" themselves
    if page.url != url and re.search(ERROR_URL_PATTERN, page.url, re.I):
        logger.debug(f"Catalog redirected to error page: {page.url}")
        return BookStatus.NOT_FOUND

    if await _is_visible(page, SELECTORS["removed_flag"]):
        return BookStatus.REMOVED
    removed_flag = page.locator(SELECTORS["removed_flag"]).first
    try:
        if await removed_flag.count() and REMOVED_MESSAGE in (await removed_flag.inner_text()).lower():
            return BookStatus.REMOVED
    except Exception:
        logger.debug("Could not read removal flag text")

    if await _is_visible(page, SELECTORS["not_available"]):
        return BookStatus.REMOVED

    content = await page.content()
    if AVAILABLE_SOON_MESSAGE in content.lower():
        return BookStatus.AVAILABLE_SOON

    # Late-rendering UI: give the title a moment to appear
    title = page.locator(SELECTORS["catalog_title"]).first
    try:
        await title.wait_for(state="visible", timeout=title_timeout_ms)
    except Exception:
        logger.debug("Catalog title did not become visible")
    try:
        title_text = ((await title.text_content()) or "").strip()
    except Exception:
        title_text = ""

    if title_text:
        logger.debug(f"Catalog title: {title_text}")
        return BookStatus.FOUND
    return BookStatus.NOT_FOUND
