"""Reader navigation: iframe discovery, page counting and lazy-load scrolling."""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Callable, Optional
from urllib.parse import quote

from playwright.async_api import BrowserContext, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..config import LOG_LEVEL, PAGE_SETTLE_MS, READER_VIEWPORT
from ..constants import SCHOLARVOX_READER_URL, SELECTORS
from ..errors import ReaderError
from . import scripts

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(name)s] %(levelname)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(LOG_LEVEL)


def make_reader_url(docid: str, page: int = 1) -> str:
    """Build the reader URL for ``docid`` opened at ``page``."""
    return SCHOLARVOX_READER_URL.format(docid=quote(docid, safe=""), page=page)


async def get_iframe_url(page: Page, timeout_ms: int = 10000) -> Optional[str]:
    """Return the ``src`` of the reader iframe, or None if it never shows up."""
    try:
        await page.wait_for_selector(SELECTORS["iframe"], state="attached", timeout=timeout_ms)
        return await page.evaluate(scripts.IFRAME_SRC)
    except Exception as e:
        logger.warning(f"Failed to get iframe URL: {e}")
        return None


async def count_pages(page: Page) -> int:
    """Number of children in the reader's page container (0 if missing)."""
    return int(await page.evaluate(scripts.COUNT_PAGES, SELECTORS["page_container"]) or 0)


async def open_iframe_page(
    context: BrowserContext,
    iframe_url: str,
    timeout_ms: int = 15000,
    settle_ms: int = 3000,
) -> Page:
    """Open the iframe content directly in its own large-viewport page.

    A ``networkidle`` timeout is tolerated: the reader keeps polling in
    the background and the page is usually usable anyway.
    """
    page = await context.new_page()
    try:
        await page.set_viewport_size(READER_VIEWPORT)
        await page.goto(iframe_url, wait_until="networkidle", timeout=timeout_ms)
    except PlaywrightTimeoutError:
        logger.warning(f"Reader content did not reach network idle within {timeout_ms}ms")
    except Exception:
        await page.close()
        raise
    await asyncio.sleep(settle_ms / 1000)
    return page


class ReaderSession:
    """The iframe-content page of an opened book, plus what we know about it."""

    def __init__(
        self,
        docid: str,
        iframe_url: str,
        page: Page,
        total_pages: int,
        reloads: int = 0,
        settle_ms: int = PAGE_SETTLE_MS,
    ):
        self.docid = docid
        self.iframe_url = iframe_url
        self.page = page
        self.total_pages = total_pages
        self.reloads = reloads
        self._settle_ms = settle_ms

    async def scroll_to_page(self, index: int) -> bool:
        return bool(
            await self.page.evaluate(
                scripts.SCROLL_TO_PAGE, [SELECTORS["page_container"], index]
            )
        )

    async def load_all_pages(self, progress: Optional[Callable[[int], None]] = None):
        """Scroll every page into view in ascending order to trigger lazy loading.

        Later pages may depend on earlier ones having been scrolled past,
        so the order is fixed.
        """
        for index in range(self.total_pages):
            await self.scroll_to_page(index)
            if progress:
                progress(index + 1)
            await asyncio.sleep(self._settle_ms / 1000)

    async def close(self):
        try:
            await self.page.close()
        except Exception as e:
            logger.warning(f"Error closing reader page: {e}")


async def open_reader(
    context: BrowserContext,
    page: Page,
    docid: str,
    settle_ms: int = 2000,
    load_timeout_ms: int = 15000,
    load_settle_ms: int = 3000,
) -> ReaderSession:
    """Open ``docid`` in the reader and return its iframe-content session.

    Zero pages usually means a transient load failure, so the iframe page
    is reopened exactly once before giving up.
    """
    reader_url = make_reader_url(docid, 1)
    logger.info(f"Opening reader: {reader_url}")
    await page.goto(reader_url, wait_until="domcontentloaded", timeout=30000)
    await asyncio.sleep(settle_ms / 1000)

    iframe_url = await page.evaluate(scripts.IFRAME_SRC)
    if not iframe_url:
        raise ReaderError(f"No iframe found! (URL: {page.url})")
    logger.debug(f"Iframe URL: {iframe_url[:80]}...")
    logger.debug(f"Viewport: {READER_VIEWPORT['width']}x{READER_VIEWPORT['height']}")

    iframe_page = await open_iframe_page(context, iframe_url, load_timeout_ms, load_settle_ms)
    total_pages = await count_pages(iframe_page)
    reloads = 0

    if total_pages == 0:
        logger.warning("Book appears to have 0 pages. Retrying...")
        await iframe_page.close()
        reloads += 1
        iframe_page = await open_iframe_page(context, iframe_url, load_timeout_ms, load_settle_ms)
        total_pages = await count_pages(iframe_page)
        if total_pages == 0:
            await iframe_page.close()
            raise ReaderError(
                "Book still has 0 pages after retry. The book might be "
                "unavailable or there's an access issue."
            )
        logger.info("Retry successful!")

    logger.info(f"Book contains {total_pages} pages.")
    return ReaderSession(docid, iframe_url, iframe_page, total_pages, reloads=reloads)
