"""HTTP catalog client that reuses the browser's cookies for metadata lookups."""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Optional

import httpx

from ..config import LOG_LEVEL
from ..models.book import BookMeta
from .parser import parse_title, parse_total_pages, sanitize_title
from .prober import make_catalog_url

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(name)s] %(levelname)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(LOG_LEVEL)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/131.0.0.0 Safari/537.36"
)


class CatalogScraper:
    """Fetches static catalog pages over HTTP with transferred browser cookies."""

    def __init__(
        self,
        cookies: Optional[list[dict]] = None,
        user_agent: str = "",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._cookies = {
            c["name"]: c["value"] for c in cookies or [] if "name" in c and "value" in c
        }
        self._user_agent = user_agent or DEFAULT_USER_AGENT
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        logger.debug(f"Initializing httpx client with {len(self._cookies)} cookies")
        self._client = httpx.AsyncClient(
            cookies=self._cookies,
            headers={
                "User-Agent": self._user_agent,
                "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
                "Accept-Language": "fr-FR,fr;q=0.9,en;q=0.8",
            },
            follow_redirects=True,
            timeout=30.0,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args):
        if self._client:
            await self._client.aclose()

    async def _fetch_page(self, url: str, attempts: int = 3) -> str:
        """Fetch a page, retrying connection errors and 5xx responses."""
        for attempt in range(attempts):
            try:
                response = await self._client.get(url)
                logger.debug(
                    f"_fetch_page: status={response.status_code}, url={response.url} "
                    f"(attempt {attempt + 1})"
                )
                response.raise_for_status()
                return response.text
            except httpx.HTTPStatusError as e:
                if e.response.status_code < 500:
                    raise
                logger.warning(f"Server error {e.response.status_code}, retrying...")
            except httpx.TransportError as e:
                logger.warning(f"Connection error on attempt {attempt + 1}: {e}")
            await asyncio.sleep(2)

        raise RuntimeError(f"Failed to fetch {url} after {attempts} attempts.")

    async def fetch_meta(self, docid: str) -> BookMeta:
        """Title and advertised page count; missing fields stay None."""
        html = await self._fetch_page(make_catalog_url(docid))
        title = parse_title(html)
        meta = BookMeta(
            docid=docid,
            title=title,
            safe_title=sanitize_title(title) if title else None,
            total_pages=parse_total_pages(html),
        )
        logger.info(f"Catalog metadata: title={meta.title!r}, pages={meta.total_pages}")
        return meta
