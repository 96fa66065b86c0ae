"""Tests for the HTTP catalog client."""

import httpx
import pytest

from voxfetch.catalog.scraper import CatalogScraper

from .test_parser import CATALOG_HTML


def transport(handler) -> httpx.MockTransport:
    return httpx.MockTransport(handler)


async def test_fetch_meta_sends_cookies_and_parses():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["cookie"] = request.headers.get("cookie", "")
        return httpx.Response(200, text=CATALOG_HTML)

    cookies = [{"name": "SFSESSID", "value": "abc", "domain": ".scholarvox.com"}]
    async with CatalogScraper(cookies=cookies, transport=transport(handler)) as scraper:
        meta = await scraper.fetch_meta("88812345")

    assert seen["url"] == "https://univ.scholarvox.com/catalog/book/docid/88812345"
    assert "SFSESSID=abc" in seen["cookie"]
    assert meta.docid == "88812345"
    assert meta.title == "Algorithmique et programmation"
    assert meta.safe_title == "Algorithmique-et-programmation"
    assert meta.total_pages == 432


async def test_fetch_meta_with_empty_page():
    def handler(request):
        return httpx.Response(200, text="<html><body></body></html>")

    async with CatalogScraper(transport=transport(handler)) as scraper:
        meta = await scraper.fetch_meta("1")

    assert meta.title is None
    assert meta.safe_title is None
    assert meta.total_pages is None


async def test_client_error_is_raised_without_retry():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(404)

    async with CatalogScraper(transport=transport(handler)) as scraper:
        with pytest.raises(httpx.HTTPStatusError):
            await scraper.fetch_meta("1")

    assert len(calls) == 1


async def test_server_error_is_retried(no_sleep):
    responses = [httpx.Response(503), httpx.Response(200, text=CATALOG_HTML)]

    def handler(request):
        return responses.pop(0)

    async with CatalogScraper(transport=transport(handler)) as scraper:
        meta = await scraper.fetch_meta("1")

    assert meta.total_pages == 432
