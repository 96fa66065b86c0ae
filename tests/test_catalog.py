"""Tests for the catalog availability check."""

import pytest

from voxfetch.catalog.prober import make_catalog_url, probe_book_status
from voxfetch.constants import SELECTORS
from voxfetch.models.book import BookStatus

from .conftest import FakePage, FakeResponse

TITLE = SELECTORS["catalog_title"]


def catalog_page(**kwargs) -> FakePage:
    kwargs.setdefault("visible", {TITLE: True})
    kwargs.setdefault("texts", {TITLE: "  Algorithmique  "})
    return FakePage(**kwargs)


async def check_status(page: FakePage, docid: str = "88812345") -> BookStatus:
    return await probe_book_status(page, docid, title_timeout_ms=0)


def test_catalog_url():
    assert make_catalog_url("88812345") == "https://univ.scholarvox.com/catalog/book/docid/88812345"


async def test_found_with_title():
    page = catalog_page()
    assert await check_status(page) == BookStatus.FOUND
    assert page.visited == [make_catalog_url("88812345")]


async def test_removed_flag_wins_over_stale_title():
    page = catalog_page(visible={TITLE: True, SELECTORS["removed_flag"]: True})
    assert await check_status(page) == BookStatus.REMOVED


async def test_removed_flag_text_counts_even_when_hidden():
    page = catalog_page(
        texts={TITLE: "Old title", SELECTORS["removed_flag"]: "Cet ouvrage n'est plus disponible"}
    )
    assert await check_status(page) == BookStatus.REMOVED


async def test_not_available_panel_is_removed():
    page = catalog_page(visible={TITLE: True, SELECTORS["not_available"]: True})
    assert await check_status(page) == BookStatus.REMOVED


async def test_available_soon_in_page_text():
    page = catalog_page(
        html="<html><body><p>Cet ouvrage sera bientôt disponible</p></body></html>"
    )
    assert await check_status(page) == BookStatus.AVAILABLE_SOON


async def test_non_ok_response_is_not_found_even_with_title():
    page = catalog_page(response=FakeResponse(ok=False, status=404))
    assert await check_status(page) == BookStatus.NOT_FOUND


async def test_navigation_failure_is_not_found():
    page = catalog_page(goto_error=RuntimeError("net::ERR_NAME_NOT_RESOLVED"))
    assert await check_status(page) == BookStatus.NOT_FOUND


async def test_redirect_to_error_page_is_not_found():
    page = catalog_page(redirect_to="https://univ.scholarvox.com/error/404")
    assert await check_status(page) == BookStatus.NOT_FOUND


async def test_docid_containing_404_is_not_mistaken_for_error():
    page = catalog_page()
    assert await check_status(page, docid="1404") == BookStatus.FOUND


@pytest.mark.parametrize("text", [None, "   "])
async def test_missing_or_blank_title_is_not_found(text):
    texts = {} if text is None else {TITLE: text}
    page = catalog_page(visible={}, texts=texts)
    assert await check_status(page) == BookStatus.NOT_FOUND


async def test_status_check_is_repeatable():
    page = catalog_page(visible={TITLE: True, SELECTORS["removed_flag"]: True})
    first = await check_status(page)
    second = await check_status(page)
    assert first == second == BookStatus.REMOVED
