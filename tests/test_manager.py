"""Tests for the download orchestrator."""

import pytest

from voxfetch.errors import AuthenticationError, CaptureError
from voxfetch.models.session import AuthCheck
from voxfetch.reader import scripts
from voxfetch.session_manager import manager as manager_module
from voxfetch.session_manager.manager import BookDownloader
from voxfetch.tools.credentials import Credentials

from .conftest import FakeContext, FakePage, cookie, make_pdf
from .test_capture import rendered_page

IFRAME_URL = "https://univ.scholarvox.com/reader/content/88812345"


class FakeBrowser:
    def __init__(self, context: FakeContext, page: FakePage):
        self.context = context
        self.page = page
        page.context = context


def reader_page(pages: int, pdf_bytes: bytes = b"") -> FakePage:
    page = rendered_page()
    page.scripts[scripts.COUNT_PAGES] = pages
    page.scripts[scripts.SCROLL_TO_PAGE] = True
    page.pdf_bytes = pdf_bytes
    return page


def downloader(context: FakeContext, **kwargs) -> BookDownloader:
    outer = FakePage(scripts={scripts.IFRAME_SRC: IFRAME_URL})
    kwargs.setdefault("show_progress", False)
    kwargs.setdefault("font_settle_ms", 0)
    return BookDownloader(FakeBrowser(context, outer), **kwargs)


async def test_download_whole_book(no_sleep, tmp_path):
    reader = reader_page(3, make_pdf((810, 999), (810, 999), (810, 999)))
    context = FakeContext(pages=[reader])

    artifact = await downloader(context).download("88812345", tmp_path / "out" / "book.pdf")

    assert artifact.page_count == 3
    assert artifact.buffers == 1
    assert (tmp_path / "out" / "book.pdf").exists()
    assert len(reader.calls(scripts.SCROLL_TO_PAGE)) == 3
    assert len(reader.pdf_calls) == 1
    assert reader.closed


async def test_download_per_page(no_sleep, tmp_path):
    pages = [rendered_page() for _ in range(2)]
    for page in pages:
        page.pdf_bytes = make_pdf((810, 999))
    reader = reader_page(2)
    context = FakeContext(pages=[reader, *pages])

    artifact = await downloader(context, per_page=True).download("88812345", tmp_path / "book.pdf")

    assert artifact.page_count == 2
    assert artifact.buffers == 2
    assert reader.pdf_calls == []
    assert all(p.closed for p in pages)
    assert reader.closed


async def test_per_page_failure_aborts_without_output(no_sleep, tmp_path):
    good = rendered_page()
    good.pdf_bytes = make_pdf((810, 999))
    bad = rendered_page(goto_error=RuntimeError("crashed"))
    reader = reader_page(2)
    context = FakeContext(pages=[reader, good, bad])

    with pytest.raises(CaptureError, match="page 2"):
        await downloader(context, per_page=True).download("1", tmp_path / "book.pdf")

    assert reader.closed
    assert not (tmp_path / "book.pdf").exists()


async def test_login_with_credentials(no_sleep):
    context = FakeContext(cookies=[cookie("SFSESSID")])
    manager = downloader(context)
    manager.browser.page.visible = {'input[type="email"]': True, 'input[type="password"]': True}

    auth = await manager.login(Credentials(email="me@school.fr", password="pw"))

    assert auth.authenticated
    assert manager.browser.page.visited[0] == "https://univ.scholarvox.com/saml-sp/viacesi"


async def test_interactive_login_timeout_raises(monkeypatch):
    async def never(page, **kwargs):
        return AuthCheck(authenticated=False, note="Not authenticated")

    monkeypatch.setattr(manager_module, "perform_interactive_login", never)

    with pytest.raises(AuthenticationError, match="Login timed out"):
        await downloader(FakeContext()).login(docid="1")
