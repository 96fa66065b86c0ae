"""In-memory stand-ins for the parts of Playwright's async API we drive."""

from __future__ import annotations

import asyncio
import io
import re
from typing import Any, Callable, Optional

import pytest
from pypdf import PdfWriter


class FakeResponse:
    def __init__(self, ok: bool = True, status: int = 200):
        self.ok = ok
        self.status = status


class FakeLocator:
    def __init__(self, page: FakePage, selector: str):
        self.page = page
        self.selector = selector

    @property
    def first(self) -> FakeLocator:
        return self

    async def is_visible(self, timeout: Optional[int] = None) -> bool:
        return self.page.visible.get(self.selector, False)

    async def count(self) -> int:
        present = self.selector in self.page.texts or self.page.visible.get(self.selector, False)
        return 1 if present else 0

    async def inner_text(self) -> str:
        return self.page.texts.get(self.selector, "")

    async def text_content(self) -> Optional[str]:
        return self.page.texts.get(self.selector)

    async def wait_for(self, state: str = "visible", timeout: Optional[int] = None):
        if not self.page.visible.get(self.selector, False):
            raise TimeoutError(f"{self.selector} not visible")

    async def click(self):
        self.page.actions.append(("click", self.selector))

    async def fill(self, value: str):
        self.page.actions.append(("fill", self.selector, value))

    async def press(self, key: str):
        self.page.actions.append(("press", self.selector, key))

    async def scroll_into_view_if_needed(self):
        self.page.actions.append(("scroll", self.selector))


class FakeContext:
    """Cookie jar plus a queue of pages handed out by ``new_page``."""

    def __init__(self, cookies: Any = None, pages: Optional[list[FakePage]] = None):
        # ``cookies`` is either a list or a list of lists consumed per call
        self._cookies = cookies if cookies is not None else []
        self._pages = list(pages or [])
        self.opened: list[FakePage] = []
        self.cookie_calls = 0

    async def cookies(self) -> list[dict]:
        self.cookie_calls += 1
        if self._cookies and isinstance(self._cookies[0], list):
            index = min(self.cookie_calls - 1, len(self._cookies) - 1)
            return self._cookies[index]
        return self._cookies

    async def new_page(self) -> FakePage:
        page = self._pages.pop(0) if self._pages else FakePage()
        page.context = self
        self.opened.append(page)
        return page


class FakePage:
    """Scriptable page: ``scripts`` maps a JS snippet to a value or ``f(arg)``."""

    def __init__(
        self,
        url: str = "about:blank",
        scripts: Optional[dict[str, Any]] = None,
        visible: Optional[dict[str, bool]] = None,
        texts: Optional[dict[str, str]] = None,
        html: str = "<html><body></body></html>",
        response: Optional[FakeResponse] = None,
        goto_error: Optional[Exception] = None,
        redirect_to: Optional[str] = None,
        pdf_bytes: bytes = b"%PDF-fake",
        context: Optional[FakeContext] = None,
    ):
        self.url = url
        self.scripts = scripts or {}
        self.visible = visible or {}
        self.texts = texts or {}
        self.html = html
        self.response = response or FakeResponse()
        self.goto_error = goto_error
        self.redirect_to = redirect_to
        self.pdf_bytes = pdf_bytes
        self.context = context or FakeContext()
        self.visited: list[str] = []
        self.evaluated: list[tuple[str, Any]] = []
        self.actions: list[tuple] = []
        self.pdf_calls: list[dict] = []
        self.viewport: Optional[dict] = None
        self.closed = False

    async def goto(self, url: str, **kwargs) -> FakeResponse:
        self.visited.append(url)
        if self.goto_error:
            raise self.goto_error
        self.url = self.redirect_to or url
        return self.response

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        self.evaluated.append((script, arg))
        handler = self.scripts.get(script)
        if callable(handler):
            return handler(arg)
        return handler

    def calls(self, script: str) -> list[Any]:
        return [arg for s, arg in self.evaluated if s == script]

    async def content(self) -> str:
        return self.html

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(self, selector)

    async def wait_for_selector(self, selector: str, **kwargs):
        return None

    async def wait_for_url(self, pattern, timeout: Optional[int] = None):
        self.actions.append(("wait_for_url", pattern.pattern if isinstance(pattern, re.Pattern) else pattern))
        self.url = "https://univ.scholarvox.com/"

    async def set_viewport_size(self, viewport: dict):
        self.viewport = viewport

    def set_default_timeout(self, timeout: int):
        pass

    async def pdf(self, **kwargs) -> bytes:
        self.pdf_calls.append(kwargs)
        return self.pdf_bytes

    async def close(self):
        self.closed = True


def sequence(*values) -> Callable[[Any], Any]:
    """Handler returning ``values`` one per call, repeating the last."""
    state = {"i": 0}

    def handler(_arg):
        value = values[min(state["i"], len(values) - 1)]
        state["i"] += 1
        return value

    return handler


def make_pdf(*sizes: tuple[float, float]) -> bytes:
    """A real PDF with one blank page per (width, height) in points."""
    writer = PdfWriter()
    for width, height in sizes:
        writer.add_blank_page(width=width, height=height)
    out = io.BytesIO()
    writer.write(out)
    return out.getvalue()


def cookie(name: str, domain: str = ".scholarvox.com", value: str = "x") -> dict:
    return {"name": name, "value": value, "domain": domain, "path": "/"}


@pytest.fixture
def no_sleep(monkeypatch):
    """Make every ``asyncio.sleep`` yield immediately."""
    original = asyncio.sleep

    async def fast_sleep(delay, result=None):
        return await original(0, result)

    monkeypatch.setattr(asyncio, "sleep", fast_sleep)
