"""Tests for BrowserSession state that does not need a real browser."""

import pytest

from voxfetch.session_manager.browser import BrowserSession

from .conftest import FakeContext, FakePage, cookie

USER_AGENT = "() => navigator.userAgent"


def running_session(context: FakeContext, page: FakePage) -> BrowserSession:
    session = BrowserSession(headless=True, persistent=False)
    session._context = context
    session._page = page
    return session


def test_not_running():
    session = BrowserSession(headless=True)
    assert not session.is_running
    with pytest.raises(RuntimeError):
        session.page
    with pytest.raises(RuntimeError):
        session.context


async def test_extract_session_data():
    jar = [cookie("SFSESSID"), cookie("posthog")]
    session = running_session(
        FakeContext(cookies=jar), FakePage(scripts={USER_AGENT: "Mozilla/5.0 Chrome"})
    )

    cookies = await session.extract_session_data()

    assert cookies == jar
    assert session.cookies == jar
    assert session.user_agent == "Mozilla/5.0 Chrome"


async def test_extract_session_data_failure_keeps_previous_state():
    class BrokenContext(FakeContext):
        async def cookies(self):
            raise RuntimeError("Target closed")

    session = running_session(BrokenContext(), FakePage())

    assert await session.extract_session_data() == []
    assert session.user_agent == ""
