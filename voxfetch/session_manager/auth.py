"""Cookie-based authentication detection for ScholarVox."""

from __future__ import annotations

import asyncio
import logging
import re
import sys
from typing import Iterable, Optional

from playwright.async_api import Page

from ..config import LOG_LEVEL
from ..constants import AUX_COOKIE_PATTERNS, SCHOLARVOX_DOMAIN, SESSION_COOKIE_PATTERN
from ..models.session import AuthCheck
from ..reader.navigator import get_iframe_url, make_reader_url

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(name)s] %(levelname)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(LOG_LEVEL)


def normalize_domain(domain: str) -> str:
    return domain[1:] if domain.startswith(".") else domain


def is_platform_domain(domain: str) -> bool:
    """Exact platform domain or one of its subdomains."""
    domain = normalize_domain(domain).lower()
    return domain == SCHOLARVOX_DOMAIN or domain.endswith("." + SCHOLARVOX_DOMAIN)


def _platform_cookies(cookies: Iterable[dict]) -> list[dict]:
    return [c for c in cookies if is_platform_domain(c.get("domain", ""))]


def detect_auth_from_cookies(cookies: Iterable[dict], debug: bool = False) -> AuthCheck:
    """Classify authentication from a cookie list.

    A ``sfsessid*`` cookie on the platform domain is the only signal that
    counts. Preference and tracking cookies are logged for diagnostics;
    ``debug`` also lists every platform cookie.
    """
    svx = _platform_cookies(cookies)
    if debug:
        _log_cookies(svx, "Platform cookies")
    session = [c for c in svx if re.match(SESSION_COOKIE_PATTERN, c.get("name", ""), re.I)]

    if session:
        matched = [f"{c['name']}@{normalize_domain(c.get('domain', ''))}" for c in session]
        logger.debug(f"SFSESSID found ({', '.join(matched)}) -> AUTHENTICATED")
        return AuthCheck(
            authenticated=True,
            note="Authenticated (SFSESSID on scholarvox).",
            matched=matched,
        )

    signals = {
        family: any(re.search(pattern, c.get("name", ""), re.I) for c in svx)
        for family, pattern in AUX_COOKIE_PATTERNS.items()
    }
    logger.debug(f"No SFSESSID; auxiliary cookies: {signals} -> NOT AUTHENTICATED")
    return AuthCheck(
        authenticated=False,
        note="Not authenticated: missing SFSESSID on scholarvox.com.",
    )


def _log_cookies(cookies: list[dict], label: str = "Cookies"):
    if not logger.isEnabledFor(logging.DEBUG):
        return
    logger.debug(f"{label}:")
    for c in cookies:
        logger.debug(f" - {c.get('name')} ({normalize_domain(c.get('domain', ''))})")


async def wait_and_detect_auth(
    page: Page,
    docid: Optional[str] = None,
    wait_for_iframe: bool = False,
    timeout_ms: int = 10000,
    poll_ms: int = 800,
) -> AuthCheck:
    """Poll the cookie jar until authenticated or ``timeout_ms`` elapses.

    When ``docid`` is given the reader is opened first, which makes the
    platform hand out its session cookie. After the deadline one last
    check is made and returned whatever it says.
    """
    loop = asyncio.get_event_loop()
    deadline = loop.time() + timeout_ms / 1000

    if docid:
        try:
            await page.goto(make_reader_url(docid, 1), wait_until="domcontentloaded", timeout=30000)
        except Exception as e:
            logger.debug(f"Reader navigation during auth check failed: {e}")
        if wait_for_iframe:
            await get_iframe_url(page)

    while loop.time() < deadline:
        cookies = await page.context.cookies()
        _log_cookies(cookies)
        result = detect_auth_from_cookies(cookies)
        if result.authenticated:
            return result
        await asyncio.sleep(poll_ms / 1000)

    cookies = await page.context.cookies()
    _log_cookies(cookies, "Final cookies")
    return detect_auth_from_cookies(cookies)
