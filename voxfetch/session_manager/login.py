"""ScholarVox login: interactive SSO polling and automated credential login."""

from __future__ import annotations

import asyncio
import logging
import re
import sys
from typing import Optional
from urllib.parse import quote

from playwright.async_api import Locator, Page

from ..config import LOG_LEVEL, LOGIN_POLL_MS, LOGIN_TIMEOUT_MS
from ..constants import (
    EMAIL_INPUT_SELECTORS,
    PASSWORD_INPUT_SELECTORS,
    PLATFORM_URL_PATTERN,
    SCHOLARVOX_HOME_URL,
    SCHOLARVOX_SSO_URL,
    SCHOLARVOX_WAYF_URL,
    SELECTORS,
    SUBMIT_SELECTORS,
)
from ..errors import AuthenticationError
from ..models.session import AuthCheck
from .auth import wait_and_detect_auth

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(name)s] %(levelname)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(LOG_LEVEL)


async def open_login_entry(
    page: Page,
    login_url: Optional[str] = None,
    institution_slug: Optional[str] = None,
    fallback_to_homepage: bool = True,
):
    """Navigate to the best login entry point we know of.

    Priority: explicit URL, institution WAYF page, platform homepage.
    Nothing here is fatal.
    """
    if login_url:
        target = login_url
    elif institution_slug:
        target = SCHOLARVOX_WAYF_URL.format(slug=quote(institution_slug, safe=""))
    elif fallback_to_homepage:
        target = SCHOLARVOX_HOME_URL
    else:
        return

    logger.info(f"Opening login entry: {target}")
    try:
        await page.goto(target, wait_until="domcontentloaded", timeout=45000)
    except Exception as e:
        logger.warning(f"Login entry navigation failed: {e}")

    # Bring the login button into view for a human to click.
    try:
        login_button = page.locator(SELECTORS["login_button"]).first
        if await login_button.is_visible(timeout=2000):
            await login_button.scroll_into_view_if_needed()
    except Exception:
        logger.debug("No login button to reveal")


async def perform_interactive_login(
    page: Page,
    docid: Optional[str] = None,
    timeout_ms: int = LOGIN_TIMEOUT_MS,
    poll_every_ms: int = LOGIN_POLL_MS,
    check_timeout_ms: int = 15000,
    final_check_timeout_ms: int = 10000,
    login_url: Optional[str] = None,
    institution_slug: Optional[str] = None,
    fallback_to_homepage: bool = True,
) -> AuthCheck:
    """Open the login entry and poll cookies until authenticated or timeout.

    When ``docid`` is known each poll revisits the reader, which is what
    makes the platform issue its session cookie after SSO. The caller
    decides what an unauthenticated final result means.
    """
    await open_login_entry(page, login_url, institution_slug, fallback_to_homepage)
    logger.info("Waiting for login to complete in the browser window...")

    loop = asyncio.get_event_loop()
    deadline = loop.time() + timeout_ms / 1000
    while loop.time() < deadline:
        auth = await wait_and_detect_auth(
            page,
            docid=docid,
            wait_for_iframe=bool(docid),
            timeout_ms=check_timeout_ms,
        )
        if auth.authenticated:
            logger.info(auth.note)
            return auth
        await asyncio.sleep(poll_every_ms / 1000)

    logger.warning("Login polling timed out, checking one last time.")
    return await wait_and_detect_auth(page, timeout_ms=final_check_timeout_ms)


async def check_auth_now(page: Page) -> AuthCheck:
    """Quick cookie check without any navigation."""
    return await wait_and_detect_auth(page, timeout_ms=3000)


async def _first_visible(
    page: Page, selectors: list[str], timeout_ms: int, poll_ms: int = 250
) -> Locator:
    """First visible element, trying ``selectors`` in priority order until the deadline."""
    loop = asyncio.get_event_loop()
    deadline = loop.time() + timeout_ms / 1000
    while True:
        for selector in selectors:
            locator = page.locator(selector).first
            if await locator.is_visible():
                logger.debug(f"Matched input selector: {selector}")
                return locator
        if loop.time() >= deadline:
            raise TimeoutError(f"None of {selectors} became visible within {timeout_ms}ms")
        await asyncio.sleep(poll_ms / 1000)


async def login_with_credentials(
    page: Page,
    email: str,
    password: str,
    login_url: str = SCHOLARVOX_SSO_URL,
    email_selectors: Optional[list[str]] = None,
    password_selectors: Optional[list[str]] = None,
    submit_selectors: Optional[list[str]] = None,
    redirect_settle_ms: int = 3000,
    action_settle_ms: int = 500,
    session_settle_ms: int = 2000,
    email_timeout_ms: int = 10000,
    password_timeout_ms: int = 5000,
):
    """Fill the institution's SSO form and wait to land back on ScholarVox.

    Raises:
        AuthenticationError: a field never became visible, or the
            platform never came back after submitting.
    """
    try:
        await page.goto(login_url, wait_until="domcontentloaded", timeout=45000)
        # SSO redirects to the identity provider's own page
        await asyncio.sleep(redirect_settle_ms / 1000)
        logger.debug(f"Login form URL: {page.url}")

        email_input = await _first_visible(page, email_selectors or EMAIL_INPUT_SELECTORS, email_timeout_ms)
        await email_input.click()
        await email_input.fill(email)
        await asyncio.sleep(action_settle_ms / 1000)

        password_input = await _first_visible(
            page, password_selectors or PASSWORD_INPUT_SELECTORS, password_timeout_ms
        )
        await password_input.click()
        await password_input.fill(password)
        await asyncio.sleep(action_settle_ms / 1000)

        platform = re.compile(PLATFORM_URL_PATTERN)
        submit = page.locator(", ".join(submit_selectors or SUBMIT_SELECTORS)).first
        if await submit.count() > 0:
            logger.debug("Found submit button, clicking...")
            await asyncio.gather(
                page.wait_for_url(platform, timeout=30000),
                submit.click(),
            )
        else:
            logger.debug("No submit button found, pressing Enter...")
            await asyncio.gather(
                page.wait_for_url(platform, timeout=30000),
                password_input.press("Enter"),
            )

        await asyncio.sleep(session_settle_ms / 1000)
    except Exception as e:
        logger.error(f"Login failed: {e}")
        raise AuthenticationError(f"Login failed: {e}", url=page.url) from e

    logger.info("Login successful!")
