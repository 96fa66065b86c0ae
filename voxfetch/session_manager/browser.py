"""Playwright Chromium automation: launch, pages, session data, shutdown."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright

from ..config import (
    BROWSER_HEADLESS,
    BROWSER_PERSISTENT,
    BROWSER_PROFILE_DIR,
    BROWSER_TIMEOUT,
    BROWSER_VIEWPORT,
    LOG_LEVEL,
)

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(name)s] %(levelname)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(LOG_LEVEL)

# Site isolation would put the reader iframe out of process reach.
LAUNCH_ARGS = [
    "--disable-blink-features=AutomationControlled",
    "--disable-features=site-per-process",
    "--disable-site-isolation-trials",
]


class BrowserSession:
    """Owns one Chromium browser context for the lifetime of a run.

    Print-to-PDF only exists in Chromium, so this is always Chromium.
    """

    def __init__(
        self,
        headless: Optional[bool] = None,
        persistent: bool = BROWSER_PERSISTENT,
        profile_dir: Path = BROWSER_PROFILE_DIR,
    ):
        self._headless = BROWSER_HEADLESS if headless is None else headless
        self._persistent = persistent
        self._profile_dir = profile_dir
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None
        self._cookies: list[dict] = []
        self._user_agent: str = ""

    @property
    def is_running(self) -> bool:
        return self._page is not None

    @property
    def context(self) -> BrowserContext:
        if self._context is None:
            raise RuntimeError("Browser is not running.")
        return self._context

    @property
    def page(self) -> Page:
        if self._page is None:
            raise RuntimeError("Browser is not running.")
        return self._page

    @property
    def cookies(self) -> list[dict]:
        return self._cookies

    @property
    def user_agent(self) -> str:
        return self._user_agent

    async def start(self) -> Page:
        """Launch Chromium and open the session's main page."""
        if self.is_running:
            return self._page

        logger.info(f"Launching Chromium (headless={self._headless}, persistent={self._persistent})...")
        try:
            self._playwright = await async_playwright().start()
            if self._persistent:
                # Persistent profile keeps SSO cookies between runs
                self._profile_dir.mkdir(parents=True, exist_ok=True)
                self._context = await self._playwright.chromium.launch_persistent_context(
                    str(self._profile_dir),
                    headless=self._headless,
                    args=LAUNCH_ARGS,
                    viewport=BROWSER_VIEWPORT,
                )
                self._browser = self._context.browser
                pages = self._context.pages
                self._page = pages[0] if pages else await self._context.new_page()
            else:
                self._browser = await self._playwright.chromium.launch(
                    headless=self._headless,
                    args=LAUNCH_ARGS,
                )
                self._context = await self._browser.new_context(viewport=BROWSER_VIEWPORT)
                self._page = await self._context.new_page()
            self._page.set_default_timeout(BROWSER_TIMEOUT)
        except Exception as e:
            logger.error(f"Failed to start browser: {e}")
            await self.stop()
            raise
        return self._page

    async def extract_session_data(self) -> list[dict]:
        """Extract cookies and user-agent from the browser context."""
        try:
            self._cookies = await self.context.cookies()
            self._user_agent = await self.page.evaluate("() => navigator.userAgent")
            logger.debug(
                f"Extracted {len(self._cookies)} cookies, "
                f"UA: {self._user_agent[:60]}..."
            )
        except Exception as e:
            logger.warning(f"Failed to extract session data: {e}")
        return self._cookies

    async def stop(self):
        """Close the context, the browser and Playwright, whatever state they are in."""
        logger.debug("Stopping browser session...")

        try:
            if self._context:
                await self._context.close()
        except Exception as e:
            logger.warning(f"Error closing context: {e}")
        finally:
            self._context = None
            self._page = None

        try:
            if self._browser and self._browser.is_connected():
                await self._browser.close()
        except Exception as e:
            logger.warning(f"Error closing browser: {e}")
        finally:
            self._browser = None

        try:
            if self._playwright:
                await self._playwright.stop()
        except Exception as e:
            logger.warning(f"Error stopping playwright: {e}")
        finally:
            self._playwright = None

        logger.debug("Browser session stopped.")

    async def __aenter__(self) -> BrowserSession:
        await self.start()
        return self

    async def __aexit__(self, *args):
        await self.stop()
