"""Download orchestration.

Sequences one book download on a single browser session:

    login -> reader -> scroll every page -> fonts -> unclip -> stabilize
          -> geometry -> print -> write

Everything runs sequentially on one asyncio task; there is no parallel
page rendering.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from tqdm import tqdm

from ..config import INSTITUTION_SLUG, LOG_LEVEL, LOGIN_TIMEOUT_MS, LOGIN_URL, STRICT_RENDER
from ..constants import REFERENCE_SCALE, SCHOLARVOX_SSO_URL
from ..errors import AuthenticationError, CaptureError
from ..models.book import PDFArtifact
from ..models.session import AuthCheck
from ..reader.capture import capture_page, measure_content, print_to_pdf
from ..reader.navigator import ReaderSession, open_reader
from ..reader.pdf import write_pdf
from ..reader.render import RenderStabilizer
from ..tools.credentials import Credentials
from .browser import BrowserSession
from .login import check_auth_now, login_with_credentials, perform_interactive_login

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(name)s] %(levelname)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(LOG_LEVEL)


class BookDownloader:
    """Downloads one book into a PDF using an already started browser session."""

    def __init__(
        self,
        browser: BrowserSession,
        scale: float = REFERENCE_SCALE,
        strict_render: bool = STRICT_RENDER,
        per_page: bool = False,
        show_progress: bool = True,
        font_settle_ms: int = 2000,
    ):
        self.browser = browser
        self.scale = scale
        self.strict_render = strict_render
        self.per_page = per_page
        self.show_progress = show_progress
        self.font_settle_ms = font_settle_ms

    # ── Login ───────────────────────────────────────────────────────────────

    async def login(
        self,
        credentials: Optional[Credentials] = None,
        docid: Optional[str] = None,
        login_url: Optional[str] = LOGIN_URL,
        institution_slug: Optional[str] = INSTITUTION_SLUG,
        timeout_ms: int = LOGIN_TIMEOUT_MS,
    ) -> AuthCheck:
        """Log in with credentials, or wait for a human to finish SSO.

        Raises:
            AuthenticationError: interactive login never produced a session.
        """
        page = self.browser.page
        if credentials is not None:
            logger.info(f"Logging in as {credentials.email}...")
            await login_with_credentials(
                page, credentials.email, credentials.password, login_url or SCHOLARVOX_SSO_URL
            )
            auth = await check_auth_now(page)
            if not auth.authenticated:
                # The reader may still let us through; the auth wall check will tell.
                logger.warning(f"Login finished but no session cookie yet: {auth.note}")
            return auth

        auth = await perform_interactive_login(
            page,
            docid=docid,
            timeout_ms=timeout_ms,
            login_url=login_url,
            institution_slug=institution_slug,
        )
        if not auth.authenticated:
            raise AuthenticationError(f"Login timed out: {auth.note}", url=page.url)
        return auth

    # ── Capture ─────────────────────────────────────────────────────────────

    async def _load_pages(self, reader: ReaderSession):
        logger.info("Loading all pages...")
        with tqdm(
            total=reader.total_pages,
            desc="Loading pages",
            unit="page",
            file=sys.stderr,
            disable=not self.show_progress,
        ) as bar:
            await reader.load_all_pages(progress=lambda _: bar.update(1))
        logger.info("All pages loaded.")

    async def _capture_document(self, reader: ReaderSession) -> list[bytes]:
        """Print the whole scrolled page container in one call."""
        await self._load_pages(reader)

        stabilizer = RenderStabilizer(reader.page, strict=self.strict_render)
        await stabilizer.load_fonts()
        await asyncio.sleep(self.font_settle_ms / 1000)
        await stabilizer.strip_clipping()
        await stabilizer.stabilize()
        await stabilizer.detect_auth_wall()

        geometry = await measure_content(reader.page, self.scale)
        logger.info(f"Generating PDF ({reader.total_pages} pages)...")
        return [await print_to_pdf(reader.page, geometry)]

    async def _capture_per_page(self, reader: ReaderSession) -> list[bytes]:
        """Print each page in isolation, in ascending order."""
        buffers = []
        for number in tqdm(
            range(1, reader.total_pages + 1),
            desc="Capturing pages",
            unit="page",
            file=sys.stderr,
            disable=not self.show_progress,
        ):
            buffer = await capture_page(
                self.browser.context,
                reader.iframe_url,
                page_number=number,
                scale=self.scale,
                strict=self.strict_render,
                font_settle_ms=self.font_settle_ms,
            )
            if buffer is None:
                raise CaptureError(f"Failed to print page {number}.")
            buffers.append(buffer)
        return buffers

    async def download(
        self,
        docid: str,
        output_path: Path | str,
        expected_pages: Optional[int] = None,
    ) -> PDFArtifact:
        """Capture ``docid`` and write it to ``output_path``.

        The session must already be logged in.
        """
        logger.info(f"Book ID: {docid}")
        logger.info(f"Output: {output_path}")

        reader = await open_reader(self.browser.context, self.browser.page, docid)
        try:
            if expected_pages and expected_pages != reader.total_pages:
                logger.warning(
                    f"Catalog lists {expected_pages} pages but the reader has {reader.total_pages}"
                )
            if self.per_page:
                buffers = await self._capture_per_page(reader)
            else:
                buffers = await self._capture_document(reader)
        finally:
            await reader.close()

        artifact = write_pdf(buffers, output_path)
        logger.info(
            f"Download complete! Pages: {reader.total_pages}, "
            f"Size: {artifact.size_mb:.2f} MB, Location: {artifact.path}"
        )
        return artifact
