"""Command-line entry point: download one ScholarVox book as a PDF.

Usage:
    voxfetch [DOCID] [-o OUTPUT] [-d] [--interactive] [--per-page] ...

A missing book ID is prompted for, and so is the output path in that case;
runs given a book ID never prompt for the path. Exit code is 1 when the ID
is missing, the book is not downloadable, or the download fails.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from .catalog.prober import probe_book_status
from .catalog.scraper import CatalogScraper
from .config import INSTITUTION_SLUG, LOG_LEVEL, LOGIN_URL, OUTPUT_DIR, STRICT_RENDER, ensure_dirs
from .constants import REFERENCE_SCALE
from .models.book import BookMeta, BookStatus
from .session_manager.browser import BrowserSession
from .session_manager.manager import BookDownloader
from .tools.credentials import delete_credentials, get_credentials

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(name)s] %(levelname)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(LOG_LEVEL)

STATUS_MESSAGES = {
    BookStatus.REMOVED: "This book has been removed or is no longer available.",
    BookStatus.AVAILABLE_SOON: "This book will be available soon but is not currently accessible.",
    BookStatus.NOT_FOUND: "Book ID not found. Please check the ID and try again.",
}


def set_debug(enabled: bool):
    """Switch every voxfetch logger to DEBUG (or back to the configured level)."""
    level = logging.DEBUG if enabled else LOG_LEVEL
    logger.setLevel(level)
    for name in list(logging.root.manager.loggerDict):
        if name.startswith("voxfetch."):
            logging.getLogger(name).setLevel(level)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="voxfetch",
        description="Download a ScholarVox book as an offline PDF.",
    )
    parser.add_argument("docid", nargs="?", help="Book ID (docid) to download")
    parser.add_argument("-o", "--output", help="Output PDF path (default: output/<docid>.pdf)")
    parser.add_argument("-d", "--debug", action="store_true", help="Verbose logging")
    parser.add_argument("--headful", action="store_true", help="Show the browser window")
    parser.add_argument(
        "--interactive",
        action="store_true",
        help="Log in by hand in the browser window (SSO) instead of with saved credentials",
    )
    parser.add_argument("--login-url", default=LOGIN_URL, help="Login entry URL")
    parser.add_argument("--institution", default=INSTITUTION_SLUG, help="Institution slug for the WAYF login page")
    parser.add_argument("--email", help="Login email")
    parser.add_argument("--password", help="Login password")
    parser.add_argument(
        "--per-page",
        action="store_true",
        help="Print every page in isolation and merge, instead of one print of the whole book",
    )
    parser.add_argument(
        "--scale",
        type=float,
        default=REFERENCE_SCALE,
        help=f"Print scale; {REFERENCE_SCALE} means auto from page width",
    )
    parser.add_argument(
        "--strict-render",
        action=argparse.BooleanOptionalAction,
        default=STRICT_RENDER,
        help="Fail instead of printing pages that never finished rendering",
    )
    parser.add_argument(
        "--title-filename",
        action="store_true",
        help="Name the default output after the book title",
    )
    parser.add_argument("--skip-check", action="store_true", help="Skip the catalog availability check")
    parser.add_argument(
        "--forget-credentials", action="store_true", help="Delete saved credentials and exit"
    )
    return parser


def ask(question: str) -> str:
    return input(question).strip()


async def validate_book(docid: str) -> bool:
    """Check the catalog in a throwaway headless browser."""
    logger.info("Validating book ID...")
    async with BrowserSession(headless=True, persistent=False) as browser:
        status = await probe_book_status(browser.page, docid)
    if status == BookStatus.FOUND:
        logger.info("Book ID is valid.")
        return True
    logger.error(STATUS_MESSAGES.get(status, "Unknown book status."))
    return False


async def fetch_meta(
    docid: str, cookies: Optional[list[dict]] = None, user_agent: str = ""
) -> Optional[BookMeta]:
    """Catalog metadata over HTTP with the browser's session; None on failure."""
    try:
        async with CatalogScraper(cookies=cookies, user_agent=user_agent) as scraper:
            return await scraper.fetch_meta(docid)
    except Exception as e:
        logger.warning(f"Could not fetch catalog metadata: {e}")
        return None


async def run(args: argparse.Namespace) -> int:
    docid = args.docid or ask("Enter book ID: ")
    if not docid:
        logger.error("Book ID is required.")
        return 1

    if not args.skip_check and not await validate_book(docid):
        return 1

    # Only prompt when the run is interactive already
    output = args.output
    if not output and not args.docid:
        output = ask("Output file (empty for default): ")

    credentials = None
    if not args.interactive:
        credentials = get_credentials(args.email, args.password)

    browser = BrowserSession(headless=False if args.headful or args.interactive else None)
    try:
        await browser.start()
        downloader = BookDownloader(
            browser,
            scale=args.scale,
            strict_render=args.strict_render,
            per_page=args.per_page,
        )
        await downloader.login(
            credentials,
            docid=docid,
            login_url=args.login_url,
            institution_slug=args.institution,
        )

        cookies = await browser.extract_session_data()
        meta = await fetch_meta(docid, cookies, browser.user_agent)
        if not output:
            name = meta.safe_title if args.title_filename and meta and meta.safe_title else docid
            output = OUTPUT_DIR / f"{name}.pdf"

        await downloader.download(
            docid, Path(output), expected_pages=meta.total_pages if meta else None
        )
    finally:
        await browser.stop()
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    set_debug(args.debug)
    ensure_dirs()

    if args.forget_credentials:
        if not delete_credentials():
            logger.info("No saved credentials.")
        return 0

    logger.info("voxfetch - ScholarVox book downloader")
    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        logger.error("Interrupted.")
        return 1
    except Exception as e:
        logger.error(f"Error: {e}", exc_info=args.debug)
        return 1


if __name__ == "__main__":
    sys.exit(main())
