"""Parse ScholarVox catalog pages to extract book metadata.

Title lookup walks a priority list of selectors; the page count comes from
a "pages: N" label in the detail columns, falling back to the body text.
"""

from __future__ import annotations

import logging
import re
import sys
from typing import Optional

from bs4 import BeautifulSoup

from ..config import LOG_LEVEL
from ..constants import META_TITLE_SELECTORS, SELECTORS

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(name)s] %(levelname)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(LOG_LEVEL)

PAGES_LABEL_RE = re.compile(r"\bpages?\b\s*[:\-–]\s*(\d{1,5})\b", re.I)
PAGES_TEXT_RE = re.compile(r"\b(?:nombre\s+de\s+pages|pages?)\b\s*[:\-–]\s*(\d{1,5})\b", re.I)


def _clean_text(text: str | None) -> str:
    """Strip whitespace and normalize text."""
    if not text:
        return ""
    return re.sub(r"\s+", " ", text).strip()


def sanitize_title(title: str, max_length: int = 100) -> str:
    """Turn a book title into something safe to use as a file name."""
    name = re.sub(r'[<>:"/\\|?*]', "", title)
    name = re.sub(r"\s+", "-", name)
    name = re.sub(r"-+", "-", name)
    name = name.strip("-")
    return name[:max_length]


def parse_title(html: str, selectors: Optional[list[str]] = None) -> Optional[str]:
    soup = BeautifulSoup(html, "html.parser")
    for selector in selectors or META_TITLE_SELECTORS:
        el = soup.select_one(selector)
        text = _clean_text(el.get_text()) if el else ""
        if text:
            return text
    return None


def parse_total_pages(html: str) -> Optional[int]:
    """Page count advertised on the catalog page, or None."""
    soup = BeautifulSoup(html, "html.parser")

    for p in soup.select(SELECTORS["meta_pages"]):
        match = PAGES_LABEL_RE.search(_clean_text(p.get_text()))
        if match and int(match.group(1)) > 0:
            return int(match.group(1))

    # Bounded by a "pages" label so years and ISBN digits don't match
    body = soup.body or soup
    match = PAGES_TEXT_RE.search(_clean_text(body.get_text(" ")))
    if match and int(match.group(1)) > 0:
        return int(match.group(1))

    logger.debug("No page count found on catalog page")
    return None
