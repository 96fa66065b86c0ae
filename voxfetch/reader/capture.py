"""Page geometry and print-to-PDF for the iframe-content page."""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Optional

from playwright.async_api import BrowserContext, Page

from ..config import LOG_LEVEL, READER_VIEWPORT, STRICT_RENDER
from ..constants import (
    MAX_PRINT_SCALE,
    MIN_PRINT_SCALE,
    PAGE_ELEMENT_SELECTORS,
    REFERENCE_SCALE,
    SELECTORS,
)
from ..models.book import PageGeometry
from . import scripts
from .render import RenderStabilizer

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(name)s] %(levelname)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(LOG_LEVEL)


async def measure_content(
    page: Page,
    scale: float = REFERENCE_SCALE,
    selectors: Optional[list[str]] = None,
) -> PageGeometry:
    """Detect the page's pixel size and derive its physical geometry.

    Largest image wins, then a page-like element, then the viewport (which
    will probably distort the aspect ratio).
    """
    dims = await page.evaluate(scripts.MEASURE_CONTENT, selectors or PAGE_ELEMENT_SELECTORS)
    geometry = PageGeometry.from_pixels(dims["width"], dims["height"], dims["source"], scale)

    metrics = await page.evaluate(scripts.BODY_METRICS)
    logger.debug(f"Viewport: {metrics['viewportWidth']}x{metrics['viewportHeight']}")
    logger.debug(f"Body: {metrics['scrollWidth']}x{metrics['scrollHeight']}")
    logger.info(
        f"Page size: {geometry.width_px:g}x{geometry.height_px:g}px (from {geometry.source}), "
        f'PDF size: {geometry.width_in:.2f}" x {geometry.height_in:.2f}", '
        f"scale: {geometry.scale:.3f} (auto {geometry.auto_scale:.3f})"
    )
    return geometry


def pdf_options(geometry: PageGeometry) -> dict:
    """Keyword arguments for ``page.pdf`` matching the content's own page size.

    Chromium rejects scales outside [0.1, 2], so the value is clamped here.
    """
    scale = min(MAX_PRINT_SCALE, max(MIN_PRINT_SCALE, geometry.scale))
    if scale != geometry.scale:
        logger.warning(f"Scale {geometry.scale:.3f} out of range, clamped to {scale:.3f}")
    return {
        "width": f"{geometry.width_in}in",
        "height": f"{geometry.height_in}in",
        "print_background": True,
        "margin": {"top": "0mm", "right": "0mm", "bottom": "0mm", "left": "0mm"},
        "scale": scale,
        "prefer_css_page_size": False,
    }


async def print_to_pdf(page: Page, geometry: PageGeometry) -> bytes:
    return await page.pdf(**pdf_options(geometry))


async def isolate_page(page: Page, page_number: int, settle_ms: int = 3000, hide_settle_ms: int = 500):
    """Leave only ``page_number`` (1-indexed) visible, sidebar hidden."""
    index = page_number - 1
    container = SELECTORS["page_container"]
    logger.info(f"Isolating page {page_number}...")
    await page.evaluate(scripts.SCROLL_TO_PAGE, [container, index])
    await asyncio.sleep(settle_ms / 1000)
    await page.evaluate(scripts.ISOLATE_PAGE, [container, SELECTORS["sidebar"], index])
    await asyncio.sleep(hide_settle_ms / 1000)


async def capture_page(
    context: BrowserContext,
    iframe_url: str,
    page_number: Optional[int] = None,
    scale: float = REFERENCE_SCALE,
    strict: bool = STRICT_RENDER,
    font_settle_ms: int = 2000,
) -> Optional[bytes]:
    """Print the iframe content to one PDF buffer in a dedicated page.

    With ``page_number`` only that page is printed. The dedicated page is
    always closed. Any failure is logged and None is returned.
    """
    try:
        logger.info(f"Printing iframe content: {iframe_url[:80]}...")
        page = await context.new_page()
        try:
            await page.set_viewport_size(READER_VIEWPORT)
            await page.goto(iframe_url, wait_until="networkidle", timeout=15000)

            if page_number is not None:
                await isolate_page(page, page_number)

            stabilizer = RenderStabilizer(page, strict=strict)
            await stabilizer.load_fonts()
            await asyncio.sleep(font_settle_ms / 1000)
            await stabilizer.stabilize()
            await stabilizer.detect_auth_wall()
            await stabilizer.strip_clipping()

            geometry = await measure_content(page, scale)
            buffer = await print_to_pdf(page, geometry)
            logger.info(f"Generated PDF ({len(buffer)} bytes)")
            return buffer
        finally:
            await page.close()
    except Exception as e:
        logger.error(f"Print to PDF failed: {e}")
        return None
