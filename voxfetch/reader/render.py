"""Render stabilization for the reader's lazily painted pages.

ScholarVox pages arrive as large images, canvases painted by a decoder, or
divs with a background image. Until the decoder has run, the page is a blank
placeholder of the right size, and printing it yields an empty PDF page.
The stabilizer nudges the lazy loaders, picks the largest content candidate
and only accepts it once it has real pixels.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Optional

from playwright.async_api import Page

from ..config import LOG_LEVEL, RENDER_ATTEMPTS, RENDER_INTERVAL_MS, STRICT_RENDER
from ..constants import AUTH_WALL_MESSAGE, LARGE_CONTENT_AREA, MIN_CONTENT_SIDE_PX
from ..errors import RenderTimeoutError
from ..models.book import RenderResult
from . import scripts
from .pixels import SampledBuffer, has_visible_content, sample_points

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(name)s] %(levelname)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(LOG_LEVEL)

CANDIDATE_SOURCES = {
    "img": "image natural dimensions",
    "canvas": "canvas pixels",
    "div": "div background",
}


def candidate_ready(candidate: dict, pixels: Optional[SampledBuffer] = None) -> bool:
    """Validate a render candidate picked in the page.

    Images must be complete, canvases must have ink at a sampled point,
    background divs only need a non-trivial box.
    """
    kind = candidate.get("kind")
    width = candidate.get("width") or 0
    height = candidate.get("height") or 0
    if width <= MIN_CONTENT_SIDE_PX or height <= MIN_CONTENT_SIDE_PX:
        return False
    if kind == "img":
        return bool(candidate.get("complete"))
    if kind == "canvas":
        return pixels is not None and has_visible_content(pixels)
    return kind == "div"


class RenderStabilizer:
    """Waits for the current page of an iframe-content page to render."""

    def __init__(
        self,
        page: Page,
        attempts: int = RENDER_ATTEMPTS,
        interval_ms: int = RENDER_INTERVAL_MS,
        strict: bool = STRICT_RENDER,
        nudge_px: int = 80,
        min_area: int = LARGE_CONTENT_AREA,
    ):
        self.page = page
        self.attempts = attempts
        self.interval_ms = interval_ms
        self.strict = strict
        self.nudge_px = nudge_px
        self.min_area = min_area

    async def load_fonts(self) -> dict:
        """Force every web font to load.

        The reader maps glyphs through custom WOFF fonts; layout is not
        measurable until they resolve.
        """
        info = await self.page.evaluate(scripts.LOAD_FONTS) or {}
        families = info.get("families", [])
        logger.info(f"Fonts: {info.get('loaded', 0)}/{info.get('total', 0)} loaded")
        if 0 < len(families) < 10:
            logger.debug(f"Font families: {', '.join(families)}")
        elif families:
            logger.debug(f"Font families: {len(families)} custom fonts")
        return info

    async def strip_clipping(self) -> int:
        """Remove zoom, overflow, max-size and clip-path constraints."""
        adjusted = await self.page.evaluate(scripts.STRIP_CLIPPING) or 0
        logger.debug(f"Layout optimized ({adjusted} containers unclipped)")
        return adjusted

    async def detect_auth_wall(self) -> bool:
        """Warn when the reader shows its "please authenticate" notice."""
        found = bool(await self.page.evaluate(scripts.HAS_TEXT, AUTH_WALL_MESSAGE))
        if found:
            logger.warning(
                "Authentication required! Please log in to access the full content. "
                f'Message detected: "{AUTH_WALL_MESSAGE}"'
            )
        return found

    async def _read_canvas(self, candidate: dict) -> Optional[SampledBuffer]:
        width, height = candidate["width"], candidate["height"]
        points = sample_points(width, height)
        values = await self.page.evaluate(scripts.READ_CANVAS_PIXELS, [list(p) for p in points])
        if values is None:
            return None
        return SampledBuffer(width, height, dict(zip(points, values)))

    async def _is_ready(self, candidate: dict) -> bool:
        pixels = None
        if candidate.get("kind") == "canvas":
            pixels = await self._read_canvas(candidate)
        return candidate_ready(candidate, pixels)

    async def stabilize(self) -> RenderResult:
        """Poll until a content candidate validates or the attempts run out.

        A timeout is a soft failure unless ``strict`` is set: the page is
        printed anyway and may come out blank.
        """
        for attempt in range(1, self.attempts + 1):
            await self.page.evaluate(scripts.NUDGE_AND_DECODE, self.nudge_px)
            candidate = await self.page.evaluate(scripts.PICK_CANDIDATE, self.min_area)

            if candidate and await self._is_ready(candidate):
                kind = candidate["kind"]
                result = RenderResult(
                    rendered=True,
                    kind=kind,
                    width=int(candidate["width"]),
                    height=int(candidate["height"]),
                    source=CANDIDATE_SOURCES.get(kind, ""),
                    attempts=attempt,
                )
                logger.info(f"Rendered via {kind} ({result.width}x{result.height})")
                return result

            await asyncio.sleep(self.interval_ms / 1000)

        result = RenderResult(
            rendered=False,
            attempts=self.attempts,
            reason="timed out waiting for rendered page",
        )
        if self.strict:
            raise RenderTimeoutError(
                f"Page content did not render after {self.attempts} attempts."
            )
        logger.warning("Page content did not fully render (lazy loader timeout); PDF may be blank.")
        return result
