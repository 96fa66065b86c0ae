"""Pydantic models for books, rendered pages and PDF output."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from ..constants import CSS_DPI, REFERENCE_SCALE, REFERENCE_WIDTH_PX


class BookStatus(str, Enum):
    """Terminal classification of a catalog probe."""

    FOUND = "FOUND"
    REMOVED = "REMOVED"
    NOT_FOUND = "NOT_FOUND"
    AVAILABLE_SOON = "AVAILABLE_SOON"


class BookMeta(BaseModel):
    """Catalog metadata for a book."""

    docid: str
    title: Optional[str] = None
    safe_title: Optional[str] = None
    total_pages: Optional[int] = None


class RenderResult(BaseModel):
    """Outcome of waiting for a page's visual content to render."""

    rendered: bool = False
    kind: Optional[str] = None  # "img", "canvas", "div"
    width: int = 0
    height: int = 0
    source: str = ""
    attempts: int = 0
    reason: str = ""


def compute_print_scale(width_px: float, scale: float = REFERENCE_SCALE) -> float:
    """Return the print scale for content ``width_px`` wide.

    A 1080px wide page prints well at 0.4, and wider pages need a
    proportionally larger scale. An explicit ``scale`` wins only when it
    differs from the 0.4 default.
    """
    if scale != REFERENCE_SCALE:
        return scale
    return REFERENCE_SCALE * (width_px / REFERENCE_WIDTH_PX)


class PageGeometry(BaseModel):
    """Physical page size and print scale derived from pixel content."""

    width_px: float
    height_px: float
    source: str = ""
    width_in: float
    height_in: float
    auto_scale: float
    scale: float

    @classmethod
    def from_pixels(
        cls,
        width_px: float,
        height_px: float,
        source: str = "",
        scale: float = REFERENCE_SCALE,
    ) -> PageGeometry:
        return cls(
            width_px=width_px,
            height_px=height_px,
            source=source,
            width_in=width_px / CSS_DPI,
            height_in=height_px / CSS_DPI,
            auto_scale=compute_print_scale(width_px),
            scale=compute_print_scale(width_px, scale),
        )


class PDFArtifact(BaseModel):
    """A PDF written to disk."""

    path: Path
    size_bytes: int
    page_count: int = 0
    buffers: int = Field(default=1, description="Number of print buffers merged")

    @property
    def size_mb(self) -> float:
        return self.size_bytes / 1024 / 1024
