"""Pixel sampling used to tell a painted canvas from a blank placeholder.

Everything here is pure so it can be tested without a browser. A buffer is
anything with ``width``, ``height`` and ``pixel(x, y) -> (r, g, b, a)``.
"""

from __future__ import annotations

import math
from typing import Optional, Protocol, Sequence

from ..constants import MIN_CONTENT_SIDE_PX

RGBA = Sequence[int]

SAMPLE_FRACTIONS = (0.25, 0.5, 0.75)
NEAR_WHITE = 250


class PixelBuffer(Protocol):
    width: int
    height: int

    def pixel(self, x: int, y: int) -> Optional[RGBA]: ...


class SampledBuffer:
    """Only the sampled pixels of a canvas, as read back from the browser."""

    def __init__(self, width: int, height: int, samples: dict[tuple[int, int], Optional[RGBA]]):
        self.width = width
        self.height = height
        self.samples = samples

    def pixel(self, x: int, y: int) -> Optional[RGBA]:
        return self.samples.get((x, y))


def sample_points(width: int, height: int) -> list[tuple[int, int]]:
    """Quartile, center and three-quartile points, clamped inside the buffer."""
    return [
        (min(width - 1, math.floor(width * f)), min(height - 1, math.floor(height * f)))
        for f in SAMPLE_FRACTIONS
    ]


def is_visible_pixel(rgba: Optional[RGBA], threshold: int = NEAR_WHITE) -> bool:
    """True unless the pixel is transparent or near-white."""
    if rgba is None or len(rgba) < 4:
        return False
    r, g, b, a = rgba[:4]
    return a > 0 and (r < threshold or g < threshold or b < threshold)


def has_visible_content(buffer: PixelBuffer, min_side: int = MIN_CONTENT_SIDE_PX) -> bool:
    """Whether any sampled point of ``buffer`` carries ink."""
    if buffer.width < min_side or buffer.height < min_side:
        return False
    return any(
        is_visible_pixel(buffer.pixel(x, y))
        for x, y in sample_points(buffer.width, buffer.height)
    )
