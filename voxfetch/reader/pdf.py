"""Assemble print buffers into the final PDF file."""

from __future__ import annotations

import io
import logging
import sys
from pathlib import Path
from typing import Sequence

from pypdf import PdfReader, PdfWriter

from ..config import LOG_LEVEL
from ..errors import CaptureError
from ..models.book import PDFArtifact

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(name)s] %(levelname)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(LOG_LEVEL)


def count_pdf_pages(data: bytes) -> int:
    return len(PdfReader(io.BytesIO(data)).pages)


def merge_pdf_buffers(buffers: Sequence[bytes]) -> bytes:
    """Concatenate PDF buffers in order."""
    writer = PdfWriter()
    for data in buffers:
        reader = PdfReader(io.BytesIO(data))
        for page in reader.pages:
            writer.add_page(page)
    out = io.BytesIO()
    writer.write(out)
    return out.getvalue()


def write_pdf(buffers: Sequence[bytes], path: Path | str) -> PDFArtifact:
    """Write the buffers to ``path`` as one PDF, creating parent dirs first."""
    if not buffers:
        raise CaptureError("No PDF buffers to write.")

    data = buffers[0] if len(buffers) == 1 else merge_pdf_buffers(buffers)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)

    artifact = PDFArtifact(
        path=path,
        size_bytes=path.stat().st_size,
        page_count=count_pdf_pages(data),
        buffers=len(buffers),
    )
    logger.info(f"Wrote {artifact.page_count} pages ({artifact.size_mb:.2f} MB) to {path}")
    return artifact
