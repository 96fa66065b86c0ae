"""Exceptions raised by the download pipeline."""

from __future__ import annotations

from typing import Optional


class VoxfetchError(RuntimeError):
    """Base class for fatal pipeline errors."""


class AuthenticationError(VoxfetchError):
    """Login did not complete; carries the last URL the browser was on."""

    def __init__(self, message: str, url: Optional[str] = None):
        self.url = url
        if url:
            message = f"{message} (last URL: {url})"
        super().__init__(message)


class ReaderError(VoxfetchError):
    """The reader iframe or its page container could not be used."""


class RenderTimeoutError(VoxfetchError):
    """Page content never rendered and strict rendering was requested."""


class CaptureError(VoxfetchError):
    """Print-to-PDF failed for a page."""
