"""Download ScholarVox books as offline PDFs."""

__version__ = "0.1.0"
