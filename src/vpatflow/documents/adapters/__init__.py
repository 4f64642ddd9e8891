"""Document adapter implementations and contracts."""

import logging

from .base import DocumentAdapter

logger = logging.getLogger(__name__)

try:
    from .docx_adapter import DocxAdapter
except ImportError:
    DocxAdapter = None
    logger.warning("DOCX support unavailable: install 'python-docx'")

try:
    from .pdf_adapter import PdfAdapter
except ImportError:
    PdfAdapter = None
    logger.warning("PDF support unavailable: install 'pymupdf'")


def build_default_adapters() -> dict[str, DocumentAdapter]:
    """Return the default format adapter map."""
    adapters: dict[str, DocumentAdapter] = {}
    if DocxAdapter is not None:
        adapters["docx"] = DocxAdapter()
    if PdfAdapter is not None:
        adapters["pdf"] = PdfAdapter()
    return adapters


__all__ = [
    "DocumentAdapter",
    "DocxAdapter",
    "PdfAdapter",
    "build_default_adapters",
]
