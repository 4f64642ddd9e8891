"""Document loading and table extraction interfaces."""

from .extractor import extract_vpat_records
from .loader import DocumentLoader, truncate_document_text
from .models import DocumentTable, ExtractedRecord, LoadedDocument

__all__ = [
    "DocumentLoader",
    "DocumentTable",
    "ExtractedRecord",
    "LoadedDocument",
    "extract_vpat_records",
    "truncate_document_text",
]
