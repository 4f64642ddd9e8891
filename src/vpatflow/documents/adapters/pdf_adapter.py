"""PDF adapter detecting tables page by page with pymupdf."""

from __future__ import annotations

import logging
from pathlib import Path

import pymupdf

from vpatflow.documents.models import DocumentTable, LoadedDocument

logger = logging.getLogger(__name__)

_PDF_MAGIC = b"%PDF-"


def _clean_cell(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip()


class PdfAdapter:
    """Expose detected PDF tables and page text.

    The open ``pymupdf.Document`` stays alive until the loaded document is
    closed. A table split across pages yields one table per page fragment.
    """

    def supports(self, path: Path, sniffed_bytes: bytes | None = None) -> bool:
        if path.suffix.lower() == ".pdf":
            return True
        if sniffed_bytes is None:
            return False
        return sniffed_bytes.startswith(_PDF_MAGIC)

    def load(self, path: Path) -> LoadedDocument:
        doc = pymupdf.open(path)
        try:
            tables: list[DocumentTable] = []
            page_texts: list[str] = []

            for page_index, page in enumerate(doc, start=1):
                page_texts.append(page.get_text())
                try:
                    found = page.find_tables()
                except Exception as exc:
                    logger.warning("Table detection failed on page %d: %s", page_index, exc)
                    continue
                for table in found.tables:
                    rows = [[_clean_cell(cell) for cell in row] for row in table.extract()]
                    tables.append(DocumentTable(rows=rows))
        except Exception:
            doc.close()
            raise

        logger.debug("Loaded %d table fragments from %s", len(tables), path.name)
        return LoadedDocument(
            source_path=str(path),
            format_name="pdf",
            tables=tables,
            text="\n".join(text.strip() for text in page_texts if text.strip()),
            release=doc.close,
        )
