"""DOCX adapter exposing native Word tables in document order."""

from __future__ import annotations

import logging
from pathlib import Path

import docx
from docx.table import Table
from docx.text.paragraph import Paragraph

from vpatflow.documents.models import DocumentTable, LoadedDocument

logger = logging.getLogger(__name__)

_ZIP_MAGIC = b"PK\x03\x04"


def _cell_text(cell: object) -> str:
    try:
        return str(getattr(cell, "text")).strip()
    except Exception as exc:
        logger.warning("Error reading cell text: %s", exc)
        return ""


def _table_rows(table: Table) -> list[list[str]]:
    rows: list[list[str]] = []
    for row_index, row in enumerate(table.rows):
        try:
            cells = list(row.cells)
        except Exception as exc:
            logger.warning("Error reading table row %d: %s", row_index, exc)
            rows.append([])
            continue
        rows.append([_cell_text(cell) for cell in cells])
    return rows


class DocxAdapter:
    """Read tables and body text from a .docx package with python-docx."""

    def supports(self, path: Path, sniffed_bytes: bytes | None = None) -> bool:
        if path.suffix.lower() == ".docx":
            return True
        if sniffed_bytes is None:
            return False
        # Any OOXML package is a zip; only trust it together with the word/ part name.
        return sniffed_bytes.startswith(_ZIP_MAGIC) and b"word/" in sniffed_bytes

    def load(self, path: Path) -> LoadedDocument:
        document = docx.Document(str(path))

        tables: list[DocumentTable] = []
        text_parts: list[str] = []

        for block in document.iter_inner_content():
            if isinstance(block, Paragraph):
                if block.text.strip():
                    text_parts.append(block.text)
            elif isinstance(block, Table):
                rows = _table_rows(block)
                tables.append(DocumentTable(rows=rows))
                text_parts.extend("\t".join(cells) for cells in rows if any(cells))

        logger.debug("Loaded %d tables from %s", len(tables), path.name)
        return LoadedDocument(
            source_path=str(path),
            format_name="docx",
            tables=tables,
            text="\n".join(text_parts),
        )
