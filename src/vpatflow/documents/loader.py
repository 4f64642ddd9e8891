"""Routing entrypoint that opens a source document through the right adapter."""

from __future__ import annotations

import logging
from pathlib import Path

from vpatflow.documents.adapters import build_default_adapters
from vpatflow.documents.adapters.base import DocumentAdapter
from vpatflow.documents.models import LoadedDocument
from vpatflow.errors import SourceLoadError

logger = logging.getLogger(__name__)

TRUNCATION_MARKER = "\n\n[Document truncated for analysis...]"


def truncate_document_text(text: str, max_length: int) -> str:
    """Cut *text* to *max_length* characters and append the truncation marker."""

    if max_length < 1:
        raise ValueError("max_length must be >= 1")
    if len(text) <= max_length:
        return text
    logger.info("Document truncated from %d to %d characters", len(text), max_length)
    return text[:max_length] + TRUNCATION_MARKER


class DocumentLoader:
    """Resolve the right adapter and return an opened document."""

    def __init__(self, sniff_bytes: int = 4096) -> None:
        self._sniff_bytes = sniff_bytes
        self._adapter_map: dict[str, DocumentAdapter] = {}

    @classmethod
    def with_default_adapters(cls) -> "DocumentLoader":
        loader = cls()
        for name, adapter in build_default_adapters().items():
            loader.register_adapter(name, adapter)
        return loader

    @property
    def adapter_map(self) -> dict[str, DocumentAdapter]:
        """Registered adapters keyed by adapter name."""

        return dict(self._adapter_map)

    def register_adapter(self, name: str, adapter: DocumentAdapter) -> None:
        """Register an adapter implementation by key."""

        if not name:
            raise ValueError("Adapter name cannot be empty")
        self._adapter_map[name] = adapter

    def open(self, path: str | Path, *, require_tables: bool = True) -> LoadedDocument:
        """Open *path*; the caller must close the returned document."""

        source = Path(path)
        sniffed = self._read_head(source)

        for name, adapter in self._adapter_map.items():
            if not adapter.supports(source, sniffed):
                continue

            logger.info("Loading %s with %s adapter", source.name, name)
            try:
                document = adapter.load(source)
            except Exception as exc:
                raise SourceLoadError(source, f"Failed to load document: {exc}") from exc

            if not isinstance(document, LoadedDocument):
                raise SourceLoadError(source, "Adapter returned non-canonical output")

            if require_tables and not document.tables:
                document.close()
                raise SourceLoadError(source, "No tables found in document. Please check document structure.")
            return document

        raise SourceLoadError(
            source,
            f"Unsupported file type: {source.suffix or 'unknown'}. Please use DOCX or PDF format.",
        )

    def _read_head(self, path: Path) -> bytes:
        try:
            with path.open("rb") as handle:
                return handle.read(self._sniff_bytes)
        except OSError as exc:
            raise SourceLoadError(path, f"Failed to read source file: {exc}") from exc
