"""Shared adapter contract for per-format document loaders."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from vpatflow.documents.models import LoadedDocument


@runtime_checkable
class DocumentAdapter(Protocol):
    """Protocol that every format adapter must implement."""

    def supports(self, path: Path, sniffed_bytes: bytes | None = None) -> bool:
        """Return True when this adapter can open the given file."""

    def load(self, path: Path) -> LoadedDocument:
        """Open a document and expose its tables and full text."""
