"""Canonical document structures shared by all document adapters."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DocumentTable:
    """One table as ordered rows of ordered cell text."""

    rows: list[list[str]] = field(default_factory=list)

    @property
    def num_rows(self) -> int:
        return len(self.rows)


@dataclass(frozen=True, slots=True)
class ExtractedRecord:
    """Conformance data pulled from one document table row."""

    conformance_level: str
    remarks: str
    original_criteria: str


@dataclass(slots=True)
class LoadedDocument:
    """Document opened for one pipeline run.

    Owns whatever temporary resource the adapter created while loading and
    releases it once, on ``close()`` or when leaving a ``with`` block.
    """

    source_path: str
    format_name: str
    tables: list[DocumentTable] = field(default_factory=list)
    text: str = ""
    release: Callable[[], None] | None = None
    closed: bool = False

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self.release is None:
            return
        try:
            self.release()
            logger.debug("Released temporary resources for %s", self.source_path)
        except Exception:
            logger.warning("Failed to release temporary resources for %s", self.source_path, exc_info=True)

    def __enter__(self) -> "LoadedDocument":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
