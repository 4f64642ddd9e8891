"""Grid contract: a sheet addressable by 1-based (row, column)."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Grid(Protocol):
    """Minimal spreadsheet surface consumed by the pipelines."""

    @property
    def title(self) -> str:
        ...

    @property
    def last_row(self) -> int:
        ...

    @property
    def last_column(self) -> int:
        ...

    def header_row(self) -> list[object]:
        """Return the values of row 1."""

    def read_cell(self, row: int, column: int) -> object:
        """Return one cell value, ``None`` when empty."""

    def read_range(self, row: int, column: int, num_rows: int, num_columns: int) -> list[list[object]]:
        """Return a rectangular block of values as rows of cells."""

    def write_cell(self, row: int, column: int, value: object) -> None:
        """Overwrite one cell value."""
