"""openpyxl-backed workbook access for the host spreadsheet."""

from __future__ import annotations

import logging
from pathlib import Path

import openpyxl
from openpyxl.workbook.workbook import Workbook
from openpyxl.worksheet.worksheet import Worksheet

from vpatflow.errors import ConfigurationError

logger = logging.getLogger(__name__)


class WorksheetGrid:
    """Grid implementation over one openpyxl worksheet."""

    def __init__(self, worksheet: Worksheet) -> None:
        self._worksheet = worksheet

    @property
    def title(self) -> str:
        return self._worksheet.title

    @property
    def last_row(self) -> int:
        return self._worksheet.max_row

    @property
    def last_column(self) -> int:
        return self._worksheet.max_column

    def header_row(self) -> list[object]:
        return self.read_range(1, 1, 1, self.last_column)[0]

    def read_cell(self, row: int, column: int) -> object:
        _check_position(row, column)
        return self._worksheet.cell(row=row, column=column).value

    def read_range(self, row: int, column: int, num_rows: int, num_columns: int) -> list[list[object]]:
        _check_position(row, column)
        if num_rows < 1 or num_columns < 1:
            raise ValueError("num_rows and num_columns must be >= 1")

        return [
            list(values)
            for values in self._worksheet.iter_rows(
                min_row=row,
                max_row=row + num_rows - 1,
                min_col=column,
                max_col=column + num_columns - 1,
                values_only=True,
            )
        ]

    def write_cell(self, row: int, column: int, value: object) -> None:
        _check_position(row, column)
        self._worksheet.cell(row=row, column=column, value=value)


def _check_position(row: int, column: int) -> None:
    if row < 1 or column < 1:
        raise ValueError(f"Grid positions are 1-based, got row={row} column={column}")


class WorkbookStore:
    """Open workbook shared by every pipeline in one invocation."""

    def __init__(self, workbook: Workbook, *, path: Path | None = None) -> None:
        self._workbook = workbook
        self._path = path

    @classmethod
    def open(cls, path: str | Path) -> "WorkbookStore":
        source = Path(path)
        if not source.is_file():
            raise ConfigurationError(f"Workbook not found: {source}")
        try:
            workbook = openpyxl.load_workbook(source)
        except Exception as exc:
            raise ConfigurationError(f"Failed to open workbook {source}: {exc}") from exc
        return cls(workbook, path=source)

    @property
    def path(self) -> Path | None:
        return self._path

    @property
    def sheet_names(self) -> list[str]:
        return list(self._workbook.sheetnames)

    def has_sheet(self, name: str) -> bool:
        return name in self._workbook.sheetnames

    def sheet(self, name: str) -> WorksheetGrid | None:
        """Return the named sheet, or ``None`` when the workbook has no such sheet."""

        if not self.has_sheet(name):
            return None
        return WorksheetGrid(self._workbook[name])

    def require_sheet(self, name: str, hint: str = "") -> WorksheetGrid:
        grid = self.sheet(name)
        if grid is None:
            detail = f" {hint}" if hint else ""
            raise ConfigurationError(f'Sheet "{name}" not found.{detail}')
        return grid

    def target_sheet(self, name: str | None = None) -> WorksheetGrid:
        """Return the named sheet, or the active sheet when *name* is omitted."""

        if name:
            return self.require_sheet(name)
        return WorksheetGrid(self._workbook.active)

    def save(self, path: str | Path | None = None) -> Path:
        destination = Path(path) if path is not None else self._path
        if destination is None:
            raise ValueError("No destination path for workbook save")
        self._workbook.save(destination)
        logger.info("Saved workbook to %s", destination)
        return destination
