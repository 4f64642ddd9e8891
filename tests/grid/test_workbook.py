from __future__ import annotations

from pathlib import Path

import openpyxl
import pytest

from vpatflow.errors import ConfigurationError
from vpatflow.grid.base import Grid
from vpatflow.grid.columns import EXTRACTION_COLUMNS, resolve_columns
from vpatflow.grid.workbook import WorkbookStore


def _build_workbook(path: Path) -> None:
    workbook = openpyxl.Workbook()
    sheet = workbook.active
    sheet.title = "VPAT"
    sheet.append(["Criteria", "Notes", "Conformance Level (original)", "Remarks and Explanations (original)", "Criteria"])
    sheet.append(["1.1.1 Non-text Content", None, None, None, "duplicate header"])
    sheet.append(["1.4.3 Contrast", None, None, None, None])
    workbook.create_sheet("Other")
    workbook.save(path)


def test_store_opens_active_and_named_sheets(tmp_path: Path) -> None:
    path = tmp_path / "vpat.xlsx"
    _build_workbook(path)

    store = WorkbookStore.open(path)

    assert store.sheet_names == ["VPAT", "Other"]
    assert store.target_sheet().title == "VPAT"
    assert store.target_sheet("Other").title == "Other"
    assert store.sheet("Missing") is None
    assert isinstance(store.target_sheet(), Grid)


def test_require_sheet_reports_missing_sheet(tmp_path: Path) -> None:
    path = tmp_path / "vpat.xlsx"
    _build_workbook(path)

    with pytest.raises(ConfigurationError, match='Sheet "Prompts" not found'):
        WorkbookStore.open(path).require_sheet("Prompts")


def test_open_missing_workbook_is_configuration_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="Workbook not found"):
        WorkbookStore.open(tmp_path / "missing.xlsx")


def test_grid_reads_writes_and_saves(tmp_path: Path) -> None:
    path = tmp_path / "vpat.xlsx"
    _build_workbook(path)
    store = WorkbookStore.open(path)
    grid = store.target_sheet()

    assert grid.last_row == 3
    assert grid.read_cell(2, 1) == "1.1.1 Non-text Content"
    assert grid.read_range(2, 1, 2, 1) == [["1.1.1 Non-text Content"], ["1.4.3 Contrast"]]

    grid.write_cell(2, 3, "Supports")
    output = tmp_path / "out.xlsx"
    assert store.save(output) == output

    reopened = openpyxl.load_workbook(output)
    assert reopened["VPAT"].cell(row=2, column=3).value == "Supports"


def test_grid_positions_are_one_based(tmp_path: Path) -> None:
    path = tmp_path / "vpat.xlsx"
    _build_workbook(path)
    grid = WorkbookStore.open(path).target_sheet()

    with pytest.raises(ValueError, match="1-based"):
        grid.read_cell(0, 1)


def test_resolve_columns_uses_first_exact_header(tmp_path: Path) -> None:
    path = tmp_path / "vpat.xlsx"
    _build_workbook(path)
    grid = WorkbookStore.open(path).target_sheet()

    columns = resolve_columns(grid, EXTRACTION_COLUMNS, optional=["Notes", "Absent"])

    assert columns == {
        "Criteria": 1,
        "Conformance Level (original)": 3,
        "Remarks and Explanations (original)": 4,
        "Notes": 2,
    }


def test_resolve_columns_is_case_sensitive(tmp_path: Path) -> None:
    path = tmp_path / "vpat.xlsx"
    _build_workbook(path)
    grid = WorkbookStore.open(path).target_sheet()

    with pytest.raises(ConfigurationError, match='Required column "notes" not found in sheet headers.'):
        resolve_columns(grid, ["notes"])
