"""Spreadsheet access: sheets, header resolution and workbook-stored settings."""

from .base import Grid
from .columns import DEFAULT_START_ROW, resolve_columns
from .settings_sheets import (
    load_confidence_threshold,
    load_interpret_prompt,
    load_provider_credentials,
    load_quality_prompt,
    read_named_setting,
)
from .workbook import WorkbookStore, WorksheetGrid

__all__ = [
    "DEFAULT_START_ROW",
    "Grid",
    "WorkbookStore",
    "WorksheetGrid",
    "load_confidence_threshold",
    "load_interpret_prompt",
    "load_provider_credentials",
    "load_quality_prompt",
    "read_named_setting",
    "resolve_columns",
]
