"""Configuration stored in the workbook itself: prompts, thresholds, provider credentials."""

from __future__ import annotations

import logging

from vpatflow.ai.prompts import DEFAULT_QUALITY_PROMPT
from vpatflow.ai.providers import ProviderCredentials, ProviderKind
from vpatflow.errors import ConfigurationError
from vpatflow.grid.base import Grid
from vpatflow.grid.workbook import WorkbookStore

logger = logging.getLogger(__name__)

PROMPTS_SHEET_NAME = "Prompts"
PROMPT_NAME_COLUMN = 1
PROMPT_TEXT_COLUMN = 2
INTERPRET_PROMPT_NAME = "INTERPRET_CONFORMANCE"
CONFIDENCE_LEVEL_NAME = "CONFIDENCE_LEVEL"
QUALITY_PROMPT_NAME = "QUALITY_CHECKLIST_ANALYSIS"

AI_PROVIDER_SHEET_NAME = "AI Provider"
AI_PROVIDER_CELL = (2, 1)  # A2
AI_API_KEY_CELL = (2, 2)  # B2

_MISSING = object()


def _find_setting(grid: Grid, name: str) -> object:
    if grid.last_row < 2:
        return _MISSING
    rows = grid.read_range(2, PROMPT_NAME_COLUMN, grid.last_row - 1, PROMPT_TEXT_COLUMN)
    for row in rows:
        key = row[0]
        if isinstance(key, str) and key.strip() == name:
            return row[1]
    return _MISSING


def read_named_setting(grid: Grid, name: str) -> object:
    """Return the value next to *name* in a (name, value) sheet, or ``None``.

    Row 1 is a header and is skipped. The first matching row wins.
    """
    value = _find_setting(grid, name)
    return None if value is _MISSING else value


def load_interpret_prompt(store: WorkbookStore) -> str:
    grid = store.require_sheet(
        PROMPTS_SHEET_NAME,
        'Please create it with columns: "Prompt Name" and "Prompt Text"',
    )
    value = _find_setting(grid, INTERPRET_PROMPT_NAME)
    if value is _MISSING:
        raise ConfigurationError(f'Prompt "{INTERPRET_PROMPT_NAME}" not found in "{PROMPTS_SHEET_NAME}" sheet.')

    text = str(value).strip() if value is not None else ""
    if not text:
        raise ConfigurationError(f'Prompt "{INTERPRET_PROMPT_NAME}" is empty.')
    return text


def _parse_threshold(value: object) -> int:
    if isinstance(value, bool):
        raise ValueError(value)
    if isinstance(value, int):
        threshold = value
    elif isinstance(value, float):
        if not value.is_integer():
            raise ValueError(value)
        threshold = int(value)
    else:
        threshold = int(str(value).strip())

    if threshold < 0 or threshold > 100:
        raise ValueError(value)
    return threshold


def load_confidence_threshold(store: WorkbookStore, default: int) -> int:
    """Read ``CONFIDENCE_LEVEL``; absent sheet, row or value falls back to *default*."""

    grid = store.sheet(PROMPTS_SHEET_NAME)
    if grid is None:
        logger.info("Prompts sheet not found, using default confidence threshold: %d", default)
        return default

    value = _find_setting(grid, CONFIDENCE_LEVEL_NAME)
    if value is _MISSING or value is None or (isinstance(value, str) and not value.strip()):
        logger.info("Confidence threshold not found, using default: %d", default)
        return default

    try:
        threshold = _parse_threshold(value)
    except ValueError as exc:
        raise ConfigurationError(
            f'Confidence threshold "{value}" must be an integer between 0 and 100.'
        ) from exc

    logger.info("Using confidence threshold: %d", threshold)
    return threshold


def load_quality_prompt(store: WorkbookStore) -> str:
    grid = store.sheet(PROMPTS_SHEET_NAME)
    if grid is None:
        logger.info("Prompts sheet not found, using default quality checklist prompt")
        return DEFAULT_QUALITY_PROMPT

    value = _find_setting(grid, QUALITY_PROMPT_NAME)
    text = str(value).strip() if value is not _MISSING and value is not None else ""
    if not text:
        logger.info("Quality checklist prompt not set, using default")
        return DEFAULT_QUALITY_PROMPT

    logger.info("Using quality checklist prompt from Prompts sheet")
    return text


def load_provider_credentials(store: WorkbookStore) -> ProviderCredentials:
    grid = store.require_sheet(AI_PROVIDER_SHEET_NAME, "Please create it with API key in cell B2.")

    api_key = grid.read_cell(*AI_API_KEY_CELL)
    key_text = str(api_key).strip() if api_key is not None else ""
    if not key_text:
        raise ConfigurationError(
            f'API key not found in cell B2 of "{AI_PROVIDER_SHEET_NAME}" sheet. Please enter your API key.'
        )

    kind = ProviderKind.parse(grid.read_cell(*AI_PROVIDER_CELL))
    return ProviderCredentials(kind=kind, api_key=key_text)
