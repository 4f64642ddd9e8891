"""Criteria-key parsing that bridges document headings to workbook rows."""

from __future__ import annotations

import logging
import re
from typing import Iterable

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")

# Optional non-digit prefix, then a dotted numeric key such as "1.1.1" or "4.1".
_CRITERIA_KEY_RE = re.compile(r"^[^\d]*([0-9]+(?:\.[0-9]+)+)")


def normalize_whitespace(text: str) -> str:
    """Collapse newlines and repeated whitespace, then trim boundaries."""

    return _WHITESPACE_RE.sub(" ", text).strip()


def normalize_criteria_key(text: object) -> str | None:
    """Return the dotted-numeric criteria key found at the start of *text*.

    ``"1.1.1 Non-text Content"`` gives ``"1.1.1"`` and ``"Section 4.1.2 foo"``
    gives ``"4.1.2"``. Empty input or text without a dotted key gives ``None``.
    The check is purely syntactic.
    """
    if text is None:
        return None

    cleaned = normalize_whitespace(str(text))
    if not cleaned:
        return None

    match = _CRITERIA_KEY_RE.match(cleaned)
    return match.group(1) if match else None


def build_criteria_index(values: Iterable[object], *, start_row: int) -> dict[str, int]:
    """Map criteria keys to 1-based row numbers, reading cells top to bottom.

    Cells without a key are skipped. For duplicate keys the last row wins.
    """
    index: dict[str, int] = {}

    for offset, value in enumerate(values):
        row_number = start_row + offset
        key = normalize_criteria_key(value)
        logger.debug("Sheet row %d: %r -> normalized key %r", row_number, value, key)
        if key is None:
            continue
        if key in index:
            logger.debug("Criteria key %s repeated at row %d (was row %d)", key, row_number, index[key])
        index[key] = row_number

    logger.debug("Criteria index complete: %d entries", len(index))
    return index
