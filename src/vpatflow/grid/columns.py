"""Header names the pipelines look for, and header-to-column resolution."""

from __future__ import annotations

from typing import Iterable, Mapping

from vpatflow.errors import ConfigurationError
from vpatflow.grid.base import Grid

DEFAULT_START_ROW = 2

# Main VPAT sheet
CRITERIA = "Criteria"
CONFORMANCE_LEVEL = "Conformance Level (original)"
REMARKS = "Remarks and Explanations (original)"
CONFORMANCE_INTERPRETED = "Conformance Level (interpreted)"
WEB_INTERPRETED = "Web (interpreted)"
ELECTRONIC_DOCS_INTERPRETED = "Electronic Docs (interpreted)"
SOFTWARE_INTERPRETED = "Software (interpreted)"
CLOSED_INTERPRETED = "Closed (interpreted)"
AUTHORING_INTERPRETED = "Authoring Tool (interpreted)"
AI_COMMENT = "AI Comment"
NEEDS_REVIEW = "Needs Review"

EXTRACTION_COLUMNS = (CRITERIA, CONFORMANCE_LEVEL, REMARKS)

# AI reply field -> interpreted column
INTERPRETED_FIELD_COLUMNS: Mapping[str, str] = {
    "conformanceLevel": CONFORMANCE_INTERPRETED,
    "web": WEB_INTERPRETED,
    "electronicDocs": ELECTRONIC_DOCS_INTERPRETED,
    "software": SOFTWARE_INTERPRETED,
    "closed": CLOSED_INTERPRETED,
    "authoring": AUTHORING_INTERPRETED,
}

INTERPRETATION_COLUMNS = (
    CRITERIA,
    CONFORMANCE_LEVEL,
    REMARKS,
    *INTERPRETED_FIELD_COLUMNS.values(),
    AI_COMMENT,
    NEEDS_REVIEW,
)

# Quality Requirements sheet
QUALITY_SHEET_NAME = "Quality Requirements"
REQ_ID = "Req ID"
QUESTION = "Simplified Questions"
AI_GUIDELINES = "AI Guidelines"
RESPONSE_TYPE = "Response Type"
QUALITY_CRITERIA = "Criteria"
CRITERIA_NAME = "Criteria Name"
IMPACT = "Impact"
REQUIREMENT_TYPE = "Type"
AI_RESPONSE = "AI Response"
ORIGINAL_FROM_VPAT = "Original from VPAT"
AI_EXPLANATION = "AI Explanation"

QUALITY_REQUIRED_COLUMNS = (REQ_ID, QUESTION, AI_RESPONSE, ORIGINAL_FROM_VPAT, AI_EXPLANATION)
QUALITY_OPTIONAL_COLUMNS = (AI_GUIDELINES, RESPONSE_TYPE, QUALITY_CRITERIA, CRITERIA_NAME, IMPACT, REQUIREMENT_TYPE)


def resolve_columns(
    grid: Grid,
    required: Iterable[str],
    optional: Iterable[str] = (),
) -> dict[str, int]:
    """Map header names to 1-based column numbers using exact, case-sensitive matches.

    The first occurrence of a header wins. A missing required header raises
    ``ConfigurationError``; missing optional headers are simply left out.
    """
    positions: dict[str, int] = {}
    for offset, value in enumerate(grid.header_row()):
        if isinstance(value, str) and value not in positions:
            positions[value] = offset + 1

    columns: dict[str, int] = {}
    for name in required:
        if name not in positions:
            raise ConfigurationError(f'Required column "{name}" not found in sheet headers.')
        columns[name] = positions[name]

    for name in optional:
        if name in positions:
            columns[name] = positions[name]

    return columns
