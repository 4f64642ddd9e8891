"""Interpretation pipeline: AI reading of extracted conformance rows."""

from __future__ import annotations

import logging
import re
import time
from typing import Any, Callable, Mapping

from vpatflow.ai.batching import run_batches
from vpatflow.ai.prompts import RowInterpretationItem, build_interpretation_message
from vpatflow.ai.providers import ChatProvider, ProviderCredentials, build_provider
from vpatflow.ai.reconcile import align_responses, parse_ai_json
from vpatflow.config import ProcessorSettings
from vpatflow.grid.base import Grid
from vpatflow.grid.columns import (
    AI_COMMENT,
    CONFORMANCE_LEVEL,
    CRITERIA,
    INTERPRETATION_COLUMNS,
    INTERPRETED_FIELD_COLUMNS,
    NEEDS_REVIEW,
    REMARKS,
    resolve_columns,
)
from vpatflow.grid.settings_sheets import (
    load_confidence_threshold,
    load_interpret_prompt,
    load_provider_credentials,
)
from vpatflow.grid.workbook import WorkbookStore
from vpatflow.normalize.conformance import coerce_conformance_value
from vpatflow.pipelines.results import PipelineResult, PipelineStage, RowRange, read_column

logger = logging.getLogger(__name__)

PIPELINE_NAME = "interpretation"
LOW_CONFIDENCE_COMMENT = "Low confidence - please review"

_LEADING_INT_RE = re.compile(r"^\s*([-+]?\d+)")


def parse_confidence(value: object) -> int:
    """Read a confidence score the way a lenient integer parse would; junk gives 0."""

    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value == value else 0
    match = _LEADING_INT_RE.match(str(value))
    return int(match.group(1)) if match else 0


def _cell_text(value: object) -> str:
    return str(value).strip() if value is not None else ""


def collect_interpretation_items(
    grid: Grid,
    columns: Mapping[str, int],
    start_row: int,
    end_row: int,
) -> list[RowInterpretationItem]:
    """Rows in range whose original conformance cell is non-blank, in sheet order."""

    conformance = read_column(grid, columns[CONFORMANCE_LEVEL], start_row, end_row)
    criteria = read_column(grid, columns[CRITERIA], start_row, end_row)
    remarks = read_column(grid, columns[REMARKS], start_row, end_row)

    items: list[RowInterpretationItem] = []
    for offset, level in enumerate(conformance):
        level_text = _cell_text(level)
        if not level_text:
            continue
        items.append(
            RowInterpretationItem(
                row_number=start_row + offset,
                criteria=_cell_text(criteria[offset]),
                conformance_level=level_text,
                remarks=_cell_text(remarks[offset]),
            )
        )
    return items


def write_interpretation(
    grid: Grid,
    columns: Mapping[str, int],
    row_number: int,
    interpretation: Mapping[str, Any],
    confidence_threshold: int,
) -> bool:
    """Write one aligned AI interpretation; returns whether the row needs review."""

    for field_name, column_name in INTERPRETED_FIELD_COLUMNS.items():
        raw_value = interpretation.get(field_name)
        if raw_value:
            logger.debug("Row %d, %s: raw AI value = %r", row_number, field_name, raw_value)
        value = coerce_conformance_value(raw_value, context=f"row {row_number} {field_name}")
        grid.write_cell(row_number, columns[column_name], value)

    confidence = parse_confidence(interpretation.get("confidence"))
    needs_review = confidence < confidence_threshold
    logger.debug(
        "Row %d: confidence=%d threshold=%d needs_review=%s",
        row_number,
        confidence,
        confidence_threshold,
        needs_review,
    )

    comment = (_cell_text(interpretation.get("comment")) or LOW_CONFIDENCE_COMMENT) if needs_review else ""
    grid.write_cell(row_number, columns[AI_COMMENT], comment)
    grid.write_cell(row_number, columns[NEEDS_REVIEW], needs_review)
    return needs_review


def _mark_batch_failed(
    grid: Grid,
    columns: Mapping[str, int],
    batch: list[RowInterpretationItem],
    exc: Exception,
) -> list[bool]:
    for item in batch:
        try:
            grid.write_cell(item.row_number, columns[AI_COMMENT], f"Error: {exc}")
            grid.write_cell(item.row_number, columns[NEEDS_REVIEW], True)
        except Exception as write_exc:
            logger.warning("Error marking row %d as failed: %s", item.row_number, write_exc)
    return [False] * len(batch)


def run_interpretation(
    store: WorkbookStore,
    *,
    sheet_name: str | None = None,
    row_range: RowRange | None = None,
    settings: ProcessorSettings | None = None,
    provider_factory: Callable[[ProviderCredentials], ChatProvider] | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> PipelineResult:
    """Interpret every extracted row in range with the configured AI provider.

    The prompt, confidence threshold and provider credentials are all read
    from the workbook before the first remote call. Never raises.
    """
    active_settings = settings or ProcessorSettings()
    stage = PipelineStage.VALIDATING_SCHEMA

    try:
        grid = store.target_sheet(sheet_name)
        columns = resolve_columns(grid, INTERPRETATION_COLUMNS)
        system_prompt = load_interpret_prompt(store)
        threshold = load_confidence_threshold(store, active_settings.default_confidence_threshold)
        credentials = load_provider_credentials(store)

        stage = PipelineStage.RESOLVING_INPUT_RANGE
        start_row, end_row = (row_range or RowRange()).resolve(grid)
        logger.info("Analyzing %d rows", max(end_row - start_row + 1, 0))
        items = collect_interpretation_items(grid, columns, start_row, end_row)
        if not items:
            message = "No rows with conformance data found. Run extraction first."
            return PipelineResult(pipeline=PIPELINE_NAME, success=False, stage=stage, message=message, error=message)

        if provider_factory is None:
            provider = build_provider(credentials, active_settings, sleep=sleep)
        else:
            provider = provider_factory(credentials)

        stage = PipelineStage.BATCHING
        logger.info("Interpreting %d rows with AI", len(items))

        def process(batch: list[RowInterpretationItem], batch_number: int, total_batches: int) -> list[bool]:
            reply = provider.complete(system_prompt, build_interpretation_message(batch))
            aligned = align_responses(
                batch,
                parse_ai_json(reply),
                request_key=lambda item: item.row_number,
                response_key="rowNumber",
            )

            outcomes: list[bool] = []
            for item, interpretation in zip(batch, aligned):
                try:
                    write_interpretation(grid, columns, item.row_number, interpretation, threshold)
                    outcomes.append(True)
                except Exception as exc:
                    logger.warning("Error writing row %d: %s", item.row_number, exc)
                    outcomes.append(False)
            return outcomes

        run = run_batches(
            items,
            active_settings.batch_size,
            process=process,
            on_error=lambda batch, exc: _mark_batch_failed(grid, columns, batch, exc),
            delay_seconds=active_settings.api_delay_seconds,
            sleep=sleep,
        )

        succeeded = sum(1 for outcome in run.results if outcome)
        failed = len(run.results) - succeeded
        message = f"Interpreted {succeeded} of {len(items)} rows"
        logger.info(message)
        return PipelineResult(
            pipeline=PIPELINE_NAME,
            success=True,
            stage=PipelineStage.IDLE,
            succeeded=succeeded,
            failed=failed,
            total=len(items),
            message=message,
        )
    except Exception as exc:
        logger.exception("Interpretation failed during %s", stage.value)
        return PipelineResult(
            pipeline=PIPELINE_NAME,
            success=False,
            stage=stage,
            message=f"Error: {exc}",
            error=str(exc),
        )
