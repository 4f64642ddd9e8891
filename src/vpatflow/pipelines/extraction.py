"""Extraction pipeline: document tables into the original conformance columns."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping

from vpatflow.config import ProcessorSettings
from vpatflow.documents.extractor import extract_vpat_records
from vpatflow.documents.loader import DocumentLoader
from vpatflow.documents.models import ExtractedRecord, LoadedDocument
from vpatflow.grid.base import Grid
from vpatflow.grid.columns import CONFORMANCE_LEVEL, CRITERIA, EXTRACTION_COLUMNS, REMARKS, resolve_columns
from vpatflow.grid.workbook import WorkbookStore
from vpatflow.normalize.criteria import build_criteria_index
from vpatflow.pipelines.results import PipelineResult, PipelineStage, RowRange, read_column

logger = logging.getLogger(__name__)

PIPELINE_NAME = "extraction"


def write_extracted_records(
    grid: Grid,
    records: Mapping[int, ExtractedRecord],
    columns: Mapping[str, int],
) -> tuple[int, int]:
    """Write records in ascending row order; returns ``(updated, failed)``."""

    updated = 0
    failed = 0
    for row_number in sorted(records):
        record = records[row_number]
        try:
            grid.write_cell(row_number, columns[CONFORMANCE_LEVEL], record.conformance_level)
            grid.write_cell(row_number, columns[REMARKS], record.remarks)
            updated += 1
            logger.debug("Wrote row %d: conformance=%r", row_number, record.conformance_level)
        except Exception as exc:
            failed += 1
            logger.warning("Error writing data to row %d: %s", row_number, exc)

    logger.info("Write complete: %d rows updated, %d failed", updated, failed)
    return updated, failed


def run_extraction(
    store: WorkbookStore,
    document_path: str | Path,
    *,
    sheet_name: str | None = None,
    row_range: RowRange | None = None,
    settings: ProcessorSettings | None = None,
    loader: DocumentLoader | None = None,
) -> PipelineResult:
    """Fill the original conformance and remarks columns from a VPAT document.

    Never raises: every failure is logged and returned as a failed result.
    """
    active_settings = settings or ProcessorSettings()
    stage = PipelineStage.VALIDATING_SCHEMA
    document: LoadedDocument | None = None

    try:
        grid = store.target_sheet(sheet_name)
        columns = resolve_columns(grid, EXTRACTION_COLUMNS)

        stage = PipelineStage.RESOLVING_INPUT_RANGE
        start_row, end_row = (row_range or RowRange()).resolve(grid)
        logger.info("Processing criteria in rows %d to %d of %s", start_row, end_row, grid.title)

        index = build_criteria_index(read_column(grid, columns[CRITERIA], start_row, end_row), start_row=start_row)
        if not index:
            return PipelineResult(
                pipeline=PIPELINE_NAME,
                success=False,
                stage=stage,
                message=f"No criteria found in rows {start_row} to {end_row}.",
                error=f"No criteria found in rows {start_row} to {end_row}.",
            )
        logger.info("Processing %d criteria", len(index))

        stage = PipelineStage.LOADING_SOURCE
        document = (loader or DocumentLoader.with_default_adapters()).open(document_path, require_tables=True)

        stage = PipelineStage.EXTRACTING
        logger.info("Extracting data from %d tables", len(document.tables))
        records = extract_vpat_records(
            document.tables,
            index,
            expected_columns=active_settings.expected_table_columns,
        )

        stage = PipelineStage.WRITING
        updated, failed = write_extracted_records(grid, records, columns)

        stage = PipelineStage.CLEANUP
        document.close()

        message = f"Complete! Updated {updated} of {len(records)} rows"
        logger.info(message)
        return PipelineResult(
            pipeline=PIPELINE_NAME,
            success=True,
            stage=PipelineStage.IDLE,
            succeeded=updated,
            failed=failed,
            total=len(records),
            message=message,
        )
    except Exception as exc:
        logger.exception("Extraction failed during %s", stage.value)
        return PipelineResult(
            pipeline=PIPELINE_NAME,
            success=False,
            stage=stage,
            message=f"Error: {exc}",
            error=str(exc),
        )
    finally:
        if document is not None:
            document.close()
