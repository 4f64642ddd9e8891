"""Argument, logging and output helpers shared by the pipeline commands."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Sequence

from vpatflow.config import ProcessorSettings
from vpatflow.errors import ConfigurationError
from vpatflow.grid.workbook import WorkbookStore
from vpatflow.pipelines.results import PipelineResult, RowRange

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def build_parser(description: str, *, document: bool, sheet: bool) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("--workbook", required=True, help="Path to the .xlsx workbook")
    if document:
        parser.add_argument("--document", required=True, help="VPAT document (.docx or .pdf)")
    if sheet:
        parser.add_argument("--sheet", default=None, help="Main VPAT sheet name (defaults to the active sheet)")
        parser.add_argument("--start-row", type=int, default=None, help="First row to process")
        parser.add_argument("--end-row", type=int, default=None, help="Last row to process")
    parser.add_argument("--output", default=None, help="Save to this path instead of overwriting the workbook")
    parser.add_argument("--dry-run", action="store_true", help="Run without saving the workbook")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(format=LOG_FORMAT, level=logging.DEBUG if verbose else logging.INFO)


def row_range_from_args(args: argparse.Namespace) -> RowRange:
    return RowRange(start=args.start_row, end=args.end_row)


def open_inputs(args: argparse.Namespace) -> tuple[ProcessorSettings, WorkbookStore]:
    try:
        settings = ProcessorSettings.from_env()
    except ValueError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc
    return settings, WorkbookStore.open(args.workbook)


def emit_error(args: argparse.Namespace, message: str) -> int:
    payload = {"workbook": str(args.workbook), "saved_to": None, "results": [], "error": message}
    print(json.dumps(payload, ensure_ascii=True, indent=2))
    return 1


def finish(args: argparse.Namespace, store: WorkbookStore, results: Sequence[PipelineResult]) -> int:
    """Save the workbook unless ``--dry-run`` and print the JSON summary."""

    saved_to: str | None = None
    error: str | None = None
    if not args.dry_run:
        try:
            saved_to = str(store.save(Path(args.output) if args.output else None))
        except OSError as exc:
            logger.exception("Failed to save workbook")
            error = f"Failed to save workbook: {exc}"

    payload = {
        "workbook": str(args.workbook),
        "saved_to": saved_to,
        "results": [result.to_dict() for result in results],
        "error": error,
    }
    print(json.dumps(payload, ensure_ascii=True, indent=2))
    return 0 if error is None and all(result.success for result in results) else 1
