"""Quality analysis pipeline: checklist questions answered against the full document text."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from pathlib import Path
import re
import time
from typing import Any, Callable, Iterable, Mapping, Sequence

from vpatflow.ai.batching import run_batches
from vpatflow.ai.prompts import QualityRequirement, build_quality_message
from vpatflow.ai.providers import ChatProvider, ProviderCredentials, build_provider
from vpatflow.ai.reconcile import align_responses, parse_ai_json
from vpatflow.config import ProcessorSettings
from vpatflow.documents.loader import DocumentLoader, truncate_document_text
from vpatflow.documents.models import LoadedDocument
from vpatflow.grid.base import Grid
from vpatflow.grid.columns import (
    AI_EXPLANATION,
    AI_GUIDELINES,
    AI_RESPONSE,
    CRITERIA_NAME,
    IMPACT,
    ORIGINAL_FROM_VPAT,
    QUALITY_CRITERIA,
    QUALITY_OPTIONAL_COLUMNS,
    QUALITY_REQUIRED_COLUMNS,
    QUALITY_SHEET_NAME,
    QUESTION,
    REQ_ID,
    REQUIREMENT_TYPE,
    RESPONSE_TYPE,
    resolve_columns,
)
from vpatflow.grid.settings_sheets import load_provider_credentials, load_quality_prompt
from vpatflow.grid.workbook import WorkbookStore
from vpatflow.pipelines.results import PipelineResult, PipelineStage

logger = logging.getLogger(__name__)

PIPELINE_NAME = "quality"
NO_RESPONSE = "No response"

_LEADING_INT_RE = re.compile(r"^\s*([-+]?\d+)")


@dataclass(slots=True)
class CriteriaGroup:
    criteria_num: int
    requirements: list[QualityRequirement] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class QualityResponse:
    """Answer for one requirement, ready to be written to its row."""

    row_index: int
    req_id: str
    response: str
    original_from_vpat: str
    explanation: str
    failed: bool = False


def _text(value: object) -> str:
    return str(value).strip() if value is not None else ""


def _parse_criteria_num(value: object) -> int:
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value == value else 0
    match = _LEADING_INT_RE.match(str(value))
    return int(match.group(1)) if match else 0


def load_quality_requirements(grid: Grid, columns: Mapping[str, int]) -> list[QualityRequirement]:
    """Read checklist rows that carry both a Req ID and a non-blank question."""

    if grid.last_row < 2:
        return []

    rows = grid.read_range(2, 1, grid.last_row - 1, grid.last_column)

    def cell(row: Sequence[object], name: str) -> object:
        column = columns.get(name)
        if column is None or column > len(row):
            return None
        return row[column - 1]

    requirements: list[QualityRequirement] = []
    for offset, row in enumerate(rows):
        req_id = _text(cell(row, REQ_ID))
        question = _text(cell(row, QUESTION))
        if not req_id or not question:
            continue
        requirements.append(
            QualityRequirement(
                req_id=req_id,
                question=question,
                row_index=offset + 2,
                ai_guidelines=_text(cell(row, AI_GUIDELINES)),
                response_type=_text(cell(row, RESPONSE_TYPE)),
                criteria_num=_parse_criteria_num(cell(row, QUALITY_CRITERIA)),
                criteria_name=_text(cell(row, CRITERIA_NAME)),
                impact=_text(cell(row, IMPACT)),
                requirement_type=_text(cell(row, REQUIREMENT_TYPE)),
            )
        )

    logger.info("Loaded %d quality requirements", len(requirements))
    return requirements


def group_requirements(requirements: Iterable[QualityRequirement]) -> list[CriteriaGroup]:
    """Group by criteria number, ascending; sheet order is kept inside each group."""

    groups: dict[int, CriteriaGroup] = {}
    for requirement in requirements:
        number = requirement.criteria_num or 0
        groups.setdefault(number, CriteriaGroup(criteria_num=number)).requirements.append(requirement)

    ordered = [groups[number] for number in sorted(groups)]
    logger.info("Created %d criteria groups", len(ordered))
    for group in ordered:
        logger.info("  Criteria %d: %d requirements", group.criteria_num, len(group.requirements))
    return ordered


def build_quality_response(requirement: QualityRequirement, reply: Mapping[str, Any]) -> QualityResponse:
    explanation = _text(reply.get("explanation"))
    confidence = reply.get("confidence")
    if confidence is not None:
        explanation += ("\n\n" if explanation else "") + f"Confidence: {confidence}%"

    return QualityResponse(
        row_index=requirement.row_index,
        req_id=requirement.req_id,
        response=_text(reply.get("response")) or NO_RESPONSE,
        original_from_vpat=_text(reply.get("originalFromVpat")),
        explanation=explanation,
    )


def failed_quality_responses(batch: Sequence[QualityRequirement], exc: Exception) -> list[QualityResponse]:
    return [
        QualityResponse(
            row_index=requirement.row_index,
            req_id=requirement.req_id,
            response=f"Error: {exc}",
            original_from_vpat="",
            explanation=f"Failed to process: {exc}",
            failed=True,
        )
        for requirement in batch
    ]


def write_quality_responses(
    grid: Grid,
    columns: Mapping[str, int],
    responses: Iterable[QualityResponse],
) -> list[bool]:
    """Write the three output columns per response; returns per-response write success."""

    outcomes: list[bool] = []
    for item in responses:
        try:
            grid.write_cell(item.row_index, columns[AI_RESPONSE], item.response)
            grid.write_cell(item.row_index, columns[ORIGINAL_FROM_VPAT], item.original_from_vpat)
            grid.write_cell(item.row_index, columns[AI_EXPLANATION], item.explanation)
            outcomes.append(True)
            logger.debug("Wrote response to row %d: %s", item.row_index, item.req_id)
        except Exception as exc:
            outcomes.append(False)
            logger.warning("Error writing response to row %d: %s", item.row_index, exc)

    logger.info("Wrote %d of %d responses", sum(outcomes), len(outcomes))
    return outcomes


def run_quality_analysis(
    store: WorkbookStore,
    document_path: str | Path,
    *,
    settings: ProcessorSettings | None = None,
    loader: DocumentLoader | None = None,
    provider_factory: Callable[[ProviderCredentials], ChatProvider] | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> PipelineResult:
    """Answer every checklist question in the quality sheet. Never raises."""

    active_settings = settings or ProcessorSettings()
    stage = PipelineStage.VALIDATING_SCHEMA
    document: LoadedDocument | None = None

    try:
        grid = store.require_sheet(
            QUALITY_SHEET_NAME,
            "Please create it with columns: Req ID, Simplified Questions, AI Guidelines (optional), "
            "Response Type, Criteria, Criteria Name, Impact, Type, AI Response, Original from VPAT, "
            "AI Explanation",
        )
        columns = resolve_columns(grid, QUALITY_REQUIRED_COLUMNS, QUALITY_OPTIONAL_COLUMNS)
        credentials = load_provider_credentials(store)

        stage = PipelineStage.RESOLVING_INPUT_RANGE
        requirements = load_quality_requirements(grid, columns)
        if not requirements:
            message = f'No requirements found in "{QUALITY_SHEET_NAME}" sheet'
            return PipelineResult(pipeline=PIPELINE_NAME, success=False, stage=stage, message=message, error=message)

        groups = group_requirements(requirements)
        logger.info("Grouped %d requirements into %d criteria groups", len(requirements), len(groups))

        stage = PipelineStage.LOADING_SOURCE
        document = (loader or DocumentLoader.with_default_adapters()).open(document_path, require_tables=False)
        logger.info("Extracted %d characters from document", len(document.text))
        document_text = truncate_document_text(document.text, active_settings.max_doc_length)
        document.close()

        system_prompt = load_quality_prompt(store)
        if provider_factory is None:
            provider = build_provider(credentials, active_settings, sleep=sleep)
        else:
            provider = provider_factory(credentials)

        stage = PipelineStage.BATCHING
        logger.info(
            "Total requirements to process: %d, batch size: %d",
            len(requirements),
            active_settings.quality_batch_size,
        )

        def process(batch: list[QualityRequirement], batch_number: int, total_batches: int) -> list[QualityResponse]:
            logger.info("Sending batch %d/%d to AI: %d requirements", batch_number, total_batches, len(batch))
            replies = parse_ai_json(provider.complete(system_prompt, build_quality_message(batch, document_text)))
            if len(replies) < len(batch):
                logger.warning(
                    "AI returned incomplete response: got %d of %d expected. "
                    "Consider reducing batch size or document length.",
                    len(replies),
                    len(batch),
                )
            aligned = align_responses(batch, replies, request_key=lambda item: item.req_id, response_key="reqId")
            return [build_quality_response(requirement, reply) for requirement, reply in zip(batch, aligned)]

        run = run_batches(
            requirements,
            active_settings.quality_batch_size,
            process=process,
            on_error=failed_quality_responses,
            delay_seconds=active_settings.api_delay_seconds,
            sleep=sleep,
        )

        stage = PipelineStage.WRITING
        written = write_quality_responses(grid, columns, run.results)
        succeeded = sum(1 for item, ok in zip(run.results, written) if ok and not item.failed)

        message = f"Quality analysis complete! {succeeded} of {len(requirements)} requirements evaluated"
        logger.info(message)
        return PipelineResult(
            pipeline=PIPELINE_NAME,
            success=True,
            stage=PipelineStage.IDLE,
            succeeded=succeeded,
            failed=len(requirements) - succeeded,
            total=len(requirements),
            message=message,
        )
    except Exception as exc:
        logger.exception("Quality analysis failed during %s", stage.value)
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
