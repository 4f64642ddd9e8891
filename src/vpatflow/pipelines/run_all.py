"""Run extraction, interpretation and quality analysis back to back."""

from __future__ import annotations

import logging
from pathlib import Path
import time
from typing import Callable

from vpatflow.ai.providers import ChatProvider, ProviderCredentials
from vpatflow.config import ProcessorSettings
from vpatflow.documents.loader import DocumentLoader
from vpatflow.grid.workbook import WorkbookStore
from vpatflow.pipelines.extraction import run_extraction
from vpatflow.pipelines.interpretation import run_interpretation
from vpatflow.pipelines.quality import run_quality_analysis
from vpatflow.pipelines.results import PipelineResult, RowRange

logger = logging.getLogger(__name__)


def run_all(
    store: WorkbookStore,
    document_path: str | Path,
    *,
    sheet_name: str | None = None,
    row_range: RowRange | None = None,
    settings: ProcessorSettings | None = None,
    loader: DocumentLoader | None = None,
    provider_factory: Callable[[ProviderCredentials], ChatProvider] | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> list[PipelineResult]:
    """Run all three pipelines in order; a failure does not stop the later ones."""

    active_settings = settings or ProcessorSettings()
    document_loader = loader or DocumentLoader.with_default_adapters()

    steps: list[Callable[[], PipelineResult]] = [
        lambda: run_extraction(
            store,
            document_path,
            sheet_name=sheet_name,
            row_range=row_range,
            settings=active_settings,
            loader=document_loader,
        ),
        lambda: run_interpretation(
            store,
            sheet_name=sheet_name,
            row_range=row_range,
            settings=active_settings,
            provider_factory=provider_factory,
            sleep=sleep,
        ),
        lambda: run_quality_analysis(
            store,
            document_path,
            settings=active_settings,
            loader=document_loader,
            provider_factory=provider_factory,
            sleep=sleep,
        ),
    ]

    results: list[PipelineResult] = []
    for position, step in enumerate(steps):
        if position and active_settings.pipeline_pause_seconds > 0:
            sleep(active_settings.pipeline_pause_seconds)
        result = step()
        logger.info("%s pipeline finished: success=%s %s", result.pipeline, result.success, result.message)
        results.append(result)

    logger.info("All pipelines complete")
    return results
