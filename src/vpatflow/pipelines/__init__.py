"""Pipeline entry points for extraction, interpretation and quality analysis."""

from .extraction import run_extraction
from .interpretation import run_interpretation
from .quality import CriteriaGroup, group_requirements, run_quality_analysis
from .results import PipelineResult, PipelineStage, RowRange
from .run_all import run_all

__all__ = [
    "CriteriaGroup",
    "PipelineResult",
    "PipelineStage",
    "RowRange",
    "group_requirements",
    "run_all",
    "run_extraction",
    "run_interpretation",
    "run_quality_analysis",
]
