"""AI provider access, batching and reply reconciliation."""

from .batching import BatchRun, make_batches, run_batches
from .prompts import (
    DEFAULT_QUALITY_PROMPT,
    QualityRequirement,
    RowInterpretationItem,
    build_interpretation_message,
    build_quality_message,
)
from .providers import (
    ChatProvider,
    GeminiProvider,
    OpenAICompatibleProvider,
    ProviderCredentials,
    ProviderKind,
    build_provider,
)
from .reconcile import align_responses, parse_ai_json, strip_code_fence

__all__ = [
    "BatchRun",
    "ChatProvider",
    "DEFAULT_QUALITY_PROMPT",
    "GeminiProvider",
    "OpenAICompatibleProvider",
    "ProviderCredentials",
    "ProviderKind",
    "QualityRequirement",
    "RowInterpretationItem",
    "align_responses",
    "build_interpretation_message",
    "build_provider",
    "build_quality_message",
    "make_batches",
    "parse_ai_json",
    "run_batches",
    "strip_code_fence",
]
