"""Runtime configuration for the VPAT pipelines."""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Mapping


DEFAULT_BATCH_SIZE = 5
DEFAULT_QUALITY_BATCH_SIZE = 5
DEFAULT_API_DELAY_MS = 1000
DEFAULT_CONFIDENCE_THRESHOLD = 70
DEFAULT_EXPECTED_TABLE_COLUMNS = 3
DEFAULT_MAX_DOC_LENGTH = 100_000
DEFAULT_MAX_OUTPUT_TOKENS = 4096
DEFAULT_REQUEST_TIMEOUT_SECONDS = 120.0
DEFAULT_AI_MAX_RETRIES = 0
DEFAULT_PIPELINE_PAUSE_SECONDS = 2.0
DEFAULT_OPENAI_BASE_URL = "https://api.openai.com/v1"
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"


def _parse_int(*, name: str, raw_value: str, minimum: int = 0, maximum: int | None = None) -> int:
    try:
        value = int(raw_value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw_value!r}") from exc
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}")
    if maximum is not None and value > maximum:
        raise ValueError(f"{name} must be <= {maximum}")
    return value


def _parse_float(*, name: str, raw_value: str, minimum: float = 0.0, exclusive: bool = False) -> float:
    try:
        value = float(raw_value)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw_value!r}") from exc
    if exclusive and value <= minimum:
        raise ValueError(f"{name} must be > {minimum}")
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}")
    return value


def _parse_base_url(*, name: str, raw_value: str) -> str:
    if not raw_value:
        raise ValueError(f"{name} cannot be empty")
    if not (raw_value.startswith("http://") or raw_value.startswith("https://")):
        raise ValueError(f"{name} must start with http:// or https://")
    return raw_value.rstrip("/")


@dataclass(frozen=True, slots=True)
class ProcessorSettings:
    """Validated settings threaded through every pipeline invocation."""

    batch_size: int = DEFAULT_BATCH_SIZE
    quality_batch_size: int = DEFAULT_QUALITY_BATCH_SIZE
    api_delay_ms: int = DEFAULT_API_DELAY_MS
    default_confidence_threshold: int = DEFAULT_CONFIDENCE_THRESHOLD
    expected_table_columns: int = DEFAULT_EXPECTED_TABLE_COLUMNS
    max_doc_length: int = DEFAULT_MAX_DOC_LENGTH
    max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS
    request_timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS
    ai_max_retries: int = DEFAULT_AI_MAX_RETRIES
    pipeline_pause_seconds: float = DEFAULT_PIPELINE_PAUSE_SECONDS
    openai_base_url: str = DEFAULT_OPENAI_BASE_URL
    openai_model: str = DEFAULT_OPENAI_MODEL
    gemini_base_url: str = DEFAULT_GEMINI_BASE_URL
    gemini_model: str = DEFAULT_GEMINI_MODEL

    @property
    def api_delay_seconds(self) -> float:
        return self.api_delay_ms / 1000.0

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ProcessorSettings":
        source: Mapping[str, str] = os.environ if environ is None else environ

        def raw(name: str, default: object) -> str:
            value = source.get(name, str(default)).strip()
            if not value:
                raise ValueError(f"{name} cannot be empty")
            return value

        openai_model = raw("VPAT_OPENAI_MODEL", DEFAULT_OPENAI_MODEL)
        gemini_model = raw("VPAT_GEMINI_MODEL", DEFAULT_GEMINI_MODEL)

        return cls(
            batch_size=_parse_int(name="VPAT_BATCH_SIZE", raw_value=raw("VPAT_BATCH_SIZE", DEFAULT_BATCH_SIZE)),
            quality_batch_size=_parse_int(
                name="VPAT_QUALITY_BATCH_SIZE",
                raw_value=raw("VPAT_QUALITY_BATCH_SIZE", DEFAULT_QUALITY_BATCH_SIZE),
            ),
            api_delay_ms=_parse_int(name="VPAT_API_DELAY_MS", raw_value=raw("VPAT_API_DELAY_MS", DEFAULT_API_DELAY_MS)),
            default_confidence_threshold=_parse_int(
                name="VPAT_DEFAULT_CONFIDENCE_THRESHOLD",
                raw_value=raw("VPAT_DEFAULT_CONFIDENCE_THRESHOLD", DEFAULT_CONFIDENCE_THRESHOLD),
                maximum=100,
            ),
            expected_table_columns=_parse_int(
                name="VPAT_EXPECTED_TABLE_COLUMNS",
                raw_value=raw("VPAT_EXPECTED_TABLE_COLUMNS", DEFAULT_EXPECTED_TABLE_COLUMNS),
                minimum=3,
            ),
            max_doc_length=_parse_int(
                name="VPAT_MAX_DOC_LENGTH",
                raw_value=raw("VPAT_MAX_DOC_LENGTH", DEFAULT_MAX_DOC_LENGTH),
                minimum=1,
            ),
            max_output_tokens=_parse_int(
                name="VPAT_MAX_OUTPUT_TOKENS",
                raw_value=raw("VPAT_MAX_OUTPUT_TOKENS", DEFAULT_MAX_OUTPUT_TOKENS),
                minimum=1,
            ),
            request_timeout_seconds=_parse_float(
                name="VPAT_REQUEST_TIMEOUT_SECONDS",
                raw_value=raw("VPAT_REQUEST_TIMEOUT_SECONDS", DEFAULT_REQUEST_TIMEOUT_SECONDS),
                exclusive=True,
            ),
            ai_max_retries=_parse_int(
                name="VPAT_AI_MAX_RETRIES",
                raw_value=raw("VPAT_AI_MAX_RETRIES", DEFAULT_AI_MAX_RETRIES),
            ),
            pipeline_pause_seconds=_parse_float(
                name="VPAT_PIPELINE_PAUSE_SECONDS",
                raw_value=raw("VPAT_PIPELINE_PAUSE_SECONDS", DEFAULT_PIPELINE_PAUSE_SECONDS),
            ),
            openai_base_url=_parse_base_url(
                name="VPAT_OPENAI_BASE_URL",
                raw_value=raw("VPAT_OPENAI_BASE_URL", DEFAULT_OPENAI_BASE_URL),
            ),
            openai_model=openai_model,
            gemini_base_url=_parse_base_url(
                name="VPAT_GEMINI_BASE_URL",
                raw_value=raw("VPAT_GEMINI_BASE_URL", DEFAULT_GEMINI_BASE_URL),
            ),
            gemini_model=gemini_model,
        )
