"""Closed conformance vocabulary and the synonym mapping for free-form AI text."""

from __future__ import annotations

from enum import Enum
import logging
from typing import Mapping

logger = logging.getLogger(__name__)


class ConformanceLevel(str, Enum):
    SUPPORTS = "Supports"
    PARTIALLY_SUPPORTS = "Partially Supports"
    DOES_NOT_SUPPORT = "Does Not Support"
    NOT_APPLICABLE = "Not Applicable"
    NOT_EVALUATED = "Not Evaluated"


VALID_CONFORMANCE_VALUES: tuple[str, ...] = tuple(level.value for level in ConformanceLevel)

CONFORMANCE_SYNONYMS: dict[str, str] = {
    "supports": ConformanceLevel.SUPPORTS.value,
    "support": ConformanceLevel.SUPPORTS.value,
    "yes": ConformanceLevel.SUPPORTS.value,
    "supported": ConformanceLevel.SUPPORTS.value,
    "partially supports": ConformanceLevel.PARTIALLY_SUPPORTS.value,
    "partial supports": ConformanceLevel.PARTIALLY_SUPPORTS.value,
    "partially support": ConformanceLevel.PARTIALLY_SUPPORTS.value,
    "partial support": ConformanceLevel.PARTIALLY_SUPPORTS.value,
    "partially": ConformanceLevel.PARTIALLY_SUPPORTS.value,
    "partial": ConformanceLevel.PARTIALLY_SUPPORTS.value,
    "supports with exceptions": ConformanceLevel.PARTIALLY_SUPPORTS.value,
    "supports with exception": ConformanceLevel.PARTIALLY_SUPPORTS.value,
    "sometimes": ConformanceLevel.PARTIALLY_SUPPORTS.value,
    "does not support": ConformanceLevel.DOES_NOT_SUPPORT.value,
    "doesn't support": ConformanceLevel.DOES_NOT_SUPPORT.value,
    "does not supports": ConformanceLevel.DOES_NOT_SUPPORT.value,
    "not supported": ConformanceLevel.DOES_NOT_SUPPORT.value,
    "not support": ConformanceLevel.DOES_NOT_SUPPORT.value,
    "no": ConformanceLevel.DOES_NOT_SUPPORT.value,
    "fails": ConformanceLevel.DOES_NOT_SUPPORT.value,
    "failed": ConformanceLevel.DOES_NOT_SUPPORT.value,
    "not applicable": ConformanceLevel.NOT_APPLICABLE.value,
    "n/a": ConformanceLevel.NOT_APPLICABLE.value,
    "na": ConformanceLevel.NOT_APPLICABLE.value,
    "not apply": ConformanceLevel.NOT_APPLICABLE.value,
    "not evaluated": ConformanceLevel.NOT_EVALUATED.value,
    "not assessed": ConformanceLevel.NOT_EVALUATED.value,
    "unevaluated": ConformanceLevel.NOT_EVALUATED.value,
    "unknown": ConformanceLevel.NOT_EVALUATED.value,
}


def is_valid_conformance_value(value: str) -> bool:
    return value in VALID_CONFORMANCE_VALUES


def normalize_conformance_value(raw: object, *, extra_synonyms: Mapping[str, str] | None = None) -> str:
    """Map AI wording onto the closed vocabulary where a synonym is known.

    Returns the canonical value, or the trimmed input when nothing matches
    (callers decide what to do with it), or ``""`` for blank input.
    """
    if raw is None:
        return ""

    trimmed = str(raw).strip()
    if not trimmed:
        return ""
    if trimmed in VALID_CONFORMANCE_VALUES:
        return trimmed

    lowered = trimmed.lower()
    mapped = CONFORMANCE_SYNONYMS.get(lowered)
    if mapped is None and extra_synonyms:
        mapped = extra_synonyms.get(lowered)
    return mapped if mapped is not None else trimmed


def coerce_conformance_value(
    raw: object,
    *,
    context: str = "",
    extra_synonyms: Mapping[str, str] | None = None,
) -> str:
    """Return a value that is always inside the closed vocabulary.

    Blank and unrecognized values fall back to ``Not Evaluated``.
    """
    fallback = ConformanceLevel.NOT_EVALUATED.value
    normalized = normalize_conformance_value(raw, extra_synonyms=extra_synonyms)

    if not normalized:
        logger.debug("%s: empty value, using %r", context or "conformance", fallback)
        return fallback

    if not is_valid_conformance_value(normalized):
        logger.warning(
            "%s: invalid value %r (normalized: %r), defaulting to %r",
            context or "conformance",
            raw,
            normalized,
            fallback,
        )
        return fallback

    if normalized != raw:
        logger.debug("%s: normalized %r -> %r", context or "conformance", raw, normalized)
    return normalized
