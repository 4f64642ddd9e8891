"""Pure normalization helpers for criteria keys and conformance values."""

from .conformance import (
    VALID_CONFORMANCE_VALUES,
    ConformanceLevel,
    coerce_conformance_value,
    normalize_conformance_value,
)
from .criteria import build_criteria_index, normalize_criteria_key

__all__ = [
    "VALID_CONFORMANCE_VALUES",
    "ConformanceLevel",
    "build_criteria_index",
    "coerce_conformance_value",
    "normalize_conformance_value",
    "normalize_criteria_key",
]
