from __future__ import annotations

import logging

import pytest

from vpatflow.normalize.conformance import (
    VALID_CONFORMANCE_VALUES,
    ConformanceLevel,
    coerce_conformance_value,
    normalize_conformance_value,
)


def test_canonical_values_pass_through_unchanged() -> None:
    for value in VALID_CONFORMANCE_VALUES:
        assert normalize_conformance_value(value) == value


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("yes", "Supports"),
        (" YES ", "Supports"),
        ("n/a", "Not Applicable"),
        ("Partial", "Partially Supports"),
        ("supports with exceptions", "Partially Supports"),
        ("fails", "Does Not Support"),
        ("unknown", "Not Evaluated"),
    ],
)
def test_synonyms_map_to_canonical_values(raw: str, expected: str) -> None:
    assert normalize_conformance_value(raw) == expected


def test_unknown_value_is_returned_trimmed() -> None:
    assert normalize_conformance_value("  Mostly fine  ") == "Mostly fine"


def test_blank_values_normalize_to_empty_string() -> None:
    assert normalize_conformance_value(None) == ""
    assert normalize_conformance_value("   ") == ""


def test_normalize_is_idempotent() -> None:
    for raw in ["yes", "n/a", "Mostly fine", "Supports", ""]:
        once = normalize_conformance_value(raw)
        assert normalize_conformance_value(once) == once


def test_extra_synonyms_extend_the_table() -> None:
    assert normalize_conformance_value("compliant", extra_synonyms={"compliant": "Supports"}) == "Supports"


def test_coerce_falls_back_to_not_evaluated(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        assert coerce_conformance_value("Mostly fine", context="row 4 web") == ConformanceLevel.NOT_EVALUATED.value

    assert "row 4 web" in caplog.text
    assert coerce_conformance_value(None) == "Not Evaluated"
    assert coerce_conformance_value("") == "Not Evaluated"


def test_coerce_always_returns_a_canonical_value() -> None:
    for raw in ["yes", "no", "garbage", None, "Partially Supports", 42]:
        assert coerce_conformance_value(raw) in VALID_CONFORMANCE_VALUES
