from __future__ import annotations

import pytest

from vpatflow.normalize.criteria import build_criteria_index, normalize_criteria_key


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("1.1.1 Non-text Content", "1.1.1"),
        ("Section 4.1.2 Name, Role, Value", "4.1.2"),
        ("  2.4.7\nFocus Visible ", "2.4.7"),
        ("Criteria 502.3.1", "502.3.1"),
        ("302.1 Without Vision", "302.1"),
        ("Table 2: 1.1.1", None),
        ("Chapter 3: Functional Performance", None),
        ("", None),
        ("   ", None),
        (None, None),
    ],
)
def test_normalize_criteria_key_examples(text: object, expected: str | None) -> None:
    assert normalize_criteria_key(text) == expected


def test_normalize_criteria_key_is_idempotent() -> None:
    for text in ["1.1.1 Non-text Content", "Section 4.1.2 foo", "1.4.3"]:
        key = normalize_criteria_key(text)
        assert key is not None
        assert normalize_criteria_key(key) == key


def test_normalize_criteria_key_accepts_non_string_cells() -> None:
    assert normalize_criteria_key(4.1) == "4.1"
    assert normalize_criteria_key(12) is None


def test_build_criteria_index_maps_keys_to_sheet_rows() -> None:
    index = build_criteria_index(
        ["1.1.1 Non-text Content", None, "Heading without key", "1.4.3 Contrast"],
        start_row=5,
    )

    assert index == {"1.1.1": 5, "1.4.3": 8}


def test_build_criteria_index_last_duplicate_wins() -> None:
    index = build_criteria_index(["1.1.1 first", "1.1.1 second"], start_row=2)

    assert index == {"1.1.1": 3}
