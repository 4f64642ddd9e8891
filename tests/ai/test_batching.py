from __future__ import annotations

import pytest

from vpatflow.ai.batching import make_batches, run_batches


def test_make_batches_preserves_order_with_short_tail() -> None:
    batches = make_batches(list(range(12)), 5)

    assert [len(batch) for batch in batches] == [5, 5, 2]
    assert [item for batch in batches for item in batch] == list(range(12))


def test_make_batches_zero_size_means_single_batch() -> None:
    assert make_batches([1, 2, 3], 0) == [[1, 2, 3]]
    assert make_batches([], 0) == []
    assert make_batches([], 5) == []


def test_make_batches_rejects_negative_size() -> None:
    with pytest.raises(ValueError, match="negative"):
        make_batches([1], -1)


def test_run_batches_sleeps_only_between_batches() -> None:
    events: list[str] = []

    def process(batch: list[int], batch_number: int, total_batches: int) -> list[int]:
        events.append(f"batch {batch_number}/{total_batches}")
        return [item * 10 for item in batch]

    run = run_batches(
        list(range(12)),
        5,
        process=process,
        on_error=lambda batch, exc: [-1] * len(batch),
        delay_seconds=1.5,
        sleep=lambda seconds: events.append(f"sleep {seconds}"),
    )

    assert events == ["batch 1/3", "sleep 1.5", "batch 2/3", "sleep 1.5", "batch 3/3"]
    assert run.results == [item * 10 for item in range(12)]
    assert run.batches_total == 3
    assert run.batches_failed == 0


def test_failed_batch_is_marked_and_processing_continues() -> None:
    sleeps: list[float] = []

    def process(batch: list[str], batch_number: int, total_batches: int) -> list[str]:
        if batch_number == 1:
            raise RuntimeError("provider down")
        return [f"ok:{item}" for item in batch]

    run = run_batches(
        ["a", "b", "c"],
        2,
        process=process,
        on_error=lambda batch, exc: [f"Error: {exc}" for _ in batch],
        delay_seconds=1.0,
        sleep=sleeps.append,
    )

    assert run.results == ["Error: provider down", "Error: provider down", "ok:c"]
    assert run.batches_failed == 1
    assert run.batches_succeeded == 1
    assert sleeps == [1.0]


def test_result_count_mismatch_counts_as_failed_batch() -> None:
    run = run_batches(
        [1, 2],
        0,
        process=lambda batch, number, total: [1],
        on_error=lambda batch, exc: ["failed"] * len(batch),
    )

    assert run.results == ["failed", "failed"]
    assert run.batches_failed == 1
