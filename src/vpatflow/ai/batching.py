"""Sequential fixed-size batching with a delay between remote calls."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import time
from typing import Callable, Generic, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def make_batches(items: Sequence[T], size: int) -> list[list[T]]:
    """Split *items* into ordered batches of *size*; ``0`` means one batch."""

    if size < 0:
        raise ValueError("batch size cannot be negative")
    if not items:
        return []
    if size == 0:
        return [list(items)]
    return [list(items[start : start + size]) for start in range(0, len(items), size)]


@dataclass(slots=True)
class BatchRun(Generic[R]):
    """Per-item results of a batched run, in input order."""

    results: list[R] = field(default_factory=list)
    batches_total: int = 0
    batches_failed: int = 0

    @property
    def batches_succeeded(self) -> int:
        return self.batches_total - self.batches_failed


def run_batches(
    items: Sequence[T],
    size: int,
    *,
    process: Callable[[list[T], int, int], list[R]],
    on_error: Callable[[list[T], Exception], list[R]],
    delay_seconds: float = 0.0,
    sleep: Callable[[float], None] = time.sleep,
) -> BatchRun[R]:
    """Run *process* once per batch, strictly one after another.

    ``process(batch, batch_number, total_batches)`` returns one result per
    item. If it raises, ``on_error(batch, exc)`` supplies error-marked results
    for the whole batch and the next batch still runs. *sleep* is called with
    *delay_seconds* between batches, never after the last one.
    """
    if delay_seconds < 0:
        raise ValueError("delay_seconds cannot be negative")

    batches = make_batches(items, size)
    run: BatchRun[R] = BatchRun(batches_total=len(batches))

    for batch_number, batch in enumerate(batches, start=1):
        logger.info("Processing batch %d of %d (%d items)", batch_number, len(batches), len(batch))
        try:
            batch_results = process(batch, batch_number, len(batches))
            if len(batch_results) != len(batch):
                raise RuntimeError(
                    f"Batch {batch_number} produced {len(batch_results)} results for {len(batch)} items"
                )
        except Exception as exc:
            logger.warning("Error processing batch %d: %s", batch_number, exc)
            run.batches_failed += 1
            batch_results = on_error(batch, exc)

        run.results.extend(batch_results)

        if batch_number < len(batches) and delay_seconds > 0:
            sleep(delay_seconds)

    return run
