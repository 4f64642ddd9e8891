"""Shared result and row-range types for the pipeline entry points."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any

from vpatflow.errors import ConfigurationError
from vpatflow.grid.base import Grid
from vpatflow.grid.columns import DEFAULT_START_ROW


class PipelineStage(str, Enum):
    IDLE = "idle"
    VALIDATING_SCHEMA = "validating_schema"
    RESOLVING_INPUT_RANGE = "resolving_input_range"
    LOADING_SOURCE = "loading_source"
    EXTRACTING = "extracting"
    BATCHING = "batching"
    WRITING = "writing"
    CLEANUP = "cleanup"


@dataclass(frozen=True, slots=True)
class PipelineResult:
    pipeline: str
    success: bool
    stage: PipelineStage = PipelineStage.IDLE
    succeeded: int = 0
    failed: int = 0
    total: int = 0
    message: str = ""
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["stage"] = self.stage.value
        return payload


@dataclass(frozen=True, slots=True)
class RowRange:
    """Optional inclusive 1-based row bounds supplied by the caller."""

    start: int | None = None
    end: int | None = None

    def resolve(self, grid: Grid) -> tuple[int, int]:
        """Return concrete ``(start, end)`` bounds for *grid*.

        When either bound is missing every data row is used, from the first
        row after the header through the sheet's last row.
        """
        if self.start is None or self.end is None:
            return DEFAULT_START_ROW, grid.last_row

        if self.start < DEFAULT_START_ROW or self.end < self.start:
            raise ConfigurationError(
                f"Invalid row numbers. Start row must be >= {DEFAULT_START_ROW} "
                "and end row must be >= start row."
            )
        return self.start, self.end


def read_column(grid: Grid, column: int, start: int, end: int) -> list[object]:
    """Read one column between inclusive row bounds; empty when ``end < start``."""

    if end < start:
        return []
    return [row[0] for row in grid.read_range(start, column, end - start + 1, 1)]
