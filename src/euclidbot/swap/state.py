"""Batch progress counters and the rolling transaction-count series."""

from collections import deque
from dataclasses import dataclass

SERIES_SIZE = 30


@dataclass(frozen=True)
class BatchSnapshot:
    """Read-only view of a batch for the presentation layer."""

    total: int
    completed: int
    succeeded: int
    failed: int
    skipped: int
    tx_count_series: tuple[int, ...]


class BatchState:
    """Mutable batch state, owned by the orchestrator.

    ``tx_count_series`` is a fixed-size window: recording a value drops the
    oldest and appends the newest.
    """

    def __init__(self, total: int = 0, series_size: int = SERIES_SIZE):
        self.total = total
        self.completed = 0
        self.succeeded = 0
        self.failed = 0
        self.skipped = 0
        self._series: deque[int] = deque([0] * series_size, maxlen=series_size)

    def record_success(self, tx_count: int = 1) -> None:
        self.completed += 1
        self.succeeded += 1
        self._series.append(tx_count)

    def record_failure(self) -> None:
        self.completed += 1
        self.failed += 1

    def record_skip(self) -> None:
        self.completed += 1
        self.skipped += 1

    def snapshot(self) -> BatchSnapshot:
        return BatchSnapshot(
            total=self.total,
            completed=self.completed,
            succeeded=self.succeeded,
            failed=self.failed,
            skipped=self.skipped,
            tx_count_series=tuple(self._series),
        )
