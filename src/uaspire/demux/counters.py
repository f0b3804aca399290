"""Thread-safe accumulation of read counts.

:class:`ReadCounters` holds the run-wide QC counters and :class:`SampleTable`
holds the per-chunk RBS counts. Both are written to concurrently by the
worker threads of a chunk and only read once all workers have been joined.

Copyright © 2024 Pixelgen Technologies AB.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Iterator

import polars as pl

from uaspire.demux.classify import FailureReason, Orientation, Sample

COUNTS_SCHEMA = {
    "barcode1": pl.String,
    "barcode2": pl.String,
    "rbs": pl.String,
    "non_flipped_count": pl.UInt64,
    "flipped_count": pl.UInt64,
}

QC_SCHEMA = {
    "metric": pl.String,
    "count": pl.UInt64,
}


class AtomicCounter:
    """An integer counter that can be incremented from many threads."""

    __slots__ = ("_value", "_lock")

    def __init__(self) -> None:
        """Initialize the counter at zero."""
        self._value = 0
        self._lock = threading.Lock()

    def increment(self, n: int = 1) -> None:
        """Add `n` to the counter."""
        with self._lock:
            self._value += n

    @property
    def value(self) -> int:
        """Return the current value."""
        return self._value


@dataclass(frozen=True)
class ReadCountsSnapshot:
    """An immutable view of :class:`ReadCounters`.

    :ivar total: the number of read pairs processed
    :ivar valid: the number of read pairs assigned to a sample
    :ivar failures: the number of read pairs rejected for each reason
    """

    total: int
    valid: int
    failures: dict[FailureReason, int]

    @property
    def failed(self) -> int:
        """Return the number of read pairs rejected for any reason."""
        return sum(self.failures.values())

    def rows(self) -> Iterator[tuple[str, int]]:
        """Yield (metric, count) rows in QC summary order."""
        yield "total", self.total
        yield "valid", self.valid
        for reason in FailureReason:
            yield reason.value, self.failures[reason]

    def to_frame(self) -> pl.DataFrame:
        """Return the counters as a two column (metric, count) table."""
        metrics, counts = zip(*self.rows())
        return pl.DataFrame(
            {"metric": list(metrics), "count": list(counts)}, schema=QC_SCHEMA
        )


class ReadCounters:
    """Run-wide QC counters.

    Every processed read pair increments `total` once and exactly one of
    `valid` or a failure counter, so `total == valid + failed` holds once
    a pair has been recorded.
    """

    def __init__(self) -> None:
        """Initialize all counters at zero."""
        self._total = AtomicCounter()
        self._valid = AtomicCounter()
        self._failures = {reason: AtomicCounter() for reason in FailureReason}

    def record_total(self) -> None:
        """Count one processed read pair."""
        self._total.increment()

    def record_valid(self) -> None:
        """Count one read pair assigned to a sample."""
        self._valid.increment()

    def record_failure(self, reason: FailureReason) -> None:
        """Count one read pair rejected for `reason`."""
        self._failures[reason].increment()

    def snapshot(self) -> ReadCountsSnapshot:
        """Return the current values of all counters."""
        return ReadCountsSnapshot(
            total=self._total.value,
            valid=self._valid.value,
            failures={reason: c.value for reason, c in self._failures.items()},
        )


class RbsCount:
    """The non-flipped and flipped read counts of one (sample, rbs) pair."""

    __slots__ = ("non_flipped", "flipped")

    def __init__(self) -> None:
        """Initialize both slots at zero."""
        self.non_flipped = 0
        self.flipped = 0


class _Shard:
    __slots__ = ("lock", "samples")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.samples: dict[Sample, dict[str, RbsCount]] = {}


class SampleTable:
    """A concurrent two level map of sample -> rbs -> :class:`RbsCount`.

    Samples are spread over a fixed number of shards, each with its own
    lock. A count cell is created and incremented while holding the lock of
    its sample's shard, so exactly one cell exists per (sample, rbs) key.
    """

    def __init__(self, n_shards: int = 16) -> None:
        """Initialize an empty table.

        :param n_shards: the number of independently locked shards
        """
        if n_shards < 1:
            raise ValueError("n_shards must be at least one")
        self._shards = tuple(_Shard() for _ in range(n_shards))

    def _shard(self, sample: Sample) -> _Shard:
        return self._shards[hash(sample) % len(self._shards)]

    def record_success(self, sample: Sample, rbs: str, orientation: Orientation):
        """Increment the count of `rbs` for `sample` in the given orientation."""
        shard = self._shard(sample)
        with shard.lock:
            rbs_counts = shard.samples.get(sample)
            if rbs_counts is None:
                rbs_counts = shard.samples[sample] = {}
            cell = rbs_counts.get(rbs)
            if cell is None:
                cell = rbs_counts[rbs] = RbsCount()
            if orientation is Orientation.NON_FLIPPED:
                cell.non_flipped += 1
            else:
                cell.flipped += 1

    def __len__(self) -> int:
        """Return the number of (sample, rbs) cells."""
        return sum(
            len(rbs_counts)
            for shard in self._shards
            for rbs_counts in shard.samples.values()
        )

    def snapshot(self) -> pl.DataFrame:
        """Return the table as rows of (barcode1, barcode2, rbs, non_flipped_count, flipped_count).

        Must only be called once all writers are done.
        """
        columns: dict[str, list] = {name: [] for name in COUNTS_SCHEMA}
        for shard in self._shards:
            for sample, rbs_counts in shard.samples.items():
                for rbs, cell in rbs_counts.items():
                    columns["barcode1"].append(sample.barcode1)
                    columns["barcode2"].append(sample.barcode2)
                    columns["rbs"].append(rbs)
                    columns["non_flipped_count"].append(cell.non_flipped)
                    columns["flipped_count"].append(cell.flipped)

        return pl.DataFrame(columns, schema=COUNTS_SCHEMA)
