"""Chunked classification of paired reads.

Read pairs are pulled from the two input streams in fixed size chunks.
The pairs of a chunk are classified by a pool of worker threads into a
table private to that chunk, which is written to its own Parquet file
before the next chunk is read. Peak memory is therefore bounded by the
chunk size, independently of the size of the input.

Copyright © 2024 Pixelgen Technologies AB.
"""

from __future__ import annotations

import itertools
import logging
from concurrent import futures
from pathlib import Path
from typing import Iterable, Iterator, Sequence

from dnaio import SequenceRecord

from uaspire.demux.classify import FailureReason, ReadClassifier
from uaspire.demux.counters import ReadCounters, SampleTable
from uaspire.demux.layout import OutputLayout
from uaspire.demux.tables import write_table
from uaspire.exceptions import InputMismatchError

logger = logging.getLogger(__name__)

ReadPair = tuple[SequenceRecord, SequenceRecord]


def read_chunks(
    records1: Iterable[SequenceRecord],
    records2: Iterable[SequenceRecord],
    chunk_size: int,
) -> Iterator[list[ReadPair]]:
    """Pull chunks of read pairs from two record streams in lockstep.

    Records are paired by position only. Iteration stops when both streams
    are exhausted at the same time.

    :param records1: the read 1 records
    :param records2: the read 2 records
    :param chunk_size: the maximum number of pairs per chunk
    :yields: lists of at most `chunk_size` (read 1, read 2) pairs
    :raises InputMismatchError: if one stream ends before the other
    """
    if chunk_size < 1:
        raise ValueError("chunk_size must be at least one")

    it1, it2 = iter(records1), iter(records2)
    n_pairs = 0
    while True:
        chunk1 = list(itertools.islice(it1, chunk_size))
        chunk2 = list(itertools.islice(it2, chunk_size))

        if len(chunk1) != len(chunk2):
            shorter = "read 1" if len(chunk1) < len(chunk2) else "read 2"
            raise InputMismatchError(
                f"The input files do not have the same number of records: "
                f"{shorter} ended after {n_pairs + min(len(chunk1), len(chunk2))} records"
            )

        if not chunk1:
            return

        n_pairs += len(chunk1)
        yield list(zip(chunk1, chunk2))


def _mate_id(record: SequenceRecord) -> str:
    """Return the record identifier without a trailing `/1` or `/2` mate suffix."""
    record_id = record.id
    if record_id.endswith(("/1", "/2")):
        return record_id[:-2]
    return record_id


def classify_pairs(
    pairs: Sequence[ReadPair],
    classifier: ReadClassifier,
    table: SampleTable,
    counters: ReadCounters,
) -> None:
    """Classify read pairs and record the outcome of each.

    :raises InputMismatchError: if the records of a pair have different identifiers
    """
    for record1, record2 in pairs:
        if _mate_id(record1) != _mate_id(record2):
            raise InputMismatchError(
                f"Record IDs do not match: {record1.id} vs {record2.id}"
            )

        counters.record_total()
        result = classifier.classify(record1.sequence, record2.sequence)
        if isinstance(result, FailureReason):
            counters.record_failure(result)
        else:
            counters.record_valid()
            table.record_success(result.sample, result.rbs, result.orientation)


class ChunkedDemuxRunner:
    """Classify all read pairs of two record streams, one chunk at a time."""

    def __init__(
        self,
        classifier: ReadClassifier,
        counters: ReadCounters,
        layout: OutputLayout,
        chunk_size: int = 1_000_000,
        n_workers: int = 1,
    ):
        """Initialize the runner.

        :param classifier: the read pair classifier
        :param counters: the run-wide QC counters to update
        :param layout: the output layout, chunk files go to its `chunk_dir`
        :param chunk_size: the number of read pairs per chunk
        :param n_workers: the number of worker threads classifying a chunk
        """
        self.classifier = classifier
        self.counters = counters
        self.layout = layout
        self.chunk_size = chunk_size
        self.n_workers = max(1, n_workers)

    def _classify_chunk(
        self,
        executor: futures.Executor,
        pairs: list[ReadPair],
        table: SampleTable,
    ) -> None:
        # One contiguous slice of the chunk per worker
        slice_size = -(-len(pairs) // self.n_workers)
        jobs = [
            executor.submit(
                classify_pairs,
                pairs[start : start + slice_size],
                self.classifier,
                table,
                self.counters,
            )
            for start in range(0, len(pairs), slice_size)
        ]
        for job in futures.as_completed(jobs):
            job.result()

    def _export_chunk(self, index: int, table: SampleTable) -> Path:
        path = self.layout.chunk_file(index)
        write_table(table.snapshot(), path, stage="chunk export")
        logger.debug("Exported %s sample/rbs counts to %s", len(table), path)
        return path

    def run(
        self,
        records1: Iterable[SequenceRecord],
        records2: Iterable[SequenceRecord],
    ) -> list[Path]:
        """Process both streams to the end.

        :param records1: the read 1 records
        :param records2: the read 2 records
        :returns: the chunk files written, in chunk order
        """
        chunk_files: list[Path] = []
        n_pairs = 0

        with futures.ThreadPoolExecutor(
            max_workers=self.n_workers, thread_name_prefix="demux"
        ) as executor:
            chunks = read_chunks(records1, records2, self.chunk_size)
            for index, pairs in enumerate(chunks):
                logger.info("Processing chunk %s (%s read pairs so far)", index, n_pairs)
                table = SampleTable()
                self._classify_chunk(executor, pairs, table)
                chunk_files.append(self._export_chunk(index, table))
                n_pairs += len(pairs)

        logger.info(
            "No more records to process: %s read pairs in %s chunks",
            n_pairs,
            len(chunk_files),
        )
        return chunk_files
