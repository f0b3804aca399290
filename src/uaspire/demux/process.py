"""Demultiplexing of a pair of FASTQ files into per-sample RBS counts.

Copyright © 2024 Pixelgen Technologies AB.
"""

from __future__ import annotations

import dataclasses
import logging
import multiprocessing as mp
from pathlib import Path

import polars as pl

from uaspire.config import DemuxDesign
from uaspire.demux.classify import ReadClassifier
from uaspire.demux.counters import ReadCounters, ReadCountsSnapshot
from uaspire.demux.fastq import open_paired_reads
from uaspire.demux.layout import OutputLayout
from uaspire.demux.merge import (
    merge_chunk_tables,
    remove_chunk_files,
    write_partitioned_counts,
)
from uaspire.demux.pipeline import ChunkedDemuxRunner
from uaspire.demux.report import write_qc_table
from uaspire.types import PathType

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class DemuxResult:
    """The outcome of :func:`demux_fastq_pair`.

    :ivar layout: the output layout that was written
    :ivar counters: the final QC counter values
    :ivar merged: the merged (barcode1, barcode2, rbs) counts
    :ivar partition_files: the written per-sample count files
    """

    layout: OutputLayout
    counters: ReadCountsSnapshot
    merged: pl.DataFrame
    partition_files: list[Path]


def demux_fastq_pair(
    read1: PathType,
    read2: PathType,
    sample_name: str,
    output: PathType,
    design: DemuxDesign,
    chunk_size: int = 1_000_000,
    partition_size: int = 1_000_000,
    threads: int = -1,
    remove_intermediates: bool = True,
) -> DemuxResult:
    """Classify all read pairs of two FASTQ files and count the RBS sequences per sample.

    The output directory is created if needed and existing directories are
    reused. Any error other than a rejected read pair aborts the run.

    :param read1: the read 1 FASTQ file
    :param read2: the read 2 FASTQ file
    :param sample_name: the name of the sample, used in the output paths
    :param output: the output root directory
    :param design: the design describing the read structure
    :param chunk_size: the number of read pairs classified per chunk
    :param partition_size: the maximum number of rows per count file
    :param threads: the number of worker threads, all available cores if < 1
    :param remove_intermediates: remove the per-chunk files after merging
    :returns: the counters and outputs of the run
    :raises InputMismatchError: if the two files are not aligned read pairs
    :raises SequenceEncodingError: if a sequence is not ASCII
    :raises InputFormatError: if a file is not valid FASTQ
    :raises TableIOError: if an output file cannot be written or read back
    """
    n_workers = threads if threads > 0 else max(mp.cpu_count(), 1)
    layout = OutputLayout.for_sample(output, sample_name)
    layout.create()

    counters = ReadCounters()
    runner = ChunkedDemuxRunner(
        classifier=ReadClassifier(design),
        counters=counters,
        layout=layout,
        chunk_size=chunk_size,
        n_workers=n_workers,
    )
    logger.info(
        "Demuxing sample %s with design %s using %s worker threads",
        sample_name,
        design.name,
        n_workers,
    )

    with open_paired_reads(read1, read2) as (records1, records2):
        chunk_files = runner.run(records1, records2)

    merged = merge_chunk_tables(chunk_files)
    partition_files = write_partitioned_counts(merged, layout, partition_size)

    if remove_intermediates:
        remove_chunk_files(chunk_files, layout.chunk_dir)

    snapshot = counters.snapshot()
    write_qc_table(snapshot, layout)

    return DemuxResult(
        layout=layout,
        counters=snapshot,
        merged=merged,
        partition_files=partition_files,
    )
