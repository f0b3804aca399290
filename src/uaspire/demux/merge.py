"""Merge the per-chunk count tables and write the per-sample partitions.

Copyright © 2024 Pixelgen Technologies AB.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Sequence

import polars as pl

from uaspire.demux.counters import COUNTS_SCHEMA
from uaspire.demux.layout import OutputLayout
from uaspire.demux.tables import (
    TABLE_ERRORS,
    concatenate,
    filter_equals,
    group_by_sum,
    read_table,
    write_table,
)
from uaspire.exceptions import TableIOError

logger = logging.getLogger(__name__)

KEY_COLUMNS = ("barcode1", "barcode2", "rbs")
COUNT_COLUMNS = ("non_flipped_count", "flipped_count")
PARTITION_COLUMNS = ("barcode1", "barcode2")


def merge_chunk_tables(chunk_files: Sequence[Path]) -> pl.DataFrame:
    """Combine the chunk tables into one table with a row per (barcode1, barcode2, rbs).

    The counts of keys seen in several chunks are summed, so the result does
    not depend on how the input was chunked.

    :param chunk_files: the chunk files to merge
    :returns: the merged counts with the chunk file schema
    :raises TableSchemaError: if a chunk file has unexpected columns
    :raises TableIOError: if a chunk file cannot be read
    """
    stage = "merge read-back"
    frame = concatenate(chunk_files, COUNTS_SCHEMA, stage=stage)
    merged = group_by_sum(frame, KEY_COLUMNS, COUNT_COLUMNS)
    try:
        result = merged.collect()
    except TABLE_ERRORS as exc:
        raise TableIOError(stage, chunk_files[0].parent, str(exc)) from exc

    result = result.select(list(COUNTS_SCHEMA)).cast(COUNTS_SCHEMA)
    logger.info(
        "Merged %s chunk files into %s sample/rbs counts",
        len(chunk_files),
        result.height,
    )
    return result


def _partition_file_name(index: int, n_files: int) -> str:
    width = len(str(n_files - 1))
    return f"part-{index:0{width}d}.parquet"


def remove_partition_files(counts_dir: Path) -> int:
    """Delete the count files of earlier runs, keeping the directories.

    :param counts_dir: the `data/counts/sample=<name>` directory
    :returns: the number of files removed
    :raises TableIOError: if a file cannot be removed
    """
    stale = sorted(Path(counts_dir).glob("barcode1=*/barcode2=*/part-*.parquet"))
    for path in stale:
        try:
            path.unlink()
        except OSError as exc:
            raise TableIOError("partition write", path, str(exc)) from exc

    if stale:
        logger.info("Removed %s count files of an earlier run", len(stale))
    return len(stale)


def write_partitioned_counts(
    merged: pl.DataFrame, layout: OutputLayout, partition_size: int
) -> list[Path]:
    """Write the merged counts as one directory per observed barcode pair.

    Each barcode pair gets the rows of its RBS sequences, sorted by `rbs`
    and split over files of at most `partition_size` rows. Barcode pairs
    without any rows are not written. Count files already present for the
    sample are removed first.

    :param merged: the merged counts, see :func:`merge_chunk_tables`
    :param layout: the output layout of the sample
    :param partition_size: the maximum number of rows per file
    :returns: the written files
    :raises TableIOError: if a directory or file cannot be written
    """
    if partition_size < 1:
        raise ValueError("partition_size must be at least one")

    stage = "partition write"
    remove_partition_files(layout.counts_dir)
    pairs = merged.select(PARTITION_COLUMNS).unique().sort(PARTITION_COLUMNS)
    written: list[Path] = []

    for barcode1, barcode2 in pairs.iter_rows():
        pair_rows = filter_equals(
            filter_equals(merged, "barcode1", barcode1), "barcode2", barcode2
        )
        if pair_rows.is_empty():
            continue

        pair_rows = pair_rows.drop(PARTITION_COLUMNS).sort("rbs")
        partition_dir = layout.partition_dir(barcode1, barcode2)
        try:
            partition_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise TableIOError(stage, partition_dir, str(exc)) from exc

        n_files = -(-pair_rows.height // partition_size)
        for index, part in enumerate(pair_rows.iter_slices(partition_size)):
            path = partition_dir / _partition_file_name(index, n_files)
            written.append(write_table(part, path, stage=stage))

        logger.debug(
            "Wrote %s rows for barcode1=%s barcode2=%s in %s files",
            pair_rows.height,
            barcode1,
            barcode2,
            n_files,
        )

    logger.info(
        "Wrote %s partition files for %s barcode pairs to %s",
        len(written),
        pairs.height,
        layout.counts_dir,
    )
    return written


def read_partitioned_counts(counts_dir: Path) -> pl.DataFrame:
    """Read all partition files of a sample back into one table.

    The barcode columns are restored from the partition directory names.

    :param counts_dir: the `data/counts/sample=<name>` directory
    :returns: a table with the chunk file schema
    """
    frames = []
    for path in sorted(Path(counts_dir).glob("barcode1=*/barcode2=*/*.parquet")):
        barcode1 = path.parent.parent.name.split("=", 1)[1]
        barcode2 = path.parent.name.split("=", 1)[1]
        part = read_table(path, stage="partition read")
        frames.append(
            part.with_columns(
                pl.lit(barcode1, dtype=pl.String).alias("barcode1"),
                pl.lit(barcode2, dtype=pl.String).alias("barcode2"),
            ).select(list(COUNTS_SCHEMA))
        )

    if not frames:
        return pl.DataFrame(schema=COUNTS_SCHEMA)
    return pl.concat(frames)


def remove_chunk_files(chunk_files: Iterable[Path], chunk_dir: Path) -> None:
    """Delete the intermediate chunk files, and their directory if left empty."""
    for path in chunk_files:
        path.unlink(missing_ok=True)

    for directory in (chunk_dir, chunk_dir.parent):
        if directory.is_dir() and not any(directory.iterdir()):
            directory.rmdir()
    logger.debug("Removed intermediate chunk files in %s", chunk_dir)
