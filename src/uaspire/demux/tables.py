"""Reading, writing and combining Parquet tables.

I/O failures are re-raised as :class:`TableIOError` naming the stage
and path that failed.

Copyright © 2024 Pixelgen Technologies AB.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence

import polars as pl
import pyarrow as pa
import pyarrow.parquet as pq

from uaspire.exceptions import TableIOError, TableSchemaError

logger = logging.getLogger(__name__)

PARQUET_COMPRESSION = "zstd"

# Errors raised by polars and pyarrow for unreadable or unwritable files
TABLE_ERRORS = (OSError, pa.ArrowException, pl.exceptions.PolarsError)


def write_table(frame: pl.DataFrame, path: Path, stage: str) -> Path:
    """Write a table to a Parquet file.

    :param frame: the table to write
    :param path: the output file, its parent directory must exist
    :param stage: the processing stage, used in error messages
    :returns: the written path
    :raises TableIOError: if the file cannot be written
    """
    try:
        frame.write_parquet(path, compression=PARQUET_COMPRESSION)
    except TABLE_ERRORS as exc:
        raise TableIOError(stage, path, str(exc)) from exc
    logger.debug("Wrote %s rows to %s", frame.height, path)
    return path


def check_schema(path: Path, schema: Mapping[str, Any], stage: str) -> pa.Schema:
    """Verify that a Parquet file has exactly the given column names.

    :param path: the Parquet file
    :param schema: the expected columns
    :param stage: the processing stage, used in error messages
    :returns: the schema of the file
    :raises TableSchemaError: if the columns differ
    """
    try:
        file_schema = pq.read_schema(path)
    except TABLE_ERRORS as exc:
        raise TableIOError(stage, path, str(exc)) from exc

    if file_schema.names != list(schema):
        raise TableSchemaError(
            f"{path} has columns {file_schema.names}, expected {list(schema)}"
        )
    return file_schema


def read_table(path: Path, stage: str) -> pl.DataFrame:
    """Read a Parquet file into memory.

    :raises TableIOError: if the file cannot be read
    """
    try:
        return pl.read_parquet(path)
    except TABLE_ERRORS as exc:
        raise TableIOError(stage, path, str(exc)) from exc


def concatenate(
    paths: Sequence[Path], schema: Mapping[str, Any], stage: str
) -> pl.LazyFrame:
    """Lazily concatenate the rows of several Parquet files with the same schema.

    :param paths: the files to concatenate
    :param schema: the expected columns of every file
    :param stage: the processing stage, used in error messages
    :returns: a lazy frame over all rows, empty if `paths` is empty
    """
    if not paths:
        return pl.LazyFrame(schema=dict(schema))

    for path in paths:
        check_schema(path, schema, stage)

    return pl.scan_parquet(list(paths))


def group_by_sum(
    frame: pl.LazyFrame, key_columns: Sequence[str], sum_columns: Iterable[str]
) -> pl.LazyFrame:
    """Group rows by `key_columns` and sum `sum_columns` within each group."""
    return frame.group_by(list(key_columns)).agg(
        [pl.col(c).sum() for c in sum_columns]
    )


def filter_equals(frame: pl.DataFrame, column: str, value: Any) -> pl.DataFrame:
    """Return the rows where `column` equals `value`."""
    return frame.filter(pl.col(column) == value)
