"""Reading the two FASTQ files of a paired-end run as record streams.

Copyright © 2024 Pixelgen Technologies AB.
"""

from __future__ import annotations

import contextlib
import logging
from pathlib import Path
from typing import Iterator

import dnaio
from dnaio import SequenceRecord

from uaspire.exceptions import InputFormatError, SequenceEncodingError
from uaspire.types import PathType

logger = logging.getLogger(__name__)


def _format_error(exc: dnaio.exceptions.FileFormatError, path: Path) -> Exception:
    # dnaio validates the encoding while parsing
    if "non-ascii" in str(exc).lower():
        return SequenceEncodingError(
            f"{path} contains a record that is not valid ASCII: {exc}"
        )
    return InputFormatError(str(exc), path)


def _iter_records(reader, path: Path) -> Iterator[SequenceRecord]:
    try:
        yield from reader
    except dnaio.exceptions.FileFormatError as exc:
        raise _format_error(exc, path) from exc


@contextlib.contextmanager
def open_paired_reads(
    read1: PathType, read2: PathType
) -> Iterator[tuple[Iterator[SequenceRecord], Iterator[SequenceRecord]]]:
    """Open read 1 and read 2 as two independent record iterators.

    The files are read lazily and decompressed transparently. Records are
    not paired or checked here, see :func:`uaspire.demux.pipeline.read_chunks`.

    :param read1: the read 1 FASTQ file
    :param read2: the read 2 FASTQ file
    :yields: a tuple with one record iterator per file
    :raises InputFormatError: while iterating, if a file is not valid FASTQ
    :raises SequenceEncodingError: while iterating, if a record is not ASCII
    """
    path1, path2 = Path(read1), Path(read2)
    logger.info("Processing FASTQ files: %s and %s", path1, path2)

    with contextlib.ExitStack() as stack:
        reader1 = stack.enter_context(_open_reader(path1))
        reader2 = stack.enter_context(_open_reader(path2))
        yield _iter_records(reader1, path1), _iter_records(reader2, path2)


def _open_reader(path: Path):
    try:
        return dnaio.open(path, mode="r")
    except dnaio.exceptions.UnknownFileFormat as exc:
        raise InputFormatError(str(exc), path) from exc
    except dnaio.exceptions.FileFormatError as exc:
        raise _format_error(exc, path) from exc
