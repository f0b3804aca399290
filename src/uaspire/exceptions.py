"""
This module contains all the exception classes raised by uaspire.

Expected read classification failures are not exceptions, they are
counted as data. Everything defined here aborts a run.

Copyright © 2024 Pixelgen Technologies AB.
"""

from pathlib import Path


class UaspireBaseException(Exception):
    """Base class for all uaspire exceptions."""


class DesignError(UaspireBaseException):
    """Raised when an assay design cannot be found or loaded."""


class InputMismatchError(UaspireBaseException):
    """Raised when the two read files are not aligned record by record.

    This covers both mismatching record identifiers and one file
    running out of records before the other.
    """


class SequenceEncodingError(UaspireBaseException):
    """Raised when a read sequence is not valid ASCII text."""


class InputFormatError(UaspireBaseException):
    """Raised when a FASTQ file cannot be parsed.

    :ivar path: the file that failed to parse
    """

    def __init__(self, message: str, path: Path):
        """Initialize the exception.

        :param message: a description of the parse failure
        :param path: the file that failed to parse
        """
        super().__init__(f"{message} (in {path})")
        self.path = path


class TableIOError(UaspireBaseException):
    """Raised when a table cannot be written or read back from disk.

    :ivar stage: the processing stage that failed, e.g. "chunk export"
    :ivar path: the path that could not be written or read
    """

    def __init__(self, stage: str, path: Path, reason: str):
        """Initialize the exception.

        :param stage: the processing stage that failed
        :param path: the failing path
        :param reason: the underlying error message
        """
        super().__init__(f"{stage} failed for {path}: {reason}")
        self.stage = stage
        self.path = path


class TableSchemaError(UaspireBaseException):
    """Raised when a table on disk does not have the expected columns."""
