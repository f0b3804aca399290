"""Logging setup for uaspire.

Copyright © 2024 Pixelgen Technologies AB.
"""

import logging
import sys
import typing
from pathlib import Path

import click

from uaspire.types import PathType

root_logger = logging.getLogger()
uaspire_root_logger = logging.getLogger("uaspire")


class StyleDict(typing.TypedDict):
    """Style dictionary for kwargs to `click.style`."""

    fg: str


class ColorFormatter(logging.Formatter):
    """Click formatter with colored levels"""

    colors: dict[str, StyleDict] = {
        "debug": StyleDict(fg="blue"),
        "info": StyleDict(fg="green"),
        "warning": StyleDict(fg="yellow"),
        "error": StyleDict(fg="red"),
        "exception": StyleDict(fg="red"),
        "critical": StyleDict(fg="red"),
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format a record with colored level.

        :param record: The record to format.
        :returns str: A formatted log record.
        """
        if not record.exc_info:
            level = record.levelname.lower()
            msg = record.getMessage()
            if level in self.colors:
                timestamp = self.formatTime(record, self.datefmt)
                colored_level = click.style(
                    f"{level.upper():<10}", **self.colors[level]
                )
                prefix = f"{timestamp} [{colored_level}]  "
                msg = "\n".join(prefix + x for x in msg.splitlines())
            return msg
        return logging.Formatter.format(self, record)


class DefaultCliFormatter(logging.Formatter):
    """Plain formatter that only prefixes non-info messages with their level."""

    def format(self, record: logging.LogRecord) -> str:
        """Format a record for CLI output."""
        if not record.exc_info:
            level = record.levelname.lower()
            msg = record.getMessage()

            if level == "info":
                return msg

            return f"{level.upper()}: {msg}"
        return logging.Formatter.format(self, record)


class ClickHandler(logging.Handler):
    """Click logging handler.

    Messages are forwarded to the console using `click.echo`.

    :param use_stderr: Log to sys.stderr instead of sys.stdout.
    """

    def __init__(self, use_stderr: bool = True):
        """Initialize the click handler."""
        super().__init__()
        self._use_stderr = use_stderr

    def emit(self, record: logging.LogRecord) -> None:
        """Write the formatted record to the console."""
        try:
            msg = self.format(record)
            click.echo(msg, err=self._use_stderr)
        except Exception:
            self.handleError(record)


class LoggingSetup:
    """Logging setup for the uaspire command line.

    Console messages go through a :class:`ClickHandler`. When a log file is
    requested, records are also written to it by a :class:`logging.FileHandler`
    attached to the same logger, so records from the worker threads end up
    in the file in the order they were emitted.
    """

    FILE_FORMAT = (
        "%(asctime)s %(threadName)-10s %(name)s %(levelname)-8s %(message)s"
    )

    def __init__(self, log_file: PathType | None, verbose: bool, logger=None):
        """Initialize the logging setup.

        :param log_file: the filename of the log output
        :param verbose: enable verbose logging and console output
        :param logger: the logger to configure, default is the root logger
        """
        self.log_file = Path(log_file) if log_file is not None else None
        self.verbose = verbose
        self._root_logger = logger or logging.getLogger()
        self._file_handler: logging.FileHandler | None = None

    @property
    def log_level(self) -> int:
        """Return the level set on the configured logger."""
        return logging.DEBUG if self.verbose else logging.INFO

    def initialize(self):
        """Attach the console handler and, if requested, the log file handler."""
        handlers: list[logging.Handler] = []

        if self.log_file:
            self._file_handler = logging.FileHandler(str(self.log_file), mode="w")
            self._file_handler.setFormatter(logging.Formatter(self.FILE_FORMAT))
            handlers.append(self._file_handler)

        console_handler = ClickHandler()
        if self.verbose:
            console_handler.setFormatter(ColorFormatter(datefmt="%Y-%m-%d %H:%M:%S"))
        else:
            console_handler.setFormatter(DefaultCliFormatter())
        handlers.append(console_handler)

        self._root_logger.setLevel(self.log_level)
        self._root_logger.handlers = handlers

    def close(self):
        """Flush and detach the log file handler."""
        if self._file_handler is None:
            return
        self._root_logger.removeHandler(self._file_handler)
        self._file_handler.close()
        self._file_handler = None

    def __enter__(self):
        """Enter the context manager.

        This will initialize the logging setup.
        """
        self.initialize()
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        """Exit the context manager.

        This will close the log file.
        """
        self.close()
        # Reraise exception higher up the stack
        return False


def handle_unhandled_exception(exc_type, exc_value, exc_traceback):
    """Handle "unhandled" exceptions."""
    if issubclass(exc_type, KeyboardInterrupt):
        # Will call default excepthook
        sys.__excepthook__(exc_type, exc_value, exc_traceback)
        return

    uaspire_root_logger.critical(
        "Unhandled exception", exc_info=(exc_type, exc_value, exc_traceback)
    )


sys.excepthook = handle_unhandled_exception
