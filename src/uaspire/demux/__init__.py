"""Entrypoint for demultiplexing functions.

Copyright © 2024 Pixelgen Technologies AB
"""

from .classify import (
    ClassifiedRead,
    FailureReason,
    Orientation,
    ReadClassifier,
    Sample,
    classify_read_pair,
)
from .process import DemuxResult, demux_fastq_pair

__all__ = [
    "ClassifiedRead",
    "DemuxResult",
    "FailureReason",
    "Orientation",
    "ReadClassifier",
    "Sample",
    "classify_read_pair",
    "demux_fastq_pair",
]
