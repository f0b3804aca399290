"""Classification of uASPIre read pairs.

A read pair is either assigned to a sample (a pair of barcodes) together
with its RBS sequence and orientation, or rejected with exactly one
:class:`FailureReason`. Checks run in a fixed order and stop at the first
failure, so the reason recorded is always the earliest failing check.

Copyright © 2024 Pixelgen Technologies AB.
"""

from __future__ import annotations

import enum
import typing
from dataclasses import dataclass

from uaspire.config.design import DemuxDesign


class FailureReason(enum.Enum):
    """The reason a read pair could not be assigned to a sample.

    The declaration order is the order of the checks and the row order
    of the QC summary.
    """

    BASE_CALLS = "base_calls"
    CONSTANT_SEQ = "constant_seq"
    CONSTANT_POS = "constant_pos"
    BARCODE1 = "barcode1"
    BARCODE2 = "barcode2"
    DISC_SEQ = "disc_seq"
    DISC_POS = "disc_pos"


class Orientation(enum.Enum):
    """The orientation of the reporter, given by the discriminator motif found."""

    NON_FLIPPED = "non_flipped"
    FLIPPED = "flipped"


@dataclass(frozen=True, slots=True)
class Sample:
    """A sample identified by one barcode from each read."""

    barcode1: str
    barcode2: str


class ClassifiedRead(typing.NamedTuple):
    """A read pair that was assigned to a sample."""

    sample: Sample
    rbs: str
    orientation: Orientation


ClassificationResult = typing.Union[ClassifiedRead, FailureReason]


class ReadClassifier:
    """Classify read pairs against a design.

    Instances hold no mutable state and can be shared between threads.
    """

    def __init__(self, design: DemuxDesign):
        """Initialize the classifier.

        :param design: the assay design to classify against
        """
        self.design = design
        self._barcodes_1 = frozenset(design.barcodes_1)
        self._barcodes_2 = frozenset(design.barcodes_2)
        self._window = design.anchor_slice
        self._anchor = design.anchor
        self._barcode_len = design.barcode_length
        self._rbs_len = design.rbs_length
        self._max_n = design.max_n_count
        self._non_flipped = design.non_flipped_motif
        self._flipped = design.flipped_motif
        # Distance from the start of barcode 1 to the start of the discriminator
        self._disc_distance = design.discriminator_offset + design.barcode_length

    def __repr__(self) -> str:
        """Return a string representation of the object."""
        return f"ReadClassifier(design={self.design.name})"

    def classify(self, sequence1: str, sequence2: str) -> ClassificationResult:
        """Classify a read pair.

        :param sequence1: the sequence of read 1
        :param sequence2: the sequence of read 2
        :returns: a :class:`ClassifiedRead` on success, otherwise the
            :class:`FailureReason` of the first failing check
        """
        if sequence1.count("N") + sequence2.count("N") > self._max_n:
            return FailureReason.BASE_CALLS

        window_start = self._window.start
        local_start = sequence2[self._window].find(self._anchor)
        if local_start == -1:
            return FailureReason.CONSTANT_SEQ

        anchor_start = window_start + local_start
        rbs_start = anchor_start + len(self._anchor)
        if (
            anchor_start < self._barcode_len
            or rbs_start + self._rbs_len > len(sequence2)
        ):
            return FailureReason.CONSTANT_POS

        rbs = sequence2[rbs_start : rbs_start + self._rbs_len]

        barcode2 = sequence2[anchor_start - self._barcode_len : anchor_start]
        if barcode2 not in self._barcodes_2:
            return FailureReason.BARCODE2

        orientation = Orientation.NON_FLIPPED
        disc_start = sequence1.find(self._non_flipped)
        if disc_start == -1:
            orientation = Orientation.FLIPPED
            disc_start = sequence1.find(self._flipped)
            if disc_start == -1:
                return FailureReason.DISC_SEQ

        if disc_start < self._disc_distance:
            return FailureReason.DISC_POS

        barcode1_start = disc_start - self._disc_distance
        barcode1 = sequence1[barcode1_start : barcode1_start + self._barcode_len]
        if barcode1 not in self._barcodes_1:
            return FailureReason.BARCODE1

        return ClassifiedRead(Sample(barcode1, barcode2), rbs, orientation)


def classify_read_pair(
    sequence1: str, sequence2: str, design: DemuxDesign
) -> ClassificationResult:
    """Classify a single read pair against a design.

    Convenience wrapper around :class:`ReadClassifier` for one-off calls;
    construct a classifier once when classifying many reads.
    """
    return ReadClassifier(design).classify(sequence1, sequence2)
