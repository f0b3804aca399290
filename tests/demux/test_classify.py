"""Tests for the read pair classifier.

Copyright © 2024 Pixelgen Technologies AB.
"""

import pytest

from tests.reads import (
    ANCHOR,
    FLIPPED,
    NON_FLIPPED,
    RBS,
    make_read1,
    make_read2,
    mixed_read_pairs,
)
from uaspire.demux.classify import (
    ClassifiedRead,
    FailureReason,
    Orientation,
    ReadClassifier,
    Sample,
    classify_read_pair,
)


def test_classify_non_flipped(classifier):
    result = classifier.classify(make_read1(), make_read2())

    assert result == ClassifiedRead(
        sample=Sample("CGATGT", "ATCACG"),
        rbs=RBS,
        orientation=Orientation.NON_FLIPPED,
    )


def test_classify_flipped(classifier):
    result = classifier.classify(make_read1(motif=FLIPPED), make_read2())

    assert isinstance(result, ClassifiedRead)
    assert result.orientation is Orientation.FLIPPED
    assert result.sample == Sample("CGATGT", "ATCACG")
    assert result.rbs == RBS


def test_classify_non_flipped_motif_takes_priority(classifier):
    result = classifier.classify(make_read1(tail=FLIPPED), make_read2())

    assert isinstance(result, ClassifiedRead)
    assert result.orientation is Orientation.NON_FLIPPED


def test_classify_non_flipped_motif_used_even_when_flipped_comes_first(classifier):
    # barcode 1 is looked up relative to the later non-flipped motif
    read1 = make_read1(motif=FLIPPED, tail=NON_FLIPPED)

    assert classifier.classify(read1, make_read2()) is FailureReason.BARCODE1


@pytest.mark.parametrize(
    "n_read1,n_read2,expected_valid",
    [(0, 0, True), (3, 3, True), (6, 0, True), (0, 6, True), (3, 4, False), (7, 0, False)],
)
def test_classify_ambiguous_base_limit(classifier, n_read1, n_read2, expected_valid):
    read1 = make_read1(tail="N" * n_read1)
    read2 = make_read2(tail="N" * n_read2)

    result = classifier.classify(read1, read2)

    if expected_valid:
        assert isinstance(result, ClassifiedRead)
    else:
        assert result is FailureReason.BASE_CALLS


def test_classify_missing_anchor(classifier):
    read2 = make_read2(anchor="A" * len(ANCHOR))

    assert classifier.classify(make_read1(), read2) is FailureReason.CONSTANT_SEQ


def test_classify_anchor_at_end_of_window(classifier):
    result = classifier.classify(make_read1(), make_read2(prefix="A" * 8))

    assert isinstance(result, ClassifiedRead)
    assert result.sample.barcode2 == "ATCACG"
    assert result.rbs == RBS


def test_classify_anchor_past_end_of_window(classifier):
    result = classifier.classify(make_read1(), make_read2(prefix="A" * 9))

    assert result is FailureReason.CONSTANT_SEQ


def test_classify_anchor_at_barcode_length_is_accepted(wide_window_design):
    classifier = ReadClassifier(wide_window_design)
    read2 = "ATCACG" + ANCHOR + RBS + "TTTT"

    result = classifier.classify(make_read1(), read2)

    assert isinstance(result, ClassifiedRead)
    assert result.sample.barcode2 == "ATCACG"


def test_classify_anchor_before_barcode_length_is_rejected(wide_window_design):
    classifier = ReadClassifier(wide_window_design)
    read2 = "TCACG" + ANCHOR + RBS + "TTTT"

    assert classifier.classify(make_read1(), read2) is FailureReason.CONSTANT_POS


def test_classify_truncated_rbs(classifier):
    read2 = make_read2(rbs=RBS[:16], tail="")

    assert classifier.classify(make_read1(), read2) is FailureReason.CONSTANT_POS


def test_classify_rbs_ending_at_end_of_read(classifier):
    result = classifier.classify(make_read1(), make_read2(tail=""))

    assert isinstance(result, ClassifiedRead)
    assert result.rbs == RBS


def test_classify_unknown_barcode2(classifier):
    read2 = make_read2(barcode2="GGGGGG")

    assert classifier.classify(make_read1(), read2) is FailureReason.BARCODE2


def test_classify_missing_discriminator(classifier):
    read1 = make_read1(motif="A" * len(NON_FLIPPED))

    assert classifier.classify(read1, make_read2()) is FailureReason.DISC_SEQ


@pytest.mark.parametrize("spacer", ["", "C", "CCCCC"])
def test_classify_discriminator_too_close_to_start(classifier, spacer):
    read1 = make_read1(spacer=spacer)

    assert classifier.classify(read1, make_read2()) is FailureReason.DISC_POS


def test_classify_unknown_barcode1(classifier):
    read1 = make_read1(barcode1="GGGGGG")

    assert classifier.classify(read1, make_read2()) is FailureReason.BARCODE1


@pytest.mark.parametrize(
    "read1,read2,expected",
    [
        # too many N and no anchor
        (make_read1(tail="N" * 7), make_read2(anchor="A" * 10), FailureReason.BASE_CALLS),
        # no anchor and unknown barcode 1
        (make_read1(barcode1="GGGGGG"), make_read2(anchor="A" * 10), FailureReason.CONSTANT_SEQ),
        # unknown barcode 2 and no discriminator
        (make_read1(motif="A" * 17), make_read2(barcode2="GGGGGG"), FailureReason.BARCODE2),
        # no discriminator and unknown barcode 1
        (make_read1(barcode1="GGGGGG", motif="A" * 17), make_read2(), FailureReason.DISC_SEQ),
    ],
)
def test_classify_reports_first_failing_check(classifier, read1, read2, expected):
    assert classifier.classify(read1, read2) is expected


def test_classify_is_deterministic(classifier):
    for read1, read2 in mixed_read_pairs():
        assert classifier.classify(read1, read2) == classifier.classify(read1, read2)


def test_classify_read_pair_matches_classifier(design, classifier):
    for read1, read2 in mixed_read_pairs():
        assert classify_read_pair(read1, read2, design) == classifier.classify(
            read1, read2
        )


def test_classify_mixed_reads_outcomes(classifier):
    results = [classifier.classify(r1, r2) for r1, r2 in mixed_read_pairs()]

    valid = [r for r in results if isinstance(r, ClassifiedRead)]
    failures = [r for r in results if isinstance(r, FailureReason)]

    assert len(valid) == 5
    assert sorted(f.value for f in failures) == sorted(r.value for r in FailureReason)
