"""Tests for reading paired FASTQ files and the output layout.

Copyright © 2024 Pixelgen Technologies AB.
"""

import pytest

from tests.reads import make_read1, make_read2, write_fastq_pair
from uaspire.demux.fastq import open_paired_reads
from uaspire.demux.layout import OutputLayout
from uaspire.exceptions import InputFormatError, SequenceEncodingError, TableIOError


def test_open_paired_reads(tmp_path):
    pairs = [(make_read1(), make_read2()), (make_read1(tail=""), make_read2(tail=""))]
    read1, read2 = write_fastq_pair(tmp_path, pairs)

    with open_paired_reads(read1, read2) as (records1, records2):
        sequences = [(r1.sequence, r2.sequence) for r1, r2 in zip(records1, records2)]

    assert sequences == pairs


def test_open_paired_reads_unknown_format(tmp_path):
    read1, _ = write_fastq_pair(tmp_path, [(make_read1(), make_read2())])
    read2 = tmp_path / "reads_R2.fastq"
    read2.write_text("this is not a sequence file\n")

    with pytest.raises(InputFormatError):
        with open_paired_reads(read1, read2):
            pass


def test_output_layout_paths(tmp_path):
    layout = OutputLayout.for_sample(tmp_path, "s1")

    assert layout.chunk_file(12) == tmp_path / "tmp/parquet/chunk_000000012.parquet"
    assert layout.qc_file == tmp_path / "data/qc/sample=s1/part-0.parquet"
    assert (
        layout.partition_dir("ATCACG", "CGATGT")
        == tmp_path / "data/counts/sample=s1/barcode1=ATCACG/barcode2=CGATGT"
    )
    assert layout.report_file == tmp_path / "s1.report.json"
    assert layout.parameters_file == tmp_path / "s1.meta.json"


def test_output_layout_create_is_idempotent(tmp_path):
    layout = OutputLayout.for_sample(tmp_path / "out", "s1")
    layout.create()
    marker = layout.counts_dir / "existing.txt"
    marker.write_text("x")

    layout.create()

    assert marker.read_text() == "x"
    assert layout.chunk_dir.is_dir()
    assert layout.qc_dir.is_dir()


def test_output_layout_create_fails_on_file(tmp_path):
    root = tmp_path / "out"
    root.write_text("not a directory")

    with pytest.raises(TableIOError) as exc_info:
        OutputLayout.for_sample(root, "s1").create()

    assert exc_info.value.stage == "directory creation"


def test_open_paired_reads_non_ascii_sequence(tmp_path):
    read1 = tmp_path / "reads_R1.fastq"
    read1.write_text("@read0 1:N:0\nACGTÉ\n+\nIIIII\n", encoding="utf-8")
    _, read2 = write_fastq_pair(tmp_path, [(make_read1(), make_read2())])

    with pytest.raises(SequenceEncodingError, match="reads_R1.fastq"):
        with open_paired_reads(read1, read2) as (records1, _):
            list(records1)
