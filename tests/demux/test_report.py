"""Tests for the QC table and the demux sample report.

Copyright © 2024 Pixelgen Technologies AB.
"""

import json

import polars as pl
import pytest

from uaspire.demux.classify import FailureReason
from uaspire.demux.counters import COUNTS_SCHEMA, ReadCountsSnapshot
from uaspire.demux.report import DemuxSampleReport, write_qc_table
from uaspire.demux.tables import read_table


@pytest.fixture(name="snapshot")
def snapshot_fixture() -> ReadCountsSnapshot:
    failures = {reason: 0 for reason in FailureReason}
    failures[FailureReason.CONSTANT_SEQ] = 3
    failures[FailureReason.BARCODE1] = 1
    return ReadCountsSnapshot(total=10, valid=6, failures=failures)


@pytest.fixture(name="merged")
def merged_fixture() -> pl.DataFrame:
    return pl.DataFrame(
        [
            ("CGATGT", "ATCACG", "AAAA", 2, 1),
            ("CGATGT", "ATCACG", "CCCC", 1, 0),
            ("ACAGTG", "GCCAAT", "AAAA", 0, 2),
        ],
        schema=COUNTS_SCHEMA,
        orient="row",
    )


def test_write_qc_table(snapshot, layout):
    path = write_qc_table(snapshot, layout)

    assert path == layout.root / "data" / "qc" / "sample=sample" / "part-0.parquet"
    qc = read_table(path, "test")
    assert qc.rows() == [
        ("total", 10),
        ("valid", 6),
        ("base_calls", 0),
        ("constant_seq", 3),
        ("constant_pos", 0),
        ("barcode1", 1),
        ("barcode2", 0),
        ("disc_seq", 0),
        ("disc_pos", 0),
    ]


def test_demux_sample_report_from_run(snapshot, merged):
    report = DemuxSampleReport.from_run("sample", snapshot, merged)

    assert report.sample_id == "sample"
    assert report.input_reads == 10
    assert report.valid_reads == 6
    assert report.failed_reads == 4
    assert report.constant_seq_reads == 3
    assert report.barcode1_reads == 1
    assert report.disc_pos_reads == 0
    assert report.fraction_valid_reads == pytest.approx(0.6)
    assert report.sample_read_counts == [
        ("ACAGTG", "GCCAAT", 2),
        ("CGATGT", "ATCACG", 4),
    ]


def test_demux_sample_report_no_reads():
    failures = {reason: 0 for reason in FailureReason}
    report = DemuxSampleReport.from_run(
        "empty",
        ReadCountsSnapshot(total=0, valid=0, failures=failures),
        pl.DataFrame(schema=COUNTS_SCHEMA),
    )

    assert report.fraction_valid_reads == 0.0
    assert report.sample_read_counts == []


def test_demux_sample_report_json_file(snapshot, merged, tmp_path):
    report = DemuxSampleReport.from_run("sample", snapshot, merged)
    path = tmp_path / "reports" / "sample.report.json"

    report.write_json_file(path, indent=4)

    data = json.loads(path.read_text())
    assert data["fraction_valid_reads"] == pytest.approx(0.6)
    assert data["sample_read_counts"] == [["ACAGTG", "GCCAAT", 2], ["CGATGT", "ATCACG", 4]]
    assert DemuxSampleReport.from_json(path) == report
