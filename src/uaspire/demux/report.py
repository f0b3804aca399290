"""QC summary table and JSON sample report of a demux run.

Copyright © 2024 Pixelgen Technologies AB.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

import polars as pl
import pydantic

from uaspire.demux.counters import ReadCountsSnapshot
from uaspire.demux.layout import OutputLayout
from uaspire.demux.tables import write_table

try:
    from typing import Self
except ImportError:
    from typing_extensions import Self

logger = logging.getLogger(__name__)


def write_qc_table(snapshot: ReadCountsSnapshot, layout: OutputLayout) -> Path:
    """Write the QC counters to `data/qc/sample=<name>/part-0.parquet`.

    :param snapshot: the final counter values of the run
    :param layout: the output layout of the sample
    :returns: the written file
    :raises TableIOError: if the file cannot be written
    """
    path = write_table(snapshot.to_frame(), layout.qc_file, stage="QC write")
    logger.info(
        "Wrote QC summary to %s: %s of %s read pairs valid",
        path,
        snapshot.valid,
        snapshot.total,
    )
    return path


class SampleReport(pydantic.BaseModel):
    """Base class for uaspire reports.

    :ivar sample_id: The sample id for which the report is generated.
    """

    sample_id: str

    @classmethod
    def from_json(cls, p: Path) -> Self:
        """Initialize a report from a report file.

        :param p: The path to the report file.
        :return: A report object.
        """
        with open(p) as fp:
            json_data = json.load(fp)

        return cls(**json_data)

    def to_json(self, **kwargs: Any) -> str:
        """Dump the report to a json string.

        :param kwargs: Additional arguments to pass to `json.dumps`.
        :return: The report serialized to JSON as a string.
        """
        return json.dumps(self.model_dump(mode="json"), **kwargs)

    def write_json_file(self, p: str | os.PathLike, **kwargs: Any) -> None:
        """Write the JSON serialized report to a file.

        Non-existing intermediate directories in the path will be created.

        :param p: The path to the file to write.
        :param kwargs: Additional arguments to pass to pydantics `model_dump_json`.
        """
        Path(p).resolve().parent.mkdir(parents=True, exist_ok=True)

        with open(p, "w") as fp:
            fp.write(self.model_dump_json(**kwargs))


class DemuxSampleReport(SampleReport):
    """Model for a demux sample report."""

    input_reads: int = pydantic.Field(
        ..., description="The number of read pairs processed."
    )
    valid_reads: int = pydantic.Field(
        ..., description="The number of read pairs assigned to a sample."
    )
    failed_reads: int = pydantic.Field(
        ..., description="The number of read pairs rejected for any reason."
    )
    base_calls_reads: int = pydantic.Field(
        ...,
        description="The number of read pairs with too many ambiguous base calls.",
    )
    constant_seq_reads: int = pydantic.Field(
        ...,
        description="The number of read pairs without the anchor in its window.",
    )
    constant_pos_reads: int = pydantic.Field(
        ...,
        description="The number of read pairs where the anchor leaves no room for the barcode or the RBS.",
    )
    barcode1_reads: int = pydantic.Field(
        ..., description="The number of read pairs with an unknown barcode 1."
    )
    barcode2_reads: int = pydantic.Field(
        ..., description="The number of read pairs with an unknown barcode 2."
    )
    disc_seq_reads: int = pydantic.Field(
        ...,
        description="The number of read pairs where read 1 contains no orientation motif.",
    )
    disc_pos_reads: int = pydantic.Field(
        ...,
        description="The number of read pairs where the orientation motif leaves no room for barcode 1.",
    )
    sample_read_counts: list[tuple[str, str, int]] = pydantic.Field(
        default_factory=list,
        description="The number of valid read pairs per (barcode1, barcode2) sample.",
    )

    @pydantic.computed_field(  # type: ignore
        description="The fraction of read pairs assigned to a sample.",
        return_type=float,
    )
    @property
    def fraction_valid_reads(self) -> float:
        """Calculate the fraction of valid read pairs."""
        if self.input_reads == 0:
            return 0.0
        return self.valid_reads / self.input_reads

    @classmethod
    def from_run(
        cls, sample_id: str, snapshot: ReadCountsSnapshot, merged: pl.DataFrame
    ) -> Self:
        """Build the report from the final counters and the merged counts.

        :param sample_id: the sample name
        :param snapshot: the final counter values
        :param merged: the merged (barcode1, barcode2, rbs) counts
        :returns: the report
        """
        per_sample = (
            merged.group_by(["barcode1", "barcode2"])
            .agg(
                (pl.col("non_flipped_count").sum() + pl.col("flipped_count").sum())
                .cast(pl.Int64)
                .alias("reads")
            )
            .sort(["barcode1", "barcode2"])
        )
        failures = {
            f"{reason.value}_reads": count
            for reason, count in snapshot.failures.items()
        }
        return cls(
            sample_id=sample_id,
            input_reads=snapshot.total,
            valid_reads=snapshot.valid,
            failed_reads=snapshot.failed,
            sample_read_counts=list(per_sample.iter_rows()),
            **failures,
        )
