"""Assay design describing where barcodes, anchor and RBS sit in a read pair.

Copyright © 2024 Pixelgen Technologies AB.
"""

from __future__ import annotations

import re

import pydantic

from uaspire.config.utils import load_yaml_file
from uaspire.types import PathType

try:
    from typing import Self
except ImportError:
    from typing_extensions import Self

_DNA_RE = re.compile(r"^[ACGT]+$")


def _check_dna(value: str, field: str) -> str:
    if not _DNA_RE.match(value):
        raise ValueError(f"{field} must be a non-empty ACGT sequence, got {value!r}")
    return value


class DemuxDesign(pydantic.BaseModel):
    """The layout of a uASPIre read pair.

    :ivar name: the unique name of the design
    :ivar description: a free text description
    :ivar barcodes_1: the allowed barcodes in read 1
    :ivar barcodes_2: the allowed barcodes in read 2
    :ivar barcode_length: the length of all barcodes
    :ivar anchor: the constant region searched for in read 2
    :ivar anchor_window: the 1-based, inclusive (start, end) positions of read 2
        in which the anchor must be found
    :ivar max_n_count: the maximum number of N bases tolerated in both reads combined
    :ivar non_flipped_motif: the discriminator in read 1 for the non-flipped orientation
    :ivar flipped_motif: the discriminator in read 1 for the flipped orientation
    :ivar discriminator_offset: the number of bases between barcode 1 and the discriminator
    :ivar rbs_length: the length of the RBS that follows the anchor
    """

    model_config = pydantic.ConfigDict(frozen=True)

    name: str
    description: str = ""
    barcodes_1: tuple[str, ...]
    barcodes_2: tuple[str, ...]
    barcode_length: int = pydantic.Field(..., ge=1)
    anchor: str
    anchor_window: tuple[int, int]
    max_n_count: int = pydantic.Field(..., ge=0)
    non_flipped_motif: str
    flipped_motif: str
    discriminator_offset: int = pydantic.Field(..., ge=0)
    rbs_length: int = pydantic.Field(..., ge=1)

    @pydantic.field_validator("anchor", "non_flipped_motif", "flipped_motif")
    @classmethod
    def _validate_motif(cls, value: str, info: pydantic.ValidationInfo) -> str:
        return _check_dna(value, str(info.field_name))

    @pydantic.field_validator("anchor_window")
    @classmethod
    def _validate_window(cls, value: tuple[int, int]) -> tuple[int, int]:
        start, end = value
        if start < 1:
            raise ValueError("anchor_window start must be 1 or larger")
        if start > end:
            raise ValueError("anchor_window start must not be larger than its end")
        return value

    @pydantic.model_validator(mode="after")
    def _validate_barcodes(self) -> Self:
        for field in ("barcodes_1", "barcodes_2"):
            barcodes = getattr(self, field)
            if not barcodes:
                raise ValueError(f"{field} must contain at least one barcode")
            for barcode in barcodes:
                _check_dna(barcode, field)
                if len(barcode) != self.barcode_length:
                    raise ValueError(
                        f"{field} barcode {barcode} does not have length {self.barcode_length}"
                    )
        return self

    @classmethod
    def from_yaml(cls, path: PathType) -> Self:
        """Load a design from a yaml file.

        :param path: the path to the yaml file
        :returns: the validated design
        """
        return cls.model_validate(load_yaml_file(path))

    @property
    def anchor_slice(self) -> slice:
        """Return the 0-based slice of read 2 searched for the anchor."""
        start, end = self.anchor_window
        return slice(start - 1, end)
