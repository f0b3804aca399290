"""
Tests for config module

Copyright © 2024 Pixelgen Technologies AB.
"""

import pydantic
import pytest

from uaspire.config import (
    DemuxDesign,
    DesignConfig,
    load_designs_package,
    load_yaml_file,
    uaspire_config,
)
from uaspire.exceptions import DesignError

CUSTOM_DESIGN = """
name: custom
barcode_length: 4
barcodes_1: [ACGT, TTTT]
barcodes_2: [GGGG]
anchor: GAGCTCGCAT
anchor_window: [5, 30]
max_n_count: 2
non_flipped_motif: GGGTTTGTACCGTACAC
flipped_motif: GCCCGGATGATCCTGAC
discriminator_offset: 3
rbs_length: 12
"""


def test_config_creation():
    config = DesignConfig()
    load_designs_package(config, "uaspire.resources.designs")

    assert {"uaspire-v1"}.issubset(config.designs)

    design = config.get_design("uaspire-v1")
    assert design.name == "uaspire-v1"


def test_default_design_values():
    design = uaspire_config.get_design("uaspire-v1")

    assert design.max_n_count == 6
    assert design.barcode_length == 6
    assert design.barcodes_1 == (
        "ATCACG",
        "CGATGT",
        "CTTGTA",
        "GCCAAT",
        "ACAGTG",
        "ACTTGA",
    )
    assert design.barcodes_2 == design.barcodes_1
    assert design.anchor == "GAGCTCGCAT"
    assert design.anchor_window == (7, 24)
    assert design.anchor_slice == slice(6, 24)
    assert design.non_flipped_motif == "GGGTTTGTACCGTACAC"
    assert design.flipped_motif == "GCCCGGATGATCCTGAC"
    assert design.discriminator_offset == 6
    assert design.rbs_length == 17


def test_unknown_design():
    with pytest.raises(DesignError, match="uaspire-v1"):
        uaspire_config.get_design("does-not-exist")


def test_load_design_from_yaml(tmp_path):
    path = tmp_path / "custom.yaml"
    path.write_text(CUSTOM_DESIGN)

    config = DesignConfig()
    design = config.load_design(path)

    assert config.list_design_names() == ["custom"]
    assert design.barcodes_1 == ("ACGT", "TTTT")
    assert design.anchor_slice == slice(4, 30)
    assert design.description == ""


def test_load_yaml_file_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_yaml_file(tmp_path / "missing.yaml")

    path = tmp_path / "design.json"
    path.write_text("{}")
    with pytest.raises(TypeError):
        load_yaml_file(path)


@pytest.mark.parametrize(
    "changes",
    [
        {"barcodes_1": ("ACGTA",)},
        {"barcodes_2": ()},
        {"barcodes_1": ("ACGN",)},
        {"anchor": ""},
        {"non_flipped_motif": "ACGU"},
        {"anchor_window": (0, 10)},
        {"anchor_window": (10, 5)},
        {"barcode_length": 0},
        {"rbs_length": 0},
        {"max_n_count": -1},
        {"discriminator_offset": -1},
    ],
)
def test_invalid_design(tmp_path, changes):
    path = tmp_path / "custom.yaml"
    path.write_text(CUSTOM_DESIGN)
    data = load_yaml_file(path) | changes

    with pytest.raises(pydantic.ValidationError):
        DemuxDesign.model_validate(data)


def test_design_is_frozen():
    design = uaspire_config.get_design("uaspire-v1")

    with pytest.raises(pydantic.ValidationError):
        design.max_n_count = 10
