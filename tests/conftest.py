"""Configuration and shared files/objects for the testing framework.

Copyright © 2024 Pixelgen Technologies AB.
"""

import pytest

from uaspire.config import DemuxDesign, uaspire_config
from uaspire.demux.classify import ReadClassifier
from uaspire.demux.layout import OutputLayout


@pytest.fixture(name="design", scope="session")
def design_fixture() -> DemuxDesign:
    """Return the packaged default design."""
    return uaspire_config.get_design("uaspire-v1")


@pytest.fixture(name="wide_window_design", scope="session")
def wide_window_design_fixture(design: DemuxDesign) -> DemuxDesign:
    """Return the default design with the anchor searched from the start of read 2."""
    return DemuxDesign.model_validate(
        design.model_dump() | {"name": "wide-window", "anchor_window": (1, 30)}
    )


@pytest.fixture(name="classifier")
def classifier_fixture(design: DemuxDesign) -> ReadClassifier:
    return ReadClassifier(design)


@pytest.fixture(name="layout")
def layout_fixture(tmp_path) -> OutputLayout:
    layout = OutputLayout.for_sample(tmp_path / "output", "sample")
    layout.create()
    return layout
