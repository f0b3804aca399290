"""Copyright © 2024 Pixelgen Technologies AB."""

from uaspire.config.config_class import DesignConfig, load_designs_package
from uaspire.config.config_instance import uaspire_config
from uaspire.config.design import DemuxDesign
from uaspire.config.utils import load_yaml_file

__all__ = [
    "DemuxDesign",
    "DesignConfig",
    "load_designs_package",
    "load_yaml_file",
    "uaspire_config",
]
