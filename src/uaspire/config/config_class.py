"""Registry of the assay designs available to uaspire.

Copyright © 2024 Pixelgen Technologies AB.
"""

from __future__ import annotations

import importlib.resources
from typing import Dict, List, Optional

from uaspire.config.design import DemuxDesign
from uaspire.exceptions import DesignError
from uaspire.types import PathType


class DesignConfig:
    """Class containing the available assay designs."""

    def __init__(self, designs: Optional[List[DemuxDesign]] = None) -> None:
        """Initialize the config object."""
        self.designs: Dict[str, DemuxDesign] = {}

        if designs is not None:
            self.designs.update({d.name: d for d in designs})

    def load_design(self, path: PathType) -> DemuxDesign:
        """Load a design from a yaml file and register it."""
        design = DemuxDesign.from_yaml(path)
        self.designs[design.name] = design
        return design

    def list_design_names(self) -> List[str]:
        """Return the sorted names of all registered designs."""
        return sorted(self.designs)

    def get_design(self, design_name: str) -> DemuxDesign:
        """Get a design by name.

        :raises DesignError: if no design with that name is registered
        """
        design = self.designs.get(design_name)
        if design is None:
            raise DesignError(
                f"Unknown design {design_name}, "
                f"available designs are: {', '.join(self.list_design_names())}"
            )
        return design


def load_designs_package(config: DesignConfig, package_name: str) -> DesignConfig:
    """Load the default designs from a resources package.

    :param config: The config object to load designs into
    :param package_name: The name of the package to load designs from
    :return: The updated config object
    """
    for resource in importlib.resources.files(package_name).iterdir():
        if resource.is_file() and resource.name.endswith((".yaml", ".yml")):
            with importlib.resources.as_file(resource) as file_path:
                config.load_design(file_path)

    return config
