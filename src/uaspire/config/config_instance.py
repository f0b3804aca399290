"""Copyright © 2024 Pixelgen Technologies AB."""

from uaspire.config.config_class import DesignConfig, load_designs_package

designs_package = "uaspire.resources.designs"

uaspire_config = load_designs_package(DesignConfig(), designs_package)
