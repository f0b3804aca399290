"""Helpers for reading configuration files.

Copyright © 2024 Pixelgen Technologies AB.
"""

from pathlib import Path
from typing import Any

from ruamel import yaml

from uaspire.types import PathType


def load_yaml_file(path: PathType) -> Any:
    """
    Load an arbitrary yaml file.

    :param path: path to the yaml file
    :raises FileNotFoundError: If the path does not exist
    :raises TypeError: If the path is not a yaml file
    :returns: a yaml object
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"{path} is not a file")

    if path.suffix not in (".yaml", ".yml"):
        raise TypeError(f"{path} is not a yaml file")

    yaml_loader = yaml.YAML(typ="safe")
    with open(path, "r") as cf:
        data = yaml_loader.load(cf)

    return data
