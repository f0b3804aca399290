"""Top-level package for uaspire.

Copyright © 2024 Pixelgen Technologies AB.
"""

from importlib import metadata

__version__ = "0.0.0"

try:
    __version__ = metadata.version("uaspire")
except metadata.PackageNotFoundError:
    pass
