"""Packaged assay designs.

Copyright © 2024 Pixelgen Technologies AB.
"""
