"""Packaged resources for uaspire.

Copyright © 2024 Pixelgen Technologies AB.
"""
