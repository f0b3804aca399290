"""Copyright © 2024 Pixelgen Technologies AB."""
