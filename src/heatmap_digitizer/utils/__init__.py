"""Utility modules for heatmap-digitizer."""

from heatmap_digitizer.utils.cv_utils import (
    # Type aliases
    Image,
    # Image I/O
    load_image,
    to_rgb,
)

__all__ = [
    "Image",
    "load_image",
    "to_rgb",
]
