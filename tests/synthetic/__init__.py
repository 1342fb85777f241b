"""Synthetic heatmap fixtures with known ground truth.

Usage:
    from synthetic import gaussian_field, render_heatmap, write_png

    case = render_heatmap(gaussian_field(40, 60), vmin=-5.0, vmax=5.0, colormap="viridis")
    write_png(tmp_path / "heatmap.png", case.image)
"""

from . import scenario
from .renderer import (
    LEVELS,
    SyntheticHeatmap,
    colormap_lut,
    gaussian_field,
    render_heatmap,
    value_to_level,
    write_png,
)

__all__ = [
    "scenario",
    "LEVELS",
    "SyntheticHeatmap",
    "colormap_lut",
    "gaussian_field",
    "render_heatmap",
    "value_to_level",
    "write_png",
]
