"""Colorbar calibration: sample one pixel column and assign linear values."""

import numpy as np

from heatmap_digitizer.models import (
    ColorMap,
    ColorSample,
    ErrorType,
    PixelCoordinate,
    PixelImage,
    ProcessingError,
    ProcessingStage,
)


def sample_column(low: PixelCoordinate, high: PixelCoordinate) -> int:
    """Horizontal midpoint of the two colorbar clicks, rounded half up."""
    return (low.x + high.x + 1) // 2


def calibrate(
    image: PixelImage,
    colorbar_low: PixelCoordinate,
    colorbar_high: PixelCoordinate,
    value_low: float,
    value_high: float,
) -> ColorMap | ProcessingError:
    """
    Build the ordered color -> value lookup from a vertical colorbar.

    A single column is sampled between the two clicks so that a border
    drawn around the colorbar does not leak into the samples. Values are
    paired with their endpoint: the row of ``colorbar_low`` gets
    ``value_low`` exactly, the row of ``colorbar_high`` gets ``value_high``
    exactly, and rows in between are linearly interpolated.

    Returns:
        ColorMap with one sample per row in ascending row order, or
        ProcessingError (invalid_colorbar_region)
    """
    x = sample_column(colorbar_low, colorbar_high)
    if colorbar_low.y <= colorbar_high.y:
        y_lo, v_lo, y_hi, v_hi = colorbar_low.y, value_low, colorbar_high.y, value_high
    else:
        y_lo, v_lo, y_hi, v_hi = colorbar_high.y, value_high, colorbar_low.y, value_low

    if not (0 <= y_lo < y_hi < image.height and 0 <= x < image.width):
        return ProcessingError(
            stage=ProcessingStage.CALIBRATE,
            error_type=ErrorType.INVALID_COLORBAR_REGION,
            message=(
                f"Invalid colorbar segment x={x} y=[{y_lo}, {y_hi}] "
                f"for {image.width}x{image.height} image"
            ),
            details={
                "x": x,
                "y_lo": y_lo,
                "y_hi": y_hi,
                "width": image.width,
                "height": image.height,
            },
        )

    # linspace pins both endpoints exactly
    values = np.linspace(float(v_lo), float(v_hi), y_hi - y_lo + 1)
    column = np.clip(image.normalized(y_lo, y_hi + 1)[:, x, :], 0.0, 1.0)

    samples = tuple(
        ColorSample(r=float(rgb[0]), g=float(rgb[1]), b=float(rgb[2]), value=float(value))
        for rgb, value in zip(column, values)
    )
    return ColorMap(samples=samples, sample_column=x, y_lo=y_lo, y_hi=y_hi)
