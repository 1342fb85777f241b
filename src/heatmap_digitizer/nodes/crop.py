"""Plot-area cropping from the three calibration corners."""

from heatmap_digitizer import config
from heatmap_digitizer.models import (
    CropRegion,
    ErrorType,
    OriginCorner,
    PixelCoordinate,
    PixelImage,
    ProcessingError,
    ProcessingStage,
)


def _vertical_bounds(
    origin_y: int,
    extent_y: int,
    origin_corner: OriginCorner,
) -> tuple[int, int]:
    """Return (y_top, y_bottom) for the given origin-corner convention."""
    if origin_corner == "bottom_left":
        return extent_y, origin_y
    if origin_corner == "top_left":
        return origin_y, extent_y
    return min(origin_y, extent_y), max(origin_y, extent_y)


def compute_crop_region(
    width: int,
    height: int,
    corner_origin: PixelCoordinate,
    corner_x_extent: PixelCoordinate,
    corner_y_extent: PixelCoordinate,
    origin_corner: OriginCorner = config.DEFAULT_ORIGIN_CORNER,
) -> CropRegion | ProcessingError:
    """
    Derive the crop rectangle for an image of the given size.

    Only ``corner_x_extent.x`` and ``corner_y_extent.y`` are read from the
    second and third corners. The rectangle is half-open and must be
    non-empty and inside the image; there is no fallback to the full image.

    Returns:
        CropRegion or ProcessingError (invalid_crop_region)
    """
    x0 = corner_origin.x
    x1 = corner_x_extent.x
    y_top, y_bottom = _vertical_bounds(corner_origin.y, corner_y_extent.y, origin_corner)

    x_ok = 0 <= x0 < x1 <= width
    y_ok = 0 <= y_top < y_bottom <= height
    if not (x_ok and y_ok):
        return ProcessingError(
            stage=ProcessingStage.CROP,
            error_type=ErrorType.INVALID_CROP_REGION,
            message=(
                f"Invalid crop region x=[{x0}, {x1}) y=[{y_top}, {y_bottom}) "
                f"for {width}x{height} image"
            ),
            details={
                "x0": x0,
                "x1": x1,
                "y_top": y_top,
                "y_bottom": y_bottom,
                "width": width,
                "height": height,
                "origin_corner": origin_corner,
            },
        )

    return CropRegion(x0=x0, x1=x1, y_top=y_top, y_bottom=y_bottom)


def crop(
    image: PixelImage,
    corner_origin: PixelCoordinate,
    corner_x_extent: PixelCoordinate,
    corner_y_extent: PixelCoordinate,
    origin_corner: OriginCorner = config.DEFAULT_ORIGIN_CORNER,
) -> PixelImage | ProcessingError:
    """Extract the plot area as a new view; the source image is untouched."""
    region = compute_crop_region(
        image.width,
        image.height,
        corner_origin,
        corner_x_extent,
        corner_y_extent,
        origin_corner=origin_corner,
    )
    if isinstance(region, ProcessingError):
        return region
    return image.region(region.x0, region.y_top, region.x1, region.y_bottom)
