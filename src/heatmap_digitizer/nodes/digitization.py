"""Digitizer: colorbar calibration -> color index -> crop -> per-pixel lookup.

The core ``digitize`` is a pure function of the image and the calibration
input. Per-pixel lookup is split into row batches that run on a thread
pool; every batch owns a disjoint slice of the output rows and only reads
the shared index.
"""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from heatmap_digitizer.models import (
    CalibrationInput,
    ColorMap,
    CropRegion,
    ErrorType,
    PipelineConfig,
    PipelineState,
    PixelImage,
    ProcessingError,
    ProcessingStage,
)
from heatmap_digitizer.utils import cv_utils

from .color_index import ColorIndex
from .colorbar import calibrate
from .crop import compute_crop_region

ResultMatrix = NDArray[np.float64]


@dataclass(frozen=True)
class DigitizationResult:
    matrix: ResultMatrix
    crop_region: CropRegion
    color_map: ColorMap
    warning_codes: tuple[str, ...] = ()


def _row_batches(height: int, rows_per_batch: int) -> list[tuple[int, int]]:
    return [
        (start, min(start + rows_per_batch, height))
        for start in range(0, height, rows_per_batch)
    ]


def lookup_pixels(
    image: PixelImage,
    index: ColorIndex,
    max_workers: int = 1,
    rows_per_batch: int = 64,
    cancel_event: threading.Event | None = None,
) -> ResultMatrix | ProcessingError:
    """
    Query the index once per pixel, row-major.

    The cancel event is checked before each row batch starts; once it is set
    the remaining batches are skipped and the whole lookup is abandoned.
    """
    height, width = image.height, image.width
    matrix = np.full((height, width), np.nan, dtype=np.float64)
    batches = _row_batches(height, rows_per_batch)

    def _fill(bounds: tuple[int, int]) -> bool:
        if cancel_event is not None and cancel_event.is_set():
            return False
        start, end = bounds
        colors = image.normalized(start, end).reshape(-1, 3)
        matrix[start:end] = index.query(colors).reshape(end - start, width)
        return True

    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="digitize") as pool:
        completed = list(pool.map(_fill, batches))

    if not all(completed):
        return ProcessingError(
            stage=ProcessingStage.LOOKUP,
            error_type=ErrorType.CANCELLED,
            message="Digitization cancelled",
            details={"batches_done": sum(completed), "batches_total": len(batches)},
        )
    return matrix


def digitize(
    image: PixelImage,
    calibration: CalibrationInput,
    config: PipelineConfig | None = None,
    cancel_event: threading.Event | None = None,
) -> DigitizationResult | ProcessingError:
    """
    Reconstruct a value for every pixel of the plot area.

    Stops at the first failing step and returns its ProcessingError; no
    partial matrix is produced.
    """
    cfg = config or PipelineConfig()
    warnings: list[str] = []

    color_map = calibrate(
        image,
        calibration.colorbar_low,
        calibration.colorbar_high,
        calibration.value_low,
        calibration.value_high,
    )
    if isinstance(color_map, ProcessingError):
        return color_map
    warnings.append(f"I_COLORBAR_SAMPLES:{len(color_map)}")

    index = ColorIndex.build(color_map, max_distance=cfg.max_color_distance)
    if isinstance(index, ProcessingError):
        return index
    warnings.append(f"I_COLOR_INDEX_UNIQUE:{index.unique_count}")
    duplicates = index.sample_count - index.unique_count
    if duplicates > 0:
        warnings.append(f"W_COLORBAR_DUPLICATE_COLORS:{duplicates}")

    region = compute_crop_region(
        image.width,
        image.height,
        calibration.corner_origin,
        calibration.corner_x_extent,
        calibration.corner_y_extent,
        origin_corner=cfg.origin_corner,
    )
    if isinstance(region, ProcessingError):
        return region
    warnings.append(
        f"I_CROP_REGION:{region.x0},{region.y_top},{region.x1},{region.y_bottom}"
    )
    cropped = image.region(region.x0, region.y_top, region.x1, region.y_bottom)

    matrix = lookup_pixels(
        cropped,
        index,
        max_workers=cfg.max_workers,
        rows_per_batch=cfg.rows_per_batch,
        cancel_event=cancel_event,
    )
    if isinstance(matrix, ProcessingError):
        return matrix

    unmatched = int(np.count_nonzero(np.isnan(matrix)))
    if unmatched:
        warnings.append(f"W_UNMATCHED_PIXELS:{unmatched}")

    return DigitizationResult(
        matrix=matrix,
        crop_region=region,
        color_map=color_map,
        warning_codes=tuple(warnings),
    )


def digitize_node(state: PipelineState) -> PipelineState:
    """Graph node: run the digitizer on the loaded image."""
    image = state.image
    if image is None:
        image = cv_utils.load_image(state.image_path, stage=ProcessingStage.LOAD)
        if isinstance(image, ProcessingError):
            return state.model_copy(update={"errors": state.errors + [image]})

    result = digitize(image, state.calibration, state.config)
    if isinstance(result, ProcessingError):
        return state.model_copy(update={"image": image, "errors": state.errors + [result]})

    return state.model_copy(
        update={
            "image": image,
            "color_map": result.color_map,
            "crop_region": result.crop_region,
            "matrix": result.matrix,
            "warnings": state.warnings + list(result.warning_codes),
        }
    )


__all__ = ["DigitizationResult", "ResultMatrix", "digitize", "digitize_node", "lookup_pixels"]
