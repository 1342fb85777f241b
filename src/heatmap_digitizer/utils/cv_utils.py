"""
OpenCV helpers for reading chart images.

Functions follow the Result | ProcessingError pattern for error handling.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, TypeAlias

import cv2
from numpy.typing import NDArray

from heatmap_digitizer.models.image import PixelImage
from heatmap_digitizer.models.result import ErrorType, ProcessingError, ProcessingStage

# Use Any for dtype to avoid MatLike compatibility issues with OpenCV
Image: TypeAlias = NDArray[Any]  # BGR, BGRA or grayscale as decoded


def to_rgb(img: Image) -> Image:
    """Convert a decoded OpenCV image (gray, BGR or BGRA) to RGB, dropping alpha."""
    if img.ndim == 2:
        return cv2.cvtColor(img, cv2.COLOR_GRAY2RGB)
    channels = img.shape[2]
    if channels == 1:
        return cv2.cvtColor(img[:, :, 0], cv2.COLOR_GRAY2RGB)
    if channels == 4:
        return cv2.cvtColor(img, cv2.COLOR_BGRA2RGB)
    return cv2.cvtColor(img, cv2.COLOR_BGR2RGB)


def load_image(
    path: str | Path,
    stage: ProcessingStage = ProcessingStage.LOAD,
) -> PixelImage | ProcessingError:
    """
    Load an image from disk as an RGB PixelImage.

    Handles:
    - Corrupted images (cv2.imread failure)
    - Grayscale and RGBA images (converted to RGB, alpha dropped)
    - 16-bit images (kept at full depth, normalized on access)
    - File not found / permission errors

    Args:
        path: Path to image file
        stage: Processing stage for error reporting

    Returns:
        PixelImage or ProcessingError
    """
    path = Path(path)

    if not path.exists():
        return ProcessingError(
            stage=stage,
            error_type=ErrorType.FILE_NOT_FOUND,
            message=f"Image file not found: {path}",
            details={"path": str(path)},
        )

    try:
        # cv2.imread returns None on failure
        img: Image | None = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)

        if img is None:
            return ProcessingError(
                stage=stage,
                error_type=ErrorType.IMREAD_FAILED,
                message=f"Failed to read image (may be corrupted): {path}",
                details={"path": str(path)},
            )

        return PixelImage(to_rgb(img))

    except PermissionError:
        return ProcessingError(
            stage=stage,
            error_type=ErrorType.PERMISSION_DENIED,
            message=f"Permission denied reading: {path}",
            details={"path": str(path)},
        )
    except (OSError, ValueError, cv2.error) as e:
        return ProcessingError(
            stage=stage,
            error_type=ErrorType.IO_ERROR,
            message=f"Error reading image: {e}",
            details={"path": str(path), "error": str(e)},
        )
