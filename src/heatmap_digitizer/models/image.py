from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import NDArray


def _channel_scale(dtype: np.dtype[Any]) -> float:
    """Divisor that maps a channel dtype onto [0, 1]."""
    if np.issubdtype(dtype, np.integer):
        return float(np.iinfo(dtype).max)
    return 1.0


class PixelImage:
    """Read-only RGB raster, indexed ``pixels[y, x]`` with a top-left origin.

    Channels keep their decoded dtype (uint8, uint16 or float in [0, 1]);
    every color accessor returns normalized float64 components. The wrapped
    array is a non-writeable view, so the caller's buffer is never touched.
    """

    __slots__ = ("_pixels",)

    def __init__(self, pixels: NDArray[Any]) -> None:
        pixels = np.asarray(pixels)
        if pixels.ndim != 3 or pixels.shape[2] != 3:
            raise ValueError(f"expected an (height, width, 3) RGB array, got shape {pixels.shape}")
        view = pixels.view()
        view.flags.writeable = False
        self._pixels = view

    @property
    def pixels(self) -> NDArray[Any]:
        return self._pixels

    @property
    def width(self) -> int:
        return int(self._pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self._pixels.shape[0])

    def color_at(self, x: int, y: int) -> tuple[float, float, float]:
        scale = _channel_scale(self._pixels.dtype)
        r, g, b = (float(c) / scale for c in self._pixels[y, x])
        return (r, g, b)

    def normalized(self, y_start: int = 0, y_end: int | None = None) -> NDArray[np.float64]:
        """Normalized float64 colors for rows ``[y_start, y_end)``."""
        rows = self._pixels[y_start:y_end]
        return rows.astype(np.float64) / _channel_scale(self._pixels.dtype)

    def region(self, x0: int, y0: int, x1: int, y1: int) -> PixelImage:
        return PixelImage(self._pixels[y0:y1, x0:x1])

    def __repr__(self) -> str:
        return f"PixelImage(width={self.width}, height={self.height}, dtype={self._pixels.dtype})"
