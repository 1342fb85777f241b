from collections.abc import Sequence

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, ConfigDict, Field, model_validator


class PixelCoordinate(BaseModel):
    """Integer pixel position, top-left origin, y growing downward."""

    model_config = ConfigDict(frozen=True)

    x: int
    y: int

    @model_validator(mode="before")
    @classmethod
    def _accept_pair(cls, value: object) -> object:
        """Allow ``[x, y]`` pairs, as written in calibration JSON files."""
        if isinstance(value, Sequence) and not isinstance(value, str):
            if len(value) != 2:
                raise ValueError(f"expected an (x, y) pair, got {len(value)} items")
            return {"x": value[0], "y": value[1]}
        return value


class CalibrationInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    corner_origin: PixelCoordinate
    corner_x_extent: PixelCoordinate
    corner_y_extent: PixelCoordinate
    colorbar_low: PixelCoordinate
    colorbar_high: PixelCoordinate
    value_low: float = Field(allow_inf_nan=False)
    value_high: float = Field(allow_inf_nan=False)


class ColorSample(BaseModel):
    model_config = ConfigDict(frozen=True)

    r: float = Field(ge=0.0, le=1.0)
    g: float = Field(ge=0.0, le=1.0)
    b: float = Field(ge=0.0, le=1.0)
    value: float

    @property
    def color(self) -> tuple[float, float, float]:
        return (self.r, self.g, self.b)


class ColorMap(BaseModel):
    """Colorbar samples, one per pixel row from ``y_lo`` to ``y_hi``."""

    model_config = ConfigDict(frozen=True)

    samples: tuple[ColorSample, ...]
    sample_column: int
    y_lo: int
    y_hi: int

    def __len__(self) -> int:
        return len(self.samples)

    def colors(self) -> NDArray[np.float64]:
        if not self.samples:
            return np.empty((0, 3), dtype=np.float64)
        return np.asarray([s.color for s in self.samples], dtype=np.float64)

    def values(self) -> NDArray[np.float64]:
        return np.asarray([s.value for s in self.samples], dtype=np.float64)


class CropRegion(BaseModel):
    """Half-open pixel rectangle ``[x0, x1) x [y_top, y_bottom)``."""

    model_config = ConfigDict(frozen=True)

    x0: int
    x1: int
    y_top: int
    y_bottom: int

    @property
    def width(self) -> int:
        return self.x1 - self.x0

    @property
    def height(self) -> int:
        return self.y_bottom - self.y_top
