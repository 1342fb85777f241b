"""Point collection for an interactive front end.

Turns clicks on a scaled-to-fit image view into a CalibrationInput: three
plot corners, then two colorbar points each followed by the value typed for
it. The selector only holds pixel coordinates; drawing markers and asking
for values is the front end's job.
"""

from __future__ import annotations

import math
from enum import Enum

from heatmap_digitizer.models import CalibrationInput, PixelCoordinate

CORNER_COUNT = 3
COLORBAR_POINT_COUNT = 2


class SelectionError(RuntimeError):
    """Raised on an action the current selection state does not allow."""


class SelectionState(str, Enum):
    IDLE = "idle"
    SELECTING_CORNERS = "selecting_corners"
    SELECTING_COLORBAR = "selecting_colorbar"
    AWAITING_VALUE = "awaiting_value"
    READY = "ready"


def fit_scale(view_size: tuple[float, float], image_size: tuple[int, int]) -> float:
    """Scale of an image drawn aspect-preserving inside a view."""
    view_w, view_h = view_size
    img_w, img_h = image_size
    if img_w <= 0 or img_h <= 0 or view_w <= 0 or view_h <= 0:
        raise ValueError(f"sizes must be positive, got view={view_size} image={image_size}")
    return min(view_w / img_w, view_h / img_h)


def display_to_pixel(
    point: tuple[float, float],
    view_size: tuple[float, float],
    image_size: tuple[int, int],
) -> PixelCoordinate:
    scale = fit_scale(view_size, image_size)
    return PixelCoordinate(x=int(point[0] / scale), y=int(point[1] / scale))


def pixel_to_display(
    pixel: PixelCoordinate,
    view_size: tuple[float, float],
    image_size: tuple[int, int],
) -> tuple[float, float]:
    scale = fit_scale(view_size, image_size)
    return (pixel.x * scale, pixel.y * scale)


class PointSelector:
    """
    idle -> selecting_corners -> selecting_colorbar -> awaiting_value -> ready

    Corner clicks are, in order, the plot origin, a point on the far x edge
    and a point on the far y edge. The first colorbar click is paired with
    the first value entered and becomes ``colorbar_low``.
    """

    def __init__(self) -> None:
        self.state = SelectionState.IDLE
        self.corners: list[PixelCoordinate] = []
        self.colorbar: list[PixelCoordinate] = []
        self.values: list[float] = []

    @property
    def has_corners(self) -> bool:
        return len(self.corners) == CORNER_COUNT

    def reset(self) -> None:
        self.state = SelectionState.IDLE
        self.corners.clear()
        self.colorbar.clear()
        self.values.clear()

    def begin_corners(self) -> None:
        if self.state == SelectionState.AWAITING_VALUE:
            raise SelectionError("a colorbar value is still pending")
        self.corners.clear()
        self.state = SelectionState.SELECTING_CORNERS

    def begin_colorbar(self) -> None:
        if not self.has_corners:
            raise SelectionError("select the three plot corners first")
        if self.state == SelectionState.AWAITING_VALUE:
            raise SelectionError("a colorbar value is still pending")
        self.colorbar.clear()
        self.values.clear()
        self.state = SelectionState.SELECTING_COLORBAR

    def click(self, pixel: PixelCoordinate) -> SelectionState:
        """Record a click already converted to pixel coordinates."""
        if self.state == SelectionState.SELECTING_CORNERS:
            self.corners.append(pixel)
            if self.has_corners:
                # Re-aligning the axes keeps a finished colorbar selection.
                complete = len(self.values) == COLORBAR_POINT_COUNT
                self.state = SelectionState.READY if complete else SelectionState.IDLE
        elif self.state == SelectionState.SELECTING_COLORBAR:
            self.colorbar.append(pixel)
            self.state = SelectionState.AWAITING_VALUE
        else:
            raise SelectionError(f"clicks are not accepted while {self.state.value}")
        return self.state

    def click_display(
        self,
        point: tuple[float, float],
        view_size: tuple[float, float],
        image_size: tuple[int, int],
    ) -> SelectionState:
        return self.click(display_to_pixel(point, view_size, image_size))

    def submit_value(self, text: str) -> SelectionState:
        """
        Attach the typed value to the last colorbar click.

        Text that does not parse as a finite number discards every colorbar
        point and value, and colorbar selection starts over.
        """
        if self.state != SelectionState.AWAITING_VALUE:
            raise SelectionError("no colorbar point is waiting for a value")
        try:
            value = float(text.strip())
        except ValueError:
            value = math.nan
        if not math.isfinite(value):
            self.colorbar.clear()
            self.values.clear()
            self.state = SelectionState.SELECTING_COLORBAR
            return self.state

        self.values.append(value)
        if len(self.values) == COLORBAR_POINT_COUNT:
            self.state = SelectionState.READY
        else:
            self.state = SelectionState.SELECTING_COLORBAR
        return self.state

    def to_calibration(self) -> CalibrationInput:
        if self.state != SelectionState.READY:
            raise SelectionError(f"selection is incomplete ({self.state.value})")
        origin, x_extent, y_extent = self.corners
        low, high = self.colorbar
        return CalibrationInput(
            corner_origin=origin,
            corner_x_extent=x_extent,
            corner_y_extent=y_extent,
            colorbar_low=low,
            colorbar_high=high,
            value_low=self.values[0],
            value_high=self.values[1],
        )
