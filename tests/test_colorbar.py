"""Colorbar calibration: sample count, endpoint exactness, pairing, bounds."""

import numpy as np
import pytest

from heatmap_digitizer.models import (
    ColorMap,
    ErrorType,
    PixelCoordinate,
    PixelImage,
    ProcessingError,
)
from heatmap_digitizer.nodes.colorbar import calibrate, sample_column

from synthetic.scenario import COLORBAR_BOTTOM, COLORBAR_TOP, colorbar_rgb


def _pt(x: int, y: int) -> PixelCoordinate:
    return PixelCoordinate(x=x, y=y)


def test_scenario_sample_count_and_endpoints(scenario_image):
    color_map = calibrate(scenario_image, _pt(5, 20), _pt(5, 80), 100.0, 0.0)

    assert isinstance(color_map, ColorMap)
    assert len(color_map) == 61
    assert color_map.y_lo == 20
    assert color_map.y_hi == 80
    assert color_map.samples[0].value == 100.0
    assert color_map.samples[-1].value == 0.0
    assert color_map.samples[30].value == pytest.approx(50.0)


def test_pairing_follows_endpoints_not_click_order(scenario_image):
    a = calibrate(scenario_image, _pt(5, 20), _pt(5, 80), 100.0, 0.0)
    b = calibrate(scenario_image, _pt(5, 80), _pt(5, 20), 0.0, 100.0)

    assert isinstance(a, ColorMap) and isinstance(b, ColorMap)
    np.testing.assert_array_equal(a.values(), b.values())
    np.testing.assert_array_equal(a.colors(), b.colors())


def test_samples_are_ascending_rows_with_sampled_colors(scenario_image):
    color_map = calibrate(scenario_image, _pt(5, 80), _pt(5, 20), 0.0, 100.0)

    assert isinstance(color_map, ColorMap)
    for offset, sample in enumerate(color_map.samples):
        expected = np.asarray(colorbar_rgb(COLORBAR_TOP + offset)) / 255.0
        np.testing.assert_allclose(sample.color, expected)


@pytest.mark.parametrize(
    ("v_lo", "v_hi"),
    [(0.1, 0.7), (-3.3, 12.9), (1e-6, 2e-6), (5.0, 5.0), (250.0, -250.0)],
)
def test_endpoints_exact_for_awkward_values(scenario_image, v_lo, v_hi):
    color_map = calibrate(scenario_image, _pt(5, 33), _pt(5, 71), v_lo, v_hi)

    assert isinstance(color_map, ColorMap)
    assert len(color_map) == 71 - 33 + 1
    assert color_map.samples[0].value == v_lo
    assert color_map.samples[-1].value == v_hi


def test_values_are_linear_between_endpoints(scenario_image):
    color_map = calibrate(scenario_image, _pt(5, 20), _pt(5, 80), 100.0, 0.0)

    assert isinstance(color_map, ColorMap)
    steps = np.diff(color_map.values())
    np.testing.assert_allclose(steps, -100.0 / 60.0)


def test_two_row_colorbar(scenario_image):
    color_map = calibrate(scenario_image, _pt(5, 40), _pt(5, 41), 1.0, 2.0)

    assert isinstance(color_map, ColorMap)
    assert [s.value for s in color_map.samples] == [1.0, 2.0]


def test_sample_column_is_rounded_midpoint():
    assert sample_column(_pt(4, 0), _pt(6, 9)) == 5
    assert sample_column(_pt(4, 0), _pt(5, 9)) == 5
    assert sample_column(_pt(7, 0), _pt(7, 9)) == 7


def test_sample_column_avoids_colorbar_border():
    pixels = np.zeros((10, 10, 3), dtype=np.uint8)
    pixels[:, 3] = (255, 0, 0)  # border
    pixels[:, 7] = (255, 0, 0)  # border
    pixels[:, 4:7] = (0, 0, 255)

    color_map = calibrate(PixelImage(pixels), _pt(4, 1), _pt(6, 8), 0.0, 1.0)

    assert isinstance(color_map, ColorMap)
    assert color_map.sample_column == 5
    assert all(s.color == (0.0, 0.0, 1.0) for s in color_map.samples)


@pytest.mark.parametrize(
    ("low", "high"),
    [
        ((5, 50), (5, 50)),  # degenerate
        ((5, -1), (5, 50)),  # above the image
        ((5, 20), (5, 100)),  # y == height
        ((-3, 20), (-3, 80)),  # column left of the image
        ((100, 20), (100, 80)),  # column right of the image
    ],
)
def test_invalid_segments_fail(scenario_image, low, high):
    result = calibrate(scenario_image, _pt(*low), _pt(*high), 0.0, 1.0)

    assert isinstance(result, ProcessingError)
    assert result.error_type == ErrorType.INVALID_COLORBAR_REGION
    assert not result.recoverable
    assert {"x", "y_lo", "y_hi"} <= set(result.details)


def test_bottom_row_is_last_valid_row(scenario_image):
    color_map = calibrate(scenario_image, _pt(5, COLORBAR_BOTTOM), _pt(5, 99), 0.0, 1.0)
    assert isinstance(color_map, ColorMap)
    assert len(color_map) == 99 - COLORBAR_BOTTOM + 1
