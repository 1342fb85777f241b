"""End-to-end digitizer behaviour on the reference scenario and rendered heatmaps."""

import threading

import numpy as np
import pytest

from heatmap_digitizer.models import (
    CropRegion,
    ErrorType,
    PipelineConfig,
    PixelCoordinate,
    PixelImage,
    ProcessingError,
    ProcessingStage,
)
from heatmap_digitizer.nodes.digitization import DigitizationResult, digitize

from synthetic import gaussian_field, render_heatmap, scenario


def _ok(result) -> DigitizationResult:
    assert isinstance(result, DigitizationResult), result
    return result


def test_scenario_matrix(scenario_image, scenario_calibration):
    result = _ok(digitize(scenario_image, scenario_calibration))

    assert result.crop_region == CropRegion(x0=10, x1=90, y_top=10, y_bottom=90)
    assert result.matrix.shape == (80, 80)
    np.testing.assert_array_equal(result.matrix, scenario.expected_matrix())
    assert "I_COLORBAR_SAMPLES:61" in result.warning_codes
    assert "I_CROP_REGION:10,10,90,90" in result.warning_codes
    assert not any(w.startswith("W_") for w in result.warning_codes)


def test_mid_colorbar_color_maps_to_mid_value(scenario_pixels, scenario_calibration):
    # plot column 30 carries the color of colorbar row 50
    result = _ok(digitize(PixelImage(scenario_pixels), scenario_calibration))

    assert result.matrix[0, 30] == pytest.approx(50.0)
    assert result.matrix[0, 0] == 100.0
    assert result.matrix[0, 60] == 0.0


def test_one_pixel_region(scenario_image):
    calibration = scenario.scenario_calibration(
        corner_x_extent=PixelCoordinate(x=11, y=10),
        corner_y_extent=PixelCoordinate(x=10, y=11),
    )

    result = _ok(digitize(scenario_image, calibration))

    assert result.matrix.shape == (1, 1)
    assert result.matrix[0, 0] == 100.0


@pytest.mark.parametrize(
    ("gray", "expected"),
    [(40, 5.0), (150, -1.0), (0, 5.0), (200, -1.0)],
)
def test_two_sample_colorbar_one_pixel_gives_nearer_endpoint(gray, expected):
    pixels = np.full((10, 10, 3), 255, dtype=np.uint8)
    pixels[2, 1] = (0, 0, 0)
    pixels[3, 1] = (200, 200, 200)
    pixels[6, 6] = (gray, gray, gray)
    calibration = scenario.scenario_calibration(
        corner_origin=PixelCoordinate(x=6, y=6),
        corner_x_extent=PixelCoordinate(x=7, y=6),
        corner_y_extent=PixelCoordinate(x=6, y=7),
        colorbar_low=PixelCoordinate(x=1, y=3),
        colorbar_high=PixelCoordinate(x=1, y=2),
        value_low=-1.0,
        value_high=5.0,
    )

    result = _ok(digitize(PixelImage(pixels), calibration))

    assert len(result.color_map) == 2
    assert result.matrix.shape == (1, 1)
    assert result.matrix[0, 0] == expected


def test_repeat_runs_are_identical(scenario_image, scenario_calibration):
    first = _ok(digitize(scenario_image, scenario_calibration))
    second = _ok(digitize(scenario_image, scenario_calibration))

    assert np.array_equal(first.matrix, second.matrix, equal_nan=True)
    assert first.warning_codes == second.warning_codes


@pytest.mark.parametrize(
    ("workers", "rows_per_batch"),
    [(1, 1), (1, 1000), (3, 7), (8, 2)],
)
def test_parallel_lookup_matches_serial(workers, rows_per_batch):
    heatmap = render_heatmap(gaussian_field(48, 64, seed=7), colormap="viridis")
    image = PixelImage(heatmap.image)
    serial = _ok(digitize(image, heatmap.calibration, PipelineConfig(max_workers=1, rows_per_batch=64)))

    parallel = _ok(
        digitize(
            image,
            heatmap.calibration,
            PipelineConfig(max_workers=workers, rows_per_batch=rows_per_batch),
        )
    )

    assert np.array_equal(serial.matrix, parallel.matrix, equal_nan=True)


def test_cancelled_before_start(scenario_image, scenario_calibration):
    cancel = threading.Event()
    cancel.set()

    result = digitize(scenario_image, scenario_calibration, cancel_event=cancel)

    assert isinstance(result, ProcessingError)
    assert result.error_type == ErrorType.CANCELLED
    assert result.stage == ProcessingStage.LOOKUP
    assert result.details["batches_done"] == 0


def test_invalid_crop_propagates(scenario_image):
    calibration = scenario.scenario_calibration(
        corner_origin=PixelCoordinate(x=50, y=10),
        corner_x_extent=PixelCoordinate(x=10, y=10),
    )

    result = digitize(scenario_image, calibration)

    assert isinstance(result, ProcessingError)
    assert result.error_type == ErrorType.INVALID_CROP_REGION
    assert result.stage == ProcessingStage.CROP


def test_invalid_colorbar_stops_before_crop(scenario_image):
    calibration = scenario.scenario_calibration(
        colorbar_low=PixelCoordinate(x=5, y=40),
        colorbar_high=PixelCoordinate(x=5, y=40),
        corner_origin=PixelCoordinate(x=50, y=10),
        corner_x_extent=PixelCoordinate(x=10, y=10),
    )

    result = digitize(scenario_image, calibration)

    assert isinstance(result, ProcessingError)
    assert result.error_type == ErrorType.INVALID_COLORBAR_REGION


def test_gray_heatmap_recovers_quantized_field():
    heatmap = render_heatmap(gaussian_field(40, 50, seed=1), vmin=-5.0, vmax=20.0)

    result = _ok(digitize(PixelImage(heatmap.image), heatmap.calibration))

    assert result.matrix.shape == heatmap.field.shape
    np.testing.assert_allclose(result.matrix, heatmap.quantized, atol=1e-9)


def test_gray_ramp_is_monotonic():
    ramp = np.tile(np.linspace(0.0, 3.0, 60), (10, 1))
    heatmap = render_heatmap(ramp, vmin=0.0, vmax=3.0)

    result = _ok(digitize(PixelImage(heatmap.image), heatmap.calibration))

    assert np.all(np.diff(result.matrix, axis=1) >= 0)
    assert result.matrix[0, 0] == pytest.approx(0.0)
    assert result.matrix[0, -1] == pytest.approx(3.0)


def test_viridis_heatmap_within_one_level():
    heatmap = render_heatmap(gaussian_field(40, 40, seed=2), vmin=0.0, vmax=255.0, colormap="viridis")

    result = _ok(digitize(PixelImage(heatmap.image), heatmap.calibration))

    np.testing.assert_allclose(result.matrix, heatmap.quantized, atol=2.0)


def test_background_pixels_become_nan_with_max_distance():
    field = gaussian_field(30, 30, seed=3)
    field[5:10, 5:15] = np.nan
    heatmap = render_heatmap(field, colormap="viridis")

    result = _ok(
        digitize(
            PixelImage(heatmap.image),
            heatmap.calibration,
            PipelineConfig(max_color_distance=0.1),
        )
    )

    missing = np.isnan(result.matrix)
    np.testing.assert_array_equal(missing, np.isnan(field))
    assert f"W_UNMATCHED_PIXELS:{missing.sum()}" in result.warning_codes
    np.testing.assert_allclose(result.matrix[~missing], heatmap.quantized[~missing], atol=2 / 255)


def test_every_pixel_gets_a_value_without_cutoff(scenario_calibration):
    rng = np.random.default_rng(11)
    noise = PixelImage(rng.integers(0, 256, size=(100, 100, 3), dtype=np.uint8))

    result = _ok(digitize(noise, scenario_calibration))

    assert result.matrix.shape == (80, 80)
    assert not np.isnan(result.matrix).any()
