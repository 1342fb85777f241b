import numpy as np
import pytest

from heatmap_digitizer.models import CalibrationInput, PixelImage

from synthetic import scenario


@pytest.fixture
def scenario_pixels() -> np.ndarray:
    return scenario.scenario_pixels()


@pytest.fixture
def scenario_image(scenario_pixels: np.ndarray) -> PixelImage:
    return PixelImage(scenario_pixels)


@pytest.fixture
def scenario_calibration() -> CalibrationInput:
    return scenario.scenario_calibration()
