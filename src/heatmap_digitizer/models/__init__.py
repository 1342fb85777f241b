from .calibration import (
    CalibrationInput,
    ColorMap,
    ColorSample,
    CropRegion,
    PixelCoordinate,
)
from .image import PixelImage
from .result import ErrorType, ProcessingError, ProcessingStage
from .state import OriginCorner, PipelineConfig, PipelineState

__all__ = [
    "CalibrationInput",
    "ColorMap",
    "ColorSample",
    "CropRegion",
    "ErrorType",
    "OriginCorner",
    "PipelineConfig",
    "PipelineState",
    "PixelCoordinate",
    "PixelImage",
    "ProcessingError",
    "ProcessingStage",
]
