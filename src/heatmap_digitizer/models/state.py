from typing import Literal

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

from heatmap_digitizer import config

from .calibration import CalibrationInput, ColorMap, CropRegion
from .image import PixelImage
from .result import ProcessingError

OriginCorner = Literal["any", "bottom_left", "top_left"]


class PipelineConfig(BaseModel):
    max_workers: int = Field(default=config.DEFAULT_MAX_WORKERS, ge=1)
    rows_per_batch: int = Field(default=config.DEFAULT_ROWS_PER_BATCH, ge=1)
    max_color_distance: float | None = Field(default=config.DEFAULT_MAX_COLOR_DISTANCE, gt=0)

    origin_corner: OriginCorner = config.DEFAULT_ORIGIN_CORNER
    delimiter: str = Field(default=config.DEFAULT_DELIMITER, min_length=1)


class PipelineState(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    image_path: str
    calibration: CalibrationInput
    config: PipelineConfig = PipelineConfig()
    output_path: str | None = None

    image: PixelImage | None = None

    color_map: ColorMap | None = None
    crop_region: CropRegion | None = None
    matrix: np.ndarray | None = None
    written_path: str | None = None

    warnings: list[str] = []
    errors: list[ProcessingError] = []
