from enum import Enum
from typing import Any

from pydantic import BaseModel


class ProcessingStage(str, Enum):
    LOAD = "load"
    CALIBRATE = "calibrate"
    INDEX = "index"
    CROP = "crop"
    LOOKUP = "lookup"
    EXPORT = "export"


class ErrorType(str, Enum):
    INVALID_CROP_REGION = "invalid_crop_region"
    INVALID_COLORBAR_REGION = "invalid_colorbar_region"
    EMPTY_COLOR_MAP = "empty_color_map"
    WRITE_FAILURE = "write_failure"
    FILE_NOT_FOUND = "file_not_found"
    IMREAD_FAILED = "imread_failed"
    PERMISSION_DENIED = "permission_denied"
    IO_ERROR = "io_error"
    CANCELLED = "cancelled"


class ProcessingError(BaseModel):
    stage: ProcessingStage
    error_type: ErrorType
    recoverable: bool = False
    message: str
    details: dict[str, Any] = {}
