"""Load node: decode the chart image once for the rest of the graph."""

from heatmap_digitizer.models import PipelineState, ProcessingError, ProcessingStage
from heatmap_digitizer.utils import cv_utils


def load(state: PipelineState) -> PipelineState:
    """
    Decode ``state.image_path`` into an RGB PixelImage.

    Updates state with:
    - image: decoded PixelImage
    - warnings: image size info code
    - errors: any load error encountered
    """
    if state.image is not None:
        return state

    image = cv_utils.load_image(state.image_path, stage=ProcessingStage.LOAD)
    if isinstance(image, ProcessingError):
        return state.model_copy(update={"errors": state.errors + [image]})

    return state.model_copy(
        update={
            "image": image,
            "warnings": state.warnings + [f"I_IMAGE_SIZE:{image.width}x{image.height}"],
        }
    )
