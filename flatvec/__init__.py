"""flatvec: raster images to flat-color SVG."""
from flatvec.color import Color
from flatvec.types import (
    FlatvecConfig,
    Layer,
    MarkupError,
    PipelineStage,
    PosterizationPlan,
    RasterError,
    RasterImage,
    RasterMismatchError,
    TracerError,
    VectorizationError,
)

__version__ = "0.1.0"

__all__ = [
    "Color",
    "FlatvecConfig",
    "Layer",
    "MarkupError",
    "PipelineStage",
    "PosterizationPlan",
    "RasterError",
    "RasterImage",
    "RasterMismatchError",
    "TracerError",
    "VectorizationError",
]
