"""Core types for the flat-color vectorization pipeline."""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple
import xml.etree.ElementTree as ET

import numpy as np

from flatvec.color import Color


class PipelineStage(Enum):
    """Per-image pipeline states, in execution order."""
    SAMPLED = "sampled"
    PLAN_SELECTED = "plan_selected"
    TRACED = "traced"
    LAYERS_RESOLVED = "layers_resolved"
    COLORS_REMAPPED = "colors_remapped"
    OPTIMIZED = "optimized"
    PERSISTED = "persisted"


@dataclass(frozen=True)
class PosterizationPlan:
    """Step count and the representative colors used for it."""
    step_count: int
    colors: Tuple[Color, ...]

    def __post_init__(self):
        if self.step_count not in (1, 2, 3, 4):
            raise ValueError(f"step_count must be 1-4, got {self.step_count}")
        if len(self.colors) != self.step_count:
            raise ValueError(
                f"Plan with {self.step_count} steps needs {self.step_count} colors, "
                f"got {len(self.colors)}"
            )

    @property
    def hexes(self) -> List[str]:
        return [color.hex for color in self.colors]


@dataclass
class Layer:
    """One fill-opacity tier of the traced markup."""
    fill_opacity: str  # attribute text as found in the markup
    opacity: float
    composited_opacity: float
    color: Color
    shapes: List[ET.Element] = field(default_factory=list)


@dataclass
class RasterImage:
    """Decoded raster: row-major pixels plus channel count."""
    pixels: np.ndarray  # H x W x C, uint8
    channels: int
    width: int
    height: int
    source: str = ""

    @property
    def is_grayscale(self) -> bool:
        return self.channels == 1


@dataclass
class FlatvecConfig:
    """Configuration for the flat-color pipeline."""
    # Palette inspection
    palette_size: int = 5
    background_lightness: float = 0.8  # first sample above this is background
    black_lightness: float = 0.05  # last sample below this means black-and-white
    mono_hue_variation: float = 5.0  # degrees
    mono_lightness_variation: float = 2.0
    max_steps: int = 4

    # Color remapping
    quantize_bins: int = 5

    # Tracing
    opt_tolerance: float = 0.5
    turdsize: int = 2

    # Layer resolution; None means stroke emphasis only when step > 1
    stroke: Optional[bool] = None
    stroke_width: int = 1

    # Output
    optimize: bool = True

    def __post_init__(self):
        if not 1 <= self.max_steps <= 4:
            raise ValueError(f"max_steps must be 1-4, got {self.max_steps}")
        if self.palette_size < 1:
            raise ValueError(f"palette_size must be >= 1, got {self.palette_size}")
        if self.quantize_bins < 1:
            raise ValueError(f"quantize_bins must be >= 1, got {self.quantize_bins}")
        if not 0.0 <= self.background_lightness <= 1.0:
            raise ValueError("background_lightness must be within [0, 1]")
        if not 0.0 <= self.black_lightness <= 1.0:
            raise ValueError("black_lightness must be within [0, 1]")

    def stroke_for(self, step_count: int) -> bool:
        if self.stroke is None:
            return step_count > 1
        return self.stroke


class VectorizationError(Exception):
    """Base exception for vectorization errors."""
    pass


class TracerError(VectorizationError):
    """The tracer rejected or failed on the input raster."""
    pass


class MarkupError(VectorizationError):
    """Markup is missing attributes the pipeline depends on."""
    pass


class RasterMismatchError(MarkupError):
    """Rendered markup and original raster differ in size."""
    pass


class RasterError(VectorizationError):
    """Raster image could not be decoded."""
    pass
