"""Color model: hex, RGB and HSL forms of an 8-bit color."""
import colorsys
import math
import re
from dataclasses import dataclass
from typing import Tuple

import numpy as np

HEX_PATTERN = re.compile(r"^#?([0-9a-f]{3}|[0-9a-f]{6})$", re.IGNORECASE)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties away from zero for positive values."""
    return int(math.floor(value + 0.5))


def _clamp_channel(value: float) -> int:
    return min(255, max(0, round_half_up(value)))


@dataclass(frozen=True)
class Color:
    """Opaque 8-bit RGB color with an optional alpha in [0, 1]."""
    r: int
    g: int
    b: int
    alpha: float = 1.0

    def __post_init__(self):
        for name in ("r", "g", "b"):
            value = getattr(self, name)
            if not 0 <= value <= 255:
                raise ValueError(f"Channel {name}={value} outside 0-255")
        if not 0.0 <= self.alpha <= 1.0:
            raise ValueError(f"Alpha {self.alpha} outside [0, 1]")

    @classmethod
    def from_hex(cls, value: str) -> "Color":
        """Parse ``#rrggbb`` or ``#rgb`` (case-insensitive, ``#`` optional)."""
        match = HEX_PATTERN.match(value.strip())
        if not match:
            raise ValueError(f"Not a hex color: {value!r}")
        digits = match.group(1)
        if len(digits) == 3:
            digits = "".join(c * 2 for c in digits)
        return cls(int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))

    @classmethod
    def from_rgb(cls, rgb) -> "Color":
        r, g, b = (int(c) for c in rgb[:3])
        return cls(r, g, b)

    @classmethod
    def gray(cls, level: int) -> "Color":
        return cls(level, level, level)

    @property
    def rgb(self) -> Tuple[int, int, int]:
        return (self.r, self.g, self.b)

    @property
    def hex(self) -> str:
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"

    @property
    def hsl(self) -> Tuple[float, float, float]:
        """
        HSL triple with hue in degrees.

        Hue is NaN for achromatic colors, where it is undefined.
        """
        h, l, s = colorsys.rgb_to_hls(self.r / 255.0, self.g / 255.0, self.b / 255.0)
        if max(self.rgb) == min(self.rgb):
            return (float("nan"), 0.0, l)
        return (h * 360.0, s, l)

    @property
    def lightness(self) -> float:
        return self.hsl[2]

    def over_white(self) -> "Color":
        """Composite this color at its alpha over a white backdrop."""
        a = self.alpha
        return Color(
            _clamp_channel(a * self.r + (1 - a) * 255),
            _clamp_channel(a * self.g + (1 - a) * 255),
            _clamp_channel(a * self.b + (1 - a) * 255),
        )

    def __str__(self) -> str:
        return self.hex


BLACK = Color(0, 0, 0)
WHITE = Color(255, 255, 255)


def black_at_opacity(opacity: float) -> Color:
    """Solid gray produced by black ink at ``opacity`` over white."""
    return Color(0, 0, 0, alpha=min(1.0, max(0.0, opacity))).over_white()


def composite_over_white(pixels: np.ndarray) -> np.ndarray:
    """
    Flatten N x C pixels (C = 3 or 4, uint8) to N x 3 opaque RGB.

    Alpha, when present, is composited against white with the same
    round-half-up rule as ``Color.over_white``.
    """
    pixels = np.asarray(pixels)
    if pixels.shape[-1] != 4:
        return pixels[..., :3].astype(np.uint8)
    alpha = pixels[..., 3:4].astype(np.float64) / 255.0
    rgb = pixels[..., :3].astype(np.float64)
    flat = np.floor(alpha * rgb + (1.0 - alpha) * 255.0 + 0.5)
    return np.clip(flat, 0, 255).astype(np.uint8)
