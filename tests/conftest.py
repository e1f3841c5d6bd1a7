"""Pytest configuration and fixtures."""
import re

import pytest
import numpy as np
from PIL import Image


# Each band: RGB color with a distinct luminance
BAND_COLORS = [
    (20, 30, 90),    # navy
    (200, 40, 40),   # red
    (60, 170, 80),   # green
    (240, 200, 40),  # yellow
]


def _has_cairosvg():
    try:
        import cairosvg  # noqa: F401
    except (ImportError, OSError):
        return False
    return True


HAS_CAIROSVG = _has_cairosvg()

requires_cairosvg = pytest.mark.skipif(
    not HAS_CAIROSVG, reason="Requires cairosvg and the Cairo library"
)


def write_png(array: np.ndarray, path):
    Image.fromarray(array).save(path)
    return path


def glyph_image(size: int = 60) -> np.ndarray:
    """White background with one black square."""
    img = np.full((size, size, 3), 255, dtype=np.uint8)
    img[size // 3:2 * size // 3, size // 3:2 * size // 3] = 0
    return img


def band_image(band_width: int = 20, height: int = 40) -> np.ndarray:
    """Four vertical flat-color bands."""
    img = np.zeros((height, band_width * len(BAND_COLORS), 3), dtype=np.uint8)
    for i, color in enumerate(BAND_COLORS):
        img[:, i * band_width:(i + 1) * band_width] = color
    return img


@pytest.fixture
def glyph_png(tmp_path):
    """Path to a black-on-white glyph PNG."""
    return write_png(glyph_image(), tmp_path / "glyph.png")


@pytest.fixture
def bands_png(tmp_path):
    """Path to a four-color flat illustration PNG."""
    return write_png(band_image(), tmp_path / "bands.png")


def path_bounds(path_data: str):
    """(min_x, min_y, max_x, max_y) over every coordinate pair in path data."""
    numbers = [float(n) for n in re.findall(r"-?\d+(?:\.\d+)?", path_data)]
    xs, ys = numbers[0::2], numbers[1::2]
    return min(xs), min(ys), max(xs), max(ys)
