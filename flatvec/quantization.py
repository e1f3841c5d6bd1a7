"""Median-cut color quantization and palette sampling."""
import logging
from typing import List, Optional, Tuple

import numpy as np
from PIL import Image

from flatvec.color import Color
from flatvec.raster_ingest import opaque_pixels
from flatvec.types import RasterImage

logger = logging.getLogger(__name__)


def median_cut(pixels: np.ndarray, n_colors: int) -> List[Tuple[int, Color]]:
    """
    Quantize a multiset of RGB colors with median cut.

    Pillow's median cut is deterministic, so identical inputs always give
    identical palettes.

    Args:
        pixels: N x 3 uint8 array of RGB colors (any order)
        n_colors: Maximum number of boxes

    Returns:
        List of (pixel_count, color) sorted by pixel count, largest first.
        Ties keep Pillow's palette order. Empty input gives an empty list.
    """
    if n_colors < 1:
        raise ValueError(f"n_colors must be >= 1, got {n_colors}")

    pixels = np.asarray(pixels, dtype=np.uint8).reshape(-1, 3)
    if len(pixels) == 0:
        return []

    # Pillow wants a 2D image; a single column keeps every pixel
    strip = Image.fromarray(pixels.reshape(-1, 1, 3))
    quantized = strip.quantize(colors=n_colors, method=Image.Quantize.MEDIANCUT)

    palette = quantized.getpalette()
    counts = quantized.getcolors(maxcolors=256) or []

    boxes = []
    for count, index in counts:
        r, g, b = palette[index * 3:index * 3 + 3]
        boxes.append((index, count, Color(r, g, b)))

    boxes.sort(key=lambda box: (-box[1], box[0]))
    return [(count, color) for _, count, color in boxes]


def dominant_color(pixels: np.ndarray, n_colors: int = 5) -> Optional[Color]:
    """Most populous median-cut color, or None for an empty pixel set."""
    boxes = median_cut(pixels, n_colors)
    if not boxes:
        return None
    return boxes[0][1]


def sample_palette(raster: RasterImage, count: int = 5) -> List[Color]:
    """
    Sample up to ``count`` dominant colors, most populous first.

    Images with fewer distinct colors yield a shorter palette.
    """
    boxes = median_cut(opaque_pixels(raster), count)
    palette = [color for _, color in boxes]
    logger.debug("Sampled palette: %s", [c.hex for c in palette])
    return palette
