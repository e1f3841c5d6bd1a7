"""
Color remapping: replace traced gray levels with colors from the source.

Every pixel of the rendered markup is classified to its nearest traced
color; the source pixels at those positions are median-cut quantized and
the most populous box becomes the replacement.
"""
import logging
from typing import Dict, List, Optional

import numpy as np
from scipy.spatial import cKDTree

from flatvec.color import Color
from flatvec.quantization import dominant_color
from flatvec.raster_ingest import opaque_pixels
from flatvec.svg_document import SvgDocument
from flatvec.svg_to_png import rasterize_svg
from flatvec.types import RasterImage, RasterMismatchError

logger = logging.getLogger(__name__)


def nearest_color_labels(pixels: np.ndarray, candidates: List[Color]) -> np.ndarray:
    """
    Index of the nearest candidate (Euclidean RGB) for each pixel.

    Args:
        pixels: N x 3 RGB array
        candidates: Non-empty reference palette

    Returns:
        N int array of indices into ``candidates``
    """
    if not candidates:
        raise ValueError("Need at least one candidate color")
    reference = np.array([c.rgb for c in candidates], dtype=np.float64)
    _, labels = cKDTree(reference).query(np.asarray(pixels, dtype=np.float64), k=1)
    return np.asarray(labels, dtype=np.int64)


def compute_color_replacements(
    rendered: RasterImage,
    original: RasterImage,
    candidates: List[str],
    n_bins: int = 5
) -> Dict[str, Optional[str]]:
    """
    Map each candidate hex to the dominant source color of its pixels.

    Candidates that no pixel is nearest to map to None.

    Raises:
        RasterMismatchError: If the two rasters differ in size
    """
    if (rendered.width, rendered.height) != (original.width, original.height):
        raise RasterMismatchError(
            f"Rendered markup is {rendered.width}x{rendered.height}, "
            f"original is {original.width}x{original.height}"
        )

    palette = [Color.from_hex(hex_color) for hex_color in candidates]
    labels = nearest_color_labels(opaque_pixels(rendered), palette)
    source = opaque_pixels(original)

    replacements: Dict[str, Optional[str]] = {}
    for index, hex_color in enumerate(candidates):
        assigned = source[labels == index]
        representative = dominant_color(assigned, n_bins)
        replacements[hex_color] = representative.hex if representative else None
        logger.debug(
            f"{hex_color}: {len(assigned)} pixel(s) -> "
            f"{representative.hex if representative else 'unchanged'}"
        )
    return replacements


def remap_colors(
    document: SvgDocument,
    original: RasterImage,
    n_bins: int = 5
) -> SvgDocument:
    """
    Recolor a resolved document with colors sampled from the source image.

    Grayscale sources are returned unchanged, as are colors that no
    rendered pixel was classified to.

    Args:
        document: Output of layer resolution; left unmodified
        original: Decoded source image
        n_bins: Median-cut boxes per color

    Returns:
        New document with substituted fill/stroke colors
    """
    result = document.copy()
    if original.is_grayscale:
        logger.info("Source image is grayscale; skipping color remap")
        return result

    candidates = result.paint_colors()
    if not candidates:
        return result

    rendered = rasterize_svg(result.to_string())
    replacements = compute_color_replacements(rendered, original, candidates, n_bins)

    result.replace_colors({
        old: new for old, new in replacements.items() if new is not None
    })
    logger.info(f"Remapped {len(candidates)} color(s)")
    return result
