"""
Posterizing tracer built on potrace.

Produces one black shape group per luminance threshold, each tagged with
the ``fill-opacity`` that makes the stacked result reproduce the mean
luminance of its band.
"""
import logging
from typing import List, Tuple

import numpy as np
import potrace
from skimage.filters import threshold_multiotsu

from flatvec.raster_ingest import luminance
from flatvec.types import RasterImage, TracerError

logger = logging.getLogger(__name__)

SVG_HEADER = '<svg xmlns="http://www.w3.org/2000/svg" width="{w}" height="{h}" version="1.1">'


def _fmt(value: float) -> str:
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def _xy(point) -> str:
    # point objects or plain (x, y) tuples
    if hasattr(point, "x"):
        return f"{_fmt(point.x)} {_fmt(point.y)}"
    return f"{_fmt(point[0])} {_fmt(point[1])}"


def compute_thresholds(gray: np.ndarray, steps: int) -> List[int]:
    """
    Ascending gray thresholds, one per layer (at most ``steps``).

    Layer k covers pixels with ``gray <= thresholds[k]``.
    """
    levels = np.unique(gray)
    if len(levels) <= steps + 1:
        # too few gray levels for Otsu: split between neighbouring levels
        thresholds = [(int(a) + int(b)) // 2 for a, b in zip(levels[:-1], levels[1:])]
        if len(thresholds) < steps:
            thresholds.append(255)
        return thresholds

    try:
        otsu = threshold_multiotsu(gray, classes=steps + 1)
    except ValueError as e:
        logger.debug(f"Multi-Otsu failed ({e}); using evenly spaced thresholds")
        otsu = np.linspace(0, 255, steps + 2)[1:-1]
    return sorted({int(t) for t in otsu})


def layer_intensities(gray: np.ndarray, thresholds: List[int]) -> List[float]:
    """Darkness in [0, 1] of the band each threshold closes."""
    intensities = []
    lower = -1
    for threshold in thresholds:
        band = gray[(gray > lower) & (gray <= threshold)]
        if band.size == 0:
            intensities.append(0.0)
        else:
            intensities.append((255.0 - float(band.mean())) / 255.0)
        lower = threshold
    return intensities


def stacked_opacities(intensities: List[float]) -> List[float]:
    """
    Per-layer fill-opacity for layers drawn lightest first.

    Each value is chosen so that the layers stacked so far show the
    layer's own intensity. Non-empty layers must also get strictly
    increasing opacities, since layer resolution groups shapes by
    fill-opacity and ranks the groups by it; a value that would repeat
    or fall below an earlier one is raised 0.001 above it.
    """
    opacities = []
    accumulated = 0.0
    floor = 0.0
    for intensity in intensities:
        if not accumulated or intensity == 1.0:
            opacity = intensity
        else:
            opacity = (accumulated - intensity) / (accumulated - 1.0)
        opacity = min(1.0, max(0.0, round(opacity, 3)))
        if intensity > 0.0:
            opacity = min(1.0, max(opacity, round(floor + 0.001, 3)))
            floor = opacity
        accumulated = accumulated + (1.0 - accumulated) * opacity
        opacities.append(opacity)
    return opacities


def trace_mask(mask: np.ndarray, opt_tolerance: float = 0.5, turdsize: int = 2) -> str:
    """Trace a boolean mask (True = ink) to SVG path data."""
    # Bitmap inverts its input: bytes below half scale become ink
    try:
        traced = potrace.Bitmap(mask.astype(np.uint8)).trace(
            turdsize=turdsize,
            alphamax=1.0,
            opticurve=True,
            opttolerance=opt_tolerance,
        )
    except Exception as e:
        raise TracerError(f"potrace failed: {e}") from e

    parts = []
    for curve in traced.curves:
        parts.append(f"M{_xy(curve.start_point)}")
        for segment in curve.segments:
            if segment.is_corner:
                parts.append(f"L{_xy(segment.c)}L{_xy(segment.end_point)}")
            else:
                parts.append(
                    f"C{_xy(segment.c1)} {_xy(segment.c2)} {_xy(segment.end_point)}"
                )
        parts.append("Z")
    return "".join(parts)


def trace_posterized(
    raster: RasterImage,
    steps: int,
    opt_tolerance: float = 0.5,
    turdsize: int = 2
) -> str:
    """
    Trace a raster into stacked fill-opacity layers.

    Args:
        raster: Decoded source image
        steps: Number of threshold levels (1-4)
        opt_tolerance: potrace curve optimization tolerance
        turdsize: potrace speckle filter, in pixels

    Returns:
        SVG markup with root width/height and one path per layer,
        lightest layer first

    Raises:
        TracerError: If potrace rejects the bitmap
    """
    if not 1 <= steps <= 4:
        raise TracerError(f"steps must be 1-4, got {steps}")

    gray = luminance(raster)
    thresholds = compute_thresholds(gray, steps)
    intensities = layer_intensities(gray, thresholds)

    # lightest (widest) layer is drawn first, darker layers on top
    bands: List[Tuple[int, float]] = list(zip(thresholds, intensities))[::-1]
    opacities = stacked_opacities([intensity for _, intensity in bands])

    elements = [SVG_HEADER.format(w=raster.width, h=raster.height)]
    for (threshold, intensity), opacity in zip(bands, opacities):
        if intensity == 0.0:
            continue
        path_data = trace_mask(gray <= threshold, opt_tolerance, turdsize)
        if not path_data:
            logger.debug(f"Threshold {threshold} traced no curves")
            continue
        elements.append(
            f'<path d="{path_data}" stroke="none" fill="black" fill-opacity="{opacity:.3f}"/>'
        )
    elements.append("</svg>")

    logger.info(f"Traced {len(elements) - 2} layer(s) at thresholds {thresholds}")
    return "".join(elements)
