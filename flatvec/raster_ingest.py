"""Raster image decoding."""
import io
import logging
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from flatvec.color import composite_over_white
from flatvec.types import RasterImage, RasterError

logger = logging.getLogger(__name__)

GRAYSCALE_MODES = ('1', 'L', 'LA', 'I', 'I;16', 'F')


def _normalize_mode(img: Image.Image) -> Image.Image:
    """Reduce any Pillow mode to L, RGB or RGBA."""
    if img.mode in GRAYSCALE_MODES:
        return img.convert('L')
    if img.mode == 'RGBA' or img.mode == 'RGB':
        return img
    if img.mode == 'P' and 'transparency' in img.info:
        return img.convert('RGBA')
    if img.mode in ('RGBa', 'PA'):
        return img.convert('RGBA')
    return img.convert('RGB')


def decode_image(img: Image.Image, source: str = "") -> RasterImage:
    """Decode an open Pillow image into a RasterImage."""
    img = ImageOps.exif_transpose(img)
    img = _normalize_mode(img)

    pixels = np.array(img, dtype=np.uint8)
    if pixels.ndim == 2:
        pixels = pixels[..., np.newaxis]

    width, height = img.size
    return RasterImage(
        pixels=pixels,
        channels=pixels.shape[2],
        width=width,
        height=height,
        source=source,
    )


def ingest(source: Union[str, Path, bytes]) -> RasterImage:
    """
    Load a raster image from a path or an in-memory buffer.

    Args:
        source: Path to an image file, or encoded image bytes

    Returns:
        RasterImage with channel count 1 (grayscale), 3 or 4

    Raises:
        FileNotFoundError: If a path is given and does not exist
        RasterError: If the data cannot be decoded as an image
    """
    if isinstance(source, (bytes, bytearray)):
        label = "<buffer>"
        stream = io.BytesIO(source)
    else:
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"Image file not found: {path}")
        if not path.is_file():
            raise RasterError(f"Path is not a file: {path}")
        label = str(path)
        stream = path

    try:
        with Image.open(stream) as img:
            img.load()
            raster = decode_image(img, source=label)
    except UnidentifiedImageError as e:
        raise RasterError(f"Cannot identify image {label}: {e}") from e

    logger.debug(
        "Decoded %s: %dx%d, %d channel(s)", label, raster.width, raster.height, raster.channels
    )
    return raster


def opaque_pixels(raster: RasterImage) -> np.ndarray:
    """Row-major N x 3 RGB pixels, alpha composited against white."""
    flat = raster.pixels.reshape(-1, raster.channels)
    if raster.channels == 1:
        return np.repeat(flat, 3, axis=1)
    return composite_over_white(flat)


def luminance(raster: RasterImage) -> np.ndarray:
    """H x W uint8 luminance (ITU-R 601-2, as Pillow's L conversion)."""
    if raster.channels == 1:
        return raster.pixels[..., 0]
    rgb = opaque_pixels(raster).astype(np.float64)
    gray = rgb[:, 0] * 299 / 1000 + rgb[:, 1] * 587 / 1000 + rgb[:, 2] * 114 / 1000
    gray = np.clip(np.floor(gray + 0.5), 0, 255).astype(np.uint8)
    return gray.reshape(raster.height, raster.width)
