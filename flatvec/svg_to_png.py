"""SVG to raster conversion."""
import logging
from pathlib import Path
from typing import Optional, Union

from flatvec.raster_ingest import ingest
from flatvec.types import RasterImage, VectorizationError

logger = logging.getLogger(__name__)


def svg_to_png_bytes(
    svg_content: str,
    width: Optional[int] = None,
    height: Optional[int] = None
) -> bytes:
    """
    Render SVG markup to PNG bytes with cairosvg.

    Args:
        svg_content: SVG markup
        width: Output width in pixels (default: the markup's own)
        height: Output height in pixels (default: the markup's own)

    Returns:
        Encoded PNG data
    """
    import cairosvg

    try:
        if width and height:
            return cairosvg.svg2png(
                bytestring=svg_content.encode('utf-8'),
                output_width=width,
                output_height=height
            )
        return cairosvg.svg2png(bytestring=svg_content.encode('utf-8'))
    except Exception as e:
        raise VectorizationError(f"Cannot render SVG: {e}") from e


def rasterize_svg(
    svg_content: str,
    width: Optional[int] = None,
    height: Optional[int] = None
) -> RasterImage:
    """Render SVG markup and decode it into a RasterImage."""
    raster = ingest(svg_to_png_bytes(svg_content, width, height))
    logger.debug(f"Rasterized SVG to {raster.width}x{raster.height}")
    return raster


def svg_to_png(
    svg_path: Union[str, Path],
    output_path: Optional[Union[str, Path]] = None,
    width: Optional[int] = None,
    height: Optional[int] = None
) -> Path:
    """
    Convert an SVG file to PNG.

    Args:
        svg_path: Path to SVG file
        output_path: Output PNG path (default: svg_path with .png extension)
        width: Output width in pixels
        height: Output height in pixels

    Returns:
        Path to output PNG file
    """
    svg_path = Path(svg_path)
    output_path = Path(output_path) if output_path else svg_path.with_suffix('.png')

    svg_content = svg_path.read_text(encoding='utf-8')
    output_path.write_bytes(svg_to_png_bytes(svg_content, width, height))
    logger.info(f"Converted SVG to PNG: {output_path}")
    return output_path
