"""Palette inspection: decide posterization step counts from a sampled palette."""
import logging
import math
from pathlib import Path
from typing import List, Optional, Sequence, Union

from flatvec.color import BLACK, Color
from flatvec.quantization import sample_palette
from flatvec.raster_ingest import ingest
from flatvec.types import FlatvecConfig, PosterizationPlan

logger = logging.getLogger(__name__)


def _total_variation(values: Sequence[float]) -> float:
    return sum(abs(b - a) for a, b in zip(values, values[1:]))


def inspect_palette(
    palette: Sequence[Color],
    config: Optional[FlatvecConfig] = None
) -> List[PosterizationPlan]:
    """
    Enumerate candidate posterization plans for a sampled palette.

    A light first sample is treated as background and ignored. Palettes
    whose last remaining sample is near-black or achromatic give a single
    black-and-white plan; palettes with almost no hue or lightness
    variation give a single monochrome plan. Anything else gives one plan
    per step count, each using a prefix of the palette.

    Never raises for a well-formed palette, however degenerate.
    """
    config = config or FlatvecConfig()
    colors = list(palette)

    if colors and colors[0].lightness > config.background_lightness:
        logger.debug("Dropping background sample %s", colors[0].hex)
        colors = colors[1:]

    if not colors:
        logger.info("Palette has no content colors; using black-and-white")
        return [PosterizationPlan(1, (BLACK,))]

    hue, _, lightness = colors[-1].hsl
    if lightness < config.black_lightness or math.isnan(hue):
        logger.info("Classified as black-and-white")
        return [PosterizationPlan(1, (BLACK,))]

    hues = [0.0 if math.isnan(c.hsl[0]) else c.hsl[0] for c in colors]
    lightnesses = [c.hsl[2] for c in colors]
    hue_variation = _total_variation(hues)
    lightness_variation = _total_variation(lightnesses)

    if (hue_variation < config.mono_hue_variation
            and lightness_variation < config.mono_lightness_variation):
        extreme = Color.from_rgb(palette[-1].rgb)
        logger.info(
            f"Classified as monochrome (hue variation {hue_variation:.2f}), "
            f"color {extreme.hex}"
        )
        return [PosterizationPlan(1, (extreme,))]

    steps = min(config.max_steps, len(colors))
    plans = [
        PosterizationPlan(i, tuple(Color.from_rgb(c.rgb) for c in colors[:i]))
        for i in range(1, steps + 1)
    ]
    logger.info(f"Offering {len(plans)} posterization plans")
    return plans


def inspect_image(
    image_path: Union[str, Path],
    config: Optional[FlatvecConfig] = None
) -> List[PosterizationPlan]:
    """Sample an image's palette and enumerate its posterization plans."""
    config = config or FlatvecConfig()
    raster = ingest(image_path)
    palette = sample_palette(raster, config.palette_size)
    return inspect_palette(palette, config)


def select_plan(
    plans: Sequence[PosterizationPlan],
    steps: Optional[int] = None
) -> PosterizationPlan:
    """
    Choose one of the inspector's candidate plans.

    With no request the plan with the most steps wins. A requested step
    count that was not offered falls back to the largest smaller plan.
    """
    if not plans:
        raise ValueError("No posterization plans to select from")

    ordered = sorted(plans, key=lambda p: p.step_count)
    if steps is None:
        return ordered[-1]

    for plan in ordered:
        if plan.step_count == steps:
            return plan

    smaller = [p for p in ordered if p.step_count <= steps]
    chosen = smaller[-1] if smaller else ordered[0]
    logger.warning(
        f"{steps}-step plan not offered for this image; using {chosen.step_count} steps"
    )
    return chosen
