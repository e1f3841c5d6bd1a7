"""
Layer resolution: turn fill-opacity tiers into solid colors.

The tracer stacks semi-transparent black shapes, one tier per threshold.
Each tier is given the opaque gray it actually shows once every tier
beneath it in the threshold stack is composited in.
"""
import logging
from collections import OrderedDict
from typing import List, Sequence, Tuple

from flatvec.color import Color, black_at_opacity
from flatvec.svg_document import SvgDocument
from flatvec.types import Layer, MarkupError

logger = logging.getLogger(__name__)


def combine_opacity(a: float, b: float) -> float:
    """Opacity of two stacked layers (source-over)."""
    return 1.0 - (1.0 - a) * (1.0 - b)


def composite_opacities(opacities: Sequence[float]) -> List[float]:
    """
    Composited opacity per tier.

    ``opacities`` must be sorted most opaque first; tier k is combined with
    itself and every less opaque tier after it.
    """
    composited = []
    for k in range(len(opacities)):
        total = 0.0
        for opacity in opacities[k:]:
            total = combine_opacity(total, opacity)
        composited.append(total)
    return composited


def _collect_tiers(document: SvgDocument) -> "OrderedDict[str, list]":
    tiers: "OrderedDict[str, list]" = OrderedDict()
    for shape in document.shapes():
        value = shape.get("fill-opacity")
        if value is not None:
            tiers.setdefault(value, []).append(shape)
    return tiers


def _parse_opacity(text: str) -> float:
    try:
        opacity = float(text)
    except ValueError as e:
        raise MarkupError(f"Non-numeric fill-opacity {text!r}") from e
    if not 0.0 <= opacity <= 1.0:
        raise MarkupError(f"fill-opacity {text!r} outside [0, 1]")
    return opacity


def resolve_layers(
    document: SvgDocument,
    stroke: bool = False,
    stroke_width: int = 1
) -> Tuple[SvgDocument, List[Layer]]:
    """
    Replace every fill-opacity tier with a solid gray fill.

    Args:
        document: Traced markup; left unmodified
        stroke: Also outline each shape in its tier color
        stroke_width: Width of that outline

    Returns:
        Tuple of (resolved_document, layers), layers most opaque first.
        Markup without fill-opacity comes back unchanged with no layers.

    Raises:
        MarkupError: If a fill-opacity value is not a number in [0, 1]
    """
    resolved = document.copy()

    for shape in resolved.shapes():
        if shape.get("fill") == "black":
            del shape.attrib["fill"]

    tiers = _collect_tiers(resolved)
    ordered = sorted(
        ((text, _parse_opacity(text)) for text in tiers),
        key=lambda item: item[1],
        reverse=True,
    )
    composited = composite_opacities([opacity for _, opacity in ordered])

    layers = []
    for (text, opacity), total in zip(ordered, composited):
        color = black_at_opacity(total)
        for shape in tiers[text]:
            del shape.attrib["fill-opacity"]
            shape.set("fill", color.hex)
            if shape.get("stroke") == "none":
                del shape.attrib["stroke"]
            if stroke:
                shape.set("stroke-width", str(stroke_width))
                shape.set("stroke", color.hex)
        layers.append(Layer(
            fill_opacity=text,
            opacity=opacity,
            composited_opacity=total,
            color=color,
            shapes=tiers[text],
        ))

    logger.debug(
        "Resolved %d layer(s): %s",
        len(layers), [(layer.fill_opacity, layer.color.hex) for layer in layers],
    )
    return resolved, layers


def apply_single_color(
    document: SvgDocument,
    layers: Sequence[Layer],
    color: Color
) -> SvgDocument:
    """
    Collapse a resolved document to one flat color.

    Only the most opaque tier survives; its shapes are filled with ``color``.
    ``layers`` must come from ``resolve_layers`` on ``document``.
    """
    if not layers:
        return document.copy()

    result = document.copy()
    # shapes are matched by position since copy() breaks element identity
    originals = document.shapes()
    copies = result.shapes()
    keep = {id(shape) for shape in layers[0].shapes}
    drop = {id(shape) for layer in layers[1:] for shape in layer.shapes}

    for original, duplicate in zip(originals, copies):
        if id(original) in keep:
            duplicate.set("fill", color.hex)
            if duplicate.get("stroke") is not None:
                duplicate.set("stroke", color.hex)
        elif id(original) in drop:
            result.remove(duplicate)
    return result
