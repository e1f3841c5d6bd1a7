"""SVG minification for resolved flat-color markup."""
import logging
import re
import xml.etree.ElementTree as ET
from typing import List

from flatvec.svg_document import HEX_COLOR, PAINT_ATTRIBUTES, SvgDocument

logger = logging.getLogger(__name__)

NUMBER = re.compile(r"-?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")
REDUNDANT_ROOT_ATTRIBUTES = ("version",)


def get_svg_size(svg_string: str) -> int:
    """Get size of SVG in bytes."""
    return len(svg_string.encode('utf-8'))


def _fmt_compact(value: float, max_precision: int = 3) -> str:
    """Format number compactly - remove trailing zeros."""
    value = round(value, 10)

    if abs(value) < 0.0001 and value != 0:
        value = 0.0

    s = f'{value:.{max_precision}f}'
    s = s.rstrip('0').rstrip('.')

    if s == '-0' or s == '':
        s = '0'

    return s


def _color_to_hex_compact(value: str) -> str:
    """Shorten ``#rrggbb`` to ``#rgb`` when every channel digit repeats."""
    value = value.lower()
    if len(value) == 7 and value[1] == value[2] and value[3] == value[4] and value[5] == value[6]:
        return f'#{value[1]}{value[3]}{value[5]}'
    return value


def compact_path_data(path_data: str, precision: int = 3) -> str:
    """Round every number in path data and drop redundant separators."""
    compact = NUMBER.sub(lambda m: _fmt_compact(float(m.group(0)), precision), path_data)
    compact = re.sub(r'\s+', ' ', compact).strip()
    compact = re.sub(r'\s*([MmLlCcSsQqTtAaHhVvZz])\s*', r'\1', compact)
    return compact


def _remove_whitespace(element):
    """Remove whitespace-only text nodes from XML tree."""
    if element.text and not element.text.strip():
        element.text = None
    if element.tail and not element.tail.strip():
        element.tail = None
    for child in element:
        _remove_whitespace(child)


def _clean_shape(shape: ET.Element, precision: int) -> None:
    if shape.get('stroke') == 'none':
        del shape.attrib['stroke']
        shape.attrib.pop('stroke-width', None)
    for attribute in PAINT_ATTRIBUTES:
        value = shape.get(attribute)
        if value and HEX_COLOR.match(value):
            shape.set(attribute, _color_to_hex_compact(value))
    if shape.get('d') is not None:
        shape.set('d', compact_path_data(shape.get('d'), precision))


def _merge_adjacent_paths(parent: ET.Element) -> int:
    """Join consecutive sibling paths that share every other attribute."""
    merged = 0
    children: List[ET.Element] = list(parent)
    previous = None
    for child in children:
        if len(child):
            merged += _merge_adjacent_paths(child)
        is_path = child.tag.rsplit('}', 1)[-1] == 'path' and (child.get('d') or '').startswith('M')
        if (
            is_path and previous is not None
            and {k: v for k, v in child.attrib.items() if k != 'd'}
            == {k: v for k, v in previous.attrib.items() if k != 'd'}
        ):
            previous.set('d', previous.get('d') + child.get('d'))
            parent.remove(child)
            merged += 1
            continue
        previous = child if is_path else None
    return merged


def optimize_svg(svg_string: str, precision: int = 3) -> str:
    """
    Minify SVG markup without changing how it renders.

    Removes whitespace and redundant attributes, shortens numbers and
    colors, and merges consecutive paths with identical styling.
    """
    document = SvgDocument.parse(svg_string)
    root = document.root
    _remove_whitespace(root)

    for attribute in REDUNDANT_ROOT_ATTRIBUTES:
        root.attrib.pop(attribute, None)

    for shape in document.shapes():
        _clean_shape(shape, precision)

    merged = _merge_adjacent_paths(root)
    optimized = document.to_string()

    logger.debug(
        f"Optimized SVG {get_svg_size(svg_string)} -> {get_svg_size(optimized)} bytes "
        f"({merged} path(s) merged)"
    )
    return optimized
