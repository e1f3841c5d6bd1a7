"""Structured access to traced SVG markup."""
import copy
import re
import xml.etree.ElementTree as ET
from typing import Dict, List, Tuple

from flatvec.types import MarkupError

SVG_NS = "http://www.w3.org/2000/svg"
ET.register_namespace("", SVG_NS)

HEX_COLOR = re.compile(r"^#(?:[0-9a-f]{3}){1,2}$", re.IGNORECASE)
SHAPE_TAGS = ("path", "rect", "circle", "ellipse", "polygon", "polyline", "line")
PAINT_ATTRIBUTES = ("fill", "stroke")


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


class SvgDocument:
    """
    Parsed SVG markup.

    Stages annotate shapes through their presentation attributes and
    serialize once; geometry attributes are never touched.
    """

    def __init__(self, root: ET.Element):
        if _local_name(root.tag) != "svg":
            raise MarkupError(f"Root element is <{_local_name(root.tag)}>, expected <svg>")
        self.root = root

    @classmethod
    def parse(cls, markup: str) -> "SvgDocument":
        try:
            root = ET.fromstring(markup)
        except ET.ParseError as e:
            raise MarkupError(f"Cannot parse SVG markup: {e}") from e
        return cls(root)

    def copy(self) -> "SvgDocument":
        return SvgDocument(copy.deepcopy(self.root))

    def to_string(self) -> str:
        return ET.tostring(self.root, encoding="unicode")

    def shapes(self) -> List[ET.Element]:
        """All drawable shapes, in document (z) order."""
        return [el for el in self.root.iter() if _local_name(el.tag) in SHAPE_TAGS]

    def remove(self, shape: ET.Element) -> None:
        for parent in self.root.iter():
            if shape in list(parent):
                parent.remove(shape)
                return

    def size(self) -> Tuple[int, int]:
        """Pixel width/height from the root attributes."""
        width = self.root.get("width")
        height = self.root.get("height")
        if width is None or height is None:
            raise MarkupError("Root <svg> has no width/height attributes")
        try:
            return int(round(float(width))), int(round(float(height)))
        except ValueError as e:
            raise MarkupError(f"Non-numeric size {width!r} x {height!r}") from e

    def paint_colors(self) -> List[str]:
        """Distinct hex fill/stroke colors, lowercased, in document order."""
        seen: Dict[str, None] = {}
        for shape in self.shapes():
            for attribute in PAINT_ATTRIBUTES:
                value = shape.get(attribute)
                if value and HEX_COLOR.match(value):
                    seen.setdefault(value.lower(), None)
        return list(seen)

    def replace_colors(self, replacements: Dict[str, str]) -> None:
        """Rewrite fill/stroke values found in ``replacements`` (keys lowercase)."""
        for shape in self.shapes():
            for attribute in PAINT_ATTRIBUTES:
                value = shape.get(attribute)
                if value and value.lower() in replacements:
                    shape.set(attribute, replacements[value.lower()])


def viewboxify(markup: str) -> str:
    """Swap the root's fixed width/height for an equivalent viewBox."""
    document = SvgDocument.parse(markup)
    width = document.root.get("width")
    height = document.root.get("height")
    if width is None or height is None:
        raise MarkupError("Cannot build viewBox: root <svg> has no width/height")
    document.root.set("viewBox", f"0 0 {width} {height}")
    del document.root.attrib["width"]
    del document.root.attrib["height"]
    return document.to_string()
