"""
Retained scene elements and SVG serialization.

Charts build a fresh element tree from their render state whenever a
frame is requested; the tree serializes to a standalone SVG document.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, Iterator, List, Optional

from arcbar.charts.shapes import fmt

SVG_NS = "http://www.w3.org/2000/svg"


def escape(text: str) -> str:
    """Escape special characters for XML."""
    return (text
            .replace("&", "&amp;")
            .replace("<", "&lt;")
            .replace(">", "&gt;")
            .replace('"', "&quot;")
            .replace("'", "&#39;"))


def _attr_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return fmt(value)
    return escape(str(value))


@dataclass
class Element:
    """
    A node of the rendered scene.

    Attributes:
        tag: SVG tag name
        attrs: Attribute values; None values are omitted
        text: Text content
        children: Child elements
        key: Identity of the record the element renders, if any
    """
    tag: str
    attrs: Dict[str, Any] = field(default_factory=dict)
    text: Optional[str] = None
    children: List[Element] = field(default_factory=list)
    key: Optional[Hashable] = None

    def append(self, child: Element) -> Element:
        self.children.append(child)
        return child

    def iter(self) -> Iterator[Element]:
        """Depth-first traversal including self."""
        yield self
        for child in self.children:
            yield from child.iter()

    def find_all(self, tag: Optional[str] = None, css_class: Optional[str] = None) -> List[Element]:
        found = []
        for element in self.iter():
            if tag is not None and element.tag != tag:
                continue
            if css_class is not None and css_class not in str(element.attrs.get("class", "")).split():
                continue
            found.append(element)
        return found

    def to_svg(self, indent: int = 0) -> str:
        pad = "  " * indent
        attrs = "".join(
            f' {name}="{_attr_value(value)}"'
            for name, value in self.attrs.items()
            if value is not None
        )
        if not self.children and self.text is None:
            return f"{pad}<{self.tag}{attrs}/>"
        if not self.children:
            return f"{pad}<{self.tag}{attrs}>{escape(self.text)}</{self.tag}>"
        inner = "\n".join(child.to_svg(indent + 1) for child in self.children)
        text = escape(self.text) if self.text else ""
        return f"{pad}<{self.tag}{attrs}>{text}\n{inner}\n{pad}</{self.tag}>"


def svg_root(width: float, height: float, css_class: Optional[str] = None) -> Element:
    return Element("svg", {
        "xmlns": SVG_NS,
        "width": width,
        "height": height,
        "class": css_class,
    })


def group(transform: Optional[str] = None, css_class: Optional[str] = None, **attrs: Any) -> Element:
    values: Dict[str, Any] = {"class": css_class, "transform": transform}
    values.update(attrs)
    return Element("g", values)


def text(content: str, x: float = 0, y: float = 0, css_class: Optional[str] = None, **attrs: Any) -> Element:
    values: Dict[str, Any] = {"x": x, "y": y, "class": css_class}
    values.update(attrs)
    return Element("text", values, text=content)


def rect(x: float, y: float, width: float, height: float, **attrs: Any) -> Element:
    values: Dict[str, Any] = {"x": x, "y": y, "width": max(0.0, width), "height": max(0.0, height)}
    values.update(attrs)
    return Element("rect", values)


def path(d: str, **attrs: Any) -> Element:
    values: Dict[str, Any] = {"d": d}
    values.update(attrs)
    return Element("path", values)


def stripe_pattern(pattern_id: str, width: float, stripe_width: float, height: float = 8) -> Element:
    """Diagonal white stripe fill used by striped bars and legend swatches."""
    pattern = Element("pattern", {
        "id": pattern_id,
        "patternUnits": "userSpaceOnUse",
        "width": width,
        "height": height,
        "patternTransform": "rotate(45 0 0)",
    })
    pattern.append(rect(0, 0, stripe_width, height, fill="white"))
    return pattern
