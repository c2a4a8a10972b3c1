"""
Shape geometry and path generators.

Geometry values are plain numeric dataclasses so the animation engine can
interpolate them field by field. Angles are in radians, measured clockwise
from twelve o'clock.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, List, Sequence, Tuple

TAU = 2 * math.pi
_EPSILON = 1e-12

# Values below this share of the data total are drawn at exactly this share.
MIN_SLICE_SHARE = 0.01


# =============================================================================
# Geometry Types
# =============================================================================

@dataclass(frozen=True)
class ArcGeometry:
    """Annular sector parameters."""
    start_angle: float
    end_angle: float
    inner_radius: float
    outer_radius: float

    @property
    def span(self) -> float:
        return self.end_angle - self.start_angle

    def centroid(self) -> Tuple[float, float]:
        r = (self.inner_radius + self.outer_radius) / 2
        a = (self.start_angle + self.end_angle) / 2
        return (r * math.sin(a), -r * math.cos(a))


@dataclass(frozen=True)
class RectGeometry:
    """Axis-aligned rectangle."""
    x: float
    y: float
    width: float
    height: float

    def contains(self, px: float, py: float) -> bool:
        return self.x <= px <= self.x + self.width and self.y <= py <= self.y + self.height


@dataclass(frozen=True)
class Translate:
    """A translation offset."""
    x: float
    y: float

    def transform(self) -> str:
        return f"translate({fmt(self.x)}, {fmt(self.y)})"


@dataclass(frozen=True)
class CountGeometry:
    """Count label placement: background rect plus centred text anchor."""
    rect_x: float
    rect_y: float
    rect_width: float
    text_x: float
    text_y: float


def fmt(value: float) -> str:
    """Format a coordinate compactly for path and attribute output."""
    if abs(value) < 1e-9:
        return "0"
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


# =============================================================================
# Pie Layout
# =============================================================================

def pie_angles(
    values: Sequence[float],
    value_fn: Callable[[float], float] = float,
    start_angle: float = 0.0,
    end_angle: float = TAU,
) -> List[Tuple[float, float]]:
    """
    Allocate a proportional angular sweep to each value, in input order.

    Returns (start, end) pairs. When the weighted values sum to zero every
    slice collapses to a zero span at ``start_angle``.
    """
    weights = [max(0.0, value_fn(v)) for v in values]
    total = sum(weights)
    k = (end_angle - start_angle) / total if total else 0.0
    angles = []
    current = start_angle
    for weight in weights:
        nxt = current + weight * k
        angles.append((current, nxt))
        current = nxt
    return angles


def floored_value(value: float, data_total: float) -> float:
    """
    Weight used for angle allocation.

    Any non-zero value below 1% of ``data_total`` is raised to exactly 1%
    so that tiny slices stay visible.
    """
    if value != 0 and data_total and value / data_total < MIN_SLICE_SHARE:
        return data_total * MIN_SLICE_SHARE
    return value


# =============================================================================
# Arc Path Generator
# =============================================================================

def _point(radius: float, angle: float) -> Tuple[float, float]:
    return (radius * math.sin(angle), -radius * math.cos(angle))


def arc_path(arc: ArcGeometry) -> str:
    """Build a closed SVG path for an annular sector centred on the origin."""
    r0 = max(0.0, min(arc.inner_radius, arc.outer_radius))
    r1 = max(0.0, max(arc.inner_radius, arc.outer_radius))
    a0, a1 = arc.start_angle, arc.end_angle
    span = abs(a1 - a0)
    sweep = 1 if a1 >= a0 else 0

    if r1 <= _EPSILON:
        return "M0,0Z"

    if span >= TAU - 1e-9:
        # Full ring: two half circles per radius.
        path = (
            f"M0,{fmt(-r1)}"
            f"A{fmt(r1)},{fmt(r1)},0,1,1,0,{fmt(r1)}"
            f"A{fmt(r1)},{fmt(r1)},0,1,1,0,{fmt(-r1)}"
        )
        if r0 > _EPSILON:
            path += (
                f"M0,{fmt(-r0)}"
                f"A{fmt(r0)},{fmt(r0)},0,1,0,0,{fmt(r0)}"
                f"A{fmt(r0)},{fmt(r0)},0,1,0,0,{fmt(-r0)}"
            )
        return path + "Z"

    large = 1 if span > math.pi else 0
    ox0, oy0 = _point(r1, a0)
    ox1, oy1 = _point(r1, a1)
    path = f"M{fmt(ox0)},{fmt(oy0)}A{fmt(r1)},{fmt(r1)},0,{large},{sweep},{fmt(ox1)},{fmt(oy1)}"
    if r0 > _EPSILON:
        ix1, iy1 = _point(r0, a1)
        ix0, iy0 = _point(r0, a0)
        path += (
            f"L{fmt(ix1)},{fmt(iy1)}"
            f"A{fmt(r0)},{fmt(r0)},0,{large},{1 - sweep},{fmt(ix0)},{fmt(iy0)}"
        )
    else:
        path += "L0,0"
    return path + "Z"


# =============================================================================
# Hit Testing
# =============================================================================

def arc_contains(arc: ArcGeometry, px: float, py: float) -> bool:
    """Whether a point relative to the arc centre lies inside the sector."""
    if arc.span <= 0:
        return False
    r = math.hypot(px, py)
    inner = min(arc.inner_radius, arc.outer_radius)
    outer = max(arc.inner_radius, arc.outer_radius)
    if r < inner or r > outer:
        return False
    angle = math.atan2(px, -py) % TAU
    start = arc.start_angle % TAU
    span = arc.span
    if span >= TAU:
        return True
    offset = (angle - start) % TAU
    return offset < span
