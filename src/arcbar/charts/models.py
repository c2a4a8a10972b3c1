"""
Chart configuration and render data models for arcbar.

Provides the declarative configuration types for the donut and grouped
column charts, the documented defaults, and the per-primitive records the
render pipeline passes between stages.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union


# =============================================================================
# Enums
# =============================================================================

class ChartType(Enum):
    """Types of charts rendered by the engine."""
    DONUT = "donut"
    GROUPED_COLUMN = "column"


# =============================================================================
# Defaults
# =============================================================================

DONUT_DEFAULTS: Dict[str, Any] = {
    "height": 300,
    "width": 600,
    "totalTitle": "Total:",
    "allItemsActive": True,
    "dataTotal": 100,
}

COLUMN_DEFAULTS: Dict[str, Any] = {
    "width": 800,
    "height": 400,
    "barWidth": 60,
    "gapBetweenBars": 20,
    "gapBetweenGroups": 56,
    "gapBetweenLegendAndColumns": 20,
    "labelTopPadding": 20,
    "legendHeight": 20,
    "legendWidth": 20,
    "countRectHeight": 20,
    "gapBetweenLegend": 20,
    "gapBetweenTextAndRectLegend": 6,
    "gapBetweenColumnAndCount": 15,
    "colorCountRect": "#f2f2f2",
    "drawLegend": True,
    "showPercentage": True,
}

# Mobile corrections applied to the donut when the container is narrower
# than the configured width.
MOBILE_HEIGHT_CORRECTION = 200
MOBILE_WIDTH_CORRECTION = 180

_SNAKE_RE = re.compile(r"_([a-z])")


def camel_key(key: str) -> str:
    """Convert a snake_case option name to the camelCase form used in configs."""
    return _SNAKE_RE.sub(lambda m: m.group(1).upper(), key)


def camelize(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """Return a shallow copy of ``raw`` with snake_case keys camelCased."""
    return {camel_key(str(k)): v for k, v in raw.items()}


def format_number(value: Union[int, float]) -> str:
    """Format a number the way a JavaScript ``Number.toString()`` would."""
    if isinstance(value, bool):
        return str(int(value))
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def percent_text(value: float) -> str:
    """
    Format a percentage with one decimal, rounding exact ties up.

    Matches JavaScript ``toFixed(1)``, which rounds the exact binary value
    half-up, so 12.25 reads "12.3%".
    """
    rounded = Decimal(value).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return f"{rounded}%"


# =============================================================================
# Donut Configuration
# =============================================================================

@dataclass(frozen=True)
class DonutItem:
    """
    A single donut data entry.

    Attributes:
        value: Numeric value of the slice
        color: Fill color
        label: Legend label
        active: Whether the item is the selected item
        id: Optional stable identity
    """
    value: float
    color: str = ""
    label: str = ""
    active: bool = False
    id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> DonutItem:
        """Create from dictionary."""
        raw_id = data.get("id")
        return cls(
            value=data.get("value", 0) or 0,
            color=data.get("color", ""),
            label=data.get("label", ""),
            active=bool(data.get("active", False)),
            id=str(raw_id) if raw_id is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        result: Dict[str, Any] = {
            "value": self.value,
            "color": self.color,
            "label": self.label,
            "active": self.active,
        }
        if self.id is not None:
            result["id"] = self.id
        return result


@dataclass(frozen=True)
class DonutConfig:
    """
    Effective donut configuration, produced by the normalizer.

    Attributes:
        width: Configured width
        height: Configured height
        total_title: Caption shown above the total
        all_items_active: Whether every slice is interactive
        data_total: Denominator for percentages
        data: Slice entries
        mobile_mode: Container is narrower than the configured width
        svg_width: Width after mobile correction
        svg_height: Height after mobile correction
    """
    width: float
    height: float
    total_title: str
    all_items_active: bool
    data_total: float
    data: Tuple[DonutItem, ...]
    mobile_mode: bool = False
    svg_width: float = 0.0
    svg_height: float = 0.0

    @property
    def selected_item(self) -> Optional[DonutItem]:
        """The single selected item, if any."""
        for item in self.data:
            if item.active:
                return item
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "width": self.width,
            "height": self.height,
            "totalTitle": self.total_title,
            "allItemsActive": self.all_items_active,
            "dataTotal": self.data_total,
            "data": [item.to_dict() for item in self.data],
            "mobileMode": self.mobile_mode,
            "svgWidth": self.svg_width,
            "svgHeight": self.svg_height,
        }


# =============================================================================
# Grouped Column Configuration
# =============================================================================

@dataclass(frozen=True)
class SeriesPoint:
    """One value of a series at a label position."""
    value: float
    color: str = ""
    id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], default_color: str = "") -> SeriesPoint:
        """Create from dictionary."""
        raw_id = data.get("id")
        return cls(
            value=data.get("value", 0) or 0,
            color=data.get("color") or default_color,
            id=str(raw_id) if raw_id is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {"value": self.value, "color": self.color, "id": self.id}


@dataclass(frozen=True)
class Series:
    """
    A column chart series.

    Attributes:
        legend: Legend text
        color: Legend swatch color
        striped: Render a textured overlay bar next to every base bar
        data: One point per label
    """
    legend: str
    color: str
    striped: bool = False
    data: Tuple[SeriesPoint, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Series:
        """Create from dictionary."""
        color = data.get("color", "")
        return cls(
            legend=str(data.get("legend", "")),
            color=color,
            striped=bool(data.get("striped", False)),
            data=tuple(SeriesPoint.from_dict(p, color) for p in data.get("data") or []),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "legend": self.legend,
            "color": self.color,
            "striped": self.striped,
            "data": [p.to_dict() for p in self.data],
        }


@dataclass(frozen=True)
class ColumnConfig:
    """Effective grouped column configuration, produced by the normalizer."""
    width: float
    height: float
    labels: Tuple[str, ...]
    series: Tuple[Series, ...]
    draw_legend: bool = True
    show_percentage: bool = True
    bar_width: float = 60
    gap_between_bars: float = 20
    gap_between_groups: float = 56
    gap_between_legend_and_columns: float = 20
    label_top_padding: float = 20
    legend_height: float = 20
    legend_width: float = 20
    count_rect_height: float = 20
    gap_between_legend: float = 20
    gap_between_text_and_rect_legend: float = 6
    gap_between_column_and_count: float = 15
    color_count_rect: str = "#f2f2f2"
    configured_width: float = 800
    mobile_mode: bool = False

    @property
    def groups_number(self) -> int:
        return len(self.labels)

    @property
    def series_number(self) -> int:
        return len(self.series)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "width": self.width,
            "height": self.height,
            "labels": list(self.labels),
            "series": [s.to_dict() for s in self.series],
            "drawLegend": self.draw_legend,
            "showPercentage": self.show_percentage,
            "legendHeight": self.legend_height,
            "configuredWidth": self.configured_width,
            "mobileMode": self.mobile_mode,
        }


# =============================================================================
# Render Records
# =============================================================================

Key = Tuple[Any, ...]


@dataclass(frozen=True)
class VisualRecord:
    """
    One rendered primitive.

    Attributes:
        key: Identity used by the reconciler
        series_index: Index of the owning series (slice index for donuts)
        value: True value of the record
        color: Fill color
        striped: Textured overlay duplicate
        group_index: Label position (column chart only)
        source: Payload emitted on click
    """
    key: Key
    series_index: int
    value: float
    color: str
    striped: bool = False
    group_index: int = -1
    source: Dict[str, Any] = field(default_factory=dict, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the click payload representation."""
        result = {
            "ser": self.series_index,
            "striped": self.striped,
            "value": self.value,
            "color": self.color,
        }
        result.update(self.source)
        return result


@dataclass(frozen=True)
class LegendEntry:
    """A legend slot derived from a series."""
    color: str
    label: str
    striped: bool
    series_index: int

    @property
    def key(self) -> Key:
        return ("legend", self.series_index, self.striped)


@dataclass(frozen=True)
class Container:
    """Measurable host element dimensions."""
    width: float
    height: float = 0.0

    @property
    def client_width(self) -> float:
        return self.width

    @classmethod
    def coerce(cls, value: Union[Container, Tuple[float, float], Mapping[str, Any], float]) -> Container:
        """Build a container from a tuple, mapping or bare width."""
        if isinstance(value, Container):
            return value
        if isinstance(value, Mapping):
            return cls(width=float(value.get("width", 0)), height=float(value.get("height", 0)))
        if isinstance(value, (tuple, list)):
            width, height = value
            return cls(width=float(width), height=float(height))
        return cls(width=float(value))


def item_list(values: Optional[List[Mapping[str, Any]]]) -> Tuple[DonutItem, ...]:
    """Convert raw donut data entries to items."""
    return tuple(DonutItem.from_dict(v) for v in values or [])
