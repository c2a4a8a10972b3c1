"""
Layout calculation for both chart variants.

The donut layout is a single pass. The grouped column layout runs in two
explicit phases: phase one lays out the legend and the label axis and
measures their footprint; phase two consumes those measurements to size
the column area and build the value scale.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Tuple

from arcbar.charts.dataset import ColumnDataset
from arcbar.charts.models import (
    ColumnConfig,
    DonutConfig,
    LegendEntry,
    VisualRecord,
    format_number,
    percent_text,
)
from arcbar.charts.scales import BandScale, LinearScale
from arcbar.charts.shapes import (
    ArcGeometry,
    CountGeometry,
    RectGeometry,
    Translate,
    floored_value,
    pie_angles,
)

DEFAULT_FONT_SIZE = 12.0


# =============================================================================
# Text Measurement
# =============================================================================

class TextMeasurer(Protocol):
    """Measures the bounding box of rendered text."""

    def measure(self, text: str, font_size: float = DEFAULT_FONT_SIZE) -> Tuple[float, float]:
        """Return (width, height) of ``text``."""
        ...


class ApproximateTextMeasurer:
    """
    Estimates text extents from average glyph proportions.

    Narrow glyphs (digits, punctuation, i/l) count for less than a full
    average character.
    """

    NARROW = set("ilIjtf.,:;'|!() ")

    def __init__(self, char_width_ratio: float = 0.6, line_height_ratio: float = 1.2):
        self.char_width_ratio = char_width_ratio
        self.line_height_ratio = line_height_ratio

    def measure(self, text: str, font_size: float = DEFAULT_FONT_SIZE) -> Tuple[float, float]:
        if not text:
            return (0.0, 0.0)
        units = sum(0.5 if ch in self.NARROW else 1.0 for ch in text)
        return (units * font_size * self.char_width_ratio, font_size * self.line_height_ratio)


# =============================================================================
# Donut Layout
# =============================================================================

@dataclass
class SliceLayout:
    """Target placement of one slice."""
    record: VisualRecord
    normal: ArcGeometry
    emphasis: ArcGeometry
    percentage: str


@dataclass
class DonutLayout:
    """Computed donut geometry."""
    radius: float
    inner_radius: float
    outer_radius: float
    emphasis_inner_radius: float
    slices: List[SliceLayout] = field(default_factory=list)
    slice_offset: Translate = Translate(0, 0)
    pie_group_offset: Translate = Translate(-60, 0)
    legend_offset: Translate = Translate(0, 0)
    total_offset: Translate = Translate(0, 0)

    def slice_center(self) -> Tuple[float, float]:
        """Position of the arc centre in SVG coordinates."""
        return (
            self.pie_group_offset.x + self.slice_offset.x,
            self.pie_group_offset.y + self.slice_offset.y,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "radius": self.radius,
            "inner_radius": self.inner_radius,
            "outer_radius": self.outer_radius,
            "emphasis_inner_radius": self.emphasis_inner_radius,
            "center": list(self.slice_center()),
            "slices": [
                {
                    "key": list(s.record.key),
                    "value": s.record.value,
                    "start_angle": s.normal.start_angle,
                    "end_angle": s.normal.end_angle,
                    "percentage": s.percentage,
                }
                for s in self.slices
            ],
        }


def donut_percentage(value: float, data_total: float) -> str:
    """Percentage of ``value`` within ``data_total`` for labels and readouts."""
    if data_total > 0:
        return percent_text(value * 100 / data_total)
    return "0%"


def compute_donut_layout(config: DonutConfig, records: List[VisualRecord]) -> DonutLayout:
    """Compute radii, slice angles and group placements."""
    radius = min(config.width, config.height) / 1.2
    inner = radius - radius * 0.5
    outer = radius - radius / 1.45
    emphasis_inner = radius - radius * 0.45

    angles = pie_angles(
        [r.value for r in records],
        lambda v: floored_value(v, config.data_total),
    )

    layout = DonutLayout(
        radius=radius,
        inner_radius=inner,
        outer_radius=outer,
        emphasis_inner_radius=emphasis_inner,
        slice_offset=Translate(config.width / 3, config.height / 2),
        legend_offset=(
            Translate(70, config.height) if config.mobile_mode
            else Translate(config.width / 2, config.height / 5)
        ),
        total_offset=Translate(140, config.height / 2 - radius / 8),
    )
    for record, (start, end) in zip(records, angles):
        layout.slices.append(SliceLayout(
            record=record,
            normal=ArcGeometry(start, end, inner, outer),
            emphasis=ArcGeometry(start, end, emphasis_inner, outer),
            percentage=donut_percentage(record.value, config.data_total),
        ))
    return layout


# =============================================================================
# Grouped Column Layout
# =============================================================================

@dataclass
class LegendItemLayout:
    """Placement of one legend slot."""
    entry: LegendEntry
    offset: Translate
    text: str
    text_width: float
    text_y: float


@dataclass
class LegendLayout:
    """Phase-one legend result."""
    items: List[LegendItemLayout] = field(default_factory=list)
    all_width: float = 0.0
    offset: Translate = Translate(0, 0)
    extent_height: float = 0.0
    total_height: float = 0.0


@dataclass
class AxisTick:
    """A label tick on the bottom axis."""
    label: str
    x: float
    width: float
    height: float


@dataclass
class AxisLayout:
    """Phase-one axis result."""
    ticks: List[AxisTick] = field(default_factory=list)
    length: float = 0.0
    extent_height: float = 0.0


@dataclass
class ChromeMeasurements:
    """Measured footprint of everything that is not a column."""
    legend: LegendLayout
    axis: AxisLayout
    x_scale: BandScale
    x_in_scale: BandScale

    @property
    def total_legend_height(self) -> float:
        return self.legend.total_height

    @property
    def total_label_height(self) -> float:
        return self.axis.extent_height


@dataclass
class BarLayout:
    """Target placement of one bar and its count label."""
    record: VisualRecord
    rect: RectGeometry
    enter_rect: RectGeometry
    count: CountGeometry
    count_text: str


@dataclass
class ColumnLayout:
    """Phase-two result: the settled column chart geometry."""
    chrome: ChromeMeasurements
    column_area_height: float
    y_scale: LinearScale
    bars: List[BarLayout] = field(default_factory=list)

    @property
    def total_label_height(self) -> float:
        return self.chrome.total_label_height

    @property
    def total_legend_height(self) -> float:
        return self.chrome.total_legend_height

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "column_area_height": self.column_area_height,
            "total_label_height": self.total_label_height,
            "total_legend_height": self.total_legend_height,
            "x_scale": self.chrome.x_scale.to_dict(),
            "x_in_scale": self.chrome.x_in_scale.to_dict(),
            "y_scale": self.y_scale.to_dict(),
            "bars": [
                {
                    "key": [str(k) for k in b.record.key],
                    "value": b.record.value,
                    "striped": b.record.striped,
                    "x": b.rect.x,
                    "y": b.rect.y,
                    "width": b.rect.width,
                    "height": b.rect.height,
                }
                for b in self.bars
            ],
        }


def count_label_width(value: float) -> float:
    """Width of the count label background for ``value``."""
    return len(format_number(value)) * 6 + 20


def measure_column_chrome(
    config: ColumnConfig,
    dataset: ColumnDataset,
    measurer: TextMeasurer,
    font_size: float = DEFAULT_FONT_SIZE,
) -> ChromeMeasurements:
    """
    Phase one: lay out legend and axis and measure their footprint.

    Legend offsets accumulate left to right over the non-striped entries:
    each entry starts after the previous entry's text plus the fixed gaps.
    Striped entries share their series' offset and carry no text.
    """
    x_scale = BandScale(
        config.labels,
        (0.0, config.width),
        padding_inner=0.5,
        padding_outer=0.3,
    )
    x_in_scale = BandScale(
        [str(i) for i in range(config.series_number)],
        (0.0, x_scale.bandwidth()),
        padding_inner=0.2,
    )

    legend = LegendLayout()
    if config.draw_legend and dataset.legend:
        all_gaps = (
            config.legend_width
            + config.gap_between_text_and_rect_legend
            + config.gap_between_legend
        )
        offsets: Dict[int, float] = {}
        widths: List[float] = []
        text_height = 0.0
        previous: Optional[Tuple[float, float]] = None
        for entry in dataset.legend:
            if entry.striped:
                continue
            width, height = measurer.measure(entry.label, font_size)
            text_height = max(text_height, height)
            offset = 0.0 if previous is None else previous[0] + previous[1] + all_gaps
            offsets[entry.series_index] = offset
            widths.append(width)
            previous = (offset, width)

        for entry in dataset.legend:
            text = "" if entry.striped else entry.label
            width = 0.0 if entry.striped else measurer.measure(text, font_size)[0]
            legend.items.append(LegendItemLayout(
                entry=entry,
                offset=Translate(offsets.get(entry.series_index, 0.0), 0),
                text=text,
                text_width=width,
                text_y=config.legend_height - text_height * 0.3,
            ))

        n = config.series_number
        legend.all_width = (
            sum(widths)
            + config.legend_width * n
            + config.gap_between_text_and_rect_legend * n
            + config.gap_between_legend * max(0, n - 1)
        )
        legend.offset = Translate(
            (config.width - legend.all_width) * 0.5,
            config.height - config.legend_height,
        )
        legend.extent_height = max(config.legend_height, text_height)
        legend.total_height = legend.extent_height + config.gap_between_legend_and_columns

    axis = AxisLayout(length=config.width)
    tick_height = 0.0
    bandwidth = x_scale.bandwidth()
    for label in x_scale.domain:
        width, height = measurer.measure(str(label), font_size)
        tick_height = max(tick_height, height)
        axis.ticks.append(AxisTick(
            label=str(label),
            x=(x_scale(label) or 0.0) + bandwidth / 2,
            width=width,
            height=height,
        ))
    axis.extent_height = config.label_top_padding + tick_height if axis.ticks else 0.0

    return ChromeMeasurements(legend=legend, axis=axis, x_scale=x_scale, x_in_scale=x_in_scale)


def compute_column_layout(
    config: ColumnConfig,
    dataset: ColumnDataset,
    chrome: ChromeMeasurements,
    measurer: TextMeasurer,
    font_size: float = DEFAULT_FONT_SIZE,
) -> ColumnLayout:
    """Phase two: size the column area from the measured chrome and place bars."""
    column_height = config.height - chrome.total_label_height - chrome.total_legend_height
    y_scale = LinearScale(
        (0.0, dataset.max_value),
        (column_height, config.gap_between_column_and_count + config.count_rect_height),
    )
    layout = ColumnLayout(chrome=chrome, column_area_height=column_height, y_scale=y_scale)

    x_in = chrome.x_in_scale
    bandwidth = x_in.bandwidth()
    for record in dataset.records():
        group_x = chrome.x_scale(config.labels[record.group_index]) or 0.0
        slot_x = group_x + (x_in(str(record.series_index)) or 0.0)
        y = y_scale(record.value)
        text = "" if record.striped else format_number(record.value)
        text_width = measurer.measure(text, font_size)[0]
        label_width = count_label_width(record.value)
        centre = slot_x + bandwidth * 0.5
        layout.bars.append(BarLayout(
            record=record,
            rect=RectGeometry(slot_x, y, bandwidth, column_height - y),
            enter_rect=RectGeometry(slot_x, column_height, 0.0, 0.0),
            count=CountGeometry(
                rect_x=centre - label_width * 0.5,
                rect_y=y - config.gap_between_column_and_count - config.count_rect_height * 0.75,
                rect_width=0.0 if record.striped else label_width,
                text_x=centre - text_width * 0.5,
                text_y=y - config.gap_between_column_and_count,
            ),
            count_text=text,
        ))
    return layout
