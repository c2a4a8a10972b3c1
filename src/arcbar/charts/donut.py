"""
Donut chart engine.

Renders one annular slice per data item inside a pie group, a total
readout and a legend of percentage pills. Slices grow from a zero-angle
arc on first draw, tween to their new angles on update, and swap to a
thicker emphasis arc while hovered.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Hashable, Optional

from arcbar.charts.animation import (
    DONUT_INITIAL_DRAW_MS,
    DONUT_UPDATE_MS,
    HOVER_MS,
    ease_back_out,
    ease_cubic_in_out,
)
from arcbar.charts.base import ChartEngine
from arcbar.charts.dataset import build_donut_records, count_non_empty
from arcbar.charts.interaction import ChartClickEvent, PointerEvent
from arcbar.charts.layout import DonutLayout, compute_donut_layout, donut_percentage
from arcbar.charts.models import ChartType, DonutConfig, VisualRecord, format_number
from arcbar.charts.reconciler import JoinResult, reconcile
from arcbar.charts.shapes import ArcGeometry, RectGeometry, arc_contains, arc_path
from arcbar.charts.svg import Element, group, path, rect, svg_root, text

logger = logging.getLogger(__name__)

LEGEND_ROW_HEIGHT = 40
LEGEND_PILL_WIDTH = 65
LEGEND_PILL_HEIGHT = 20
LEGEND_PILL_RADIUS = 12
LEGEND_LABEL_X = 70
LEGEND_PERCENTAGE_X = 10

SLICE_STROKE_WIDTH = 3


class DonutChart(ChartEngine):
    """
    Donut proportion chart.

    Outputs:
        section_click: emits ChartClickEvent when a slice is clicked while
            every item is active
    """

    chart_type = ChartType.DONUT

    def __init__(self, **kwargs: Any):
        super().__init__(**kwargs)
        self.section_click = self._register_emitter("sectionClick")
        self.readout = ""

    @property
    def layout(self) -> Optional[DonutLayout]:
        return self.state.layout if self.state else None

    def _render(self, config: DonutConfig, now_ms: float) -> Dict[str, JoinResult]:
        records = build_donut_records(config)
        layout = compute_donut_layout(config, records)
        self.state.layout = layout
        self.state.dimensions = {
            "width": config.svg_width,
            "height": config.svg_height,
            "radius": layout.radius,
        }

        slices = self.state.layer("slices")
        join = reconcile(slices, records)
        entering = {record.key for record in join.enter}
        for placement in layout.slices:
            key = placement.record.key
            if key in entering:
                start = ArcGeometry(0.0, 0.0, placement.normal.inner_radius, placement.normal.outer_radius)
                self.transitions.start(
                    slices, key, placement.normal, DONUT_INITIAL_DRAW_MS, now_ms,
                    ease=ease_cubic_in_out, source=start, name="enter",
                )
            else:
                self.transitions.start(
                    slices, key, placement.normal, DONUT_UPDATE_MS, now_ms,
                    ease=ease_cubic_in_out, name="update",
                )
        for key in join.exit:
            self.transitions.cancel(slices.name, key)
            if self.hovered == key:
                self.hovered = None

        legend = self.state.layer("legend")
        legend_join = reconcile(legend, records)
        for index, record in enumerate(records):
            legend.set_geometry(record.key, RectGeometry(
                0.0,
                index * LEGEND_ROW_HEIGHT - 5,
                LEGEND_PILL_WIDTH,
                LEGEND_PILL_HEIGHT,
            ))

        return {"slices": join, "legend": legend_join}

    # =========================================================================
    # Text
    # =========================================================================

    def total_value(self, config: Optional[DonutConfig] = None) -> str:
        """Total readout: the data total, or "selected / total" in selection mode."""
        config = config or self.effective
        if config.all_items_active or not config.data_total:
            return format_number(config.data_total)
        selected = config.selected_item
        if selected is None:
            return format_number(config.data_total)
        return f"{format_number(selected.value)} / {format_number(config.data_total)}"

    def legend_label(self, record: VisualRecord) -> str:
        config: DonutConfig = self.effective
        value = 0 if config.data_total == 0 else format_number(record.value)
        return f"{record.source.get('label', '')} ({value})"

    def percentage(self, record: VisualRecord) -> str:
        return donut_percentage(record.value, self.effective.data_total)

    def cursor(self, record: VisualRecord) -> str:
        return "auto" if self.effective.data_total == 0 or record.value == 0 else "pointer"

    def stroke_width(self) -> int:
        return 0 if count_non_empty(self.effective) == 1 else SLICE_STROKE_WIDTH

    # =========================================================================
    # Interaction
    # =========================================================================

    def pointer_over(self, key: Hashable, event: PointerEvent) -> None:
        """Emphasise the slice and show its percentage, only while every item is active."""
        config: DonutConfig = self.effective
        if config is None or not config.all_items_active:
            return
        slices = self.state.layer("slices")
        record = slices.get(key)
        placement = self._placement(key)
        if record is None or placement is None:
            return
        self.transitions.start(
            slices, key, placement.emphasis, HOVER_MS, self.scheduler.now(),
            ease=ease_cubic_in_out, name="hover",
        )
        self.readout = self.percentage(record)
        self._loop.wake()

    def pointer_out(self, key: Hashable, event: PointerEvent) -> None:
        slices = self.state.layer("slices") if self.state else None
        placement = self._placement(key)
        if slices is not None and placement is not None:
            self.transitions.start(
                slices, key, placement.normal, HOVER_MS, self.scheduler.now(),
                ease=ease_back_out, name="leave",
            )
            self._loop.wake()
        self.readout = ""

    def click(self, key: Hashable, event: PointerEvent) -> bool:
        """Emit ``sectionClick`` unless per-item selection mode is on."""
        config: DonutConfig = self.effective
        if config is None or not config.all_items_active:
            logger.debug("Click on %r ignored: not all items are active", key)
            return False
        record = self.state.layer("slices").get(key)
        if record is None:
            return False
        self.section_click.emit(ChartClickEvent(data=dict(record.source), event=event))
        return True

    def _placement(self, key: Hashable):
        layout = self.layout
        if layout is None:
            return None
        for placement in layout.slices:
            if placement.record.key == key:
                return placement
        return None

    def hit_test(self, x: float, y: float) -> Optional[Hashable]:
        if self.state is None or self.layout is None:
            return None
        cx, cy = self.layout.slice_center()
        slices = self.state.layer("slices")
        for key in reversed(slices.order):
            geometry = slices.geometry.get(key)
            if geometry is not None and arc_contains(geometry, x - cx, y - cy):
                return key
        return None

    # =========================================================================
    # Scene
    # =========================================================================

    def _build_scene(self, config: DonutConfig) -> Element:
        layout = self.layout
        root = svg_root(
            config.svg_width,
            config.svg_height,
            "donut-chart" if config.all_items_active else "donut-chart--inactive",
        )

        pie = root.append(group(layout.pie_group_offset.transform(), "donut-chart-group"))
        slices = self.state.layer("slices")
        stroke_width = self.stroke_width()
        for key, record in slices.items():
            element = pie.append(path(
                arc_path(slices.geometry[key]),
                transform=layout.slice_offset.transform(),
                fill=record.color,
                stroke="white",
                **{"stroke-width": stroke_width, "class": "donut-slice", "cursor": self.cursor(record)},
            ))
            element.key = key

        total = root.append(group(layout.total_offset.transform(), "donut-total-group"))
        total.append(text(config.total_title, 0, layout.radius / 12, "donut-chart__total-title"))
        total.append(text(self.total_value(config), 0, layout.radius / 5, "donut-chart__total-value"))
        total.append(text(self.readout, 0, layout.radius / 3.5, "donut-chart__current-percentage"))

        legend = root.append(group(layout.legend_offset.transform(), "donut-chart__legend-group"))
        legend_layer = self.state.layer("legend")
        for key, record in legend_layer.items():
            pill = legend_layer.geometry[key]
            row_y = pill.y + 5
            legend.append(rect(
                pill.x, pill.y, pill.width, pill.height,
                rx=LEGEND_PILL_RADIUS,
                fill=record.color,
                **{"class": "donut-chart__label-percentage-background"},
            ))
            legend.append(text(
                self.percentage(record), LEGEND_PERCENTAGE_X, row_y + 10,
                "donut-chart__label-percentage-text", fill="#FFF",
            ))
            selected = bool(record.source.get("active")) and not config.all_items_active
            legend.append(text(
                self.legend_label(record), LEGEND_LABEL_X, row_y + 10,
                "donut-selected-history-item-text" if selected else "donut-chart__label-text",
            )).key = key
        return root

    def describe(self) -> Dict[str, Any]:
        """Computed layout summary."""
        if self.layout is None:
            return {}
        result = self.layout.to_dict()
        result["total_value"] = self.total_value()
        result["stroke_width"] = self.stroke_width()
        result["mobile_mode"] = self.effective.mobile_mode
        return result
