"""
Grouped column chart engine.

Each label position hosts one bar per series (plus a textured overlay bar
for striped series) with a count label above it. A centred legend sits at
the bottom and the label axis between legend and columns. Bars rise from
the baseline on enter and re-lay out with a linear tween.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Hashable, Optional

from arcbar.charts.animation import COLUMN_RELAYOUT_MS, ease_linear
from arcbar.charts.base import ChartEngine
from arcbar.charts.dataset import ColumnDataset, build_column_dataset
from arcbar.charts.interaction import ChartClickEvent, PointerEvent, TooltipState, darker
from arcbar.charts.layout import (
    BarLayout,
    ColumnLayout,
    compute_column_layout,
    measure_column_chrome,
)
from arcbar.charts.models import ChartType, ColumnConfig, percent_text
from arcbar.charts.reconciler import JoinResult, reconcile
from arcbar.charts.shapes import Translate
from arcbar.charts.svg import Element, group, path, rect, stripe_pattern, svg_root, text

logger = logging.getLogger(__name__)

BAR_PATTERN_ID = "striped-bar-pattern"
LEGEND_PATTERN_ID = "striped_legend_pattern"
STRIPED_BAR_OPACITY = 0.2
STRIPED_LEGEND_OPACITY = 0.3
LEGEND_TEXT_COLOR = "#53565a"
AXIS_COLOR = "#bbbcbc"
COUNT_RECT_RADIUS = 10
HOVER_DARKEN = 0.5


class GroupedColumnChart(ChartEngine):
    """
    Grouped column comparison chart.

    Outputs:
        bar_click: emits ChartClickEvent for every bar click
    """

    chart_type = ChartType.GROUPED_COLUMN

    def __init__(self, **kwargs: Any):
        super().__init__(**kwargs)
        self.bar_click = self._register_emitter("barClick")
        self.tooltip = TooltipState()
        self.dataset: Optional[ColumnDataset] = None
        self.emphasized: Optional[Hashable] = None
        self._bars: Dict[Hashable, BarLayout] = {}

    @property
    def layout(self) -> Optional[ColumnLayout]:
        return self.state.layout if self.state else None

    def _render(self, config: ColumnConfig, now_ms: float) -> Dict[str, JoinResult]:
        dataset = build_column_dataset(config)

        # Phase one measures legend and axis, phase two sizes the column area.
        chrome = measure_column_chrome(config, dataset, self.measurer, self.font_size)
        layout = compute_column_layout(config, dataset, chrome, self.measurer, self.font_size)

        self.dataset = dataset
        self.state.layout = layout
        self.state.scales = {
            "x": chrome.x_scale,
            "x_in": chrome.x_in_scale,
            "y": layout.y_scale,
        }
        self.state.dimensions = {
            "width": config.width,
            "height": config.height,
            "column_area_height": layout.column_area_height,
            "total_label_height": layout.total_label_height,
            "total_legend_height": layout.total_legend_height,
        }
        self._bars = {bar.record.key: bar for bar in layout.bars}

        joins: Dict[str, JoinResult] = {}

        blocks = self.state.layer("blocks")
        block_records = [("block", "axis")]
        if config.draw_legend:
            block_records.append(("block", "legend"))
        joins["blocks"] = reconcile(blocks, block_records, key_fn=lambda k: k)
        blocks.set_geometry(("block", "axis"), Translate(0.0, layout.column_area_height))
        if config.draw_legend:
            # The legend block slides in from the left edge on first render.
            legend_key = ("block", "legend")
            self.transitions.start(
                blocks, legend_key, chrome.legend.offset, COLUMN_RELAYOUT_MS, now_ms,
                ease=ease_linear,
                source=Translate(0.0, config.height - config.legend_height)
                if legend_key in joins["blocks"].enter else None,
            )

        legend = self.state.layer("legend")
        joins["legend"] = reconcile(legend, chrome.legend.items, key_fn=lambda item: item.entry.key)
        for item in chrome.legend.items:
            legend.set_geometry(item.entry.key, item.offset)

        axis = self.state.layer("axis")
        joins["axis"] = reconcile(axis, chrome.axis.ticks, key_fn=lambda tick: ("tick", tick.label))
        for tick in chrome.axis.ticks:
            axis.set_geometry(("tick", tick.label), Translate(tick.x, 0.0))

        counts = self.state.layer("counts")
        joins["counts"] = reconcile(counts, [bar.record for bar in layout.bars])
        entering = {record.key for record in joins["counts"].enter}
        for bar in layout.bars:
            if bar.record.key in entering:
                counts.set_geometry(bar.record.key, bar.count)
            else:
                self._move(counts, bar.record.key, bar.count, now_ms)

        bars = self.state.layer("bars")
        joins["bars"] = reconcile(bars, [bar.record for bar in layout.bars])
        entering = {record.key for record in joins["bars"].enter}
        for bar in layout.bars:
            key = bar.record.key
            self.transitions.start(
                bars, key, bar.rect, COLUMN_RELAYOUT_MS, now_ms,
                ease=ease_linear,
                source=bar.enter_rect if key in entering else None,
                name="enter" if key in entering else "update",
            )
        for key in joins["bars"].exit:
            self.transitions.cancel(bars.name, key)
            self.transitions.cancel(counts.name, key)
            self.tooltip.leave(key)
            if self.emphasized == key:
                self.emphasized = None
            if self.hovered == key:
                self.hovered = None

        return joins

    def _move(self, layer, key: Hashable, target: Any, now_ms: float) -> None:
        self.transitions.start(layer, key, target, COLUMN_RELAYOUT_MS, now_ms, ease=ease_linear)

    # =========================================================================
    # Interaction
    # =========================================================================

    def tooltip_text(self, key: Hashable) -> str:
        record = self.state.layer("bars").get(key)
        return percent_text(self.dataset.percentage(record))

    def pointer_over(self, key: Hashable, event: PointerEvent) -> None:
        record = self.state.layer("bars").get(key)
        if record is not None and not record.striped:
            self.emphasized = key

    def pointer_move(self, key: Hashable, event: PointerEvent) -> None:
        """Show the percentage tooltip next to the pointer."""
        if not self.effective.show_percentage or key not in self.state.layer("bars"):
            return
        self.tooltip.show(key, event.x, event.y, self.tooltip_text(key))

    def pointer_out(self, key: Hashable, event: PointerEvent) -> None:
        if self.emphasized == key:
            self.emphasized = None
        self.tooltip.leave(key)

    def click(self, key: Hashable, event: PointerEvent) -> bool:
        """Emit ``barClick`` and suppress the tooltip until the pointer leaves."""
        record = self.state.layer("bars").get(key) if self.state else None
        if record is None:
            return False
        self.tooltip.mark_clicked(key)
        self.bar_click.emit(ChartClickEvent(data=record.to_dict(), event=event))
        return True

    def hit_test(self, x: float, y: float) -> Optional[Hashable]:
        if self.state is None:
            return None
        bars = self.state.layer("bars")
        for key in reversed(bars.order):
            geometry = bars.geometry.get(key)
            if geometry is not None and geometry.contains(x, y):
                return key
        return None

    # =========================================================================
    # Scene
    # =========================================================================

    def _build_scene(self, config: ColumnConfig) -> Element:
        layout = self.layout
        root = svg_root(config.width, config.height)

        defs = root.append(Element("defs"))
        defs.append(stripe_pattern(BAR_PATTERN_ID, 12, 6))
        defs.append(stripe_pattern(LEGEND_PATTERN_ID, 9, 4))

        columns = root.append(group(css_class="columns"))
        bars = self.state.layer("bars")
        for key, record in bars.items():
            geometry = bars.geometry[key]
            if record.striped:
                fill = f"url(#{BAR_PATTERN_ID})"
            elif key == self.emphasized:
                fill = darker(record.color, HOVER_DARKEN)
            else:
                fill = record.color
            element = columns.append(rect(
                geometry.x, geometry.y, geometry.width, geometry.height,
                fill=fill,
                opacity=STRIPED_BAR_OPACITY if record.striped else 1,
                cursor="pointer",
                **{"class": "column"},
            ))
            element.key = key

        blocks = self.state.layer("blocks")
        axis_group = root.append(group(
            blocks.geometry[("block", "axis")].transform(),
            "x-axis",
            **{"font-size": "inherit"},
        ))
        axis_group.append(path(f"M0,0H{config.width}", fill="none", stroke=AXIS_COLOR, **{"class": "domain"}))
        axis = self.state.layer("axis")
        for key, tick in axis.items():
            tick_group = axis_group.append(group(axis.geometry[key].transform(), "tick"))
            tick_group.append(text(
                tick.label, 0, config.label_top_padding,
                dy="0.71em",
                fill="currentColor",
                **{"text-anchor": "middle"},
            ))

        if config.draw_legend and ("block", "legend") in blocks:
            legends = root.append(group(blocks.geometry[("block", "legend")].transform(), "legends"))
            legend = self.state.layer("legend")
            for key, item in legend.items():
                entry = item.entry
                slot = legends.append(group(legend.geometry[key].transform()))
                slot.append(rect(
                    0, 0, config.legend_width, config.legend_height,
                    opacity=STRIPED_LEGEND_OPACITY if entry.striped else 1,
                    fill=f"url(#{LEGEND_PATTERN_ID})" if entry.striped else entry.color,
                ))
                slot.append(text(
                    item.text,
                    config.legend_width + config.gap_between_text_and_rect_legend,
                    item.text_y,
                    fill=LEGEND_TEXT_COLOR,
                ))

        count_group = root.append(group(css_class="counts"))
        counts = self.state.layer("counts")
        for key, record in counts.items():
            geometry = counts.geometry[key]
            count_group.append(rect(
                geometry.rect_x, geometry.rect_y, geometry.rect_width, config.count_rect_height,
                rx=COUNT_RECT_RADIUS,
                fill=config.color_count_rect,
            ))
            bar = self._bars.get(key)
            count_group.append(text(bar.count_text if bar else "", geometry.text_x, geometry.text_y))

        if self.tooltip.visible:
            tip = root.append(group(Translate(self.tooltip.x, self.tooltip.y).transform(), "chart-tooltip"))
            tip.append(rect(0, -14, len(self.tooltip.text) * 7 + 10, 20, rx=4, fill=config.color_count_rect))
            tip.append(text(self.tooltip.text, 5, 0))
        return root

    def describe(self) -> Dict[str, Any]:
        """Computed layout summary."""
        if self.layout is None:
            return {}
        result = self.layout.to_dict()
        result["legend"] = [
            {
                "label": item.text,
                "striped": item.entry.striped,
                "series": item.entry.series_index,
                "x": item.offset.x,
            }
            for item in self.layout.chrome.legend.items
        ]
        result["series_totals"] = list(self.dataset.series_totals)
        result["mobile_mode"] = self.effective.mobile_mode
        return result
