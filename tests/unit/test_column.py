"""
Unit tests for the grouped column chart engine.
"""

from __future__ import annotations

import pytest

from arcbar.charts import GroupedColumnChart
from arcbar.charts.animation import COLUMN_RELAYOUT_MS
from arcbar.charts.interaction import darker
from arcbar.charts.shapes import Translate


def bar_center(bar):
    rect = bar.rect
    return rect.x + rect.width / 2, rect.y + rect.height / 2


def bar_element(chart, key):
    return next(e for e in chart.scene().find_all("rect", "column") if e.key == key)


class TestColumnRender:
    """Tests for layout and reconciliation."""

    def test_heights_add_up(self, make_column, column_config) -> None:
        """Test column area, label and legend heights fill the configured height."""
        chart = make_column(column_config)
        dims = chart.state.dimensions
        total = dims["column_area_height"] + dims["total_label_height"] + dims["total_legend_height"]
        assert total == pytest.approx(dims["height"])
        assert dims["width"] == 800

    def test_bar_heights_proportional(self, make_column, column_config) -> None:
        chart = make_column(column_config)
        small, large = chart.layout.bars

        assert chart.state.scales["y"].domain == (0.0, 20)
        assert large.rect.height == pytest.approx(2 * small.rect.height)
        assert large.rect.y == pytest.approx(35)
        assert large.rect.y + large.rect.height == pytest.approx(chart.layout.column_area_height)

    def test_width_clamped_to_container(self, make_column, column_config) -> None:
        chart = make_column(column_config, width=500)
        assert chart.effective.mobile_mode is True
        assert chart.scene().attrs["width"] == 500

    def test_enter_rises_from_baseline(self, make_column, column_config) -> None:
        chart = make_column(column_config, settle=False)
        bars = chart.state.layer("bars")
        target = chart.layout.bars[1].rect
        key = chart.layout.bars[1].record.key

        assert bars.geometry[key].height == 0
        chart.frame(COLUMN_RELAYOUT_MS / 2)
        assert bars.geometry[key].height == pytest.approx(target.height / 2)
        chart.frame(COLUMN_RELAYOUT_MS)
        assert bars.geometry[key] == target

    def test_legend_block_slides_in(self, make_column, column_config) -> None:
        """Test the legend block enters from the left edge and tweens to centre."""
        chart = make_column(column_config, settle=False)
        blocks = chart.state.layer("blocks")
        offset = chart.layout.chrome.legend.offset

        assert blocks.geometry[("block", "legend")] == Translate(0.0, offset.y)
        chart.frame(COLUMN_RELAYOUT_MS / 2)
        assert blocks.geometry[("block", "legend")].x == pytest.approx(offset.x / 2)
        chart.frame(COLUMN_RELAYOUT_MS)
        assert blocks.geometry[("block", "legend")] == offset

    def test_rerender_is_stable(self, make_column, column_config) -> None:
        chart = make_column(column_config)
        before = dict(chart.state.layer("bars").geometry)

        chart.on_config_changed(dict(column_config))
        chart.settle()

        for name, join in chart.last_joins.items():
            assert join.is_stable, name
        assert chart.state.layer("bars").geometry == before

    def test_striped_series_duplicates_bars(self, make_column, striped_column_config) -> None:
        chart = make_column(striped_column_config)
        bars = chart.state.layer("bars")
        striped = [record for _, record in bars.items() if record.striped]

        assert len(bars) == 9
        assert len(striped) == 3
        assert len(chart.state.layer("legend")) == 3

    def test_removing_series_exits_its_bars(self, make_column, striped_column_config) -> None:
        chart = make_column(striped_column_config)
        striped_column_config["series"] = striped_column_config["series"][:1]

        chart.on_config_changed(striped_column_config)

        assert len(chart.last_joins["bars"].exit) == 6
        assert len(chart.last_joins["legend"].exit) == 2
        assert len(chart.state.layer("bars")) == 3
        assert len(chart.state.layer("counts")) == 3

    def test_no_series_skips_render(self, make_column) -> None:
        chart = make_column({"labels": ["Jan"]})
        assert chart.state is None
        assert chart.describe() == {}


class TestColumnScene:
    """Tests for the rendered element tree."""

    def test_structure(self, make_column, column_config) -> None:
        root = make_column(column_config).scene()

        assert len(root.find_all("pattern")) == 2
        assert len(root.find_all("rect", "column")) == 2
        ticks = root.find_all("g", "tick")
        assert [t.children[0].text for t in ticks] == ["Jan", "Feb"]
        assert root.find_all("path", "domain")[0].attrs["d"] == "M0,0H800"
        assert [t.text for t in root.find_all("g", "counts")[0].find_all("text")] == ["10", "20"]

    def test_striped_bars_use_pattern(self, make_column, striped_column_config) -> None:
        root = make_column(striped_column_config).scene()
        columns = root.find_all("rect", "column")
        patterned = [c for c in columns if c.attrs["fill"] == "url(#striped-bar-pattern)"]

        assert len(patterned) == 3
        assert all(c.attrs["opacity"] == 0.2 for c in patterned)

    def test_legend_hidden(self, make_column, column_config) -> None:
        column_config["drawLegend"] = False
        chart = make_column(column_config)

        assert chart.scene().find_all("g", "legends") == []
        assert chart.state.dimensions["total_legend_height"] == 0


class TestColumnInteraction:
    """Tests for hover, tooltip and click."""

    def test_tooltip_follows_pointer(self, make_column, column_config) -> None:
        chart = make_column(column_config)
        x, y = bar_center(chart.layout.bars[0])

        chart.dispatch_pointer("move", x, y)

        assert chart.tooltip.visible
        assert (chart.tooltip.x, chart.tooltip.y) == pytest.approx((x + 20, y + 25))
        assert chart.tooltip.text == "33.3%"
        assert chart.scene().find_all("g", "chart-tooltip")

    def test_tooltip_disabled(self, make_column, column_config) -> None:
        column_config["showPercentage"] = False
        chart = make_column(column_config)
        chart.dispatch_pointer("move", *bar_center(chart.layout.bars[0]))
        assert not chart.tooltip.visible

    def test_hover_darkens_bar(self, make_column, column_config) -> None:
        chart = make_column(column_config)
        bar = chart.layout.bars[1]

        chart.dispatch_pointer("move", *bar_center(bar))
        element = bar_element(chart, bar.record.key)
        assert element.attrs["fill"] == darker("#f00", 0.5)

        chart.dispatch_pointer("leave", 0, 0)
        assert bar_element(chart, bar.record.key).attrs["fill"] == "#f00"
        assert not chart.tooltip.visible

    def test_striped_bar_is_not_emphasised(self, make_column, striped_column_config) -> None:
        chart = make_column(striped_column_config)
        striped = next(b for b in chart.layout.bars if b.record.striped)

        key = chart.dispatch_pointer("move", *bar_center(striped))

        assert key == striped.record.key
        assert chart.emphasized is None

    def test_click_emits_payload(self, make_column, striped_column_config) -> None:
        chart = make_column(striped_column_config)
        received = []
        chart.bar_click.subscribe(received.append)
        bar = chart.layout.bars[0]

        chart.dispatch_pointer("click", *bar_center(bar))

        assert len(received) == 1
        assert received[0].data == {
            "ser": 0,
            "striped": False,
            "value": 5,
            "color": "#1f77b4",
            "id": "p1",
        }

    def test_click_suppresses_tooltip_until_leave(self, make_column, column_config) -> None:
        chart = make_column(column_config)
        x, y = bar_center(chart.layout.bars[0])

        chart.dispatch_pointer("click", x, y)
        chart.dispatch_pointer("move", x, y)
        assert not chart.tooltip.visible

        chart.dispatch_pointer("leave", x, y)
        chart.dispatch_pointer("move", x, y)
        assert chart.tooltip.visible

    def test_click_then_leave_bar_restores_tooltip(self, make_column, column_config) -> None:
        """Test moving off a clicked bar clears the click so hovering it again shows the tooltip."""
        chart = make_column(column_config)
        x, y = bar_center(chart.layout.bars[0])

        chart.dispatch_pointer("click", x, y)
        assert chart.hovered == chart.layout.bars[0].record.key
        chart.dispatch_pointer("move", 1, 1)
        chart.dispatch_pointer("move", x, y)

        assert chart.tooltip.visible

    def test_tooltip_rounds_half_up(self, make_column) -> None:
        chart = make_column({
            "labels": ["a", "b"],
            "series": [{"legend": "A", "color": "#f00", "data": [{"value": 49}, {"value": 351}]}],
        })
        assert chart.tooltip_text(chart.layout.bars[0].record.key) == "12.3%"

    def test_miss_returns_none(self, make_column, column_config) -> None:
        chart = make_column(column_config)
        assert chart.dispatch_pointer("move", 1, 1) is None
        assert not chart.tooltip.visible


class TestColumnDescribe:
    """Tests for the layout summary."""

    def test_describe(self, make_column, striped_column_config) -> None:
        summary = make_column(striped_column_config).describe()

        assert summary["series_totals"] == [30, 25]
        assert len(summary["bars"]) == 9
        assert [item["label"] for item in summary["legend"]] == ["Planned", "Actual", ""]
        assert summary["mobile_mode"] is False


def test_chart_type() -> None:
    assert GroupedColumnChart.chart_type.value == "column"
