"""
Unit tests for interaction primitives.
"""

from __future__ import annotations

import logging

from arcbar.charts.interaction import (
    ChartClickEvent,
    EventEmitter,
    InteractionType,
    PointerEvent,
    TooltipState,
    darker,
)


class TestEventEmitter:
    """Tests for EventEmitter."""

    def test_emit_to_subscribers(self) -> None:
        emitter = EventEmitter("barClick")
        received = []
        emitter.subscribe(received.append)
        emitter.subscribe(received.append)

        assert emitter.emit("payload") == 2
        assert received == ["payload", "payload"]

    def test_unsubscribe(self) -> None:
        emitter = EventEmitter("barClick")
        received = []
        subscription = emitter.subscribe(received.append)
        subscription.unsubscribe()
        subscription.unsubscribe()

        emitter.emit("payload")
        assert received == []
        assert len(emitter) == 0

    def test_handler_error_is_logged(self, caplog) -> None:
        """Test a failing handler does not stop delivery to the others."""
        emitter = EventEmitter("sectionClick")
        received = []

        def broken(payload):
            raise ValueError("boom")

        emitter.subscribe(broken)
        emitter.subscribe(received.append)

        with caplog.at_level(logging.ERROR, logger="arcbar.charts.interaction"):
            delivered = emitter.emit("payload")

        assert delivered == 1
        assert received == ["payload"]
        assert "sectionClick handler error: boom" in caplog.text

    def test_close(self) -> None:
        emitter = EventEmitter("barClick")
        emitter.subscribe(lambda p: None)
        emitter.close()
        assert len(emitter) == 0


class TestChartClickEvent:
    """Tests for ChartClickEvent."""

    def test_to_dict(self) -> None:
        event = PointerEvent(kind=InteractionType.CLICK, x=5, y=6, target=("slice", 0))
        click = ChartClickEvent(data={"value": 1}, event=event)

        data = click.to_dict()
        assert data["data"] == {"value": 1}
        assert data["event"]["type"] == "click"
        assert data["event"]["target"] == ["slice", 0]
        assert len(data["id"]) == 8


class TestTooltipState:
    """Tests for TooltipState."""

    def test_show_offsets_from_pointer(self) -> None:
        tooltip = TooltipState()
        assert tooltip.show("a", 100, 50, "12.5%")

        assert tooltip.visible
        assert (tooltip.x, tooltip.y) == (120, 75)
        assert tooltip.text == "12.5%"

    def test_click_suppresses_until_leave(self) -> None:
        tooltip = TooltipState()
        tooltip.show("a", 0, 0, "1%")
        tooltip.mark_clicked("a")

        assert not tooltip.visible
        assert not tooltip.show("a", 0, 0, "1%")
        assert tooltip.show("b", 0, 0, "2%")

        tooltip.leave("a")
        assert tooltip.show("a", 0, 0, "1%")

    def test_leave_hides(self) -> None:
        tooltip = TooltipState()
        tooltip.show("a", 0, 0, "1%")
        tooltip.leave("a")
        assert tooltip.visible is False
        assert tooltip.target is None


class TestDarker:
    """Tests for darker."""

    def test_darken_half_step(self) -> None:
        assert darker("#ffffff", 0.5) == "#d5d5d5"

    def test_darken_full_step(self) -> None:
        assert darker("#646464", 1) == "#464646"

    def test_short_hex(self) -> None:
        assert darker("#0a0", 1) == "#007700"

    def test_non_hex_unchanged(self) -> None:
        assert darker("url(#striped-bar-pattern)", 0.5) == "url(#striped-bar-pattern)"
        assert darker("red") == "red"
