"""
Unit tests for arcbar logging.

Tests the formatters, the context-carrying logger and the lifecycle
events emitted by chart engines.
"""

from __future__ import annotations

import json
import logging

from arcbar.observability import (
    ArcbarLogger,
    HumanReadableFormatter,
    StructuredFormatter,
    configure_logging,
    get_logger,
)


def make_record(message: str = "Test message", level: int = logging.INFO, **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="arcbar.test",
        level=level,
        pathname="test.py",
        lineno=10,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


# ============================================================================
# Formatter Tests
# ============================================================================


class TestStructuredFormatter:
    """Tests for StructuredFormatter."""

    def test_format_basic(self) -> None:
        """Test basic JSON formatting."""
        data = json.loads(StructuredFormatter().format(make_record()))

        assert data["level"] == "info"
        assert data["logger"] == "arcbar.test"
        assert data["message"] == "Test message"
        assert data["timestamp"].endswith("Z")

    def test_format_extra_attributes(self) -> None:
        """Test extra record attributes become top-level keys."""
        record = make_record(chart_id="abc123", event_type="render.started")
        data = json.loads(StructuredFormatter(include_timestamp=False).format(record))

        assert data["chart_id"] == "abc123"
        assert data["event_type"] == "render.started"
        assert "timestamp" not in data

    def test_format_with_location_and_fields(self) -> None:
        formatter = StructuredFormatter(include_location=True, extra_fields={"service": "arcbar"})
        data = json.loads(formatter.format(make_record()))

        assert data["location"]["line"] == 10
        assert data["service"] == "arcbar"

    def test_format_exception(self) -> None:
        try:
            raise ValueError("boom")
        except ValueError:
            import sys
            record = make_record(level=logging.ERROR)
            record.exc_info = sys.exc_info()

        data = json.loads(StructuredFormatter().format(record))
        assert "ValueError: boom" in data["exception"]


class TestHumanReadableFormatter:
    """Tests for HumanReadableFormatter."""

    def test_format_basic(self) -> None:
        formatter = HumanReadableFormatter(use_colors=False, include_timestamp=False)
        output = formatter.format(make_record(level=logging.WARNING))

        assert output == " WARNING arcbar.test: Test message"

    def test_timestamp_prefix(self) -> None:
        output = HumanReadableFormatter(use_colors=False).format(make_record())
        assert output.startswith("[")


# ============================================================================
# ArcbarLogger Tests
# ============================================================================


class TestArcbarLogger:
    """Tests for the context-carrying logger."""

    def test_get_logger_prefixes_namespace(self) -> None:
        assert get_logger("charts.donut").logger.name == "arcbar.charts.donut"
        assert get_logger("arcbar.cli").logger.name == "arcbar.cli"

    def test_context_in_records(self, caplog) -> None:
        caplog.set_level(logging.DEBUG, logger="arcbar")
        log = ArcbarLogger("arcbar.test")
        log.set_context(chart_id="c1", chart_type="donut")

        log.info("hello", extra_field=1)

        record = caplog.records[-1]
        assert record.chart_id == "c1"
        assert record.chart_type == "donut"
        assert record.extra_field == 1

    def test_clear_context(self, caplog) -> None:
        caplog.set_level(logging.DEBUG, logger="arcbar")
        log = ArcbarLogger("arcbar.test")
        log.set_context(chart_id="c1")
        log.clear_context()

        log.warning("no context")
        assert not hasattr(caplog.records[-1], "chart_id")

    def test_render_events(self, caplog) -> None:
        caplog.set_level(logging.DEBUG, logger="arcbar")
        log = get_logger("test")

        log.render_started(1, "config")
        log.render_completed(1, {"slices": {"enter": 2, "update": 0, "exit": 0}})
        log.render_skipped("missing data")

        events = [r.event_type for r in caplog.records]
        assert events == ["render.started", "render.completed", "render.skipped"]
        assert caplog.records[1].joins["slices"]["enter"] == 2

    def test_chart_lifecycle_events(self, caplog, make_donut, donut_config) -> None:
        """Test a chart logs render, resize and dispose events with its id."""
        caplog.set_level(logging.DEBUG, logger="arcbar")
        chart = make_donut(donut_config)
        chart.on_resize((800, 600))
        chart.on_resize((820, 600))
        chart.dispose()

        events = [getattr(r, "event_type", None) for r in caplog.records]
        assert "render.started" in events
        assert "render.completed" in events
        assert "resize.coalesced" in events
        disposed = [r for r in caplog.records if getattr(r, "event_type", None) == "chart.disposed"]
        assert disposed[0].levelno == logging.INFO
        assert disposed[0].chart_id == chart.id

    def test_single_resize_not_coalesced(self, caplog, make_donut, donut_config) -> None:
        """Test a lone resize schedules a render without a coalesced event."""
        caplog.set_level(logging.DEBUG, logger="arcbar")
        chart = make_donut(donut_config)
        chart.on_resize((800, 600))

        events = [getattr(r, "event_type", None) for r in caplog.records]
        assert "resize.coalesced" not in events

    def test_handler_error_logged(self, caplog) -> None:
        from arcbar.charts.interaction import EventEmitter

        emitter = EventEmitter("sectionClick")

        def broken(event):
            raise RuntimeError("bad handler")

        emitter.subscribe(broken)
        assert emitter.emit(object()) == 0
        assert "sectionClick handler error: bad handler" in caplog.text


# ============================================================================
# configure_logging Tests
# ============================================================================


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_sets_level_and_handler(self) -> None:
        configure_logging(level="DEBUG")
        arcbar_logger = logging.getLogger("arcbar")

        assert arcbar_logger.level == logging.DEBUG
        assert len(arcbar_logger.handlers) == 1
        assert isinstance(arcbar_logger.handlers[0].formatter, HumanReadableFormatter)

    def test_json_format(self) -> None:
        configure_logging(level="INFO", format="json", output="stdout")
        handler = logging.getLogger("arcbar").handlers[0]
        assert isinstance(handler.formatter, StructuredFormatter)

    def test_reconfigure_replaces_handler(self) -> None:
        configure_logging()
        configure_logging()
        assert len(logging.getLogger("arcbar").handlers) == 1

    def test_unknown_level_falls_back(self) -> None:
        configure_logging(level="chatty")
        assert logging.getLogger("arcbar").level == logging.WARNING
