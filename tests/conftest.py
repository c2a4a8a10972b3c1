"""
Pytest configuration and fixtures for arcbar tests.

This module provides chart configurations, a virtual-time scheduler and
chart factories shared across the unit tests.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import pytest
import yaml

from arcbar.charts import DonutChart, GroupedColumnChart, ManualScheduler


# Sample configuration fixtures


@pytest.fixture
def donut_config() -> Dict[str, Any]:
    """Return the 1 / 99 donut configuration."""
    return {
        "dataTotal": 100,
        "data": [
            {"value": 1, "color": "#f00", "label": "Small"},
            {"value": 99, "color": "#0f0", "label": "Large"},
        ],
    }


@pytest.fixture
def selection_donut_config() -> Dict[str, Any]:
    """Return a donut configuration in per-item selection mode."""
    return {
        "allItemsActive": False,
        "dataTotal": 100,
        "data": [
            {"value": 60, "color": "#3366cc", "label": "Done"},
            {"value": 40, "color": "#dc3912", "label": "Open", "active": True},
        ],
    }


@pytest.fixture
def column_config() -> Dict[str, Any]:
    """Return a single-series grouped column configuration."""
    return {
        "labels": ["Jan", "Feb"],
        "series": [
            {"legend": "A", "color": "#f00", "data": [{"value": 10}, {"value": 20}]},
        ],
    }


@pytest.fixture
def striped_column_config() -> Dict[str, Any]:
    """Return a two-series configuration where the second series is striped."""
    return {
        "labels": ["Q1", "Q2", "Q3"],
        "series": [
            {
                "legend": "Planned",
                "color": "#1f77b4",
                "data": [
                    {"value": 5, "color": "#1f77b4", "id": "p1"},
                    {"value": 15, "color": "#1f77b4", "id": "p2"},
                    {"value": 10, "color": "#1f77b4", "id": "p3"},
                ],
            },
            {
                "legend": "Actual",
                "color": "#ff7f0e",
                "striped": True,
                "data": [
                    {"value": 4, "color": "#ff7f0e", "id": "a1"},
                    {"value": 12, "color": "#ff7f0e", "id": "a2"},
                    {"value": 9, "color": "#ff7f0e", "id": "a3"},
                ],
            },
        ],
    }


# Engine fixtures


@pytest.fixture
def scheduler() -> ManualScheduler:
    """Return a virtual clock starting at 0 ms."""
    return ManualScheduler()


@pytest.fixture
def make_donut(scheduler: ManualScheduler) -> Callable[..., DonutChart]:
    """Return a factory creating an initialized, rendered donut chart."""

    def _make(config: Optional[Dict[str, Any]] = None, width: float = 1024, settle: bool = True) -> DonutChart:
        chart = DonutChart(scheduler=scheduler)
        chart.init((width, 600))
        if config is not None:
            chart.on_config_changed(config)
            if settle:
                chart.settle()
        return chart

    return _make


@pytest.fixture
def make_column(scheduler: ManualScheduler) -> Callable[..., GroupedColumnChart]:
    """Return a factory creating an initialized, rendered column chart."""

    def _make(config: Optional[Dict[str, Any]] = None, width: float = 1024, settle: bool = True) -> GroupedColumnChart:
        chart = GroupedColumnChart(scheduler=scheduler)
        chart.init((width, 600))
        if config is not None:
            chart.on_config_changed(config)
            if settle:
                chart.settle()
        return chart

    return _make


# File fixtures


@pytest.fixture
def donut_yaml_file(tmp_path: Path, donut_config: Dict[str, Any]) -> Path:
    """Write a donut chart document as YAML."""
    path = tmp_path / "donut.yaml"
    path.write_text(yaml.safe_dump({
        "type": "donut",
        "container": {"width": 1024, "height": 600},
        "config": donut_config,
    }))
    return path


@pytest.fixture
def column_json_file(tmp_path: Path, column_config: Dict[str, Any]) -> Path:
    """Write a column chart document as JSON."""
    path = tmp_path / "column.json"
    path.write_text(json.dumps({
        "type": "column",
        "container": {"width": 1024, "height": 600},
        "config": column_config,
    }))
    return path


@pytest.fixture(autouse=True)
def reset_arcbar_logging():
    """Drop handlers the CLI attaches to the arcbar logger."""
    yield
    arcbar_logger = logging.getLogger("arcbar")
    arcbar_logger.handlers.clear()
    arcbar_logger.setLevel(logging.NOTSET)
