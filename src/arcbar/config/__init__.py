"""
Configuration loading for arcbar.

Provides chart document loading from JSON/YAML files and
environment-driven settings.
"""

from arcbar.config.loader import (
    ChartDocument,
    ConfigLoadError,
    Settings,
    load_chart_file,
    parse_chart_document,
)

__all__ = [
    "ChartDocument",
    "ConfigLoadError",
    "Settings",
    "load_chart_file",
    "parse_chart_document",
]
