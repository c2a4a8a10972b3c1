"""
Chart document loading for arcbar.

A chart document names the chart type, optionally the container the chart
is embedded in, and carries the raw chart configuration:

    type: donut
    container:
      width: 800
      height: 400
    config:
      dataTotal: 100
      data:
        - {value: 1, color: "#f00", label: A}
        - {value: 99, color: "#0f0", label: B}

Documents may be JSON or YAML files, or plain dictionaries.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from arcbar.charts.models import ChartType, Container, camelize
from arcbar.charts.responsive import DEFAULT_RESIZE_DEBOUNCE_MS

SUPPORTED_EXTENSIONS = (".json", ".yaml", ".yml")
DEFAULT_CONTAINER_WIDTH = 1024.0


class ConfigLoadError(Exception):
    """A chart document could not be read or is malformed."""


@dataclass
class ChartDocument:
    """
    A loaded chart document.

    Attributes:
        chart_type: Which engine renders the configuration
        config: Raw chart configuration, camelCase keys
        container: Host element dimensions
        source: File the document was loaded from, if any
    """

    chart_type: ChartType
    config: dict[str, Any] = field(default_factory=dict)
    container: Container = field(default_factory=lambda: Container(DEFAULT_CONTAINER_WIDTH, 0.0))
    source: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "type": self.chart_type.value,
            "container": {"width": self.container.width, "height": self.container.height},
            "config": self.config,
        }


def parse_chart_document(data: Any, source: str = "") -> ChartDocument:
    """
    Validate the document envelope and build a ChartDocument.

    Only the envelope is validated; the chart configuration itself is
    passed through untouched apart from key camelCasing.

    Raises:
        ConfigLoadError: If the envelope is malformed or the type is unknown
    """
    where = f" in {source}" if source else ""
    if not isinstance(data, dict):
        raise ConfigLoadError(f"Chart document{where} must be a mapping, got {type(data).__name__}")

    raw_type = data.get("type", data.get("chart_type"))
    if raw_type is None:
        raise ConfigLoadError(f"Chart document{where} has no 'type' (expected donut or column)")
    try:
        chart_type = ChartType(str(raw_type).lower())
    except ValueError:
        raise ConfigLoadError(f"Unknown chart type {raw_type!r}{where} (expected donut or column)")

    config = data.get("config", {})
    if config is None:
        config = {}
    if not isinstance(config, dict):
        raise ConfigLoadError(f"'config'{where} must be a mapping")

    container_data = data.get("container")
    if container_data is None:
        container = Container(DEFAULT_CONTAINER_WIDTH, 0.0)
    elif isinstance(container_data, dict):
        try:
            container = Container.coerce(container_data)
        except (TypeError, ValueError) as e:
            raise ConfigLoadError(f"Invalid container{where}: {e}")
    else:
        raise ConfigLoadError(f"'container'{where} must be a mapping with width and height")

    return ChartDocument(
        chart_type=chart_type,
        config=camelize(config),
        container=container,
        source=source,
    )


def load_chart_file(path: str | Path) -> ChartDocument:
    """
    Load a chart document from a JSON or YAML file.

    Raises:
        ConfigLoadError: If the file is missing, unreadable or malformed
    """
    path = Path(os.path.expanduser(str(path)))
    if path.suffix.lower() not in SUPPORTED_EXTENSIONS:
        raise ConfigLoadError(
            f"Unsupported file type '{path.suffix}' for {path} "
            f"(expected one of {', '.join(SUPPORTED_EXTENSIONS)})"
        )
    try:
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigLoadError(f"Cannot read {path}: {e}")
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigLoadError(f"Cannot parse {path}: {e}")

    return parse_chart_document(data, str(path))


@dataclass
class Settings:
    """
    Process-wide settings read from the environment.

    Environment variables:
        ARCBAR_LOG_LEVEL: Log level (default WARNING)
        ARCBAR_LOG_FORMAT: human or json (default human)
        ARCBAR_RESIZE_DEBOUNCE_MS: Resize coalescing window (default 100)
    """

    log_level: str = "WARNING"
    log_format: str = "human"
    resize_debounce_ms: float = DEFAULT_RESIZE_DEBOUNCE_MS

    @classmethod
    def from_env(cls) -> Settings:
        debounce = os.getenv("ARCBAR_RESIZE_DEBOUNCE_MS")
        try:
            resize_debounce_ms = float(debounce) if debounce else DEFAULT_RESIZE_DEBOUNCE_MS
        except ValueError:
            raise ConfigLoadError(f"ARCBAR_RESIZE_DEBOUNCE_MS must be a number, got {debounce!r}")
        return cls(
            log_level=os.getenv("ARCBAR_LOG_LEVEL", "WARNING").upper(),
            log_format=os.getenv("ARCBAR_LOG_FORMAT", "human").lower(),
            resize_debounce_ms=resize_debounce_ms,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "log_level": self.log_level,
            "log_format": self.log_format,
            "resize_debounce_ms": self.resize_debounce_ms,
        }
