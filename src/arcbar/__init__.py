"""
arcbar - animated donut and grouped column charts.

Renders declarative chart configurations into positioned, styled and
animated SVG primitives, re-rendering incrementally when the
configuration or the container size changes.
"""

__version__ = "0.1.0"

from arcbar.charts import (
    ChartEngine,
    ChartStateError,
    ChartType,
    DonutChart,
    GroupedColumnChart,
    ManualScheduler,
    create_chart,
)

__all__ = [
    "__version__",
    "ChartEngine",
    "ChartStateError",
    "ChartType",
    "DonutChart",
    "GroupedColumnChart",
    "ManualScheduler",
    "create_chart",
]
