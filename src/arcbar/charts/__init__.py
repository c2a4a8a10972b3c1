"""
Reactive chart rendering engine.

Provides the donut and grouped column chart engines together with the
pipeline stages they are built from: configuration normalization,
dataset building, layout, keyed reconciliation, transitions, interaction
and resize coalescing.
"""

from __future__ import annotations

from typing import Any

from arcbar.charts.animation import Transition, TransitionEngine
from arcbar.charts.base import ChartEngine, ChartStateError
from arcbar.charts.column import GroupedColumnChart
from arcbar.charts.donut import DonutChart
from arcbar.charts.interaction import (
    ChartClickEvent,
    EventEmitter,
    InteractionType,
    PointerEvent,
    TooltipState,
)
from arcbar.charts.layout import ApproximateTextMeasurer, TextMeasurer
from arcbar.charts.models import (
    COLUMN_DEFAULTS,
    DONUT_DEFAULTS,
    ChartType,
    ColumnConfig,
    Container,
    DonutConfig,
    LegendEntry,
    VisualRecord,
)
from arcbar.charts.normalizer import normalize
from arcbar.charts.reconciler import JoinResult, LayerState, RenderState, reconcile
from arcbar.charts.responsive import (
    AsyncioScheduler,
    ManualScheduler,
    ResizeDebouncer,
    Scheduler,
)


def create_chart(chart_type: ChartType | str, **kwargs: Any) -> ChartEngine:
    """Create a chart engine for ``chart_type`` (``donut`` or ``column``)."""
    chart_type = ChartType(chart_type) if isinstance(chart_type, str) else chart_type
    if chart_type == ChartType.DONUT:
        return DonutChart(**kwargs)
    return GroupedColumnChart(**kwargs)


__all__ = [
    # Engines
    "ChartEngine",
    "ChartStateError",
    "DonutChart",
    "GroupedColumnChart",
    "create_chart",
    # Models
    "COLUMN_DEFAULTS",
    "DONUT_DEFAULTS",
    "ChartType",
    "ColumnConfig",
    "Container",
    "DonutConfig",
    "LegendEntry",
    "VisualRecord",
    "normalize",
    # Pipeline
    "JoinResult",
    "LayerState",
    "RenderState",
    "reconcile",
    "Transition",
    "TransitionEngine",
    "ApproximateTextMeasurer",
    "TextMeasurer",
    # Interaction
    "ChartClickEvent",
    "EventEmitter",
    "InteractionType",
    "PointerEvent",
    "TooltipState",
    # Scheduling
    "AsyncioScheduler",
    "ManualScheduler",
    "ResizeDebouncer",
    "Scheduler",
]
