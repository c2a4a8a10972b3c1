"""
Chart engine lifecycle.

A chart is driven by its embedding context through four calls:
``init(container)``, ``on_config_changed(config)``, ``on_resize(dimensions)``
and ``dispose()``. Every render runs the whole pipeline (normalize, build
records, lay out, reconcile, schedule transitions) synchronously; the
transitions it schedules are then advanced frame by frame.
"""

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from typing import Any, Dict, Hashable, List, Mapping, Optional, Union

from arcbar.charts.animation import TransitionEngine
from arcbar.charts.interaction import EventEmitter, InteractionType, PointerEvent
from arcbar.charts.layout import DEFAULT_FONT_SIZE, ApproximateTextMeasurer, TextMeasurer
from arcbar.charts.models import ChartType, Container
from arcbar.charts.normalizer import normalize
from arcbar.charts.reconciler import JoinResult, RenderState
from arcbar.charts.responsive import (
    DEFAULT_RESIZE_DEBOUNCE_MS,
    AnimationLoop,
    ManualScheduler,
    ResizeDebouncer,
    Scheduler,
)
from arcbar.charts.svg import Element
from arcbar.observability.logging import get_logger

logger = logging.getLogger(__name__)


class ChartStateError(RuntimeError):
    """A lifecycle method was called in a state that does not allow it."""


class ChartEngine(ABC):
    """
    Base class for the donut and grouped column engines.

    Subclasses implement ``_render`` (layout, reconciliation and transition
    scheduling for one effective configuration), ``_build_scene`` and the
    pointer handlers.
    """

    chart_type: ChartType = ChartType.DONUT

    def __init__(
        self,
        scheduler: Optional[Scheduler] = None,
        measurer: Optional[TextMeasurer] = None,
        resize_debounce_ms: float = DEFAULT_RESIZE_DEBOUNCE_MS,
        font_size: float = DEFAULT_FONT_SIZE,
        defaults: Optional[Mapping[str, Any]] = None,
        chart_id: Optional[str] = None,
    ):
        self.id = chart_id or str(uuid.uuid4())[:8]
        self.scheduler: Scheduler = scheduler or ManualScheduler()
        self.measurer: TextMeasurer = measurer or ApproximateTextMeasurer()
        self.font_size = font_size
        self.defaults = defaults
        self.transitions = TransitionEngine()
        self.container: Optional[Container] = None
        self.config: Optional[Mapping[str, Any]] = None
        self.effective: Optional[Any] = None
        self.state: Optional[RenderState] = None
        self.last_joins: Dict[str, JoinResult] = {}
        self.hovered: Optional[Hashable] = None

        self._initialized = False
        self._disposed = False
        self._debouncer = ResizeDebouncer(self.scheduler, self._on_resize_settled, resize_debounce_ms)
        self._loop = AnimationLoop(self.scheduler, self._step)
        self._emitters: List[EventEmitter] = []

        self.log = get_logger(f"charts.{self.chart_type.value}")
        self.log.set_context(chart_id=self.id, chart_type=self.chart_type.value)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def render_count(self) -> int:
        return self.state.render_count if self.state else 0

    def _ensure_alive(self, operation: str) -> None:
        if self._disposed:
            raise ChartStateError(f"Cannot {operation}: chart {self.id} has been disposed")

    def _register_emitter(self, name: str) -> EventEmitter:
        emitter: EventEmitter = EventEmitter(name)
        self._emitters.append(emitter)
        return emitter

    def init(self, container: Union[Container, Mapping[str, Any], tuple, float]) -> None:
        """Attach to a measurable container; renders if a configuration already arrived."""
        self._ensure_alive("init")
        self.container = Container.coerce(container)
        self._initialized = True
        if self.config is not None:
            self.render(trigger="init")

    def on_config_changed(self, config: Optional[Mapping[str, Any]]) -> bool:
        """
        Accept a new configuration snapshot.

        Returns True when the snapshot produced a render. A snapshot that
        arrives before ``init`` is kept and rendered on ``init``.
        """
        self._ensure_alive("apply configuration")
        self.config = config
        if not self._initialized or config is None:
            return False
        return self.render(trigger="config")

    def on_resize(self, dimensions: Optional[Union[Container, Mapping[str, Any], tuple, float]] = None) -> None:
        """Record new container dimensions and schedule a debounced re-render."""
        self._ensure_alive("resize")
        if dimensions is not None:
            self.container = Container.coerce(dimensions)
        if self._debouncer.pending:
            self.log.resize_coalesced(self.container.width if self.container else None)
        self._debouncer.notify()

    def _on_resize_settled(self) -> None:
        if self._disposed or not self._initialized:
            return
        self.render(trigger="resize")

    def dispose(self) -> None:
        """Release timers, transitions, subscriptions and render state."""
        if self._disposed:
            return
        count = self.render_count
        self._debouncer.cancel()
        self._loop.stop()
        self.transitions.clear()
        for emitter in self._emitters:
            emitter.close()
        if self.state is not None:
            self.state.clear()
        self.state = None
        self._disposed = True
        self.log.chart_disposed(count)

    # =========================================================================
    # Rendering
    # =========================================================================

    def render(self, trigger: str = "manual") -> bool:
        """
        Run the full pipeline for the current configuration and container.

        Returns False (and renders nothing) when the configuration lacks its
        mandatory data.
        """
        self._ensure_alive("render")
        if not self._initialized:
            raise ChartStateError(f"Cannot render: chart {self.id} has no container; call init() first")

        effective = normalize(
            self.config,
            self.defaults,
            self.container.client_width if self.container else None,
            self.chart_type,
        )
        if effective is None:
            self.log.render_skipped("missing data" if self.config is not None else "no configuration")
            return False

        if self.state is None:
            self.state = RenderState()

        self.log.render_started(self.state.render_count + 1, trigger)
        self.effective = effective
        self.last_joins = self._render(effective, self.scheduler.now())
        self.state.render_count += 1
        self.log.render_completed(
            self.state.render_count,
            {name: join.summary() for name, join in self.last_joins.items()},
        )

        if not self.transitions.is_idle:
            self._loop.wake()
        return True

    @abstractmethod
    def _render(self, effective: Any, now_ms: float) -> Dict[str, JoinResult]:
        """Lay out, reconcile every layer and schedule transitions."""

    def _step(self, now_ms: float) -> bool:
        return self.transitions.tick(now_ms) > 0

    def frame(self, now_ms: Optional[float] = None) -> int:
        """Advance transitions to ``now_ms`` (default: scheduler time)."""
        return self.transitions.tick(self.scheduler.now() if now_ms is None else now_ms)

    def settle(self) -> None:
        """Jump every running transition to its end state."""
        self.transitions.settle()
        self._loop.stop()

    # =========================================================================
    # Scene
    # =========================================================================

    def scene(self) -> Optional[Element]:
        """Element tree of the current frame, or None before the first render."""
        if self.state is None or self.effective is None:
            return None
        return self._build_scene(self.effective)

    @abstractmethod
    def _build_scene(self, effective: Any) -> Element:
        """Build the element tree from the current geometry."""

    def to_svg(self) -> str:
        root = self.scene()
        return root.to_svg() if root is not None else ""

    def describe(self) -> Dict[str, Any]:
        """Computed layout summary; empty before the first render."""
        return {}

    # =========================================================================
    # Pointer Interaction
    # =========================================================================

    @abstractmethod
    def hit_test(self, x: float, y: float) -> Optional[Hashable]:
        """Key of the interactive element under the SVG-space point."""

    @abstractmethod
    def pointer_over(self, key: Hashable, event: PointerEvent) -> None:
        ...

    @abstractmethod
    def pointer_out(self, key: Hashable, event: PointerEvent) -> None:
        ...

    @abstractmethod
    def click(self, key: Hashable, event: PointerEvent) -> bool:
        ...

    def pointer_move(self, key: Hashable, event: PointerEvent) -> None:
        """Pointer moved within an element already hovered."""

    def dispatch_pointer(
        self,
        kind: Union[InteractionType, str],
        x: float,
        y: float,
    ) -> Optional[Hashable]:
        """
        Route a raw pointer event to the element under it.

        Moving onto a new element leaves the previously hovered one first;
        clicking an element that is not hovered yet hovers it.
        Returns the key of the element under the pointer.
        """
        self._ensure_alive("dispatch pointer events")
        kind = InteractionType(kind) if isinstance(kind, str) else kind
        key = None if kind == InteractionType.LEAVE else self.hit_test(x, y)
        event = PointerEvent(kind=kind, x=x, y=y, target=key)

        if self.hovered is not None and self.hovered != key:
            self.pointer_out(self.hovered, event)
            self.hovered = None

        if key is None:
            return None

        if self.hovered != key:
            self.hovered = key
            self.pointer_over(key, event)
        if kind == InteractionType.CLICK:
            self.click(key, event)
        else:
            self.pointer_move(key, event)
        return key
