"""
Time-based transitions for rendered geometry.

Transitions interpolate a geometry value from a source shape to a target
shape over a fixed duration. The engine writes the interpolated shape back
into the owning layer on every tick, so a transition restarted mid-flight
always continues from where the element currently is.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, List, Optional, Tuple

from arcbar.charts.reconciler import LayerState

logger = logging.getLogger(__name__)

EaseFunction = Callable[[float], float]

# Durations in milliseconds.
DONUT_INITIAL_DRAW_MS = 1000
DONUT_UPDATE_MS = 500
HOVER_MS = 300
COLUMN_RELAYOUT_MS = 500

BACK_OVERSHOOT = 1.70158


# =============================================================================
# Easing
# =============================================================================

def ease_linear(t: float) -> float:
    return t


def ease_cubic_in_out(t: float) -> float:
    t *= 2
    if t <= 1:
        return t * t * t / 2
    t -= 2
    return (t * t * t + 2) / 2


def ease_back_out(t: float, overshoot: float = BACK_OVERSHOOT) -> float:
    t -= 1
    return t * t * ((overshoot + 1) * t + overshoot) + 1


# =============================================================================
# Interpolation
# =============================================================================

def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def interpolate(source: Any, target: Any, t: float) -> Any:
    """
    Interpolate two geometry values of the same dataclass type.

    Numeric fields are interpolated linearly; other fields snap to the
    target. A missing source yields the target.
    """
    if source is None or t >= 1:
        return target
    if type(source) is not type(target) or not dataclasses.is_dataclass(target):
        return target if t >= 0.5 else source
    changes = {}
    for f in dataclasses.fields(target):
        a = getattr(source, f.name)
        b = getattr(target, f.name)
        if isinstance(a, (int, float)) and isinstance(b, (int, float)) and not isinstance(b, bool):
            changes[f.name] = lerp(a, b, t)
        else:
            changes[f.name] = b
    return dataclasses.replace(target, **changes)


# =============================================================================
# Transitions
# =============================================================================

@dataclass
class Transition:
    """
    A running tween on one element.

    Attributes:
        layer: Layer owning the element
        key: Element identity
        source: Shape at start
        target: Shape at end
        start_ms: Scheduler time the tween started
        duration_ms: Tween length
        ease: Easing function
        name: Descriptive label (enter, update, hover, ...)
    """
    layer: LayerState
    key: Hashable
    source: Any
    target: Any
    start_ms: float
    duration_ms: float
    ease: EaseFunction = ease_cubic_in_out
    name: str = ""

    def progress(self, now_ms: float) -> float:
        if self.duration_ms <= 0:
            return 1.0
        return min(1.0, max(0.0, (now_ms - self.start_ms) / self.duration_ms))

    def value_at(self, now_ms: float) -> Any:
        t = self.progress(now_ms)
        if t >= 1:
            return self.target
        return interpolate(self.source, self.target, self.ease(t))

    def finished(self, now_ms: float) -> bool:
        return self.progress(now_ms) >= 1


class TransitionEngine:
    """
    Schedules and advances tweens keyed by (layer, element).

    At most one transition runs per element: starting another one replaces
    it, continuing from the element's interpolated shape at that instant.
    """

    def __init__(self) -> None:
        self._active: Dict[Tuple[str, Hashable], Transition] = {}

    def __len__(self) -> int:
        return len(self._active)

    @property
    def is_idle(self) -> bool:
        return not self._active

    def get(self, layer_name: str, key: Hashable) -> Optional[Transition]:
        return self._active.get((layer_name, key))

    def start(
        self,
        layer: LayerState,
        key: Hashable,
        target: Any,
        duration_ms: float,
        now_ms: float,
        ease: EaseFunction = ease_cubic_in_out,
        source: Any = None,
        name: str = "",
    ) -> Optional[Transition]:
        """
        Start (or restart) a tween of ``key`` towards ``target``.

        Without an explicit ``source`` the tween starts from the element's
        current shape. A non-positive duration applies the target at once.
        """
        slot = (layer.name, key)
        running = self._active.pop(slot, None)
        if source is None:
            source = running.value_at(now_ms) if running else layer.geometry.get(key)

        if duration_ms <= 0 or source is None:
            layer.set_geometry(key, target)
            return None

        layer.geometry[key] = source
        layer.targets[key] = target
        transition = Transition(
            layer=layer,
            key=key,
            source=source,
            target=target,
            start_ms=now_ms,
            duration_ms=duration_ms,
            ease=ease,
            name=name,
        )
        self._active[slot] = transition
        return transition

    def cancel(self, layer_name: str, key: Hashable) -> None:
        self._active.pop((layer_name, key), None)

    def tick(self, now_ms: float) -> int:
        """
        Advance every tween to ``now_ms``.

        Returns the number of tweens still running. Tweens of elements that
        left their layer are dropped.
        """
        done: List[Tuple[str, Hashable]] = []
        for slot, transition in self._active.items():
            if transition.key not in transition.layer:
                done.append(slot)
                continue
            transition.layer.geometry[transition.key] = transition.value_at(now_ms)
            if transition.finished(now_ms):
                done.append(slot)
        for slot in done:
            del self._active[slot]
        return len(self._active)

    def settle(self) -> None:
        """Jump every tween to its target."""
        for transition in self._active.values():
            if transition.key in transition.layer:
                transition.layer.geometry[transition.key] = transition.target
        self._active.clear()

    def clear(self) -> None:
        """Drop every tween without touching geometry."""
        self._active.clear()
