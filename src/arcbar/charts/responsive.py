"""
Scheduling for resize coalescing and animation frames.

The embedding context owns time. Charts talk to it through a small
scheduler interface: the current time in milliseconds and one-shot
timers. ``ManualScheduler`` drives virtual time for headless use and
tests; ``AsyncioScheduler`` runs timers on an asyncio event loop.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
import time
from typing import Callable, List, Optional, Protocol, Tuple

logger = logging.getLogger(__name__)

DEFAULT_RESIZE_DEBOUNCE_MS = 100
DEFAULT_FRAME_MS = 16


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    """Time source plus one-shot timers, in milliseconds."""

    def now(self) -> float:
        ...

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        ...


# =============================================================================
# Schedulers
# =============================================================================

class ManualTimer:
    """Timer registered with a ManualScheduler."""

    def __init__(self, due_ms: float, callback: Callable[[], None]):
        self.due_ms = due_ms
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """
    Virtual clock.

    Time only moves when ``advance`` / ``advance_to`` is called; due timers
    fire in due-time order, ties in registration order.
    """

    def __init__(self, start_ms: float = 0.0):
        self._now = start_ms
        self._timers: List[Tuple[float, int, ManualTimer]] = []
        self._sequence = itertools.count()

    def now(self) -> float:
        return self._now

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(self._now + max(0.0, delay_ms), callback)
        heapq.heappush(self._timers, (timer.due_ms, next(self._sequence), timer))
        return timer

    @property
    def pending(self) -> int:
        return sum(1 for _, _, t in self._timers if not t.cancelled)

    def advance(self, delta_ms: float) -> int:
        """Move the clock forward by ``delta_ms``; returns timers fired."""
        return self.advance_to(self._now + delta_ms)

    def advance_to(self, target_ms: float) -> int:
        fired = 0
        while self._timers and self._timers[0][0] <= target_ms:
            due, _, timer = heapq.heappop(self._timers)
            if timer.cancelled:
                continue
            self._now = max(self._now, due)
            timer.callback()
            fired += 1
        self._now = max(self._now, target_ms)
        return fired

    def run_until_idle(self, limit: int = 10000) -> int:
        """Fire timers until none remain (timers may schedule more)."""
        fired = 0
        while fired < limit:
            live = [entry for entry in self._timers if not entry[2].cancelled]
            if not live:
                break
            fired += self.advance_to(min(entry[0] for entry in live))
        return fired


class AsyncioScheduler:
    """Scheduler backed by an asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now(self) -> float:
        return time.monotonic() * 1000

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(max(0.0, delay_ms) / 1000, callback)


# =============================================================================
# Resize Debouncing
# =============================================================================

class ResizeDebouncer:
    """
    Coalesces bursts of resize notifications.

    Every notification re-arms a single timer; the callback fires only when
    a timer runs its full delay without another notification.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        callback: Callable[[], None],
        delay_ms: float = DEFAULT_RESIZE_DEBOUNCE_MS,
    ):
        self.scheduler = scheduler
        self.callback = callback
        self.delay_ms = delay_ms
        self._handle: Optional[TimerHandle] = None
        self.coalesced = 0
        self.fired = 0

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def notify(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self.coalesced += 1
        self._handle = self.scheduler.call_later(self.delay_ms, self._fire)

    def _fire(self) -> None:
        self._handle = None
        self.fired += 1
        logger.debug("Resize settled after %d coalesced notifications", self.coalesced)
        self.coalesced = 0
        self.callback()

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


# =============================================================================
# Animation Frames
# =============================================================================

class AnimationLoop:
    """
    Time-slices transition work across frames.

    ``step(now_ms)`` is called once per frame and returns True while more
    frames are needed.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        step: Callable[[float], bool],
        frame_ms: float = DEFAULT_FRAME_MS,
    ):
        self.scheduler = scheduler
        self.step = step
        self.frame_ms = frame_ms
        self._handle: Optional[TimerHandle] = None

    @property
    def running(self) -> bool:
        return self._handle is not None

    def wake(self) -> None:
        """Request frames until the step function reports idle."""
        if self._handle is None:
            self._handle = self.scheduler.call_later(self.frame_ms, self._frame)

    def _frame(self) -> None:
        self._handle = None
        if self.step(self.scheduler.now()):
            self.wake()

    def stop(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
