"""
Pointer interaction primitives.

Provides pointer events, the click payload emitted to the embedding
context, a small event emitter for the chart outputs, and the floating
tooltip state of the column chart.
"""

from __future__ import annotations

import logging
import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Generic, Hashable, List, Optional, Set, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

TOOLTIP_OFFSET_X = 20
TOOLTIP_OFFSET_Y = 25


class InteractionType(Enum):
    """Types of pointer interactions."""
    OVER = "over"
    MOVE = "move"
    LEAVE = "leave"
    CLICK = "click"


@dataclass
class PointerEvent:
    """
    A pointer event in the chart's local coordinate frame.

    Attributes:
        kind: Interaction type
        x: Horizontal offset within the chart
        y: Vertical offset within the chart
        target: Key of the element under the pointer, if any
    """
    kind: InteractionType
    x: float = 0.0
    y: float = 0.0
    target: Optional[Hashable] = None
    timestamp: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "type": self.kind.value,
            "x": self.x,
            "y": self.y,
            "target": list(self.target) if isinstance(self.target, tuple) else self.target,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class ChartClickEvent:
    """Payload of ``sectionClick`` / ``barClick``: the clicked record and the originating event."""
    data: Dict[str, Any]
    event: Optional[PointerEvent] = None
    id: str = ""

    def __post_init__(self):
        if not self.id:
            self.id = str(uuid.uuid4())[:8]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "data": self.data,
            "event": self.event.to_dict() if self.event else None,
        }


class Subscription:
    """Handle returned by ``EventEmitter.subscribe``."""

    def __init__(self, emitter: EventEmitter, handler: Callable):
        self._emitter = emitter
        self.handler = handler
        self.closed = False

    def unsubscribe(self) -> None:
        if not self.closed:
            self._emitter._remove(self)
            self.closed = True


class EventEmitter(Generic[T]):
    """
    Synchronous output channel.

    Handler errors are logged and do not stop delivery to other handlers.
    """

    def __init__(self, name: str):
        self.name = name
        self._subscriptions: List[Subscription] = []

    def __len__(self) -> int:
        return len(self._subscriptions)

    def subscribe(self, handler: Callable[[T], None]) -> Subscription:
        """Register a handler."""
        subscription = Subscription(self, handler)
        self._subscriptions.append(subscription)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    def emit(self, payload: T) -> int:
        """
        Deliver ``payload`` to every handler.

        Returns:
            Number of handlers that completed without error
        """
        delivered = 0
        for subscription in list(self._subscriptions):
            try:
                subscription.handler(payload)
                delivered += 1
            except Exception as e:
                logger.error(f"{self.name} handler error: {e}")
        return delivered

    def close(self) -> None:
        """Release every subscription."""
        for subscription in list(self._subscriptions):
            subscription.unsubscribe()


@dataclass
class TooltipState:
    """
    Floating percentage tooltip.

    A clicked element suppresses its tooltip until the pointer leaves it.
    """
    visible: bool = False
    x: float = 0.0
    y: float = 0.0
    text: str = ""
    target: Optional[Hashable] = None
    clicked: Set[Hashable] = field(default_factory=set)

    def show(self, key: Hashable, pointer_x: float, pointer_y: float, text: str) -> bool:
        """Show the tooltip next to the pointer unless ``key`` was clicked."""
        if key in self.clicked:
            return False
        self.visible = True
        self.x = pointer_x + TOOLTIP_OFFSET_X
        self.y = pointer_y + TOOLTIP_OFFSET_Y
        self.text = text
        self.target = key
        return True

    def hide(self) -> None:
        self.visible = False
        self.target = None

    def mark_clicked(self, key: Hashable) -> None:
        self.clicked.add(key)
        self.hide()

    def leave(self, key: Hashable) -> None:
        self.clicked.discard(key)
        self.hide()


# =============================================================================
# Color Helpers
# =============================================================================

_HEX_RE = re.compile(r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
DARKER = 0.7


def darker(color: str, k: float = 1.0) -> str:
    """
    Darken a hex color by ``0.7 ** k`` per channel.

    Colors that are not hex literals (named colors, pattern urls) are
    returned unchanged.
    """
    match = _HEX_RE.match(color or "")
    if not match:
        return color
    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    factor = DARKER ** k
    channels = [int(digits[i:i + 2], 16) for i in (0, 2, 4)]
    return "#" + "".join(f"{max(0, min(255, round(c * factor))):02x}" for c in channels)
