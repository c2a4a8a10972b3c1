"""
Keyed data-join between successive renders.

Every visual layer keeps its own record and geometry index keyed by
identity. Joining a new record list against a layer classifies each
record as enter, update or exit; exits are dropped from the layer at once.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Hashable, List, Optional, Sequence, Tuple, TypeVar

logger = logging.getLogger(__name__)

R = TypeVar("R")


@dataclass
class JoinResult(Generic[R]):
    """
    Outcome of a data-join.

    Attributes:
        enter: Records with no previously tracked counterpart
        update: Matched records paired with their prior geometry
        exit: Keys tracked before but absent now
    """
    enter: List[R] = field(default_factory=list)
    update: List[Tuple[R, Any]] = field(default_factory=list)
    exit: List[Hashable] = field(default_factory=list)

    @property
    def is_stable(self) -> bool:
        """True when nothing entered or exited."""
        return not self.enter and not self.exit

    def summary(self) -> Dict[str, int]:
        return {"enter": len(self.enter), "update": len(self.update), "exit": len(self.exit)}


class LayerState:
    """
    Render state of one visual layer.

    ``geometry`` holds the current (possibly mid-transition) shape of every
    element and ``targets`` the shape it is heading to.
    """

    def __init__(self, name: str):
        self.name = name
        self.records: Dict[Hashable, Any] = {}
        self.order: List[Hashable] = []
        self.geometry: Dict[Hashable, Any] = {}
        self.targets: Dict[Hashable, Any] = {}

    def __len__(self) -> int:
        return len(self.order)

    def __contains__(self, key: Hashable) -> bool:
        return key in self.records

    def get(self, key: Hashable) -> Optional[Any]:
        return self.records.get(key)

    def items(self) -> List[Tuple[Hashable, Any]]:
        """Records in render order."""
        return [(key, self.records[key]) for key in self.order]

    def set_geometry(self, key: Hashable, geometry: Any, target: Optional[Any] = None) -> None:
        self.geometry[key] = geometry
        self.targets[key] = geometry if target is None else target

    def remove(self, key: Hashable) -> None:
        self.records.pop(key, None)
        self.geometry.pop(key, None)
        self.targets.pop(key, None)
        if key in self.order:
            self.order.remove(key)

    def clear(self) -> None:
        self.records.clear()
        self.order.clear()
        self.geometry.clear()
        self.targets.clear()


def reconcile(layer: LayerState, records: Sequence[R], key_fn=lambda r: r.key) -> JoinResult[R]:
    """
    Join ``records`` against ``layer`` by identity and commit the new set.

    Records whose key repeats an earlier record in the same list are
    ignored. The layer's record index and order are replaced; geometry of
    exited keys is discarded.
    """
    result: JoinResult[R] = JoinResult()
    incoming: Dict[Hashable, R] = {}
    order: List[Hashable] = []

    for record in records:
        key = key_fn(record)
        if key in incoming:
            logger.warning("Duplicate key %r in layer %s; ignoring", key, layer.name)
            continue
        incoming[key] = record
        order.append(key)
        if key in layer.records:
            result.update.append((record, layer.geometry.get(key)))
        else:
            result.enter.append(record)

    for key in layer.order:
        if key not in incoming:
            result.exit.append(key)

    for key in result.exit:
        layer.remove(key)

    layer.records = incoming
    layer.order = order

    logger.debug("Reconciled layer %s: %s", layer.name, result.summary())
    return result


class RenderState:
    """
    Everything a chart instance remembers between renders.

    Owned by exactly one chart and mutated only by its render pipeline.
    """

    def __init__(self) -> None:
        self.layers: Dict[str, LayerState] = {}
        self.scales: Dict[str, Any] = {}
        self.layout: Optional[Any] = None
        self.dimensions: Dict[str, float] = {}
        self.render_count: int = 0

    def layer(self, name: str) -> LayerState:
        """Get or create the named layer."""
        if name not in self.layers:
            self.layers[name] = LayerState(name)
        return self.layers[name]

    def has_layer(self, name: str) -> bool:
        return name in self.layers

    def clear(self) -> None:
        for layer in self.layers.values():
            layer.clear()
        self.layers.clear()
        self.scales.clear()
        self.dimensions.clear()
        self.layout = None
