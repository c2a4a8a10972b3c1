"""
Scale functions for chart layout.

Maps discrete domains (labels, series indices) onto contiguous pixel
bands and numeric domains onto pixel ranges.
"""

from __future__ import annotations

from typing import Any, Dict, Hashable, List, Optional, Sequence, Tuple


class BandScale:
    """
    Discrete-to-continuous scale with inner and outer padding.

    Each domain value is assigned an equal band; ``padding_inner`` is the
    fraction of the step left between bands and ``padding_outer`` the
    fraction of a step left before the first and after the last band.
    Duplicate domain values collapse onto their first occurrence.
    """

    def __init__(
        self,
        domain: Sequence[Hashable],
        range_: Tuple[float, float] = (0.0, 1.0),
        padding_inner: float = 0.0,
        padding_outer: float = 0.0,
        align: float = 0.5,
    ):
        self._index: Dict[Hashable, int] = {}
        for value in domain:
            if value not in self._index:
                self._index[value] = len(self._index)
        self.domain: List[Hashable] = list(self._index)
        self.range = (float(range_[0]), float(range_[1]))
        self.padding_inner = min(1.0, max(0.0, padding_inner))
        self.padding_outer = max(0.0, padding_outer)
        self.align = min(1.0, max(0.0, align))
        self._rescale()

    def _rescale(self) -> None:
        n = len(self.domain)
        start, stop = self.range
        reverse = stop < start
        if reverse:
            start, stop = stop, start
        self.step = (stop - start) / max(1.0, n - self.padding_inner + self.padding_outer * 2)
        start += (stop - start - self.step * (n - self.padding_inner)) * self.align
        self._bandwidth = self.step * (1 - self.padding_inner)
        values = [start + self.step * i for i in range(n)]
        if reverse:
            values.reverse()
        self._positions = values

    def __call__(self, value: Hashable) -> Optional[float]:
        index = self._index.get(value)
        if index is None:
            return None
        return self._positions[index]

    def bandwidth(self) -> float:
        return self._bandwidth

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "domain": [str(d) for d in self.domain],
            "range": list(self.range),
            "step": self.step,
            "bandwidth": self._bandwidth,
            "positions": list(self._positions),
        }


class LinearScale:
    """
    Continuous linear scale.

    A degenerate domain maps every input to the midpoint of the range.
    """

    def __init__(self, domain: Tuple[float, float], range_: Tuple[float, float]):
        self.domain = (float(domain[0]), float(domain[1]))
        self.range = (float(range_[0]), float(range_[1]))

    def __call__(self, value: float) -> float:
        d0, d1 = self.domain
        r0, r1 = self.range
        span = d1 - d0
        t = (float(value) - d0) / span if span else 0.5
        return r0 + (r1 - r0) * t

    def invert(self, pixel: float) -> float:
        d0, d1 = self.domain
        r0, r1 = self.range
        span = r1 - r0
        t = (float(pixel) - r0) / span if span else 0.5
        return d0 + (d1 - d0) * t

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {"domain": list(self.domain), "range": list(self.range)}
