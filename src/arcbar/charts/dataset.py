"""
Dataset builders.

Flattens the series-oriented chart input into per-primitive records with
stable identities.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Set

from arcbar.charts.models import (
    ColumnConfig,
    DonutConfig,
    Key,
    LegendEntry,
    VisualRecord,
)

logger = logging.getLogger(__name__)


@dataclass
class ColumnDataset:
    """
    Flattened grouped column input.

    Attributes:
        groups: Records per label position, base bar followed by its striped duplicate
        series_totals: Sum of each series across all groups
        max_value: Largest value across all records
        legend: Legend slots, one per series plus one per striped series
    """
    groups: List[List[VisualRecord]] = field(default_factory=list)
    series_totals: List[float] = field(default_factory=list)
    max_value: float = 0.0
    legend: List[LegendEntry] = field(default_factory=list)

    def records(self) -> List[VisualRecord]:
        """All records in render order."""
        return [record for group in self.groups for record in group]

    def percentage(self, record: VisualRecord) -> float:
        """Share of the record within its series total, in percent."""
        total = self.series_totals[record.series_index]
        if not total:
            return 0.0
        return record.value * 100 / total


def build_column_dataset(config: ColumnConfig) -> ColumnDataset:
    """
    Flatten ``series x labels`` into one record list per group.

    Every striped series contributes a duplicate record (same value and
    color, ``striped=True``) right after its base record. Points missing
    from a short series are skipped.
    """
    dataset = ColumnDataset(series_totals=[0.0] * config.series_number)
    seen_ids: Set[Key] = set()

    for group_index in range(config.groups_number):
        group: List[VisualRecord] = []
        for series_index, series in enumerate(config.series):
            if group_index >= len(series.data):
                logger.debug(
                    "Series %d has no value for label %d; skipping",
                    series_index, group_index,
                )
                continue
            point = series.data[group_index]
            value = point.value
            dataset.max_value = max(dataset.max_value, value)
            dataset.series_totals[series_index] += value

            for striped in ([False, True] if series.striped else [False]):
                key = _bar_key(point.id, series_index, group_index, striped, seen_ids)
                group.append(VisualRecord(
                    key=key,
                    series_index=series_index,
                    value=value,
                    color=point.color,
                    striped=striped,
                    group_index=group_index,
                    source={"id": point.id},
                ))
        dataset.groups.append(group)

    if config.draw_legend:
        for series_index, series in enumerate(config.series):
            dataset.legend.append(LegendEntry(
                color=series.color,
                label=series.legend,
                striped=False,
                series_index=series_index,
            ))
            if series.striped:
                dataset.legend.append(LegendEntry(
                    color=series.color,
                    label=series.legend,
                    striped=True,
                    series_index=series_index,
                ))

    return dataset


def _bar_key(
    point_id: object,
    series_index: int,
    group_index: int,
    striped: bool,
    seen: Set[Key],
) -> Key:
    """Natural id when present and unique, else synthesized from position."""
    if point_id is not None:
        key: Key = ("bar", "id", point_id, striped)
        if key not in seen:
            seen.add(key)
            return key
        logger.debug("Duplicate bar id %r; using positional identity", point_id)
    key = ("bar", series_index, group_index, striped)
    seen.add(key)
    return key


def build_donut_records(config: DonutConfig) -> List[VisualRecord]:
    """One record per donut item, keyed by id or by position."""
    records = []
    seen: Set[Key] = set()
    for index, item in enumerate(config.data):
        key: Key = ("slice", "id", item.id) if item.id is not None else ("slice", index)
        if key in seen:
            key = ("slice", index)
        seen.add(key)
        records.append(VisualRecord(
            key=key,
            series_index=index,
            value=item.value,
            color=item.color,
            source=item.to_dict(),
        ))
    return records


def count_non_empty(config: DonutConfig) -> int:
    """Number of donut items with a positive value."""
    return sum(1 for item in config.data if item.value > 0)
