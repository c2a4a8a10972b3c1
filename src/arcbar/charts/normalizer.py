"""
Configuration normalization.

Merges a user-supplied configuration snapshot over the documented defaults
and derives the secondary quantities (mobile mode, adjusted dimensions).
A configuration without its mandatory ``data`` / ``series`` entry
normalizes to ``None``: the chart simply does not render.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Union

from arcbar.charts.models import (
    COLUMN_DEFAULTS,
    DONUT_DEFAULTS,
    MOBILE_HEIGHT_CORRECTION,
    MOBILE_WIDTH_CORRECTION,
    ChartType,
    ColumnConfig,
    DonutConfig,
    Series,
    camelize,
    item_list,
)

logger = logging.getLogger(__name__)


def merge_options(raw: Mapping[str, Any], defaults: Mapping[str, Any]) -> Dict[str, Any]:
    """Overlay ``raw`` on ``defaults``. Keys explicitly set to None keep the default."""
    options = dict(defaults)
    for key, value in camelize(raw).items():
        if value is None and key in defaults:
            continue
        options[key] = value
    return options


def normalize_donut(
    raw: Optional[Mapping[str, Any]],
    container_width: Optional[float] = None,
    defaults: Mapping[str, Any] = DONUT_DEFAULTS,
) -> Optional[DonutConfig]:
    """
    Build the effective donut configuration.

    Args:
        raw: User configuration
        container_width: Measured width of the host element
        defaults: Default option table

    Returns:
        DonutConfig, or None when there is no ``data`` to render
    """
    if raw is None:
        return None
    options = merge_options(raw, defaults)
    if not options.get("data"):
        logger.debug("Donut config has no data; nothing to render")
        return None

    width = float(options["width"])
    height = float(options["height"])
    mobile = container_width is not None and container_width < width
    height_correction = MOBILE_HEIGHT_CORRECTION if mobile else 0
    width_correction = MOBILE_WIDTH_CORRECTION if mobile else 0

    return DonutConfig(
        width=width,
        height=height,
        total_title=str(options["totalTitle"]),
        all_items_active=bool(options["allItemsActive"]),
        data_total=float(options["dataTotal"] or 0),
        data=item_list(options["data"]),
        mobile_mode=mobile,
        svg_width=width - width_correction,
        svg_height=height + height_correction,
    )


def normalize_column(
    raw: Optional[Mapping[str, Any]],
    container_width: Optional[float] = None,
    defaults: Mapping[str, Any] = COLUMN_DEFAULTS,
) -> Optional[ColumnConfig]:
    """
    Build the effective grouped column configuration.

    The effective width is the configured width clamped to the container
    width; when the legend is disabled its height is zero.
    """
    if raw is None:
        return None
    options = merge_options(raw, defaults)
    if not options.get("series"):
        logger.debug("Column config has no series; nothing to render")
        return None

    configured_width = float(options["width"])
    mobile = container_width is not None and container_width < configured_width
    width = float(container_width) if mobile else configured_width
    draw_legend = bool(options["drawLegend"])

    return ColumnConfig(
        width=width,
        height=float(options["height"]),
        labels=tuple(str(label) for label in options.get("labels") or []),
        series=tuple(Series.from_dict(s) for s in options["series"]),
        draw_legend=draw_legend,
        show_percentage=bool(options["showPercentage"]),
        bar_width=float(options["barWidth"]),
        gap_between_bars=float(options["gapBetweenBars"]),
        gap_between_groups=float(options["gapBetweenGroups"]),
        gap_between_legend_and_columns=float(options["gapBetweenLegendAndColumns"]),
        label_top_padding=float(options["labelTopPadding"]),
        legend_height=float(options["legendHeight"]) if draw_legend else 0.0,
        legend_width=float(options["legendWidth"]),
        count_rect_height=float(options["countRectHeight"]),
        gap_between_legend=float(options["gapBetweenLegend"]),
        gap_between_text_and_rect_legend=float(options["gapBetweenTextAndRectLegend"]),
        gap_between_column_and_count=float(options["gapBetweenColumnAndCount"]),
        color_count_rect=str(options["colorCountRect"]),
        configured_width=configured_width,
        mobile_mode=mobile,
    )


def normalize(
    raw: Optional[Mapping[str, Any]],
    defaults: Optional[Mapping[str, Any]],
    container_width: Optional[float],
    chart_type: ChartType = ChartType.DONUT,
) -> Optional[Union[DonutConfig, ColumnConfig]]:
    """Normalize a configuration for either chart type."""
    if chart_type == ChartType.DONUT:
        return normalize_donut(raw, container_width, defaults or DONUT_DEFAULTS)
    return normalize_column(raw, container_width, defaults or COLUMN_DEFAULTS)
