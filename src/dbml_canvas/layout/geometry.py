"""Box geometry shared by layout, drag validation and rendering."""

from __future__ import annotations

from collections.abc import Iterable, Sized
from math import ceil, floor

from dbml_canvas.config import (
    DEFAULT_BOUNDS,
    DEFAULT_LAYOUT,
    DEFAULT_METRICS,
    CanvasBounds,
    TableMetrics,
)
from dbml_canvas.types import Point, Table


def table_height(fields: Sized, metrics: TableMetrics = DEFAULT_METRICS) -> int:
    """Rendered height of a table with the given fields."""
    return metrics.header_height + len(fields) * metrics.field_height


def _snap_between(value: float, low: float, high: float, grid: int) -> float:
    """Round `value` to the grid without leaving `[low, high]`."""
    snapped = round(value / grid) * grid
    if snapped > high:
        snapped = floor(high / grid) * grid
    if snapped < low:
        snapped = ceil(low / grid) * grid
    # A range narrower than one grid unit has no aligned point
    return min(max(snapped, low), max(low, high))


def clamp_to_canvas(
    position: Point,
    fields: Sized,
    bounds: CanvasBounds = DEFAULT_BOUNDS,
    metrics: TableMetrics = DEFAULT_METRICS,
    grid: int = DEFAULT_LAYOUT.grid_size,
) -> Point:
    """Keep a table fully inside the canvas, snapped to the grid."""
    low_x = bounds.min_x + bounds.padding
    low_y = bounds.min_y + bounds.padding
    high_x = bounds.min_x + bounds.width - metrics.width - bounds.padding
    high_y = bounds.min_y + bounds.height - table_height(fields, metrics) - bounds.padding
    return Point(
        _snap_between(position.x, low_x, high_x, grid),
        _snap_between(position.y, low_y, high_y, grid),
    )


def snap_to_grid_floor(position: Point, delta: Point, grid: int = DEFAULT_LAYOUT.grid_size) -> Point:
    """Drag target: offset by `delta`, round to the grid, never negative."""
    return Point(
        max(0, round((position.x + delta.x) / grid) * grid),
        max(0, round((position.y + delta.y) / grid) * grid),
    )


def diagram_extent(
    tables: Iterable[Table],
    metrics: TableMetrics = DEFAULT_METRICS,
    margin: int = 0,
) -> Point:
    """Bottom-right corner of the area covered by placed tables, plus a margin."""
    right = bottom = 0.0
    for table in tables:
        if table.position is None:
            continue
        right = max(right, table.position.x + metrics.width)
        bottom = max(bottom, table.position.y + table_height(table.fields, metrics))
    return Point(right + margin, bottom + margin)
