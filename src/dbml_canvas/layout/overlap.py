"""Overlap checks for automatic placement and drag-and-drop."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sized
from typing import NamedTuple

from dbml_canvas.config import DEFAULT_LAYOUT, DEFAULT_METRICS, LayoutSettings, TableMetrics
from dbml_canvas.layout.geometry import snap_to_grid_floor, table_height
from dbml_canvas.types import Point, Table


class Landing(NamedTuple):
    """Where a dragged table would land and whether it may land there."""

    position: Point
    valid: bool


def overlaps(
    position: Point,
    fields: Sized,
    other: Table,
    *,
    metrics: TableMetrics = DEFAULT_METRICS,
    spacing: int = DEFAULT_LAYOUT.table_spacing,
) -> bool:
    """Check whether a box at `position` comes within `spacing` of `other`.

    Both boxes are padded by the spacing buffer and compared with strict
    inequalities, so boxes exactly `spacing` apart do not overlap. An unplaced
    `other` never overlaps anything.
    """
    if other.position is None:
        return False

    return (
        position.x < other.position.x + metrics.width + spacing
        and position.x + metrics.width + spacing > other.position.x
        and position.y < other.position.y + table_height(other.fields, metrics) + spacing
        and position.y + table_height(fields, metrics) + spacing > other.position.y
    )


def collides(
    position: Point,
    fields: Sized,
    tables: Iterable[Table],
    *,
    metrics: TableMetrics = DEFAULT_METRICS,
    spacing: int = DEFAULT_LAYOUT.table_spacing,
) -> bool:
    """Check a candidate box against every table in `tables`."""
    return any(
        overlaps(position, fields, table, metrics=metrics, spacing=spacing)
        for table in tables
    )


def would_overlap(
    name: str,
    candidate: Point,
    tables: Mapping[str, Table],
    *,
    metrics: TableMetrics = DEFAULT_METRICS,
    spacing: int = DEFAULT_LAYOUT.drag_spacing,
) -> bool:
    """Check whether moving table `name` to `candidate` would overlap another table."""
    if (table := tables.get(name)) is None:
        return False

    return collides(
        candidate,
        table.fields,
        (other for other in tables.values() if other.name != name),
        metrics=metrics,
        spacing=spacing,
    )


def landing_position(
    tables: Mapping[str, Table],
    name: str,
    delta: Point,
    *,
    metrics: TableMetrics = DEFAULT_METRICS,
    settings: LayoutSettings = DEFAULT_LAYOUT,
) -> Landing | None:
    """Snap a drag of table `name` by `delta` and validate the landing spot."""
    table = tables.get(name)
    if table is None or table.position is None:
        return None

    position = snap_to_grid_floor(table.position, delta, settings.grid_size)
    valid = not would_overlap(
        name,
        position,
        tables,
        metrics=metrics,
        spacing=settings.drag_spacing,
    )
    return Landing(position, valid)


def move_table(
    tables: Mapping[str, Table],
    name: str,
    delta: Point,
    *,
    metrics: TableMetrics = DEFAULT_METRICS,
    settings: LayoutSettings = DEFAULT_LAYOUT,
) -> dict[str, Table]:
    """Drop table `name` after a drag of `delta`, returning a new mapping.

    A drop onto an occupied spot, or of an unknown table, leaves the positions
    unchanged.
    """
    moved = dict(tables)
    landing = landing_position(tables, name, delta, metrics=metrics, settings=settings)
    if landing is not None and landing.valid:
        moved[name] = moved[name].moved_to(landing.position)
    return moved
