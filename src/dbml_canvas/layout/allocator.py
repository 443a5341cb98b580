"""Automatic placement of new tables on a bounded canvas.

Placement degrades in stages: a three-column grid slot, a spiral around that
slot, directional fallbacks past the outermost tables, seeded random probes,
and finally a fixed offset from the canvas anchor that may overlap. Every
stage is bounded, so placement always terminates with a position.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence, Sized
from itertools import chain, islice
from logging import getLogger
from math import cos, radians, sin
from random import Random

from dbml_canvas.config import (
    DEFAULT_BOUNDS,
    DEFAULT_LAYOUT,
    DEFAULT_METRICS,
    CanvasBounds,
    LayoutSettings,
    TableMetrics,
)
from dbml_canvas.layout.geometry import clamp_to_canvas, table_height
from dbml_canvas.layout.overlap import collides
from dbml_canvas.types import Point, Table

logger = getLogger(__name__)

type Candidates = Iterator[tuple[str, Point]]


def canvas_anchor(bounds: CanvasBounds = DEFAULT_BOUNDS) -> Point:
    """Top-left corner of the placeable region."""
    return Point(bounds.min_x + bounds.padding, bounds.min_y + bounds.padding)


def _grid_slot(
    index: int,
    fields: Sized,
    anchor: Point,
    metrics: TableMetrics,
    settings: LayoutSettings,
) -> tuple[Point, float, float]:
    """Unclamped grid slot for the `index`-th table and the grid pitches."""
    column_pitch = metrics.width + 2 * settings.table_spacing
    row_pitch = table_height(fields, metrics) + 2 * settings.table_spacing
    row, column = divmod(index, settings.columns)
    slot = Point(anchor.x + column * column_pitch, anchor.y + row * row_pitch)
    return slot, column_pitch, row_pitch


def _spiral(center: Point, column_pitch: float, row_pitch: float, settings: LayoutSettings) -> Candidates:
    probes = (
        Point(
            center.x + radius * column_pitch * cos(radians(angle)),
            center.y + radius * row_pitch * sin(radians(angle)),
        )
        for radius in range(1, settings.spiral_radii + 1)
        for angle in range(0, 360, settings.spiral_step_degrees)
    )
    for probe in islice(probes, settings.max_spiral_attempts):
        yield "spiral", probe


def _directional(
    placed: Sequence[Table],
    anchor: Point,
    metrics: TableMetrics,
    settings: LayoutSettings,
) -> Candidates:
    """Right of the rightmost table, then below the bottommost table."""
    right_edge, bottom_edge = anchor
    for table in placed:
        if table.position is None:
            continue
        right_edge = max(right_edge, table.position.x + metrics.width)
        bottom_edge = max(bottom_edge, table.position.y + table_height(table.fields, metrics))

    yield "right", Point(right_edge + settings.table_spacing, anchor.y)
    yield "below", Point(anchor.x, bottom_edge + settings.table_spacing)


def _random_probes(
    seed: int,
    fields: Sized,
    anchor: Point,
    bounds: CanvasBounds,
    metrics: TableMetrics,
    settings: LayoutSettings,
) -> Candidates:
    # Seeded so the same snapshot of placed tables always probes the same spots
    rng = Random(seed)
    span_x = bounds.width - 2 * bounds.padding - metrics.width
    span_y = bounds.height - 2 * bounds.padding - table_height(fields, metrics)
    grid = settings.grid_size
    for _ in range(settings.random_attempts):
        x = anchor.x + rng.random() * span_x
        y = anchor.y + rng.random() * span_y
        yield "random", Point(round(x / grid) * grid, round(y / grid) * grid)


def allocate_position(
    fields: Sized,
    existing_tables: Mapping[str, Table],
    bounds: CanvasBounds = DEFAULT_BOUNDS,
    *,
    metrics: TableMetrics = DEFAULT_METRICS,
    settings: LayoutSettings = DEFAULT_LAYOUT,
) -> Point:
    """Find a clear, in-bounds position for a new table with `fields`.

    Args:
        fields: Fields of the new table, which determine its height
        existing_tables: Tables placed so far; unplaced entries are ignored
        bounds: Region the table must stay inside
        metrics: Table box dimensions
        settings: Grid, spacing and search limits

    Returns:
        A grid-aligned position inside `bounds`. It is clear of every placed
        table unless all search stages are exhausted, in which case the
        last-resort position may overlap.

    """
    placed = [table for table in existing_tables.values() if table.is_placed]
    anchor = canvas_anchor(bounds)

    def clamp(position: Point) -> Point:
        return clamp_to_canvas(position, fields, bounds, metrics, settings.grid_size)

    if not placed:
        return clamp(anchor)

    slot, column_pitch, row_pitch = _grid_slot(len(placed), fields, anchor, metrics, settings)
    candidates = chain(
        [("grid", slot)],
        _spiral(slot, column_pitch, row_pitch, settings),
        _directional(placed, anchor, metrics, settings),
        _random_probes(len(placed), fields, anchor, bounds, metrics, settings),
    )
    for stage, candidate in candidates:
        position = clamp(candidate)
        if not collides(position, fields, placed, metrics=metrics, spacing=settings.table_spacing):
            logger.debug("Placed table %d at %s (%s)", len(placed), position, stage)
            return position

    offset = len(placed) * settings.fallback_step
    position = clamp(Point(anchor.x + offset, anchor.y + offset))
    logger.warning(
        "No free canvas slot for table %d, placing at %s; it may overlap",
        len(placed),
        position,
    )
    return position


def layout_tables(
    tables: Mapping[str, Table],
    positions: Mapping[str, Point] | None = None,
    bounds: CanvasBounds = DEFAULT_BOUNDS,
    *,
    metrics: TableMetrics = DEFAULT_METRICS,
    settings: LayoutSettings = DEFAULT_LAYOUT,
) -> dict[str, Table]:
    """Give every table a position, keeping known ones.

    Tables named in `positions` (or already placed) keep their position. The
    rest are allocated one at a time in source order, each against every table
    placed before it, so the same input always produces the same layout.
    """
    positions = positions or {}
    placed: dict[str, Table] = {}
    for name, table in tables.items():
        if name in positions:
            placed[name] = table.moved_to(positions[name])
        elif table.is_placed:
            placed[name] = table

    for name, table in tables.items():
        if name not in placed:
            position = allocate_position(
                table.fields,
                placed,
                bounds,
                metrics=metrics,
                settings=settings,
            )
            placed[name] = table.moved_to(position)

    return {name: placed[name] for name in tables}
