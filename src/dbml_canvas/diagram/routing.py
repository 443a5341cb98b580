"""Orthogonal connector routing between field anchors."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import StrEnum
from itertools import pairwise
from logging import getLogger
from typing import NamedTuple

from dbml_canvas.config import DEFAULT_METRICS, DEFAULT_ROUTING, RoutingSettings, TableMetrics
from dbml_canvas.types import Point, Relationship, RelationshipType, Table

logger = getLogger(__name__)


class Topology(StrEnum):
    """How a connector travels between its two tables."""

    LEFT_TO_RIGHT = "left-to-right"  # From table is left of the to table
    RIGHT_TO_LEFT = "right-to-left"
    DETOUR = "detour"  # Tables overlap horizontally, route around the right


class MarkerKind(StrEnum):
    """Cardinality marker drawn at a connector end."""

    TICK = "tick"  # "one"
    CROWS_FOOT = "crows-foot"  # "many"
    TICK_CIRCLE = "tick-circle"  # "one", in a one-to-one relationship


END_MARKERS: dict[RelationshipType, tuple[MarkerKind, MarkerKind]] = {
    RelationshipType.ONE_TO_MANY: (MarkerKind.TICK, MarkerKind.CROWS_FOOT),
    RelationshipType.MANY_TO_ONE: (MarkerKind.CROWS_FOOT, MarkerKind.TICK),
    RelationshipType.ONE_TO_ONE: (MarkerKind.TICK_CIRCLE, MarkerKind.TICK_CIRCLE),
    RelationshipType.MANY_TO_MANY: (MarkerKind.CROWS_FOOT, MarkerKind.CROWS_FOOT),
}


def _number(value: float) -> str:
    return f"{value:g}"


class MoveTo(NamedTuple):
    """Start of a path."""

    x: float
    y: float

    def svg(self) -> str:
        """SVG path data for this command."""
        return f"M {_number(self.x)} {_number(self.y)}"


class LineTo(NamedTuple):
    """Straight segment to a point."""

    x: float
    y: float

    def svg(self) -> str:
        """SVG path data for this command."""
        return f"L {_number(self.x)} {_number(self.y)}"


class QuadTo(NamedTuple):
    """Quadratic curve through a control point."""

    cx: float
    cy: float
    x: float
    y: float

    def svg(self) -> str:
        """SVG path data for this command."""
        return f"Q {_number(self.cx)} {_number(self.cy)} {_number(self.x)} {_number(self.y)}"


type PathCommand = MoveTo | LineTo | QuadTo


class Marker(NamedTuple):
    """A cardinality marker placed at one end of a connector."""

    anchor: Point
    rotation: int  # 0 faces east, 180 faces west
    kind: MarkerKind


@dataclass(frozen=True, slots=True)
class RenderablePath:
    """Everything needed to draw one relationship."""

    relationship: Relationship
    topology: Topology
    points: tuple[Point, ...]
    commands: tuple[PathCommand, ...]
    start: Marker
    end: Marker

    @property
    def d(self) -> str:
        """SVG path data."""
        return " ".join(command.svg() for command in self.commands)


def smooth_path(points: Sequence[Point], radius: float) -> list[PathCommand]:
    """Turn an orthogonal polyline into path commands with rounded corners.

    Each right-angle corner is cut back by `radius` along the incoming segment
    and joined to the outgoing segment with a quadratic curve whose control
    point is the corner itself. The first and last points are unchanged.
    """
    if len(points) < 2:  # noqa: PLR2004
        return []

    commands: list[PathCommand] = [MoveTo(*points[0])]
    for index, (current, corner) in enumerate(pairwise(points)):
        if index + 2 >= len(points):
            commands.append(LineTo(*corner))
            continue

        after = points[index + 2]
        enters_horizontally = abs(current.x - corner.x) > abs(current.y - corner.y)
        enters_vertically = abs(current.y - corner.y) > abs(current.x - corner.x)
        leaves_horizontally = abs(corner.x - after.x) > abs(corner.y - after.y)
        leaves_vertically = abs(corner.y - after.y) > abs(corner.x - after.x)

        if enters_horizontally and leaves_vertically:
            back = -radius if corner.x > current.x else radius
            turn = radius if after.y > corner.y else -radius
            commands.append(LineTo(corner.x + back, corner.y))
            commands.append(QuadTo(corner.x, corner.y, corner.x, corner.y + turn))
        elif enters_vertically and leaves_horizontally:
            back = -radius if corner.y > current.y else radius
            turn = radius if after.x > corner.x else -radius
            commands.append(LineTo(corner.x, corner.y + back))
            commands.append(QuadTo(corner.x, corner.y, corner.x + turn, corner.y))
        else:
            commands.append(LineTo(*corner))

    return commands


def field_anchor_y(table: Table, field_index: int, metrics: TableMetrics = DEFAULT_METRICS) -> float:
    """Vertical center of the `field_index`-th field row of a placed table."""
    if table.position is None:
        msg = f"Table {table.name!r} has no position"
        raise ValueError(msg)
    return (
        table.position.y
        + metrics.header_height
        + field_index * metrics.field_height
        + metrics.field_center_offset
    )


def route_between(
    relationship: Relationship,
    from_table: Table,
    to_table: Table,
    *,
    metrics: TableMetrics = DEFAULT_METRICS,
    settings: RoutingSettings = DEFAULT_ROUTING,
) -> RenderablePath | None:
    """Route a relationship between two tables, or None if it cannot be drawn."""
    from_index = from_table.field_index(relationship.from_field)
    to_index = to_table.field_index(relationship.to_field)
    if from_table.position is None or to_table.position is None:
        return None
    if from_index is None or to_index is None:
        return None

    from_pos, to_pos = from_table.position, to_table.position
    from_y = field_anchor_y(from_table, from_index, metrics)
    to_y = field_anchor_y(to_table, to_index, metrics)
    from_right = from_pos.x + metrics.width
    to_right = to_pos.x + metrics.width
    offset = settings.endpoint_offset

    if from_right < to_pos.x:
        topology = Topology.LEFT_TO_RIGHT
        from_x, to_x = from_right + offset, to_pos.x - offset
        rotations = (0, 180)
        bend_x = (from_x + to_x) / 2
    elif to_right < from_pos.x:
        topology = Topology.RIGHT_TO_LEFT
        from_x, to_x = from_pos.x - offset, to_right + offset
        rotations = (180, 0)
        bend_x = (from_x + to_x) / 2
    else:
        topology = Topology.DETOUR
        from_x, to_x = from_right + offset, to_right + offset
        rotations = (0, 0)
        bend_x = max(from_right, to_right) + settings.detour_padding

    points = (
        Point(from_x, from_y),
        Point(bend_x, from_y),
        Point(bend_x, to_y),
        Point(to_x, to_y),
    )
    start_kind, end_kind = END_MARKERS[relationship.type]
    return RenderablePath(
        relationship=relationship,
        topology=topology,
        points=points,
        commands=tuple(smooth_path(points, settings.curve_radius)),
        start=Marker(points[0], rotations[0], start_kind),
        end=Marker(points[-1], rotations[1], end_kind),
    )


def route_connector(
    relationship: Relationship,
    tables: Mapping[str, Table],
    *,
    metrics: TableMetrics = DEFAULT_METRICS,
    settings: RoutingSettings = DEFAULT_ROUTING,
) -> RenderablePath | None:
    """Route `relationship` through the current tables.

    Dangling relationships (a missing table, an unplaced table or a missing
    field) are not errors while the schema is being edited; they simply have
    no path.
    """
    from_table = tables.get(relationship.from_table)
    to_table = tables.get(relationship.to_table)
    if from_table is None or to_table is None:
        logger.debug("No connector for %s: table not found", relationship)
        return None

    path = route_between(relationship, from_table, to_table, metrics=metrics, settings=settings)
    if path is None:
        logger.debug("No connector for %s: field not found or table unplaced", relationship)
    return path
