"""Tests for connector routing."""

import pytest

from dbml_canvas.diagram import MarkerKind, Topology, route_between, route_connector, smooth_path
from dbml_canvas.diagram.routing import LineTo, MoveTo, QuadTo, field_anchor_y
from dbml_canvas.types import Field, Point, Relationship, RelationshipType, Table


@pytest.fixture(name="tables")
def fixture_tables() -> dict[str, Table]:
    """Three placed tables: `b` right of `a`, `c` below and overlapping `a` horizontally."""
    return {
        "a": Table("a", (Field("id", "integer", is_primary=True), Field("name")), Point(0, 0)),
        "b": Table("b", (Field("id", "integer", is_primary=True), Field("a_id")), Point(400, 100)),
        "c": Table("c", (Field("id", "integer", is_primary=True), Field("a_id")), Point(100, 300)),
    }


def test_field_anchor_is_the_row_center(tables: dict[str, Table]) -> None:
    """Test the vertical anchor of a field row."""
    assert field_anchor_y(tables["a"], 0) == 45
    assert field_anchor_y(tables["b"], 1) == 172


def test_field_anchor_needs_a_position() -> None:
    """Test that unplaced tables have no anchor."""
    with pytest.raises(ValueError, match="no position"):
        field_anchor_y(Table("t", (Field("id"),)), 0)


def test_left_to_right(tables: dict[str, Table]) -> None:
    """Test the route from a table to one on its right."""
    path = route_connector(Relationship("a", "id", "b", "a_id"), tables)

    assert path is not None
    assert path.topology is Topology.LEFT_TO_RIGHT
    assert path.points == (Point(203, 45), Point(300, 45), Point(300, 172), Point(397, 172))
    assert path.d == "M 203 45 L 295 45 Q 300 45 300 50 L 300 167 Q 300 172 305 172 L 397 172"
    assert (path.start.rotation, path.end.rotation) == (0, 180)
    assert (path.start.kind, path.end.kind) == (MarkerKind.TICK, MarkerKind.CROWS_FOOT)


def test_right_to_left(tables: dict[str, Table]) -> None:
    """Test the mirrored route from a table to one on its left."""
    relationship = Relationship("b", "a_id", "a", "id", RelationshipType.MANY_TO_ONE)

    path = route_connector(relationship, tables)

    assert path is not None
    assert path.topology is Topology.RIGHT_TO_LEFT
    assert path.points == (Point(397, 172), Point(300, 172), Point(300, 45), Point(203, 45))
    assert (path.start.rotation, path.end.rotation) == (180, 0)
    assert (path.start.kind, path.end.kind) == (MarkerKind.CROWS_FOOT, MarkerKind.TICK)


def test_detour_when_tables_overlap_horizontally(tables: dict[str, Table]) -> None:
    """Test the route around the right side of vertically stacked tables."""
    path = route_connector(Relationship("a", "id", "c", "a_id"), tables)

    assert path is not None
    assert path.topology is Topology.DETOUR
    assert path.points == (Point(203, 45), Point(335, 45), Point(335, 372), Point(303, 372))
    assert (path.start.rotation, path.end.rotation) == (0, 0)


def test_self_reference_detours(tables: dict[str, Table]) -> None:
    """Test a relationship from a table to itself."""
    path = route_connector(Relationship("a", "name", "a", "id"), tables)

    assert path is not None
    assert path.topology is Topology.DETOUR
    assert path.points[1].x == 235


def test_level_fields_have_no_curves() -> None:
    """Test that a straight connector gets no rounded corners."""
    tables = {
        "a": Table("a", (Field("id"),), Point(0, 0)),
        "b": Table("b", (Field("id"),), Point(400, 0)),
    }

    path = route_connector(Relationship("a", "id", "b", "id"), tables)

    assert path is not None
    assert "Q" not in path.d
    assert path.d.startswith("M 203 45")
    assert path.d.endswith("L 397 45")


@pytest.mark.parametrize(
    ("relationship_type", "kinds"),
    [
        (RelationshipType.ONE_TO_MANY, (MarkerKind.TICK, MarkerKind.CROWS_FOOT)),
        (RelationshipType.MANY_TO_ONE, (MarkerKind.CROWS_FOOT, MarkerKind.TICK)),
        (RelationshipType.ONE_TO_ONE, (MarkerKind.TICK_CIRCLE, MarkerKind.TICK_CIRCLE)),
        (RelationshipType.MANY_TO_MANY, (MarkerKind.CROWS_FOOT, MarkerKind.CROWS_FOOT)),
    ],
)
def test_markers_follow_cardinality(
    tables: dict[str, Table],
    relationship_type: RelationshipType,
    kinds: tuple[MarkerKind, MarkerKind],
) -> None:
    """Test the marker pair drawn for each relationship type."""
    path = route_connector(Relationship("a", "id", "b", "a_id", relationship_type), tables)

    assert path is not None
    assert (path.start.kind, path.end.kind) == kinds
    assert path.start.anchor == path.points[0]
    assert path.end.anchor == path.points[-1]


@pytest.mark.parametrize(
    "relationship",
    [
        Relationship("ghost", "id", "a", "id"),
        Relationship("a", "id", "ghost", "id"),
        Relationship("a", "missing", "b", "a_id"),
        Relationship("a", "id", "b", "missing"),
    ],
)
def test_dangling_relationships_have_no_path(
    tables: dict[str, Table],
    relationship: Relationship,
) -> None:
    """Test that missing tables or fields are skipped, not raised."""
    assert route_connector(relationship, tables) is None


def test_unplaced_table_has_no_path(tables: dict[str, Table]) -> None:
    """Test that a table without a position cannot be routed."""
    floating = Table("b", tables["b"].fields)

    assert route_between(Relationship("a", "id", "b", "a_id"), tables["a"], floating) is None


def test_smooth_path_short_inputs() -> None:
    """Test paths with fewer than three points."""
    assert smooth_path([], 5) == []
    assert smooth_path([Point(0, 0), Point(10, 0)], 5) == [MoveTo(0, 0), LineTo(10, 0)]


def test_smooth_path_turning_up_and_left() -> None:
    """Test corner rounding against the direction of travel."""
    commands = smooth_path([Point(100, 100), Point(50, 100), Point(50, 0)], 5)

    assert commands == [
        MoveTo(100, 100),
        LineTo(55, 100),
        QuadTo(50, 100, 50, 95),
        LineTo(50, 0),
    ]
