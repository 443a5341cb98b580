"""Main module for turning schema text into a rendered diagram model."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, cast

from dbml_canvas.config import DEFAULT_CONFIG, CanvasConfig
from dbml_canvas.diagram.routing import Marker, RenderablePath, route_connector
from dbml_canvas.layout.allocator import layout_tables
from dbml_canvas.layout.geometry import table_height
from dbml_canvas.schema.parser import ParseIssue, parse_document
from dbml_canvas.types import Field, Point, Relationship, Table

if TYPE_CHECKING:
    from dbml_canvas.diagram.schema_types import (
        ConnectorSchema,
        DiagramSchema,
        FieldSchema,
        MarkerSchema,
        PointSchema,
        RelationshipSchema,
        TableSchema,
    )


@dataclass(frozen=True, slots=True)
class Diagram:
    """Tables with positions, their relationships and the drawable connectors."""

    tables: dict[str, Table]
    relationships: list[Relationship]
    connectors: list[RenderablePath]
    issues: list[ParseIssue]

    @property
    def positions(self) -> dict[str, Point]:
        """Position map to hand to a storage layer."""
        return {
            name: table.position
            for name, table in self.tables.items()
            if table.position is not None
        }

    @property
    def dangling(self) -> list[Relationship]:
        """Relationships that name a missing table or field."""
        routed = {connector.relationship for connector in self.connectors}
        return [rel for rel in self.relationships if rel not in routed]


def carry_positions(
    tables: Mapping[str, Table],
    positions: Mapping[str, Point] | None = None,
    saved_positions: Mapping[str, Point] | None = None,
) -> dict[str, Point]:
    """Pick the known position of each table.

    Recent positions (for example from the previous parse or a live drag) win
    over saved ones; tables in neither are left for the allocator.
    """
    positions = positions or {}
    saved_positions = saved_positions or {}
    carried: dict[str, Point] = {}
    for name in tables:
        if name in positions:
            carried[name] = positions[name]
        elif name in saved_positions:
            carried[name] = saved_positions[name]
    return carried


def build_diagram(
    text: str,
    positions: Mapping[str, Point] | None = None,
    saved_positions: Mapping[str, Point] | None = None,
    config: CanvasConfig = DEFAULT_CONFIG,
) -> Diagram:
    """Parse schema text, lay out new tables and route every relationship."""
    parsed = parse_document(text)
    tables = layout_tables(
        parsed.tables,
        carry_positions(parsed.tables, positions, saved_positions),
        config.bounds,
        metrics=config.metrics,
        settings=config.layout,
    )
    connectors = [
        path
        for relationship in parsed.relationships
        if (
            path := route_connector(
                relationship,
                tables,
                metrics=config.metrics,
                settings=config.routing,
            )
        )
        is not None
    ]
    return Diagram(tables, parsed.relationships, connectors, parsed.issues)


def _point(point: Point) -> PointSchema:
    return {"x": point.x, "y": point.y}


def _field(field: Field) -> FieldSchema:
    schema: FieldSchema = {
        "name": field.name,
        "type": field.type,
        "primary_key": field.is_primary,
        "nullable": not field.is_required,
    }
    if field.reference is not None:
        schema["reference"] = {
            "direction": field.reference.direction.value,
            "table": field.reference.table_name,
            "field": field.reference.field_name,
        }
    return schema


def _relationship(relationship: Relationship) -> RelationshipSchema:
    return {
        "from_table": relationship.from_table,
        "from_field": relationship.from_field,
        "to_table": relationship.to_table,
        "to_field": relationship.to_field,
        "type": relationship.type.value,
    }


def _marker(marker: Marker) -> MarkerSchema:
    return {
        "x": marker.anchor.x,
        "y": marker.anchor.y,
        "rotation": marker.rotation,
        "kind": marker.kind.value,
    }


def _connector(connector: RenderablePath) -> ConnectorSchema:
    return {
        "relationship": _relationship(connector.relationship),
        "topology": connector.topology.value,
        "path": connector.d,
        "points": [_point(point) for point in connector.points],
        "start": _marker(connector.start),
        "end": _marker(connector.end),
    }


def diagram_to_document(
    diagram: Diagram,
    name: str = "diagram",
    config: CanvasConfig = DEFAULT_CONFIG,
) -> DiagramSchema:
    """Convert a diagram into its JSON document form."""
    tables: list[TableSchema] = [
        {
            "name": table.name,
            "position": _point(table.position),
            "width": config.metrics.width,
            "height": table_height(table.fields, config.metrics),
            "fields": [_field(field) for field in table.fields],
        }
        for table in diagram.tables.values()
        if table.position is not None
    ]
    return {
        "name": name,
        "tables": tables,
        "relationships": [_relationship(rel) for rel in diagram.relationships],
        "connectors": [_connector(connector) for connector in diagram.connectors],
        "positions": {
            table_name: _point(point) for table_name, point in diagram.positions.items()
        },
    }


def dump_positions(positions: Mapping[str, Point]) -> str:
    """Serialize a position map to JSON."""
    return json.dumps({name: _point(point) for name, point in positions.items()}, indent=2)


def load_positions(content: str) -> dict[str, Point]:
    """Parse a JSON position map written by `dump_positions`."""
    try:
        data = json.loads(content)
    except json.JSONDecodeError as err:
        msg = f"Invalid position map: {err}"
        raise ValueError(msg) from err

    if not isinstance(data, dict):
        msg = "Position map must be a JSON object"
        raise ValueError(msg)

    positions: dict[str, Point] = {}
    for name, value in cast("dict[str, Any]", data).items():
        try:
            x, y = value["x"], value["y"]
        except (KeyError, TypeError) as err:
            msg = f"Position for table {name!r} must have x and y"
            raise ValueError(msg) from err
        if not all(isinstance(v, int | float) and not isinstance(v, bool) for v in (x, y)):
            msg = f"Position for table {name!r} must be numeric"
            raise ValueError(msg)
        positions[name] = Point(x, y)
    return positions
