"""Schema text to ER diagram geometry."""

from dbml_canvas.config import CanvasBounds, CanvasConfig, load_config
from dbml_canvas.diagram import (
    Diagram,
    RenderablePath,
    build_diagram,
    diagram_to_document,
    diagram_to_html,
    route_connector,
)
from dbml_canvas.layout import allocate_position, move_table, would_overlap
from dbml_canvas.reflect import read_only_sqlite, sqlite_to_dbml
from dbml_canvas.schema import parse_relationships, parse_schema
from dbml_canvas.types import (
    Direction,
    Field,
    Point,
    Reference,
    Relationship,
    RelationshipType,
    Table,
)

__all__ = [
    "CanvasBounds",
    "CanvasConfig",
    "Diagram",
    "Direction",
    "Field",
    "Point",
    "Reference",
    "Relationship",
    "RelationshipType",
    "RenderablePath",
    "Table",
    "allocate_position",
    "build_diagram",
    "diagram_to_document",
    "diagram_to_html",
    "load_config",
    "move_table",
    "parse_relationships",
    "parse_schema",
    "read_only_sqlite",
    "route_connector",
    "sqlite_to_dbml",
    "would_overlap",
]
