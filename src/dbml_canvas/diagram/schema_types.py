"""TypedDict schemas for the diagram JSON document."""

from typing import Literal, NotRequired, TypedDict


class PointSchema(TypedDict):
    """Schema for a canvas point."""

    x: float
    y: float


class ReferenceSchema(TypedDict):
    """Schema for an inline field reference."""

    direction: Literal[">", "<"]
    table: str
    field: str


class FieldSchema(TypedDict):
    """Schema for a table field."""

    name: str
    type: str
    primary_key: bool
    nullable: bool
    reference: NotRequired[ReferenceSchema]


class TableSchema(TypedDict):
    """Schema for a placed table box."""

    name: str
    position: PointSchema
    width: int
    height: int
    fields: list[FieldSchema]


class RelationshipSchema(TypedDict):
    """Schema for a relationship between two fields."""

    from_table: str
    from_field: str
    to_table: str
    to_field: str
    type: Literal["one-to-many", "many-to-one", "one-to-one", "many-to-many"]


class MarkerSchema(TypedDict):
    """Schema for a cardinality marker."""

    x: float
    y: float
    rotation: int
    kind: Literal["tick", "crows-foot", "tick-circle"]


class ConnectorSchema(TypedDict):
    """Schema for a routed relationship."""

    relationship: RelationshipSchema
    topology: Literal["left-to-right", "right-to-left", "detour"]
    path: str  # SVG path data
    points: list[PointSchema]
    start: MarkerSchema
    end: MarkerSchema


class DiagramSchema(TypedDict):
    """Root schema for the complete rendered diagram."""

    name: str
    tables: list[TableSchema]
    relationships: list[RelationshipSchema]
    connectors: list[ConnectorSchema]
    positions: dict[str, PointSchema]  # Position map for persistence
