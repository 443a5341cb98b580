"""Record types for parsed schemas and their canvas geometry."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum
from typing import NamedTuple


class Point(NamedTuple):
    """A location in canvas pixel space."""

    x: float
    y: float


class Direction(StrEnum):
    """Which way an inline reference points."""

    TO_TARGET = ">"  # This field references the target
    FROM_SOURCE = "<"  # The target references this field


class RelationshipType(StrEnum):
    """Cardinality of a relationship, read from the `from` side."""

    ONE_TO_MANY = "one-to-many"
    MANY_TO_ONE = "many-to-one"
    ONE_TO_ONE = "one-to-one"
    MANY_TO_MANY = "many-to-many"


@dataclass(frozen=True, slots=True)
class Reference:
    """Inline `[ref: ...]` annotation carried by a field."""

    direction: Direction
    table_name: str
    field_name: str


@dataclass(frozen=True, slots=True)
class Field:
    """A named, typed column belonging to one table."""

    name: str
    type: str = "unknown"
    is_primary: bool = False
    is_required: bool = True
    reference: Reference | None = None


@dataclass(frozen=True, slots=True)
class Table:
    """A named collection of fields with an optional canvas position."""

    name: str
    fields: tuple[Field, ...] = ()
    position: Point | None = None

    @property
    def is_placed(self) -> bool:
        """Whether the table has been given a canvas position."""
        return self.position is not None

    def moved_to(self, position: Point) -> Table:
        """Return a copy of this table at a new position."""
        return replace(self, position=position)

    def field_index(self, field_name: str) -> int | None:
        """Index of the first field with the given name, if any."""
        return next(
            (index for index, field in enumerate(self.fields) if field.name == field_name),
            None,
        )


@dataclass(frozen=True, slots=True)
class Relationship:
    """A directed, cardinality-typed edge between two fields."""

    from_table: str
    from_field: str
    to_table: str
    to_field: str
    type: RelationshipType = RelationshipType.ONE_TO_MANY
