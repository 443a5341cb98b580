"""Resilient parser for DBML-style schema text.

Every construct is parsed on its own: a malformed table block, field line or
reference is logged, recorded as a `ParseIssue` and skipped, and the rest of
the document still yields whatever it validly contains.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from logging import getLogger
from typing import NamedTuple

from dbml_canvas.schema.tokens import ParseError, Scanner, bracket_settings
from dbml_canvas.types import (
    Direction,
    Field,
    Reference,
    Relationship,
    RelationshipType,
    Table,
)

logger = getLogger(__name__)

UNKNOWN_TYPE = "unknown"
PRIMARY_KEY_MARKER = "[primary key]"

# Longest operators first so "<>" is not read as "<"
REF_OPERATORS: dict[str, RelationshipType] = {
    "<>": RelationshipType.MANY_TO_MANY,
    ">": RelationshipType.ONE_TO_MANY,
    "<": RelationshipType.MANY_TO_ONE,
    "-": RelationshipType.ONE_TO_ONE,
}


class ParseIssue(NamedTuple):
    """A skipped fragment of schema text."""

    line: int
    message: str


class TableBlock(NamedTuple):
    """A `Table name { ... }` block as it appears in the text."""

    name: str
    line: int
    fields: tuple[Field, ...]
    span: tuple[int, int]  # Offsets of `Table` and just past the closing brace


class ParsedSchema(NamedTuple):
    """Everything recognized in one schema document."""

    tables: dict[str, Table]
    relationships: list[Relationship]
    issues: list[ParseIssue]


def _skip(issues: list[ParseIssue], line: int, message: str) -> None:
    logger.warning("Skipping schema fragment at line %d: %s", line, message)
    issues.append(ParseIssue(line, message))


def _parse_reference(setting: str) -> Reference:
    """Parse the body of a `ref:` setting, e.g. `> users.id`."""
    scanner = Scanner(setting.removeprefix("ref:"))
    scanner.skip_whitespace()
    if scanner.accept(">"):
        direction = Direction.TO_TARGET
    elif scanner.accept("<"):
        direction = Direction.FROM_SOURCE
    else:
        msg = f"unsupported reference direction in {setting!r}"
        raise ParseError(msg)
    scanner.skip_whitespace()
    table_name, field_name = scanner.read_qualified_name()
    scanner.skip_whitespace()
    if not scanner.at_end:
        msg = f"unexpected text after reference in {setting!r}"
        raise ParseError(msg)
    return Reference(direction, table_name, field_name)


def parse_field(line: str, line_number: int, issues: list[ParseIssue]) -> Field:
    """Parse one trimmed, non-empty body line into a field.

    The first token is the name and the second the type. Everything after the
    type is annotation text searched for key, nullability and reference markers.
    """
    tokens = line.split()
    name = tokens[0]
    field_type = tokens[1] if len(tokens) > 1 else UNKNOWN_TYPE
    annotation = " ".join(tokens[2:])

    reference = None
    for setting in bracket_settings(annotation):
        if not setting.startswith("ref:"):
            continue
        try:
            reference = _parse_reference(setting)
        except ParseError as err:
            _skip(issues, line_number, f"field {name!r}: {err}")
            continue
        break

    return Field(
        name=name,
        type=field_type,
        is_primary=PRIMARY_KEY_MARKER in annotation,
        is_required="nullable" not in annotation or "not null" in annotation,
        reference=reference,
    )


def _parse_body(body: str, first_line: int, issues: list[ParseIssue]) -> tuple[Field, ...]:
    fields: list[Field] = []
    for offset, raw_line in enumerate(body.split("\n")):
        if line := raw_line.strip():
            fields.append(parse_field(line, first_line + offset, issues))
    return tuple(fields)


def scan_tables(text: str, issues: list[ParseIssue]) -> Iterator[TableBlock]:
    """Yield every well-formed table block in source order."""
    scanner = Scanner(text)
    while (start := scanner.find_keyword("Table")) is not None:
        line = scanner.line_number(start)
        try:
            scanner.skip_whitespace()
            name = scanner.read_identifier()
            scanner.skip_whitespace()
            scanner.expect("{")
            body_line = scanner.line_number()
            body = scanner.read_until("}")
        except ParseError as err:
            _skip(issues, line, f"table block: {err}")
            continue
        yield TableBlock(name, line, _parse_body(body, body_line, issues), (start, scanner.pos))


def _parse_ref_expression(expression: str) -> Relationship:
    """Parse `a.x <op> b.y` into a relationship."""
    scanner = Scanner(expression)
    scanner.skip_whitespace()
    from_table, from_field = scanner.read_qualified_name()
    scanner.skip_whitespace()
    for operator, relationship_type in REF_OPERATORS.items():
        if scanner.accept(operator):
            break
    else:
        found = scanner.peek() or "end of line"
        msg = f"expected one of {', '.join(REF_OPERATORS)}, found {found!r}"
        raise ParseError(msg)
    scanner.skip_whitespace()
    to_table, to_field = scanner.read_qualified_name()
    return Relationship(from_table, from_field, to_table, to_field, relationship_type)


def scan_block_references(
    text: str,
    issues: list[ParseIssue],
    table_spans: Sequence[tuple[int, int]] = (),
) -> Iterator[Relationship]:
    """Yield every `Ref: a.x > b.y` relationship in source order.

    A reference must open its line and lie outside every table block, so a
    table or field named `Ref` is not mistaken for one.
    """
    scanner = Scanner(text)
    while (start := scanner.find_keyword("Ref")) is not None:
        if not scanner.at_line_start(start) or any(
            low <= start < high for low, high in table_spans
        ):
            continue
        line = scanner.line_number(start)
        try:
            scanner.skip_whitespace()
            if not scanner.accept(":"):
                # Named form: `Ref name: ...`
                scanner.read_identifier()
                scanner.skip_whitespace()
                scanner.expect(":")
            yield _parse_ref_expression(scanner.rest_of_line())
        except ParseError as err:
            _skip(issues, line, f"reference: {err}")


def inline_relationships(table_name: str, fields: tuple[Field, ...]) -> Iterator[Relationship]:
    """Yield the relationship implied by each field's inline reference."""
    for field in fields:
        if (ref := field.reference) is None:
            continue
        if ref.direction is Direction.TO_TARGET:
            yield Relationship(
                from_table=table_name,
                from_field=field.name,
                to_table=ref.table_name,
                to_field=ref.field_name,
                type=RelationshipType.ONE_TO_MANY,
            )
        else:
            yield Relationship(
                from_table=ref.table_name,
                from_field=ref.field_name,
                to_table=table_name,
                to_field=field.name,
                type=RelationshipType.MANY_TO_ONE,
            )


def parse_document(text: str) -> ParsedSchema:
    """Parse tables, relationships and skipped-fragment issues in one pass."""
    issues: list[ParseIssue] = []
    tables: dict[str, Table] = {}
    inline: list[Relationship] = []
    spans: list[tuple[int, int]] = []

    for block in scan_tables(text, issues):
        if block.name in tables:
            _skip(issues, block.line, f"table {block.name!r} replaces an earlier definition")
        tables[block.name] = Table(block.name, block.fields)
        inline.extend(inline_relationships(block.name, block.fields))
        spans.append(block.span)

    relationships = [*scan_block_references(text, issues, spans), *inline]
    issues.sort(key=lambda issue: issue.line)
    return ParsedSchema(tables, relationships, issues)


def parse_schema(text: str) -> dict[str, Table]:
    """Parse schema text into unplaced tables keyed by name."""
    return parse_document(text).tables


def parse_relationships(text: str) -> list[Relationship]:
    """Parse block-level and inline references from schema text."""
    return parse_document(text).relationships
