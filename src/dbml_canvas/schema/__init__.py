"""Schema text parsing."""

from dbml_canvas.schema.parser import (
    ParsedSchema,
    ParseIssue,
    parse_document,
    parse_relationships,
    parse_schema,
)
from dbml_canvas.schema.tokens import ParseError

__all__ = [
    "ParseError",
    "ParseIssue",
    "ParsedSchema",
    "parse_document",
    "parse_relationships",
    "parse_schema",
]
