"""Cursor-based scanner for schema text."""

from __future__ import annotations

from collections.abc import Iterator


class ParseError(ValueError):
    """A fragment of schema text could not be tokenized."""


def is_identifier_char(char: str) -> bool:
    """Whether `char` may appear in a table or field name."""
    return char.isalnum() or char == "_"


class Scanner:
    """Forward-only cursor over a piece of text."""

    def __init__(self, text: str, offset: int = 0) -> None:
        """Start scanning `text` at `offset`."""
        self.text = text
        self.pos = offset
        # Newlines are counted once, from the last position asked about
        self._counted_to = 0
        self._line = 1

    @property
    def at_end(self) -> bool:
        """Whether the cursor has consumed all text."""
        return self.pos >= len(self.text)

    def peek(self) -> str:
        """Character under the cursor, or an empty string at the end."""
        return self.text[self.pos] if not self.at_end else ""

    def line_number(self, pos: int | None = None) -> int:
        """One-based line number of `pos` (default: the cursor)."""
        pos = self.pos if pos is None else pos
        if pos < self._counted_to:
            self._counted_to, self._line = 0, 1
        self._line += self.text.count("\n", self._counted_to, pos)
        self._counted_to = pos
        return self._line

    def at_line_start(self, pos: int) -> bool:
        """Whether only whitespace precedes `pos` on its line."""
        line_start = self.text.rfind("\n", 0, pos) + 1
        return not self.text[line_start:pos].strip()

    def skip_whitespace(self) -> None:
        """Advance past any whitespace, newlines included."""
        while not self.at_end and self.text[self.pos].isspace():
            self.pos += 1

    def find_keyword(self, keyword: str) -> int | None:
        """Advance past the next standalone `keyword` and return its start.

        A keyword only matches when it is not part of a longer identifier.
        Returns None, leaving the cursor at the end, when there is no match.
        """
        while (start := self.text.find(keyword, self.pos)) != -1:
            end = start + len(keyword)
            before = self.text[start - 1] if start > 0 else ""
            after = self.text[end] if end < len(self.text) else ""
            self.pos = end
            if not is_identifier_char(before) and not is_identifier_char(after):
                return start
        self.pos = len(self.text)
        return None

    def read_identifier(self) -> str:
        """Consume an identifier or raise ParseError."""
        start = self.pos
        while not self.at_end and is_identifier_char(self.text[self.pos]):
            self.pos += 1
        if start == self.pos:
            found = self.peek() or "end of text"
            msg = f"expected a name, found {found!r}"
            raise ParseError(msg)
        return self.text[start : self.pos]

    def read_qualified_name(self) -> tuple[str, str]:
        """Consume `table.field` and return both parts."""
        table = self.read_identifier()
        self.expect(".")
        return table, self.read_identifier()

    def accept(self, literal: str) -> bool:
        """Consume `literal` if it is next, reporting whether it was."""
        if self.text.startswith(literal, self.pos):
            self.pos += len(literal)
            return True
        return False

    def expect(self, literal: str) -> None:
        """Consume `literal` or raise ParseError."""
        if not self.accept(literal):
            found = self.peek() or "end of text"
            msg = f"expected {literal!r}, found {found!r}"
            raise ParseError(msg)

    def read_until(self, terminator: str) -> str:
        """Consume text up to and including `terminator`, returning the text before it."""
        end = self.text.find(terminator, self.pos)
        if end == -1:
            msg = f"missing closing {terminator!r}"
            raise ParseError(msg)
        content = self.text[self.pos : end]
        self.pos = end + len(terminator)
        return content

    def rest_of_line(self) -> str:
        """Consume and return the text up to the next newline."""
        end = self.text.find("\n", self.pos)
        if end == -1:
            end = len(self.text)
        content = self.text[self.pos : end]
        self.pos = end
        return content


def bracket_settings(annotation: str) -> Iterator[str]:
    """Yield the comma-separated settings of every `[...]` group in order."""
    scanner = Scanner(annotation)
    while not scanner.at_end:
        start = annotation.find("[", scanner.pos)
        if start == -1:
            return
        scanner.pos = start + 1
        try:
            group = scanner.read_until("]")
        except ParseError:
            group = scanner.rest_of_line()
        for setting in group.split(","):
            if setting := setting.strip():
                yield setting
