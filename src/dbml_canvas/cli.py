"""Command line interface for dbml-canvas."""

import logging
import sys
from collections.abc import Iterable
from json import dumps
from pathlib import Path
from sys import stdout
from typing import Literal

from cyclopts import App
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from sqlalchemy.exc import SQLAlchemyError

from dbml_canvas.config import DEFAULT_CONFIG, CanvasConfig, load_config
from dbml_canvas.diagram import (
    Diagram,
    build_diagram,
    diagram_to_document,
    diagram_to_html,
    dump_positions,
    load_positions,
)
from dbml_canvas.reflect import read_only_sqlite, sqlite_to_dbml
from dbml_canvas.types import Relationship

app = App(help="Render schema text as an ER diagram")

console = Console()
err_console = Console(stderr=True)

SQLITE_EXTENSIONS = {".sqlite", ".db", ".sqlite3"}


def print_error(message: str) -> None:
    """Print error message to stderr."""
    err_console.print(f"[bold red]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print success message to stderr."""
    err_console.print(f"[bold green]✓[/] {message}")


def print_info(message: str) -> None:
    """Print info message to stderr."""
    err_console.print(f"[bold blue]i[/] {message}")


def configure_logging(*, verbose: bool) -> None:
    """Send library logging to stderr through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def validate_file(location: Path, extensions: Iterable[str] | None = None) -> None:
    """Exit with an error unless `location` is an existing file of the right kind."""
    if not location.is_file():
        print_error(f"File does not exist: {location}")
        sys.exit(1)
    if extensions is not None and location.suffix.lower() not in extensions:
        print_error(f"File has invalid extension, expected one of: {', '.join(sorted(extensions))}")
        sys.exit(1)


def read_config(config: Path | None) -> CanvasConfig:
    """Load the canvas config, falling back to the defaults."""
    if config is None:
        return DEFAULT_CONFIG
    validate_file(config, {".toml"})
    try:
        return load_config(config)
    except ValueError as e:
        print_error(str(e))
        sys.exit(1)


def load_diagram(schema: Path, positions: Path | None, config: CanvasConfig) -> Diagram:
    """Read schema text and saved positions, then build the diagram."""
    validate_file(schema)
    saved_positions = None
    if positions is not None:
        validate_file(positions, {".json"})
        try:
            saved_positions = load_positions(positions.read_text())
        except ValueError as e:
            print_error(str(e))
            sys.exit(1)
    return build_diagram(schema.read_text(), saved_positions=saved_positions, config=config)


def relationship_label(relationship: Relationship) -> str:
    """Format a relationship as `a.x -> b.y`."""
    return (
        f"{relationship.from_table}.{relationship.from_field} -> "
        f"{relationship.to_table}.{relationship.to_field}"
    )


def format_diagram_table(diagram: Diagram) -> None:
    """Format tables and connectors as rich tables."""
    tables = Table(title="Tables")
    tables.add_column("Table", style="bold cyan")
    tables.add_column("Fields", justify="right")
    tables.add_column("Position")
    for table in diagram.tables.values():
        position = table.position
        where = f"({position.x:g}, {position.y:g})" if position is not None else "-"
        tables.add_row(table.name, str(len(table.fields)), where)
    console.print(tables)

    connectors = Table(title="Relationships")
    connectors.add_column("Relationship", style="bold yellow")
    connectors.add_column("Type")
    connectors.add_column("Route")
    routed = {connector.relationship: connector for connector in diagram.connectors}
    for relationship in diagram.relationships:
        connector = routed.get(relationship)
        route = connector.topology.value if connector is not None else "[red]dangling[/]"
        connectors.add_row(relationship_label(relationship), relationship.type.value, route)
    console.print(connectors)


@app.command
def render(
    schema: Path,
    fmt: Literal["table", "json", "html"] = "table",
    *,
    positions: Path | None = None,
    config: Path | None = None,
    title: str | None = None,
    verbose: bool = False,
) -> None:
    """Render a schema file as a laid-out diagram."""
    configure_logging(verbose=verbose)
    canvas_config = read_config(config)
    print_info(f"Schema: {schema}")
    print_info(f"Output format: {fmt}")

    diagram = load_diagram(schema, positions, canvas_config)

    if fmt == "html":
        stdout.write(diagram_to_html(diagram, title or schema.stem, canvas_config))
    elif fmt == "json":
        document = diagram_to_document(diagram, title or schema.stem, canvas_config)
        stdout.write(dumps(document, indent=2))
    elif fmt == "table":
        format_diagram_table(diagram)

    print_success(
        f"Rendered {len(diagram.tables)} tables and {len(diagram.connectors)} connectors",
    )


@app.command
def positions(
    schema: Path,
    *,
    saved: Path | None = None,
    config: Path | None = None,
    verbose: bool = False,
) -> None:
    """Emit the position map of a schema file for persistence."""
    configure_logging(verbose=verbose)
    diagram = load_diagram(schema, saved, read_config(config))
    stdout.write(dump_positions(diagram.positions))


@app.command
def check(schema: Path, *, verbose: bool = False) -> None:
    """Report skipped fragments and dangling relationships."""
    configure_logging(verbose=verbose)
    diagram = load_diagram(schema, None, DEFAULT_CONFIG)

    if diagram.issues:
        issues = Table(title="Skipped fragments")
        issues.add_column("Line", justify="right", style="bold cyan")
        issues.add_column("Problem")
        for issue in diagram.issues:
            issues.add_row(str(issue.line), issue.message)
        console.print(issues)

    for relationship in diagram.dangling:
        print_error(f"Dangling relationship {relationship_label(relationship)}")

    if diagram.issues or diagram.dangling:
        sys.exit(1)
    print_success(f"{schema} is clean")


@app.command
def reflect(sqlite_location: Path) -> None:
    """Generate schema text from an existing SQLite database."""
    validate_file(sqlite_location, SQLITE_EXTENSIONS)
    print_info(f"Source database: {sqlite_location}")

    try:
        stdout.write(sqlite_to_dbml(read_only_sqlite(sqlite_location)))
    except SQLAlchemyError as e:
        print_error(f"Failed to read database: {e}")
        sys.exit(1)

    print_success("Schema generation completed successfully")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
