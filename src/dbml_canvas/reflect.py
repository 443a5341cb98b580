"""Schema text generation from an existing SQLite database."""

from pathlib import Path

from sqlalchemy import Engine, Inspector, create_engine, inspect
from sqlalchemy.engine.interfaces import ReflectedColumn, ReflectedForeignKeyConstraint


def read_only_sqlite(sqlite_location: Path) -> Engine:
    """Create a read-only SQLAlchemy engine for SQLite database."""
    connection_string = f"sqlite:///{sqlite_location}?mode=ro"
    return create_engine(connection_string, connect_args={"uri": True})


def _type_token(col_info: ReflectedColumn) -> str:
    """Column type as a single whitespace-free token."""
    return "_".join(str(col_info["type"]).split()) or "unknown"


def _field_line(col_info: ReflectedColumn, primary_keys: list[str]) -> str:
    """Build one field line, e.g. `id INTEGER [primary key] [not null]`."""
    is_primary = col_info["name"] in primary_keys
    parts = [col_info["name"], _type_token(col_info)]
    if is_primary:
        parts.append("[primary key]")
    # Primary keys are always required in the diagram
    parts.append("[nullable]" if col_info["nullable"] and not is_primary else "[not null]")
    return " ".join(parts)


def _ref_lines(table_name: str, fk: ReflectedForeignKeyConstraint) -> list[str]:
    """Build `Ref:` lines for each column pair of a foreign key."""
    return [
        f"Ref: {table_name}.{source_col} > {fk['referred_table']}.{target_col}"
        for source_col, target_col in zip(
            fk["constrained_columns"],
            fk["referred_columns"],
            strict=True,
        )
    ]


def _table_block(inspector: Inspector, table_name: str) -> str:
    """Build a table block from database introspection."""
    primary_keys = inspector.get_pk_constraint(table_name)["constrained_columns"]
    lines = [
        f"  {_field_line(col_info, primary_keys)}"
        for col_info in inspector.get_columns(table_name)
    ]
    return "\n".join([f"Table {table_name} {{", *lines, "}"])


def sqlite_to_dbml(sqlite_database: Engine) -> str:
    """Generate schema text for every table and foreign key of a database."""
    inspector = inspect(sqlite_database)
    table_names = inspector.get_table_names()

    blocks = [_table_block(inspector, table_name) for table_name in table_names]
    refs = [
        line
        for table_name in table_names
        for fk in inspector.get_foreign_keys(table_name)
        for line in _ref_lines(table_name, fk)
    ]
    return "\n\n".join([*blocks, "\n".join(refs)] if refs else blocks) + "\n"
