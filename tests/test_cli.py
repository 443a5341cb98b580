"""Tests for the command line interface."""

import json
import sqlite3
from io import StringIO
from pathlib import Path

import pytest

from dbml_canvas import cli
from dbml_canvas.diagram import load_positions
from dbml_canvas.types import Point

SCHEMA = """
Table users {
  id integer [primary key]
}

Table posts {
  id integer [primary key]
  user_id integer [ref: > users.id]
}
"""


@pytest.fixture(name="output")
def fixture_output(monkeypatch: pytest.MonkeyPatch) -> StringIO:
    """Capture data written to stdout by the commands."""
    buffer = StringIO()
    monkeypatch.setattr(cli, "stdout", buffer)
    return buffer


@pytest.fixture(name="schema_file")
def fixture_schema_file(tmp_path: Path) -> Path:
    """A clean schema file."""
    path = tmp_path / "blog.dbml"
    path.write_text(SCHEMA)
    return path


def test_render_json(schema_file: Path, output: StringIO) -> None:
    """Test the JSON document output."""
    cli.render(schema_file, "json")

    document = json.loads(output.getvalue())
    assert document["name"] == "blog"
    assert [table["name"] for table in document["tables"]] == ["users", "posts"]
    assert len(document["connectors"]) == 1


def test_render_html_with_title(schema_file: Path, output: StringIO) -> None:
    """Test the HTML output."""
    cli.render(schema_file, "html", title="Blog")

    assert "<title>Blog</title>" in output.getvalue()


def test_render_table(schema_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test the rich table summary."""
    cli.render(schema_file)

    captured = capsys.readouterr()
    assert "posts.user_id -> users.id" in captured.out
    assert "Rendered 2 tables and 1 connectors" in captured.err


def test_render_uses_saved_positions(tmp_path: Path, schema_file: Path, output: StringIO) -> None:
    """Test that a saved position map is honored."""
    saved = tmp_path / "positions.json"
    saved.write_text(json.dumps({"users": {"x": 1000, "y": 500}}))

    cli.render(schema_file, "json", positions=saved)

    document = json.loads(output.getvalue())
    assert document["positions"]["users"] == {"x": 1000, "y": 500}


def test_render_with_config(tmp_path: Path, schema_file: Path, output: StringIO) -> None:
    """Test that a config file changes the geometry."""
    config = tmp_path / "canvas.toml"
    config.write_text("[metrics]\nwidth = 240\n")

    cli.render(schema_file, "json", config=config)

    document = json.loads(output.getvalue())
    assert {table["width"] for table in document["tables"]} == {240}


def test_render_rejects_bad_config(tmp_path: Path, schema_file: Path) -> None:
    """Test that an invalid config file exits with an error."""
    config = tmp_path / "canvas.toml"
    config.write_text("[colors]\n")

    with pytest.raises(SystemExit) as exc_info:
        cli.render(schema_file, "json", config=config)
    assert exc_info.value.code == 1


def test_render_missing_schema(tmp_path: Path) -> None:
    """Test that a missing schema file exits with an error."""
    with pytest.raises(SystemExit) as exc_info:
        cli.render(tmp_path / "missing.dbml")
    assert exc_info.value.code == 1


def test_render_rejects_bad_positions(tmp_path: Path, schema_file: Path) -> None:
    """Test that a malformed position map exits with an error."""
    saved = tmp_path / "positions.json"
    saved.write_text("[]")

    with pytest.raises(SystemExit):
        cli.render(schema_file, "json", positions=saved)


def test_positions(tmp_path: Path, schema_file: Path, output: StringIO) -> None:
    """Test the persisted position map output."""
    saved = tmp_path / "positions.json"
    saved.write_text(json.dumps({"posts": {"x": 800, "y": 400}}))

    cli.positions(schema_file, saved=saved)

    positions = load_positions(output.getvalue())
    assert set(positions) == {"users", "posts"}
    assert positions["posts"] == Point(800, 400)


def test_check_clean_schema(schema_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test that a clean schema passes the check."""
    cli.check(schema_file)

    assert "clean" in capsys.readouterr().err


def test_check_reports_problems(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test that skipped fragments and dangling relationships fail the check."""
    path = tmp_path / "broken.dbml"
    path.write_text(SCHEMA + "\nTable {\n}\nRef: posts.id > ghost.id\n")

    with pytest.raises(SystemExit) as exc_info:
        cli.check(path)

    assert exc_info.value.code == 1
    captured = capsys.readouterr()
    assert "Skipped fragments" in captured.out
    assert "Dangling relationship posts.id -> ghost.id" in captured.err


def test_reflect(tmp_path: Path, output: StringIO) -> None:
    """Test schema text generation from a SQLite file."""
    db_path = tmp_path / "shop.sqlite"
    conn = sqlite3.connect(db_path)
    conn.execute("CREATE TABLE customers (id INTEGER PRIMARY KEY, name TEXT)")
    conn.commit()
    conn.close()

    cli.reflect(db_path)

    assert "Table customers {" in output.getvalue()


def test_reflect_rejects_other_files(schema_file: Path) -> None:
    """Test the SQLite extension check."""
    with pytest.raises(SystemExit):
        cli.reflect(schema_file)


def test_reflect_unreadable_database(tmp_path: Path) -> None:
    """Test that a file that is not a SQLite database exits with an error."""
    db_path = tmp_path / "corrupt.sqlite"
    db_path.write_bytes(b"not a database" * 100)

    with pytest.raises(SystemExit) as exc_info:
        cli.reflect(db_path)
    assert exc_info.value.code == 1
