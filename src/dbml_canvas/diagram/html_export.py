"""HTML export functionality for rendered diagrams."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from dbml_canvas.config import DEFAULT_CONFIG, CanvasConfig
from dbml_canvas.layout.geometry import diagram_extent, table_height

if TYPE_CHECKING:
    from dbml_canvas.diagram.main import Diagram
    from dbml_canvas.types import Point, Table

TEMPLATE_DIR = Path(__file__).parent / "templates"

# Space kept around the outermost tables and detour lines
VIEWPORT_MARGIN = 80

_JINJA_ENV = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(default=True),
    trim_blocks=True,
    lstrip_blocks=True,
)


def _table_context(table: Table, position: Point, config: CanvasConfig) -> dict[str, Any]:
    metrics = config.metrics
    return {
        "name": table.name,
        "x": position.x,
        "y": position.y,
        "width": metrics.width,
        "height": table_height(table.fields, metrics),
        "header_height": metrics.header_height,
        "fields": [
            {
                "name": field.name,
                "type": field.type,
                "primary": field.is_primary,
                "nullable": not field.is_required,
                "top": position.y + metrics.header_height + index * metrics.field_height,
                "baseline": (
                    position.y
                    + metrics.header_height
                    + index * metrics.field_height
                    + metrics.field_center_offset
                ),
            }
            for index, field in enumerate(table.fields)
        ],
        "field_height": metrics.field_height,
    }


def diagram_to_html(
    diagram: Diagram,
    title: str = "ER Diagram",
    config: CanvasConfig = DEFAULT_CONFIG,
) -> str:
    """Render a diagram as a standalone HTML page with an inline SVG."""
    extent = diagram_extent(diagram.tables.values(), config.metrics, VIEWPORT_MARGIN)
    template = _JINJA_ENV.get_template("diagram.html")
    return template.render(
        title=title,
        width=extent.x,
        height=extent.y,
        tables=[
            _table_context(table, table.position, config)
            for table in diagram.tables.values()
            if table.position is not None
        ],
        connectors=diagram.connectors,
        marker_size=config.routing.marker_size,
        issues=diagram.issues,
    )
