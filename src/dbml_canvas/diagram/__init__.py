"""Diagram assembly, connector routing and HTML export."""

from dbml_canvas.diagram.html_export import diagram_to_html
from dbml_canvas.diagram.main import (
    Diagram,
    build_diagram,
    carry_positions,
    diagram_to_document,
    dump_positions,
    load_positions,
)
from dbml_canvas.diagram.routing import (
    Marker,
    MarkerKind,
    RenderablePath,
    Topology,
    route_between,
    route_connector,
    smooth_path,
)

__all__ = [
    "Diagram",
    "Marker",
    "MarkerKind",
    "RenderablePath",
    "Topology",
    "build_diagram",
    "carry_positions",
    "diagram_to_document",
    "diagram_to_html",
    "dump_positions",
    "load_positions",
    "route_between",
    "route_connector",
    "smooth_path",
]
