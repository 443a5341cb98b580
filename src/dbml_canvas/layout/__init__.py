"""Table placement and overlap checks."""

from dbml_canvas.layout.allocator import allocate_position, canvas_anchor, layout_tables
from dbml_canvas.layout.geometry import (
    clamp_to_canvas,
    diagram_extent,
    snap_to_grid_floor,
    table_height,
)
from dbml_canvas.layout.overlap import (
    Landing,
    collides,
    landing_position,
    move_table,
    overlaps,
    would_overlap,
)

__all__ = [
    "Landing",
    "allocate_position",
    "canvas_anchor",
    "clamp_to_canvas",
    "collides",
    "diagram_extent",
    "landing_position",
    "layout_tables",
    "move_table",
    "overlaps",
    "snap_to_grid_floor",
    "table_height",
    "would_overlap",
]
