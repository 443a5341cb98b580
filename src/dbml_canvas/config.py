"""Canvas, table and routing configuration."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path
from tomllib import TOMLDecodeError, load
from typing import Any


@dataclass(frozen=True, slots=True)
class CanvasBounds:
    """The rectangular region tables may be placed in."""

    min_x: int = 20
    min_y: int = 20
    width: int = 3000
    height: int = 2000
    padding: int = 40


@dataclass(frozen=True, slots=True)
class TableMetrics:
    """Pixel dimensions of a rendered table box."""

    width: int = 200
    header_height: int = 32
    field_height: int = 27
    field_center_offset: int = 13  # Vertical center of a field row


@dataclass(frozen=True, slots=True)
class LayoutSettings:
    """Tuning for automatic placement and drag validation."""

    grid_size: int = 20
    table_spacing: int = 60
    drag_spacing: int = 40
    columns: int = 3
    spiral_radii: int = 20
    spiral_step_degrees: int = 15
    max_spiral_attempts: int = 400
    random_attempts: int = 50
    fallback_step: int = 10


@dataclass(frozen=True, slots=True)
class RoutingSettings:
    """Tuning for connector paths and markers."""

    detour_padding: int = 35
    curve_radius: int = 5
    endpoint_offset: int = 3
    marker_size: int = 6


@dataclass(frozen=True, slots=True)
class CanvasConfig:
    """All geometry settings in one value."""

    bounds: CanvasBounds = CanvasBounds()
    metrics: TableMetrics = TableMetrics()
    layout: LayoutSettings = LayoutSettings()
    routing: RoutingSettings = RoutingSettings()


DEFAULT_BOUNDS = CanvasBounds()
DEFAULT_METRICS = TableMetrics()
DEFAULT_LAYOUT = LayoutSettings()
DEFAULT_ROUTING = RoutingSettings()
DEFAULT_CONFIG = CanvasConfig()

_SECTIONS = ("bounds", "metrics", "layout", "routing")

# Used as divisors or step sizes
_POSITIVE = {"grid_size", "columns", "spiral_step_degrees"}


def _override[T](section: str, current: T, values: Any) -> T:  # noqa: ANN401
    """Return `current` with the integer settings in `values` applied."""
    if not isinstance(values, dict):
        msg = f"Config section [{section}] must be a table"
        raise ValueError(msg)

    known = {f.name for f in fields(current)}  # type: ignore[arg-type]
    if unknown := sorted(set(values) - known):
        msg = f"Unknown setting(s) in [{section}]: {', '.join(unknown)}"
        raise ValueError(msg)

    for key, value in values.items():
        if isinstance(value, bool) or not isinstance(value, int):
            msg = f"Setting {section}.{key} must be an integer, got {value!r}"
            raise ValueError(msg)
        if value < 0:
            msg = f"Setting {section}.{key} must be >= 0, got {value}"
            raise ValueError(msg)
        if value == 0 and key in _POSITIVE:
            msg = f"Setting {section}.{key} must be > 0"
            raise ValueError(msg)

    return replace(current, **values)  # type: ignore[type-var]


def config_from_mapping(data: dict[str, Any]) -> CanvasConfig:
    """Build a config from a parsed TOML document."""
    if unknown := sorted(set(data) - set(_SECTIONS)):
        msg = f"Unknown config section(s): {', '.join(unknown)}"
        raise ValueError(msg)

    config = DEFAULT_CONFIG
    for section in _SECTIONS:
        if section in data:
            config = replace(
                config,
                **{section: _override(section, getattr(config, section), data[section])},
            )
    return config


def load_config(path: Path) -> CanvasConfig:
    """Load a canvas config from a TOML file."""
    try:
        with path.open("rb") as f:
            data = load(f)
    except TOMLDecodeError as err:
        msg = f"Invalid config file {path}: {err}"
        raise ValueError(msg) from err
    return config_from_mapping(data)
