"""Configuration loading for flowmap.

Configuration is optional. A `flowmap.yml` next to the working directory (or a
path given with `--config`) can override layout constants, viewport limits and
append extra header names to the column resolver's candidate lists:

    layout:
      leaf_columns: 3
    viewport:
      reset_zoom: 0.8
    columns:
      account: ["Beneficiary Account"]
      parent: ["Source Account"]
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

CONFIG_FILENAMES = ("flowmap.yml", "flowmap.yaml")


@dataclass(frozen=True)
class LayoutConfig:
    hub_x: float = 100.0
    hub_start_y: float = 100.0
    hub_width: float = 200.0
    hub_height: float = 120.0
    hub_gap: float = 50.0
    leaf_columns: int = 4
    leaf_offset_x: float = 350.0  # from hub.x to the first grid column
    column_width: float = 350.0
    row_height: float = 200.0
    hub_center_y: float = 60.0  # vertical centre of the hub card
    leaf_width: float = 320.0
    leaf_height: float = 140.0
    leaf_anchor_y: float = 70.0  # connector attach point on a leaf's left edge
    connector_reach: float = 150.0  # hub-side control point, past the hub's right edge
    connector_lead: float = 100.0  # leaf-side control point, before the leaf's left edge

    @property
    def hub_pitch(self) -> float:
        return self.hub_height + self.hub_gap


@dataclass(frozen=True)
class ViewportConfig:
    min_zoom: float = 0.2
    max_zoom: float = 2.0
    zoom_step: float = 0.1
    reset_zoom: float = 0.5
    drag_threshold: float = 5.0  # pixels moved before a press stops counting as a click


@dataclass(frozen=True)
class FlowmapConfig:
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    viewport: ViewportConfig = field(default_factory=ViewportConfig)
    # logical field -> extra header names, tried after the built-in candidates
    columns: dict[str, tuple[str, ...]] = field(default_factory=dict)

    def aliases_for(self, logical: str) -> tuple[str, ...]:
        return self.columns.get(logical, ())


def _coerce_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _section(cls: type, raw: dict[str, Any], prefix: str) -> Any:
    kwargs: dict[str, Any] = {}
    for f in fields(cls):
        if f.name not in raw:
            continue
        value = raw[f.name]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"{prefix}.{f.name} must be a number")
        if f.type in ("int", int):
            if int(value) != value or value < 1:
                raise ValueError(f"{prefix}.{f.name} must be a positive integer")
            value = int(value)
        else:
            value = float(value)
        kwargs[f.name] = value
    return cls(**kwargs)


def _columns(raw: dict[str, Any]) -> dict[str, tuple[str, ...]]:
    out: dict[str, tuple[str, ...]] = {}
    for logical, names in raw.items():
        if isinstance(names, str):
            names = [names]
        if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
            raise ValueError(f"columns.{logical} must be a string or a list of strings")
        cleaned = tuple(n.strip() for n in names if n.strip())
        if cleaned:
            out[str(logical).strip()] = cleaned
    return out


def parse_config(data: dict[str, Any]) -> FlowmapConfig:
    """Build a config from already-parsed YAML data."""
    layout = _section(LayoutConfig, _coerce_dict(data.get("layout")), "layout")
    viewport = _section(ViewportConfig, _coerce_dict(data.get("viewport")), "viewport")

    if viewport.min_zoom <= 0 or viewport.min_zoom > viewport.max_zoom:
        raise ValueError("viewport.min_zoom must be positive and not above viewport.max_zoom")
    if not viewport.min_zoom <= viewport.reset_zoom <= viewport.max_zoom:
        raise ValueError("viewport.reset_zoom must lie within [min_zoom, max_zoom]")

    return FlowmapConfig(
        layout=layout,
        viewport=viewport,
        columns=_columns(_coerce_dict(data.get("columns"))),
    )


def find_config(start: Path) -> Path | None:
    """Return the first config file found in `start`, if any."""
    for name in CONFIG_FILENAMES:
        candidate = start / name
        if candidate.is_file():
            return candidate
    return None


def load_config(config_path: Path | None = None) -> FlowmapConfig:
    """Load config from YAML. Falls back to defaults if no file is present."""
    if config_path is None:
        config_path = find_config(Path.cwd())
        if config_path is None:
            return FlowmapConfig()

    data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{config_path}: top level must be a mapping")
    return parse_config(data)
