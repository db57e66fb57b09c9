"""Layout engine: hub and leaf positions for the canvas view.

The position map is a per-session cache keyed by `hub-<layer>` and
`node-<layer>-<index>`. It changes only through three transitions:

- hub placement, once, when the engine is created
- leaf placement, each time a layer goes from collapsed to expanded
  (overwrites that layer's leaves, relative to the hub's current position)
- drag updates, one key at a time

Collapsing a layer leaves its cached leaf positions in place.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from types import MappingProxyType

from ..config import LayoutConfig
from ..models import Position
from .layers import LayerIndex

DEFAULT_HUB_POSITION = Position(100.0, 100.0)
DEFAULT_LEAF_POSITION = Position(0.0, 0.0)


def hub_key(layer: int) -> str:
    return f"hub-{layer}"


def leaf_key(layer: int, index: int) -> str:
    return f"node-{layer}-{index}"


def parse_key(key: str) -> tuple[str, int, int | None]:
    """Split a position key into (kind, layer, leaf index).

    Raises:
        KeyError: if the key is not a hub or leaf key.
    """
    kind, _, rest = key.partition("-")
    try:
        if kind == "hub":
            return "hub", int(rest), None
        if kind == "node":
            layer, _, idx = rest.rpartition("-")
            return "node", int(layer), int(idx)
    except ValueError:
        pass
    raise KeyError(key)


class LayoutEngine:
    def __init__(self, index: LayerIndex, config: LayoutConfig | None = None):
        self.index = index
        self.config = config or LayoutConfig()
        self._positions: dict[str, Position] = {}
        self._place_hubs()

    @property
    def positions(self) -> Mapping[str, Position]:
        return MappingProxyType(self._positions)

    def snapshot(self) -> dict[str, Position]:
        return dict(self._positions)

    def _place_hubs(self) -> None:
        cfg = self.config
        y = cfg.hub_start_y
        for layer in self.index.layers:
            self._positions.setdefault(hub_key(layer), Position(cfg.hub_x, y))
            y += cfg.hub_pitch

    def has_key(self, key: str) -> bool:
        try:
            kind, layer, idx = parse_key(key)
        except KeyError:
            return False
        if layer not in self.index.groups:
            return False
        return kind == "hub" or (idx is not None and 0 <= idx < len(self.index.nodes(layer)))

    def position(self, key: str) -> Position:
        """Current position of `key`, or the hub/leaf default if it was never laid out."""
        pos = self._positions.get(key)
        if pos is not None:
            return pos
        return DEFAULT_HUB_POSITION if key.startswith("hub-") else DEFAULT_LEAF_POSITION

    def hub_position(self, layer: int) -> Position:
        return self.position(hub_key(layer))

    def grid_positions(self, layer: int, hub: Position | None = None) -> dict[str, Position]:
        """Default grid for a layer's leaves, right of `hub` and vertically centred on it."""
        cfg = self.config
        hub = hub or self.hub_position(layer)
        nodes = self.index.nodes(layer)

        rows = math.ceil(len(nodes) / cfg.leaf_columns)
        grid_height = rows * cfg.row_height
        start_x = hub.x + cfg.leaf_offset_x
        start_y = hub.y - grid_height / 2 + cfg.hub_center_y

        out: dict[str, Position] = {}
        for i in range(len(nodes)):
            col = i % cfg.leaf_columns
            row = i // cfg.leaf_columns
            out[leaf_key(layer, i)] = Position(start_x + col * cfg.column_width, start_y + row * cfg.row_height)
        return out

    def expand(self, layer: int) -> dict[str, Position]:
        """Lay out a newly expanded layer, discarding earlier drags of its leaves."""
        grid = self.grid_positions(layer)
        self._positions.update(grid)
        return grid

    def drag_update(self, key: str, start: Position, dx: float, dy: float, zoom: float) -> Position:
        """Place `key` at `start` plus the pointer delta scaled into diagram space."""
        if not self.has_key(key):
            raise KeyError(key)
        pos = start.offset(dx / zoom, dy / zoom)
        self._positions[key] = pos
        return pos

    def leaf_keys(self, layer: int) -> list[str]:
        return [leaf_key(layer, i) for i in range(len(self.index.nodes(layer)))]
