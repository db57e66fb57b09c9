"""Connector geometry between a layer hub and its leaves."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from ..config import LayoutConfig
from ..models import Position
from .engine import hub_key, leaf_key
from .layers import ExpansionState, LayerIndex

LAYER_PALETTE = ("#06b6d4", "#14b8a6", "#10b981", "#3b82f6", "#6366f1", "#0ea5e9")


def layer_color(layer_position: int) -> str:
    """Palette colour for the layer at `layer_position` in the ascending layer list."""
    return LAYER_PALETTE[layer_position % len(LAYER_PALETTE)]


@dataclass(frozen=True)
class Connector:
    key: str
    layer: int
    hub_key: str
    leaf_key: str
    start: Position
    control1: Position
    control2: Position
    end: Position
    color: str

    @property
    def path_d(self) -> str:
        """SVG path data for the cubic curve."""
        s, c1, c2, e = self.start, self.control1, self.control2, self.end
        return f"M {s.x:.1f} {s.y:.1f} C {c1.x:.1f} {c1.y:.1f}, {c2.x:.1f} {c2.y:.1f}, {e.x:.1f} {e.y:.1f}"


def curve_points(hub: Position, leaf: Position, config: LayoutConfig) -> tuple[Position, Position, Position, Position]:
    """Hub right edge -> leaf left edge, with horizontal tangents at both ends."""
    start = Position(hub.x + config.hub_width, hub.y + config.hub_center_y)
    end = Position(leaf.x, leaf.y + config.leaf_anchor_y)
    control1 = Position(hub.x + config.hub_width + config.connector_reach, start.y)
    control2 = Position(leaf.x - config.connector_lead, end.y)
    return start, control1, control2, end


def compute_connectors(
    index: LayerIndex,
    positions: Mapping[str, Position],
    expansion: ExpansionState,
    config: LayoutConfig | None = None,
) -> list[Connector]:
    """Connectors for every leaf of every expanded layer, from current positions.

    Leaves without a laid-out position are skipped.
    """
    config = config or LayoutConfig()
    out: list[Connector] = []

    for layer_position, layer in enumerate(index.layers):
        if not expansion.is_expanded(layer):
            continue
        hub = positions.get(hub_key(layer))
        if hub is None:
            continue
        color = layer_color(layer_position)
        for i in range(len(index.nodes(layer))):
            key = leaf_key(layer, i)
            leaf = positions.get(key)
            if leaf is None:
                continue
            start, c1, c2, end = curve_points(hub, leaf, config)
            out.append(
                Connector(
                    key=f"wire-{key}",
                    layer=layer,
                    hub_key=hub_key(layer),
                    leaf_key=key,
                    start=start,
                    control1=c1,
                    control2=c2,
                    end=end,
                    color=color,
                )
            )

    return out
