"""Canvas layout: layer index, positions, viewport and connectors."""

from .connectors import Connector, compute_connectors, layer_color
from .engine import LayoutEngine, hub_key, leaf_key
from .layers import ExpansionState, LayerIndex, hub_label
from .viewport import Gesture, GestureController, Viewport, ViewportState

__all__ = [
    "Connector",
    "compute_connectors",
    "layer_color",
    "LayoutEngine",
    "hub_key",
    "leaf_key",
    "ExpansionState",
    "LayerIndex",
    "hub_label",
    "Gesture",
    "GestureController",
    "Viewport",
    "ViewportState",
]
