"""Viewport (pan/zoom) and pointer gesture handling for the canvas view."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from ..config import ViewportConfig
from ..models import Position
from .engine import LayoutEngine

GestureKind = Literal["pan", "drag"]


@dataclass(frozen=True)
class ViewportState:
    pan_x: float
    pan_y: float
    zoom: float


class Viewport:
    """Continuous pan offset and a stepped zoom factor clamped to the configured bounds."""

    def __init__(self, config: ViewportConfig | None = None):
        self.config = config or ViewportConfig()
        self.pan = Position(0.0, 0.0)
        self.zoom = self.config.reset_zoom

    def _clamp(self, zoom: float) -> float:
        # rounding keeps repeated 0.1 steps from drifting
        return round(min(max(zoom, self.config.min_zoom), self.config.max_zoom), 6)

    def zoom_in(self) -> float:
        self.zoom = self._clamp(self.zoom + self.config.zoom_step)
        return self.zoom

    def zoom_out(self) -> float:
        self.zoom = self._clamp(self.zoom - self.config.zoom_step)
        return self.zoom

    def set_zoom(self, zoom: float) -> float:
        self.zoom = self._clamp(zoom)
        return self.zoom

    def reset(self) -> None:
        self.pan = Position(0.0, 0.0)
        self.zoom = self.config.reset_zoom

    @property
    def state(self) -> ViewportState:
        return ViewportState(pan_x=self.pan.x, pan_y=self.pan.y, zoom=self.zoom)


@dataclass(frozen=True)
class Gesture:
    """One pointer-down -> move... -> up interaction, classified at pointer-down."""

    kind: GestureKind
    origin_x: float  # pointer position at pointer-down (screen space)
    origin_y: float
    start: Position  # pan offset or node position at pointer-down
    key: str | None = None  # dragged node, for kind == "drag"


class GestureController:
    """Routes pointer input to either the viewport (pan) or one node (drag).

    Every move is computed from the gesture's start reference, so delivering
    the same pointer position twice produces the same state.
    """

    def __init__(self, viewport: Viewport, engine: LayoutEngine):
        self.viewport = viewport
        self.engine = engine
        self.active: Gesture | None = None
        self.has_dragged = False

    def pointer_down(self, x: float, y: float, target: str | None = None) -> Gesture:
        """Start a gesture. `target` is the node key under the pointer, None for the background."""
        if target is None:
            gesture = Gesture(kind="pan", origin_x=x, origin_y=y, start=self.viewport.pan)
        else:
            if not self.engine.has_key(target):
                raise KeyError(target)
            gesture = Gesture(kind="drag", origin_x=x, origin_y=y, start=self.engine.position(target), key=target)
        self.active = gesture
        self.has_dragged = False
        return gesture

    def pointer_move(self, x: float, y: float) -> None:
        gesture = self.active
        if gesture is None:
            return
        dx = x - gesture.origin_x
        dy = y - gesture.origin_y
        threshold = self.viewport.config.drag_threshold
        if abs(dx) > threshold or abs(dy) > threshold:
            self.has_dragged = True

        if gesture.kind == "pan":
            self.viewport.pan = gesture.start.offset(dx, dy)
        elif gesture.key is not None:
            self.engine.drag_update(gesture.key, gesture.start, dx, dy, self.viewport.zoom)

    def pointer_up(self) -> None:
        """End whatever gesture is active. Safe to call with none active."""
        self.active = None

    def click_selects(self) -> bool:
        """Whether a click arriving now should open the clicked node's details."""
        return self.active is None and not self.has_dragged
