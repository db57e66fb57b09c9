"""One loaded file: tree, layer index, positions, viewport and view state.

All state is mutated synchronously from discrete input events; `snapshot()`
returns an immutable copy for one rendered frame.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any

from .config import FlowmapConfig
from .details import DetailField, detail_fields
from .ingest.builder import BuildDiagnostic, BuildReport, HierarchyBuilder
from .ingest.reader import read_rows
from .layout.connectors import Connector, compute_connectors
from .layout.engine import LayoutEngine, parse_key
from .layout.layers import ExpansionState, LayerIndex
from .layout.viewport import GestureController, Viewport, ViewportState
from .models import AccountNode, FlowRoot, Position

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FrameSnapshot:
    positions: Mapping[str, Position]
    viewport: ViewportState
    expanded_layers: tuple[int, ...]
    connectors: tuple[Connector, ...]


class Session:
    """Owns every piece of per-upload state. `load()` discards the previous upload."""

    def __init__(self, config: FlowmapConfig | None = None):
        self.config = config or FlowmapConfig()
        self.load([])

    def load(self, rows: Iterable[Mapping[str, Any]]) -> BuildReport:
        report = HierarchyBuilder(self.config).build(rows)
        index = LayerIndex.from_tree(report.tree)
        for parent, child in index.cycles:
            report.diagnostics.append(
                BuildDiagnostic(level="warning", rule="cycle", message=f"{parent} -> {child} closes a cycle; not followed")
            )
        if index.cycles:
            logger.warning("Ignored %d cyclic parent references", len(index.cycles))

        self.report = report
        self.index = index
        self.engine = LayoutEngine(index, self.config.layout)
        self.viewport = Viewport(self.config.viewport)
        self.gestures = GestureController(self.viewport, self.engine)
        self.canvas_expansion = ExpansionState(default_expanded=False)
        self.list_expansion = ExpansionState(default_expanded=True)
        self.selected: AccountNode | None = None
        return report

    @classmethod
    def from_file(cls, path: Path, config: FlowmapConfig | None = None) -> Session:
        """Read a spreadsheet and build a session from its rows.

        Raises:
            ValueError: the file is not a supported spreadsheet.
        """
        session = cls(config)
        session.load(read_rows(path))
        return session

    @property
    def tree(self) -> FlowRoot:
        return self.report.tree

    @property
    def layers(self) -> list[int]:
        return self.index.layers

    def find(self, account_id: str) -> AccountNode | None:
        return self.report.index.get(account_id)

    # --- canvas view ---

    def set_layer_expanded(self, layer: int, expanded: bool) -> None:
        changed = self.canvas_expansion.set(layer, expanded)
        if expanded and changed:
            self.engine.expand(layer)

    def toggle_layer(self, layer: int) -> bool:
        expanded = self.canvas_expansion.toggle(layer)
        if expanded:
            self.engine.expand(layer)
        return expanded

    def expand_all(self) -> None:
        for layer in self.layers:
            self.set_layer_expanded(layer, True)

    def node_for_key(self, key: str) -> AccountNode | None:
        """The account behind a leaf key; None for hubs and unknown keys."""
        try:
            kind, layer, idx = parse_key(key)
        except KeyError:
            return None
        nodes = self.index.nodes(layer)
        if kind != "node" or idx is None or not 0 <= idx < len(nodes):
            return None
        return nodes[idx]

    def click(self, key: str) -> AccountNode | None:
        """Select the clicked leaf unless the press turned into a drag."""
        if not self.gestures.click_selects():
            return None
        node = self.node_for_key(key)
        if node is not None:
            self.selected = node
        return node

    def close_details(self) -> None:
        self.selected = None

    def details(self, node: AccountNode | None = None) -> list[DetailField]:
        node = node or self.selected
        return detail_fields(node.attributes) if node is not None else []

    # --- layer list view ---

    def toggle_list_layer(self, layer: int) -> bool:
        return self.list_expansion.toggle(layer)

    def snapshot(self) -> FrameSnapshot:
        positions = self.engine.snapshot()
        expanded = tuple(self.canvas_expansion.expanded(self.layers))
        return FrameSnapshot(
            positions=MappingProxyType(positions),
            viewport=self.viewport.state,
            expanded_layers=expanded,
            connectors=tuple(compute_connectors(self.index, positions, self.canvas_expansion, self.config.layout)),
        )
