"""Layer index: group accounts by their declared layer, independent of tree depth."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..models import AccountNode, FlowRoot


@dataclass
class LayerIndex:
    """Accounts reachable from the Flow Root, grouped by `AccountNode.layer`."""

    groups: dict[int, list[AccountNode]] = field(default_factory=dict)
    layers: list[int] = field(default_factory=list)  # ascending
    cycles: list[tuple[str, str]] = field(default_factory=list)  # (parent, child) edges closing a cycle

    @classmethod
    def from_tree(cls, tree: FlowRoot | AccountNode) -> LayerIndex:
        """Depth-first walk from every root, visiting each reachable account once.

        The synthetic Flow Root itself is never indexed. Parent references that
        lead back onto the current path are recorded in `cycles` and not followed.
        """
        roots = tree.children if isinstance(tree, FlowRoot) else [tree]

        groups: dict[int, list[AccountNode]] = {}
        cycles: list[tuple[str, str]] = []
        visited: set[int] = set()
        on_path: set[int] = set()

        for root in roots:
            stack: list[tuple[AccountNode, bool]] = [(root, False)]
            while stack:
                node, leaving = stack.pop()
                if leaving:
                    on_path.discard(id(node))
                    continue
                if id(node) in visited:
                    continue
                visited.add(id(node))
                on_path.add(id(node))
                groups.setdefault(node.layer, []).append(node)

                stack.append((node, True))
                for child in reversed(node.children):
                    if id(child) in on_path:
                        cycles.append((node.id, child.id))
                        continue
                    stack.append((child, False))

        return cls(groups=groups, layers=sorted(groups), cycles=cycles)

    def nodes(self, layer: int) -> list[AccountNode]:
        return self.groups.get(layer, [])

    def layer_position(self, layer: int) -> int:
        """Index of `layer` within the ascending layer list (drives palette colour)."""
        return self.layers.index(layer)

    @property
    def node_count(self) -> int:
        return sum(len(nodes) for nodes in self.groups.values())


def hub_label(layer: int) -> str:
    return "Root" if layer == 0 else f"Layer {layer}"


class ExpansionState:
    """Per-layer expanded/collapsed flags with a view-specific default for unset layers."""

    def __init__(self, default_expanded: bool):
        self.default_expanded = default_expanded
        self._flags: dict[int, bool] = {}

    def is_expanded(self, layer: int) -> bool:
        return self._flags.get(layer, self.default_expanded)

    def set(self, layer: int, expanded: bool) -> bool:
        """Set a layer's flag. Returns True if the effective state changed."""
        changed = self.is_expanded(layer) != expanded
        self._flags[layer] = expanded
        return changed

    def toggle(self, layer: int) -> bool:
        """Flip a layer and return its new state."""
        expanded = not self.is_expanded(layer)
        self._flags[layer] = expanded
        return expanded

    def expanded(self, layers: list[int]) -> list[int]:
        return [layer for layer in layers if self.is_expanded(layer)]

    def clear(self) -> None:
        self._flags.clear()
