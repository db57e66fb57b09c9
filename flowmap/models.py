"""Data models for account hierarchies and diagram positions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

FLOW_ROOT_NAME = "Transaction Flow"
NO_DATA_NAME = "No Data"

# Keys on FlowRoot.attributes
TOTAL_ACCOUNTS = "totalAccounts"
TOTAL_LAYERS = "totalLayers"


@dataclass(eq=False)
class AccountNode:
    """One account reconstructed from a spreadsheet row.

    `children` holds references into the same account index; the index owns the nodes.
    """

    id: str
    layer: int = 0
    attributes: dict[str, Any] = field(default_factory=dict)  # canonical fields + raw row
    children: list[AccountNode] = field(default_factory=list, repr=False)
    row_index: int | None = None  # source row that produced this node

    @property
    def name(self) -> str:
        return self.id

    def to_dict(self, _path: frozenset[int] = frozenset()) -> dict[str, Any]:
        """Serialize the subtree. A node already on the current path is emitted as a reference."""
        if id(self) in _path:
            return {"id": self.id, "layer": self.layer, "ref": True}
        path = _path | {id(self)}
        return {
            "id": self.id,
            "layer": self.layer,
            "attributes": {k: _plain(v) for k, v in self.attributes.items()},
            "children": [child.to_dict(path) for child in self.children],
        }


@dataclass(eq=False)
class FlowRoot:
    """Synthetic top-level container returned by the hierarchy builder."""

    name: str = FLOW_ROOT_NAME
    attributes: dict[str, Any] = field(default_factory=dict)
    children: list[AccountNode] = field(default_factory=list, repr=False)

    @property
    def is_empty(self) -> bool:
        return self.name == NO_DATA_NAME

    @property
    def total_accounts(self) -> int:
        return int(self.attributes.get(TOTAL_ACCOUNTS, 0))

    @property
    def total_layers(self) -> int:
        return int(self.attributes.get(TOTAL_LAYERS, 0))

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "attributes": dict(self.attributes),
            "children": [child.to_dict() for child in self.children],
        }


def no_data() -> FlowRoot:
    """Sentinel tree for an empty upload."""
    return FlowRoot(name=NO_DATA_NAME, attributes={}, children=[])


@dataclass(frozen=True)
class Position:
    """A point in diagram space."""

    x: float
    y: float

    def offset(self, dx: float, dy: float) -> Position:
        return Position(self.x + dx, self.y + dy)

    def as_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y}


def _plain(value: Any) -> Any:
    """Coerce cell values to JSON-friendly scalars."""
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)
