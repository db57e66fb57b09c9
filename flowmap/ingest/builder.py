"""Hierarchy builder: rows -> account index -> Flow Root.

The build is two passes over the same row sequence. The first pass creates one
node per distinct account identifier (a later row with the same identifier
replaces the earlier node). The second pass wires parent -> child references
between nodes that exist in the index. Root selection then falls back through
three policies so that any non-empty input renders as a tree.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Literal

from ..config import FlowmapConfig
from ..models import TOTAL_ACCOUNTS, TOTAL_LAYERS, AccountNode, FlowRoot, no_data
from .columns import (
    ACCOUNT_CANDIDATES,
    LAYER_CANDIDATES,
    PARENT_CANDIDATES,
    SECONDARY_FIELDS,
    FieldSpec,
    lookup,
    normalize_row,
    stringify_id,
)

logger = logging.getLogger(__name__)

Row = Mapping[str, Any]
RootPolicy = Literal["orphans", "lowest-layer", "all", "empty"]


@dataclass
class BuildDiagnostic:
    """A single observation made while building the hierarchy."""

    level: Literal["error", "warning", "info"]
    rule: str
    message: str
    row: int | None = None  # 0-based index into the input rows

    def __str__(self) -> str:
        loc = f"row {self.row}" if self.row is not None else "input"
        return f"{self.level.upper()}: [{self.rule}] {loc} - {self.message}"


@dataclass
class BuildReport:
    tree: FlowRoot
    index: dict[str, AccountNode] = field(default_factory=dict)
    layers: list[int] = field(default_factory=list)
    relationships: int = 0
    root_policy: RootPolicy = "empty"
    diagnostics: list[BuildDiagnostic] = field(default_factory=list)

    @property
    def roots(self) -> list[AccountNode]:
        return self.tree.children


def _is_null_text(value: str) -> bool:
    return not value or value.lower() == "null"


def coerce_layer(value: Any) -> int | None:
    """Coerce a layer cell to a non-negative int. None means the cell is unusable."""
    if value is None:
        return 0
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        number: float = value
    elif isinstance(value, float):
        number = value
    else:
        text = str(value).strip()
        try:
            number = float(text)
        except ValueError:
            return None
    if number != number or not float(number).is_integer() or number < 0:
        return None
    return int(number)


class HierarchyBuilder:
    """Builds a Flow Root from an ordered row sequence. Never raises on data problems."""

    def __init__(self, config: FlowmapConfig | None = None):
        config = config or FlowmapConfig()
        self.account_candidates = ACCOUNT_CANDIDATES + config.aliases_for("account")
        self.layer_candidates = LAYER_CANDIDATES + config.aliases_for("layer")
        self.parent_candidates = PARENT_CANDIDATES + config.aliases_for("parent")
        self.secondary_fields: tuple[FieldSpec, ...] = tuple(
            spec.with_aliases(config.aliases_for(spec.key)) for spec in SECONDARY_FIELDS
        )

    def build(self, rows: Iterable[Row]) -> BuildReport:
        rows = list(rows)
        if not rows:
            logger.info("No rows to build from")
            return BuildReport(tree=no_data())

        diagnostics: list[BuildDiagnostic] = []
        normalized = [normalize_row(row) for row in rows]

        index = self._create_nodes(rows, normalized, diagnostics)
        relationships = self._wire_children(normalized, index, diagnostics)

        layers = sorted({node.layer for node in index.values()})
        roots, policy = self._select_roots(index, layers)
        if policy != "orphans" and index:
            diagnostics.append(
                BuildDiagnostic(
                    level="warning",
                    rule="root-fallback",
                    message=f"every account is a child of another; using {policy} roots",
                )
            )

        tree = FlowRoot(
            attributes={TOTAL_ACCOUNTS: len(index), TOTAL_LAYERS: len(layers)},
            children=roots,
        )
        logger.info(
            "Built flow: %d accounts, %d layers, %d relationships, %d roots (%s)",
            len(index),
            len(layers),
            relationships,
            len(roots),
            policy,
        )
        return BuildReport(
            tree=tree,
            index=index,
            layers=layers,
            relationships=relationships,
            root_policy=policy,
            diagnostics=diagnostics,
        )

    def _resolve_id(self, normalized: Mapping[str, Any]) -> tuple[Any, str | None]:
        raw = lookup(normalized, self.account_candidates)
        if raw is None:
            return None, None
        account_id = stringify_id(raw)
        if _is_null_text(account_id):
            return raw, None
        return raw, account_id

    def _create_nodes(
        self,
        rows: Sequence[Row],
        normalized: Sequence[Mapping[str, Any]],
        diagnostics: list[BuildDiagnostic],
    ) -> dict[str, AccountNode]:
        index: dict[str, AccountNode] = {}

        for i, (row, norm) in enumerate(zip(rows, normalized)):
            raw_id, account_id = self._resolve_id(norm)
            if account_id is None:
                logger.debug("Skipping row %d: no account number found", i)
                diagnostics.append(
                    BuildDiagnostic(level="info", rule="missing-account", row=i, message="no account number; row skipped")
                )
                continue

            raw_layer = lookup(norm, self.layer_candidates)
            layer = coerce_layer(raw_layer)
            if layer is None:
                diagnostics.append(
                    BuildDiagnostic(
                        level="warning",
                        rule="invalid-layer",
                        row=i,
                        message=f"layer {raw_layer!r} is not a non-negative integer; using 0",
                    )
                )
                layer = 0

            attributes: dict[str, Any] = {
                "accountNo": raw_id,
                "layer": raw_layer if raw_layer is not None else 0,
            }
            for spec in self.secondary_fields:
                value = lookup(norm, spec.candidates)
                if value is not None:
                    attributes[spec.key] = value
            attributes.update(row)

            if account_id in index:
                diagnostics.append(
                    BuildDiagnostic(
                        level="warning",
                        rule="duplicate-account",
                        row=i,
                        message=f"account {account_id} repeats row {index[account_id].row_index}; later row wins",
                    )
                )
            index[account_id] = AccountNode(id=account_id, layer=layer, attributes=attributes, row_index=i)

        return index

    def _wire_children(
        self,
        normalized: Sequence[Mapping[str, Any]],
        index: dict[str, AccountNode],
        diagnostics: list[BuildDiagnostic],
    ) -> int:
        relationships = 0

        for i, norm in enumerate(normalized):
            _, account_id = self._resolve_id(norm)
            raw_parent = lookup(norm, self.parent_candidates)
            if account_id is None or raw_parent is None:
                continue
            parent_id = stringify_id(raw_parent)
            if _is_null_text(parent_id):
                continue

            parent = index.get(parent_id)
            child = index.get(account_id)
            if parent is None or child is None:
                diagnostics.append(
                    BuildDiagnostic(
                        level="info",
                        rule="dangling-parent",
                        row=i,
                        message=f"parent {parent_id} of {account_id} is not a known account",
                    )
                )
                continue
            if parent is child:
                diagnostics.append(
                    BuildDiagnostic(level="warning", rule="self-parent", row=i, message=f"account {account_id} is its own parent")
                )

            parent.children.append(child)
            relationships += 1

        return relationships

    @staticmethod
    def _select_roots(index: dict[str, AccountNode], layers: list[int]) -> tuple[list[AccountNode], RootPolicy]:
        children_ids = {child.id for node in index.values() for child in node.children}

        roots = [node for node in index.values() if node.id not in children_ids]
        if roots:
            return roots, "orphans"

        if layers:
            lowest = layers[0]
            roots = [node for node in index.values() if node.layer == lowest]
            if roots:
                return roots, "lowest-layer"

        return list(index.values()), "all"


def build_tree(rows: Iterable[Row], config: FlowmapConfig | None = None) -> FlowRoot:
    """Build the Flow Root for one uploaded file."""
    return HierarchyBuilder(config).build(rows).tree
