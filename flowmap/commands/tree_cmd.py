"""Tree command - summarize the rebuilt hierarchy of one spreadsheet."""

from __future__ import annotations

import json
from pathlib import Path

from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from ..config import FlowmapConfig
from ..layout.layers import hub_label
from ..models import AccountNode
from ..session import Session


def run_tree(
    path: Path,
    *,
    config: FlowmapConfig | None = None,
    fmt: str = "md",
    out: Path | None = None,
    max_depth: int = 6,
    collapse: tuple[int, ...] = (),
) -> int:
    """Print the Flow Root, its layer index and build diagnostics.

    Layers in `collapse` are listed with their count but without members.
    """
    console = Console(stderr=True)
    session = Session.from_file(path, config)
    for layer in collapse:
        if session.list_expansion.is_expanded(layer):
            session.toggle_list_layer(layer)
    payload = _summarize(session, title=f"Transaction flow: {path.name}")

    if fmt == "rich":
        if out:
            rich_console = Console(record=True)
            _print_rich(session, payload, console=rich_console, max_depth=max_depth)
            out.write_text(rich_console.export_text(), encoding="utf-8")
            console.print(f"Wrote tree output to {out}", style="green")
        else:
            _print_rich(session, payload, console=Console(), max_depth=max_depth)
        return 0

    if fmt == "json":
        payload["tree"] = session.tree.to_dict()
        text = json.dumps(payload, indent=2, sort_keys=True, default=str) + "\n"
    else:
        text = _to_markdown(payload)

    if out:
        out.write_text(text, encoding="utf-8")
        console.print(f"Wrote tree output to {out}", style="green")
    else:
        print(text, end="" if text.endswith("\n") else "\n")

    return 0


def _summarize(session: Session, *, title: str) -> dict:
    tree = session.tree
    return {
        "title": title,
        "name": tree.name,
        "total_accounts": tree.total_accounts,
        "total_layers": tree.total_layers,
        "relationships": session.report.relationships,
        "root_policy": session.report.root_policy,
        "roots": [node.id for node in tree.children],
        "layers": [
            {
                "layer": layer,
                "label": hub_label(layer),
                "count": len(session.index.nodes(layer)),
                "expanded": session.list_expansion.is_expanded(layer),
                "accounts": [node.id for node in session.index.nodes(layer)],
            }
            for layer in session.layers
        ],
        "diagnostics": [str(d) for d in session.report.diagnostics],
    }


def _to_markdown(payload: dict) -> str:
    lines: list[str] = []
    lines.append(f"## {payload['title']}")
    lines.append("")
    lines.append(f"- Accounts: {payload['total_accounts']}")
    lines.append(f"- Layers: {payload['total_layers']}")
    lines.append(f"- Relationships: {payload['relationships']}")
    lines.append(f"- Roots ({payload['root_policy']}): {len(payload['roots'])}")
    lines.append("")

    lines.append("### Layers")
    lines.append("")
    lines.append("| Layer | Accounts | Members |")
    lines.append("|---|---:|---|")
    for row in payload["layers"]:
        members = ", ".join(f"`{a}`" for a in row["accounts"]) if row["expanded"] else "(collapsed)"
        lines.append(f"| {row['label']} | {row['count']} | {members} |")
    lines.append("")

    if payload["diagnostics"]:
        lines.append("### Diagnostics")
        lines.append("")
        for d in payload["diagnostics"]:
            lines.append(f"- {d}")
        lines.append("")

    return "\n".join(lines).rstrip() + "\n"


def _add_children(branch: Tree, node: AccountNode, *, depth: int, max_depth: int, path: frozenset[int]) -> None:
    for child in node.children:
        if id(child) in path:
            branch.add(f"[red]{child.id}[/red] (cycle)")
            continue
        sub = branch.add(f"[cyan]{child.id}[/cyan] [dim]L{child.layer}[/dim]")
        if depth + 1 >= max_depth:
            if child.children:
                sub.add("[dim]...[/dim]")
            continue
        _add_children(sub, child, depth=depth + 1, max_depth=max_depth, path=path | {id(child)})


def _print_rich(session: Session, payload: dict, *, console: Console, max_depth: int) -> None:
    console.print(f"[bold]{payload['title']}[/bold]")
    console.print(
        f"Accounts: {payload['total_accounts']}  Layers: {payload['total_layers']}  "
        f"Relationships: {payload['relationships']}  Roots: {len(payload['roots'])} ({payload['root_policy']})"
    )
    console.print()

    root = Tree(f"[bold]{session.tree.name}[/bold]")
    for node in session.tree.children:
        branch = root.add(f"[cyan]{node.id}[/cyan] [dim]L{node.layer}[/dim]")
        _add_children(branch, node, depth=1, max_depth=max_depth, path=frozenset({id(node)}))
    console.print(root)
    console.print()

    t = Table(title="Layers", show_header=True, header_style="bold")
    t.add_column("Layer", style="cyan", no_wrap=True)
    t.add_column("Accounts", justify="right")
    t.add_column("Members")
    for row in payload["layers"]:
        members = ", ".join(row["accounts"]) if row["expanded"] else "[dim](collapsed)[/dim]"
        t.add_row(row["label"], str(row["count"]), members)
    console.print(t)

    for d in payload["diagnostics"]:
        console.print(d, style="yellow" if d.startswith("WARNING") else "dim")
