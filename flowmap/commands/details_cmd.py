"""Details command - list the attributes shown for one account."""

from __future__ import annotations

import json
from pathlib import Path

from rich.console import Console
from rich.table import Table

from ..config import FlowmapConfig
from ..session import Session


def run_details(
    path: Path,
    account: str,
    *,
    config: FlowmapConfig | None = None,
    fmt: str = "rich",
) -> int:
    console = Console(stderr=True)
    session = Session.from_file(path, config)

    node = session.find(account.strip())
    if node is None:
        console.print(f"Account {account} not found in {path.name}", style="red")
        return 1

    fields = session.details(node)
    if fmt == "json":
        payload = [{"label": f.label, "value": f.value, "icon": f.icon} for f in fields]
        print(json.dumps(payload, indent=2, default=str))
        return 0

    t = Table(title=f"Account {node.id} (layer {node.layer})", show_header=True, header_style="bold")
    t.add_column("Field", style="cyan", no_wrap=True)
    t.add_column("Value")
    t.add_column("Icon", style="dim")
    for f in fields:
        t.add_row(f.label, str(f.value), f.icon)
    Console().print(t)
    return 0
