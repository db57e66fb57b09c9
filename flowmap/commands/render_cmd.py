"""Render command - write the layer canvas as SVG or interactive HTML."""

from __future__ import annotations

from pathlib import Path

from rich.console import Console

from ..config import FlowmapConfig
from ..render.svg import render_html, render_svg
from ..session import Session


def run_render(
    path: Path,
    *,
    config: FlowmapConfig | None = None,
    fmt: str = "html",
    out: Path | None = None,
    expand: tuple[int, ...] = (),
    expand_all: bool = False,
    zoom: float | None = None,
) -> int:
    """Lay out the canvas for `path` and render one frame."""
    console = Console(stderr=True)
    session = Session.from_file(path, config)

    if expand_all:
        session.expand_all()
    for layer in expand:
        if layer not in session.layers:
            console.print(f"Layer {layer} not present; skipped", style="yellow")
            continue
        session.set_layer_expanded(layer, True)
    if zoom is not None:
        session.viewport.set_zoom(zoom)

    title = f"Layer Map - {path.name}"
    if fmt == "svg":
        text = render_svg(session, title=title)
    elif fmt == "html":
        text = render_html(session, title=title)
    else:
        raise ValueError("fmt must be one of: svg, html")

    if out:
        out.write_text(text, encoding="utf-8")
        console.print(f"Wrote {fmt} to {out}", style="green")
    else:
        print(text, end="" if text.endswith("\n") else "\n")
    return 0
