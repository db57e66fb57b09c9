"""SVG and standalone HTML rendering of the canvas view (no external deps)."""

from __future__ import annotations

import html
import json

from ..layout.connectors import curve_points, layer_color
from ..layout.engine import hub_key, leaf_key
from ..layout.layers import hub_label
from ..models import AccountNode, Position
from ..session import FrameSnapshot, Session

BG = "#0a0e1a"
CARD_BG = "#0f1419"
TEXT = "#e6e6e6"
MUTED = "#94a3b8"
MARGIN = 60.0


def esc(s: object) -> str:
    return html.escape(str(s), quote=True)


def _leaf_subtitle(node: AccountNode) -> str:
    attrs = node.attributes
    parts = [str(attrs[k]) for k in ("ifscCode", "state", "district") if attrs.get(k) not in (None, "")]
    return " · ".join(parts)


def _leaf_positions(session: Session, snapshot: FrameSnapshot, layer: int) -> dict[str, Position]:
    """Cached leaf positions, falling back to the grid for layers never expanded."""
    grid = session.engine.grid_positions(layer, snapshot.positions.get(hub_key(layer)))
    return {key: snapshot.positions.get(key, pos) for key, pos in grid.items()}


def _bounds(session: Session, snapshot: FrameSnapshot) -> tuple[float, float, float, float]:
    cfg = session.config.layout
    xs: list[float] = []
    ys: list[float] = []
    for layer in session.layers:
        hub = snapshot.positions.get(hub_key(layer), session.engine.hub_position(layer))
        xs += [hub.x, hub.x + cfg.hub_width]
        ys += [hub.y, hub.y + cfg.hub_height]
        if layer in snapshot.expanded_layers:
            for pos in _leaf_positions(session, snapshot, layer).values():
                xs += [pos.x, pos.x + cfg.leaf_width]
                ys += [pos.y, pos.y + cfg.leaf_height]
    if not xs:
        return 0.0, 0.0, 400.0, 200.0
    return min(xs), min(ys), max(xs), max(ys)


def render_svg(session: Session, snapshot: FrameSnapshot | None = None, *, title: str = "Layer Map") -> str:
    """Render one frame: hubs, leaves of expanded layers and their connectors."""
    snapshot = snapshot or session.snapshot()
    cfg = session.config.layout
    vp = snapshot.viewport

    x0, y0, x1, y1 = _bounds(session, snapshot)
    # viewBox covers the scene after the viewport transform
    vx = vp.pan_x + vp.zoom * x0 - MARGIN
    vy = vp.pan_y + vp.zoom * y0 - MARGIN - 30
    vw = vp.zoom * (x1 - x0) + 2 * MARGIN
    vh = vp.zoom * (y1 - y0) + 2 * MARGIN + 30

    parts: list[str] = []
    parts.append(
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{vw:.0f}" height="{vh:.0f}" '
        f'viewBox="{vx:.1f} {vy:.1f} {vw:.1f} {vh:.1f}" style="background:{BG}">'
    )
    parts.append("<defs>")
    parts.append(
        '<pattern id="grid" width="40" height="40" patternUnits="userSpaceOnUse">'
        '<circle cx="1" cy="1" r="1" fill="#334155" opacity="0.3"/></pattern>'
    )
    parts.append(
        '<filter id="glow" x="-20%" y="-20%" width="140%" height="140%">'
        '<feGaussianBlur stdDeviation="3" result="coloredBlur"/>'
        '<feMerge><feMergeNode in="coloredBlur"/><feMergeNode in="SourceGraphic"/></feMerge></filter>'
    )
    parts.append("</defs>")
    parts.append(
        f'<text x="{vx + 16:.1f}" y="{vy + 28:.1f}" fill="{TEXT}" font-family="Helvetica" font-size="16">{esc(title)}</text>'
    )

    parts.append(
        f'<g id="scene" style="transform-origin:0 0" '
        f'transform="translate({vp.pan_x:.1f} {vp.pan_y:.1f}) scale({vp.zoom:.3f})">'
    )
    parts.append('<rect x="-5000" y="-5000" width="20000" height="20000" fill="url(#grid)"/>')

    for layer_position, layer in enumerate(session.layers):
        nodes = session.index.nodes(layer)
        color = layer_color(layer_position)
        expanded = layer in snapshot.expanded_layers
        hkey = hub_key(layer)
        hub = snapshot.positions.get(hkey, session.engine.hub_position(layer))
        leaves = _leaf_positions(session, snapshot, layer)

        display = "" if expanded else ' style="display:none"'
        parts.append(f'<g class="leaves" data-layer="{layer}"{display}>')
        for i, node in enumerate(nodes):
            key = leaf_key(layer, i)
            start, c1, c2, end = curve_points(hub, leaves[key], cfg)
            parts.append(
                f'<path class="wire" data-leaf="{key}" d="M {start.x:.1f} {start.y:.1f} C {c1.x:.1f} {c1.y:.1f}, '
                f'{c2.x:.1f} {c2.y:.1f}, {end.x:.1f} {end.y:.1f}" stroke="{color}" stroke-width="2" fill="none" '
                f'opacity="0.25" stroke-dasharray="4,4"/>'
            )
        for i, node in enumerate(nodes):
            key = leaf_key(layer, i)
            pos = leaves[key]
            parts.append(f'<g class="node leaf" data-key="{key}" transform="translate({pos.x:.1f} {pos.y:.1f})">')
            parts.append(
                f'<rect width="{cfg.leaf_width:.0f}" height="{cfg.leaf_height:.0f}" rx="12" fill="{CARD_BG}" '
                f'stroke="{color}" stroke-width="1.5"/>'
            )
            parts.append(f'<rect x="15" y="15" width="50" height="20" rx="10" fill="{color}"/>')
            parts.append(
                f'<text x="40" y="29" text-anchor="middle" fill="white" font-family="Helvetica" font-size="11" '
                f'font-weight="bold">L{layer}</text>'
            )
            parts.append(
                f'<text x="15" y="70" fill="{TEXT}" font-family="Helvetica" font-size="18" font-weight="bold">'
                f"{esc(node.id)}</text>"
            )
            subtitle = _leaf_subtitle(node)
            if subtitle:
                parts.append(
                    f'<text x="15" y="100" fill="{MUTED}" font-family="Helvetica" font-size="13">{esc(subtitle)}</text>'
                )
            parts.append("</g>")
        parts.append("</g>")

        parts.append(f'<g class="node hub" data-key="{hkey}" transform="translate({hub.x:.1f} {hub.y:.1f})">')
        parts.append(
            f'<rect width="{cfg.hub_width:.0f}" height="{cfg.hub_height:.0f}" rx="16" fill="{CARD_BG}" '
            f'stroke="{color}" stroke-width="2" filter="url(#glow)"/>'
        )
        parts.append(
            f'<rect width="{cfg.hub_width:.0f}" height="{cfg.hub_height:.0f}" rx="16" fill="{color}" opacity="0.1"/>'
        )
        parts.append(f'<circle cx="40" cy="40" r="20" fill="{color}" opacity="0.2"/>')
        parts.append(
            f'<text x="70" y="55" fill="white" font-family="Helvetica" font-size="24" font-weight="bold">'
            f"{esc(hub_label(layer))}</text>"
        )
        parts.append(
            f'<text x="70" y="80" fill="{MUTED}" font-family="Helvetica" font-size="14">{len(nodes)} Accounts</text>'
        )
        parts.append(
            f'<g class="toggle" data-layer="{layer}" transform="translate({cfg.hub_width:.0f} {cfg.hub_center_y:.0f})">'
            f'<circle r="14" fill="{color}" stroke="{CARD_BG}" stroke-width="2"/>'
            f'<text y="5" text-anchor="middle" fill="white" font-family="Helvetica" font-size="16">'
            f'{"-" if expanded else "+"}</text></g>'
        )
        parts.append("</g>")

    parts.append("</g>")
    parts.append("</svg>")
    return "\n".join(parts) + "\n"


def _model(session: Session, snapshot: FrameSnapshot) -> dict:
    """State the page script needs to reproduce layout, drag and expand behaviour."""
    cfg = session.config.layout
    vcfg = session.config.viewport
    return {
        "layers": [
            {
                "layer": layer,
                "count": len(session.index.nodes(layer)),
                "expanded": layer in snapshot.expanded_layers,
            }
            for layer in session.layers
        ],
        "positions": {key: pos.as_dict() for key, pos in snapshot.positions.items()},
        "viewport": {"x": snapshot.viewport.pan_x, "y": snapshot.viewport.pan_y, "zoom": snapshot.viewport.zoom},
        "layout": {
            "columns": cfg.leaf_columns,
            "offsetX": cfg.leaf_offset_x,
            "colWidth": cfg.column_width,
            "rowHeight": cfg.row_height,
            "hubWidth": cfg.hub_width,
            "hubCenterY": cfg.hub_center_y,
            "leafAnchorY": cfg.leaf_anchor_y,
            "reach": cfg.connector_reach,
            "lead": cfg.connector_lead,
        },
        "zoom": {
            "min": vcfg.min_zoom,
            "max": vcfg.max_zoom,
            "step": vcfg.zoom_step,
            "reset": vcfg.reset_zoom,
            "threshold": vcfg.drag_threshold,
        },
    }


_SCRIPT = """
    (function () {
      const model = JSON.parse(document.getElementById('flowmap-model').textContent);
      const viewportEl = document.getElementById('viewport');
      const svg = viewportEl.querySelector('svg');
      const scene = svg.querySelector('#scene');
      const L = model.layout, Z = model.zoom;
      const pos = model.positions;
      const expanded = {};
      model.layers.forEach((l) => { expanded[l.layer] = l.expanded; });

      svg.removeAttribute('width');
      svg.removeAttribute('height');
      svg.removeAttribute('viewBox');
      let pan = { x: model.viewport.x, y: model.viewport.y };
      let zoom = model.viewport.zoom;
      const zoomLabel = document.getElementById('zoomLabel');
      const applyTransform = () => {
        scene.setAttribute('transform', `translate(${pan.x} ${pan.y}) scale(${zoom})`);
        zoomLabel.textContent = `${Math.round(zoom * 100)}%`;
      };
      const clampZoom = (z) => Math.round(Math.min(Math.max(z, Z.min), Z.max) * 1e6) / 1e6;

      const nodeEl = (key) => scene.querySelector(`.node[data-key="${key}"]`);
      const place = (key) => {
        const el = nodeEl(key);
        if (el && pos[key]) el.setAttribute('transform', `translate(${pos[key].x} ${pos[key].y})`);
      };
      const wire = (hub, leaf) => {
        const sx = hub.x + L.hubWidth, sy = hub.y + L.hubCenterY;
        const ex = leaf.x, ey = leaf.y + L.leafAnchorY;
        return `M ${sx} ${sy} C ${sx + L.reach} ${sy}, ${ex - L.lead} ${ey}, ${ex} ${ey}`;
      };
      const redrawWires = (layer) => {
        const hub = pos[`hub-${layer}`];
        if (!hub) return;
        scene.querySelectorAll(`.leaves[data-layer="${layer}"] .wire`).forEach((p) => {
          const leaf = pos[p.dataset.leaf];
          if (leaf) p.setAttribute('d', wire(hub, leaf));
        });
      };
      const layoutLayer = (layer, count) => {
        const hub = pos[`hub-${layer}`];
        const rows = Math.ceil(count / L.columns);
        const startX = hub.x + L.offsetX;
        const startY = hub.y - (rows * L.rowHeight) / 2 + L.hubCenterY;
        for (let i = 0; i < count; i++) {
          const key = `node-${layer}-${i}`;
          pos[key] = { x: startX + (i % L.columns) * L.colWidth, y: startY + Math.floor(i / L.columns) * L.rowHeight };
          place(key);
        }
        redrawWires(layer);
      };
      const layerOf = (key) => parseInt(key.split('-')[1], 10);

      let gesture = null;
      let hasDragged = false;
      svg.addEventListener('mousedown', (e) => {
        const toggle = e.target.closest('.toggle');
        if (toggle) return;
        const node = e.target.closest('.node');
        if (node) {
          const key = node.dataset.key;
          gesture = { kind: 'drag', key, x: e.clientX, y: e.clientY, start: { ...(pos[key] || { x: 0, y: 0 }) } };
        } else {
          gesture = { kind: 'pan', x: e.clientX, y: e.clientY, start: { ...pan } };
        }
        hasDragged = false;
      });
      window.addEventListener('mousemove', (e) => {
        if (!gesture) return;
        const dx = e.clientX - gesture.x, dy = e.clientY - gesture.y;
        if (Math.abs(dx) > Z.threshold || Math.abs(dy) > Z.threshold) hasDragged = true;
        if (gesture.kind === 'pan') {
          pan = { x: gesture.start.x + dx, y: gesture.start.y + dy };
          applyTransform();
        } else {
          pos[gesture.key] = { x: gesture.start.x + dx / zoom, y: gesture.start.y + dy / zoom };
          place(gesture.key);
          redrawWires(layerOf(gesture.key));
        }
      });
      window.addEventListener('mouseup', () => { gesture = null; });

      scene.querySelectorAll('.toggle').forEach((t) => {
        t.addEventListener('click', (e) => {
          e.stopPropagation();
          const layer = parseInt(t.dataset.layer, 10);
          expanded[layer] = !expanded[layer];
          const group = scene.querySelector(`.leaves[data-layer="${layer}"]`);
          group.style.display = expanded[layer] ? '' : 'none';
          t.querySelector('text').textContent = expanded[layer] ? '-' : '+';
          if (expanded[layer]) {
            const info = model.layers.find((l) => l.layer === layer);
            layoutLayer(layer, info ? info.count : 0);
          }
        });
      });
      scene.querySelectorAll('.leaf').forEach((n) => {
        n.addEventListener('click', () => {
          if (hasDragged) return;
          document.getElementById('selected').textContent = n.querySelector('text:nth-of-type(2)').textContent;
        });
      });

      document.getElementById('zoomInBtn').addEventListener('click', () => { zoom = clampZoom(zoom + Z.step); applyTransform(); });
      document.getElementById('zoomOutBtn').addEventListener('click', () => { zoom = clampZoom(zoom - Z.step); applyTransform(); });
      document.getElementById('resetBtn').addEventListener('click', () => { pan = { x: 0, y: 0 }; zoom = Z.reset; applyTransform(); });
      applyTransform();
    })();
"""


def render_html(session: Session, snapshot: FrameSnapshot | None = None, *, title: str = "Layer Map") -> str:
    """Wrap the frame's SVG in a page with pan, zoom, drag and expand/collapse."""
    snapshot = snapshot or session.snapshot()
    svg = render_svg(session, snapshot, title=title)
    model = json.dumps(_model(session, snapshot), sort_keys=True).replace("</", "<\\/")
    t = esc(title)
    return (
        "<!doctype html>\n"
        "<html>\n"
        "<head>\n"
        f"  <meta charset=\"utf-8\" />\n  <title>{t}</title>\n"
        "  <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />\n"
        "  <style>\n"
        "    html, body { height: 100%; }\n"
        f"    body {{ margin: 0; background: {BG}; color: {TEXT}; font-family: system-ui, -apple-system, Segoe UI, Roboto, Helvetica, Arial; }}\n"
        "    .wrap { padding: 12px; height: 100vh; box-sizing: border-box; display: flex; flex-direction: column; }\n"
        "    .toolbar { display: flex; gap: 8px; align-items: center; margin: 0 0 10px 0; }\n"
        "    .btn { background: #1b1f2a; color: #e6e6e6; border: 1px solid #3a4154; border-radius: 8px; padding: 6px 10px; cursor: pointer; }\n"
        "    .btn:hover { border-color: #5b6782; }\n"
        "    .hint { color: #9aa4b2; font-size: 12px; }\n"
        "    .viewport { border: 1px solid #3a4154; border-radius: 10px; overflow: hidden; flex: 1; min-height: 0; cursor: grab; }\n"
        "    svg { width: 100%; height: 100%; display: block; user-select: none; }\n"
        "    .node { cursor: move; }\n"
        "    .toggle { cursor: pointer; }\n"
        "  </style>\n"
        "</head>\n"
        "<body>\n"
        "  <div class=\"wrap\">\n"
        "    <div class=\"toolbar\">\n"
        "      <button class=\"btn\" id=\"zoomOutBtn\" type=\"button\">Zoom -</button>\n"
        "      <span class=\"hint\" id=\"zoomLabel\"></span>\n"
        "      <button class=\"btn\" id=\"zoomInBtn\" type=\"button\">Zoom +</button>\n"
        "      <button class=\"btn\" id=\"resetBtn\" type=\"button\">Reset</button>\n"
        "      <span class=\"hint\">Drag background to pan • Drag cards to move • + / - to expand a layer</span>\n"
        "      <span class=\"hint\" id=\"selected\"></span>\n"
        "    </div>\n"
        "    <div class=\"viewport\" id=\"viewport\">\n"
        f"{svg}\n"
        "    </div>\n"
        "  </div>\n"
        f"  <script type=\"application/json\" id=\"flowmap-model\">{model}</script>\n"
        f"  <script>{_SCRIPT}  </script>\n"
        "</body>\n"
        "</html>\n"
    )
