"""Diagram rendering."""

from .svg import render_html, render_svg

__all__ = ["render_html", "render_svg"]
