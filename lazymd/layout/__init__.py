"""Layout of parsed documents into width-bound render lines."""

from __future__ import annotations

from .engine import heading_index, layout, resolve_heading
from .types import EMPTY_LINE, PLAIN, LinkAnchor, RenderLine, Segment, Style, text_display_width

__all__ = [
    "EMPTY_LINE",
    "LinkAnchor",
    "PLAIN",
    "RenderLine",
    "Segment",
    "Style",
    "heading_index",
    "layout",
    "resolve_heading",
    "text_display_width",
]
