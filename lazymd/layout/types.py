"""Render-line datatypes shared by the layout engine, search and painter."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from ..ansi import char_display_width
from ..markdown.types import LinkTarget


@dataclass(frozen=True)
class Style:
    """Semantic style of a text fragment; the painter maps it to colors."""

    bold: bool = False
    italic: bool = False
    code: bool = False
    link: bool = False
    image: bool = False
    heading: int = 0
    quote: bool = False
    rule: bool = False
    table_border: bool = False
    marker: bool = False
    token: str | None = None

    def merged(self, **changes: object) -> Style:
        return replace(self, **changes)


PLAIN = Style()


@dataclass(frozen=True)
class Segment:
    text: str
    style: Style = PLAIN


@dataclass(frozen=True)
class LinkAnchor:
    """Clickable column range ``[column_start, column_end)`` on one render line."""

    column_start: int
    column_end: int
    target: LinkTarget
    link_id: int
    is_image: bool = False


@dataclass(frozen=True)
class RenderLine:
    segments: tuple[Segment, ...] = ()
    anchors: tuple[LinkAnchor, ...] = ()
    anchor_id: str | None = None
    truncated: bool = False
    _text: str = field(default="", init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_text", "".join(segment.text for segment in self.segments))

    @property
    def text(self) -> str:
        return self._text

    @property
    def width(self) -> int:
        return text_display_width(self._text)


def text_display_width(text: str) -> int:
    """Return the number of terminal columns ``text`` occupies."""
    return sum(char_display_width(ch, 0) for ch in text)


def column_of_index(text: str, index: int) -> int:
    """Convert a character index of ``text`` into a display column."""
    return text_display_width(text[:index])


EMPTY_LINE = RenderLine()


__all__ = [
    "EMPTY_LINE",
    "LinkAnchor",
    "PLAIN",
    "RenderLine",
    "Segment",
    "Style",
    "column_of_index",
    "text_display_width",
]
