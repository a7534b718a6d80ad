"""Structured document model produced by the Markdown parser.

Blocks and inline spans are small frozen dataclasses grouped into two tagged
unions (``Block`` and ``Span``). Everything is immutable: a reload builds a new
``Document`` rather than editing the old one.
"""

from __future__ import annotations

from dataclasses import dataclass

LINK_FILE = "file"
LINK_ANCHOR = "anchor"
LINK_EXTERNAL = "external"

ALIGN_LEFT = "left"
ALIGN_CENTER = "center"
ALIGN_RIGHT = "right"


@dataclass(frozen=True)
class LinkTarget:
    """Classified link destination.

    ``path`` is set for local file targets, ``anchor`` for in-document
    references and for the optional ``#fragment`` of a file target.
    """

    raw: str
    kind: str
    path: str | None = None
    anchor: str | None = None


@dataclass(frozen=True)
class Text:
    text: str


@dataclass(frozen=True)
class Emphasis:
    children: tuple["Span", ...]


@dataclass(frozen=True)
class Strong:
    children: tuple["Span", ...]


@dataclass(frozen=True)
class Code:
    text: str


@dataclass(frozen=True)
class Link:
    children: tuple["Span", ...]
    target: LinkTarget


@dataclass(frozen=True)
class Image:
    alt: str
    target: LinkTarget


Span = Text | Emphasis | Strong | Code | Link | Image


@dataclass(frozen=True)
class Heading:
    level: int
    spans: tuple[Span, ...]


@dataclass(frozen=True)
class Paragraph:
    spans: tuple[Span, ...]


@dataclass(frozen=True)
class List:
    """Ordered or bullet list; each item is its own block sequence."""

    ordered: bool
    items: tuple[tuple["Block", ...], ...]
    start: int = 1
    loose: bool = False


@dataclass(frozen=True)
class CodeBlock:
    """Fenced or indented code, kept verbatim line by line."""

    language: str
    lines: tuple[str, ...]


@dataclass(frozen=True)
class Table:
    header: tuple[tuple[Span, ...], ...]
    alignments: tuple[str, ...]
    rows: tuple[tuple[tuple[Span, ...], ...], ...]


@dataclass(frozen=True)
class BlockQuote:
    blocks: tuple["Block", ...]


@dataclass(frozen=True)
class ThematicBreak:
    pass


@dataclass(frozen=True)
class RawHtmlOrUnknown:
    text: str


Block = Heading | Paragraph | List | CodeBlock | Table | BlockQuote | ThematicBreak | RawHtmlOrUnknown


@dataclass(frozen=True)
class ParseDegraded:
    """Informational note about input the parser had to read literally."""

    line: int  # 1-based source line
    message: str


@dataclass(frozen=True)
class Document:
    blocks: tuple[Block, ...] = ()
    diagnostics: tuple[ParseDegraded, ...] = ()


def spans_plain_text(spans: tuple[Span, ...] | list[Span]) -> str:
    """Return the visible text of inline spans with all markup removed."""
    out: list[str] = []
    for span in spans:
        if isinstance(span, Text):
            out.append(span.text)
        elif isinstance(span, Code):
            out.append(span.text)
        elif isinstance(span, Image):
            out.append(span.alt)
        elif isinstance(span, (Emphasis, Strong, Link)):
            out.append(spans_plain_text(span.children))
    return "".join(out)


__all__ = [
    "ALIGN_CENTER",
    "ALIGN_LEFT",
    "ALIGN_RIGHT",
    "Block",
    "BlockQuote",
    "Code",
    "CodeBlock",
    "Document",
    "Emphasis",
    "Heading",
    "Image",
    "LINK_ANCHOR",
    "LINK_EXTERNAL",
    "LINK_FILE",
    "Link",
    "LinkTarget",
    "List",
    "Paragraph",
    "ParseDegraded",
    "RawHtmlOrUnknown",
    "Span",
    "Strong",
    "Table",
    "Text",
    "ThematicBreak",
    "spans_plain_text",
]
