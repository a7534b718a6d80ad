"""Canonical Markdown writer for parsed documents.

The output is not the input text; it is a normalized form that the
parser reads back into the same block and span structure.

Inline spans are first written as the text ``parse_inline`` receives, with
hard breaks as raw newlines. Block writers then turn those newlines into
backslash line ends and escape line starts the block scanner would treat as
markup.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator

from .inline import parse_inline
from .types import (
    ALIGN_CENTER,
    ALIGN_RIGHT,
    Block,
    BlockQuote,
    Code,
    CodeBlock,
    Document,
    Emphasis,
    Heading,
    Image,
    Link,
    List,
    Paragraph,
    RawHtmlOrUnknown,
    Span,
    Strong,
    Table,
    Text,
    ThematicBreak,
)

logger = logging.getLogger(__name__)

_TEXT_SPECIALS = frozenset("\\`*_[]<>#|!~")
_DESTINATION_SPECIALS = frozenset("\\()[]\"'*_`")
_LEADING_BLOCK_CHARS = frozenset("-+=")
_LEADING_ORDINAL_RE = re.compile(r"^(\d{1,9})([.)])")
_DELIMITER_CHARS = ("*", "_")
DELIMITER_SEARCH_LIMIT = 1_000


def serialize(document: Document) -> str:
    """Render ``document`` back to canonical Markdown text."""
    return _serialize_blocks(document.blocks) + "\n" if document.blocks else ""


def _serialize_blocks(blocks: tuple[Block, ...]) -> str:
    chunks: list[str] = []
    previous: Block | None = None
    list_parity = 0
    for block in blocks:
        if isinstance(block, List):
            # Adjacent lists only stay separate when their markers differ.
            list_parity = list_parity + 1 if isinstance(previous, List) else 0
            chunks.append(_serialize_list(block, alternate=list_parity % 2 == 1))
        else:
            chunks.append(_serialize_block(block))
        previous = block
    return "\n\n".join(chunks)


def _serialize_block(block: Block) -> str:
    if isinstance(block, Heading):
        inline = _serialize_spans(block.spans)
        if "\n" in inline and block.level <= 2:
            # A hard break only survives in the underlined form.
            underline = "===" if block.level == 1 else "---"
            return _escape_line_starts(_hard_breaks(inline)) + "\n" + underline
        return ("#" * block.level + " " + inline).rstrip()
    if isinstance(block, Paragraph):
        return _escape_line_starts(_hard_breaks(_serialize_spans(block.spans)))
    if isinstance(block, CodeBlock):
        longest = max((len(run) for line in block.lines for run in re.findall(r"`+", line)), default=0)
        fence = "`" * max(3, longest + 1)
        body = "\n".join(block.lines)
        opening = f"{fence}{block.language}"
        return f"{opening}\n{body}\n{fence}" if block.lines else f"{opening}\n{fence}"
    if isinstance(block, Table):
        return _serialize_table(block)
    if isinstance(block, BlockQuote):
        inner = _serialize_blocks(block.blocks)
        return "\n".join(f"> {line}" if line else ">" for line in inner.split("\n"))
    if isinstance(block, ThematicBreak):
        return "---"
    if isinstance(block, RawHtmlOrUnknown):
        return block.text
    raise TypeError(f"unsupported block: {block!r}")


def _serialize_list(block: List, alternate: bool) -> str:
    rendered_items: list[str] = []
    for offset, item in enumerate(block.items):
        if block.ordered:
            marker = f"{block.start + offset}{')' if alternate else '.'} "
        else:
            marker = "* " if alternate else "- "
        body = _serialize_blocks(item)
        pad = " " * len(marker)
        lines = body.split("\n") if body else [""]
        out = [marker + lines[0]]
        out.extend(pad + line if line else "" for line in lines[1:])
        rendered_items.append("\n".join(out).rstrip(" "))
    separator = "\n\n" if block.loose else "\n"
    return separator.join(rendered_items)


def _serialize_table(block: Table) -> str:
    def row(cells: tuple[tuple[Span, ...], ...]) -> str:
        return "| " + " | ".join(_serialize_spans(cell) for cell in cells) + " |"

    separators: list[str] = []
    for alignment in block.alignments:
        if alignment == ALIGN_CENTER:
            separators.append(":---:")
        elif alignment == ALIGN_RIGHT:
            separators.append("---:")
        else:
            separators.append("---")
    lines = [row(block.header), "| " + " | ".join(separators) + " |"]
    lines.extend(row(cells) for cells in block.rows)
    return "\n".join(lines)


def _serialize_spans(spans: tuple[Span, ...]) -> str:
    """Write ``spans`` as inline source that ``parse_inline`` reads back unchanged.

    The direct rendering is used when it reparses exactly. Otherwise a
    bounded search picks ``*`` or ``_`` for each emphasis span until the
    whole sequence reparses to ``spans``.
    """
    direct = _write_spans(spans)
    if not _has_delimiters(spans) or parse_inline(direct) == spans:
        return direct
    for candidate in _DelimiterSearch(DELIMITER_SEARCH_LIMIT).sequence(spans):
        return candidate
    logger.debug("no delimiter choice reparses exactly; keeping %r", direct)
    return direct


def _has_delimiters(spans: tuple[Span, ...]) -> bool:
    for span in spans:
        if isinstance(span, (Emphasis, Strong)):
            return True
        if isinstance(span, Link) and _has_delimiters(span.children):
            return True
    return False


def _write_spans(spans: tuple[Span, ...]) -> str:
    return "".join(_write_span(span) for span in spans)


def _write_span(span: Span) -> str:
    if isinstance(span, Text):
        return _escape_text(span.text)
    if isinstance(span, Code):
        longest = max((len(run) for run in re.findall(r"`+", span.text)), default=0)
        ticks = "`" * (longest + 1)
        body = span.text
        if body.startswith("`") or body.endswith("`") or (body.startswith(" ") and body.endswith(" ") and body.strip()):
            body = f" {body} "
        return f"{ticks}{body}{ticks}"
    if isinstance(span, (Emphasis, Strong)):
        children = span.children
        nested_edge = bool(children) and (
            isinstance(children[0], (Emphasis, Strong)) or isinstance(children[-1], (Emphasis, Strong))
        )
        return _delimited(span, "_" if nested_edge else "*", _write_spans(children))
    if isinstance(span, Link):
        return f"[{_write_spans(span.children)}]({_escape_destination(span.target.raw)})"
    if isinstance(span, Image):
        return f"![{_escape_text(span.alt)}]({_escape_destination(span.target.raw)})"
    raise TypeError(f"unsupported span: {span!r}")


def _delimited(span: Emphasis | Strong, char: str, inner: str) -> str:
    delimiter = char * 2 if isinstance(span, Strong) else char
    return f"{delimiter}{inner}{delimiter}"


class _DelimiterSearch:
    """Backtracking choice of emphasis delimiters, checked by reparsing.

    Each span's candidates are tried left to right; a candidate is kept only
    when the text written so far parses back to the spans written so far.
    ``limit`` caps the number of reparses across the whole search.
    """

    def __init__(self, limit: int) -> None:
        self.remaining = limit

    def sequence(self, spans: tuple[Span, ...]) -> Iterator[str]:
        if not spans:
            yield ""
            return
        prefixes = [""]
        pending = [self._candidates(spans[0])]
        while pending:
            index = len(pending) - 1
            piece = next(pending[-1], None)
            if piece is None or self.remaining <= 0:
                pending.pop()
                prefixes.pop()
                continue
            self.remaining -= 1
            written = prefixes[-1] + piece
            if parse_inline(written) != spans[: index + 1]:
                continue
            if index + 1 == len(spans):
                yield written
                continue
            prefixes.append(written)
            pending.append(self._candidates(spans[index + 1]))

    def _candidates(self, span: Span) -> Iterator[str]:
        if isinstance(span, (Emphasis, Strong)):
            for inner in self.sequence(span.children):
                for char in _DELIMITER_CHARS:
                    yield _delimited(span, char, inner)
        elif isinstance(span, Link):
            destination = _escape_destination(span.target.raw)
            for label in self.sequence(span.children):
                yield f"[{label}]({destination})"
        else:
            yield _write_span(span)


def _escape_text(text: str) -> str:
    return "".join("\\" + ch if ch in _TEXT_SPECIALS else ch for ch in text)


def _escape_destination(raw: str) -> str:
    return "".join("\\" + ch if ch in _DESTINATION_SPECIALS else ch for ch in raw)


def _hard_breaks(text: str) -> str:
    return text.replace("\n", "\\\n")


def _escape_line_starts(text: str) -> str:
    lines = text.split("\n")
    escaped: list[str] = []
    for line in lines:
        if line[:1] in _LEADING_BLOCK_CHARS:
            line = "\\" + line
        else:
            line = _LEADING_ORDINAL_RE.sub(r"\1\\\2", line, count=1)
        escaped.append(line)
    return "\n".join(escaped)
