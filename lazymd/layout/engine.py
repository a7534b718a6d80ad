"""Turn a parsed ``Document`` into width-bound render lines.

Container blocks (quotes, list items) are laid out recursively with a pair
of line prefixes: one for the first line a block produces and one for every
following line. Quote bars and list indentation live in those prefixes, so
leaf blocks only ever see "prefix + content within width".
"""

from __future__ import annotations

from ..errors import InvalidViewport
from ..markdown.targets import anchor_matches, normalize_heading
from ..markdown.types import (
    Block,
    BlockQuote,
    CodeBlock,
    Document,
    Heading,
    List,
    Paragraph,
    RawHtmlOrUnknown,
    Table,
    ThematicBreak,
    spans_plain_text,
)
from .highlight import tokenize_code_lines
from .tables import layout_table
from .types import EMPTY_LINE, PLAIN, RenderLine, Segment, Style
from .wrap import LineBuilder, LinkCounter, Run, fit_prefix, wrap_runs, wrap_spans

QUOTE_PREFIX = "│ "
BULLETS: tuple[str, ...] = ("•", "◦", "▪")
RULE_CHAR = "─"

QUOTE_STYLE = Style(quote=True)
MARKER_STYLE = Style(marker=True)
RULE_STYLE = Style(rule=True)
CODE_STYLE = Style(code=True)

Prefix = tuple[Segment, ...]


def layout(document: Document, width: int) -> tuple[RenderLine, ...]:
    """Lay ``document`` out for a viewport ``width`` columns wide.

    Deterministic for a given ``(document, width)``; never returns an empty
    sequence. Raises ``InvalidViewport`` when ``width`` is not positive.
    """
    if width <= 0:
        raise InvalidViewport(f"viewport width must be positive, got {width}")
    engine = _LayoutEngine(width)
    lines = engine.blocks(document.blocks, (), (), separated=True, list_depth=0)
    return tuple(lines) if lines else (EMPTY_LINE,)


def heading_index(lines: tuple[RenderLine, ...] | list[RenderLine]) -> list[tuple[str, int]]:
    """Return ``(anchor_id, line_index)`` for every heading, in document order."""
    return [(line.anchor_id, index) for index, line in enumerate(lines) if line.anchor_id is not None]


def resolve_heading(lines: tuple[RenderLine, ...] | list[RenderLine], reference: str) -> int | None:
    """Return the render-line index of the heading named by ``reference``.

    Exact normalized matches win over slug matches; the first heading in
    document order wins among equals. An empty reference names no heading.
    """
    wanted = normalize_heading(reference)
    if not wanted:
        return None
    index = heading_index(lines)
    for anchor_id, line_index in index:
        if anchor_id == wanted:
            return line_index
    for anchor_id, line_index in index:
        if anchor_matches(reference, anchor_id):
            return line_index
    return None


class _LayoutEngine:
    def __init__(self, width: int) -> None:
        self.width = width
        self.counter = LinkCounter()

    def blocks(
        self,
        blocks: tuple[Block, ...],
        first_prefix: Prefix,
        rest_prefix: Prefix,
        *,
        separated: bool,
        list_depth: int,
    ) -> list[RenderLine]:
        out: list[RenderLine] = []
        for index, block in enumerate(blocks):
            if index and separated:
                out.append(self._blank(rest_prefix))
            prefix = first_prefix if not out else rest_prefix
            out.extend(self.block(block, prefix, rest_prefix, list_depth))
        return out

    def block(self, block: Block, first_prefix: Prefix, rest_prefix: Prefix, list_depth: int) -> list[RenderLine]:
        if isinstance(block, Heading):
            return self._heading(block, first_prefix, rest_prefix)
        if isinstance(block, Paragraph):
            return self._finish(wrap_spans(block.spans, self.width, self.counter, PLAIN, first_prefix, rest_prefix))
        if isinstance(block, CodeBlock):
            return self._code(block, first_prefix, rest_prefix)
        if isinstance(block, List):
            return self._list(block, first_prefix, rest_prefix, list_depth)
        if isinstance(block, BlockQuote):
            bar = (Segment(QUOTE_PREFIX, QUOTE_STYLE),)
            return self.blocks(
                block.blocks,
                first_prefix + bar,
                rest_prefix + bar,
                separated=True,
                list_depth=list_depth,
            )
        if isinstance(block, Table):
            return layout_table(block, self.width, self.counter, first_prefix, rest_prefix)
        if isinstance(block, ThematicBreak):
            builder = LineBuilder(fit_prefix(first_prefix, self.width))
            builder.append(RULE_CHAR * max(1, self.width - builder.column), RULE_STYLE)
            return [builder.build()]
        if isinstance(block, RawHtmlOrUnknown):
            runs = [Run(block.text)]
            return self._finish(wrap_runs(runs, self.width, first_prefix, rest_prefix))
        return []

    def _heading(self, block: Heading, first_prefix: Prefix, rest_prefix: Prefix) -> list[RenderLine]:
        style = Style(bold=True, heading=block.level)
        builders = wrap_spans(block.spans, self.width, self.counter, style, first_prefix, rest_prefix)
        anchor_id = normalize_heading(spans_plain_text(block.spans))
        return [builder.build(anchor_id=anchor_id if index == 0 else None) for index, builder in enumerate(builders)]

    def _code(self, block: CodeBlock, first_prefix: Prefix, rest_prefix: Prefix) -> list[RenderLine]:
        first_prefix = fit_prefix(first_prefix, self.width)
        rest_prefix = fit_prefix(rest_prefix, self.width)
        out: list[RenderLine] = []
        fragments = tokenize_code_lines(block.lines, block.language) or [[]]
        for parts in fragments:
            builder = LineBuilder(first_prefix if not out else rest_prefix)
            for text, token in parts:
                builder.append(text, CODE_STYLE.merged(token=token) if token else CODE_STYLE)
            out.append(builder.build(truncated=builder.column > self.width))
        return out

    def _list(self, block: List, first_prefix: Prefix, rest_prefix: Prefix, list_depth: int) -> list[RenderLine]:
        out: list[RenderLine] = []
        if block.ordered:
            last = block.start + max(0, len(block.items) - 1)
            marker_width = len(f"{last}.") + 1
        else:
            marker_width = 2
        for offset, item in enumerate(block.items):
            if offset and block.loose:
                out.append(self._blank(rest_prefix))
            if block.ordered:
                marker = f"{block.start + offset}.".rjust(marker_width - 1) + " "
            else:
                marker = BULLETS[list_depth % len(BULLETS)] + " "
            item_first = (first_prefix if not out else rest_prefix) + (Segment(marker, MARKER_STYLE),)
            item_rest = rest_prefix + (Segment(" " * marker_width),)
            if not item:
                builder = LineBuilder(fit_prefix(item_first, self.width))
                out.append(builder.build())
                continue
            out.extend(
                self.blocks(
                    item,
                    item_first,
                    item_rest,
                    separated=block.loose,
                    list_depth=list_depth + 1,
                )
            )
        return out

    def _blank(self, prefix: Prefix) -> RenderLine:
        trimmed = list(fit_prefix(prefix, self.width))
        while trimmed and not trimmed[-1].text.strip():
            trimmed.pop()
        if trimmed:
            last = trimmed[-1]
            trimmed[-1] = Segment(last.text.rstrip(), last.style)
        return RenderLine(tuple(trimmed))

    @staticmethod
    def _finish(builders: list[LineBuilder]) -> list[RenderLine]:
        return [builder.build() for builder in builders]


__all__ = ["heading_index", "layout", "resolve_heading"]
