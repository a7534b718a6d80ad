"""Styled word wrapping with per-fragment link anchors.

Inline spans are flattened into ``Run`` objects (text, style, optional link
reference). Runs are tokenized into words, collapsible spaces and hard
breaks, then filled greedily into lines of a fixed display width. A link that
wraps keeps one ``LinkAnchor`` per line it touches, all with the same
``link_id``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from ..ansi import char_display_width
from ..markdown.types import Code, Emphasis, Image, Link, LinkTarget, Span, Strong, Text
from .types import PLAIN, LinkAnchor, RenderLine, Segment, Style, text_display_width

_WHITESPACE_SPLIT_RE = re.compile(r"(\s+)")


@dataclass(frozen=True)
class LinkRef:
    link_id: int
    target: LinkTarget
    is_image: bool = False


@dataclass(frozen=True)
class Run:
    text: str
    style: Style = PLAIN
    link: LinkRef | None = None
    atomic: bool = False


@dataclass(frozen=True)
class _Piece:
    text: str
    style: Style
    link: LinkRef | None


@dataclass(frozen=True)
class _Word:
    pieces: tuple[_Piece, ...]

    @property
    def width(self) -> int:
        return sum(text_display_width(piece.text) for piece in self.pieces)


@dataclass(frozen=True)
class _Space:
    piece: _Piece


class _HardBreak:
    pass


HARD_BREAK = _HardBreak()


class LinkCounter:
    """Hands out document-order link ids while one document is laid out."""

    def __init__(self) -> None:
        self.next_id = 0

    def allocate(self) -> int:
        link_id = self.next_id
        self.next_id += 1
        return link_id


def flatten_spans(
    spans: tuple[Span, ...],
    counter: LinkCounter,
    style: Style = PLAIN,
    link: LinkRef | None = None,
) -> list[Run]:
    """Turn nested inline spans into a flat list of styled runs."""
    runs: list[Run] = []
    for span in spans:
        if isinstance(span, Text):
            runs.append(Run(span.text, style, link))
        elif isinstance(span, Code):
            runs.append(Run(span.text.replace("\n", " "), style.merged(code=True), link, atomic=True))
        elif isinstance(span, Emphasis):
            runs.extend(flatten_spans(span.children, counter, style.merged(italic=True), link))
        elif isinstance(span, Strong):
            runs.extend(flatten_spans(span.children, counter, style.merged(bold=True), link))
        elif isinstance(span, Link):
            ref = LinkRef(counter.allocate(), span.target)
            runs.extend(flatten_spans(span.children, counter, style.merged(link=True), ref))
        elif isinstance(span, Image):
            ref = LinkRef(counter.allocate(), span.target, is_image=True)
            label = f"[image: {span.alt}]" if span.alt else "[image]"
            runs.append(Run(label, style.merged(image=True, link=True), ref))
    return runs


def _tokenize(runs: list[Run]) -> list[_Word | _Space | _HardBreak]:
    tokens: list[_Word | _Space | _HardBreak] = []
    word: list[_Piece] = []

    def end_word() -> None:
        if word:
            tokens.append(_Word(tuple(word)))
            word.clear()

    for run in runs:
        if run.atomic:
            if run.text:
                word.append(_Piece(run.text, run.style, run.link))
            continue
        for part in _WHITESPACE_SPLIT_RE.split(run.text):
            if not part:
                continue
            if not part.isspace():
                word.append(_Piece(part, run.style, run.link))
                continue
            end_word()
            if "\n" in part:
                tokens.append(HARD_BREAK)
            elif tokens and isinstance(tokens[-1], _Word):
                tokens.append(_Space(_Piece(" ", run.style, run.link)))
    end_word()
    return tokens


class LineBuilder:
    """Accumulates styled fragments for one render line.

    Adjacent fragments with the same style share a segment; adjacent
    fragments of the same link share an anchor.
    """

    def __init__(self, prefix: tuple[Segment, ...] = ()) -> None:
        self.segments: list[Segment] = []
        self.anchors: list[LinkAnchor] = []
        self.column = 0
        self.content_columns = 0
        for segment in prefix:
            self.append(segment.text, segment.style)
        self.content_columns = 0

    def _push_segment(self, text: str, style: Style) -> None:
        if self.segments and self.segments[-1].style == style:
            self.segments[-1] = Segment(self.segments[-1].text + text, style)
        else:
            self.segments.append(Segment(text, style))

    def extend(self, line: RenderLine) -> None:
        """Append a finished line, shifting its anchors to the current column."""
        base = self.column
        for segment in line.segments:
            self._push_segment(segment.text, segment.style)
        for anchor in line.anchors:
            self.anchors.append(
                LinkAnchor(
                    anchor.column_start + base,
                    anchor.column_end + base,
                    anchor.target,
                    anchor.link_id,
                    anchor.is_image,
                )
            )
        width = line.width
        self.column += width
        self.content_columns += width

    def append(self, text: str, style: Style = PLAIN, link: LinkRef | None = None) -> None:
        if not text:
            return
        width = text_display_width(text)
        self._push_segment(text, style)
        if link is not None and width > 0:
            last = self.anchors[-1] if self.anchors else None
            if last is not None and last.link_id == link.link_id and last.column_end == self.column:
                self.anchors[-1] = LinkAnchor(last.column_start, self.column + width, last.target, last.link_id, last.is_image)
            else:
                self.anchors.append(LinkAnchor(self.column, self.column + width, link.target, link.link_id, link.is_image))
        self.column += width
        self.content_columns += width

    def build(self, anchor_id: str | None = None, truncated: bool = False) -> RenderLine:
        return RenderLine(tuple(self.segments), tuple(self.anchors), anchor_id, truncated)


def fit_prefix(prefix: tuple[Segment, ...], width: int) -> tuple[Segment, ...]:
    """Clip an indentation prefix so at least one content column remains."""
    limit = max(0, width - 1)
    out: list[Segment] = []
    used = 0
    for segment in prefix:
        room = limit - used
        if room <= 0:
            break
        text = segment.text
        if text_display_width(text) > room:
            clipped: list[str] = []
            cols = 0
            for ch in text:
                w = char_display_width(ch, cols)
                if cols + w > room:
                    break
                clipped.append(ch)
                cols += w
            text = "".join(clipped)
        if text:
            out.append(Segment(text, segment.style))
            used += text_display_width(text)
    return tuple(out)


def wrap_runs(
    runs: list[Run],
    width: int,
    first_prefix: tuple[Segment, ...] = (),
    rest_prefix: tuple[Segment, ...] = (),
) -> list[LineBuilder]:
    """Greedily fill ``runs`` into lines no wider than ``width`` columns.

    Words move to the next line whole; only a word wider than a full line is
    split mid-word. Returns unfinished builders so callers can tag lines.
    """
    first_prefix = fit_prefix(first_prefix, width)
    rest_prefix = fit_prefix(rest_prefix, width)

    lines: list[LineBuilder] = []
    current = LineBuilder(first_prefix)
    available = width - current.column
    pending_space: _Space | None = None

    def new_line() -> None:
        nonlocal current, available, pending_space
        lines.append(current)
        current = LineBuilder(rest_prefix)
        available = width - current.column
        pending_space = None

    for token in _tokenize(runs):
        if isinstance(token, _HardBreak):
            new_line()
            continue
        if isinstance(token, _Space):
            if current.content_columns > 0:
                pending_space = token
            continue

        word_width = token.width
        space_width = 1 if pending_space is not None else 0
        if current.content_columns + space_width + word_width <= available:
            if pending_space is not None:
                piece = pending_space.piece
                current.append(piece.text, piece.style, piece.link)
            _append_word(current, token)
        elif word_width <= width - len_prefix(rest_prefix):
            new_line()
            _append_word(current, token)
        else:
            if current.content_columns > 0:
                new_line()
            for piece in token.pieces:
                for ch in piece.text:
                    w = char_display_width(ch, 0)
                    if current.content_columns + w > available and current.content_columns > 0:
                        new_line()
                    current.append(ch, piece.style, piece.link)
        pending_space = None

    lines.append(current)
    return lines


def len_prefix(prefix: tuple[Segment, ...]) -> int:
    return sum(text_display_width(segment.text) for segment in prefix)


def _append_word(builder: LineBuilder, word: _Word) -> None:
    for piece in word.pieces:
        builder.append(piece.text, piece.style, piece.link)


def wrap_spans(
    spans: tuple[Span, ...],
    width: int,
    counter: LinkCounter,
    style: Style = PLAIN,
    first_prefix: tuple[Segment, ...] = (),
    rest_prefix: tuple[Segment, ...] = (),
) -> list[LineBuilder]:
    return wrap_runs(flatten_spans(spans, counter, style), width, first_prefix, rest_prefix)
