"""Case-insensitive substring search over laid-out render lines."""

from __future__ import annotations

from typing import NamedTuple

from ..layout.types import RenderLine, column_of_index


class Match(NamedTuple):
    """A hit; compares equal to the plain ``(line, start, end)`` tuple."""

    line: int  # render-line index
    column_start: int
    column_end: int  # exclusive


def _fold(text: str) -> str:
    # One output character per input character so indices stay aligned.
    return "".join(ch.lower()[:1] for ch in text)


def find(lines: tuple[RenderLine, ...] | list[RenderLine], query: str) -> list[Match]:
    """Return non-overlapping matches of ``query`` in document order.

    Columns are display columns, so matches after wide characters line up
    with link anchors and the painter. An empty query matches nothing.
    """
    if not query:
        return []
    needle = _fold(query)
    matches: list[Match] = []
    for line_index, line in enumerate(lines):
        text = line.text
        haystack = _fold(text)
        start = haystack.find(needle)
        while start >= 0:
            end = start + len(needle)
            matches.append(Match(line_index, column_of_index(text, start), column_of_index(text, end)))
            start = haystack.find(needle, end)
    return matches


def first_match_at_or_after(matches: list[Match], line_index: int) -> int:
    """Index of the first match on or below ``line_index``; wraps to 0."""
    for index, match in enumerate(matches):
        if match.line >= line_index:
            return index
    return 0
