"""Display-width measurement and column slicing for terminal text.

Layout works on plain text plus semantic styles; escape sequences only appear
in the painter's output. These helpers keep column math consistent when wide
characters or combining marks are present.
"""

from __future__ import annotations

import unicodedata

TAB_STOP = 8


def char_display_width(ch: str, col: int) -> int:
    """Return terminal column width for one character at visual column ``col``.

    Tabs expand to the next 8-column stop, combining marks consume no columns,
    and East Asian wide/fullwidth characters consume two.
    """
    if ch == "\t":
        return TAB_STOP - (col % TAB_STOP)
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def clip_text(text: str, max_cols: int) -> str:
    """Trim plain text to at most ``max_cols`` display columns.

    A wide character that would straddle the limit is dropped entirely.
    """
    return slice_text(text, 0, max_cols)


def slice_text(text: str, start_cols: int, max_cols: int) -> str:
    """Return the part of plain ``text`` visible in a horizontal viewport.

    The viewport starts at display column ``start_cols`` and is ``max_cols``
    wide. Characters cut by either edge are omitted rather than split.
    """
    if max_cols <= 0 or not text:
        return ""
    if start_cols < 0:
        start_cols = 0

    out: list[str] = []
    col = 0
    shown = 0
    for ch in text:
        w = char_display_width(ch, col)
        if col < start_cols:
            col += w
            continue
        if shown + w > max_cols:
            break
        out.append(ch)
        shown += w
        col += w
    return "".join(out)


def sanitize_terminal_text(source: str) -> str:
    """Escape terminal control bytes to avoid side effects (bell, cursor moves, etc.)."""
    out: list[str] = []
    for ch in source:
        code = ord(ch)
        if ch in {"\n", "\t"}:
            out.append(ch)
            continue
        # C0 controls + DEL + C1 controls.
        if code < 32 or code == 127 or 0x80 <= code <= 0x9F:
            out.append(f"\\x{code:02x}")
            continue
        out.append(ch)
    return "".join(out)
