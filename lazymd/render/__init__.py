"""ANSI paint sink for navigator frames.

Turns a ``Frame`` into one fully composed escape-sequence string (clear,
viewport rows, status line, prompt or help line) and writes it in a single
``os.write`` call. Nothing here mutates navigator state.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Callable
from functools import lru_cache
from pathlib import Path

from pygments.styles import get_style_by_name
from pygments.token import string_to_tokentype
from pygments.util import ClassNotFound

from ..ansi import char_display_width, clip_text, sanitize_terminal_text
from ..layout import RenderLine, Style
from ..runtime.state import Frame, Highlight, Mode
from ..ui_theme import UITheme, resolve_theme
from .help import help_line

STATUS_ROWS = 2
DEFAULT_CODE_STYLE = "monokai"
OVERFLOW_LEFT = "«"
OVERFLOW_RIGHT = "»"

MODE_LABELS: dict[Mode, str] = {
    Mode.BROWSING: "VIEW",
    Mode.LINK_SELECT: "LINKS",
    Mode.SEARCH: "SEARCH",
    Mode.SEARCH_RESULTS: "MATCHES",
    Mode.FILE_TREE: "FILES",
}


def normalize_code_style(style: str) -> str:
    """Return ``style`` if Pygments knows it, else the default style name."""
    try:
        get_style_by_name(style)
    except ClassNotFound:
        return DEFAULT_CODE_STYLE
    return style


@lru_cache(maxsize=512)
def token_sgr(code_style: str, token_name: str) -> str:
    """Truecolor SGR sequence for one Pygments token type under ``code_style``."""
    style = get_style_by_name(code_style)
    token_style = style.style_for_token(string_to_tokentype(token_name))
    codes: list[str] = []
    if token_style.get("bold"):
        codes.append("1")
    if token_style.get("italic"):
        codes.append("3")
    if token_style.get("underline"):
        codes.append("4")
    color = token_style.get("color")
    if color:
        codes.append(f"38;2;{int(color[0:2], 16)};{int(color[2:4], 16)};{int(color[4:6], 16)}")
    if not codes:
        return ""
    return f"\033[{';'.join(codes)}m"


def build_status_line(left_text: str, width: int, right_text: str = "") -> str:
    usable = max(1, width - 1)
    if usable <= len(right_text):
        return right_text[-usable:]
    left_limit = max(0, usable - len(right_text) - 1)
    left = clip_text(left_text, left_limit)
    gap = " " * (usable - len(left) - len(right_text))
    return f"{left}{gap}{right_text}"


def _scroll_percent(offset: int, total_lines: int, visible_rows: int) -> float:
    max_start = max(0, total_lines - max(1, visible_rows))
    if max_start <= 0:
        return 100.0
    return (max(0, min(offset, max_start)) / max_start) * 100.0


class AnsiPainter:
    """Paint sink: ``painter(frame)`` writes one full screen."""

    def __init__(
        self,
        theme: UITheme | None = None,
        code_style: str = DEFAULT_CODE_STYLE,
        no_color: bool = False,
        write: Callable[[str], None] | None = None,
        root_label: Callable[[Path], str] | None = None,
    ) -> None:
        self.no_color = no_color
        self.theme = resolve_theme(None, no_color=True) if no_color else (theme or resolve_theme(None))
        self.code_style = normalize_code_style(code_style)
        self._write = write if write is not None else self._write_stdout
        self._root_label = root_label if root_label is not None else str

    @staticmethod
    def _write_stdout(text: str) -> None:
        os.write(sys.stdout.fileno(), text.encode("utf-8", errors="replace"))

    def __call__(self, frame: Frame) -> None:
        self._write(self.compose(frame))

    # -- styles -------------------------------------------------------

    def style_sgr(self, style: Style) -> str:
        theme = self.theme
        parts: list[str] = []
        if style.heading:
            parts.append(theme.heading_sgr(style.heading))
        if style.code:
            if style.token and not self.no_color:
                parts.append(token_sgr(self.code_style, style.token) or theme.code)
            else:
                parts.append(theme.code)
        if style.quote:
            parts.append(theme.quote)
        if style.rule:
            parts.append(theme.rule)
        if style.table_border:
            parts.append(theme.table_border)
        if style.marker:
            parts.append(theme.marker)
        if style.bold and not style.heading:
            parts.append(theme.bold)
        if style.italic:
            parts.append(theme.italic)
        if style.image:
            parts.append(theme.image)
        elif style.link:
            parts.append(theme.link)
        return "".join(parts)

    # -- rows ---------------------------------------------------------

    def render_line(
        self,
        line: RenderLine,
        width: int,
        text_x: int = 0,
        highlights: tuple[Highlight, ...] | list[Highlight] = (),
        selected_link_id: int | None = None,
    ) -> str:
        """Render one line into at most ``width`` display columns."""
        theme = self.theme
        start = text_x if line.truncated else 0
        selected = [
            (anchor.column_start, anchor.column_end)
            for anchor in line.anchors
            if selected_link_id is not None and anchor.link_id == selected_link_id
        ]

        cells: list[tuple[str, str]] = []
        col = 0
        shown = 0
        clipped_right = False
        for segment in line.segments:
            base = self.style_sgr(segment.style)
            for ch in segment.text:
                w = char_display_width(ch, 0)
                if col < start:
                    col += w
                    continue
                if shown + w > width:
                    clipped_right = True
                    break
                overlay = ""
                if any(lo <= col < hi for lo, hi in selected):
                    overlay = theme.link_selected
                for hit in highlights:
                    if hit.column_start <= col < hit.column_end:
                        overlay = theme.search_current if hit.current else theme.search_hit
                cells.append((sanitize_terminal_text(ch), base + overlay))
                col += w
                shown += w
            if clipped_right:
                break

        if line.truncated and width > 1:
            if clipped_right and cells:
                cells[-1] = (OVERFLOW_RIGHT, theme.overflow)
            if start > 0 and cells:
                cells[0] = (OVERFLOW_LEFT, theme.overflow)

        out: list[str] = []
        current = ""
        for text, sgr in cells:
            if sgr != current:
                out.append(theme.reset if current else "")
                out.append(sgr)
                current = sgr
            out.append(text)
        if current:
            out.append(theme.reset)
        return "".join(out)

    def _tree_row(self, label: str, is_cursor: bool, width: int) -> str:
        theme = self.theme
        text = clip_text(("> " if is_cursor else "  ") + sanitize_terminal_text(label), width)
        if is_cursor:
            return f"{theme.tree_cursor}{text}{theme.reset}"
        return f"{theme.tree_file}{text}{theme.reset}"

    def _status(self, frame: Frame) -> str:
        label = MODE_LABELS.get(frame.mode, "")
        if frame.mode is Mode.FILE_TREE:
            where = self._root_label(frame.path) if frame.path is not None else ""
            left = f" {label} {where}".rstrip()
        else:
            first = frame.offset + 1
            last = min(frame.total_lines, frame.offset + frame.height)
            percent = _scroll_percent(frame.offset, frame.total_lines, frame.height)
            where = self._root_label(frame.path) if frame.path is not None else "(no file)"
            left = f" {label} {where} ({first}-{last}/{frame.total_lines} {percent:5.1f}%)"
        right = ""
        if frame.match_position is not None and frame.mode in (Mode.SEARCH_RESULTS, Mode.BROWSING):
            right = f"match {frame.match_position[0]}/{frame.match_position[1]} "
        if frame.loading:
            right = "loading... " + right
        return build_status_line(left, frame.width, right)

    def _bottom(self, frame: Frame) -> str:
        theme = self.theme
        width = max(1, frame.width - 1)
        if frame.mode is Mode.SEARCH:
            return f"{theme.prompt}/{theme.reset}" + clip_text(sanitize_terminal_text(frame.query), width - 1)
        if frame.mode is Mode.FILE_TREE and (frame.tree_filtering or frame.tree_query):
            prompt = "filter: "
            return f"{theme.prompt}{prompt}{theme.reset}" + clip_text(
                sanitize_terminal_text(frame.tree_query), max(0, width - len(prompt))
            )
        if frame.message:
            return f"{theme.message}{clip_text(sanitize_terminal_text(frame.message), width)}{theme.reset}"
        return help_line(frame.mode, theme, width)

    def compose(self, frame: Frame) -> str:
        out: list[str] = ["\033[H\033[J"]
        rows: list[str] = []
        if frame.mode is Mode.FILE_TREE:
            for row in range(frame.height):
                if row < len(frame.tree_rows):
                    rows.append(self._tree_row(frame.tree_rows[row], row == frame.tree_cursor_row, frame.width))
                else:
                    rows.append("")
        else:
            for row in range(frame.height):
                if row < len(frame.lines):
                    highlights = [hit for hit in frame.highlights if hit.row == row]
                    rows.append(
                        self.render_line(
                            frame.lines[row],
                            frame.width,
                            frame.text_x,
                            highlights,
                            frame.selected_link_id,
                        )
                    )
                else:
                    rows.append("")
        for text in rows:
            out.append(text)
            out.append("\r\n")
        out.append(self.theme.status)
        out.append(self._status(frame))
        out.append(self.theme.reset)
        out.append("\r\n")
        out.append(self._bottom(frame))
        return "".join(out)


def render_plain_document(lines: tuple[RenderLine, ...], painter: AnsiPainter, width: int) -> str:
    """Render every line once, newline separated, for non-interactive output."""
    return "\n".join(painter.render_line(line, width) for line in lines) + "\n"


__all__ = [
    "AnsiPainter",
    "MODE_LABELS",
    "STATUS_ROWS",
    "build_status_line",
    "normalize_code_style",
    "render_plain_document",
    "token_sgr",
]
