"""One-line key hints shown under the status line, per navigator mode."""

from __future__ import annotations

from ..ansi import clip_text
from ..runtime.state import Mode
from ..ui_theme import UITheme

HELP_HINTS: dict[Mode, tuple[tuple[str, str], ...]] = {
    Mode.BROWSING: (
        ("j/k", "line"),
        ("d/u", "half"),
        ("g/G", "top/bottom"),
        ("/", "search"),
        ("f", "links"),
        ("b", "back"),
        ("t", "files"),
        ("h/l", "code x-scroll"),
        ("r", "reload"),
        ("q", "quit"),
    ),
    Mode.LINK_SELECT: (
        ("j/k Tab", "next/prev link"),
        ("Enter", "follow"),
        ("Esc", "cancel"),
    ),
    Mode.SEARCH: (
        ("Type/Backspace", "edit query"),
        ("Ctrl+U", "clear"),
        ("Enter", "search"),
        ("Esc", "cancel"),
    ),
    Mode.SEARCH_RESULTS: (
        ("n/N", "next/prev match"),
        ("/", "new search"),
        ("Esc", "done"),
    ),
    Mode.FILE_TREE: (
        ("j/k", "move"),
        ("Enter", "open"),
        ("/", "filter"),
        ("r", "rescan"),
        ("Esc", "back"),
        ("q", "quit"),
    ),
}


def help_hints(mode: Mode) -> tuple[tuple[str, str], ...]:
    return HELP_HINTS.get(mode, ())


def help_line(mode: Mode, theme: UITheme, width: int) -> str:
    """Render the hint row for ``mode`` clipped to ``width`` columns."""
    parts: list[str] = []
    used = 0
    for key, description in help_hints(mode):
        plain = f"{key} {description}"
        sep = 2 if parts else 0
        if used + sep + len(plain) > width:
            if not parts:
                return clip_text(plain, width)
            break
        parts.append(f"{theme.help_key}{key}{theme.reset} {theme.help_dim}{description}{theme.reset}")
        used += sep + len(plain)
    return "  ".join(parts)


__all__ = ["HELP_HINTS", "help_hints", "help_line"]
