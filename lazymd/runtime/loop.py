"""Main interactive event loop for the terminal UI.

Feeds resize and key events to the navigator and applies finished background
loads between keys. Painting happens inside the navigator's paint sink.
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Callable
from pathlib import Path

from .events import KeyPress, Resize
from .navigator import Navigator
from .reader import read_key
from .terminal import TerminalController

logger = logging.getLogger(__name__)

POLL_INTERVAL_MS = 50


def viewport_size(chrome_rows: int, get_size: Callable[..., os.terminal_size] = shutil.get_terminal_size) -> tuple[int, int]:
    """Return ``(columns, content_rows)`` for the current terminal."""
    term = get_size((80, 24))
    return term.columns, term.lines - chrome_rows


def run_main_loop(
    navigator: Navigator,
    terminal: TerminalController,
    stdin_fd: int,
    *,
    chrome_rows: int,
    initial_path: Path | None = None,
    read: Callable[[int, int | None], str] = read_key,
    get_size: Callable[..., os.terminal_size] = shutil.get_terminal_size,
    poll_interval_ms: int = POLL_INTERVAL_MS,
) -> None:
    """Open ``initial_path`` (or the file tree) and run until quit."""
    with terminal.raw_mode():
        navigator.start(initial_path)
        last_size: tuple[int, int] | None = None
        while True:
            size = viewport_size(chrome_rows, get_size)
            if size != last_size:
                last_size = size
                navigator.handle(Resize(*size))

            navigator.poll()

            key = read(stdin_fd, poll_interval_ms)
            if not key:
                continue
            outcome = navigator.handle(KeyPress(key))
            if outcome.external_target is not None:
                logger.info("external link not opened: %s", outcome.external_target)
            if outcome.quit:
                return
