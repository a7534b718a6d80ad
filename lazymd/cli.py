"""Command-line front door for lazymd.

Parses CLI options, resolves the target path and configures logging.
Then either prints a rendered document or starts the interactive viewer.
"""

from __future__ import annotations

import argparse
import logging
import shutil
import sys
from pathlib import Path

from .errors import LazyMdError
from .layout import layout
from .markdown import parse
from .render import STATUS_ROWS, AnsiPainter, render_plain_document
from .runtime import DocumentLoadScheduler, FilesystemProvider, Navigator, gitignore_filter
from .runtime.config import (
    load_code_style,
    load_show_hidden,
    load_skip_gitignored,
    load_theme_name,
    save_theme_name,
)
from .runtime.loop import run_main_loop, viewport_size
from .runtime.terminal import TerminalController
from .search import to_relative_label
from .ui_theme import available_theme_names, normalize_theme_name, resolve_theme

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _default_render_width() -> int:
    """Resolve default render width from current terminal size."""
    term = shutil.get_terminal_size((80, 24))
    return max(1, term.columns)


def configure_logging(log_file: str | None) -> None:
    """Send log records to ``log_file``; without one, logging stays silent.

    The terminal belongs to the UI, so nothing is ever logged to stderr.
    """
    package_logger = logging.getLogger("lazymd")
    if log_file is None:
        package_logger.addHandler(logging.NullHandler())
        package_logger.propagate = False
        return
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG)
    package_logger.propagate = False


def render_markdown_view(
    path: Path,
    style: str,
    no_color: bool,
    max_cols: int,
    theme_name: str | None = None,
) -> str:
    """Lay out ``path`` at ``max_cols`` and return it as ANSI (or plain) text."""
    provider = FilesystemProvider()
    document = parse(provider.read(path))
    lines = layout(document, max_cols)
    painter = AnsiPainter(resolve_theme(theme_name), code_style=style, no_color=no_color)
    return render_plain_document(lines, painter, max_cols)


def run_viewer(
    path: Path,
    style: str,
    no_color: bool,
    theme_name: str | None,
    show_hidden: bool,
    skip_gitignored: bool = False,
) -> None:
    """Start the interactive viewer on a Markdown file or a directory."""
    root = path if path.is_dir() else path.parent
    root = root.resolve()
    provider = FilesystemProvider(show_hidden=show_hidden)
    painter = AnsiPainter(
        resolve_theme(theme_name),
        code_style=style,
        no_color=no_color,
        root_label=lambda target: to_relative_label(target, root),
    )
    width, height = viewport_size(STATUS_ROWS)
    navigator = Navigator(
        provider,
        root,
        max(1, width),
        max(1, height),
        scheduler=DocumentLoadScheduler(provider),
        paint=painter,
        is_ignored=gitignore_filter(root) if skip_gitignored else None,
    )
    stdin_fd = sys.stdin.fileno()
    terminal = TerminalController(stdin_fd, sys.stdout.fileno())
    logger.info("starting viewer at %s", path)
    run_main_loop(
        navigator,
        terminal,
        stdin_fd,
        chrome_rows=STATUS_ROWS,
        initial_path=None if path.is_dir() else path,
    )


def main(default_path: Path | None = None) -> None:
    """Parse CLI arguments and launch lazymd on a file or directory.

    ``default_path`` is primarily for tests; when omitted the current working
    directory is used.
    """
    parser = argparse.ArgumentParser(description="Read and navigate Markdown documents in the terminal.")
    parser.add_argument(
        "path",
        nargs="?",
        default=None,
        help="Markdown file or directory. Defaults to current directory.",
    )
    parser.add_argument("--style", default=None, help="Pygments style name for fenced code blocks.")
    parser.add_argument(
        "--theme",
        default=None,
        help=f"UI theme name ({', '.join(available_theme_names())}).",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable color output even on TTY.")
    parser.add_argument("--nopager", action="store_true", help="Print the rendered document without paging.")
    parser.add_argument("--render", metavar="PATH", help="Render PATH once and exit.")
    parser.add_argument(
        "--max-cols",
        type=_positive_int,
        default=None,
        help="Column width for --render output (default: terminal width).",
    )
    parser.add_argument("--log-file", default=None, help="Append debug logs to this file.")
    args = parser.parse_args()

    configure_logging(args.log_file)
    style = args.style or load_code_style()
    theme_name = args.theme or load_theme_name()
    if args.theme is not None and normalize_theme_name(args.theme) == args.theme.strip().lower():
        save_theme_name(normalize_theme_name(args.theme))

    if args.render is not None:
        if args.path is not None:
            raise SystemExit("Cannot combine positional path with --render.")
        render_path = Path(args.render)
        if not render_path.is_file():
            raise SystemExit(f"Path not found: {render_path}")
        max_cols = args.max_cols if args.max_cols is not None else _default_render_width()
        try:
            sys.stdout.write(render_markdown_view(render_path, style, args.no_color, max_cols, theme_name))
        except LazyMdError as exc:
            raise SystemExit(str(exc)) from exc
        return

    if default_path is None:
        default_path = Path.cwd()
    path = Path(args.path or default_path)
    if not path.exists():
        raise SystemExit(f"Path not found: {path}")

    if args.nopager or not sys.stdin.isatty() or not sys.stdout.isatty():
        if path.is_dir():
            raise SystemExit("A directory needs an interactive terminal.")
        try:
            sys.stdout.write(render_markdown_view(path, style, args.no_color, _default_render_width(), theme_name))
        except LazyMdError as exc:
            raise SystemExit(str(exc)) from exc
        return

    run_viewer(
        path,
        style,
        args.no_color,
        theme_name,
        load_show_hidden(),
        skip_gitignored=load_skip_gitignored(),
    )


if __name__ == "__main__":
    main()
