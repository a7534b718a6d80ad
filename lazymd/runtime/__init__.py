"""Runtime: navigator state machine plus its file, loader and terminal adapters."""

from __future__ import annotations

from .events import Event, KeyPress, Resize
from .files import DirEntry, FileProvider, FilesystemProvider, collect_markdown_files
from .gitignore import gitignore_filter
from .loader import DocumentLoadScheduler, LoadedDocument, load_document
from .navigation import BackStack, FileHistory, Location
from .navigator import Navigator
from .state import Frame, Highlight, Mode, NavigatorOutcome, NavigatorState

__all__ = [
    "BackStack",
    "DirEntry",
    "DocumentLoadScheduler",
    "Event",
    "FileHistory",
    "FileProvider",
    "FilesystemProvider",
    "Frame",
    "Highlight",
    "KeyPress",
    "LoadedDocument",
    "Location",
    "Mode",
    "Navigator",
    "NavigatorOutcome",
    "NavigatorState",
    "Resize",
    "collect_markdown_files",
    "gitignore_filter",
    "load_document",
]
