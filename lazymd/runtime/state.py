"""Navigator state containers and the frame snapshot handed to the painter."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from ..layout import EMPTY_LINE, RenderLine
from ..markdown import Document, LinkTarget
from ..search import Match
from .navigation import BackStack, FileHistory


class Mode(Enum):
    BROWSING = "browsing"
    LINK_SELECT = "link-select"
    SEARCH = "search"
    SEARCH_RESULTS = "search-results"
    FILE_TREE = "file-tree"


@dataclass(frozen=True)
class LinkEntry:
    """One logical link of the laid-out document."""

    link_id: int
    line: int  # first render line the link appears on
    target: LinkTarget


@dataclass
class FileTreeState:
    root: Path
    paths: list[Path] = field(default_factory=list)
    labels: list[str] = field(default_factory=list)
    visible: list[int] = field(default_factory=list)
    cursor: int = 0
    start: int = 0
    query: str = ""
    filtering: bool = False
    scanned: bool = False

    def selected_path(self) -> Path | None:
        if not self.visible:
            return None
        return self.paths[self.visible[self.cursor]]


@dataclass
class NavigatorState:
    mode: Mode
    width: int
    height: int
    tree: FileTreeState
    active_path: Path | None = None
    document: Document | None = None
    lines: tuple[RenderLine, ...] = (EMPTY_LINE,)
    links: list[LinkEntry] = field(default_factory=list)
    offset: int = 0
    text_x: int = 0
    selected_link: int | None = None  # index into ``links``
    query: str = ""
    matches: list[Match] = field(default_factory=list)
    match_index: int | None = None
    back_stack: BackStack = field(default_factory=BackStack)
    history: FileHistory = field(default_factory=FileHistory)
    message: str | None = None
    pending_request: int | None = None

    @property
    def max_offset(self) -> int:
        return max(0, len(self.lines) - self.height)


@dataclass(frozen=True)
class Highlight:
    """Search hit on a visible row; ``row`` is relative to the viewport top."""

    row: int
    column_start: int
    column_end: int
    current: bool = False


@dataclass(frozen=True)
class Frame:
    """Everything the paint sink needs for one screen."""

    mode: Mode
    width: int
    height: int
    lines: tuple[RenderLine, ...]
    offset: int
    total_lines: int
    text_x: int = 0
    path: Path | None = None
    selected_link_id: int | None = None
    highlights: tuple[Highlight, ...] = ()
    query: str = ""
    match_position: tuple[int, int] | None = None
    message: str | None = None
    tree_rows: tuple[str, ...] = ()
    tree_cursor_row: int | None = None
    tree_query: str = ""
    tree_filtering: bool = False
    loading: bool = False


@dataclass(frozen=True)
class NavigatorOutcome:
    quit: bool = False
    changed: bool = False
    message: str | None = None
    external_target: str | None = None


__all__ = [
    "FileTreeState",
    "Frame",
    "Highlight",
    "LinkEntry",
    "Mode",
    "NavigatorOutcome",
    "NavigatorState",
]
