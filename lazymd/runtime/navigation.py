"""Navigation primitives: view locations, the back-stack and file history.

This module has no UI concerns.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

MAX_BACK_STACK = 256
MAX_FILE_HISTORY = 256


@dataclass(frozen=True)
class Location:
    """Where the reader was: one file and its scroll offset."""

    path: Path
    offset: int = 0

    def normalized(self) -> Location:
        """Return a resolved, non-negative variant safe for comparisons."""
        try:
            resolved = self.path.resolve()
        except OSError:
            resolved = self.path
        return Location(path=resolved, offset=max(0, self.offset))


class BackStack:
    """Bounded stack of locations to return to.

    Adjacent duplicate locations are suppressed to avoid no-op back steps.
    """

    def __init__(self, max_entries: int = MAX_BACK_STACK) -> None:
        self.max_entries = max(1, max_entries)
        self.entries: list[Location] = []

    def __len__(self) -> int:
        return len(self.entries)

    def push(self, location: Location) -> None:
        location = location.normalized()
        if self.entries and self.entries[-1] == location:
            return
        self.entries.append(location)
        overflow = len(self.entries) - self.max_entries
        if overflow > 0:
            del self.entries[:overflow]

    def peek(self) -> Location | None:
        return self.entries[-1] if self.entries else None

    def pop(self, active: Path | None = None) -> Location | None:
        """Pop the next location whose path differs from ``active``."""
        active_path = _resolved(active) if active is not None else None
        while self.entries:
            location = self.entries.pop()
            if location.path != active_path:
                return location
        return None

    def discard_top(self, active: Path) -> None:
        """Drop top entries that point at the now-active file."""
        active_path = _resolved(active)
        while self.entries and self.entries[-1].path == active_path:
            self.entries.pop()


class FileHistory:
    """Most-recently-visited files, newest last, without duplicates."""

    def __init__(self, max_entries: int = MAX_FILE_HISTORY) -> None:
        self.max_entries = max(1, max_entries)
        self.paths: list[Path] = []

    def visit(self, path: Path) -> None:
        path = _resolved(path)
        if path in self.paths:
            self.paths.remove(path)
        self.paths.append(path)
        overflow = len(self.paths) - self.max_entries
        if overflow > 0:
            del self.paths[:overflow]

    def previous(self, active: Path | None) -> Path | None:
        """Return the most recent visited file other than ``active``."""
        active_path = _resolved(active) if active is not None else None
        for path in reversed(self.paths):
            if path != active_path:
                return path
        return None


def _resolved(path: Path) -> Path:
    try:
        return path.resolve()
    except OSError:
        return path


__all__ = ["BackStack", "FileHistory", "Location", "MAX_BACK_STACK", "MAX_FILE_HISTORY"]
