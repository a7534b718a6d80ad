"""Recoverable failures surfaced by the viewer.

Parser and layout never raise for document content. Everything here is
caught by the navigator, which keeps the previous view and shows ``str(exc)``
in the status line.
"""

from __future__ import annotations

from pathlib import Path


class LazyMdError(Exception):
    """Base class for every error the navigator turns into a status message."""


class ViewerIOError(LazyMdError):
    """A file or directory could not be read."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{self.path}: {reason}")


class FileNotFound(ViewerIOError):
    def __init__(self, path: Path | str) -> None:
        super().__init__(path, "no such file")


class InvalidViewport(LazyMdError):
    """Viewport width or height is zero or negative."""


class NoMatches(LazyMdError):
    def __init__(self, query: str) -> None:
        self.query = query
        super().__init__(f"no matches for {query!r}")


class ExternalLinkUnsupported(LazyMdError):
    """The selected link points outside the local file system."""

    def __init__(self, raw: str) -> None:
        self.raw = raw
        super().__init__(f"external link: {raw}")


__all__ = [
    "ExternalLinkUnsupported",
    "FileNotFound",
    "InvalidViewport",
    "LazyMdError",
    "NoMatches",
    "ViewerIOError",
]
