"""File access used by the navigator: text reads and directory listings.

``FilesystemProvider`` is the real implementation. Tests substitute an
in-memory object with the same two methods.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from ..errors import FileNotFound, ViewerIOError

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIXES = frozenset({".md", ".markdown", ".mdown", ".mkd", ".mkdn"})
MAX_TREE_FILES = 5_000


@dataclass(frozen=True)
class DirEntry:
    name: str
    is_directory: bool


class FileProvider(Protocol):
    def read(self, path: Path) -> str: ...

    def list_directory(self, path: Path) -> list[DirEntry]: ...


def read_text(path: Path) -> str:
    """Read text using tolerant encoding fallback order.

    Tries UTF-8 (dropping a BOM) and falls back to latin-1, which decodes
    any byte sequence.
    """
    try:
        return path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError:
        logger.info("%s is not UTF-8; decoding as latin-1", path)
        return path.read_text(encoding="latin-1")


class FilesystemProvider:
    def __init__(self, show_hidden: bool = False) -> None:
        self.show_hidden = show_hidden

    def read(self, path: Path) -> str:
        try:
            return read_text(path)
        except FileNotFoundError as exc:
            raise FileNotFound(path) from exc
        except IsADirectoryError as exc:
            raise ViewerIOError(path, "is a directory") from exc
        except OSError as exc:
            raise ViewerIOError(path, exc.strerror or str(exc)) from exc

    def list_directory(self, path: Path) -> list[DirEntry]:
        """List visible children, directories first, then case-insensitive name."""
        entries: list[DirEntry] = []
        try:
            with os.scandir(path) as scan:
                for child in scan:
                    if not self.show_hidden and child.name.startswith("."):
                        continue
                    try:
                        is_dir = child.is_dir()
                    except OSError:
                        is_dir = False
                    entries.append(DirEntry(child.name, is_dir))
        except FileNotFoundError as exc:
            raise FileNotFound(path) from exc
        except OSError as exc:
            raise ViewerIOError(path, exc.strerror or str(exc)) from exc
        entries.sort(key=lambda entry: (not entry.is_directory, entry.name.lower()))
        return entries


def is_markdown_name(name: str) -> bool:
    return Path(name).suffix.lower() in MARKDOWN_SUFFIXES


def collect_markdown_files(
    provider: FileProvider,
    root: Path,
    max_files: int = MAX_TREE_FILES,
    is_ignored: Callable[[Path], bool] | None = None,
) -> list[Path]:
    """Walk ``root`` depth-first and return its Markdown files.

    A directory's own files come before those of its subdirectories; both
    follow ``list_directory`` order.

    Paths for which ``is_ignored`` returns true are left out, and ignored
    directories are not descended into. Unreadable subdirectories are
    skipped; an unreadable ``root`` raises.
    """
    files: list[Path] = []
    pending: list[Path] = [root]
    first = True
    while pending and len(files) < max_files:
        directory = pending.pop()
        try:
            entries = provider.list_directory(directory)
        except ViewerIOError:
            if first:
                raise
            logger.warning("skipping unreadable directory %s", directory)
            continue
        first = False
        subdirs: list[Path] = []
        for entry in entries:
            child = directory / entry.name
            if not entry.is_directory and not is_markdown_name(entry.name):
                continue
            if is_ignored is not None and is_ignored(child):
                continue
            if entry.is_directory:
                subdirs.append(child)
            else:
                files.append(child)
                if len(files) >= max_files:
                    break
        pending.extend(reversed(subdirs))
    return files


__all__ = [
    "DirEntry",
    "FileProvider",
    "FilesystemProvider",
    "MARKDOWN_SUFFIXES",
    "collect_markdown_files",
    "is_markdown_name",
    "read_text",
]
