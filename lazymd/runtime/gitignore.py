"""Gitignore-aware filtering for the Markdown file tree.

Ignored paths come from ``git ls-files --ignored`` so the rules are exactly
git's own. Matchers are cached per root with a short time-to-live; a change
to the root directory's mtime invalidates the cached entry early.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

MATCHER_CACHE_MAX = 64
MATCHER_CACHE_TTL_SECONDS = 2.0


def _is_within(path: Path, root: Path) -> bool:
    try:
        path.relative_to(root)
        return True
    except ValueError:
        return False


@dataclass(frozen=True)
class GitIgnoreMatcher:
    """Snapshot of the ignored files and directories under ``root``."""

    root: Path
    ignored_files: frozenset[Path]
    ignored_dirs: frozenset[Path]

    def is_ignored(self, path: Path) -> bool:
        """Return whether ``path`` or one of its parent directories is ignored."""
        resolved = path.resolve()
        if not _is_within(resolved, self.root):
            return False
        if resolved in self.ignored_files:
            return True
        current = resolved
        while True:
            if current in self.ignored_dirs:
                return True
            if current == self.root or current.parent == current:
                return False
            current = current.parent


@dataclass(frozen=True)
class _CacheEntry:
    matcher: GitIgnoreMatcher | None
    root_mtime_ns: int | None
    loaded_at: float


_MATCHER_CACHE: OrderedDict[Path, _CacheEntry] = OrderedDict()


def _git(args: list[str]) -> bytes | None:
    try:
        proc = subprocess.run(
            ["git", *args],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError) as exc:
        logger.debug("git %s failed: %s", " ".join(args), exc)
        return None
    return proc.stdout


def load_matcher(root: Path) -> GitIgnoreMatcher | None:
    """Ask git which paths under ``root`` are ignored.

    Returns ``None`` when git is missing or ``root`` is not inside a work
    tree. Only paths within ``root`` are kept, even when the repository
    root is higher up.
    """
    if shutil.which("git") is None:
        return None
    root = root.resolve()
    top = _git(["-C", str(root), "rev-parse", "--show-toplevel"])
    if not top or not top.strip():
        return None
    repo_root = Path(top.decode("utf-8", errors="replace").strip()).resolve()
    if not _is_within(root, repo_root):
        return None

    listing = _git(
        ["-C", str(repo_root), "ls-files", "-z", "--others", "-i", "--exclude-standard", "--directory"]
    )
    if listing is None:
        return None

    ignored_files: set[Path] = set()
    ignored_dirs: set[Path] = set()
    for raw in listing.split(b"\x00"):
        rel = raw.decode("utf-8", errors="replace")
        is_dir = rel.endswith("/")
        rel = rel.rstrip("/")
        if not rel:
            continue
        path = (repo_root / rel).resolve()
        if not _is_within(path, root):
            continue
        if is_dir or path.is_dir():
            ignored_dirs.add(path)
        else:
            ignored_files.add(path)
    logger.debug("%s: %d ignored files, %d ignored dirs", root, len(ignored_files), len(ignored_dirs))
    return GitIgnoreMatcher(root=root, ignored_files=frozenset(ignored_files), ignored_dirs=frozenset(ignored_dirs))


def get_matcher(root: Path) -> GitIgnoreMatcher | None:
    """Return the cached matcher for ``root``, reloading it when stale."""
    resolved = root.resolve()
    try:
        root_mtime_ns: int | None = resolved.stat().st_mtime_ns
    except OSError:
        root_mtime_ns = None
    now = time.monotonic()

    cached = _MATCHER_CACHE.get(resolved)
    if (
        cached is not None
        and cached.root_mtime_ns == root_mtime_ns
        and now - cached.loaded_at <= MATCHER_CACHE_TTL_SECONDS
    ):
        _MATCHER_CACHE.move_to_end(resolved)
        return cached.matcher

    matcher = load_matcher(resolved)
    _MATCHER_CACHE[resolved] = _CacheEntry(matcher, root_mtime_ns, now)
    _MATCHER_CACHE.move_to_end(resolved)
    while len(_MATCHER_CACHE) > MATCHER_CACHE_MAX:
        _MATCHER_CACHE.popitem(last=False)
    return matcher


def gitignore_filter(root: Path) -> Callable[[Path], bool]:
    """Return a predicate hiding git-ignored paths under ``root``.

    The matcher is looked up per call so a rescan sees a fresh snapshot once
    the cached one expires.
    """

    def is_ignored(path: Path) -> bool:
        matcher = get_matcher(root)
        return matcher is not None and matcher.is_ignored(path)

    return is_ignored


__all__ = ["GitIgnoreMatcher", "get_matcher", "gitignore_filter", "load_matcher"]
