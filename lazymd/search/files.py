"""File-tree filtering with ripgrep-style smart case."""

from __future__ import annotations

from pathlib import Path


def is_case_sensitive(query: str) -> bool:
    """Smart case: only a query with an upper-case letter is case-sensitive."""
    return any(ch.isupper() for ch in query)


def to_relative_label(path: Path, root: Path) -> str:
    try:
        return path.resolve().relative_to(root.resolve()).as_posix()
    except ValueError:
        return path.as_posix()


def filter_labels(labels: list[str], query: str) -> list[int]:
    """Return indexes of ``labels`` containing ``query``, in original order."""
    if not query:
        return list(range(len(labels)))
    if is_case_sensitive(query):
        return [index for index, label in enumerate(labels) if query in label]
    needle = query.casefold()
    return [index for index, label in enumerate(labels) if needle in label.casefold()]
