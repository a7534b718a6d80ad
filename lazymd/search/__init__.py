"""Search exports: document text search and file-list filtering."""

from __future__ import annotations

from .content import Match, find, first_match_at_or_after
from .files import filter_labels, is_case_sensitive, to_relative_label

__all__ = [
    "Match",
    "filter_labels",
    "find",
    "first_match_at_or_after",
    "is_case_sensitive",
    "to_relative_label",
]
