"""Markdown parsing into an immutable block/span document model."""

from __future__ import annotations

from .blocks import parse
from .inline import parse_inline
from .serialize import serialize
from .targets import anchor_matches, classify_target, heading_slug, normalize_heading
from .types import *  # noqa: F401,F403
from .types import __all__ as _types_all

__all__ = [
    "anchor_matches",
    "classify_target",
    "heading_slug",
    "normalize_heading",
    "parse",
    "parse_inline",
    "serialize",
    *_types_all,
]
