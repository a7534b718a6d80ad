"""Link-target classification and heading-anchor normalization."""

from __future__ import annotations

import re

from .types import LINK_ANCHOR, LINK_EXTERNAL, LINK_FILE, LinkTarget

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")
_WINDOWS_DRIVE_RE = re.compile(r"^[A-Za-z]:[\\/]")
_EXTENSION_RE = re.compile(r"\.[A-Za-z0-9]{1,8}$")
_WHITESPACE_RE = re.compile(r"\s+")
_DASH_RUN_RE = re.compile(r"-{2,}")


def normalize_heading(text: str) -> str:
    """Collapse whitespace and fold case; used as a heading's anchor id."""
    return _WHITESPACE_RE.sub(" ", text).strip().casefold()


def heading_slug(text: str) -> str:
    """Return the GitHub-style slug of a heading (``My Heading!`` -> ``my-heading``)."""
    lowered = _WHITESPACE_RE.sub("-", text.strip().lower())
    kept = "".join(ch for ch in lowered if ch.isalnum() or ch == "-")
    return _DASH_RUN_RE.sub("-", kept).strip("-")


def classify_target(raw: str) -> LinkTarget:
    """Classify a link destination exactly as written in the source.

    URIs with a scheme are external; ``#name`` and bare words point at a
    heading of the same document; anything with a path separator or a file
    extension is a local file, optionally followed by ``#anchor``.
    """
    target = raw.strip()
    if target.startswith("<") and target.endswith(">"):
        target = target[1:-1].strip()

    if not target:
        return LinkTarget(raw=raw, kind=LINK_ANCHOR, anchor="")
    if target.startswith("#"):
        return LinkTarget(raw=raw, kind=LINK_ANCHOR, anchor=target[1:])
    if target.startswith("//") or target.lower().startswith("www."):
        return LinkTarget(raw=raw, kind=LINK_EXTERNAL)
    if _SCHEME_RE.match(target) and not _WINDOWS_DRIVE_RE.match(target):
        if target.lower().startswith("file:"):
            path = target[5:]
            if path.startswith("//"):
                path = path[2:]
            return _file_target(raw, path)
        return LinkTarget(raw=raw, kind=LINK_EXTERNAL)

    path_part = target.split("#", 1)[0]
    if "/" in path_part or "\\" in path_part or _EXTENSION_RE.search(path_part):
        return _file_target(raw, target)
    return LinkTarget(raw=raw, kind=LINK_ANCHOR, anchor=target)


def _file_target(raw: str, target: str) -> LinkTarget:
    path, sep, anchor = target.partition("#")
    if not path:
        return LinkTarget(raw=raw, kind=LINK_ANCHOR, anchor=anchor)
    return LinkTarget(raw=raw, kind=LINK_FILE, path=path, anchor=anchor if sep else None)


def anchor_matches(reference: str, heading_anchor_id: str) -> bool:
    """Return whether an in-document reference names a heading anchor id."""
    if not reference:
        return False
    if normalize_heading(reference) == heading_anchor_id:
        return True
    slug = heading_slug(heading_anchor_id)
    if not slug:
        return False
    return heading_slug(reference) == slug
