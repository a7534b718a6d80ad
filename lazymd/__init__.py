"""Public package surface for lazymd.

Exports ``main`` for programmatic CLI invocation.
Parsing, layout and navigation live in the ``markdown``, ``layout`` and
``runtime`` sub-packages.
"""

from __future__ import annotations


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)


__all__ = ["main"]
