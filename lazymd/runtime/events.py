"""Input events consumed by the navigator."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class KeyPress:
    """One decoded key token, e.g. ``"j"``, ``"ENTER"`` or ``"CTRL_C"``."""

    token: str


@dataclass(frozen=True)
class Resize:
    width: int
    height: int


Event = KeyPress | Resize

__all__ = ["Event", "KeyPress", "Resize"]
