"""Pygments tokenization of fenced code blocks.

Layout only records the token type name for each fragment; the painter turns
token names into colors using the configured Pygments style.
"""

from __future__ import annotations

from functools import lru_cache

from pygments.lexer import Lexer
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound


@lru_cache(maxsize=64)
def lexer_for_language(language: str) -> Lexer | None:
    """Return a cached lexer for a fence info tag, or ``None`` when unknown."""
    name = language.strip().lower()
    if not name:
        return None
    try:
        return get_lexer_by_name(name, stripnl=False, ensurenl=False)
    except ClassNotFound:
        return None


def tokenize_code_lines(lines: tuple[str, ...], language: str) -> list[list[tuple[str, str | None]]]:
    """Split code into per-line ``(text, token_name)`` fragments.

    Unknown languages yield one untyped fragment per line. The result always
    has exactly ``len(lines)`` entries.
    """
    lexer = lexer_for_language(language)
    if lexer is None:
        return [[(line, None)] if line else [] for line in lines]

    out: list[list[tuple[str, str | None]]] = [[]]
    for token_type, value in lexer.get_tokens("\n".join(lines)):
        name = str(token_type)
        for index, part in enumerate(value.split("\n")):
            if index:
                out.append([])
            if part:
                out[-1].append((part, name))

    while len(out) < len(lines):
        out.append([])
    return out[: len(lines)]
