"""Inline scanner: code spans, strong/emphasis, links, images and plain text.

Scanning is left to right. At each position the scanner tries, in order, a
backslash escape, a backtick code span, an autolink, an image, a link and a
strong/emphasis delimiter run; anything that does not close stays literal.
"""

from __future__ import annotations

import re

from .targets import classify_target
from .types import Code, Emphasis, Image, Link, ParseDegraded, Span, Strong, Text

ESCAPABLE = frozenset("!\"#$%&'()*+,-./:;<=>?@[\\]^_`{|}~")
MAX_LINK_NESTING = 16
_AUTOLINK_RE = re.compile(r"[A-Za-z][A-Za-z0-9+.\-]{1,31}:[^\s<>]*|[^\s<>@]+@[^\s<>@]+\.[^\s<>@]+")


def parse_inline(
    text: str,
    notes: list[ParseDegraded] | None = None,
    line: int = 0,
    link_depth: int = 0,
) -> tuple[Span, ...]:
    """Tokenize one block's text into inline spans.

    Unclosed markers are kept as literal characters; when ``notes`` is given
    a ``ParseDegraded`` entry records each one. Link labels nested deeper
    than ``MAX_LINK_NESTING`` keep their text unparsed.
    """
    spans: list[Span] = []
    buf: list[str] = []

    def flush() -> None:
        if buf:
            _append_text(spans, "".join(buf))
            buf.clear()

    i = 0
    n = len(text)
    while i < n:
        ch = text[i]

        if ch == "\\" and i + 1 < n and text[i + 1] in ESCAPABLE:
            buf.append(text[i + 1])
            i += 2
            continue

        if ch == "`":
            run = _run_length(text, i, "`")
            close = _find_backtick_close(text, i + run, run)
            if close < 0:
                buf.append("`" * run)
                i += run
                continue
            flush()
            spans.append(Code(_strip_code_padding(text[i + run : close])))
            i = close + run
            continue

        if ch == "<":
            end = text.find(">", i + 1)
            if end > i + 1 and _AUTOLINK_RE.fullmatch(text[i + 1 : end]):
                flush()
                url = text[i + 1 : end]
                target = url if ":" in url else f"mailto:{url}"
                spans.append(Link((Text(url),), classify_target(target)))
                i = end + 1
                continue

        if ch == "!" and text.startswith("[", i + 1):
            parsed = _parse_link_form(text, i + 1)
            if parsed is not None:
                label_end, target, end = parsed
                flush()
                spans.append(Image(_unescape(text[i + 2 : label_end]), classify_target(target)))
                i = end
                continue

        if ch == "[":
            parsed = _parse_link_form(text, i)
            if parsed is not None:
                label_end, target, end = parsed
                flush()
                label = text[i + 1 : label_end]
                if link_depth < MAX_LINK_NESTING:
                    children = parse_inline(label, notes, line, link_depth + 1)
                else:
                    if notes is not None:
                        notes.append(ParseDegraded(line, "link label nested too deeply; kept as text"))
                    children = (Text(_unescape(label)),) if label else ()
                spans.append(Link(children, classify_target(target)))
                i = end
                continue

        if ch in "*_":
            run = _run_length(text, i, ch)
            if run >= 2 and _can_open(text, i, run, ch):
                close = _find_delimiter_close(text, i + 2, ch, 2)
                if close >= 0:
                    flush()
                    spans.append(Strong(parse_inline(text[i + 2 : close], notes, line, link_depth)))
                    i = close + 2
                    continue
            if _can_open(text, i, run, ch):
                close = _find_delimiter_close(text, i + 1, ch, 1)
                if close >= 0:
                    flush()
                    spans.append(Emphasis(parse_inline(text[i + 1 : close], notes, line, link_depth)))
                    i = close + 1
                    continue
                if notes is not None:
                    notes.append(ParseDegraded(line, f"unclosed {ch * min(run, 2)!r} marker kept as text"))
            buf.append(ch * run)
            i += run
            continue

        buf.append(ch)
        i += 1

    flush()
    return tuple(spans)


def _append_text(spans: list[Span], text: str) -> None:
    if spans and isinstance(spans[-1], Text):
        spans[-1] = Text(spans[-1].text + text)
    else:
        spans.append(Text(text))


def _run_length(text: str, start: int, ch: str) -> int:
    end = start
    while end < len(text) and text[end] == ch:
        end += 1
    return end - start


def _find_backtick_close(text: str, start: int, run: int) -> int:
    """Return the index of a backtick run of exactly ``run`` chars, or -1."""
    i = start
    while i < len(text):
        if text[i] != "`":
            i += 1
            continue
        length = _run_length(text, i, "`")
        if length == run:
            return i
        i += length
    return -1


def _strip_code_padding(content: str) -> str:
    if len(content) >= 2 and content[0] == " " and content[-1] == " " and content.strip(" "):
        return content[1:-1]
    return content


def _skip_code_span(text: str, i: int) -> int:
    """Return the index just past a code span starting at ``i`` (or ``i + run``)."""
    run = _run_length(text, i, "`")
    close = _find_backtick_close(text, i + run, run)
    if close < 0:
        return i + run
    return close + run


def _find_label_end(text: str, start: int) -> int:
    """Find the ``]`` matching the ``[`` at ``start``; nested brackets count."""
    depth = 0
    i = start
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == "`":
            i = _skip_code_span(text, i)
            continue
        if ch == "[":
            depth += 1
        elif ch == "]":
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return -1


def _parse_link_form(text: str, start: int) -> tuple[int, str, int] | None:
    """Parse ``[label](target)`` at ``start``.

    Returns ``(label_end, target, end)`` where ``end`` is one past ``)``.
    An optional quoted title after the destination is dropped.
    """
    label_end = _find_label_end(text, start)
    if label_end < 0 or not text.startswith("(", label_end + 1):
        return None

    depth = 0
    i = label_end + 1
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                break
        i += 1
    else:
        return None

    destination = text[label_end + 2 : i].strip()
    title_match = re.match(r"^(\S+)\s+(\"[^\"]*\"|'[^']*'|\([^)]*\))$", destination)
    if title_match is not None:
        destination = title_match.group(1)
    return label_end, _unescape(destination), i + 1


def _can_open(text: str, i: int, run: int, ch: str) -> bool:
    after = i + run
    if after >= len(text) or text[after].isspace():
        return False
    if ch == "_" and i > 0 and text[i - 1].isalnum():
        return False
    return True


def _can_close(text: str, j: int, run: int, ch: str) -> bool:
    if j == 0 or text[j - 1].isspace():
        return False
    after = j + run
    if ch == "_" and after < len(text) and text[after].isalnum():
        return False
    return True


def _find_delimiter_close(text: str, start: int, ch: str, count: int) -> int:
    """Find where a ``count``-long closing delimiter of ``ch`` begins.

    Code spans and escapes are skipped. For single emphasis, a run of exactly
    two is treated as a nested strong pair rather than a closer.
    """
    j = start
    while j < len(text):
        c = text[j]
        if c == "\\":
            j += 2
            continue
        if c == "`":
            j = _skip_code_span(text, j)
            continue
        if c != ch:
            j += 1
            continue
        run = _run_length(text, j, ch)
        usable = run >= count and not (count == 1 and run == 2)
        if usable and j > start and _can_close(text, j, run, ch):
            return j + (run - count)
        j += run
    return -1


def _unescape(text: str) -> str:
    out: list[str] = []
    i = 0
    while i < len(text):
        if text[i] == "\\" and i + 1 < len(text) and text[i + 1] in ESCAPABLE:
            out.append(text[i + 1])
            i += 2
            continue
        out.append(text[i])
        i += 1
    return "".join(out)
