"""Line-oriented block scanner.

``parse`` splits raw text into lines and classifies them by their leading
tokens. Block quotes and list items strip their prefix and re-run the same
scanner on the de-prefixed lines, so nesting is plain structural recursion
over a line sequence. The scanner never fails: anything it cannot classify
ends up as paragraph text.
"""

from __future__ import annotations

import logging
import re

from .inline import parse_inline
from .types import (
    ALIGN_CENTER,
    ALIGN_LEFT,
    ALIGN_RIGHT,
    Block,
    BlockQuote,
    CodeBlock,
    Document,
    Heading,
    List,
    Paragraph,
    ParseDegraded,
    RawHtmlOrUnknown,
    Table,
    ThematicBreak,
)

logger = logging.getLogger(__name__)

TAB_SIZE = 4
MAX_NESTING = 32

_HEADING_RE = re.compile(r"^ {0,3}(#{1,6})(?:[ \t]+(.*?))?[ \t]*$")
_HEADING_CLOSE_RE = re.compile(r"(?:^|[ \t]+)#+[ \t]*$")
_FENCE_RE = re.compile(r"^( {0,3})(`{3,}|~{3,})[ \t]*([^`]*?)[ \t]*$")
_THEMATIC_RE = re.compile(r"^ {0,3}([-*_])(?:[ \t]*\1){2,}[ \t]*$")
_QUOTE_RE = re.compile(r"^ {0,3}>")
_LIST_ITEM_RE = re.compile(r"^( *)([-*+]|\d{1,9}[.)])(?:( +)(.*))?$")
_SETEXT_RE = re.compile(r"^ {0,3}(=+|-+)[ \t]*$")
_HTML_START_RE = re.compile(r"^ {0,3}<(?:/?[A-Za-z][A-Za-z0-9-]*(?:[\s/>]|$)|!--)")
_TABLE_SEPARATOR_CELL_RE = re.compile(r"^:?-+:?$")


def parse(raw_text: str) -> Document:
    """Parse Markdown text into a ``Document``; total for any input string."""
    lines = _split_lines(raw_text)
    notes: list[ParseDegraded] = []
    blocks = _scan_blocks(lines, list(range(1, len(lines) + 1)), notes, depth=0)
    if notes:
        logger.debug("parsed with %d degraded construct(s)", len(notes))
    return Document(blocks=blocks, diagnostics=tuple(notes))


def _split_lines(raw_text: str) -> list[str]:
    text = raw_text.replace("\r\n", "\n").replace("\r", "\n")
    if text.endswith("\n"):
        text = text[:-1]
    if not text:
        return []
    return [line.expandtabs(TAB_SIZE) for line in text.split("\n")]


def _is_blank(line: str) -> bool:
    return not line.strip()


def _indent(line: str) -> int:
    return len(line) - len(line.lstrip(" "))


def _list_item_match(line: str) -> re.Match[str] | None:
    return _LIST_ITEM_RE.match(line)


def _split_table_row(line: str) -> list[str]:
    """Split a table row on unescaped pipes outside code spans."""
    stripped = line.strip()
    if stripped.startswith("|"):
        stripped = stripped[1:]
    if stripped.endswith("|") and not stripped.endswith("\\|"):
        stripped = stripped[:-1]

    cells: list[str] = []
    current: list[str] = []
    in_code = 0
    i = 0
    while i < len(stripped):
        ch = stripped[i]
        if ch == "\\" and i + 1 < len(stripped):
            current.append(stripped[i : i + 2])
            i += 2
            continue
        if ch == "`":
            run = len(stripped[i:]) - len(stripped[i:].lstrip("`"))
            if in_code == 0:
                in_code = run
            elif in_code == run:
                in_code = 0
            current.append("`" * run)
            i += run
            continue
        if ch == "|" and in_code == 0:
            cells.append("".join(current).strip())
            current = []
            i += 1
            continue
        current.append(ch)
        i += 1
    cells.append("".join(current).strip())
    return cells


def _table_alignments(line: str) -> list[str] | None:
    if "-" not in line:
        return None
    cells = _split_table_row(line)
    alignments: list[str] = []
    for cell in cells:
        if not _TABLE_SEPARATOR_CELL_RE.match(cell):
            return None
        if cell.startswith(":") and cell.endswith(":"):
            alignments.append(ALIGN_CENTER)
        elif cell.endswith(":"):
            alignments.append(ALIGN_RIGHT)
        else:
            alignments.append(ALIGN_LEFT)
    return alignments


def _is_table_start(lines: list[str], i: int) -> bool:
    if "|" not in lines[i] or i + 1 >= len(lines):
        return False
    alignments = _table_alignments(lines[i + 1])
    if alignments is None:
        return False
    if "|" not in lines[i + 1] and len(alignments) < 2:
        return False
    return len(_split_table_row(lines[i])) == len(alignments)


def _starts_block(lines: list[str], i: int) -> bool:
    """Return whether ``lines[i]`` opens a block that interrupts a paragraph."""
    line = lines[i]
    return bool(
        _HEADING_RE.match(line)
        or _FENCE_RE.match(line)
        or _THEMATIC_RE.match(line)
        or _QUOTE_RE.match(line)
        or _list_item_match(line)
        or _HTML_START_RE.match(line)
        or _is_table_start(lines, i)
    )


def _scan_blocks(
    lines: list[str],
    origins: list[int],
    notes: list[ParseDegraded],
    depth: int,
) -> tuple[Block, ...]:
    blocks: list[Block] = []
    i = 0
    n = len(lines)
    while i < n:
        line = lines[i]
        if _is_blank(line):
            i += 1
            continue

        fence = _FENCE_RE.match(line)
        if fence is not None:
            block, i = _scan_fence(lines, origins, i, fence, notes)
            blocks.append(block)
            continue

        if _indent(line) >= 4:
            block, i = _scan_indented_code(lines, i)
            blocks.append(block)
            continue

        heading = _HEADING_RE.match(line)
        if heading is not None:
            content = _HEADING_CLOSE_RE.sub("", heading.group(2) or "")
            blocks.append(Heading(len(heading.group(1)), parse_inline(content.strip(), notes, origins[i])))
            i += 1
            continue

        if _THEMATIC_RE.match(line):
            blocks.append(ThematicBreak())
            i += 1
            continue

        if _QUOTE_RE.match(line):
            block, i = _scan_quote(lines, origins, i, notes, depth)
            blocks.append(block)
            continue

        item = _list_item_match(line)
        if item is not None:
            block, i = _scan_list(lines, origins, i, item, notes, depth)
            blocks.append(block)
            continue

        if _is_table_start(lines, i):
            block, i = _scan_table(lines, origins, i, notes)
            blocks.append(block)
            continue

        if _HTML_START_RE.match(line):
            start = i
            while i < n and not _is_blank(lines[i]):
                i += 1
            blocks.append(RawHtmlOrUnknown("\n".join(lines[start:i])))
            continue

        block, i = _scan_paragraph(lines, origins, i, notes)
        blocks.append(block)
    return tuple(blocks)


def _scan_fence(
    lines: list[str],
    origins: list[int],
    i: int,
    fence: re.Match[str],
    notes: list[ParseDegraded],
) -> tuple[CodeBlock, int]:
    fence_indent = len(fence.group(1))
    marker = fence.group(2)
    info = fence.group(3).strip()
    language = info.split()[0] if info else ""
    close_re = re.compile(rf"^ {{0,3}}{re.escape(marker[0])}{{{len(marker)},}}[ \t]*$")

    body: list[str] = []
    j = i + 1
    while j < len(lines):
        if close_re.match(lines[j]):
            return CodeBlock(language, tuple(body)), j + 1
        content = lines[j]
        strip = min(fence_indent, _indent(content))
        body.append(content[strip:])
        j += 1

    notes.append(ParseDegraded(origins[i], "unterminated code fence runs to end of input"))
    return CodeBlock(language, tuple(body)), j


def _scan_indented_code(lines: list[str], i: int) -> tuple[CodeBlock, int]:
    body: list[str] = []
    j = i
    while j < len(lines) and (_is_blank(lines[j]) or _indent(lines[j]) >= 4):
        body.append(lines[j][4:] if not _is_blank(lines[j]) else "")
        j += 1
    while body and not body[-1]:
        body.pop()
    return CodeBlock("", tuple(body)), j


def _strip_quote_prefix(line: str) -> str:
    stripped = line.lstrip(" ")
    if stripped.startswith(">"):
        stripped = stripped[1:]
        if stripped.startswith(" "):
            stripped = stripped[1:]
    return stripped


def _scan_quote(
    lines: list[str],
    origins: list[int],
    i: int,
    notes: list[ParseDegraded],
    depth: int,
) -> tuple[BlockQuote, int]:
    inner: list[str] = []
    inner_origins: list[int] = []
    j = i
    while j < len(lines) and _QUOTE_RE.match(lines[j]):
        inner.append(_strip_quote_prefix(lines[j]))
        inner_origins.append(origins[j])
        j += 1
    return BlockQuote(_scan_container(inner, inner_origins, notes, depth)), j


def _scan_container(
    lines: list[str],
    origins: list[int],
    notes: list[ParseDegraded],
    depth: int,
) -> tuple[Block, ...]:
    """Scan a quote or list item body one level deeper than ``depth``.

    Past ``MAX_NESTING`` the body is not scanned for blocks; its lines become
    a single paragraph so deeply nested input cannot exhaust the stack.
    """
    if depth < MAX_NESTING:
        return _scan_blocks(lines, origins, notes, depth + 1)
    parts = [line.strip() for line in lines if line.strip()]
    if not parts:
        return ()
    notes.append(ParseDegraded(origins[0], f"nesting deeper than {MAX_NESTING} levels kept as text"))
    return (Paragraph(parse_inline(" ".join(parts), notes, origins[0])),)


def _same_list_kind(first: re.Match[str], other: re.Match[str]) -> bool:
    a = first.group(2)
    b = other.group(2)
    if a[-1] in ".)" and b[-1] in ".)":
        return a[-1] == b[-1]
    return a == b


def _scan_list(
    lines: list[str],
    origins: list[int],
    i: int,
    first: re.Match[str],
    notes: list[ParseDegraded],
    depth: int,
) -> tuple[List, int]:
    marker = first.group(2)
    ordered = marker[-1] in ".)"
    start = int(marker[:-1]) if ordered else 1

    items: list[tuple[Block, ...]] = []
    loose = False
    j = i
    n = len(lines)
    while j < n:
        match = _list_item_match(lines[j])
        if match is None or not _same_list_kind(first, match):
            break

        indent = len(match.group(1))
        spacing = len(match.group(3) or " ")
        if spacing > 4 or match.group(4) is None:
            spacing = 1
        content_col = indent + len(match.group(2)) + spacing

        item_lines = [match.group(4) or ""]
        item_origins = [origins[j]]
        j += 1
        while j < n:
            line = lines[j]
            if _is_blank(line):
                item_lines.append("")
                item_origins.append(origins[j])
                j += 1
                continue
            if _indent(line) >= content_col:
                item_lines.append(line[content_col:])
                item_origins.append(origins[j])
                j += 1
                continue
            if _list_item_match(line) is not None:
                break
            # Lazy continuation of the item's last paragraph line.
            if item_lines[-1].strip() and not _starts_block(lines, j):
                item_lines.append(line.strip())
                item_origins.append(origins[j])
                j += 1
                continue
            break

        trailing_blanks = 0
        while item_lines and not item_lines[-1].strip():
            item_lines.pop()
            item_origins.pop()
            trailing_blanks += 1
        items.append(_scan_container(item_lines, item_origins, notes, depth))

        if j < n:
            following = _list_item_match(lines[j])
            if following is not None and _same_list_kind(first, following):
                if trailing_blanks:
                    loose = True
                continue
        break

    return List(ordered=ordered, items=tuple(items), start=start, loose=loose), j


def _scan_table(
    lines: list[str],
    origins: list[int],
    i: int,
    notes: list[ParseDegraded],
) -> tuple[Table, int]:
    alignments = _table_alignments(lines[i + 1]) or []
    columns = len(alignments)

    def row_cells(index: int) -> tuple:
        raw_cells = _split_table_row(lines[index])
        raw_cells = (raw_cells + [""] * columns)[:columns]
        return tuple(parse_inline(cell, notes, origins[index]) for cell in raw_cells)

    header = row_cells(i)
    rows = []
    j = i + 2
    while j < len(lines) and not _is_blank(lines[j]) and "|" in lines[j]:
        rows.append(row_cells(j))
        j += 1
    return Table(header=header, alignments=tuple(alignments), rows=tuple(rows)), j


def _scan_paragraph(
    lines: list[str],
    origins: list[int],
    i: int,
    notes: list[ParseDegraded],
) -> tuple[Block, int]:
    start = i
    parts: list[str] = [lines[i].strip()]
    j = i + 1
    while j < len(lines):
        line = lines[j]
        if _is_blank(line):
            break
        setext = _SETEXT_RE.match(line)
        if setext is not None:
            level = 1 if setext.group(1).startswith("=") else 2
            text = _join_paragraph_lines(parts, raw_lines=lines[start:j])
            return Heading(level, parse_inline(text, notes, origins[start])), j + 1
        if _starts_block(lines, j):
            break
        parts.append(line.strip())
        j += 1
    text = _join_paragraph_lines(parts, raw_lines=lines[start:j])
    return Paragraph(parse_inline(text, notes, origins[start])), j


def _join_paragraph_lines(parts: list[str], raw_lines: list[str] | None = None) -> str:
    """Join paragraph lines; a trailing backslash or two spaces is a hard break."""
    out: list[str] = []
    for index, part in enumerate(parts):
        if index == len(parts) - 1:
            out.append(part)
            break
        raw = raw_lines[index] if raw_lines is not None else part
        backslashes = len(part) - len(part.rstrip("\\"))
        if backslashes % 2 == 1:
            out.append(part[:-1].rstrip() + "\n")
        elif raw.endswith("  "):
            out.append(part + "\n")
        else:
            out.append(part + " ")
    return "".join(out)
