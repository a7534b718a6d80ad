"""Table layout: column sizing, cell wrapping, alignment and borders."""

from __future__ import annotations

from ..markdown.types import ALIGN_CENTER, ALIGN_RIGHT, Table
from .types import RenderLine, Segment, Style
from .wrap import LineBuilder, LinkCounter, Run, flatten_spans, len_prefix, wrap_runs

CELL_SEPARATOR = " │ "
RULE_SEPARATOR = "─┼─"
_UNBOUNDED = 1 << 30

HEADER_STYLE = Style(bold=True)
BORDER_STYLE = Style(table_border=True)


def column_widths(natural: list[int], available: int) -> list[int]:
    """Shrink the widest column one step at a time until the table fits.

    Every column keeps at least one column of content; when even that does
    not fit, the minimal widths are returned and rows end up truncated.
    """
    widths = [max(1, width) for width in natural]
    separators = len(CELL_SEPARATOR) * max(0, len(widths) - 1)
    while widths and sum(widths) + separators > available:
        widest = max(widths)
        if widest <= 1:
            break
        widths[widths.index(widest)] -= 1
    return widths


def _natural_width(runs: list[Run]) -> int:
    lines = wrap_runs(runs, _UNBOUNDED)
    return max((line.content_columns for line in lines), default=0)


def _pad(line: RenderLine, width: int, alignment: str) -> tuple[int, int]:
    gap = max(0, width - line.width)
    if alignment == ALIGN_RIGHT:
        return gap, 0
    if alignment == ALIGN_CENTER:
        return gap // 2, gap - gap // 2
    return 0, gap


def layout_table(
    table: Table,
    width: int,
    counter: LinkCounter,
    first_prefix: tuple[Segment, ...] = (),
    rest_prefix: tuple[Segment, ...] = (),
) -> list[RenderLine]:
    columns = len(table.alignments)
    if columns == 0:
        return []

    header_runs = [flatten_spans(cell, counter, HEADER_STYLE) for cell in table.header]
    body_runs = [[flatten_spans(cell, counter) for cell in row] for row in table.rows]

    natural = [0] * columns
    for row in [header_runs, *body_runs]:
        for index, runs in enumerate(row[:columns]):
            natural[index] = max(natural[index], _natural_width(runs))

    available = width - max(len_prefix(first_prefix), len_prefix(rest_prefix))
    widths = column_widths(natural, available)
    total = sum(widths) + len(CELL_SEPARATOR) * (columns - 1)

    out: list[RenderLine] = []

    def prefix_for_next() -> tuple[Segment, ...]:
        return first_prefix if not out else rest_prefix

    def emit_row(row: list[list[Run]]) -> None:
        wrapped = [
            [builder.build() for builder in wrap_runs(row[index] if index < len(row) else [], widths[index])]
            for index in range(columns)
        ]
        height = max(len(cell_lines) for cell_lines in wrapped)
        for row_line in range(height):
            builder = LineBuilder(prefix_for_next())
            for index in range(columns):
                if index:
                    builder.append(CELL_SEPARATOR, BORDER_STYLE)
                cell_lines = wrapped[index]
                cell = cell_lines[row_line] if row_line < len(cell_lines) else RenderLine()
                left, right = _pad(cell, widths[index], table.alignments[index])
                builder.append(" " * left)
                builder.extend(cell)
                builder.append(" " * right)
            out.append(builder.build(truncated=builder.column > width))

    emit_row(header_runs)
    rule = LineBuilder(prefix_for_next())
    rule.append(RULE_SEPARATOR.join("─" * w for w in widths), BORDER_STYLE)
    out.append(rule.build(truncated=rule.column > width))
    for row in body_runs:
        emit_row(row)

    if total > available:
        return [RenderLine(line.segments, line.anchors, line.anchor_id, True) for line in out]
    return out
