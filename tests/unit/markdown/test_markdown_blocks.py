"""Block-level parser tests.

Covers headings, fences, lists, quotes, tables and the paragraph fallback.
"""

from __future__ import annotations

import unittest

from lazymd.markdown import parse
from lazymd.markdown.blocks import MAX_NESTING
from lazymd.markdown.types import (
    ALIGN_LEFT,
    ALIGN_RIGHT,
    BlockQuote,
    CodeBlock,
    Document,
    Heading,
    Link,
    LinkTarget,
    List,
    Paragraph,
    RawHtmlOrUnknown,
    Table,
    Text,
    ThematicBreak,
)


class ParseBlocksTests(unittest.TestCase):
    def test_empty_input_yields_empty_document(self) -> None:
        self.assertEqual(parse(""), Document())
        self.assertEqual(parse("\n\n   \n"), Document())

    def test_heading_and_paragraph_with_file_link(self) -> None:
        document = parse("# Title\n\nSee [link](other.md).\n")

        self.assertEqual(
            document.blocks,
            (
                Heading(1, (Text("Title"),)),
                Paragraph(
                    (
                        Text("See "),
                        Link((Text("link"),), LinkTarget(raw="other.md", kind="file", path="other.md")),
                        Text("."),
                    )
                ),
            ),
        )
        self.assertEqual(document.diagnostics, ())

    def test_closing_hashes_are_dropped_from_heading(self) -> None:
        self.assertEqual(parse("## Setup ##").blocks, (Heading(2, (Text("Setup"),)),))

    def test_setext_headings(self) -> None:
        document = parse("Top\n===\n\nSub\n---\n")
        self.assertEqual(document.blocks, (Heading(1, (Text("Top"),)), Heading(2, (Text("Sub"),))))

    def test_thematic_break_after_blank_line(self) -> None:
        self.assertEqual(parse("a\n\n---\n").blocks, (Paragraph((Text("a"),)), ThematicBreak()))

    def test_fenced_code_keeps_lines_verbatim(self) -> None:
        document = parse("```python\nx = 1\n  y = *2*\n```\n")
        self.assertEqual(document.blocks, (CodeBlock("python", ("x = 1", "  y = *2*")),))

    def test_unterminated_fence_runs_to_end_and_records_diagnostic(self) -> None:
        document = parse("```\nabc\ndef")

        self.assertEqual(document.blocks, (CodeBlock("", ("abc", "def")),))
        self.assertEqual(len(document.diagnostics), 1)
        self.assertEqual(document.diagnostics[0].line, 1)

    def test_indented_code_block(self) -> None:
        self.assertEqual(parse("    code here\n").blocks, (CodeBlock("", ("code here",)),))

    def test_tight_bullet_list(self) -> None:
        document = parse("- a\n- b\n")
        self.assertEqual(
            document.blocks,
            (List(ordered=False, items=((Paragraph((Text("a"),)),), (Paragraph((Text("b"),)),))),),
        )

    def test_loose_ordered_list_keeps_start_number(self) -> None:
        block = parse("3. x\n\n4. y\n").blocks[0]

        self.assertIsInstance(block, List)
        self.assertTrue(block.ordered)
        self.assertTrue(block.loose)
        self.assertEqual(block.start, 3)
        self.assertEqual(len(block.items), 2)

    def test_nested_list_is_part_of_parent_item(self) -> None:
        block = parse("- a\n  - b\n").blocks[0]

        self.assertEqual(len(block.items), 1)
        first_item = block.items[0]
        self.assertEqual(first_item[0], Paragraph((Text("a"),)))
        self.assertEqual(first_item[1], List(ordered=False, items=((Paragraph((Text("b"),)),),)))

    def test_different_bullet_markers_start_new_list(self) -> None:
        blocks = parse("- a\n* b\n").blocks
        self.assertEqual(len(blocks), 2)
        self.assertTrue(all(isinstance(block, List) for block in blocks))

    def test_block_quote_recurses_into_blocks(self) -> None:
        self.assertEqual(
            parse("> hello\n> world\n").blocks,
            (BlockQuote((Paragraph((Text("hello world"),)),)),),
        )

    def test_table_with_alignment(self) -> None:
        block = parse("| a | b |\n|:--|--:|\n| 1 | 2 |\n").blocks[0]

        self.assertEqual(
            block,
            Table(
                header=((Text("a"),), (Text("b"),)),
                alignments=(ALIGN_LEFT, ALIGN_RIGHT),
                rows=(((Text("1"),), (Text("2"),)),),
            ),
        )

    def test_short_table_row_is_padded_with_empty_cells(self) -> None:
        block = parse("| a | b |\n| --- | --- |\n| only |\n").blocks[0]
        self.assertEqual(block.rows, (((Text("only"),), ()),))

    def test_html_block_is_kept_raw(self) -> None:
        self.assertEqual(parse("<div>\nx\n</div>\n").blocks, (RawHtmlOrUnknown("<div>\nx\n</div>"),))

    def test_backslash_at_line_end_is_a_hard_break(self) -> None:
        self.assertEqual(parse("a\\\nb\n").blocks, (Paragraph((Text("a\nb"),)),))

    def test_soft_line_breaks_join_with_space(self) -> None:
        self.assertEqual(parse("one\ntwo\n").blocks, (Paragraph((Text("one two"),)),))

    def test_deep_quote_nesting_is_capped_and_kept_as_text(self) -> None:
        document = parse(">" * 1000 + " x\n")

        levels = 0
        blocks = document.blocks
        while isinstance(blocks[0], BlockQuote):
            levels += 1
            blocks = blocks[0].blocks
        self.assertEqual(levels, MAX_NESTING + 1)
        self.assertEqual(blocks, (Paragraph((Text(">" * (1000 - levels) + " x"),)),))
        self.assertTrue(any("nesting deeper" in note.message for note in document.diagnostics))

    def test_deep_list_nesting_does_not_exhaust_the_stack(self) -> None:
        text = "".join("  " * level + "- x\n" for level in range(600))

        document = parse(text)

        self.assertIsInstance(document.blocks[0], List)
        self.assertTrue(any("nesting deeper" in note.message for note in document.diagnostics))

    def test_crlf_line_endings(self) -> None:
        self.assertEqual(parse("# A\r\n\r\nb\r\n"), parse("# A\n\nb\n"))

    def test_unclosed_emphasis_is_literal_with_diagnostic(self) -> None:
        document = parse("a *b\n")

        self.assertEqual(document.blocks, (Paragraph((Text("a *b"),)),))
        self.assertEqual(len(document.diagnostics), 1)


if __name__ == "__main__":
    unittest.main()
