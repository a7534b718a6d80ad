"""Layout engine tests: wrapping, prefixes, code truncation and headings."""

from __future__ import annotations

import unittest

from lazymd.errors import InvalidViewport
from lazymd.layout import EMPTY_LINE, heading_index, layout, resolve_heading
from lazymd.markdown import parse
from lazymd.markdown.types import LINK_FILE


def texts(lines) -> list[str]:
    return [line.text for line in lines]


class LayoutTests(unittest.TestCase):
    def test_heading_blank_and_paragraph_with_link_anchor(self) -> None:
        lines = layout(parse("# Title\n\nSee [link](other.md).\n"), 20)

        self.assertEqual(texts(lines), ["Title", "", "See link."])
        self.assertEqual(lines[0].anchor_id, "title")
        self.assertEqual(len(lines[2].anchors), 1)
        anchor = lines[2].anchors[0]
        self.assertEqual((anchor.column_start, anchor.column_end), (4, 8))
        self.assertEqual(anchor.link_id, 0)
        self.assertEqual(anchor.target.kind, LINK_FILE)
        self.assertEqual(lines[0].segments[0].style.heading, 1)

    def test_long_code_line_is_truncated_not_wrapped(self) -> None:
        lines = layout(parse("```\n" + "a" * 25 + "\n```\n"), 20)

        self.assertEqual(len(lines), 1)
        self.assertTrue(lines[0].truncated)
        self.assertEqual(lines[0].text, "a" * 25)

    def test_short_code_lines_are_not_truncated(self) -> None:
        lines = layout(parse("```python\nx = 1\n\ny = 2\n```\n"), 20)

        self.assertEqual(texts(lines), ["x = 1", "", "y = 2"])
        self.assertFalse(any(line.truncated for line in lines))
        self.assertTrue(all(segment.style.code for segment in lines[0].segments))

    def test_every_non_code_line_fits_the_width(self) -> None:
        source = (
            "# A rather long heading that must wrap\n\n"
            "Paragraph text with several words and [a wrapped link](x.md) inside.\n\n"
            "> quoted words that also need wrapping here\n\n"
            "- item one with text\n  - nested item with more text\n"
        )
        for width in (1, 3, 8, 15, 40):
            for line in layout(parse(source), width):
                self.assertLessEqual(line.width, width)

    def test_link_anchors_fit_width_and_do_not_overlap(self) -> None:
        source = "See [one link](a.md) and [another longer link](b.md#x) then [third](#t).\n"
        for width in (4, 9, 20, 80):
            for line in layout(parse(source), width):
                previous_end = 0
                for anchor in line.anchors:
                    self.assertLess(anchor.column_start, anchor.column_end)
                    self.assertLessEqual(anchor.column_end, width)
                    self.assertGreaterEqual(anchor.column_start, previous_end)
                    previous_end = anchor.column_end

    def test_empty_document_has_one_empty_line(self) -> None:
        self.assertEqual(layout(parse(""), 10), (EMPTY_LINE,))

    def test_non_positive_width_raises(self) -> None:
        with self.assertRaises(InvalidViewport):
            layout(parse("x"), 0)
        with self.assertRaises(InvalidViewport):
            layout(parse("x"), -3)

    def test_layout_is_deterministic(self) -> None:
        document = parse("# T\n\ntext [l](a.md)\n")
        self.assertEqual(layout(document, 12), layout(document, 12))

    def test_bullet_and_ordered_lists(self) -> None:
        self.assertEqual(texts(layout(parse("- a\n- b\n"), 20)), ["• a", "• b"])
        self.assertEqual(texts(layout(parse("1. x\n2. y\n"), 20)), ["1. x", "2. y"])

    def test_nested_bullets_change_marker(self) -> None:
        self.assertEqual(texts(layout(parse("- a\n  - b\n"), 20)), ["• a", "  ◦ b"])

    def test_list_continuation_lines_are_indented(self) -> None:
        self.assertEqual(texts(layout(parse("- aaa bbb\n"), 6)), ["• aaa", "  bbb"])

    def test_block_quote_prefix(self) -> None:
        self.assertEqual(texts(layout(parse("> hi there\n"), 20)), ["│ hi there"])

    def test_thematic_break_fills_width(self) -> None:
        self.assertEqual(texts(layout(parse("---\n"), 5)), ["─────"])

    def test_wrapped_link_keeps_one_link_id(self) -> None:
        lines = layout(parse("[aaa bbb](x.md)\n"), 4)

        self.assertEqual(texts(lines), ["aaa", "bbb"])
        self.assertEqual([anchor.link_id for line in lines for anchor in line.anchors], [0, 0])

    def test_image_is_shown_as_labelled_placeholder(self) -> None:
        lines = layout(parse("![logo](logo.png)\n"), 40)

        self.assertEqual(lines[0].text, "[image: logo]")
        self.assertTrue(lines[0].anchors[0].is_image)

    def test_deeply_nested_quotes_lay_out(self) -> None:
        lines = layout(parse(">" * 1000 + " x\n"), 20)

        self.assertTrue(lines)
        self.assertTrue(all(line.text for line in lines))


class HeadingResolutionTests(unittest.TestCase):
    def setUp(self) -> None:
        self.lines = layout(parse("# Intro\n\ntext\n\n## Getting Started\n"), 40)

    def test_heading_index_lists_headings_in_order(self) -> None:
        self.assertEqual(heading_index(self.lines), [("intro", 0), ("getting started", 4)])

    def test_resolve_by_text_or_slug(self) -> None:
        self.assertEqual(resolve_heading(self.lines, "Intro"), 0)
        self.assertEqual(resolve_heading(self.lines, "getting-started"), 4)
        self.assertEqual(resolve_heading(self.lines, "Getting Started"), 4)

    def test_unknown_heading_resolves_to_none(self) -> None:
        self.assertIsNone(resolve_heading(self.lines, "missing"))

    def test_empty_reference_names_no_heading(self) -> None:
        lines = layout(parse("#\n\ntext\n"), 40)

        self.assertEqual(heading_index(lines), [("", 0)])
        self.assertIsNone(resolve_heading(lines, ""))
        self.assertIsNone(resolve_heading(lines, "   "))


if __name__ == "__main__":
    unittest.main()
