"""Canonical writer tests: serialized output parses back to the same structure."""

from __future__ import annotations

import unittest

from lazymd.markdown import parse, serialize
from lazymd.markdown.types import Document, Paragraph, Text

SAMPLE = """# Title

Some *emphasis*, **strong** and `code` with [a link](other.md#part).

- one
- two

1. first
2. second

> quoted text

```python
print("hi")
```

| a | b |
| --- | ---: |
| 1 | 2 |

---
"""


class SerializeTests(unittest.TestCase):
    def test_sample_document_reparses_to_same_structure(self) -> None:
        document = parse(SAMPLE)
        self.assertEqual(parse(serialize(document)), document)

    def test_empty_document_serializes_to_empty_string(self) -> None:
        self.assertEqual(serialize(Document()), "")

    def test_heading_serializes_canonically(self) -> None:
        self.assertEqual(serialize(parse("Title\n=====\n")), "# Title\n")

    def test_special_characters_in_text_are_escaped(self) -> None:
        document = Document(blocks=(Paragraph((Text("2 * 3 [x]"),)),))

        text = serialize(document)

        self.assertEqual(text, "2 \\* 3 \\[x\\]\n")
        self.assertEqual(parse(text), document)

    def test_paragraph_that_looks_like_a_list_is_escaped(self) -> None:
        document = Document(blocks=(Paragraph((Text("- not a list"),)),))
        self.assertEqual(parse(serialize(document)), document)

    def test_adjacent_lists_stay_separate(self) -> None:
        document = parse("- a\n\n1. b\n\n* c\n")
        self.assertEqual(len(document.blocks), 3)
        self.assertEqual(parse(serialize(document)), document)

    def test_mixed_delimiters_and_hard_breaks_reparse_to_same_blocks(self) -> None:
        cases = [
            "***z***a",
            "**y***x*",
            "a *b* _c_ d",
            "x__y__ *_z_*",
            "*a* b",
            "_a_ b",
            "x\\\n*y* z",
            "**a** and *b*",
            "[a](u_v)",
            "y  \n**\n=\n",
            "x\\\n**y**\n=",
            "a  \n\\- b",
        ]
        for text in cases:
            with self.subTest(text=text):
                document = parse(text)
                self.assertEqual(parse(serialize(document)).blocks, document.blocks)

    def test_heading_with_hard_break_uses_underline_form(self) -> None:
        self.assertEqual(serialize(parse("x\\\n**y**\n=")), "x\\\n**y**\n===\n")
        self.assertEqual(serialize(parse("a  \nb\n-\n")), "a\\\nb\n---\n")


if __name__ == "__main__":
    unittest.main()
