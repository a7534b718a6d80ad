"""Display-width and terminal sanitization helper tests."""

from __future__ import annotations

import unittest

from lazymd.ansi import char_display_width, clip_text, sanitize_terminal_text, slice_text


class AnsiHelperTests(unittest.TestCase):
    def test_char_display_width(self) -> None:
        self.assertEqual(char_display_width("a", 0), 1)
        self.assertEqual(char_display_width("界", 0), 2)
        self.assertEqual(char_display_width("\u0301", 0), 0)
        self.assertEqual(char_display_width("\t", 3), 5)

    def test_clip_drops_straddling_wide_character(self) -> None:
        self.assertEqual(clip_text("ab界", 3), "ab")
        self.assertEqual(clip_text("abc", 0), "")

    def test_slice_text_viewport(self) -> None:
        self.assertEqual(slice_text("abcdef", 2, 3), "cde")
        self.assertEqual(slice_text("abc", -1, 2), "ab")

    def test_sanitize_escapes_controls_but_keeps_newlines(self) -> None:
        self.assertEqual(sanitize_terminal_text("a\x1b[2Jb\n"), "a\\x1b[2Jb\n")


if __name__ == "__main__":
    unittest.main()
