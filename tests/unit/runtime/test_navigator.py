"""Navigator state-machine tests against an in-memory file provider.

Covers file-tree entry, link following, the back-stack, search modes,
scroll bounds, resize and latest-request-wins background loading.
"""

from __future__ import annotations

import unittest
from pathlib import Path

from lazymd.errors import FileNotFound
from lazymd.runtime.events import KeyPress, Resize
from lazymd.runtime.files import DirEntry
from lazymd.runtime.loader import LoadRequest, LoadResult, load_document
from lazymd.runtime.navigation import Location
from lazymd.runtime.navigator import Navigator, centered_scroll_start
from lazymd.runtime.state import Highlight, Mode

ROOT = Path("/lazymd-virtual/docs")

A_TEXT = "# A\n\n[to b](b.md)\n\n" + "\n\n".join(f"para {i}" for i in range(30)) + "\n"
B_TEXT = "# B\n\n" + "\n\n".join(f"item {i}" for i in range(20)) + "\n\n## Setup\n\ndone\n"

FILES = {
    ROOT / "a.md": A_TEXT,
    ROOT / "b.md": B_TEXT,
    ROOT / "c.md": "[setup](b.md#setup) [broken](b.md#nope)\n",
    ROOT / "t.md": "# Title\n\nSee [link](other.md).\n",
    ROOT / "x.md": "[site](https://example.org) [here](#nowhere)\n",
}


class MemoryProvider:
    def __init__(self, files: dict[Path, str]) -> None:
        self.files = dict(files)
        self.reads: list[Path] = []

    def read(self, path: Path) -> str:
        self.reads.append(path)
        try:
            return self.files[path]
        except KeyError:
            raise FileNotFound(path) from None

    def list_directory(self, path: Path) -> list[DirEntry]:
        children: dict[str, bool] = {}
        for file in self.files:
            try:
                parts = file.relative_to(path).parts
            except ValueError:
                continue
            if len(parts) > 1:
                children[parts[0]] = True
            else:
                children.setdefault(parts[0], False)
        if not children:
            raise FileNotFound(path)
        entries = [DirEntry(name, is_dir) for name, is_dir in children.items()]
        return sorted(entries, key=lambda entry: (not entry.is_directory, entry.name.lower()))


class FakeScheduler:
    def __init__(self) -> None:
        self.requests: list[LoadRequest] = []
        self.ready: list[LoadResult] = []

    def schedule(self, path: Path, width: int) -> int:
        request = LoadRequest(request_id=len(self.requests) + 1, path=path, width=width)
        self.requests.append(request)
        return request.request_id

    def drain_results(self) -> list[LoadResult]:
        ready, self.ready = self.ready, []
        return ready


def press(navigator: Navigator, *tokens: str):
    outcome = None
    for token in tokens:
        outcome = navigator.handle(KeyPress(token))
    return outcome


class NavigatorTestCase(unittest.TestCase):
    def make(self, width: int = 40, height: int = 10, **kwargs) -> Navigator:
        self.provider = MemoryProvider(FILES)
        self.painted = []
        return Navigator(self.provider, ROOT, width, height, paint=self.painted.append, **kwargs)


class StartupAndFileTreeTests(NavigatorTestCase):
    def test_start_without_file_shows_markdown_tree(self) -> None:
        navigator = self.make()
        navigator.start()

        frame = navigator.frame()
        self.assertIs(navigator.state.mode, Mode.FILE_TREE)
        self.assertEqual(frame.tree_rows, ("a.md", "b.md", "c.md", "t.md", "x.md"))
        self.assertEqual(frame.tree_cursor_row, 0)
        self.assertEqual(len(self.painted), 1)

    def test_start_with_missing_file_falls_back_to_tree_with_message(self) -> None:
        navigator = self.make()
        outcome = navigator.start(ROOT / "missing.md")

        self.assertIs(navigator.state.mode, Mode.FILE_TREE)
        self.assertIn("no such file", outcome.message)
        self.assertIsNone(navigator.state.active_path)

    def test_tree_enter_opens_selected_file(self) -> None:
        navigator = self.make()
        navigator.start()
        press(navigator, "j", "ENTER")

        self.assertIs(navigator.state.mode, Mode.BROWSING)
        self.assertEqual(navigator.state.active_path, ROOT / "b.md")
        self.assertEqual(navigator.state.offset, 0)

    def test_tree_filter_narrows_rows_and_opens_match(self) -> None:
        navigator = self.make()
        navigator.start()
        press(navigator, "/", "t")

        self.assertEqual(navigator.frame().tree_rows, ("t.md",))
        self.assertTrue(navigator.state.tree.filtering)

        press(navigator, "ENTER", "ENTER")

        self.assertEqual(navigator.state.active_path, ROOT / "t.md")

    def test_tree_filter_escape_clears_query(self) -> None:
        navigator = self.make()
        navigator.start()
        press(navigator, "/", "z", "z", "ESC")

        self.assertEqual(navigator.state.tree.query, "")
        self.assertEqual(len(navigator.frame().tree_rows), 5)

    def test_tree_escape_returns_to_document_and_offset(self) -> None:
        navigator = self.make()
        navigator.start(ROOT / "a.md")
        press(navigator, "j", "j", "j", "t")

        self.assertIs(navigator.state.mode, Mode.FILE_TREE)
        self.assertEqual(navigator.frame().tree_cursor_row, 0)

        press(navigator, "ESC")

        self.assertIs(navigator.state.mode, Mode.BROWSING)
        self.assertEqual(navigator.state.offset, 3)
        self.assertEqual(len(navigator.state.back_stack), 0)

    def test_tree_open_other_file_then_back_restores_offset(self) -> None:
        navigator = self.make()
        navigator.start(ROOT / "a.md")
        press(navigator, "j", "j", "j", "t", "j", "ENTER")

        self.assertEqual(navigator.state.active_path, ROOT / "b.md")
        self.assertEqual(navigator.state.back_stack.entries, [Location(ROOT / "a.md", 3)])

        press(navigator, "b")

        self.assertEqual(navigator.state.active_path, ROOT / "a.md")
        self.assertEqual(navigator.state.offset, 3)

    def test_tree_rescan_reports_file_count(self) -> None:
        navigator = self.make()
        navigator.start()
        outcome = press(navigator, "r")
        self.assertEqual(outcome.message, "5 markdown files")

    def test_ignored_paths_are_left_out_of_tree(self) -> None:
        navigator = self.make(is_ignored=lambda path: path.name in {"c.md", "x.md"})
        navigator.start()

        self.assertEqual(navigator.frame().tree_rows, ("a.md", "b.md", "t.md"))


class LinkNavigationTests(NavigatorTestCase):
    def test_follow_link_then_go_back(self) -> None:
        navigator = self.make()
        navigator.start()
        press(navigator, "ENTER")
        self.assertEqual(navigator.state.active_path, ROOT / "a.md")

        press(navigator, "j", "j", "f")
        self.assertIs(navigator.state.mode, Mode.LINK_SELECT)
        self.assertEqual(navigator.frame().selected_link_id, 0)

        press(navigator, "ENTER")
        self.assertEqual(navigator.state.active_path, ROOT / "b.md")
        self.assertEqual(navigator.state.offset, 0)
        self.assertIs(navigator.state.mode, Mode.BROWSING)
        self.assertEqual(navigator.state.back_stack.entries, [Location(ROOT / "a.md", 2)])

        press(navigator, "b")
        self.assertEqual(navigator.state.active_path, ROOT / "a.md")
        self.assertEqual(navigator.state.offset, 2)
        self.assertEqual(len(navigator.state.back_stack), 0)

    def test_link_with_heading_fragment_scrolls_to_heading(self) -> None:
        navigator = self.make()
        navigator.start(ROOT / "c.md")
        press(navigator, "f", "ENTER")

        self.assertEqual(navigator.state.active_path, ROOT / "b.md")
        self.assertEqual(navigator.state.offset, navigator.state.max_offset)
        self.assertIsNone(navigator.state.message)

    def test_dangling_fragment_opens_file_at_top_with_notice(self) -> None:
        navigator = self.make()
        navigator.start(ROOT / "c.md")
        outcome = press(navigator, "f", "n", "ENTER")

        self.assertEqual(navigator.state.active_path, ROOT / "b.md")
        self.assertEqual(navigator.state.offset, 0)
        self.assertEqual(outcome.message, "b.md: no heading matching 'nope'")

    def test_external_link_is_reported_not_followed(self) -> None:
        navigator = self.make()
        navigator.start(ROOT / "x.md")
        outcome = press(navigator, "f", "ENTER")

        self.assertEqual(outcome.external_target, "https://example.org")
        self.assertEqual(outcome.message, "external link: https://example.org")
        self.assertEqual(navigator.state.active_path, ROOT / "x.md")

    def test_dangling_in_document_anchor_keeps_view(self) -> None:
        navigator = self.make()
        navigator.start(ROOT / "x.md")
        outcome = press(navigator, "f", "n", "ENTER")

        self.assertIs(navigator.state.mode, Mode.BROWSING)
        self.assertEqual(outcome.message, "no heading matching 'nowhere'")

    def test_link_select_escape_returns_to_browsing(self) -> None:
        navigator = self.make()
        navigator.start(ROOT / "c.md")
        press(navigator, "f", "ESC")

        self.assertIs(navigator.state.mode, Mode.BROWSING)
        self.assertIsNone(navigator.frame().selected_link_id)

    def test_document_without_links_stays_in_browsing(self) -> None:
        provider = MemoryProvider({ROOT / "plain.md": "no links here\n"})
        navigator = Navigator(provider, ROOT, 40, 10)
        navigator.start(ROOT / "plain.md")

        outcome = press(navigator, "f")

        self.assertIs(navigator.state.mode, Mode.BROWSING)
        self.assertEqual(outcome.message, "no links in this document")

    def test_back_without_history_opens_file_tree(self) -> None:
        navigator = self.make()
        navigator.start(ROOT / "a.md")
        press(navigator, "b")
        self.assertIs(navigator.state.mode, Mode.FILE_TREE)


class SearchTests(NavigatorTestCase):
    def test_confirmed_search_enters_results_mode(self) -> None:
        navigator = self.make(width=20)
        navigator.start(ROOT / "t.md")
        press(navigator, "/", "l", "i", "n", "k", "ENTER")

        state = navigator.state
        self.assertIs(state.mode, Mode.SEARCH_RESULTS)
        self.assertEqual(state.matches, [(2, 4, 8)])
        self.assertEqual(state.match_index, 0)
        self.assertEqual(state.offset, 0)
        self.assertEqual(navigator.frame().highlights, (Highlight(2, 4, 8, True),))
        self.assertEqual(navigator.frame().match_position, (1, 1))

    def test_escape_hides_highlights_and_n_resumes(self) -> None:
        navigator = self.make(width=20)
        navigator.start(ROOT / "t.md")
        press(navigator, "/", "s", "e", "e", "ENTER", "ESC")

        self.assertIs(navigator.state.mode, Mode.BROWSING)
        self.assertEqual(navigator.frame().highlights, ())

        press(navigator, "n")
        self.assertIs(navigator.state.mode, Mode.SEARCH_RESULTS)

    def test_no_matches_returns_to_browsing_with_message(self) -> None:
        navigator = self.make()
        navigator.start(ROOT / "t.md")
        outcome = press(navigator, "/", "z", "q", "ENTER")

        self.assertIs(navigator.state.mode, Mode.BROWSING)
        self.assertFalse(outcome.quit)
        self.assertEqual(outcome.message, "no matches for 'zq'")

    def test_search_backspace_and_cancel(self) -> None:
        navigator = self.make()
        navigator.start(ROOT / "t.md")
        press(navigator, "/", "a", "b", "BACKSPACE")

        self.assertEqual(navigator.frame().query, "a")

        press(navigator, "ESC")
        self.assertIs(navigator.state.mode, Mode.BROWSING)

    def test_stepping_matches_wraps_and_reveals_line(self) -> None:
        navigator = self.make()
        navigator.start(ROOT / "a.md")
        press(navigator, "/", "p", "a", "r", "a", " ", "2", "9", "ENTER")

        state = navigator.state
        self.assertEqual(len(state.matches), 1)
        self.assertEqual(state.matches[0].line, 62)
        self.assertLessEqual(state.offset, 62)
        self.assertGreater(state.offset + state.height, 62)

        press(navigator, "n")
        self.assertEqual(state.match_index, 0)


class ScrollAndResizeTests(NavigatorTestCase):
    def test_scroll_stays_within_bounds(self) -> None:
        navigator = self.make()
        navigator.start(ROOT / "a.md")
        state = navigator.state
        self.assertEqual(len(state.lines), 63)

        press(navigator, "G")
        self.assertEqual(state.offset, 53)
        press(navigator, "j", "PAGE_DOWN")
        self.assertEqual(state.offset, 53)
        press(navigator, "g", "k", "PAGE_UP")
        self.assertEqual(state.offset, 0)
        press(navigator, "d")
        self.assertEqual(state.offset, 5)
        press(navigator, " ")
        self.assertEqual(state.offset, 15)

    def test_unchanged_frame_is_not_repainted(self) -> None:
        navigator = self.make()
        navigator.start(ROOT / "a.md")
        self.assertEqual(len(self.painted), 1)

        outcome = press(navigator, "k")
        self.assertFalse(outcome.changed)
        self.assertEqual(len(self.painted), 1)

        outcome = press(navigator, "j")
        self.assertTrue(outcome.changed)
        self.assertEqual(len(self.painted), 2)
        self.assertEqual(self.painted[-1].offset, 1)

    def test_quit_keys(self) -> None:
        navigator = self.make()
        navigator.start(ROOT / "a.md")
        self.assertTrue(press(navigator, "q").quit)
        self.assertTrue(press(navigator, "/", "CTRL_C").quit)

    def test_resize_relayouts_at_new_width(self) -> None:
        navigator = self.make(width=20)
        navigator.start(ROOT / "t.md")

        navigator.handle(Resize(5, 10))

        self.assertEqual(navigator.state.width, 5)
        self.assertEqual([line.text for line in navigator.state.lines], ["Title", "", "See", "link."])

    def test_invalid_resize_is_reported_and_ignored(self) -> None:
        navigator = self.make()
        navigator.start(ROOT / "a.md")

        outcome = navigator.handle(Resize(0, 5))

        self.assertIn("too small", outcome.message)
        self.assertEqual(navigator.state.width, 40)

    def test_taller_viewport_lowers_max_offset(self) -> None:
        navigator = self.make()
        navigator.start(ROOT / "a.md")
        press(navigator, "G")

        navigator.handle(Resize(40, 20))

        self.assertEqual(navigator.state.offset, 43)

    def test_invalid_initial_viewport_raises(self) -> None:
        from lazymd.errors import InvalidViewport

        with self.assertRaises(InvalidViewport):
            Navigator(MemoryProvider(FILES), ROOT, 0, 10)

    def test_centered_scroll_start(self) -> None:
        self.assertEqual(centered_scroll_start(50, 100, 10), 45)
        self.assertEqual(centered_scroll_start(2, 100, 10), 0)
        self.assertEqual(centered_scroll_start(99, 90, 10), 90)


class BackgroundLoadTests(NavigatorTestCase):
    def test_only_latest_request_is_applied(self) -> None:
        scheduler = FakeScheduler()
        navigator = self.make(scheduler=scheduler)
        navigator.start(ROOT / "a.md")

        navigator.open_path(ROOT / "b.md")
        navigator.open_path(ROOT / "c.md")
        self.assertTrue(navigator.loading)

        first, second = scheduler.requests
        scheduler.ready = [
            LoadResult(first, loaded=load_document(self.provider, first.path, 40)),
            LoadResult(second, loaded=load_document(self.provider, second.path, 40)),
        ]
        navigator.poll()

        self.assertEqual(navigator.state.active_path, ROOT / "c.md")
        self.assertFalse(navigator.loading)

    def test_failed_load_keeps_current_document(self) -> None:
        scheduler = FakeScheduler()
        navigator = self.make(scheduler=scheduler)
        navigator.start(ROOT / "a.md")

        navigator.open_path(ROOT / "gone.md")
        (request,) = scheduler.requests
        scheduler.ready = [LoadResult(request, error=FileNotFound(request.path))]
        outcome = navigator.poll()

        self.assertEqual(navigator.state.active_path, ROOT / "a.md")
        self.assertIn("no such file", outcome.message)

    def test_reload_keeps_offset(self) -> None:
        navigator = self.make()
        navigator.start(ROOT / "a.md")
        press(navigator, "j", "j")
        self.provider.files[ROOT / "a.md"] = A_TEXT + "\nextra\n"

        press(navigator, "r")

        self.assertEqual(navigator.state.offset, 2)
        self.assertEqual(navigator.state.lines[-1].text, "extra")

    def test_reload_after_file_shrinks_clamps_offset(self) -> None:
        navigator = self.make()
        navigator.start(ROOT / "a.md")
        press(navigator, *["j"] * 20)
        self.assertEqual(navigator.state.offset, 20)
        self.provider.files[ROOT / "a.md"] = "# A\n\nshort\n"

        press(navigator, "r")

        self.assertEqual(navigator.state.offset, navigator.state.max_offset)
        self.assertEqual(navigator.state.offset, 0)
        self.assertEqual(navigator.state.lines[-1].text, "short")

    def test_failed_reload_keeps_document_and_offset(self) -> None:
        navigator = self.make()
        navigator.start(ROOT / "a.md")
        press(navigator, "j", "j")
        document = navigator.state.document
        del self.provider.files[ROOT / "a.md"]

        outcome = press(navigator, "r")

        self.assertIn("no such file", outcome.message)
        self.assertIs(navigator.state.document, document)
        self.assertEqual(navigator.state.active_path, ROOT / "a.md")
        self.assertEqual(navigator.state.offset, 2)

    def test_reload_during_pending_go_back_keeps_back_entry(self) -> None:
        scheduler = FakeScheduler()
        navigator = self.make(scheduler=scheduler)
        navigator.start(ROOT / "a.md")
        press(navigator, "j", "j", "f", "ENTER")
        (follow,) = scheduler.requests
        scheduler.ready = [LoadResult(follow, loaded=load_document(self.provider, follow.path, 40))]
        navigator.poll()
        self.assertEqual(navigator.state.active_path, ROOT / "b.md")
        self.assertEqual(navigator.state.back_stack.entries, [Location(ROOT / "a.md", 2)])

        press(navigator, "b")
        self.assertEqual(len(navigator.state.back_stack), 0)
        press(navigator, "r")
        _, back, reload = scheduler.requests
        scheduler.ready = [
            LoadResult(back, loaded=load_document(self.provider, back.path, 40)),
            LoadResult(reload, loaded=load_document(self.provider, reload.path, 40)),
        ]
        navigator.poll()

        self.assertEqual(navigator.state.active_path, ROOT / "b.md")
        self.assertEqual(navigator.state.back_stack.entries, [Location(ROOT / "a.md", 2)])
        self.assertFalse(navigator.loading)


if __name__ == "__main__":
    unittest.main()
