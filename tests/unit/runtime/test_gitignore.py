"""Gitignore matcher and tree filter tests."""

from __future__ import annotations

import shutil
import subprocess
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from lazymd.runtime import gitignore
from lazymd.runtime.files import FilesystemProvider, collect_markdown_files
from lazymd.runtime.gitignore import GitIgnoreMatcher, get_matcher, gitignore_filter


class GitIgnoreMatcherTests(unittest.TestCase):
    def test_ignored_file_and_paths_under_ignored_directory(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            matcher = GitIgnoreMatcher(
                root=root,
                ignored_files=frozenset({root / "draft.md"}),
                ignored_dirs=frozenset({root / "build"}),
            )

            self.assertTrue(matcher.is_ignored(root / "draft.md"))
            self.assertTrue(matcher.is_ignored(root / "build"))
            self.assertTrue(matcher.is_ignored(root / "build" / "deep" / "x.md"))
            self.assertFalse(matcher.is_ignored(root / "keep.md"))
            self.assertFalse(matcher.is_ignored(root.parent / "elsewhere.md"))


class MatcherCacheTests(unittest.TestCase):
    def setUp(self) -> None:
        patcher = mock.patch.dict(gitignore._MATCHER_CACHE, clear=True)
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_reuses_cached_matcher_within_ttl(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            with mock.patch("lazymd.runtime.gitignore.load_matcher", return_value=mock.sentinel.matcher) as load:
                first = get_matcher(root)
                second = get_matcher(root)

        self.assertIs(first, mock.sentinel.matcher)
        self.assertIs(second, mock.sentinel.matcher)
        self.assertEqual(load.call_count, 1)

    def test_reloads_after_ttl_expiry(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            with mock.patch(
                "lazymd.runtime.gitignore.load_matcher",
                side_effect=[mock.sentinel.first, mock.sentinel.second],
            ) as load, mock.patch(
                "lazymd.runtime.gitignore.time.monotonic",
                side_effect=[100.0, 100.0 + gitignore.MATCHER_CACHE_TTL_SECONDS + 1],
            ):
                first = get_matcher(root)
                second = get_matcher(root)

        self.assertIs(first, mock.sentinel.first)
        self.assertIs(second, mock.sentinel.second)
        self.assertEqual(load.call_count, 2)

    def test_filter_is_false_outside_a_work_tree(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            with mock.patch("lazymd.runtime.gitignore.load_matcher", return_value=None):
                is_ignored = gitignore_filter(root)

                self.assertFalse(is_ignored(root / "a.md"))


@unittest.skipIf(shutil.which("git") is None, "git is not installed")
class GitWorkTreeTests(unittest.TestCase):
    def setUp(self) -> None:
        patcher = mock.patch.dict(gitignore._MATCHER_CACHE, clear=True)
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_tree_scan_skips_gitignored_markdown(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            subprocess.run(["git", "init", "-q", str(root)], check=True)
            (root / ".gitignore").write_text("draft.md\nbuild/\n", encoding="utf-8")
            (root / "build").mkdir()
            (root / "keep.md").write_text("", encoding="utf-8")
            (root / "draft.md").write_text("", encoding="utf-8")
            (root / "build" / "out.md").write_text("", encoding="utf-8")

            files = collect_markdown_files(FilesystemProvider(), root, is_ignored=gitignore_filter(root))

        self.assertEqual(files, [root / "keep.md"])


if __name__ == "__main__":
    unittest.main()
