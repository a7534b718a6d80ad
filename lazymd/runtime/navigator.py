"""Navigator: the mode/scroll/search/back-stack state machine.

One ``Navigator`` owns one ``NavigatorState``. Every input event is handled
to completion by ``handle``; background loads are applied by ``poll``. Both
return a ``NavigatorOutcome`` and call the paint sink when the visible frame
changed.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import unquote

from ..errors import ExternalLinkUnsupported, InvalidViewport, LazyMdError, NoMatches
from ..layout import RenderLine, layout, resolve_heading
from ..markdown import LINK_ANCHOR, LINK_EXTERNAL
from ..search import filter_labels, find, first_match_at_or_after, to_relative_label
from .events import Event, KeyPress, Resize
from .files import FileProvider, collect_markdown_files
from .keys import KeyComboBinding, KeyComboRegistry
from .loader import DocumentLoadScheduler, LoadedDocument, load_document
from .navigation import Location
from .state import FileTreeState, Frame, Highlight, LinkEntry, Mode, NavigatorOutcome, NavigatorState

logger = logging.getLogger(__name__)

HORIZONTAL_STEP = 4

_OPEN = "open"
_RELOAD = "reload"


@dataclass(frozen=True)
class _LoadIntent:
    kind: str
    anchor: str | None = None
    origin: Location | None = None  # pushed on the back-stack once the load succeeds
    restore_offset: int | None = None
    popped: Location | None = None  # pushed back if the load fails


def canonical_path(path: Path) -> Path:
    try:
        return path.resolve()
    except OSError:
        return path.absolute()


def centered_scroll_start(target_line: int, max_start: int, visible_rows: int) -> int:
    """Scroll start that places ``target_line`` in the middle of the viewport."""
    desired = max(0, target_line - visible_rows // 2)
    return max(0, min(desired, max_start))


def collect_links(lines: tuple[RenderLine, ...]) -> list[LinkEntry]:
    """One entry per logical link, in ``link_id`` (document) order."""
    seen: dict[int, LinkEntry] = {}
    for index, line in enumerate(lines):
        for anchor in line.anchors:
            if anchor.link_id not in seen:
                seen[anchor.link_id] = LinkEntry(anchor.link_id, index, anchor.target)
    return [seen[link_id] for link_id in sorted(seen)]


def _is_text_input(token: str) -> bool:
    return len(token) == 1 and token.isprintable()


class Navigator:
    def __init__(
        self,
        provider: FileProvider,
        root: Path,
        width: int,
        height: int,
        *,
        scheduler: DocumentLoadScheduler | None = None,
        paint: Callable[[Frame], None] | None = None,
        is_ignored: Callable[[Path], bool] | None = None,
    ) -> None:
        if width <= 0 or height <= 0:
            raise InvalidViewport(f"viewport {width}x{height} is too small")
        self.provider = provider
        self.scheduler = scheduler
        self.paint = paint
        self.is_ignored = is_ignored
        self.state = NavigatorState(
            mode=Mode.FILE_TREE,
            width=width,
            height=height,
            tree=FileTreeState(root=canonical_path(root)),
        )
        self._pending_intent: _LoadIntent | None = None
        self._last_signature: tuple[object, ...] | None = None
        self._quit = False
        self._external: str | None = None
        self._registries = self._build_registries()
        self._tree_filter_keys = KeyComboRegistry().register_bindings(
            KeyComboBinding(("BACKSPACE",), self._tree_filter_backspace),
            KeyComboBinding(("CTRL_U",), self._tree_filter_clear),
            KeyComboBinding(("ENTER",), self._tree_filter_accept),
            KeyComboBinding(("ESC",), self._tree_filter_cancel),
            KeyComboBinding(("UP",), lambda: self._tree_move(-1)),
            KeyComboBinding(("DOWN",), lambda: self._tree_move(1)),
        )

    def _build_registries(self) -> dict[Mode, KeyComboRegistry]:
        quit_binding = KeyComboBinding(("q",), self._request_quit)
        browsing = KeyComboRegistry().register_bindings(
            KeyComboBinding(("j", "DOWN"), lambda: self._scroll_by(1)),
            KeyComboBinding(("k", "UP"), lambda: self._scroll_by(-1)),
            KeyComboBinding(("d", "CTRL_D"), lambda: self._scroll_by(self._half_page())),
            KeyComboBinding(("u", "CTRL_U"), lambda: self._scroll_by(-self._half_page())),
            KeyComboBinding(("PAGE_DOWN", " "), lambda: self._scroll_by(self.state.height)),
            KeyComboBinding(("PAGE_UP",), lambda: self._scroll_by(-self.state.height)),
            KeyComboBinding(("g", "HOME"), lambda: self._scroll_to(0)),
            KeyComboBinding(("G", "END"), lambda: self._scroll_to(self.state.max_offset)),
            KeyComboBinding(("r",), self.reload),
            KeyComboBinding(("/",), self._enter_search),
            KeyComboBinding(("f", "TAB"), self._enter_link_select),
            KeyComboBinding(("b", "BACKSPACE"), self.go_back),
            KeyComboBinding(("t",), lambda: self._enter_file_tree(push=True)),
            KeyComboBinding(("h", "LEFT"), lambda: self._scroll_horizontal(-HORIZONTAL_STEP)),
            KeyComboBinding(("l", "RIGHT"), lambda: self._scroll_horizontal(HORIZONTAL_STEP)),
            KeyComboBinding(("n",), lambda: self._jump_to_hit(1)),
            KeyComboBinding(("N",), lambda: self._jump_to_hit(-1)),
            quit_binding,
        )
        link_select = KeyComboRegistry().register_bindings(
            KeyComboBinding(("j", "DOWN", "TAB", "n"), lambda: self._cycle_link(1)),
            KeyComboBinding(("k", "UP", "SHIFT_TAB", "N"), lambda: self._cycle_link(-1)),
            KeyComboBinding(("ENTER",), self._confirm_link),
            KeyComboBinding(("ESC", "f"), self._cancel_link_select),
            quit_binding,
        )
        search = KeyComboRegistry().register_bindings(
            KeyComboBinding(("BACKSPACE",), self._search_backspace),
            KeyComboBinding(("CTRL_U",), self._search_clear),
            KeyComboBinding(("ENTER",), self._confirm_search),
            KeyComboBinding(("ESC",), self._cancel_search),
        )
        search_results = KeyComboRegistry().register_bindings(
            KeyComboBinding(("n", "DOWN", "j"), lambda: self._step_match(1)),
            KeyComboBinding(("N", "UP", "k"), lambda: self._step_match(-1)),
            KeyComboBinding(("ESC",), self._leave_search_results),
            KeyComboBinding(("/",), self._enter_search),
            quit_binding,
        )
        file_tree = KeyComboRegistry().register_bindings(
            KeyComboBinding(("j", "DOWN"), lambda: self._tree_move(1)),
            KeyComboBinding(("k", "UP"), lambda: self._tree_move(-1)),
            KeyComboBinding(("g", "HOME"), lambda: self._tree_jump(0)),
            KeyComboBinding(("G", "END"), lambda: self._tree_jump(len(self.state.tree.visible) - 1)),
            KeyComboBinding(("ENTER",), self._tree_open),
            KeyComboBinding(("ESC",), self._tree_escape),
            KeyComboBinding(("/",), self._tree_filter_start),
            KeyComboBinding(("r",), self._tree_rescan),
            quit_binding,
        )
        return {
            Mode.BROWSING: browsing,
            Mode.LINK_SELECT: link_select,
            Mode.SEARCH: search,
            Mode.SEARCH_RESULTS: search_results,
            Mode.FILE_TREE: file_tree,
        }

    # -- entry points -------------------------------------------------

    def start(self, initial_path: Path | None = None) -> NavigatorOutcome:
        """Open ``initial_path`` (synchronously) or show the file tree."""
        if initial_path is not None:
            path = canonical_path(initial_path)
            loaded, error = self._load_now(path)
            self._apply_load(_LoadIntent(_OPEN), path, loaded, error)
            if error is not None:
                message = self.state.message
                self._enter_file_tree(push=False)
                self.state.message = message
        else:
            self._enter_file_tree(push=False)
        return self._finish(force_paint=True)

    def handle(self, event: Event) -> NavigatorOutcome:
        """Process one input event to completion."""
        self._quit = False
        self._external = None
        if isinstance(event, Resize):
            self._resize(event.width, event.height)
        elif isinstance(event, KeyPress):
            self.state.message = None
            self._dispatch_key(event.token)
        return self._finish()

    def poll(self) -> NavigatorOutcome:
        """Apply the completed background load for the latest request, if any."""
        self._quit = False
        self._external = None
        if self.scheduler is None:
            return NavigatorOutcome()
        for result in self.scheduler.drain_results():
            request = result.request
            if request.request_id != self.state.pending_request or self._pending_intent is None:
                logger.debug("dropping stale load result #%d for %s", request.request_id, request.path)
                continue
            intent = self._pending_intent
            self.state.pending_request = None
            self._pending_intent = None
            self.state.message = None
            self._apply_load(intent, request.path, result.loaded, result.error)
        return self._finish()

    @property
    def loading(self) -> bool:
        return self.state.pending_request is not None

    # -- bookkeeping --------------------------------------------------

    def _signature(self) -> tuple[object, ...]:
        s = self.state
        tree = s.tree
        return (
            s.mode,
            s.width,
            s.height,
            s.active_path,
            id(s.lines),
            s.offset,
            s.text_x,
            s.selected_link,
            s.query,
            s.match_index,
            len(s.matches),
            s.message,
            s.pending_request is not None,
            tree.cursor,
            tree.start,
            tree.query,
            tree.filtering,
            len(tree.visible),
        )

    def _finish(self, force_paint: bool = False) -> NavigatorOutcome:
        self._clamp()
        signature = self._signature()
        changed = force_paint or signature != self._last_signature
        self._last_signature = signature
        if changed and not self._quit and self.paint is not None:
            self.paint(self.frame())
        return NavigatorOutcome(
            quit=self._quit,
            changed=changed,
            message=self.state.message,
            external_target=self._external,
        )

    def _clamp(self) -> None:
        s = self.state
        s.offset = max(0, min(s.offset, s.max_offset))
        s.text_x = max(0, min(s.text_x, self._max_text_x()))
        if s.selected_link is not None and s.selected_link >= len(s.links):
            s.selected_link = None
        if not s.matches:
            s.match_index = None
        elif s.match_index is not None:
            s.match_index = max(0, min(s.match_index, len(s.matches) - 1))
        self._clamp_tree()

    def _clamp_tree(self) -> None:
        tree = self.state.tree
        height = self.state.height
        count = len(tree.visible)
        tree.cursor = max(0, min(tree.cursor, count - 1)) if count else 0
        if tree.cursor < tree.start:
            tree.start = tree.cursor
        elif tree.cursor >= tree.start + height:
            tree.start = tree.cursor - height + 1
        tree.start = max(0, min(tree.start, max(0, count - height)))

    def _report(self, error: LazyMdError | str) -> bool:
        self.state.message = str(error)
        return True

    def _request_quit(self) -> bool:
        self._quit = True
        return True

    def _dispatch_key(self, token: str) -> None:
        if token == "CTRL_C":
            self._request_quit()
            return
        mode = self.state.mode
        if mode is Mode.FILE_TREE and self.state.tree.filtering:
            if self._tree_filter_keys.dispatch(token) is None and _is_text_input(token):
                self.state.tree.query += token
                self._apply_tree_filter()
            return
        handled = self._registries[mode].dispatch(token)
        if handled is None and mode is Mode.SEARCH and _is_text_input(token):
            self.state.query += token

    # -- viewport -----------------------------------------------------

    def _half_page(self) -> int:
        return max(1, self.state.height // 2)

    def _scroll_to(self, offset: int) -> bool:
        self.state.offset = max(0, min(offset, self.state.max_offset))
        return True

    def _scroll_by(self, delta: int) -> bool:
        return self._scroll_to(self.state.offset + delta)

    def _reveal_line(self, line: int) -> None:
        s = self.state
        if s.offset <= line < s.offset + s.height:
            return
        s.offset = centered_scroll_start(line, s.max_offset, s.height)

    def _max_text_x(self) -> int:
        widest = max((line.width for line in self.state.lines if line.truncated), default=0)
        return max(0, widest - self.state.width)

    def _scroll_horizontal(self, delta: int) -> bool:
        self.state.text_x = max(0, min(self.state.text_x + delta, self._max_text_x()))
        return True

    def _resize(self, width: int, height: int) -> None:
        s = self.state
        if width <= 0 or height <= 0:
            self._report(InvalidViewport(f"viewport {width}x{height} is too small"))
            return
        width_changed = width != s.width
        s.width = width
        s.height = height
        if width_changed and s.document is not None:
            old_total = len(s.lines)
            lines = layout(s.document, width)
            s.offset = s.offset * len(lines) // max(1, old_total)
            self._install_lines(lines)
            self._refresh_matches()

    def _install_lines(self, lines: tuple[RenderLine, ...]) -> None:
        self.state.lines = lines
        self.state.links = collect_links(lines)

    # -- loading ------------------------------------------------------

    def _load_now(self, path: Path) -> tuple[LoadedDocument | None, LazyMdError | None]:
        try:
            return load_document(self.provider, path, self.state.width), None
        except LazyMdError as exc:
            return None, exc

    def _request_load(self, path: Path, intent: _LoadIntent) -> None:
        if self.scheduler is None:
            loaded, error = self._load_now(path)
            self._apply_load(intent, path, loaded, error)
            return
        superseded = self._pending_intent
        if superseded is not None and superseded.popped is not None and intent.popped is None:
            # A go-back that will never land keeps its entry, unless another go-back passed over it.
            self.state.back_stack.push(superseded.popped)
        self.state.pending_request = self.scheduler.schedule(path, self.state.width)
        self._pending_intent = intent

    def _apply_load(
        self,
        intent: _LoadIntent,
        path: Path,
        loaded: LoadedDocument | None,
        error: LazyMdError | None,
    ) -> None:
        s = self.state
        if error is not None or loaded is None:
            logger.warning("load failed for %s: %s", path, error)
            if intent.popped is not None:
                s.back_stack.push(intent.popped)
            self._report(error if error is not None else f"{path}: load failed")
            return

        lines = loaded.lines
        if loaded.width != s.width:
            lines = layout(loaded.document, s.width)

        if intent.kind == _RELOAD and path == s.active_path:
            s.document = loaded.document
            self._install_lines(lines)
            self._refresh_matches()
            return

        if intent.origin is not None:
            s.back_stack.push(intent.origin)
        s.active_path = path
        s.document = loaded.document
        self._install_lines(lines)
        s.history.visit(path)
        s.back_stack.discard_top(path)
        s.offset = 0
        s.text_x = 0
        s.selected_link = None
        s.matches = []
        s.match_index = None
        s.mode = Mode.BROWSING
        if intent.restore_offset is not None:
            s.offset = intent.restore_offset
        elif intent.anchor:
            line = resolve_heading(lines, intent.anchor)
            if line is None:
                self._report(f"{path.name}: no heading matching {intent.anchor!r}")
            else:
                s.offset = line

    def open_path(
        self,
        path: Path,
        *,
        anchor: str | None = None,
        origin: Location | None = None,
        restore_offset: int | None = None,
        popped: Location | None = None,
    ) -> None:
        intent = _LoadIntent(_OPEN, anchor=anchor, origin=origin, restore_offset=restore_offset, popped=popped)
        self._request_load(canonical_path(path), intent)

    def reload(self) -> bool:
        if self.state.active_path is None:
            return False
        self._request_load(self.state.active_path, _LoadIntent(_RELOAD))
        return True

    def _current_location(self) -> Location | None:
        if self.state.active_path is None:
            return None
        return Location(self.state.active_path, self.state.offset)

    def go_back(self) -> bool:
        s = self.state
        location = s.back_stack.pop(s.active_path)
        if location is not None:
            self.open_path(location.path, restore_offset=location.offset, popped=location)
            return True
        previous = s.history.previous(s.active_path)
        if previous is not None:
            self.open_path(previous)
            return True
        self._enter_file_tree(push=False)
        return True

    # -- search -------------------------------------------------------

    def _enter_search(self) -> bool:
        s = self.state
        s.mode = Mode.SEARCH
        s.query = ""
        s.matches = []
        s.match_index = None
        return True

    def _search_backspace(self) -> bool:
        self.state.query = self.state.query[:-1]
        return True

    def _search_clear(self) -> bool:
        self.state.query = ""
        return True

    def _cancel_search(self) -> bool:
        self.state.mode = Mode.BROWSING
        return True

    def _confirm_search(self) -> bool:
        s = self.state
        matches = find(s.lines, s.query)
        if not matches:
            s.matches = []
            s.match_index = None
            s.mode = Mode.BROWSING
            return self._report(NoMatches(s.query))
        s.matches = matches
        s.match_index = first_match_at_or_after(matches, s.offset)
        s.mode = Mode.SEARCH_RESULTS
        self._reveal_line(matches[s.match_index].line)
        return True

    def _step_match(self, step: int) -> bool:
        s = self.state
        if not s.matches:
            return False
        current = s.match_index if s.match_index is not None else 0
        s.match_index = (current + step) % len(s.matches)
        self._reveal_line(s.matches[s.match_index].line)
        return True

    def _leave_search_results(self) -> bool:
        self.state.mode = Mode.BROWSING
        return True

    def _refresh_matches(self) -> None:
        s = self.state
        if not s.matches:
            return
        s.matches = find(s.lines, s.query)
        if not s.matches:
            s.match_index = None
            if s.mode is Mode.SEARCH_RESULTS:
                s.mode = Mode.BROWSING

    def _jump_to_hit(self, step: int) -> bool:
        s = self.state
        if not s.query:
            return self._report("no previous search")
        if not s.matches:
            s.matches = find(s.lines, s.query)
            s.match_index = None
            if not s.matches:
                return self._report(NoMatches(s.query))
        if s.match_index is None:
            first = first_match_at_or_after(s.matches, s.offset)
            s.match_index = first if step > 0 else (first - 1) % len(s.matches)
        else:
            s.match_index = (s.match_index + step) % len(s.matches)
        s.mode = Mode.SEARCH_RESULTS
        self._reveal_line(s.matches[s.match_index].line)
        return True

    # -- links --------------------------------------------------------

    def _visible_link_ids(self) -> set[int]:
        s = self.state
        return {anchor.link_id for line in s.lines[s.offset : s.offset + s.height] for anchor in line.anchors}

    def _enter_link_select(self) -> bool:
        s = self.state
        if not s.links:
            return self._report("no links in this document")
        visible = self._visible_link_ids()
        s.selected_link = next((index for index, entry in enumerate(s.links) if entry.link_id in visible), None)
        s.mode = Mode.LINK_SELECT
        return True

    def _cycle_link(self, step: int) -> bool:
        s = self.state
        if not s.links:
            return False
        if s.selected_link is None:
            if step > 0:
                s.selected_link = next((i for i, entry in enumerate(s.links) if entry.line >= s.offset), 0)
            else:
                before = [i for i, entry in enumerate(s.links) if entry.line < s.offset]
                s.selected_link = before[-1] if before else len(s.links) - 1
        else:
            s.selected_link = (s.selected_link + step) % len(s.links)
        entry = s.links[s.selected_link]
        if entry.link_id not in self._visible_link_ids():
            self._reveal_line(entry.line)
        return True

    def _cancel_link_select(self) -> bool:
        self.state.mode = Mode.BROWSING
        self.state.selected_link = None
        return True

    def resolve_link_path(self, raw: str) -> Path:
        """Resolve a link path relative to the active file's directory."""
        path = Path(unquote(raw))
        if not path.is_absolute():
            base = self.state.active_path.parent if self.state.active_path is not None else self.state.tree.root
            path = base / path
        return Path(os.path.normpath(path))

    def _jump_to_heading(self, reference: str) -> bool:
        s = self.state
        line = resolve_heading(s.lines, reference)
        s.mode = Mode.BROWSING
        s.selected_link = None
        if line is None:
            return self._report(f"no heading matching {reference!r}")
        return self._scroll_to(line)

    def _confirm_link(self) -> bool:
        s = self.state
        if s.selected_link is None:
            return False
        target = s.links[s.selected_link].target
        if target.kind == LINK_EXTERNAL:
            self._external = target.raw
            return self._report(ExternalLinkUnsupported(target.raw))
        if target.kind == LINK_ANCHOR:
            return self._jump_to_heading(target.anchor or "")

        path = canonical_path(self.resolve_link_path(target.path or ""))
        if path == s.active_path:
            if target.anchor:
                return self._jump_to_heading(target.anchor)
            s.mode = Mode.BROWSING
            s.selected_link = None
            return self._scroll_to(0)
        self.open_path(path, anchor=target.anchor, origin=self._current_location())
        return True

    # -- file tree ----------------------------------------------------

    def _scan_tree(self) -> None:
        tree = self.state.tree
        try:
            paths = collect_markdown_files(self.provider, tree.root, is_ignored=self.is_ignored)
        except LazyMdError as exc:
            logger.warning("cannot list %s: %s", tree.root, exc)
            self._report(exc)
            paths = []
        tree.paths = paths
        tree.labels = [to_relative_label(path, tree.root) for path in paths]
        tree.scanned = True
        self._apply_tree_filter()

    def _apply_tree_filter(self) -> None:
        tree = self.state.tree
        selected = tree.selected_path()
        tree.visible = filter_labels(tree.labels, tree.query)
        tree.cursor = 0
        if selected is not None:
            for row, index in enumerate(tree.visible):
                if tree.paths[index] == selected:
                    tree.cursor = row
                    break
        self._clamp_tree()

    def _select_tree_path(self, path: Path | None) -> None:
        tree = self.state.tree
        if path is None:
            return
        for row, index in enumerate(tree.visible):
            if canonical_path(tree.paths[index]) == path:
                tree.cursor = row
                return

    def _enter_file_tree(self, push: bool) -> bool:
        s = self.state
        if push:
            location = self._current_location()
            if location is not None:
                s.back_stack.push(location)
        s.mode = Mode.FILE_TREE
        s.selected_link = None
        if not s.tree.scanned:
            self._scan_tree()
        self._select_tree_path(s.active_path)
        self._clamp_tree()
        return True

    def _tree_rescan(self) -> bool:
        self._scan_tree()
        if self.state.message is None:
            self._report(f"{len(self.state.tree.paths)} markdown files")
        return True

    def _tree_move(self, delta: int) -> bool:
        return self._tree_jump(self.state.tree.cursor + delta)

    def _tree_jump(self, row: int) -> bool:
        tree = self.state.tree
        if not tree.visible:
            return False
        tree.cursor = max(0, min(row, len(tree.visible) - 1))
        self._clamp_tree()
        return True

    def _tree_open(self) -> bool:
        s = self.state
        path = s.tree.selected_path()
        if path is None:
            return self._report("no markdown files")
        path = canonical_path(path)
        if path == s.active_path:
            return self._tree_escape()
        self.open_path(path, origin=self._current_location())
        return True

    def _tree_escape(self) -> bool:
        s = self.state
        if s.active_path is None:
            return False
        top = s.back_stack.peek()
        if top is not None and top.path == s.active_path:
            s.back_stack.entries.pop()
            s.offset = top.offset
        s.mode = Mode.BROWSING
        return True

    def _tree_filter_start(self) -> bool:
        self.state.tree.filtering = True
        return True

    def _tree_filter_backspace(self) -> bool:
        self.state.tree.query = self.state.tree.query[:-1]
        self._apply_tree_filter()
        return True

    def _tree_filter_clear(self) -> bool:
        self.state.tree.query = ""
        self._apply_tree_filter()
        return True

    def _tree_filter_accept(self) -> bool:
        self.state.tree.filtering = False
        return True

    def _tree_filter_cancel(self) -> bool:
        self.state.tree.filtering = False
        self.state.tree.query = ""
        self._apply_tree_filter()
        return True

    # -- frame --------------------------------------------------------

    def frame(self) -> Frame:
        """Snapshot of what the paint sink should show right now."""
        s = self.state
        visible = s.lines[s.offset : s.offset + s.height]
        highlights: list[Highlight] = []
        if s.mode is Mode.SEARCH_RESULTS:
            for index, match in enumerate(s.matches):
                if s.offset <= match.line < s.offset + s.height:
                    highlights.append(
                        Highlight(
                            row=match.line - s.offset,
                            column_start=match.column_start,
                            column_end=match.column_end,
                            current=index == s.match_index,
                        )
                    )
        match_position = None
        if s.match_index is not None and s.matches:
            match_position = (s.match_index + 1, len(s.matches))
        selected_link_id = None
        if s.mode is Mode.LINK_SELECT and s.selected_link is not None:
            selected_link_id = s.links[s.selected_link].link_id

        tree = s.tree
        tree_rows: tuple[str, ...] = ()
        tree_cursor_row = None
        if s.mode is Mode.FILE_TREE:
            rows = tree.visible[tree.start : tree.start + s.height]
            tree_rows = tuple(tree.labels[index] for index in rows)
            tree_cursor_row = tree.cursor - tree.start if rows else None

        return Frame(
            mode=s.mode,
            width=s.width,
            height=s.height,
            lines=visible,
            offset=s.offset,
            total_lines=len(s.lines),
            text_x=s.text_x,
            path=s.active_path,
            selected_link_id=selected_link_id,
            highlights=tuple(highlights),
            query=s.query,
            match_position=match_position,
            message=s.message,
            tree_rows=tree_rows,
            tree_cursor_row=tree_cursor_row,
            tree_query=tree.query,
            tree_filtering=tree.filtering,
            loading=s.pending_request is not None,
        )


__all__ = ["Navigator", "canonical_path", "centered_scroll_start", "collect_links"]
