"""Document loading: read + parse + layout, and a background worker that runs it."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from queue import Empty, Queue

from ..errors import LazyMdError
from ..layout import RenderLine, layout
from ..markdown import Document, parse
from .files import FileProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadedDocument:
    """One file's parsed document laid out at ``width``."""

    path: Path
    document: Document
    lines: tuple[RenderLine, ...]
    width: int


def load_document(provider: FileProvider, path: Path, width: int) -> LoadedDocument:
    """Read, parse and lay out ``path``; raises ``LazyMdError`` on failure."""
    text = provider.read(path)
    document = parse(text)
    lines = layout(document, width)
    if document.diagnostics:
        logger.debug("%s: %d parse notes", path, len(document.diagnostics))
    logger.info("loaded %s (%d blocks, %d lines at width %d)", path, len(document.blocks), len(lines), width)
    return LoadedDocument(path=path, document=document, lines=lines, width=width)


@dataclass(frozen=True)
class LoadRequest:
    request_id: int
    path: Path
    width: int


@dataclass(frozen=True)
class LoadResult:
    """Completed load; exactly one of ``loaded`` and ``error`` is set."""

    request: LoadRequest
    loaded: LoadedDocument | None = None
    error: LazyMdError | None = None


class DocumentLoadScheduler:
    """Single-threaded latest-request-wins document loader.

    A request scheduled while another is still pending replaces it; the
    worker only ever runs the newest one next. Callers match results to their
    latest request id and drop the rest.
    """

    def __init__(
        self,
        provider: FileProvider,
        load: Callable[[FileProvider, Path, int], LoadedDocument] = load_document,
        on_result: Callable[[], None] | None = None,
    ) -> None:
        self._provider = provider
        self._load = load
        self._on_result = on_result
        self._lock = threading.Lock()
        self._pending: LoadRequest | None = None
        self._running = False
        self._next_request_id = 1
        self._results: Queue[LoadResult] = Queue()

    def _run(self, request: LoadRequest) -> LoadResult:
        try:
            loaded = self._load(self._provider, request.path, request.width)
        except LazyMdError as exc:
            return LoadResult(request=request, error=exc)
        except Exception as exc:
            logger.exception("unexpected failure loading %s", request.path)
            return LoadResult(request=request, error=LazyMdError(f"{request.path}: {exc}"))
        return LoadResult(request=request, loaded=loaded)

    def _worker(self) -> None:
        while True:
            with self._lock:
                request = self._pending
                self._pending = None
                if request is None:
                    self._running = False
                    return

            self._results.put(self._run(request))
            if self._on_result is not None:
                self._on_result()

    def schedule(self, path: Path, width: int) -> int:
        """Queue/replace pending load work and return its request id."""
        with self._lock:
            request_id = self._next_request_id
            self._next_request_id += 1
            self._pending = LoadRequest(request_id=request_id, path=path, width=width)
            if self._running:
                return request_id
            self._running = True

        worker = threading.Thread(
            target=self._worker,
            name="lazymd-document-loader",
            daemon=True,
        )
        worker.start()
        return request_id

    def drain_results(self) -> list[LoadResult]:
        """Drain all completed load results."""
        out: list[LoadResult] = []
        while True:
            try:
                out.append(self._results.get_nowait())
            except Empty:
                break
        return out


__all__ = [
    "DocumentLoadScheduler",
    "LoadRequest",
    "LoadResult",
    "LoadedDocument",
    "load_document",
]
