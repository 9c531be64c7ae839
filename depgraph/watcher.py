"""Re-analyze a workspace on change: cancel the stale run, start a fresh one."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Callable

from watchfiles import Change, DefaultFilter, watch

from depgraph.cancellation import AnalysisCancelled, CancellationToken
from depgraph.models import DependencyGraph
from depgraph.pipeline import DependencyGraphAnalyzer
from depgraph.scanner.ignore_patterns import DEPGRAPHIGNORE_NAME, GITIGNORE_NAME
from depgraph.scanner.language_map import SOURCE_EXTENSIONS

logger = logging.getLogger(__name__)

GraphCallback = Callable[[DependencyGraph], None]

_TRIGGER_NAMES = {DEPGRAPHIGNORE_NAME, GITIGNORE_NAME, ".depgraph.json"}


def is_relevant_path(path: str) -> bool:
    """Source files and the files that change which sources are analyzed."""
    p = Path(path)
    return p.suffix in SOURCE_EXTENSIONS or p.name in _TRIGGER_NAMES


class SourceFilter(DefaultFilter):
    """watchfiles' default ignores (VCS dirs, node_modules, ...) plus a relevance check."""

    def __call__(self, change: Change, path: str) -> bool:
        return super().__call__(change, path) and is_relevant_path(path)


class DependencyWatcher:
    """Keeps a workspace graph fresh while files change.

    watchfiles groups changes arriving within ``debounce_ms`` into one batch.
    Each batch cancels the analysis in flight and starts a new one; only the
    newest run reports through ``on_graph``.
    """

    def __init__(
        self,
        analyzer: DependencyGraphAnalyzer,
        on_graph: GraphCallback,
        filter_pattern: str | None = None,
        debounce_ms: int = 500,
    ):
        self.analyzer = analyzer
        self.on_graph = on_graph
        self.filter_pattern = filter_pattern
        self.debounce_ms = debounce_ms
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._token: CancellationToken | None = None
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        """Watch in a background thread."""
        self._thread = threading.Thread(target=self.run_forever, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop_event.set()
        with self._lock:
            if self._token is not None:
                self._token.cancel()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=5)
            self._thread = None

    def run_forever(self) -> None:
        """Analyze once, then again after every batch of relevant changes."""
        root = str(self.analyzer.workspace_root)
        logger.info("Watching %s", root)
        self._start_run()
        for changes in watch(
            root,
            watch_filter=SourceFilter(),
            debounce=self.debounce_ms,
            stop_event=self._stop_event,
        ):
            logger.debug("%d change(s), restarting analysis", len(changes))
            self._start_run()

    def _start_run(self) -> None:
        with self._lock:
            if self._token is not None:
                self._token.cancel()
            token = CancellationToken()
            self._token = token
        threading.Thread(target=self.run_once, args=(token,), daemon=True).start()

    def run_once(self, token: CancellationToken) -> DependencyGraph | None:
        try:
            graph = self.analyzer.analyze_workspace(self.filter_pattern, token)
        except AnalysisCancelled:
            logger.debug("Superseded analysis cancelled")
            return None
        except Exception:
            logger.exception("Dependency analysis failed")
            return None

        with self._lock:
            if token is not self._token or token.is_cancelled:
                return None
        self.on_graph(graph)
        return graph
