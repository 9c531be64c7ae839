"""In-memory analysis sessions for the web API, kept per workspace."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from depgraph.cancellation import AnalysisCancelled, CancellationToken
from depgraph.models import DependencyGraph


@dataclass
class AnalysisSession:
    workspace: str
    filter_pattern: str | None = None
    token: CancellationToken = field(default_factory=CancellationToken)
    status: str = "running"  # running → ready | cancelled | failed
    graph: DependencyGraph | None = None
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())


class AnalysisManager:
    """Cancel-and-restart bookkeeping, one active analysis per workspace.

    Starting an analysis cancels the one in flight for the same workspace.
    A superseded run raises ``AnalysisCancelled`` and its graph is never
    stored, so readers only ever see the newest completed result.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._active: dict[str, AnalysisSession] = {}
        self._latest: dict[str, AnalysisSession] = {}

    def begin(self, workspace: str, filter_pattern: str | None = None) -> AnalysisSession:
        session = AnalysisSession(workspace=workspace, filter_pattern=filter_pattern)
        with self._lock:
            previous = self._active.get(workspace)
            if previous is not None:
                previous.token.cancel()
                previous.status = "cancelled"
            self._active[workspace] = session
        return session

    def run(
        self,
        session: AnalysisSession,
        analyze: Callable[[CancellationToken], DependencyGraph],
    ) -> DependencyGraph:
        try:
            graph = analyze(session.token)
        except AnalysisCancelled:
            session.status = "cancelled"
            self._finish(session)
            raise
        except Exception:
            session.status = "failed"
            self._finish(session)
            raise

        # Check and publish under one lock
        with self._lock:
            current = (
                self._active.get(session.workspace) is session
                and not session.token.is_cancelled
            )
            if current:
                session.graph = graph
                session.status = "ready"
                self._latest[session.workspace] = session

        if not current:
            session.status = "cancelled"
            self._finish(session)
            raise AnalysisCancelled()

        self._finish(session)
        return graph

    def latest(self, workspace: str) -> AnalysisSession | None:
        with self._lock:
            return self._latest.get(workspace)

    def active(self, workspace: str) -> AnalysisSession | None:
        with self._lock:
            return self._active.get(workspace)

    def clear(self) -> None:
        with self._lock:
            for session in self._active.values():
                session.token.cancel()
            self._active.clear()
            self._latest.clear()

    def _finish(self, session: AnalysisSession) -> None:
        with self._lock:
            if self._active.get(session.workspace) is session:
                del self._active[session.workspace]


# Module-level singleton — the router imports this
state = AnalysisManager()
