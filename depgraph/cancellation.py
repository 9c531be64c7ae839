"""Cooperative cancellation for long-running analyses."""

from __future__ import annotations

import threading


class AnalysisCancelled(Exception):
    """Raised when an analysis is aborted through its cancellation token.

    Callers should treat this as distinct from both success and failure:
    no graph is produced and no error should be shown to the user.
    """

    def __init__(self, message: str = "Analysis cancelled"):
        super().__init__(message)


class CancellationToken:
    """Thread-safe cancellation flag checked between analysis phases."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise AnalysisCancelled()


def check_cancelled(token: CancellationToken | None) -> None:
    """Raise ``AnalysisCancelled`` if *token* was cancelled; ``None`` never cancels."""
    if token is not None:
        token.raise_if_cancelled()
