"""Shared cancellation token checked by every blocking wait in the pipeline."""

from __future__ import annotations

import threading

from translines.core.errors import PipelineCancelled

# Upper bound on how long a blocking queue read may go without re-checking
# the token.
POLL_INTERVAL_SECONDS = 0.05


class CancelToken:
    """Thread-safe, one-way cancellation flag.

    Workers, the rate limiter and the collector all poll the same token, so a
    single :meth:`cancel` call unblocks every thread of a pipeline run.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block up to ``timeout`` seconds; return ``True`` if cancelled."""
        return self._event.wait(timeout)

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise PipelineCancelled("pipeline was cancelled")


__all__ = ["CancelToken", "POLL_INTERVAL_SECONDS"]
