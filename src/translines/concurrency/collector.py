"""
Ordered collector: merge out-of-order outcomes with the late-known total.

Two facts arrive asynchronously and in either order:

- outcomes, one per item, in whatever order the workers finish;
- the total item count, known only once the driver has read all its input.

Both are funnelled into a single event queue consumed by one aggregation
thread, which owns the buffer outright (single writer, no lock). The state
machine is::

    Collecting(seen=0, expected=unknown)
        --outcome-->  seen += 1
        --total-->    expected = n
    whenever expected is known and seen == expected  -->  Complete

``Complete`` is terminal: the buffer is sorted by position, frozen into a
tuple and released through :meth:`OrderedCollector.wait`. An empty input
(``set_total(0)`` with nothing published) completes immediately.

Inconsistent input is rejected rather than silently reordered: a repeated
position, a position outside ``[0, total)`` or a second total make
:meth:`OrderedCollector.wait` raise.
"""

from __future__ import annotations

import queue
import threading
from typing import Literal

from translines.concurrency.cancel import POLL_INTERVAL_SECONDS, CancelToken
from translines.core.contracts.work import Outcome
from translines.core.errors import (
    CollectorError,
    DuplicatePositionError,
    PipelineCancelled,
    PositionOutOfRangeError,
)
from translines.core.settings import get_logger

logger = get_logger(__name__)

EventKind = Literal["outcome", "total"]


class OrderedCollector:
    """Gather outcomes and release them sorted once the expected count is met."""

    def __init__(self, cancel: CancelToken | None = None) -> None:
        self._cancel = cancel or CancelToken()
        self._events: queue.Queue[tuple[EventKind, Outcome | int]] = queue.Queue()

        # Owned by the aggregation thread.
        self._buffer: list[Outcome] = []
        self._positions: set[int] = set()
        self._expected: int | None = None

        self._total_lock = threading.Lock()
        self._total_sent = False

        self._done = threading.Event()
        self._result: tuple[Outcome, ...] = ()
        self._error: BaseException | None = None
        self._thread: threading.Thread | None = None

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #
    @property
    def completed(self) -> bool:
        """True once the buffer is frozen without error."""
        return self._done.is_set() and self._error is None

    @property
    def seen(self) -> int:
        return len(self._buffer)

    @property
    def expected(self) -> int | None:
        return self._expected

    # ------------------------------------------------------------------ #
    # Producer side
    # ------------------------------------------------------------------ #
    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError("collector already started")
        self._thread = threading.Thread(
            target=self._aggregate, name="translines-collector", daemon=True
        )
        self._thread.start()

    def publish(self, outcome: Outcome) -> None:
        """Deliver one outcome. Safe to call from any thread."""
        if self._done.is_set():
            raise CollectorError("collector is complete; no further outcomes are accepted")
        self._events.put(("outcome", outcome))

    def set_total(self, count: int) -> None:
        """Announce how many outcomes to expect. May be called only once."""
        if count < 0:
            raise ValueError(f"total count must be >= 0, got {count}")
        with self._total_lock:
            if self._total_sent:
                raise CollectorError("total count was already set")
            self._total_sent = True
        self._events.put(("total", count))

    # ------------------------------------------------------------------ #
    # Consumer side
    # ------------------------------------------------------------------ #
    def wait(self, timeout: float | None = None) -> list[Outcome]:
        """Block until complete and return outcomes sorted by position.

        Raises
        ------
        TimeoutError
            If ``timeout`` elapses first.
        PipelineCancelled
            If the shared token was cancelled before completion.
        CollectorError
            On duplicate or out-of-range positions.
        """
        if not self._done.wait(timeout):
            raise TimeoutError(
                f"collector incomplete after {timeout}s "
                f"(seen={self.seen}, expected={self._expected})"
            )
        if self._error is not None:
            raise self._error
        return list(self._result)

    def join(self, timeout: float | None = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    # ------------------------------------------------------------------ #
    # Aggregation thread
    # ------------------------------------------------------------------ #
    def _aggregate(self) -> None:
        try:
            while True:
                self._cancel.raise_if_cancelled()
                try:
                    kind, payload = self._events.get(timeout=POLL_INTERVAL_SECONDS)
                except queue.Empty:
                    continue

                if kind == "total":
                    self._on_total(int(payload))  # type: ignore[arg-type]
                else:
                    self._on_outcome(payload)  # type: ignore[arg-type]

                if self._expected is not None and len(self._buffer) == self._expected:
                    self._finalize()
                    return
        except (CollectorError, PipelineCancelled) as exc:
            self._error = exc
            self._done.set()

    def _on_total(self, count: int) -> None:
        self._expected = count
        for outcome in self._buffer:
            self._check_range(outcome.position)

    def _on_outcome(self, outcome: Outcome) -> None:
        if outcome.position in self._positions:
            raise DuplicatePositionError(outcome.position)
        if self._expected is not None:
            self._check_range(outcome.position)
        self._positions.add(outcome.position)
        self._buffer.append(outcome)

    def _check_range(self, position: int) -> None:
        assert self._expected is not None
        if not 0 <= position < self._expected:
            raise PositionOutOfRangeError(position, self._expected)

    def _finalize(self) -> None:
        self._result = tuple(sorted(self._buffer, key=lambda o: o.position))
        self._done.set()
        logger.debug("Collector complete with %d outcomes", len(self._result))


__all__ = ["OrderedCollector"]
