"""
Fixed-size worker pool with a shared, closable intake queue.

The pool is independent of translation: it runs any ``handler: T -> R`` over
the items it is fed and hands each result to ``publish``. Each worker thread
loops:

1. take the next item from the intake (blocking; exit once closed and drained),
2. acquire a permit from the shared :class:`RateLimiter`, if any,
3. call ``handler(item)``,
4. ``publish(result)``.

Lifecycle
---------
``start()`` → ``submit()``* → ``close()`` → ``join()``.

``close()`` enqueues one sentinel per worker after the last item, so workers
drain everything that was submitted before they stop.

Failure model
-------------
Per-item failures are the handler's business: it must fold them into its
return value. An exception escaping the handler or ``publish`` is a
programming error; the pool records it on :attr:`WorkerPool.error` and cancels
the shared token so no other thread stays blocked waiting for results that
will never arrive.
"""

from __future__ import annotations

import queue
import threading
import time
from collections.abc import Callable
from typing import Generic, TypeVar

from translines.concurrency.cancel import POLL_INTERVAL_SECONDS, CancelToken
from translines.concurrency.rate_limiter import RateLimiter
from translines.core.errors import PipelineCancelled, PoolClosedError
from translines.core.settings import DEFAULT_WORKERS, get_logger

T = TypeVar("T")
R = TypeVar("R")

logger = get_logger(__name__)

_CLOSED = object()


class WorkerPool(Generic[T, R]):
    """
    Run ``size`` threads that each pull items, throttle, process and publish.

    Parameters
    ----------
    handler:
        Work function applied to every item. Must not raise for expected
        per-item failures.
    publish:
        Sink for handler results. Called from worker threads.
    size:
        Number of worker threads.
    limiter:
        Optional rate limiter; one permit is acquired per item before the
        handler runs.
    cancel:
        Optional shared token. A fresh one is created when omitted.
    name:
        Thread name prefix, handy in log lines and debuggers.
    """

    def __init__(
        self,
        handler: Callable[[T], R],
        publish: Callable[[R], None],
        *,
        size: int = DEFAULT_WORKERS,
        limiter: RateLimiter | None = None,
        cancel: CancelToken | None = None,
        name: str = "translines-worker",
    ) -> None:
        if size < 1:
            raise ValueError(f"pool size must be at least 1, got {size}")

        self._handler = handler
        self._publish = publish
        self._size = size
        self._limiter = limiter
        self._cancel = cancel or CancelToken()
        self._name = name

        self._intake: queue.Queue[object] = queue.Queue(maxsize=size)
        self._threads: list[threading.Thread] = []
        self._closed = False

        self._lock = threading.Lock()
        self._active = 0
        self._max_concurrent = 0
        self._processed = 0
        self.error: BaseException | None = None

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #
    @property
    def size(self) -> int:
        return self._size

    @property
    def max_concurrent(self) -> int:
        """Highest number of handler calls observed in flight at once."""
        with self._lock:
            return self._max_concurrent

    @property
    def processed(self) -> int:
        with self._lock:
            return self._processed

    def is_alive(self) -> bool:
        return any(t.is_alive() for t in self._threads)

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #
    def start(self) -> None:
        if self._threads:
            raise RuntimeError("worker pool already started")
        for i in range(self._size):
            thread = threading.Thread(target=self._run, name=f"{self._name}-{i}", daemon=True)
            self._threads.append(thread)
            thread.start()
        logger.debug("Started %d workers", self._size)

    def submit(self, item: T) -> None:
        """Hand ``item`` to the intake, blocking while it is full.

        Raises
        ------
        PoolClosedError
            If :meth:`close` was already called.
        PipelineCancelled
            If the token fires while waiting for intake space.
        """
        if not self._threads:
            raise RuntimeError("worker pool must be started before submitting")
        with self._lock:
            if self._closed:
                raise PoolClosedError("cannot submit to a closed worker pool")
        self._put(item)

    def close(self) -> None:
        """Signal that no more items will arrive. Idempotent."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        for _ in self._threads:
            try:
                self._put(_CLOSED)
            except PipelineCancelled:
                # Workers exit on the token themselves.
                return

    def join(self, timeout: float | None = None) -> None:
        """Wait for every worker to exit, up to ``timeout`` seconds in total."""
        if timeout is None:
            for thread in self._threads:
                thread.join()
            return
        deadline = time.monotonic() + timeout
        for thread in self._threads:
            thread.join(max(0.0, deadline - time.monotonic()))

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #
    def _put(self, obj: object) -> None:
        while True:
            self._cancel.raise_if_cancelled()
            try:
                self._intake.put(obj, timeout=POLL_INTERVAL_SECONDS)
                return
            except queue.Full:
                continue

    def _next(self) -> object:
        while not self._cancel.cancelled:
            try:
                return self._intake.get(timeout=POLL_INTERVAL_SECONDS)
            except queue.Empty:
                continue
        return _CLOSED

    def _run(self) -> None:
        while True:
            item = self._next()
            if item is _CLOSED:
                break

            if self._limiter is not None:
                try:
                    self._limiter.acquire(self._cancel)
                except PipelineCancelled:
                    break

            try:
                self._enter()
                try:
                    result = self._handler(item)  # type: ignore[arg-type]
                finally:
                    self._leave()
                self._publish(result)
            except Exception as exc:
                if self._cancel.cancelled:
                    # Fallout of an abort already in progress.
                    break
                logger.exception("Worker %s crashed", threading.current_thread().name)
                self._fail(exc)
                break

        logger.debug("Worker %s exiting", threading.current_thread().name)

    def _enter(self) -> None:
        with self._lock:
            self._active += 1
            if self._active > self._max_concurrent:
                self._max_concurrent = self._active

    def _leave(self) -> None:
        with self._lock:
            self._active -= 1
            self._processed += 1

    def _fail(self, exc: BaseException) -> None:
        with self._lock:
            if self.error is None:
                self.error = exc
        self._cancel.cancel()


__all__ = ["WorkerPool"]
