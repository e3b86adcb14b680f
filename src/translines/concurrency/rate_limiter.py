"""Token-bucket rate limiter shared by every worker of a pipeline run.

Tokens refill continuously at ``rate`` per second up to ``burst``. A call to
:meth:`RateLimiter.acquire` *reserves* a token under the lock, possibly
driving the balance negative, and then sleeps outside the lock until the
reservation matures. Reservations are therefore served in arrival order and
the long-run grant rate never exceeds ``rate``.

Example
-------
>>> limiter = RateLimiter(rate=100, burst=1)
>>> limiter.acquire()          # blocks until permitted
>>> limiter.try_acquire()      # non-blocking check
False
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

from translines.concurrency.cancel import CancelToken
from translines.core.errors import PipelineCancelled
from translines.core.settings import DEFAULT_BURST, DEFAULT_RATE_LIMIT


class RateLimiter:
    """Thread-safe token bucket.

    Parameters
    ----------
    rate:
        Permit grants per second. Must be greater than 0.
    burst:
        Bucket capacity. Must be at least 1.
    clock:
        Monotonic time source, injectable for tests.
    sleep:
        Blocking sleep used when no cancel token is supplied.

    Raises
    ------
    ValueError
        If ``rate`` or ``burst`` is out of range.
    """

    def __init__(
        self,
        rate: float = DEFAULT_RATE_LIMIT,
        burst: int = DEFAULT_BURST,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if rate <= 0:
            raise ValueError(f"rate must be positive, got {rate}")
        if burst < 1:
            raise ValueError(f"burst must be at least 1, got {burst}")

        self._rate = float(rate)
        self._burst = burst
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._tokens = float(burst)
        self._last = clock()

    @property
    def rate(self) -> float:
        return self._rate

    @property
    def burst(self) -> int:
        return self._burst

    def acquire(self, cancel: CancelToken | None = None) -> None:
        """Block until one permit is granted.

        Parameters
        ----------
        cancel:
            Optional token. When it fires during the wait the reserved token
            is handed back and :class:`PipelineCancelled` is raised.
        """
        if cancel is not None:
            cancel.raise_if_cancelled()

        delay = self._reserve()
        if delay <= 0:
            return

        if cancel is None:
            self._sleep(delay)
            return

        if cancel.wait(delay):
            self._release()
            raise PipelineCancelled("rate limiter wait was cancelled")

    def try_acquire(self) -> bool:
        """Take a permit only if one is available right now."""
        with self._lock:
            self._refill(self._clock())
            if self._tokens >= 1.0:
                self._tokens -= 1.0
                return True
            return False

    def _reserve(self) -> float:
        """Take a token (possibly on credit) and return the seconds to wait."""
        with self._lock:
            self._refill(self._clock())
            self._tokens -= 1.0
            if self._tokens >= 0.0:
                return 0.0
            return -self._tokens / self._rate

    def _release(self) -> None:
        with self._lock:
            self._refill(self._clock())
            self._tokens = min(float(self._burst), self._tokens + 1.0)

    def _refill(self, now: float) -> None:
        # Caller holds self._lock.
        elapsed = max(0.0, now - self._last)
        self._tokens = min(float(self._burst), self._tokens + elapsed * self._rate)
        self._last = now


__all__ = ["RateLimiter"]
