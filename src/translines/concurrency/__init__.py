"""Concurrency primitives: cancellation, rate limiting, worker pool, collector."""

from __future__ import annotations

from .cancel import CancelToken
from .collector import OrderedCollector
from .rate_limiter import RateLimiter
from .worker_pool import WorkerPool

__all__ = ["CancelToken", "OrderedCollector", "RateLimiter", "WorkerPool"]
