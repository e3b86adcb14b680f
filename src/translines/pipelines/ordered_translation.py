"""
Ordered translation pipeline: from input lines to translated lines, in order.

Flow Overview
-------------
1. **Wiring**: build the rate limiter, the ordered collector and the worker
   pool around one shared :class:`CancelToken`.
2. **Intake**: read the input lazily, tag each line with a zero-based
   position and submit it to the pool. Submission blocks while every worker
   is busy, so memory stays bounded by the pool size on the intake side.
3. **Close & count**: once the input is exhausted, close the pool intake and
   announce the total to the collector. The total may reach the collector
   before or after the last outcome; both orders complete.
4. **Collect**: wait for the collector, join the workers, and project the
   sorted outcomes into output text.

Failure Model
-------------
- A failed line keeps its slot; ``texts`` carries ``error_marker`` there and
  the failure is logged. The run still completes.
- Anything that escapes (a crashed worker, a collector protocol error,
  ``KeyboardInterrupt``) cancels the token so that every blocked thread exits,
  then propagates to the caller.
"""

from __future__ import annotations

import time
from collections.abc import Iterable
from typing import TypedDict

from translines.concurrency.cancel import CancelToken
from translines.concurrency.collector import OrderedCollector
from translines.concurrency.rate_limiter import RateLimiter
from translines.concurrency.worker_pool import WorkerPool
from translines.core.contracts.work import Item, Outcome
from translines.core.errors import PipelineCancelled
from translines.core.result import err
from translines.core.settings import PipelineConfig, get_logger
from translines.translate.base import Translator

logger = get_logger(__name__)


class PipelineResult(TypedDict):
    """Structured payload returned by :func:`run_pipeline`.

    Attributes
    ----------
    outcomes:
        One outcome per input line, sorted by position.
    texts:
        Output lines in input order; failed lines carry the error marker.
    failures:
        The subset of ``outcomes`` that carry an error.
    total:
        Number of lines read (after any ``max_items`` cap).
    truncated:
        True if ``max_items`` stopped reading before the input was exhausted.
    elapsed_seconds:
        Wall-clock duration of the run.
    max_concurrent:
        Highest number of translator calls observed in flight at once.
    """

    outcomes: list[Outcome]
    texts: list[str]
    failures: list[Outcome]
    total: int
    truncated: bool
    elapsed_seconds: float
    max_concurrent: int


def _translate_item(translator: Translator, item: Item) -> Outcome:
    """Worker handler: one remote call, folded into an outcome."""
    try:
        result = translator(item.payload)
    except Exception as exc:
        # Translators are meant to return Err; a raising one still only
        # costs its own line.
        logger.debug("Translator raised for line %d", item.position, exc_info=True)
        result = err(f"{type(exc).__name__}: {exc}")
    return Outcome.from_result(item, result)


def _feed(
    lines: Iterable[str],
    pool: WorkerPool[Item, Outcome],
    max_items: int | None,
) -> tuple[int, bool]:
    """Submit tagged lines to ``pool``; return ``(count, truncated)``."""
    count = 0
    for line in lines:
        if max_items is not None and count >= max_items:
            logger.warning("Input truncated at max_items=%d", max_items)
            return count, True
        pool.submit(Item(position=count, payload=line.rstrip("\r\n")))
        count += 1
    return count, False


def run_pipeline(
    lines: Iterable[str],
    translator: Translator,
    *,
    config: PipelineConfig | None = None,
    cancel: CancelToken | None = None,
    error_marker: str = "",
) -> PipelineResult:
    """
    Translate ``lines`` concurrently and return the results in input order.

    Parameters
    ----------
    lines:
        Input lines, consumed once and lazily. Trailing newlines are stripped.
    translator:
        Callable returning ``Ok(text)`` or ``Err(message)`` per line.
    config:
        Throttling configuration. Defaults to :class:`PipelineConfig` defaults
        (100 calls/s, burst 1, 20 workers, no cap).
    cancel:
        Optional external token; cancelling it aborts the run with
        :class:`~translines.core.errors.PipelineCancelled`.
    error_marker:
        Text placed in ``texts`` for lines whose translation failed.

    Returns
    -------
    PipelineResult
        Ordered outcomes plus summary fields.
    """
    cfg = config or PipelineConfig()
    token = cancel or CancelToken()
    started = time.monotonic()

    limiter = RateLimiter(rate=cfg.rate_limit, burst=cfg.burst)
    collector = OrderedCollector(cancel=token)
    pool: WorkerPool[Item, Outcome] = WorkerPool(
        handler=lambda item: _translate_item(translator, item),
        publish=collector.publish,
        size=cfg.workers,
        limiter=limiter,
        cancel=token,
    )

    logger.info(
        "Starting pipeline: workers=%d rate=%.1f/s burst=%d",
        cfg.workers,
        cfg.rate_limit,
        cfg.burst,
    )
    collector.start()
    pool.start()

    try:
        total, truncated = _feed(lines, pool, cfg.max_items)
        pool.close()
        collector.set_total(total)
        outcomes = collector.wait()
        pool.join()
    except BaseException as exc:
        token.cancel()
        pool.join(timeout=cfg.abort_grace_seconds)
        if pool.is_alive():
            logger.warning(
                "Abandoning workers still in a translator call after %.1fs",
                cfg.abort_grace_seconds,
            )
        collector.join()
        if pool.error is not None and isinstance(exc, PipelineCancelled):
            raise pool.error from exc
        raise

    failures = [o for o in outcomes if not o.ok]
    for failure in failures:
        logger.warning("Line %d failed: %s", failure.position, failure.error)

    elapsed = time.monotonic() - started
    logger.info(
        "Pipeline complete: %d lines, %d failed, %.2fs",
        total,
        len(failures),
        elapsed,
    )

    return {
        "outcomes": outcomes,
        "texts": [o.text if o.ok else error_marker for o in outcomes],
        "failures": failures,
        "total": total,
        "truncated": truncated,
        "elapsed_seconds": elapsed,
        "max_concurrent": pool.max_concurrent,
    }


def translate_lines(
    lines: Iterable[str],
    translator: Translator,
    *,
    config: PipelineConfig | None = None,
    error_marker: str = "",
) -> list[str]:
    """Convenience wrapper returning only the ordered output text."""
    return run_pipeline(lines, translator, config=config, error_marker=error_marker)["texts"]


__all__ = ["PipelineResult", "run_pipeline", "translate_lines"]
