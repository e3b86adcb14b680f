"""Unit tests for the OrderedCollector state machine."""

from __future__ import annotations

import random
import threading
import time

import pytest

from translines.concurrency.cancel import CancelToken
from translines.concurrency.collector import OrderedCollector
from translines.core.contracts.work import Outcome
from translines.core.errors import (
    CollectorError,
    DuplicatePositionError,
    PipelineCancelled,
    PositionOutOfRangeError,
)


def _started() -> OrderedCollector:
    collector = OrderedCollector()
    collector.start()
    return collector


def _out(position: int) -> Outcome:
    return Outcome(position=position, text=f"t{position}")


def test_total_known_before_outcomes() -> None:
    collector = _started()
    collector.set_total(3)
    for pos in (2, 0, 1):
        collector.publish(_out(pos))

    outcomes = collector.wait(timeout=2.0)

    assert [o.position for o in outcomes] == [0, 1, 2]
    assert collector.completed


def test_total_known_after_last_outcome() -> None:
    collector = _started()
    for pos in (1, 0, 2):
        collector.publish(_out(pos))
    time.sleep(0.05)
    assert not collector.completed

    collector.set_total(3)

    assert [o.text for o in collector.wait(timeout=2.0)] == ["t0", "t1", "t2"]


def test_zero_items_completes_without_outcomes() -> None:
    collector = _started()
    collector.set_total(0)
    assert collector.wait(timeout=1.0) == []
    assert collector.seen == 0 and collector.expected == 0


def test_never_completes_while_total_unknown() -> None:
    collector = _started()
    collector.publish(_out(0))
    collector.publish(_out(1))

    with pytest.raises(TimeoutError):
        collector.wait(timeout=0.1)
    assert not collector.completed

    collector.set_total(2)
    assert len(collector.wait(timeout=2.0)) == 2


def test_never_completes_while_outcomes_missing() -> None:
    collector = _started()
    collector.set_total(3)
    collector.publish(_out(0))

    with pytest.raises(TimeoutError):
        collector.wait(timeout=0.1)

    collector.publish(_out(1))
    collector.publish(_out(2))
    assert len(collector.wait(timeout=2.0)) == 3


def test_duplicate_position_is_rejected() -> None:
    collector = _started()
    collector.publish(_out(0))
    collector.publish(_out(0))
    collector.set_total(2)

    with pytest.raises(DuplicatePositionError):
        collector.wait(timeout=2.0)
    assert not collector.completed


def test_position_outside_range_is_rejected() -> None:
    collector = _started()
    collector.set_total(2)
    collector.publish(_out(5))

    with pytest.raises(PositionOutOfRangeError):
        collector.wait(timeout=2.0)


def test_total_smaller_than_seen_is_rejected() -> None:
    collector = _started()
    for pos in range(3):
        collector.publish(_out(pos))
    time.sleep(0.05)
    collector.set_total(2)

    with pytest.raises(PositionOutOfRangeError):
        collector.wait(timeout=2.0)


def test_total_can_only_be_set_once() -> None:
    collector = _started()
    with pytest.raises(ValueError):
        collector.set_total(-1)
    collector.set_total(0)
    with pytest.raises(CollectorError):
        collector.set_total(0)


def test_publish_after_completion_is_rejected() -> None:
    collector = _started()
    collector.set_total(1)
    collector.publish(_out(0))
    collector.wait(timeout=2.0)

    with pytest.raises(CollectorError):
        collector.publish(_out(1))


def test_cancel_aborts_wait() -> None:
    token = CancelToken()
    collector = OrderedCollector(cancel=token)
    collector.start()
    collector.set_total(5)

    token.cancel()

    with pytest.raises(PipelineCancelled):
        collector.wait(timeout=2.0)
    collector.join(timeout=1.0)


def test_concurrent_publishers_with_racing_total() -> None:
    total = 200
    positions = list(range(total))
    random.shuffle(positions)
    chunks = [positions[i::8] for i in range(8)]

    collector = _started()

    def publisher(chunk: list[int]) -> None:
        for pos in chunk:
            time.sleep(random.uniform(0, 0.001))
            collector.publish(_out(pos))

    threads = [threading.Thread(target=publisher, args=(c,)) for c in chunks]
    for t in threads:
        t.start()
    time.sleep(random.uniform(0, 0.02))
    collector.set_total(total)
    for t in threads:
        t.join()

    outcomes = collector.wait(timeout=5.0)
    assert [o.position for o in outcomes] == list(range(total))
