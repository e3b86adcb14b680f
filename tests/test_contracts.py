"""Tests for the Item / Outcome work-unit contracts."""

from __future__ import annotations

import dataclasses

import pytest

from translines.core.contracts.work import Item, Outcome
from translines.core.result import err, ok


def test_item_rejects_negative_position() -> None:
    with pytest.raises(ValueError):
        Item(position=-1, payload="x")


def test_item_is_immutable() -> None:
    item = Item(position=0, payload="你好")
    with pytest.raises(dataclasses.FrozenInstanceError):
        item.payload = "changed"  # type: ignore[misc]


def test_outcome_from_ok_result() -> None:
    outcome = Outcome.from_result(Item(3, "你好"), ok("你好_T"))
    assert outcome == Outcome(position=3, text="你好_T", error=None)
    assert outcome.ok


def test_outcome_from_err_result_has_empty_text() -> None:
    outcome = Outcome.from_result(Item(4, "再见"), err("HTTP 500"))
    assert outcome.position == 4
    assert outcome.text == ""
    assert outcome.error == "HTTP 500"
    assert not outcome.ok
