"""Unit tests for the Result container used by translators."""

from __future__ import annotations

import pytest

from translines.core.result import Err, Result, err, ok


def test_ok_map_keeps_value() -> None:
    r: Result[str, str] = ok("你好")
    r2 = r.map(lambda s: s + "_T")
    assert r2.is_ok() and r2.unwrap() == "你好_T"


def test_err_propagates_through_map() -> None:
    """`Err` should pass through map untouched."""
    r: Result[str, str] = err("timeout")
    assert r.is_err()
    r2 = r.map(lambda s: s.upper())
    assert isinstance(r2, Err) and r2.unwrap_err() == "timeout"


def test_unwrap_variants() -> None:
    assert ok("x").unwrap() == "x"
    assert err("e").get_or("fallback") == "fallback"
    with pytest.raises(RuntimeError):
        err("e").unwrap()
    with pytest.raises(RuntimeError):
        ok("x").unwrap_err()
