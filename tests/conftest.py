"""Shared fixtures for the translines test suite."""

from __future__ import annotations

from collections.abc import Generator

import pytest

from translines.core.settings import load_settings


@pytest.fixture(autouse=True)  # type: ignore[misc]
def _fresh_settings() -> Generator[None, None, None]:
    """Drop the cached Settings around every test so env changes never leak."""
    load_settings.cache_clear()
    yield
    load_settings.cache_clear()
