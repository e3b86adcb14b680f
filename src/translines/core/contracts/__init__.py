"""Data contracts shared across the pipeline."""

from __future__ import annotations

from .work import Item, Outcome

__all__ = ["Item", "Outcome"]
