"""The translator interface consumed by the pipeline."""

from __future__ import annotations

from typing import Protocol

from translines.core.result import Result


class Translator(Protocol):
    """Callable turning one line of text into ``Ok(translation)`` or ``Err(message)``.

    Implementations must be safe to call from many threads at once and must
    not raise for per-item failures.
    """

    def __call__(self, text: str) -> Result[str, str]: ...


__all__ = ["Translator"]
