"""
Work-unit contracts: the tagged input line and its outcome.

Design Notes
------------
- **Immutability**: both records are ``frozen``; a worker builds exactly one
  :class:`Outcome` per :class:`Item` and never mutates it afterwards.
- **Position**: the zero-based index of the line in the input. It is the only
  key used to restore order after concurrent processing.
- **Plain dataclasses**: these objects cross thread boundaries thousands of
  times per run, so they stay as slotted dataclasses rather than Pydantic
  models. The API layer converts them into its own schemas.
"""

from __future__ import annotations

from dataclasses import dataclass

from translines.core.result import Result


@dataclass(frozen=True, slots=True)
class Item:
    """
    One line of input tagged with its original position.

    Attributes
    ----------
    position : int
        Zero-based, dense, unique index assigned in read order.
    payload : str
        The text to translate.
    """

    position: int
    payload: str

    def __post_init__(self) -> None:
        if self.position < 0:
            raise ValueError(f"Item position must be >= 0, got {self.position}")


@dataclass(frozen=True, slots=True)
class Outcome:
    """
    The resolved result for one :class:`Item`.

    Attributes
    ----------
    position : int
        Copied from the originating item.
    text : str
        Translated text; empty when the call failed.
    error : str | None
        Failure descriptor, or ``None`` on success.
    """

    position: int
    text: str = ""
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def from_result(cls, item: Item, result: Result[str, str]) -> Outcome:
        """Fold a translator ``Result`` into an outcome for ``item``."""
        if result.is_ok():
            return cls(position=item.position, text=result.unwrap())
        return cls(position=item.position, text="", error=str(result.unwrap_err()))


__all__ = ["Item", "Outcome"]
