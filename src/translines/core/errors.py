"""Exception taxonomy for translines.

Three kinds of failure exist:

- **Fatal startup** (:class:`MissingCredentialError`): raised before any line
  is read; entry points turn it into a non-zero exit.
- **Per-item** (:class:`TranslationError`): transport, decode or response-shape
  problems for a single line. These are caught inside the translator and
  travel as ``Err`` values, so they never cross a thread boundary.
- **Pipeline protocol** (:class:`PipelineCancelled`, :class:`PoolClosedError`,
  :class:`CollectorError` and its subclasses): misuse of the concurrency core
  or an external abort.
"""

from __future__ import annotations


class TranslinesError(Exception):
    """Base class for every error raised by this package."""


class MissingCredentialError(TranslinesError):
    """The translation credential is not configured."""

    def __init__(self, env_var: str) -> None:
        super().__init__(f"No {env_var} supplied; set it in the environment or a .env file.")
        self.env_var = env_var


class TranslationError(TranslinesError):
    """A single remote translation call failed."""


class PipelineCancelled(TranslinesError):
    """A blocking wait was interrupted by a cancelled token."""


class PoolClosedError(TranslinesError):
    """An item was submitted after the worker pool intake was closed."""


class CollectorError(TranslinesError):
    """The ordered collector received inconsistent input."""


class DuplicatePositionError(CollectorError):
    def __init__(self, position: int) -> None:
        super().__init__(f"Outcome for position {position} was published twice")
        self.position = position


class PositionOutOfRangeError(CollectorError):
    def __init__(self, position: int, total: int) -> None:
        super().__init__(f"Outcome position {position} is outside [0, {total})")
        self.position = position
        self.total = total


__all__ = [
    "TranslinesError",
    "MissingCredentialError",
    "TranslationError",
    "PipelineCancelled",
    "PoolClosedError",
    "CollectorError",
    "DuplicatePositionError",
    "PositionOutOfRangeError",
]
