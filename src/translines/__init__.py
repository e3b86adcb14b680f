"""translines: ordered, rate-limited batch translation of text lines.

The package reads lines, fans them out to a remote translation service through
a bounded worker pool, and emits the translations in the original order.
"""

from __future__ import annotations

__all__ = ["__version__"]
__version__ = "0.1.0"
