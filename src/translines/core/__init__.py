"""Core package initializer for translines.

Holds configuration, logging, errors, the ``Result`` container and the
work-unit contracts shared by the concurrency layer and the pipeline.
"""

from __future__ import annotations

__all__ = ["__doc__"]
