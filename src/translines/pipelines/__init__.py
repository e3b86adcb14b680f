"""Pipeline entry points for translines.

Currently exposed:

- :func:`run_pipeline`: ordered, rate-limited concurrent translation of
  input lines, implemented in ``ordered_translation.py``.
- :func:`translate_lines`: the same, returning only the output text.
"""

from __future__ import annotations

from .ordered_translation import PipelineResult, run_pipeline, translate_lines

__all__ = ["run_pipeline", "translate_lines", "PipelineResult"]
