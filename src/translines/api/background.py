# src/translines/api/background.py
"""
Background Task Runner for translation jobs.

This module provides the worker function used by FastAPI's `BackgroundTasks`.
It wraps the synchronous `run_pipeline` call with exception handling and
job-state transitions.
"""

from __future__ import annotations

from translines.api.job_store import get_job_store
from translines.api.schemas import LineFailure, TranslateResult
from translines.core.settings import PipelineConfig, get_logger, load_settings
from translines.pipelines.ordered_translation import run_pipeline
from translines.translate.google import GoogleTranslator

logger = get_logger(__name__)


def run_translation_task(
    job_id: str,
    lines: list[str],
    workers: int | None = None,
    error_marker: str = "",
) -> None:
    """
    Execute the pipeline in a background thread and update the job store.

    It never raises to the caller; any exception, including a missing
    credential, marks the job as FAILED.

    Parameters
    ----------
    job_id:
        The UUID of the job to update.
    lines:
        Input lines, in order.
    workers:
        Optional worker-count override for this job.
    error_marker:
        Text used in the output for lines that failed.
    """
    store = get_job_store()
    store.mark_processing(job_id)

    try:
        settings = load_settings()
        translator = GoogleTranslator.from_settings(settings)
        config = PipelineConfig.from_settings(settings)
        if workers is not None:
            config = config.model_copy(update={"workers": workers})

        output = run_pipeline(lines, translator, config=config, error_marker=error_marker)

        api_result = TranslateResult(
            lines=output["texts"],
            failures=[LineFailure.from_outcome(o) for o in output["failures"]],
            elapsed_seconds=output["elapsed_seconds"],
        )
        store.mark_completed(job_id, api_result)

    except Exception as exc:
        logger.exception("Job %s failed", job_id)
        store.mark_failed(job_id, f"Pipeline Error: {exc}")


__all__ = ["run_translation_task"]
