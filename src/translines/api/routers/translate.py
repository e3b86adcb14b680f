"""
API Routes for Translation Jobs.

Endpoints
---------
- `POST /translate`: Submit lines for translation (Async, 202).
- `GET /jobs/{job_id}`: Poll the status and retrieve ordered results.
"""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, HTTPException, status

from translines.api.background import run_translation_task
from translines.api.job_store import get_job_store
from translines.api.schemas import JobInfo, TranslateRequest

router = APIRouter(tags=["Translation"])


@router.post(
    "/translate",
    response_model=JobInfo,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Submit a new translation job",
)
async def submit_translation(
    request: TranslateRequest,
    background_tasks: BackgroundTasks,
) -> JobInfo:
    """
    Create a job for ``request.lines`` and schedule it in the background.

    Client Workflow
    ---------------
    1. Receive `job_id` from this response.
    2. Poll `GET /jobs/{job_id}` until status is 'completed' or 'failed'.
    """
    store = get_job_store()
    job_id = store.create_job(total=len(request.lines))

    background_tasks.add_task(
        run_translation_task,
        job_id=job_id,
        lines=list(request.lines),
        workers=request.workers,
        error_marker=request.error_marker,
    )

    job_info = store.get_job(job_id)
    if not job_info:
        raise HTTPException(status_code=500, detail="Failed to create job")
    return job_info


@router.get(
    "/jobs/{job_id}",
    response_model=JobInfo,
    summary="Get job status and results",
)
async def get_job_status(job_id: str) -> JobInfo:
    """Retrieve the current status or final result of a job."""
    job = get_job_store().get_job(job_id)
    if not job:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Job {job_id} not found",
        )
    return job


__all__ = ["router"]
