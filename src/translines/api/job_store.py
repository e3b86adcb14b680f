"""
In-Memory Job Store for Async Translation Jobs.

This module implements a small, lock-guarded store for tracking the lifecycle
of translation jobs submitted over HTTP.

Responsibilities
----------------
- **Create**: Generate UUIDs for new requests and mark them PENDING.
- **Read**: Retrieve current status and results by Job ID.
- **Update**: Transition jobs from PROCESSING -> COMPLETED/FAILED.

Background tasks run on Starlette's thread pool, so every access goes through
a single lock. Jobs live in process memory only and vanish on restart.
"""

from __future__ import annotations

import threading
import uuid
from datetime import UTC, datetime
from typing import ClassVar

from translines.api.schemas import JobInfo, JobStatus, TranslateResult


class JobStore:
    """
    A dictionary-backed store for JobInfo objects.
    """

    _instance: ClassVar[JobStore | None] = None

    def __init__(self) -> None:
        self._jobs: dict[str, JobInfo] = {}
        self._lock = threading.Lock()

    @classmethod
    def get_instance(cls) -> JobStore:
        """Accessor for the global singleton instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def create_job(self, total: int = 0) -> str:
        """
        Register a new job ID and initialize its state to PENDING.

        Returns
        -------
        str
            The generated UUID4 string for the new job.
        """
        job_id = str(uuid.uuid4())
        info = JobInfo(
            job_id=job_id,
            status=JobStatus.PENDING,
            created_at=datetime.now(UTC),
            total=total,
        )
        with self._lock:
            self._jobs[job_id] = info
        return job_id

    def get_job(self, job_id: str) -> JobInfo | None:
        """Retrieve a copy of the job metadata, or None if not found."""
        with self._lock:
            job = self._jobs.get(job_id)
            return job.model_copy(deep=True) if job else None

    def mark_processing(self, job_id: str) -> None:
        with self._lock:
            if job := self._jobs.get(job_id):
                job.status = JobStatus.PROCESSING

    def mark_completed(self, job_id: str, result: TranslateResult) -> None:
        with self._lock:
            if job := self._jobs.get(job_id):
                job.status = JobStatus.COMPLETED
                job.result = result

    def mark_failed(self, job_id: str, error: str) -> None:
        with self._lock:
            if job := self._jobs.get(job_id):
                job.status = JobStatus.FAILED
                job.error = error

    def clear(self) -> None:
        with self._lock:
            self._jobs.clear()


def get_job_store() -> JobStore:
    return JobStore.get_instance()


__all__ = ["JobStore", "get_job_store"]
