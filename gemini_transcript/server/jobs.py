"""In-memory job store for background transcription jobs.

WHY: A Gemini transcription of a long video can take minutes, far longer
than an HTTP client should wait. The API returns a job ID at once and
the work continues in the background; clients poll the job and download
its files when it completes.

HOW: JobStatus enumerates the stages a job moves through, Job holds one
job's state and its working directory, and JobStore keeps jobs in a dict
behind a threading.Lock. Terminal jobs expire after a TTL; expiry and
deletion remove the working directory.

RULES:
- Stages: pending → downloading (URL jobs only) → transcribing →
  rendering → completed | failed
- Every store mutation holds self._lock; directory I/O happens outside it
- Each job owns a temp directory (prefix "gemini_job_") for the source
  video and the rendered files
- TTL is measured from completed_at; default 1 hour
- create_job() raises ValueError when max_jobs are already stored
"""

from __future__ import annotations

import enum
import logging
import shutil
import tempfile
import threading
import time
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 3600
DEFAULT_MAX_JOBS = 100
JOB_DIR_PREFIX = "gemini_job_"


class JobStatus(str, enum.Enum):
    """Stage of a transcription job. Inherits from str for clean JSON."""

    PENDING = "pending"
    DOWNLOADING = "downloading"
    TRANSCRIBING = "transcribing"
    RENDERING = "rendering"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


@dataclass
class Job:
    """State of one transcription job.

    RULES:
    - id: uuid4 hex, fixed at creation
    - source: uploaded filename or source URL, for display
    - work_dir: temp directory holding the video and output files
    - summary: filled on completion (segment count, method, ...)
    - output_files: names of files in work_dir available for download
    """

    id: str
    status: JobStatus
    source: str
    work_dir: Path
    created_at: float
    updated_at: float
    completed_at: Optional[float] = None
    error: Optional[str] = None
    config: Dict[str, Any] = field(default_factory=dict)
    summary: Dict[str, Any] = field(default_factory=dict)
    output_files: List[str] = field(default_factory=list)


class JobStore:
    """Thread-safe in-memory store for transcription jobs.

    WHY: Request handlers and background tasks read and write job state
    at the same time; one lock around a dict keeps that consistent.

    RULES:
    - get_job() returns None for unknown IDs (no exceptions)
    - update_job() applies only the arguments that are not None
    - completed_at is set when a job first reaches a terminal state
    - delete_job() and cleanup_expired() remove the work directory
    """

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        max_jobs: int = DEFAULT_MAX_JOBS,
    ) -> None:
        self._jobs: Dict[str, Job] = {}
        self._lock = threading.Lock()
        self._ttl_seconds = ttl_seconds
        self.max_jobs = max_jobs

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)

    def create_job(self, source: str, config: Optional[Dict[str, Any]] = None) -> Job:
        """Create a PENDING job with its own work directory."""
        with self._lock:
            if len(self._jobs) >= self.max_jobs:
                raise ValueError(
                    "Maximum number of concurrent jobs ({}) reached".format(self.max_jobs)
                )

            now = time.time()
            job = Job(
                id=uuid.uuid4().hex,
                status=JobStatus.PENDING,
                source=source,
                work_dir=Path(tempfile.mkdtemp(prefix=JOB_DIR_PREFIX)),
                created_at=now,
                updated_at=now,
                config=config or {},
            )
            self._jobs[job.id] = job

        logger.info("Created job %s for %s", job.id, source)
        return job

    def get_job(self, job_id: str) -> Optional[Job]:
        with self._lock:
            return self._jobs.get(job_id)

    def list_jobs(self) -> List[Job]:
        """Snapshot of all jobs, oldest first."""
        with self._lock:
            return sorted(self._jobs.values(), key=lambda j: j.created_at)

    def update_job(
        self,
        job_id: str,
        status: Optional[JobStatus] = None,
        error: Optional[str] = None,
        summary: Optional[Dict[str, Any]] = None,
        output_files: Optional[List[str]] = None,
    ) -> Optional[Job]:
        """Apply non-None updates to a job; None if the job is gone."""
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                return None

            now = time.time()
            if status is not None:
                job.status = status
            if error is not None:
                job.error = error
            if summary is not None:
                job.summary = summary
            if output_files is not None:
                job.output_files = output_files
            job.updated_at = now

            if job.status.is_terminal and job.completed_at is None:
                job.completed_at = now
            return job

    def delete_job(self, job_id: str) -> bool:
        """Remove a job and its work directory. False if it didn't exist."""
        with self._lock:
            job = self._jobs.pop(job_id, None)

        if job is None:
            return False

        self._remove_work_dir(job.work_dir)
        logger.info("Deleted job %s", job_id)
        return True

    def cleanup_expired(self) -> int:
        """Drop terminal jobs older than the TTL; return how many were removed."""
        now = time.time()
        expired: List[Job] = []

        with self._lock:
            for job_id, job in list(self._jobs.items()):
                if not job.status.is_terminal or job.completed_at is None:
                    continue
                if now - job.completed_at > self._ttl_seconds:
                    expired.append(self._jobs.pop(job_id))

        for job in expired:
            self._remove_work_dir(job.work_dir)
            logger.info("Expired job %s (completed %.0fs ago)", job.id, now - job.completed_at)

        return len(expired)

    @staticmethod
    def _remove_work_dir(work_dir: Path) -> None:
        # Best effort: a leftover temp dir is logged, never raised
        if work_dir.exists():
            try:
                shutil.rmtree(work_dir)
            except OSError:
                logger.warning("Failed to clean up temp dir: %s", work_dir)
