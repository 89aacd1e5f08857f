"""
app/services/upload_job_service.py

Background upload jobs with progress tracking and cancellation.

Jobs live in process memory only. Each running job owns one tokenizer
worker; cancelling the job terminates that worker and discards any result.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Protocol

from fastapi import BackgroundTasks

from app.domain.orders import OrderIngestionSummary
from app.logging_utils import log_event
from app.services.csv_ingestion_service import (
    CSVIngestionService,
    UploadInProgressError,
    decode_csv_bytes,
    get_csv_ingestion_service,
)
from app.workers.csv_worker import CSVParseCancelledError, CSVParseWorker

logger = logging.getLogger(__name__)


class UploadJobStatus:
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


ACTIVE_STATUSES = frozenset({UploadJobStatus.PENDING, UploadJobStatus.RUNNING})


@dataclass
class UploadJob:
    job_id: uuid.UUID
    file_name: str
    status: str
    created_at: datetime
    updated_at: datetime
    progress: float = 0.0
    started_at: datetime | None = None
    completed_at: datetime | None = None
    summary: OrderIngestionSummary | None = None
    error_message: str | None = None

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES


class UploadJobNotFoundError(LookupError):
    """
    Raised when a job id is unknown.
    """


class UploadTaskExecutor(Protocol):
    def submit(self, task: Callable[..., None], *args: Any, **kwargs: Any) -> None:
        ...


class FastAPIBackgroundTaskExecutor:
    def __init__(self, background_tasks: BackgroundTasks) -> None:
        self._background_tasks = background_tasks

    def submit(self, task: Callable[..., None], *args: Any, **kwargs: Any) -> None:
        self._background_tasks.add_task(task, *args, **kwargs)


class UploadJobRegistry:
    """
    Thread-safe in-memory job store. Returned jobs are copies.
    """

    def __init__(self, *, max_jobs: int = 100) -> None:
        self._jobs: dict[uuid.UUID, UploadJob] = {}
        self._lock = threading.Lock()
        self._max_jobs = max(1, max_jobs)

    def create_job(self, *, file_name: str) -> UploadJob:
        now = datetime.now(timezone.utc)
        job = UploadJob(
            job_id=uuid.uuid4(),
            file_name=file_name,
            status=UploadJobStatus.PENDING,
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self._jobs[job.job_id] = job
            self._prune()
            return replace(job)

    def get_job(self, job_id: uuid.UUID) -> UploadJob | None:
        with self._lock:
            job = self._jobs.get(job_id)
            return replace(job) if job is not None else None

    def list_jobs(self, *, limit: int = 100, status: str | None = None) -> list[UploadJob]:
        with self._lock:
            jobs = [job for job in self._jobs.values() if status is None or job.status == status]
        jobs.sort(key=lambda job: job.created_at, reverse=True)
        return [replace(job) for job in jobs[: max(1, limit)]]

    def has_active_job(self) -> bool:
        with self._lock:
            return any(job.is_active for job in self._jobs.values())

    def mark_running(self, *, job_id: uuid.UUID) -> UploadJob | None:
        return self._transition(
            job_id,
            allowed={UploadJobStatus.PENDING},
            status=UploadJobStatus.RUNNING,
            started_at=datetime.now(timezone.utc),
        )

    def update_progress(self, *, job_id: uuid.UUID, progress: float) -> None:
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None or job.status != UploadJobStatus.RUNNING:
                return
            job.progress = max(job.progress, min(1.0, max(0.0, progress)))
            job.updated_at = datetime.now(timezone.utc)

    def mark_completed(
        self,
        *,
        job_id: uuid.UUID,
        summary: OrderIngestionSummary,
    ) -> UploadJob | None:
        return self._transition(
            job_id,
            allowed={UploadJobStatus.RUNNING},
            status=UploadJobStatus.COMPLETED,
            progress=1.0,
            summary=summary,
            completed_at=datetime.now(timezone.utc),
        )

    def mark_failed(self, *, job_id: uuid.UUID, error_message: str) -> UploadJob | None:
        return self._transition(
            job_id,
            allowed=set(ACTIVE_STATUSES),
            status=UploadJobStatus.FAILED,
            error_message=error_message,
            completed_at=datetime.now(timezone.utc),
        )

    def mark_cancelled(self, *, job_id: uuid.UUID) -> UploadJob | None:
        return self._transition(
            job_id,
            allowed=set(ACTIVE_STATUSES),
            status=UploadJobStatus.CANCELLED,
            completed_at=datetime.now(timezone.utc),
        )

    def _transition(
        self,
        job_id: uuid.UUID,
        *,
        allowed: set[str] | frozenset[str],
        **changes: Any,
    ) -> UploadJob | None:
        """
        Apply *changes* only when the job is in one of the *allowed* states.

        Terminal states are never overwritten, so a late result from a
        cancelled job is dropped.
        """
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None or job.status not in allowed:
                return None
            for name, value in changes.items():
                setattr(job, name, value)
            job.updated_at = datetime.now(timezone.utc)
            return replace(job)

    def _prune(self) -> None:
        if len(self._jobs) <= self._max_jobs:
            return
        finished = sorted(
            (job for job in self._jobs.values() if not job.is_active),
            key=lambda job: job.created_at,
        )
        for job in finished[: len(self._jobs) - self._max_jobs]:
            del self._jobs[job.job_id]


class UploadJobService:
    """
    Coordinates job creation, background execution, and cancellation.
    """

    def __init__(
        self,
        *,
        ingestion_service: CSVIngestionService | None = None,
        registry: UploadJobRegistry | None = None,
    ) -> None:
        self._ingestion = ingestion_service or get_csv_ingestion_service()
        self._registry = registry or UploadJobRegistry()
        self._workers: dict[uuid.UUID, CSVParseWorker] = {}
        self._workers_lock = threading.Lock()

    def trigger_upload(
        self,
        *,
        executor: UploadTaskExecutor,
        data: bytes,
        file_name: str | None = None,
    ) -> UploadJob:
        """
        Register a job and hand the parse to *executor*.

        Raises UploadInProgressError while another upload is active and
        CSVHeaderValidationError for bytes that are not UTF-8.
        """

        if self._registry.has_active_job() or self._ingestion.is_busy:
            raise UploadInProgressError("Another CSV upload is still being processed.")

        text = decode_csv_bytes(data)
        job = self._registry.create_job(file_name=file_name or "upload.csv")

        try:
            executor.submit(self._run_upload_job, job.job_id, text)
        except Exception:
            self._registry.mark_failed(
                job_id=job.job_id,
                error_message="Failed to schedule CSV upload job.",
            )
            raise

        log_event(logger, logging.INFO, "upload_job_created", job_id=job.job_id, file_name=job.file_name)
        return job

    def get_job(self, job_id: uuid.UUID) -> UploadJob:
        job = self._registry.get_job(job_id)
        if job is None:
            raise UploadJobNotFoundError(f"Upload job not found: {job_id}")
        return job

    def list_jobs(self, *, limit: int = 100, status: str | None = None) -> list[UploadJob]:
        return self._registry.list_jobs(limit=limit, status=status)

    def cancel_job(self, job_id: uuid.UUID) -> UploadJob:
        """
        Cancel an active job and terminate its worker. Finished jobs are returned unchanged.
        """

        self._registry.mark_cancelled(job_id=job_id)
        with self._workers_lock:
            worker = self._workers.get(job_id)
        if worker is not None:
            worker.cancel()
        job = self.get_job(job_id)
        log_event(logger, logging.INFO, "upload_job_cancel_requested", job_id=job_id, status=job.status)
        return job

    def shutdown(self) -> None:
        """
        Cancel every active job. Used on application teardown.
        """

        for job in self._registry.list_jobs(limit=10_000):
            if job.is_active:
                self.cancel_job(job.job_id)

    def _run_upload_job(self, job_id: uuid.UUID, text: str) -> None:
        worker = self._ingestion.create_worker()
        with self._workers_lock:
            self._workers[job_id] = worker

        try:
            if self._registry.mark_running(job_id=job_id) is None:
                return

            summary = self._ingestion.ingest_text(
                text,
                lambda progress: self._registry.update_progress(job_id=job_id, progress=progress),
                worker=worker,
            )
            completed = self._registry.mark_completed(job_id=job_id, summary=summary)
            if completed is not None:
                log_event(
                    logger,
                    logging.INFO,
                    "upload_job_completed",
                    job_id=job_id,
                    orders_loaded=summary.orders_loaded,
                    used_fallback=summary.used_fallback,
                )
        except CSVParseCancelledError:
            log_event(logger, logging.INFO, "upload_job_cancelled", job_id=job_id)
        except Exception as exc:
            self._mark_job_failed(job_id=job_id, exc=exc)
        finally:
            with self._workers_lock:
                self._workers.pop(job_id, None)

    def _mark_job_failed(self, *, job_id: uuid.UUID, exc: Exception) -> None:
        if isinstance(exc, (ValueError, RuntimeError)):
            error_message = str(exc)
        else:
            error_message = f"{type(exc).__name__}: {exc}"
            logger.exception("Upload job failed id=%s", job_id)
        self._registry.mark_failed(job_id=job_id, error_message=error_message[:2000])
        log_event(logger, logging.WARNING, "upload_job_failed", job_id=job_id, error=error_message)


@lru_cache(maxsize=1)
def get_upload_job_service() -> UploadJobService:
    return UploadJobService()
