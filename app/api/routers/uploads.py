"""
Background CSV upload endpoints with progress polling and cancellation.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, UploadFile, status

from app.api.dependencies import get_csv_upload
from app.schemas.csv_ingestion import CSVIngestionSummaryResponse
from app.schemas.uploads import (
    UploadJobAcceptedResponse,
    UploadJobListResponse,
    UploadJobStatusResponse,
)
from app.services.csv_ingestion_service import UploadInProgressError
from app.services.upload_job_service import (
    FastAPIBackgroundTaskExecutor,
    UploadJob,
    UploadJobNotFoundError,
    UploadJobService,
    get_upload_job_service,
)
from app.validators.csv_validator import CSVHeaderValidationError

router = APIRouter(tags=["uploads"])


@router.post(
    "/uploads",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=UploadJobAcceptedResponse,
)
async def trigger_upload(
    background_tasks: BackgroundTasks,
    file: UploadFile = Depends(get_csv_upload),
    jobs: UploadJobService = Depends(get_upload_job_service),
) -> UploadJobAcceptedResponse:
    try:
        data = await file.read()
        job = jobs.trigger_upload(
            executor=FastAPIBackgroundTaskExecutor(background_tasks),
            data=data,
            file_name=file.filename,
        )
    except UploadInProgressError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc
    except CSVHeaderValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    finally:
        await file.close()

    return UploadJobAcceptedResponse(
        job_id=job.job_id,
        file_name=job.file_name,
        status=job.status,
        created_at=job.created_at,
    )


@router.get("/uploads", response_model=UploadJobListResponse)
def list_uploads(
    status_filter: str | None = Query(default=None, alias="status", description="Optional status filter"),
    limit: int = Query(default=100, ge=1, le=500, description="Max jobs returned"),
    jobs: UploadJobService = Depends(get_upload_job_service),
) -> UploadJobListResponse:
    return UploadJobListResponse(
        jobs=[_to_status_response(job) for job in jobs.list_jobs(limit=limit, status=status_filter)]
    )


@router.get("/uploads/{job_id}", response_model=UploadJobStatusResponse)
def get_upload(
    job_id: UUID,
    jobs: UploadJobService = Depends(get_upload_job_service),
) -> UploadJobStatusResponse:
    try:
        job = jobs.get_job(job_id)
    except UploadJobNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    return _to_status_response(job)


@router.delete("/uploads/{job_id}", response_model=UploadJobStatusResponse)
def cancel_upload(
    job_id: UUID,
    jobs: UploadJobService = Depends(get_upload_job_service),
) -> UploadJobStatusResponse:
    """
    Force-terminate a running upload. The dataset is left unchanged.
    """

    try:
        job = jobs.cancel_job(job_id)
    except UploadJobNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    return _to_status_response(job)


def _to_status_response(job: UploadJob) -> UploadJobStatusResponse:
    return UploadJobStatusResponse(
        job_id=job.job_id,
        file_name=job.file_name,
        status=job.status,
        progress=job.progress,
        created_at=job.created_at,
        updated_at=job.updated_at,
        started_at=job.started_at,
        completed_at=job.completed_at,
        summary=CSVIngestionSummaryResponse.from_summary(job.summary) if job.summary else None,
        error_message=job.error_message,
    )
