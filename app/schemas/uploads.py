"""
Schemas for background upload trigger and status endpoints.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from app.schemas.csv_ingestion import CSVIngestionSummaryResponse


class UploadJobAcceptedResponse(BaseModel):
    job_id: UUID
    file_name: str
    status: str
    created_at: datetime


class UploadJobStatusResponse(BaseModel):
    job_id: UUID
    file_name: str
    status: str
    progress: float = Field(..., ge=0.0, le=1.0)
    created_at: datetime
    updated_at: datetime
    started_at: datetime | None = None
    completed_at: datetime | None = None
    summary: CSVIngestionSummaryResponse | None = None
    error_message: str | None = None


class UploadJobListResponse(BaseModel):
    jobs: list[UploadJobStatusResponse] = Field(default_factory=list)
