"""
app/api/routers/csv_ingestion.py

CSV upload HTTP endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, UploadFile, status

from app.api.dependencies import get_csv_upload
from app.schemas.csv_ingestion import CSVIngestionSummaryResponse
from app.services.csv_ingestion_service import (
    CSVIngestionService,
    UploadInProgressError,
    get_csv_ingestion_service,
)
from app.validators.csv_validator import CSVHeaderValidationError
from app.workers.csv_worker import CSVParseError

router = APIRouter(tags=["ingestion"])


@router.post("/upload-csv", response_model=CSVIngestionSummaryResponse)
async def upload_csv(
    file: UploadFile = Depends(get_csv_upload),
    ingestion_service: CSVIngestionService = Depends(get_csv_ingestion_service),
) -> CSVIngestionSummaryResponse:
    """
    Replace the dashboard dataset with the orders in one exported CSV file.

    The file is tokenized in a worker process; the event loop keeps serving
    other requests meanwhile.
    """

    try:
        summary = await ingestion_service.ingest_upload_async(file)
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
    except CSVParseError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    finally:
        await file.close()

    return CSVIngestionSummaryResponse.from_summary(summary)
