"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation.
"""

from __future__ import annotations

from datetime import date

from fastapi import File, HTTPException, Query, UploadFile, status

CSV_CONTENT_TYPES = {
    "text/csv",
    "application/csv",
    "application/vnd.ms-excel",
}

INVALID_FILE_FORMAT_MESSAGE = "Invalid file format. Please upload a .csv file."


def get_csv_upload(file: UploadFile = File(...)) -> UploadFile:
    """
    Validate that the uploaded file is a CSV by extension or MIME type.
    """

    filename = (file.filename or "").strip().lower()
    content_type = (file.content_type or "").strip().lower()

    is_csv_filename = filename.endswith(".csv")
    is_csv_content_type = content_type in CSV_CONTENT_TYPES

    if not is_csv_filename and not is_csv_content_type:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=INVALID_FILE_FORMAT_MESSAGE,
        )

    return file


class MetricFilters:
    """
    Optional dashboard filters shared by every metrics endpoint.
    """

    def __init__(
        self,
        start_date: date | None = Query(default=None, description="Inclusive first day"),
        end_date: date | None = Query(default=None, description="Inclusive last day"),
        category: str | None = Query(default=None, description="Exact category match"),
        region: str | None = Query(default=None, description="Exact state match"),
    ) -> None:
        if start_date is not None and end_date is not None and start_date > end_date:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="start_date must not be after end_date.",
            )
        self.start_date = start_date
        self.end_date = end_date
        self.category = category.strip() if category and category.strip() else None
        self.region = region.strip() if region and region.strip() else None
