"""
app/schemas/csv_ingestion.py

Response schemas for CSV upload endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from app.domain.orders import OrderIngestionSummary


class CSVValidationErrorResponse(BaseModel):
    """
    API response model for one row-level validation error.
    """

    row_number: int = Field(..., ge=1)
    message: str
    column: str | None = None
    value: str | None = None


class CSVIngestionSummaryResponse(BaseModel):
    """
    API response model for one processed order export.
    """

    rows_read: int = Field(..., ge=0)
    orders_loaded: int = Field(..., ge=0)
    rows_skipped: int = Field(..., ge=0)
    rows_excluded: int = Field(..., ge=0)
    used_fallback: bool = False
    message: str | None = None
    validation_errors: list[CSVValidationErrorResponse] = Field(default_factory=list)

    @classmethod
    def from_summary(cls, summary: OrderIngestionSummary) -> CSVIngestionSummaryResponse:
        return cls(
            rows_read=summary.rows_read,
            orders_loaded=summary.orders_loaded,
            rows_skipped=summary.rows_skipped,
            rows_excluded=summary.rows_excluded,
            used_fallback=summary.used_fallback,
            message=summary.message,
            validation_errors=[
                CSVValidationErrorResponse(
                    row_number=error.row_number,
                    column=error.column,
                    message=error.message,
                    value=error.value,
                )
                for error in summary.validation_errors
            ],
        )
