"""
app/validators/csv_validator.py

Header checks and field coercion for order export rows.

Coercion never raises: an unusable value falls back to the field default
and the problem is recorded as a :class:`RowValidationError` so the caller
can report it.
"""

from __future__ import annotations

import math
import re
from collections.abc import Sequence
from typing import Any

from app.domain.orders import RowValidationError

DEFAULT_QUANTITY = 1
DEFAULT_AMOUNT = 0.0

# Leading-number semantics: "2 pcs" reads as 2, "399.00 INR" as 399.0.
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_LEADING_DECIMAL = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


class CSVHeaderValidationError(ValueError):
    """
    Raised when CSV shape/header validation fails.
    """


class OrderFieldValidator:
    """
    Validates export shape and coerces raw field strings into typed values.
    """

    def __init__(self, *, min_header_columns: int = 10) -> None:
        self._min_header_columns = max(1, min_header_columns)

    @property
    def min_header_columns(self) -> int:
        return self._min_header_columns

    def validate_headers(self, headers: Sequence[str] | None) -> list[str]:
        """
        Return the header row, or raise when it is not the expected export format.
        """

        if not headers:
            raise CSVHeaderValidationError("CSV header row is missing.")
        if len(headers) < self._min_header_columns:
            raise CSVHeaderValidationError(
                "CSV format is not valid. Expected at least "
                f"{self._min_header_columns} columns in the header row, got {len(headers)}. "
                "Make sure you're uploading the correct order report."
            )
        return [header.strip() for header in headers]

    def is_completely_empty_row(self, row: Sequence[Any]) -> bool:
        """
        Return True when all values in the row are empty or whitespace.
        """

        return all(self._is_blank(value) for value in row)

    def parse_quantity(
        self,
        *,
        value: str | None,
        row_number: int,
        column: str,
        errors: list[RowValidationError],
    ) -> int:
        if self._is_blank(value):
            return DEFAULT_QUANTITY

        match = _LEADING_INT.match(str(value))
        if match is None:
            errors.append(
                RowValidationError(
                    row_number=row_number,
                    column=column,
                    message=f"Quantity is not a whole number; defaulted to {DEFAULT_QUANTITY}.",
                    value=self._stringify_value(value),
                )
            )
            return DEFAULT_QUANTITY
        return int(match.group(1))

    def parse_amount(
        self,
        *,
        value: str | None,
        row_number: int,
        column: str,
        errors: list[RowValidationError],
    ) -> float:
        if self._is_blank(value):
            return DEFAULT_AMOUNT

        match = _LEADING_DECIMAL.match(str(value))
        amount = float(match.group(1)) if match is not None else math.nan
        if not math.isfinite(amount):
            errors.append(
                RowValidationError(
                    row_number=row_number,
                    column=column,
                    message=f"Amount is not a number; defaulted to {DEFAULT_AMOUNT:g}.",
                    value=self._stringify_value(value),
                )
            )
            return DEFAULT_AMOUNT
        return amount

    def parse_text(self, value: str | None, default: str) -> str:
        if self._is_blank(value):
            return default
        return str(value).strip()

    @staticmethod
    def _is_blank(value: Any) -> bool:
        if value is None:
            return True
        return str(value).strip() == ""

    @staticmethod
    def _stringify_value(value: Any) -> str | None:
        if value is None:
            return None
        return str(value)
