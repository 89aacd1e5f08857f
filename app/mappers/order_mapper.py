"""
app/mappers/order_mapper.py

Maps tokenized export rows to typed order records.

The export has a fixed column layout (0-based positions)::

    1 order id    2 date      3 status     9 category
    13 quantity   14 currency 15 amount    16 city      17 state

The first row is the header. Rows with fewer than two columns are skipped,
and records that are cancelled or have a non-positive amount or quantity
are excluded from the aggregation stream.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime

from app.domain.orders import OrderRecord, Row, RowValidationError
from app.mappers.date_parsing import DEFAULT_FALLBACK_OFFSET_DAYS, parse_order_date
from app.validators.csv_validator import OrderFieldValidator

logger = logging.getLogger(__name__)

MIN_ROW_COLUMNS = 2
CANCELLED_STATUS = "Cancelled"

DEFAULT_CURRENCY = "INR"
DEFAULT_CATEGORY = "Uncategorized"
DEFAULT_LOCATION = "Unknown"


@dataclass(frozen=True)
class OrderColumnLayout:
    """
    Column positions of the order export.
    """

    order_id: int = 1
    date: int = 2
    status: int = 3
    category: int = 9
    quantity: int = 13
    currency: int = 14
    amount: int = 15
    city: int = 16
    state: int = 17


DEFAULT_LAYOUT = OrderColumnLayout()


@dataclass(frozen=True)
class OrderMappingResult:
    """
    Outcome of mapping one tokenized table.
    """

    orders: list[OrderRecord]
    headers: tuple[str, ...]
    rows_read: int
    rows_skipped: int
    rows_excluded: int
    validation_errors: list[RowValidationError] = field(default_factory=list)
    validation_error_count: int = 0


def exclusion_reason(order: OrderRecord) -> str | None:
    """
    Return why *order* is left out of aggregation, or ``None`` to keep it.
    """

    if order.status == CANCELLED_STATUS:
        return "cancelled"
    if order.amount <= 0:
        return "non_positive_amount"
    if order.quantity <= 0:
        return "non_positive_quantity"
    return None


class OrderRecordMapper:
    """
    Converts tokenized rows into the filtered order stream used by aggregation.
    """

    def __init__(
        self,
        *,
        layout: OrderColumnLayout = DEFAULT_LAYOUT,
        validator: OrderFieldValidator | None = None,
        fallback_date_offset_days: int = DEFAULT_FALLBACK_OFFSET_DAYS,
        max_validation_errors: int = 500,
        log_validation_errors: bool = False,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._layout = layout
        self._validator = validator or OrderFieldValidator()
        self._fallback_date_offset_days = fallback_date_offset_days
        self._max_validation_errors = max(1, max_validation_errors)
        self._log_validation_errors = log_validation_errors
        self._clock = clock

    def map_rows(self, rows: Sequence[Row]) -> OrderMappingResult:
        """
        Validate the header row and map every data row.

        Raises CSVHeaderValidationError before touching any data row when
        the header does not match the export format.
        """

        headers = self._validator.validate_headers(rows[0] if rows else None)
        now = self._clock()

        orders: list[OrderRecord] = []
        captured_errors: list[RowValidationError] = []
        error_count = 0
        rows_skipped = 0
        rows_excluded = 0

        for row_number, row in enumerate(rows[1:], start=2):
            if len(row) < MIN_ROW_COLUMNS or self._validator.is_completely_empty_row(row):
                rows_skipped += 1
                continue

            row_errors: list[RowValidationError] = []
            order = self.map_row(row, row_number=row_number, errors=row_errors, now=now)
            for error in row_errors:
                error_count += 1
                self._record_error(captured_errors, error)

            if exclusion_reason(order) is not None:
                rows_excluded += 1
                continue
            orders.append(order)

        logger.info(
            "Mapped order export rows=%d orders=%d skipped=%d excluded=%d validation_errors=%d",
            len(rows) - 1,
            len(orders),
            rows_skipped,
            rows_excluded,
            error_count,
        )
        return OrderMappingResult(
            orders=orders,
            headers=tuple(headers),
            rows_read=len(rows) - 1,
            rows_skipped=rows_skipped,
            rows_excluded=rows_excluded,
            validation_errors=captured_errors,
            validation_error_count=error_count,
        )

    def map_row(
        self,
        row: Row,
        *,
        row_number: int,
        errors: list[RowValidationError],
        now: datetime | None = None,
    ) -> OrderRecord:
        """
        Map one data row. Never raises; coercion problems land in *errors*.
        """

        layout = self._layout
        raw_date = _field(row, layout.date)
        parsed_date = parse_order_date(
            raw_date,
            now=now,
            fallback_offset_days=self._fallback_date_offset_days,
        )
        if parsed_date.inferred:
            errors.append(
                RowValidationError(
                    row_number=row_number,
                    column="date",
                    message="Date could not be parsed; a placeholder date was used.",
                    value=raw_date,
                )
            )

        return OrderRecord(
            order_id=self._validator.parse_text(_field(row, layout.order_id), ""),
            date=parsed_date.value,
            status=self._validator.parse_text(_field(row, layout.status), ""),
            quantity=self._validator.parse_quantity(
                value=_field(row, layout.quantity),
                row_number=row_number,
                column="quantity",
                errors=errors,
            ),
            amount=self._validator.parse_amount(
                value=_field(row, layout.amount),
                row_number=row_number,
                column="amount",
                errors=errors,
            ),
            currency=self._validator.parse_text(_field(row, layout.currency), DEFAULT_CURRENCY),
            category=self._validator.parse_text(_field(row, layout.category), DEFAULT_CATEGORY),
            city=self._validator.parse_text(_field(row, layout.city), DEFAULT_LOCATION),
            state=self._validator.parse_text(_field(row, layout.state), DEFAULT_LOCATION),
            date_inferred=parsed_date.inferred,
        )

    def _record_error(
        self,
        captured_errors: list[RowValidationError],
        error: RowValidationError,
    ) -> None:
        if self._log_validation_errors:
            logger.warning(
                "Order row validation error row=%s column=%s message=%s value=%r",
                error.row_number,
                error.column,
                error.message,
                error.value,
            )

        if len(captured_errors) < self._max_validation_errors:
            captured_errors.append(error)


def _field(row: Row, index: int) -> str | None:
    return row[index] if index < len(row) else None
