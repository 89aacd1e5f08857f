"""
tests/test_order_mapper.py

Pytest unit tests for OrderRecordMapper and OrderFieldValidator.

Coverage
--------
- Header width check
- Fixed column layout mapping and defaults
- Skipped short/empty rows
- Exclusion of cancelled and non-positive records
- Validation error capture for bad numbers and dates
"""

from __future__ import annotations

from datetime import datetime

import pytest

from app.domain.orders import RowValidationError
from app.mappers.order_mapper import OrderRecordMapper, exclusion_reason
from app.validators.csv_validator import CSVHeaderValidationError, OrderFieldValidator

NOW = datetime(2024, 6, 20, 9, 0)

HEADER = [
    "index", "Order ID", "Date", "Status", "Fulfilment", "Sales Channel", "ship-service-level",
    "Style", "SKU", "Category", "Size", "ASIN", "Courier Status", "Qty", "currency", "Amount",
    "ship-city", "ship-state",
]


def _row(
    *,
    order_id: str = "171-9198151-1101146",
    day: str = "04-30-22",
    status: str = "Shipped",
    category: str = "kurta",
    qty: str = "1",
    currency: str = "INR",
    amount: str = "406",
    city: str = "BENGALURU",
    state: str = "KARNATAKA",
) -> list[str]:
    return [
        "0", order_id, day, status, "Merchant", "Amazon.in", "Standard", "SET389", "SET389-KR-NP-S",
        category, "S", "B09KXVBD7Z", "", qty, currency, amount, city, state,
    ]


@pytest.fixture()
def mapper() -> OrderRecordMapper:
    return OrderRecordMapper(clock=lambda: NOW)


# ---------------------------------------------------------------------------
# Header
# ---------------------------------------------------------------------------


class TestHeader:
    def test_narrow_header_is_rejected(self, mapper: OrderRecordMapper) -> None:
        with pytest.raises(CSVHeaderValidationError, match="correct order report"):
            mapper.map_rows([["a", "b", "c", "d", "e", "f"], _row()])

    def test_missing_header_is_rejected(self, mapper: OrderRecordMapper) -> None:
        with pytest.raises(CSVHeaderValidationError, match="missing"):
            mapper.map_rows([])

    def test_header_width_is_configurable(self) -> None:
        narrow = OrderRecordMapper(validator=OrderFieldValidator(min_header_columns=3))
        result = narrow.map_rows([["a", "b", "c"]])
        assert result.orders == []
        assert result.rows_read == 0


# ---------------------------------------------------------------------------
# Mapping
# ---------------------------------------------------------------------------


class TestMapping:
    def test_maps_fixed_columns(self, mapper: OrderRecordMapper) -> None:
        result = mapper.map_rows([HEADER, _row()])

        (order,) = result.orders
        assert order.order_id == "171-9198151-1101146"
        assert order.date == datetime(2022, 4, 30, 12)
        assert order.status == "Shipped"
        assert order.category == "kurta"
        assert order.quantity == 1
        assert order.currency == "INR"
        assert order.amount == 406.0
        assert order.city == "BENGALURU"
        assert order.state == "KARNATAKA"
        assert not order.date_inferred
        assert result.validation_errors == []

    def test_missing_columns_use_defaults(self, mapper: OrderRecordMapper) -> None:
        short = _row()[:4]
        errors: list[RowValidationError] = []

        order = mapper.map_row(short, row_number=2, errors=errors, now=NOW)

        assert order.quantity == 1
        assert order.amount == 0.0
        assert order.currency == "INR"
        assert order.category == "Uncategorized"
        assert order.city == "Unknown"
        assert order.state == "Unknown"
        assert errors == []

    def test_text_fields_are_stripped(self, mapper: OrderRecordMapper) -> None:
        result = mapper.map_rows([HEADER, _row(category="  Set ", state=" DELHI ")])
        assert result.orders[0].category == "Set"
        assert result.orders[0].state == "DELHI"

    def test_leading_number_semantics(self, mapper: OrderRecordMapper) -> None:
        result = mapper.map_rows([HEADER, _row(qty="2 pcs", amount="399.50 INR")])
        assert result.orders[0].quantity == 2
        assert result.orders[0].amount == 399.5

    def test_short_and_blank_rows_are_skipped(self, mapper: OrderRecordMapper) -> None:
        result = mapper.map_rows([HEADER, ["only-one"], ["", "  ", ""], _row()])
        assert result.rows_read == 3
        assert result.rows_skipped == 2
        assert len(result.orders) == 1


# ---------------------------------------------------------------------------
# Exclusion
# ---------------------------------------------------------------------------


class TestExclusion:
    def test_cancelled_rows_are_excluded(self, mapper: OrderRecordMapper) -> None:
        result = mapper.map_rows([HEADER, _row(status="Cancelled"), _row(order_id="keep")])
        assert [order.order_id for order in result.orders] == ["keep"]
        assert result.rows_excluded == 1

    @pytest.mark.parametrize(
        ("qty", "amount"),
        [("1", "0"), ("1", "-5"), ("0", "100"), ("1", ""), ("1", "n/a")],
    )
    def test_non_positive_rows_are_excluded(self, mapper: OrderRecordMapper, qty: str, amount: str) -> None:
        result = mapper.map_rows([HEADER, _row(qty=qty, amount=amount)])
        assert result.orders == []
        assert result.rows_excluded == 1

    def test_surviving_orders_satisfy_filter(self, mapper: OrderRecordMapper) -> None:
        rows = [HEADER] + [
            _row(status=status, qty=qty, amount=amount)
            for status in ("Shipped", "Cancelled", "Pending")
            for qty in ("0", "1", "3")
            for amount in ("0", "10.5", "-1")
        ]
        for order in mapper.map_rows(rows).orders:
            assert order.status != "Cancelled"
            assert order.amount > 0
            assert order.quantity > 0
            assert exclusion_reason(order) is None


# ---------------------------------------------------------------------------
# Validation errors
# ---------------------------------------------------------------------------


class TestValidationErrors:
    def test_bad_amount_is_recorded(self, mapper: OrderRecordMapper) -> None:
        result = mapper.map_rows([HEADER, _row(amount="n/a")])
        (error,) = result.validation_errors
        assert error.row_number == 2
        assert error.column == "amount"
        assert error.value == "n/a"

    def test_unparseable_date_uses_flagged_placeholder(self, mapper: OrderRecordMapper) -> None:
        result = mapper.map_rows([HEADER, _row(day="sometime")])

        (order,) = result.orders
        assert order.date_inferred
        assert order.date == datetime(2024, 6, 5, 12)
        assert [error.column for error in result.validation_errors] == ["date"]

    def test_error_capture_is_bounded(self) -> None:
        mapper = OrderRecordMapper(max_validation_errors=2, clock=lambda: NOW)
        rows = [HEADER] + [_row(amount="bad") for _ in range(5)]

        result = mapper.map_rows(rows)

        assert len(result.validation_errors) == 2
        assert result.validation_error_count == 5
