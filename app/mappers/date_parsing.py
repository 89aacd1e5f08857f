"""
app/mappers/date_parsing.py

Order date parsing for the marketplace export.

Strategy order (first success wins)
-----------------------------------
    contains "-"   MM-dd-yy  →  dd-MM-yy  →  yyyy-MM-dd  →  free-form
    contains "/"   MM/dd/yy  →  dd/MM/yy  →  free-form
    otherwise      free-form

Two-digit years resolve to the century within 50 years of the processing
time. Free-form values must name a full date.

When every strategy fails, the date falls back to a placeholder a fixed
number of days before the processing time and is flagged ``inferred``.
Whatever wins is pinned to 12:00 local time so that later ``YYYY-MM-DD``
formatting never crosses a day boundary.

:func:`parse_order_date` never raises.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from dateutil import parser as dateutil_parser

DateStrategy = Callable[[str], datetime | None]

DASH_FORMATS: tuple[str, ...] = ("%m-%d-%y", "%d-%m-%y", "%Y-%m-%d")
SLASH_FORMATS: tuple[str, ...] = ("%m/%d/%y", "%d/%m/%y")

FREE_FORM_STRATEGY = "free_form"
FALLBACK_STRATEGY = "fallback"
DEFAULT_FALLBACK_OFFSET_DAYS = 15

# Two defaults that differ in year, month and day; a value that keeps any of
# them from the default was incomplete.
_FREE_FORM_DEFAULTS = (datetime(2001, 1, 1), datetime(2002, 12, 28))


@dataclass(frozen=True)
class ParsedOrderDate:
    value: datetime
    strategy: str
    """Name of the strategy that produced ``value`` (a strptime format, ``free_form`` or ``fallback``)."""

    inferred: bool = False


def normalize_to_noon(value: datetime) -> datetime:
    """
    Convert to naive local time and pin the time of day to 12:00.
    """

    if value.tzinfo is not None:
        value = value.astimezone().replace(tzinfo=None)
    return value.replace(hour=12, minute=0, second=0, microsecond=0)


def pivot_two_digit_year(value: datetime, reference: datetime) -> datetime | None:
    """
    Move *value* to the century that puts it within 50 years of *reference*.

    ``"70"`` read in 2026 becomes 2070, ``"77"`` becomes 1977.
    """

    two_digit = value.year % 100
    year = reference.year - reference.year % 100 + two_digit
    if year > reference.year + 50:
        year -= 100
    elif year < reference.year - 49:
        year += 100
    try:
        return value.replace(year=year)
    except ValueError:
        # Feb 29 landing in a non-leap year.
        return None


def _strptime_strategy(fmt: str, reference: datetime) -> DateStrategy:
    two_digit_year = "%y" in fmt

    def _parse(raw: str) -> datetime | None:
        try:
            parsed = datetime.strptime(raw, fmt)
        except ValueError:
            return None
        return pivot_two_digit_year(parsed, reference) if two_digit_year else parsed

    return _parse


def parse_free_form(raw: str) -> datetime | None:
    """
    Parse a free-form date that names a full year, month and day.

    Partial values such as ``"Monday"``, ``"12"`` or ``"2022"`` return ``None``
    instead of borrowing the missing parts from the current date.
    """

    if not raw:
        return None
    try:
        first, second = (dateutil_parser.parse(raw, default=default) for default in _FREE_FORM_DEFAULTS)
    except (ValueError, OverflowError):
        return None
    if first.date() != second.date():
        return None
    return first


def strategies_for(raw: str, *, now: datetime | None = None) -> list[tuple[str, DateStrategy]]:
    """
    Return the prioritized ``(name, strategy)`` list for one raw date string.
    """

    reference = now if now is not None else datetime.now()
    if "-" in raw:
        formats = DASH_FORMATS
    elif "/" in raw:
        formats = SLASH_FORMATS
    else:
        formats = ()

    strategies: list[tuple[str, DateStrategy]] = [
        (fmt, _strptime_strategy(fmt, reference)) for fmt in formats
    ]
    strategies.append((FREE_FORM_STRATEGY, parse_free_form))
    return strategies


def parse_order_date(
    raw: str | None,
    *,
    now: datetime | None = None,
    fallback_offset_days: int = DEFAULT_FALLBACK_OFFSET_DAYS,
) -> ParsedOrderDate:
    """
    Parse one export date value, falling back to a flagged placeholder.
    """

    reference = now if now is not None else datetime.now()
    text = (raw or "").strip()
    for name, strategy in strategies_for(text, now=reference):
        parsed = strategy(text)
        if parsed is not None:
            return ParsedOrderDate(value=normalize_to_noon(parsed), strategy=name)

    placeholder = reference - timedelta(days=fallback_offset_days)
    return ParsedOrderDate(
        value=normalize_to_noon(placeholder),
        strategy=FALLBACK_STRATEGY,
        inferred=True,
    )
