"""
app/mappers package marker.
"""

from app.mappers.date_parsing import ParsedOrderDate, parse_order_date
from app.mappers.order_mapper import (
    DEFAULT_LAYOUT,
    OrderColumnLayout,
    OrderMappingResult,
    OrderRecordMapper,
    exclusion_reason,
)

__all__ = [
    "DEFAULT_LAYOUT",
    "OrderColumnLayout",
    "OrderMappingResult",
    "OrderRecordMapper",
    "ParsedOrderDate",
    "exclusion_reason",
    "parse_order_date",
]
