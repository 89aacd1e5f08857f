"""
app/validators package marker.
"""

from app.validators.csv_validator import CSVHeaderValidationError, OrderFieldValidator

__all__ = [
    "CSVHeaderValidationError",
    "OrderFieldValidator",
]
