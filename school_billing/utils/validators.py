# school_billing/utils/validators.py - input checks shared by the billing services
import re
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Tuple

from school_billing.core.errors import ValidationError
from school_billing.models.fee import FREQUENCIES

ACADEMIC_YEAR_RE = re.compile(r"\d{4}-\d{4}", re.ASCII)
CENT = Decimal("0.01")
# Largest value a Numeric(12, 2) column holds
MAX_AMOUNT = Decimal("9999999999.99")


def to_decimal(value: Any) -> Decimal:
    """Convert whatever the storage layer hands back into a Decimal"""
    if value is None:
        return Decimal("0.00")
    return value if isinstance(value, Decimal) else Decimal(str(value))


def parse_amount(value: Any, field: str = "amount") -> Decimal:
    """Validate a positive two-decimal currency amount that fits Numeric(12, 2)"""
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field} is required and must be a positive number", details={"field": field})
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
        if not amount.is_finite() or amount <= 0:
            raise ValidationError(f"{field} must be a positive number", details={"field": field, "value": str(value)})
        if amount > MAX_AMOUNT:
            raise ValidationError(
                f"{field} must not exceed {MAX_AMOUNT}", details={"field": field, "value": str(value)}
            )
        quantized = amount.quantize(CENT)
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field} must be a positive number", details={"field": field, "value": str(value)})

    if amount != quantized:
        raise ValidationError(f"{field} must have at most two decimal places", details={"field": field, "value": str(value)})
    return quantized


def parse_academic_year(value: Any) -> Tuple[int, int]:
    """Check a "YYYY-YYYY" label and return its two calendar years"""
    if not isinstance(value, str) or not ACADEMIC_YEAR_RE.fullmatch(value):
        raise ValidationError(
            "Academic year must be in YYYY-YYYY format",
            details={"field": "academic_year", "value": value},
        )
    first, second = (int(part) for part in value.split("-"))
    if second != first + 1:
        raise ValidationError(
            "Academic year must span two consecutive years",
            details={"field": "academic_year", "value": value},
        )
    return first, second


def validate_month(value: Any) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        month = value
    elif isinstance(value, str) and value.strip().isdigit():
        month = int(value.strip())
    else:
        raise ValidationError("Month must be between 1 and 12", details={"field": "month", "value": value})
    if month < 1 or month > 12:
        raise ValidationError("Month must be between 1 and 12", details={"field": "month", "value": value})
    return month


def validate_frequency(value: Any) -> str:
    if value not in FREQUENCIES:
        raise ValidationError(
            "Frequency must be monthly, annual, or one-time",
            details={"field": "frequency", "value": value},
        )
    return value


def validate_due_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError:
            pass
    raise ValidationError("due_date must be a calendar date (YYYY-MM-DD)", details={"field": "due_date", "value": str(value)})


def validate_id(value: Any, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(f"{field} must be a positive integer", details={"field": field, "value": value})
    return value
