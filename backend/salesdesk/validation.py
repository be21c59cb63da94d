from __future__ import annotations
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from salesdesk.time_utils import parse_iso_date


# Maximum magnitude: $9,999,999,999.99
# This prevents database overflow issues and nonsensical amounts
MAX_AMOUNT_CENTS = 999_999_999_999

# Largest id a 64-bit signed INTEGER column can hold
MAX_ID = 2**63 - 1


class ValidationError(ValueError):
    """400-level input problem."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


def coerce_id(value: Any, field: str) -> int:
    """
    Strict integer id coercion.

    Accepts ints (not bools) and plain ASCII digit strings. Rejects floats,
    decimals, scientific notation, non-ASCII digits and ids above MAX_ID.
    """
    if value is None:
        raise ValidationError(f"{field} is required", field=field)

    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer", field=field)

    if isinstance(value, int):
        result = value
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{field} is required", field=field)
        if not (stripped.isascii() and stripped.isdigit()):
            raise ValidationError(f"{field} must be an integer", field=field)
        digits = stripped.lstrip("0") or "0"
        if len(digits) > len(str(MAX_ID)):
            raise ValidationError(f"{field} is out of range", field=field)
        result = int(digits)
    else:
        raise ValidationError(f"{field} must be an integer", field=field)

    if result <= 0:
        raise ValidationError(f"{field} must be a positive integer", field=field)
    if result > MAX_ID:
        raise ValidationError(f"{field} is out of range", field=field)
    return result


def coerce_date(value: Any, field: str) -> date:
    """Accept a date (not datetime) or a "YYYY-MM-DD" string."""
    if value is None:
        raise ValidationError(f"{field} is required", field=field)

    if isinstance(value, datetime):
        raise ValidationError(f"{field} must be a calendar date (YYYY-MM-DD)", field=field)
    if isinstance(value, date):
        return value

    if isinstance(value, str):
        try:
            parsed = parse_iso_date(value)
        except ValueError:
            raise ValidationError(f"{field} must be a calendar date (YYYY-MM-DD)", field=field)
        if parsed is None:
            raise ValidationError(f"{field} is required", field=field)
        return parsed

    raise ValidationError(f"{field} must be a calendar date (YYYY-MM-DD)", field=field)


def coerce_amount_cents(value: Any, field: str = "amount") -> int:
    """
    Convert a decimal amount with at most 2 fractional digits to cents.

    Accepts Decimal, int, float and numeric strings. No sign constraint:
    zero and negative amounts are allowed.
    """
    if value is None:
        raise ValidationError(f"{field} is required", field=field)

    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number", field=field)

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, (float, str)):
        text = str(value).strip()
        if not text:
            raise ValidationError(f"{field} is required", field=field)
        try:
            amount = Decimal(text)
        except InvalidOperation:
            raise ValidationError(f"{field} must be a number", field=field)
    else:
        raise ValidationError(f"{field} must be a number", field=field)

    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number", field=field)

    # Magnitude check first; scaling a huge exponent overflows the decimal context
    if amount and amount.adjusted() >= len(str(MAX_AMOUNT_CENTS)) - 2:
        raise ValidationError(f"{field} exceeds the maximum allowed amount", field=field)

    if amount != amount.quantize(Decimal("0.01")):
        raise ValidationError(f"{field} must have at most 2 decimal places", field=field)

    cents_int = int(amount.scaleb(2))
    if abs(cents_int) > MAX_AMOUNT_CENTS:
        raise ValidationError(f"{field} exceeds the maximum allowed amount", field=field)
    return cents_int
