"""Small value helpers shared by the bookkeeping services."""

import re
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation

OBJECT_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")

ZERO = Decimal("0")


def is_valid_object_id(value) -> bool:
    """True when value is a 24-character hexadecimal identifier."""
    return isinstance(value, str) and bool(OBJECT_ID_PATTERN.match(value))


def parse_amount(value) -> Decimal | None:
    """
    Read a monetary amount as a Decimal.

    Missing amounts (None or an empty string) read as zero.
    Floats go through str() so that 100.01 stays 100.01.
    Returns None when the value is not a finite number.
    """
    if value is None or value == "":
        return ZERO
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return None
    if not amount.is_finite():
        return None
    return amount


def parse_date(value) -> datetime | None:
    """
    Read a transaction date from a datetime, a date or an ISO string.

    Returns None when the value cannot be read as a date.
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time())
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None
    return None
