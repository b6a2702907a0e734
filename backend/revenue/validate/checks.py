"""
Value predicates used by generic and business rules.
"""
import math
import re
from datetime import date
from typing import Any

DATE_PATTERN = re.compile(r"^[0-9]{8}$")
MIN_YEAR = 1900
MAX_YEAR = 2100


def is_empty(value: Any) -> bool:
    """True for None, empty and whitespace-only values."""
    return value is None or str(value).strip() == ""


def as_text(value: Any) -> str:
    """String form used for length checks; dates render as YYYYMMDD."""
    if value is None:
        return ""
    if isinstance(value, date):
        return value.strftime("%Y%m%d")
    return str(value)


def is_number(value: Any) -> bool:
    """True when the value is (or parses as) a finite number."""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return math.isfinite(value)
    text = str(value).strip()
    # float() also parses non-ASCII digits such as Thai numerals
    if not text.isascii():
        return False
    try:
        return math.isfinite(float(text))
    except ValueError:
        return False


def is_table_date(value: Any) -> bool:
    """
    True for an 8-digit YYYYMMDD value with year 1900-2100, month 1-12, day 1-31.

    Day is not checked against the month, so 20240230 passes.
    """
    if isinstance(value, date):
        return MIN_YEAR <= value.year <= MAX_YEAR

    text = str(value).strip()
    if not DATE_PATTERN.match(text):
        return False

    year, month, day = int(text[:4]), int(text[4:6]), int(text[6:8])
    return MIN_YEAR <= year <= MAX_YEAR and 1 <= month <= 12 and 1 <= day <= 31
