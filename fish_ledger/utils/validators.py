# utils/validators.py
from datetime import date

from .helpers import to_decimal


def non_empty(text: str) -> bool:
    """
    True if `text` is not None/empty after stripping whitespace.
    """
    return bool(text and str(text).strip())


# ---- Numeric parsing & validators ----

def try_parse_decimal(x):
    """
    Best-effort parse to Decimal.

    Returns:
        (ok: bool, value: Decimal|None)
    """
    try:
        return True, to_decimal(x)
    except (ValueError, TypeError):
        return False, None


def is_non_negative_number(x) -> bool:
    """
    True iff x parses and value >= 0.
    """
    ok, val = try_parse_decimal(x)
    return bool(ok and val is not None and val >= 0)


def is_strictly_positive_number(x) -> bool:
    """
    True iff x parses and value > 0.
    """
    ok, val = try_parse_decimal(x)
    return bool(ok and val is not None and val > 0)


# ---- Dates ----

def is_iso_date(text) -> bool:
    """
    True for 'YYYY-MM-DD' strings that name a real calendar day.

    Other forms fromisoformat accepts (week dates, basic format) are rejected:
    stored dates must sort as plain strings.
    """
    if not isinstance(text, str):
        return False
    try:
        parsed = date.fromisoformat(text)
    except ValueError:
        return False
    return parsed.isoformat() == text


def is_valid_range(date_from: str, date_to: str) -> bool:
    """
    Both ends are ISO dates and date_from <= date_to.
    ISO strings compare in calendar order, so no parsing beyond validation.
    """
    return is_iso_date(date_from) and is_iso_date(date_to) and date_from <= date_to
