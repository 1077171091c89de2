"""
Value parsers shared by the filter compiler (lenient) and the filter
validator (strict). Every parser returns None for input it cannot use; the
caller decides whether that means "ignore" or "reject".
"""

import math
import re
from datetime import date, datetime
from typing import Any, Optional

AGE_MIN = 0
AGE_MAX = 150

_AGE_OPEN = re.compile(r"^\s*(\d{1,3})\s*\+\s*$")
_AGE_BOUNDED = re.compile(r"^\s*(\d{1,3})\s*-\s*(\d{1,3})\s*$")
_NON_DIGITS = re.compile(r"\D")


def parse_amount(value: Any) -> Optional[float]:
    """Parse a non-negative finite number, or None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = float(str(value).strip())
    except ValueError:
        return None
    if math.isnan(amount) or math.isinf(amount) or amount < 0:
        return None
    return amount


def parse_day(value: Any) -> Optional[date]:
    """Parse a calendar day from ``YYYY-MM-DD`` or an ISO timestamp."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        if len(text) == 10:
            return date.fromisoformat(text)
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def parse_age_range(value: Any) -> Optional[tuple[int, Optional[int]]]:
    """
    Parse ``"N+"`` or ``"N-M"`` into ``(N, M)`` (M is None for open ranges).

    Returns None when the format is wrong, a bound falls outside
    [AGE_MIN, AGE_MAX], or N > M.
    """
    if value is None:
        return None
    text = str(value)
    match = _AGE_OPEN.match(text)
    if match:
        low = int(match.group(1))
        return (low, None) if AGE_MIN <= low <= AGE_MAX else None
    match = _AGE_BOUNDED.match(text)
    if match:
        low, high = int(match.group(1)), int(match.group(2))
        if not (AGE_MIN <= low <= AGE_MAX and AGE_MIN <= high <= AGE_MAX):
            return None
        return (low, high) if low <= high else None
    return None


def digits_only(value: Any) -> str:
    """Strip every non-digit character (spaces, +, dashes, parentheses)."""
    return _NON_DIGITS.sub("", str(value or ""))


def split_values(value: Any, cap: int) -> tuple[str, ...]:
    """
    Normalize a multi-select value to a tuple of distinct, trimmed strings.

    Accepts a list or a comma-separated string. Order of first appearance is
    kept so the same input always compiles to the same tuple. At most ``cap``
    values are kept.
    """
    if value is None:
        return ()
    raw = value if isinstance(value, (list, tuple, set, frozenset)) else str(value).split(",")
    seen: dict[str, None] = {}
    for item in raw:
        if item is None:
            continue
        text = str(item).strip()
        if text and text not in seen:
            seen[text] = None
            if len(seen) >= cap:
                break
    return tuple(seen)
