"""
Filter Validator.

Strict checks run before compilation on the search and statistics paths.
The first violation raises ``FilterValidationError`` with a user-facing
reason; nothing is compiled or executed after a rejection.
"""

import logging
from typing import Optional

from app.core.config import get_settings
from app.core.exceptions import FilterValidationError
from app.query.parsing import AGE_MAX, AGE_MIN, parse_age_range, parse_amount, parse_day
from app.schemas.transaction import TransactionFilters

logger = logging.getLogger(__name__)
settings = get_settings()


def validate_filters(
    filters: Optional[TransactionFilters],
    page: Optional[int] = None,
    limit: Optional[int] = None,
) -> None:
    """Raise ``FilterValidationError`` on the first invalid criterion."""
    try:
        _check_pagination(page, limit)
        if filters is not None:
            _check_amounts(filters)
            _check_dates(filters)
            _check_age_range(filters)
    except FilterValidationError as e:
        logger.info(f"Rejected filter criteria: {e.reason}")
        raise


def _check_pagination(page: Optional[int], limit: Optional[int]) -> None:
    if page is not None and page < 1:
        raise FilterValidationError("Page must be 1 or greater")
    if limit is not None and not (1 <= limit <= settings.MAX_PAGE_LIMIT):
        raise FilterValidationError(f"Limit must be between 1 and {settings.MAX_PAGE_LIMIT}")


def _check_amounts(filters: TransactionFilters) -> None:
    low = high = None
    if filters.min_amount is not None:
        low = parse_amount(filters.min_amount)
        if low is None:
            raise FilterValidationError("Minimum amount must be a non-negative number")
    if filters.max_amount is not None:
        high = parse_amount(filters.max_amount)
        if high is None:
            raise FilterValidationError("Maximum amount must be a non-negative number")
    if low is not None and high is not None and low > high:
        raise FilterValidationError("Minimum amount cannot be greater than maximum amount")


def _check_dates(filters: TransactionFilters) -> None:
    start = end = None
    if filters.date_from is not None:
        start = parse_day(filters.date_from)
        if start is None:
            raise FilterValidationError("Invalid start date format, expected YYYY-MM-DD")
    if filters.date_to is not None:
        end = parse_day(filters.date_to)
        if end is None:
            raise FilterValidationError("Invalid end date format, expected YYYY-MM-DD")
    if start is not None and end is not None and start > end:
        raise FilterValidationError("Start date cannot be after end date")


def _check_age_range(filters: TransactionFilters) -> None:
    if filters.age_range is None:
        return
    if parse_age_range(filters.age_range) is not None:
        return

    # Distinguish a reversed range from a malformed one
    parts = filters.age_range.split("-")
    if len(parts) == 2 and all(p.strip().isdigit() for p in parts):
        low, high = int(parts[0]), int(parts[1])
        if AGE_MIN <= low <= AGE_MAX and AGE_MIN <= high <= AGE_MAX and low > high:
            raise FilterValidationError("Minimum age cannot be greater than maximum age")
    raise FilterValidationError(
        f'Invalid age range, expected "N+" or "N-M" with ages between {AGE_MIN} and {AGE_MAX}'
    )
