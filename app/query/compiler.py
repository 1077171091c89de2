"""
Filter Compiler.

Turns ``TransactionFilters`` into a store-agnostic ``Predicate``. The
compiler never rejects input: values it cannot interpret are treated as
absent. Strict rejection is the job of ``app.query.validation``.

Field rules:
  - customerId / storeId / orderStatus      exact match
  - gender / paymentMethod / customerRegion /
    productCategory                         exact match, or membership for lists
  - brand / customerName                    case-insensitive literal substring
  - phoneNumber                             digits-only substring
  - customerName + phoneNumber together     name OR phone (single search box)
  - tags                                    has any of (list or comma string)
  - dateFrom / dateTo                       inclusive day range, overrides date
  - date                                    exact calendar day
  - minAmount / maxAmount                   inclusive bounds on finalAmount
  - ageRange                                "N+" or "N-M"
"""

from datetime import date, timedelta
from typing import Optional

from app.core.config import get_settings
from app.query.parsing import (
    digits_only,
    parse_age_range,
    parse_amount,
    parse_day,
    split_values,
)
from app.query.predicates import MATCH_ALL, AnyOf, Contains, Equals, In, Or, Predicate, Range
from app.schemas.transaction import TransactionFilters

settings = get_settings()

EXACT_FIELDS = ("customer_id", "store_id", "order_status")
MULTI_SELECT_FIELDS = ("gender", "payment_method", "customer_region", "product_category")


def compile_filters(
    filters: Optional[TransactionFilters],
    max_values: Optional[int] = None,
) -> Predicate:
    """Compile filter criteria to a predicate. Pure: same input, same output."""
    if filters is None:
        return MATCH_ALL

    cap = max_values or settings.MAX_FILTER_VALUES
    constraints = []

    for name in EXACT_FIELDS:
        value = getattr(filters, name)
        if value:
            constraints.append(Equals(name, value.strip()))

    for name in MULTI_SELECT_FIELDS:
        constraint = _selection(name, getattr(filters, name), cap)
        if constraint is not None:
            constraints.append(constraint)

    constraints.extend(_text_search(filters))

    if filters.brand and filters.brand.strip():
        constraints.append(Contains("brand", filters.brand.strip().lower()))

    tags = split_values(filters.tags, cap)
    if tags:
        constraints.append(AnyOf("tags", tags))

    date_constraint = _date_window(filters)
    if date_constraint is not None:
        constraints.append(date_constraint)

    low, high = parse_amount(filters.min_amount), parse_amount(filters.max_amount)
    if low is not None or high is not None:
        constraints.append(Range("final_amount", low, high))

    ages = parse_age_range(filters.age_range)
    if ages is not None:
        constraints.append(Range("age", ages[0], ages[1]))

    return Predicate(tuple(constraints))


def _selection(name: str, value, cap: int):
    """Scalar -> exact match; list -> membership test."""
    if value is None:
        return None
    if isinstance(value, list):
        values = split_values(value, cap)
        return In(name, values) if values else None
    text = value.strip()
    return Equals(name, text) if text else None


def _text_search(filters: TransactionFilters) -> list:
    """Name and phone search; both together form one OR group."""
    name = (filters.customer_name or "").strip()
    phone = digits_only(filters.phone_number) if filters.phone_number else ""

    name_match = Contains("customer_name", name.lower()) if name else None
    phone_match = Contains("phone_number", phone) if phone else None

    if name_match and phone_match:
        return [Or((name_match, phone_match))]
    return [c for c in (name_match, phone_match) if c is not None]


def _date_window(filters: TransactionFilters):
    """Date range when either bound was supplied, otherwise the exact day."""
    if filters.date_from or filters.date_to:
        start, end = parse_day(filters.date_from), parse_day(filters.date_to)
        if start is None and end is None:
            return None
        return Range("date", start, end)

    day = parse_day(filters.date)
    if day is None:
        return None
    if day == date.max:
        return Range("date", day, None)
    return Range("date", day, day + timedelta(days=1), upper_inclusive=False)
