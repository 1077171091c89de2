"""
Query Executor.

Runs a compiled predicate and sort against a record store and returns one
page. Out-of-range pages are clamped to the last page instead of failing.
"""

import math
from typing import Optional

from app.core.config import get_settings
from app.query.predicates import Predicate, SortSpec
from app.schemas.transaction import TransactionPage, TransactionResponse
from app.stores.base import RecordStore

settings = get_settings()


def clamp_limit(limit: Optional[int]) -> int:
    if limit is None:
        return settings.DEFAULT_PAGE_LIMIT
    return max(1, min(int(limit), settings.MAX_PAGE_LIMIT))


def execute(
    store: RecordStore,
    predicate: Optional[Predicate],
    sort: SortSpec,
    page: Optional[int] = 1,
    limit: Optional[int] = None,
) -> TransactionPage:
    """
    Fetch one sorted, filtered page.

    ``total`` counts every match; ``total_pages`` is at least 1 so an empty
    result still reports page 1 of 1. A page past the end serves the last page.
    """
    limit = clamp_limit(limit)
    page = max(1, int(page or 1))

    total = store.count(predicate)
    total_pages = math.ceil(total / limit) if total > 0 else 1
    page = min(page, total_pages)

    records = store.find(predicate, sort, skip=(page - 1) * limit, limit=limit) if total else []

    return TransactionPage(
        data=[TransactionResponse.from_record(r) for r in records],
        total=total,
        page=page,
        limit=limit,
        total_pages=total_pages,
    )
