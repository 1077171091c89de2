"""
Transaction Service.

The operations the API layer calls: listing, search, lookup by id,
statistics and filter options. Search and statistics validate their
criteria strictly; listing is lenient and never validates.
"""

import logging
from functools import lru_cache
from typing import Optional

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.core.exceptions import TransactionNotFound
from app.query.compiler import compile_filters
from app.query.executor import execute
from app.query.sorting import RECENT_FIRST, resolve_sort
from app.query.validation import validate_filters
from app.schemas.transaction import (
    FilterOptions,
    SearchResult,
    Statistics,
    TransactionFilters,
    TransactionPage,
    TransactionResponse,
)
from app.services.seed_data import load_records
from app.services.statistics import StatisticsAggregator
from app.stores import MemoryRecordStore, RecordStore, SqlRecordStore

logger = logging.getLogger(__name__)


class TransactionService:
    """Read-only query facade over one record store."""

    def __init__(self, store: RecordStore, aggregator: Optional[StatisticsAggregator] = None):
        self.store = store
        self.aggregator = aggregator or StatisticsAggregator(store)

    def list_page(self, page: int = 1, limit: Optional[int] = None) -> TransactionPage:
        """Unfiltered page, most recent first."""
        return execute(self.store, None, RECENT_FIRST, page, limit)

    def search(
        self,
        filters: Optional[TransactionFilters] = None,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> SearchResult:
        """Validate, compile and run the criteria; echo back the criteria used."""
        filters = filters or TransactionFilters()
        validate_filters(filters, page, limit)

        predicate = compile_filters(filters)
        sort = resolve_sort(filters.sort_by, filters.sort_order)
        result = execute(self.store, predicate, sort, page, limit)

        logger.debug(f"Search matched {result.total} transactions ({len(predicate.constraints)} constraints)")
        return SearchResult(**dict(result), filters=filters.active())

    def get_by_id(self, transaction_id: int) -> TransactionResponse:
        record = self.store.find_by_id(transaction_id)
        if record is None:
            raise TransactionNotFound(f"Transaction {transaction_id} not found")
        return TransactionResponse.from_record(record)

    def get_statistics(self, filters: Optional[TransactionFilters] = None) -> Statistics:
        """Cached statistics without criteria, freshly computed with them."""
        if filters is None or not filters.has_constraints():
            return self.aggregator.compute(None)
        validate_filters(filters)
        return self.aggregator.compute(compile_filters(filters))

    def get_filter_options(self) -> FilterOptions:
        return self.aggregator.filter_options()

    def data_count(self) -> int:
        return self.store.count()


def build_store() -> RecordStore:
    """Record store selected by ``STORE_BACKEND``."""
    settings = get_settings()
    if settings.STORE_BACKEND == "memory":
        records = load_records(settings.DATASET_CSV_PATH, settings.SEED_ROW_COUNT)
        store = MemoryRecordStore(records)
        logger.info(f"Loaded {len(store)} transactions into memory")
        return store
    return SqlRecordStore(SessionLocal)


@lru_cache()
def get_transaction_service() -> TransactionService:
    """Process-wide service instance (FastAPI dependency)."""
    return TransactionService(build_store())
