"""
Statistics Aggregator.

Computes summary metrics for the dashboard cards over either the full
dataset or a filtered subset, and the distinct values behind the filter
dropdowns.

Caching policy:
  - Unfiltered statistics and filter options are computed at most once per
    process (lock-guarded) and then served read-only. When Redis is
    enabled the computed value is shared with other workers.
  - Filtered statistics are always recomputed.

Rounding: currency figures are rounded half-up to cents once, at the end.
averageOrderValue is derived from the unrounded revenue sum.
"""

import logging
import threading
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Optional, TypeVar

from app.core.config import get_settings
from app.core.redis import cache_get, cache_set
from app.query.predicates import Predicate
from app.schemas.transaction import FilterOptions, Statistics
from app.stores.base import RecordStore

logger = logging.getLogger(__name__)
settings = get_settings()

T = TypeVar("T")

UNKNOWN_GROUP = "Unknown"


def round_currency(value: float) -> float:
    """Round to cents using round-half-up on the decimal representation."""
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def _label(key) -> str:
    return UNKNOWN_GROUP if key is None else str(key)


class StatisticsAggregator:
    """Owns the process-wide statistics and filter-option caches."""

    def __init__(self, store: RecordStore, excluded_categories: Optional[list[str]] = None):
        self.store = store
        self.excluded_categories = {
            c.lower() for c in (
                settings.FILTER_OPTIONS_EXCLUDED_CATEGORIES
                if excluded_categories is None else excluded_categories
            )
        }
        self._lock = threading.Lock()
        self._statistics: Optional[Statistics] = None
        self._filter_options: Optional[FilterOptions] = None

    # ─── Public API ─────────────────────────────────────────────────

    def compute(self, predicate: Optional[Predicate] = None) -> Statistics:
        """Cached statistics when unfiltered, a fresh computation otherwise."""
        if not predicate:
            return self.unfiltered_statistics()
        return self._compute_statistics(predicate)

    def unfiltered_statistics(self) -> Statistics:
        if self._statistics is None:
            self._populate("_statistics", lambda: self._compute_statistics(None), Statistics)
        return self._statistics

    def filter_options(self) -> FilterOptions:
        if self._filter_options is None:
            self._populate("_filter_options", self._compute_filter_options, FilterOptions)
        return self._filter_options

    def warm(self) -> None:
        """Pre-compute both caches (called once at startup)."""
        self.unfiltered_statistics()
        self.filter_options()
        logger.info("Statistics and filter options cached")

    @property
    def is_warm(self) -> bool:
        return self._statistics is not None and self._filter_options is not None

    # ─── Cache population ───────────────────────────────────────────

    def _populate(self, attr: str, compute: Callable[[], T], model) -> None:
        """Check-or-compute under the lock so concurrent first calls compute once."""
        with self._lock:
            if getattr(self, attr) is not None:
                return

            key = f"transactions{attr}:{self.store.count()}"
            cached = cache_get(key)
            if cached is not None:
                logger.info(f"[CACHE HIT] {attr.lstrip('_')} loaded from Redis")
                value = model.model_validate(cached)
            else:
                value = compute()
                cache_set(key, value.model_dump())
            setattr(self, attr, value)

    # ─── Computation ────────────────────────────────────────────────

    def _compute_statistics(self, predicate: Optional[Predicate]) -> Statistics:
        store = self.store
        total = store.count(predicate)
        if total == 0:
            return Statistics()

        revenue = store.aggregate_sum(predicate, "final_amount")
        by_region = store.aggregate_group_sum(predicate, "customer_region", "final_amount")
        by_category = store.aggregate_group_sum(predicate, "product_category", "final_amount")
        status_counts = store.aggregate_group_count(predicate, "order_status")

        return Statistics(
            total_transactions=total,
            total_revenue=round_currency(revenue),
            total_amount=round_currency(store.aggregate_sum(predicate, "total_amount")),
            total_quantity=int(store.aggregate_sum(predicate, "quantity")),
            unique_customers=store.distinct_count(predicate, "customer_id"),
            unique_products=store.distinct_count(predicate, "product_id"),
            unique_stores=store.distinct_count(predicate, "store_id"),
            revenue_by_region={_label(k): round_currency(v) for k, v in sorted(by_region.items(), key=_group_key)},
            revenue_by_category={_label(k): round_currency(v) for k, v in sorted(by_category.items(), key=_group_key)},
            order_status_counts={_label(k): int(v) for k, v in sorted(status_counts.items(), key=_group_key)},
            average_order_value=round_currency(revenue / total),
        )

    def _compute_filter_options(self) -> FilterOptions:
        store = self.store
        categories = [
            c for c in store.distinct_values("product_category")
            if c and c.lower() not in self.excluded_categories
        ]
        return FilterOptions(
            product_categories=sorted(categories),
            customer_regions=sorted(v for v in store.distinct_values("customer_region") if v),
            genders=sorted(v for v in store.distinct_values("gender") if v),
            payment_methods=sorted(v for v in store.distinct_values("payment_method") if v),
            tags=sorted(v for v in store.distinct_values("tags") if v),
        )


def _group_key(item) -> str:
    return _label(item[0])
