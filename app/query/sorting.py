"""Sort Resolver: maps a requested sort key and direction to a SortSpec."""

from typing import Optional

from app.query.predicates import SortSpec

# Public (camelCase) sort key -> record field
SORT_FIELDS = {
    "date": "date",
    "finalAmount": "final_amount",
    "quantity": "quantity",
    "age": "age",
    "transactionId": "transaction_id",
    "customerName": "customer_name",
}

DEFAULT_SORT = SortSpec("customer_name")
RECENT_FIRST = SortSpec("date", descending=True)

# Fields compared case-insensitively
CASE_FOLDED_FIELDS = {"customer_name"}


def resolve_sort(sort_by: Optional[str], sort_order: Optional[str] = None) -> SortSpec:
    """
    Unknown or missing keys fall back to customerName ascending.
    Ties are always broken by transactionId ascending.
    """
    field = SORT_FIELDS.get((sort_by or "").strip())
    if field is None:
        return DEFAULT_SORT
    descending = (sort_order or "").strip().lower() == "desc"
    return SortSpec(field, descending=descending)
