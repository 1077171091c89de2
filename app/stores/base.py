"""Record store contract consumed by the query executor and the aggregator."""

from typing import Optional, Protocol

from app.models.record import TransactionRecord
from app.query.predicates import Predicate, SortSpec


class RecordStore(Protocol):
    """
    Backend-agnostic access to the transaction dataset.

    Every ``predicate`` argument may be None or empty, meaning "all records".
    Implementations raise ``StoreUnavailable`` when the backend fails; they
    never return partial results.
    """

    def count(self, predicate: Optional[Predicate] = None) -> int:
        ...

    def find(
        self,
        predicate: Optional[Predicate] = None,
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> list[TransactionRecord]:
        ...

    def find_by_id(self, transaction_id: int) -> Optional[TransactionRecord]:
        ...

    def distinct_values(self, field: str) -> set[str]:
        ...

    def aggregate_sum(self, predicate: Optional[Predicate], field: str) -> float:
        ...

    def aggregate_group_sum(
        self, predicate: Optional[Predicate], group_field: str, sum_field: str
    ) -> dict[Optional[str], float]:
        ...

    def aggregate_group_count(
        self, predicate: Optional[Predicate], group_field: str
    ) -> dict[Optional[str], int]:
        ...

    def distinct_count(self, predicate: Optional[Predicate], field: str) -> int:
        ...
