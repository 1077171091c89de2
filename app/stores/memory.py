"""In-memory record store: a full scan over a list loaded once at startup."""

from collections import defaultdict
from typing import Callable, Iterable, Optional

from app.models.record import TransactionRecord
from app.query.predicates import (
    AnyOf,
    Contains,
    Equals,
    In,
    Or,
    Predicate,
    Range,
    SortSpec,
)
from app.query.sorting import CASE_FOLDED_FIELDS

# Fields with a precomputed lower-case shadow copy
SHADOW_FIELDS = ("customer_name", "brand")

Matcher = Callable[[TransactionRecord, dict], bool]


class MemoryRecordStore:
    """Read-only store over an in-process list of ``TransactionRecord``."""

    def __init__(self, records: Iterable[TransactionRecord]):
        self._records: list[TransactionRecord] = []
        self._by_id: dict[int, TransactionRecord] = {}
        self._shadow: dict[int, dict[str, str]] = {}
        for record in records:
            if record.transaction_id in self._by_id:
                continue  # first occurrence wins; ids are unique
            self._records.append(record)
            self._by_id[record.transaction_id] = record
            self._shadow[record.transaction_id] = {
                name: (getattr(record, name) or "").lower() for name in SHADOW_FIELDS
            }

    def __len__(self) -> int:
        return len(self._records)

    # ─── Scanning ───────────────────────────────────────────────────

    def _scan(self, predicate: Optional[Predicate]) -> list[TransactionRecord]:
        if not predicate:
            return list(self._records)
        matchers = [_lower(c) for c in predicate.constraints]
        return [
            r for r in self._records
            if all(m(r, self._shadow[r.transaction_id]) for m in matchers)
        ]

    def count(self, predicate: Optional[Predicate] = None) -> int:
        if not predicate:
            return len(self._records)
        return len(self._scan(predicate))

    def find(
        self,
        predicate: Optional[Predicate] = None,
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> list[TransactionRecord]:
        rows = self._scan(predicate)
        if sort is not None:
            rows = _sorted(rows, sort)
        end = None if limit is None else skip + limit
        return rows[skip:end]

    def find_by_id(self, transaction_id: int) -> Optional[TransactionRecord]:
        return self._by_id.get(transaction_id)

    # ─── Aggregation ────────────────────────────────────────────────

    def distinct_values(self, field: str) -> set[str]:
        values = set()
        for r in self._records:
            value = getattr(r, field)
            if isinstance(value, frozenset):
                values.update(value)
            elif value is not None:
                values.add(value)
        return values

    def aggregate_sum(self, predicate: Optional[Predicate], field: str) -> float:
        return sum(getattr(r, field) or 0 for r in self._scan(predicate))

    def aggregate_group_sum(
        self, predicate: Optional[Predicate], group_field: str, sum_field: str
    ) -> dict[Optional[str], float]:
        groups: dict[Optional[str], float] = defaultdict(float)
        for r in self._scan(predicate):
            groups[getattr(r, group_field)] += getattr(r, sum_field) or 0
        return dict(groups)

    def aggregate_group_count(
        self, predicate: Optional[Predicate], group_field: str
    ) -> dict[Optional[str], int]:
        groups: dict[Optional[str], int] = defaultdict(int)
        for r in self._scan(predicate):
            groups[getattr(r, group_field)] += 1
        return dict(groups)

    def distinct_count(self, predicate: Optional[Predicate], field: str) -> int:
        return len({
            getattr(r, field) for r in self._scan(predicate)
            if getattr(r, field) is not None
        })


def _lower(constraint) -> Matcher:
    """Lower one predicate constraint to a closure over (record, shadow)."""
    if isinstance(constraint, Equals):
        name, value = constraint.field, constraint.value
        return lambda r, s: getattr(r, name) == value

    if isinstance(constraint, In):
        name, values = constraint.field, frozenset(constraint.values)
        return lambda r, s: getattr(r, name) in values

    if isinstance(constraint, Range):
        name = constraint.field
        lower, upper, inclusive = constraint.lower, constraint.upper, constraint.upper_inclusive

        def in_range(r, s) -> bool:
            value = getattr(r, name)
            if value is None:
                return False
            if lower is not None and value < lower:
                return False
            if upper is not None:
                return value <= upper if inclusive else value < upper
            return True
        return in_range

    if isinstance(constraint, Contains):
        name, text = constraint.field, constraint.text
        if name in SHADOW_FIELDS:
            return lambda r, s: text in s[name]
        return lambda r, s: text in str(getattr(r, name) or "").lower()

    if isinstance(constraint, AnyOf):
        name, values = constraint.field, frozenset(constraint.values)
        return lambda r, s: not values.isdisjoint(getattr(r, name))

    if isinstance(constraint, Or):
        options = [_lower(o) for o in constraint.options]
        return lambda r, s: any(m(r, s) for m in options)

    raise TypeError(f"Unsupported constraint: {constraint!r}")


def _sorted(rows: list[TransactionRecord], sort: SortSpec) -> list[TransactionRecord]:
    """Sort by the primary key, ties broken by the tie-break key ascending."""
    if sort.tie_break:
        rows = sorted(rows, key=lambda r: getattr(r, sort.tie_break))

    def primary(r: TransactionRecord):
        value = getattr(r, sort.field)
        if sort.field in CASE_FOLDED_FIELDS:
            return (value or "").lower()
        return value

    # sorted() is stable with reverse=True, so tie order survives
    return sorted(rows, key=primary, reverse=sort.descending)
