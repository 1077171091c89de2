"""
Store-agnostic predicate AST.

A compiled filter is a ``Predicate``: a conjunction of constraints. Each
record store lowers the constraints to its own query mechanism (SQL
expressions, an in-memory closure). Field names are the snake_case
attribute names shared by the ORM model and ``TransactionRecord``.
"""

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class Equals:
    """Exact, case-sensitive match."""
    field: str
    value: Any


@dataclass(frozen=True)
class In:
    """Membership: the field equals any of ``values``."""
    field: str
    values: tuple


@dataclass(frozen=True)
class Range:
    """Bounded comparison; either bound may be None."""
    field: str
    lower: Any = None
    upper: Any = None
    upper_inclusive: bool = True


@dataclass(frozen=True)
class Contains:
    """Case-insensitive literal substring match. ``text`` is already lower-cased."""
    field: str
    text: str


@dataclass(frozen=True)
class AnyOf:
    """Set-valued field intersects ``values`` (tags)."""
    field: str
    values: tuple


@dataclass(frozen=True)
class Or:
    """At least one of the nested constraints holds."""
    options: tuple


@dataclass(frozen=True)
class Predicate:
    """Conjunction of constraints; an empty predicate matches everything."""
    constraints: tuple = field(default_factory=tuple)

    def __bool__(self) -> bool:
        return bool(self.constraints)


MATCH_ALL = Predicate()


@dataclass(frozen=True)
class SortSpec:
    """Primary sort key plus the deterministic tie-break key."""
    field: str
    descending: bool = False
    tie_break: Optional[str] = "transaction_id"
