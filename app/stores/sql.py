"""
SQLAlchemy record store.

Lowers predicate constraints to SQL expressions over the ``transactions``
table. Case-insensitive substring search runs against the lower-cased
shadow columns; tag membership runs against ``transaction_tags``.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import and_, distinct, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.core.exceptions import StoreUnavailable
from app.models.record import TransactionRecord
from app.models.transaction import Transaction, TransactionTag
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

logger = logging.getLogger(__name__)

# Substring search columns backed by a lower-cased shadow column
SHADOW_COLUMNS = {
    "customer_name": Transaction.customer_name_lower,
    "brand": Transaction.brand_lower,
}


def escape_like(text: str) -> str:
    """Escape LIKE wildcards so search text matches literally."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _column(name: str):
    if name == "tags":
        raise ValueError("tags is not a column; use AnyOf")
    return getattr(Transaction, name)


def to_clause(constraint):
    """Lower one predicate constraint to a SQLAlchemy boolean expression."""
    if isinstance(constraint, Equals):
        return _column(constraint.field) == constraint.value

    if isinstance(constraint, In):
        return _column(constraint.field).in_(constraint.values)

    if isinstance(constraint, Range):
        column = _column(constraint.field)
        clauses = []
        if constraint.lower is not None:
            clauses.append(column >= constraint.lower)
        if constraint.upper is not None:
            clauses.append(column <= constraint.upper if constraint.upper_inclusive else column < constraint.upper)
        return and_(*clauses)

    if isinstance(constraint, Contains):
        column = SHADOW_COLUMNS.get(constraint.field)
        if column is None:
            column = func.lower(_column(constraint.field))
        return column.like(f"%{escape_like(constraint.text)}%", escape="\\")

    if isinstance(constraint, AnyOf):
        return Transaction.tag_rows.any(TransactionTag.tag.in_(constraint.values))

    if isinstance(constraint, Or):
        return or_(*(to_clause(o) for o in constraint.options))

    raise TypeError(f"Unsupported constraint: {constraint!r}")


def where_clauses(predicate: Optional[Predicate]) -> list:
    if not predicate:
        return []
    return [to_clause(c) for c in predicate.constraints]


def order_by_clauses(sort: SortSpec) -> list:
    column = _column(sort.field)
    if sort.field in CASE_FOLDED_FIELDS:
        column = func.lower(column)
    clauses = [column.desc() if sort.descending else column.asc()]
    if sort.tie_break and sort.tie_break != sort.field:
        clauses.append(_column(sort.tie_break).asc())
    return clauses


class SqlRecordStore:
    """Record store backed by any SQLAlchemy-supported database."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
        except SQLAlchemyError as e:
            logger.exception("Record store query failed")
            raise StoreUnavailable("Transaction store is unavailable") from e
        finally:
            db.close()

    def count(self, predicate: Optional[Predicate] = None) -> int:
        stmt = select(func.count()).select_from(Transaction).where(*where_clauses(predicate))
        with self._session() as db:
            return db.scalar(stmt) or 0

    def find(
        self,
        predicate: Optional[Predicate] = None,
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> list[TransactionRecord]:
        stmt = select(Transaction).where(*where_clauses(predicate))
        if sort is not None:
            stmt = stmt.order_by(*order_by_clauses(sort))
        if skip:
            stmt = stmt.offset(skip)
        if limit is not None:
            stmt = stmt.limit(limit)
        with self._session() as db:
            return [TransactionRecord.from_orm(row) for row in db.scalars(stmt).all()]

    def find_by_id(self, transaction_id: int) -> Optional[TransactionRecord]:
        with self._session() as db:
            row = db.get(Transaction, transaction_id)
            return TransactionRecord.from_orm(row) if row is not None else None

    def distinct_values(self, field: str) -> set[str]:
        if field == "tags":
            stmt = select(distinct(TransactionTag.tag))
        else:
            stmt = select(distinct(_column(field)))
        with self._session() as db:
            return {value for value in db.scalars(stmt).all() if value is not None}

    def aggregate_sum(self, predicate: Optional[Predicate], field: str) -> float:
        stmt = select(func.coalesce(func.sum(_column(field)), 0)).where(*where_clauses(predicate))
        with self._session() as db:
            return db.scalar(stmt) or 0

    def aggregate_group_sum(
        self, predicate: Optional[Predicate], group_field: str, sum_field: str
    ) -> dict[Optional[str], float]:
        group = _column(group_field)
        stmt = (
            select(group, func.sum(_column(sum_field)))
            .where(*where_clauses(predicate))
            .group_by(group)
        )
        with self._session() as db:
            return {key: total or 0.0 for key, total in db.execute(stmt).all()}

    def aggregate_group_count(
        self, predicate: Optional[Predicate], group_field: str
    ) -> dict[Optional[str], int]:
        group = _column(group_field)
        stmt = select(group, func.count()).where(*where_clauses(predicate)).group_by(group)
        with self._session() as db:
            return {key: count for key, count in db.execute(stmt).all()}

    def distinct_count(self, predicate: Optional[Predicate], field: str) -> int:
        stmt = select(func.count(distinct(_column(field)))).where(*where_clauses(predicate))
        with self._session() as db:
            return db.scalar(stmt) or 0
