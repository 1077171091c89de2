"""Pytest configuration and fixtures."""

import os

# Settings are read once at import time; point them at throwaway resources.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("SEED_ROW_COUNT", "250")

from dataclasses import replace
from datetime import date

import pytest
from sqlalchemy.orm import sessionmaker

from app.core.database import Base, build_engine
from app.models.record import TransactionRecord
from app.services.seed_data import generate_records, seed_database
from app.services.statistics import StatisticsAggregator
from app.services.transaction_service import TransactionService
from app.stores import MemoryRecordStore, SqlRecordStore

BASE_RECORD = TransactionRecord(
    transaction_id=1,
    date=date(2023, 3, 15),
    customer_id="CUST001",
    customer_name="Neha Sharma",
    phone_number="+91 9876543210",
    gender="Female",
    age=30,
    customer_region="North",
    customer_type="Returning",
    product_id="PROD0001",
    product_name="Phone",
    brand="Samsung",
    product_category="Electronics",
    quantity=1,
    price_per_unit=100.0,
    discount_percentage=0.0,
    total_amount=100.0,
    final_amount=100.0,
    payment_method="UPI",
    order_status="Completed",
    delivery_type="Standard",
    store_id="ST001",
    store_location="Mumbai",
    salesperson_id="EMP001",
    employee_name="Rohan Das",
    tags=frozenset({"gadgets"}),
)


def make_record(transaction_id: int, **overrides) -> TransactionRecord:
    """A valid record with the given id and field overrides."""
    if "tags" in overrides:
        overrides["tags"] = frozenset(overrides["tags"])
    return replace(BASE_RECORD, transaction_id=transaction_id, **overrides)


@pytest.fixture
def sample_records() -> list[TransactionRecord]:
    """Small hand-written dataset covering every filter field."""
    return [
        make_record(1),
        make_record(
            2, customer_name="Liam O'Brien", phone_number="+1 (555) 010-2000", gender="Male", age=65,
            customer_region="South", product_category="Clothing", brand="Levi's",
            final_amount=45.5, total_amount=50.0, quantity=2, date=date(2023, 3, 16),
            payment_method="Credit Card", tags={"fashion", "casual"}, customer_id="CUST002",
        ),
        make_record(
            3, customer_name="aarav patel", phone_number="9123456789", age=18,
            customer_region="East", product_category="Beauty", brand="Lakme",
            final_amount=75.25, total_amount=80.0, date=date(2023, 3, 17),
            order_status="Pending", tags=set(), customer_id="CUST003", store_id="ST002",
        ),
        make_record(
            4, customer_name="Priya 100% Reddy", age=25, customer_region="North",
            product_category="Electronics", brand="Apple", final_amount=250.0, total_amount=300.0,
            quantity=3, date=date(2023, 4, 1), payment_method="Cash",
            tags={"gadgets", "portable"}, customer_id="CUST004", product_id="PROD0002",
        ),
        make_record(
            5, customer_name="Neha Sharma", age=70, customer_region="West",
            product_category="Sports", brand="Nike", final_amount=100.0, total_amount=100.0,
            date=date(2023, 3, 15), order_status="Cancelled", tags={"casual"},
            store_id="ST003", product_id="PROD0003",
        ),
    ]


@pytest.fixture
def memory_store(sample_records) -> MemoryRecordStore:
    return MemoryRecordStore(sample_records)


@pytest.fixture
def service(memory_store) -> TransactionService:
    return TransactionService(memory_store, StatisticsAggregator(memory_store))


@pytest.fixture
def large_store() -> MemoryRecordStore:
    """250 deterministic synthetic transactions."""
    return MemoryRecordStore(generate_records(250))


@pytest.fixture
def session_factory():
    """Fresh in-memory SQLite database with the schema created."""
    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    engine.dispose()


@pytest.fixture
def sql_store(session_factory, sample_records) -> SqlRecordStore:
    db = session_factory()
    try:
        seed_database(db, sample_records)
    finally:
        db.close()
    return SqlRecordStore(session_factory)
