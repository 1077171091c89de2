"""
Dataset loading and database seeding.

Reads the retail transactions CSV (one row per sale) into
``TransactionRecord`` objects. When no CSV is configured, a deterministic
synthetic dataset is generated instead so the service works out of the box.
``seed_database`` copies the records into the SQL store in batches.
"""

import csv
import logging
import random
from datetime import date, timedelta
from pathlib import Path
from typing import Iterable, Iterator

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.models.record import TransactionRecord
from app.models.transaction import Transaction, TransactionTag

logger = logging.getLogger(__name__)

BATCH_SIZE = 1000

# CSV header -> record field
CSV_COLUMNS = {
    "Transaction ID": "transaction_id",
    "Date": "date",
    "Customer ID": "customer_id",
    "Customer Name": "customer_name",
    "Phone Number": "phone_number",
    "Gender": "gender",
    "Age": "age",
    "Customer Region": "customer_region",
    "Customer Type": "customer_type",
    "Product ID": "product_id",
    "Product Name": "product_name",
    "Brand": "brand",
    "Product Category": "product_category",
    "Tags": "tags",
    "Quantity": "quantity",
    "Price per Unit": "price_per_unit",
    "Discount Percentage": "discount_percentage",
    "Total Amount": "total_amount",
    "Final Amount": "final_amount",
    "Payment Method": "payment_method",
    "Order Status": "order_status",
    "Delivery Type": "delivery_type",
    "Store ID": "store_id",
    "Store Location": "store_location",
    "Salesperson ID": "salesperson_id",
    "Employee Name": "employee_name",
}

INT_FIELDS = {"transaction_id", "age", "quantity"}
FLOAT_FIELDS = {"price_per_unit", "discount_percentage", "total_amount", "final_amount"}


def parse_row(row: dict[str, str]) -> TransactionRecord:
    """Convert one CSV row to a record. Raises ValueError on bad values."""
    values = {}
    for header, name in CSV_COLUMNS.items():
        raw = (row.get(header) or "").strip()
        if name in INT_FIELDS:
            values[name] = int(float(raw))
        elif name in FLOAT_FIELDS:
            values[name] = float(raw)
        elif name == "date":
            values[name] = date.fromisoformat(raw[:10])
        elif name == "tags":
            values[name] = frozenset(t.strip() for t in raw.split(",") if t.strip())
        else:
            values[name] = raw
    return TransactionRecord(**values)


def read_csv(path: str | Path) -> Iterator[TransactionRecord]:
    """Stream records from a dataset CSV, skipping rows that fail to parse."""
    skipped = 0
    with open(path, newline="", encoding="utf-8-sig") as fh:
        for line_no, row in enumerate(csv.DictReader(fh), start=2):
            try:
                yield parse_row(row)
            except (ValueError, TypeError) as e:
                skipped += 1
                logger.warning(f"Skipping CSV line {line_no}: {e}")
    if skipped:
        logger.warning(f"Skipped {skipped} malformed rows from {path}")


# ─── Synthetic dataset ──────────────────────────────────────────────

FIRST_NAMES = [
    "Aarav", "Priya", "Rahul", "Sneha", "Vikram", "Ananya", "Rohan", "Kavya",
    "Arjun", "Isha", "Neha", "Karan", "Meera", "Siddharth", "Pooja", "Liam",
]
LAST_NAMES = [
    "Sharma", "Patel", "Reddy", "Iyer", "Verma", "Gupta", "Nair", "Singh",
    "Das", "Mehta", "O'Brien", "Kapoor", "Joshi", "Rao",
]
REGIONS = ["North", "South", "East", "West", "Central"]
GENDERS = ["Male", "Female"]
CUSTOMER_TYPES = ["New", "Returning", "Loyal"]
CATALOG = {
    "Electronics": (["Samsung", "Apple", "Sony", "Boat"], (800, 60000)),
    "Clothing": (["Zara", "H&M", "Levi's", "Biba"], (300, 5000)),
    "Beauty": (["Lakme", "Nykaa", "Mamaearth"], (150, 2500)),
    "Home": (["IKEA", "Pepperfry"], (500, 20000)),
    "Sports": (["Nike", "Adidas", "Decathlon"], (400, 8000)),
}
TAGS = ["organic", "gadgets", "fashion", "wireless", "casual", "formal", "makeup", "skincare", "portable"]
PAYMENT_METHODS = ["UPI", "Credit Card", "Debit Card", "Cash", "Net Banking", "Wallet"]
ORDER_STATUSES = ["Completed", "Pending", "Cancelled", "Returned"]
DELIVERY_TYPES = ["Standard", "Express", "Store Pickup"]
STORES = [("ST001", "Mumbai"), ("ST002", "Delhi"), ("ST003", "Bengaluru"), ("ST004", "Chennai"), ("ST005", "Kolkata")]


def generate_records(count: int, seed: int = 42) -> list[TransactionRecord]:
    """Deterministic synthetic dataset for demos and local development."""
    rng = random.Random(seed)
    start = date(2023, 1, 1)
    customers = [
        (
            f"CUST{i:05d}",
            f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}",
            f"+91 {rng.randint(7000000000, 9999999999)}",
            rng.choice(GENDERS),
            rng.randint(18, 75),
            rng.choice(REGIONS),
            rng.choice(CUSTOMER_TYPES),
        )
        for i in range(max(1, count // 4))
    ]

    records = []
    for i in range(count):
        cust_id, name, phone, gender, age, region, cust_type = rng.choice(customers)
        category = rng.choice(list(CATALOG))
        brands, (price_min, price_max) = CATALOG[category]
        brand = rng.choice(brands)
        quantity = rng.randint(1, 5)
        price = round(rng.uniform(price_min, price_max), 2)
        discount = rng.choice([0, 5, 10, 15, 20, 25])
        total = round(price * quantity, 2)
        final = round(total * (1 - discount / 100), 2)
        store_id, location = rng.choice(STORES)

        records.append(
            TransactionRecord(
                transaction_id=i + 1,
                date=start + timedelta(days=rng.randint(0, 364)),
                customer_id=cust_id,
                customer_name=name,
                phone_number=phone,
                gender=gender,
                age=age,
                customer_region=region,
                customer_type=cust_type,
                product_id=f"PROD{rng.randint(1, 300):04d}",
                product_name=f"{brand} {category} Item",
                brand=brand,
                product_category=category,
                tags=frozenset(rng.sample(TAGS, rng.randint(0, 3))),
                quantity=quantity,
                price_per_unit=price,
                discount_percentage=float(discount),
                total_amount=total,
                final_amount=final,
                payment_method=rng.choice(PAYMENT_METHODS),
                order_status=rng.choice(ORDER_STATUSES),
                delivery_type=rng.choice(DELIVERY_TYPES),
                store_id=store_id,
                store_location=location,
                salesperson_id=f"EMP{rng.randint(1, 40):03d}",
                employee_name=f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}",
            )
        )
    return records


def load_records(csv_path: str = "", synthetic_count: int = 2000) -> Iterable[TransactionRecord]:
    """Records from the configured CSV, or the synthetic dataset."""
    if csv_path:
        path = Path(csv_path)
        if path.is_file():
            logger.info(f"Loading transactions from {path}")
            return read_csv(path)
        logger.warning(f"Dataset CSV {path} not found, using synthetic data")
    logger.info(f"Generating {synthetic_count} synthetic transactions")
    return generate_records(synthetic_count)


# ─── SQL seeding ────────────────────────────────────────────────────

def to_orm(record: TransactionRecord) -> Transaction:
    """Build the ORM row (with shadow columns and tag rows) for a record."""
    row = Transaction(
        customer_name_lower=record.customer_name.lower(),
        brand_lower=record.brand.lower(),
        **{k: v for k, v in vars(record).items() if k != "tags"},
    )
    row.tag_rows = [TransactionTag(tag=tag) for tag in sorted(record.tags)]
    return row


def seed_database(db: Session, records: Iterable[TransactionRecord]) -> int:
    """
    Seeds the transactions table from ``records``.
    Skips seeding if transactions already exist. Returns rows inserted.
    """
    existing = db.scalar(select(func.count()).select_from(Transaction)) or 0
    if existing > 0:
        logger.info(f"Database already has {existing} transactions, skipping seed")
        return 0

    logger.info("Seeding transactions table...")
    inserted = 0
    seen: set[int] = set()
    batch: list[Transaction] = []
    for record in records:
        if record.transaction_id in seen:
            continue  # duplicate ids are dropped, first row wins
        seen.add(record.transaction_id)
        batch.append(to_orm(record))
        if len(batch) >= BATCH_SIZE:
            db.add_all(batch)
            db.commit()
            inserted += len(batch)
            batch = []
            logger.info(f"Inserted batch: {inserted} transactions processed...")
    if batch:
        db.add_all(batch)
        db.commit()
        inserted += len(batch)

    logger.info(f"Database seeded successfully with {inserted} transactions")
    return inserted
