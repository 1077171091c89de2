"""Store-independent transaction record passed between the stores and the API."""

from dataclasses import dataclass, field
from datetime import date


@dataclass(frozen=True)
class TransactionRecord:
    """A single immutable transaction as held by a record store."""

    transaction_id: int
    date: date
    customer_id: str
    customer_name: str
    phone_number: str
    gender: str
    age: int
    customer_region: str
    customer_type: str
    product_id: str
    product_name: str
    brand: str
    product_category: str
    quantity: int
    price_per_unit: float
    discount_percentage: float
    total_amount: float
    final_amount: float
    payment_method: str
    order_status: str
    delivery_type: str
    store_id: str
    store_location: str
    salesperson_id: str
    employee_name: str
    tags: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_orm(cls, row) -> "TransactionRecord":
        """Build a record from a ``Transaction`` ORM row (shadow columns dropped)."""
        return cls(
            transaction_id=row.transaction_id,
            date=row.date,
            customer_id=row.customer_id,
            customer_name=row.customer_name,
            phone_number=row.phone_number,
            gender=row.gender,
            age=row.age,
            customer_region=row.customer_region,
            customer_type=row.customer_type,
            product_id=row.product_id,
            product_name=row.product_name,
            brand=row.brand,
            product_category=row.product_category,
            quantity=row.quantity,
            price_per_unit=row.price_per_unit,
            discount_percentage=row.discount_percentage,
            total_amount=row.total_amount,
            final_amount=row.final_amount,
            payment_method=row.payment_method,
            order_status=row.order_status,
            delivery_type=row.delivery_type,
            store_id=row.store_id,
            store_location=row.store_location,
            salesperson_id=row.salesperson_id,
            employee_name=row.employee_name,
            tags=frozenset(row.tags),
        )
