"""
Transaction model representing one retail sale line.
Mirrors the columns of the retail transactions dataset.
"""

from datetime import date

from sqlalchemy import String, Float, Date, ForeignKey, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base


class Transaction(Base):
    __tablename__ = "transactions"
    __table_args__ = (
        # Composite indexes for the most common filter pairs
        Index("ix_transactions_date_region", "date", "customer_region"),
        Index("ix_transactions_category_status", "product_category", "order_status"),
        Index("ix_transactions_store_date", "store_id", "date"),
    )

    transaction_id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=False,
        doc="Unique transaction identifier from the dataset"
    )
    date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        index=True,
        doc="Calendar day of the sale"
    )
    customer_id: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        index=True,
    )
    customer_name: Mapped[str] = mapped_column(String(200), nullable=False)
    customer_name_lower: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        index=True,
        doc="Lower-cased shadow of customer_name for case-insensitive search"
    )
    phone_number: Mapped[str] = mapped_column(String(50), nullable=False)
    gender: Mapped[str] = mapped_column(String(20), nullable=False)
    age: Mapped[int] = mapped_column(Integer, nullable=False)
    customer_region: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    customer_type: Mapped[str] = mapped_column(String(50), nullable=False)
    product_id: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    product_name: Mapped[str] = mapped_column(String(200), nullable=False)
    brand: Mapped[str] = mapped_column(String(100), nullable=False)
    brand_lower: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        doc="Lower-cased shadow of brand for case-insensitive search"
    )
    product_category: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    price_per_unit: Mapped[float] = mapped_column(Float, nullable=False)
    discount_percentage: Mapped[float] = mapped_column(Float, nullable=False)
    total_amount: Mapped[float] = mapped_column(Float, nullable=False)
    final_amount: Mapped[float] = mapped_column(Float, nullable=False)
    payment_method: Mapped[str] = mapped_column(String(50), nullable=False)
    order_status: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    delivery_type: Mapped[str] = mapped_column(String(50), nullable=False)
    store_id: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    store_location: Mapped[str] = mapped_column(String(100), nullable=False)
    salesperson_id: Mapped[str] = mapped_column(String(50), nullable=False)
    employee_name: Mapped[str] = mapped_column(String(200), nullable=False)

    tag_rows = relationship(
        "TransactionTag",
        back_populates="transaction",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    @property
    def tags(self) -> list[str]:
        return [t.tag for t in self.tag_rows]

    def __repr__(self) -> str:
        return (
            f"<Transaction(id={self.transaction_id}, customer={self.customer_id}, "
            f"amount={self.final_amount}, category={self.product_category})>"
        )


class TransactionTag(Base):
    """One tag attached to a transaction (tags are a set, order irrelevant)."""
    __tablename__ = "transaction_tags"

    transaction_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("transactions.transaction_id", ondelete="CASCADE"),
        primary_key=True,
    )
    tag: Mapped[str] = mapped_column(String(50), primary_key=True, index=True)

    transaction = relationship("Transaction", back_populates="tag_rows")

    def __repr__(self) -> str:
        return f"<TransactionTag(transaction={self.transaction_id}, tag={self.tag})>"
