"""Pydantic schemas for Transaction API responses and filters."""

import datetime as dt
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.models.record import TransactionRecord


class CamelModel(BaseModel):
    """Base model that speaks camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TransactionResponse(CamelModel):
    """Single transaction record returned by the API."""
    transaction_id: int = Field(..., description="Unique transaction identifier")
    date: dt.date = Field(..., description="Calendar day of the sale (YYYY-MM-DD)")
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
    tags: list[str] = Field(default_factory=list, description="Sorted tag set")
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

    @classmethod
    def from_record(cls, record: TransactionRecord) -> "TransactionResponse":
        data = {name: getattr(record, name) for name in cls.model_fields if name != "tags"}
        return cls(tags=sorted(record.tags), **data)


StrOrList = Optional[Union[str, list[str]]]


class TransactionFilters(CamelModel):
    """
    Filter criteria for search and statistics.

    Every field is optional; absent, empty and blank values impose no
    constraint. Multi-select fields accept a single value or a list.
    Numeric and date fields are kept as raw strings so the lenient listing
    path can ignore garbage that strict validation would reject.
    """
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None
    phone_number: Optional[str] = None
    customer_region: StrOrList = None
    gender: StrOrList = None
    age_range: Optional[str] = Field(None, description='"N+" or "N-M"')
    product_category: StrOrList = None
    tags: StrOrList = Field(None, description="List or comma-separated string")
    order_status: Optional[str] = None
    store_id: Optional[str] = None
    brand: Optional[str] = None
    payment_method: StrOrList = None
    date: Optional[str] = Field(None, description="Exact calendar day (YYYY-MM-DD)")
    date_from: Optional[str] = None
    date_to: Optional[str] = None
    min_amount: Optional[str] = None
    max_amount: Optional[str] = None
    sort_by: Optional[str] = None
    sort_order: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def _drop_blank(cls, value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, (list, tuple, set)):
            items = [str(v) for v in value if v is not None and str(v).strip()]
            return items or None
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        if isinstance(value, dt.date):
            return value.isoformat()
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def active(self) -> dict[str, Any]:
        """Effective criteria echoed back to the caller (camelCase keys)."""
        return self.model_dump(by_alias=True, exclude_none=True)

    def has_constraints(self) -> bool:
        """True when any field other than the sort options is set."""
        return bool(self.model_dump(exclude_none=True, exclude={"sort_by", "sort_order"}))


class TransactionPage(CamelModel):
    """One page of transactions plus pagination metadata."""
    data: list[TransactionResponse] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 100
    total_pages: int = 1


class SearchResult(TransactionPage):
    """Search page that echoes back the effective filter criteria."""
    filters: dict[str, Any] = Field(default_factory=dict)


class Statistics(CamelModel):
    """Summary metrics over the full dataset or a filtered subset."""
    total_transactions: int = 0
    total_revenue: float = 0.0
    total_amount: float = 0.0
    total_quantity: int = 0
    unique_customers: int = 0
    unique_products: int = 0
    unique_stores: int = 0
    revenue_by_region: dict[str, float] = Field(default_factory=dict)
    revenue_by_category: dict[str, float] = Field(default_factory=dict)
    order_status_counts: dict[str, int] = Field(default_factory=dict)
    average_order_value: float = 0.0


class FilterOptions(CamelModel):
    """Distinct values available for the dashboard dropdowns."""
    product_categories: list[str] = Field(default_factory=list)
    customer_regions: list[str] = Field(default_factory=list)
    genders: list[str] = Field(default_factory=list)
    payment_methods: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)


# ─── Response envelopes ─────────────────────────────────────────────

class PageResponse(TransactionPage):
    success: bool = True


class SearchResponse(SearchResult):
    success: bool = True


class TransactionDetailResponse(CamelModel):
    success: bool = True
    data: TransactionResponse


class StatisticsResponse(CamelModel):
    success: bool = True
    data: Statistics


class FilterOptionsResponse(CamelModel):
    success: bool = True
    data: FilterOptions


class ErrorResponse(CamelModel):
    success: bool = False
    message: str
