"""
Transactions API endpoints.
Paginated listing, filtered search, statistics and filter options.
"""

import logging
from typing import Optional, Union

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from app.core.exceptions import StoreUnavailable
from app.schemas.transaction import (
    ErrorResponse,
    FilterOptionsResponse,
    PageResponse,
    SearchResponse,
    SearchResult,
    Statistics,
    StatisticsResponse,
    TransactionDetailResponse,
    TransactionFilters,
)
from app.services.transaction_service import TransactionService, get_transaction_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/transactions", tags=["Transactions"])

UNAVAILABLE_MESSAGE = "Transaction data is temporarily unavailable"


def split_multi(values: Optional[list[str]]) -> Optional[Union[str, list[str]]]:
    """
    Flatten repeated and comma-separated query values.
    One value stays a scalar (exact match); several become a list (membership).
    """
    if not values:
        return None
    items = [part.strip() for value in values for part in value.split(",") if part.strip()]
    if not items:
        return None
    return items[0] if len(items) == 1 else items


def _lenient_int(value: Optional[str], default: int) -> int:
    try:
        return int(value) if value is not None else default
    except ValueError:
        return default


def transaction_filters(
    customer_id: Optional[str] = Query(None, alias="customerId"),
    customer_name: Optional[str] = Query(None, alias="customerName", description="Case-insensitive name search"),
    phone_number: Optional[str] = Query(None, alias="phoneNumber", description="Digits are matched as a substring"),
    customer_region: Optional[list[str]] = Query(None, alias="customerRegion"),
    gender: Optional[list[str]] = Query(None),
    age_range: Optional[str] = Query(None, alias="ageRange", description='"N+" or "N-M"'),
    product_category: Optional[list[str]] = Query(None, alias="productCategory"),
    tags: Optional[list[str]] = Query(None, description="Matches transactions with any of the tags"),
    order_status: Optional[str] = Query(None, alias="orderStatus"),
    store_id: Optional[str] = Query(None, alias="storeId"),
    brand: Optional[str] = Query(None),
    payment_method: Optional[list[str]] = Query(None, alias="paymentMethod"),
    date: Optional[str] = Query(None, description="Exact day, ignored when a date range is given"),
    date_from: Optional[str] = Query(None, alias="dateFrom"),
    date_to: Optional[str] = Query(None, alias="dateTo"),
    min_amount: Optional[str] = Query(None, alias="minAmount"),
    max_amount: Optional[str] = Query(None, alias="maxAmount"),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
) -> TransactionFilters:
    """Collect the filter query parameters into ``TransactionFilters``."""
    return TransactionFilters(
        customer_id=customer_id,
        customer_name=customer_name,
        phone_number=phone_number,
        customer_region=split_multi(customer_region),
        gender=split_multi(gender),
        age_range=age_range,
        product_category=split_multi(product_category),
        tags=split_multi(tags),
        order_status=order_status,
        store_id=store_id,
        brand=brand,
        payment_method=split_multi(payment_method),
        date=date,
        date_from=date_from,
        date_to=date_to,
        min_amount=min_amount,
        max_amount=max_amount,
        sort_by=sort_by,
        sort_order=sort_order,
    )


@router.get("", response_model=PageResponse)
def list_transactions(
    page: Optional[str] = Query(None, description="1-based page number"),
    limit: Optional[str] = Query(None, description="Page size (1-1000)"),
    service: TransactionService = Depends(get_transaction_service),
):
    """All transactions, most recent first. Bad page/limit values fall back to defaults."""
    result = service.list_page(_lenient_int(page, 1), _lenient_int(limit, 100))
    return PageResponse(**dict(result))


@router.get(
    "/search",
    response_model=SearchResponse,
    responses={400: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
def search_transactions(
    page: int = Query(1, description="1-based page number"),
    limit: int = Query(100, description="Page size (1-1000)"),
    filters: TransactionFilters = Depends(transaction_filters),
    service: TransactionService = Depends(get_transaction_service),
):
    """
    Search with any combination of filters.
    customerName and phoneNumber together match either field.
    """
    try:
        result = service.search(filters, page, limit)
    except StoreUnavailable:
        empty = SearchResult(filters=filters.active())
        return JSONResponse(
            status_code=503,
            content={"success": False, "message": UNAVAILABLE_MESSAGE, **empty.model_dump(by_alias=True, mode="json")},
        )
    return SearchResponse(**dict(result))


@router.get(
    "/statistics",
    response_model=StatisticsResponse,
    responses={400: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
def get_statistics(
    filters: TransactionFilters = Depends(transaction_filters),
    service: TransactionService = Depends(get_transaction_service),
):
    """Summary statistics; cached when no filters are active."""
    try:
        stats = service.get_statistics(filters)
    except StoreUnavailable:
        return JSONResponse(
            status_code=503,
            content={
                "success": False,
                "message": UNAVAILABLE_MESSAGE,
                "data": Statistics().model_dump(by_alias=True, mode="json"),
            },
        )
    return StatisticsResponse(data=stats)


@router.get("/filter-options", response_model=FilterOptionsResponse)
def get_filter_options(service: TransactionService = Depends(get_transaction_service)):
    """Distinct values for the dashboard dropdowns."""
    return FilterOptionsResponse(data=service.get_filter_options())


@router.get(
    "/{transaction_id}",
    response_model=TransactionDetailResponse,
    responses={404: {"model": ErrorResponse}},
)
def get_transaction(
    transaction_id: int,
    service: TransactionService = Depends(get_transaction_service),
):
    """Get a single transaction by its id."""
    return TransactionDetailResponse(data=service.get_by_id(transaction_id))
