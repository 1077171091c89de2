import sys
from typing import Optional

from mcp.server.fastmcp import FastMCP

# Import standard app components
from app.core.exceptions import FilterValidationError, TransactionNotFound
from app.schemas.transaction import TransactionFilters
from app.services.transaction_service import get_transaction_service

# Create an MCP server instance
mcp = FastMCP("Retail-Transactions-Server")


@mcp.tool()
def search_transactions(
    customer_name: Optional[str] = None,
    phone_number: Optional[str] = None,
    customer_region: Optional[list[str]] = None,
    product_category: Optional[list[str]] = None,
    payment_method: Optional[list[str]] = None,
    tags: Optional[list[str]] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    min_amount: Optional[float] = None,
    max_amount: Optional[float] = None,
    age_range: Optional[str] = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = None,
    page: int = 1,
    limit: int = 20,
) -> dict:
    """Search retail transactions with filters. Dates are YYYY-MM-DD, age_range is "N+" or "N-M"."""
    filters = TransactionFilters(
        customer_name=customer_name,
        phone_number=phone_number,
        customer_region=customer_region,
        product_category=product_category,
        payment_method=payment_method,
        tags=tags,
        date_from=date_from,
        date_to=date_to,
        min_amount=min_amount,
        max_amount=max_amount,
        age_range=age_range,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    try:
        result = get_transaction_service().search(filters, page, limit)
    except FilterValidationError as e:
        return {"error": e.reason}
    return result.model_dump(by_alias=True, mode="json")


@mcp.tool()
def get_transaction(transaction_id: int) -> dict:
    """Retrieve a single transaction by id."""
    try:
        record = get_transaction_service().get_by_id(transaction_id)
    except TransactionNotFound:
        return {"error": "Transaction not found"}
    return record.model_dump(by_alias=True, mode="json")


@mcp.tool()
def get_statistics(
    customer_region: Optional[list[str]] = None,
    product_category: Optional[list[str]] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
) -> dict:
    """Revenue, quantity and distinct-count statistics, optionally filtered."""
    filters = TransactionFilters(
        customer_region=customer_region,
        product_category=product_category,
        date_from=date_from,
        date_to=date_to,
    )
    try:
        stats = get_transaction_service().get_statistics(filters)
    except FilterValidationError as e:
        return {"error": e.reason}
    return stats.model_dump(by_alias=True, mode="json")


@mcp.tool()
def get_filter_options() -> dict:
    """Distinct regions, genders, categories, payment methods and tags."""
    return get_transaction_service().get_filter_options().model_dump(by_alias=True, mode="json")


if __name__ == "__main__":
    # Start the standard streaming stdio server
    print("Starting Retail Transactions MCP Server on stdio...", file=sys.stderr)
    mcp.run()
