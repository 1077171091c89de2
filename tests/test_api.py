"""HTTP-level tests for the transactions API."""

import pytest
from fastapi.testclient import TestClient

from app.core.exceptions import StoreUnavailable
from app.main import app
from app.services.statistics import StatisticsAggregator
from app.services.transaction_service import TransactionService, get_transaction_service


class UnavailableStore:
    """Record store whose backing storage is down."""

    def __getattr__(self, name):
        def fail(*args, **kwargs):
            raise StoreUnavailable("connection refused")
        return fail


@pytest.fixture
def client(service):
    # No context manager: the startup hook would seed and warm the real store
    app.dependency_overrides[get_transaction_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def broken_client():
    store = UnavailableStore()
    broken = TransactionService(store, StatisticsAggregator(store, excluded_categories=[]))
    app.dependency_overrides[get_transaction_service] = lambda: broken
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestListing:
    def test_recent_first_envelope(self, client):
        response = client.get("/api/transactions", params={"limit": 2})
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert [t["transactionId"] for t in body["data"]] == [4, 3]
        assert (body["total"], body["page"], body["limit"], body["totalPages"]) == (5, 1, 2, 3)

    def test_garbage_paging_falls_back_to_defaults(self, client):
        body = client.get("/api/transactions", params={"page": "abc", "limit": "xyz"}).json()
        assert (body["page"], body["limit"], len(body["data"])) == (1, 100, 5)

    def test_record_fields_are_camel_case(self, client):
        record = client.get("/api/transactions", params={"limit": 1}).json()["data"][0]
        assert record["date"] == "2023-04-01"
        assert record["customerName"] == "Priya 100% Reddy"
        assert record["tags"] == ["gadgets", "portable"]
        assert "customer_name" not in record


class TestSearch:
    def test_comma_separated_multi_select(self, client):
        body = client.get(
            "/api/transactions/search",
            params={"customerRegion": "North,South", "sortBy": "transactionId"},
        ).json()
        assert [t["transactionId"] for t in body["data"]] == [1, 2, 4]
        assert body["filters"] == {
            "customerRegion": ["North", "South"],
            "sortBy": "transactionId",
        }

    def test_repeated_multi_select(self, client):
        response = client.get(
            "/api/transactions/search",
            params=[("productCategory", "Beauty"), ("productCategory", "Sports")],
        )
        assert {t["transactionId"] for t in response.json()["data"]} == {3, 5}

    def test_apostrophe_in_name(self, client):
        body = client.get("/api/transactions/search", params={"customerName": "O'Brien"}).json()
        assert body["total"] == 1
        assert body["data"][0]["customerName"] == "Liam O'Brien"

    def test_no_matches(self, client):
        body = client.get("/api/transactions/search", params={"customerId": "nobody", "page": 3}).json()
        assert body["success"] is True
        assert (body["data"], body["total"], body["totalPages"], body["page"]) == ([], 0, 1, 1)

    @pytest.mark.parametrize(
        "params, reason",
        [
            ({"ageRange": "70-60"}, "Minimum age cannot be greater than maximum age"),
            ({"minAmount": "100", "maxAmount": "50"}, "Minimum amount cannot be greater than maximum amount"),
            ({"dateFrom": "2023-02-30"}, "Invalid start date format, expected YYYY-MM-DD"),
            ({"page": 0}, "Page must be 1 or greater"),
            ({"limit": 5000}, "Limit must be between 1 and 1000"),
        ],
    )
    def test_invalid_criteria_are_rejected(self, client, params, reason):
        response = client.get("/api/transactions/search", params=params)
        assert response.status_code == 400
        assert response.json() == {"success": False, "message": reason}


class TestStatistics:
    def test_unfiltered(self, client):
        body = client.get("/api/transactions/statistics").json()
        assert body["success"] is True
        assert body["data"]["totalTransactions"] == 5
        assert body["data"]["totalRevenue"] == 570.75
        assert body["data"]["averageOrderValue"] == 114.15

    def test_filtered(self, client):
        data = client.get("/api/transactions/statistics", params={"gender": "Male"}).json()["data"]
        assert data["totalTransactions"] == 1
        assert data["revenueByCategory"] == {"Clothing": 45.5}

    def test_invalid_filters(self, client):
        response = client.get("/api/transactions/statistics", params={"ageRange": "abc"})
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_filter_options(self, client):
        data = client.get("/api/transactions/filter-options").json()["data"]
        assert data["productCategories"] == ["Beauty", "Clothing", "Electronics"]
        assert data["paymentMethods"] == ["Cash", "Credit Card", "UPI"]


class TestLookup:
    def test_found(self, client):
        body = client.get("/api/transactions/2").json()
        assert body["success"] is True
        assert body["data"]["brand"] == "Levi's"

    def test_not_found(self, client):
        response = client.get("/api/transactions/999")
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Transaction not found"}


class TestUnavailableStore:
    def test_search_returns_empty_result(self, broken_client):
        response = broken_client.get("/api/transactions/search", params={"gender": "Male"})
        assert response.status_code == 503
        body = response.json()
        assert body["success"] is False
        assert (body["data"], body["total"], body["totalPages"]) == ([], 0, 1)
        assert body["filters"] == {"gender": "Male"}

    def test_statistics_returns_zeroes(self, broken_client):
        response = broken_client.get("/api/transactions/statistics")
        assert response.status_code == 503
        assert response.json()["data"]["totalTransactions"] == 0

    def test_listing_uses_generic_handler(self, broken_client):
        response = broken_client.get("/api/transactions")
        assert response.status_code == 503
        assert response.json()["success"] is False

    def test_health_reports_degraded(self, broken_client):
        body = broken_client.get("/api/health").json()
        assert body["status"] == "degraded"
        assert body["dataCount"] == 0


def test_health(client):
    body = client.get("/api/health").json()
    assert body["status"] == "healthy"
    assert body["dataCount"] == 5
    assert body["dataLoaded"] is False


def test_root(client):
    body = client.get("/").json()
    assert body["health"] == "/api/health"


@pytest.mark.parametrize(
    "path, params, name",
    [
        ("/api/transactions/search", {"page": "abc"}, "page"),
        ("/api/transactions/search", {"limit": "ten"}, "limit"),
        ("/api/transactions/not-a-number", {}, "transaction_id"),
    ],
)
def test_malformed_typed_parameters_use_error_envelope(client, path, params, name):
    response = client.get(path, params=params)
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["message"].startswith(f"Invalid {name}")


@pytest.mark.parametrize("path", ["/api/transactions/search", "/api/transactions/statistics"])
def test_last_calendar_day_is_a_usable_date(client, path):
    response = client.get(path, params={"date": "9999-12-31"})
    assert response.status_code == 200
    assert response.json()["success"] is True
