"""Tests for pagination and sorting through the query executor."""

import math

import pytest

from app.query.compiler import compile_filters
from app.query.executor import clamp_limit, execute
from app.query.predicates import MATCH_ALL, SortSpec
from app.query.sorting import RECENT_FIRST, resolve_sort
from app.schemas.transaction import TransactionFilters
from app.stores import MemoryRecordStore

from tests.conftest import make_record


def ids(page) -> list[int]:
    return [t.transaction_id for t in page.data]


class TestPagination:
    def test_250_rows_with_limit_100(self, large_store):
        sort = resolve_sort("transactionId")
        first = execute(large_store, None, sort, page=1, limit=100)
        assert (len(first.data), first.total, first.total_pages, first.page) == (100, 250, 3, 1)

        last = execute(large_store, None, sort, page=3, limit=100)
        assert len(last.data) == 50
        assert ids(last) == list(range(201, 251))

    def test_page_past_the_end_serves_last_page(self, large_store):
        sort = resolve_sort("transactionId")
        clamped = execute(large_store, None, sort, page=4, limit=100)
        assert clamped.page == 3
        assert clamped == execute(large_store, None, sort, page=3, limit=100)

    @pytest.mark.parametrize("limit", [1, 7, 100, 249, 250, 1000])
    def test_page_size_invariants(self, large_store, limit):
        sort = resolve_sort("date", "desc")
        first = execute(large_store, None, sort, page=1, limit=limit)
        assert first.total_pages == max(1, math.ceil(first.total / limit))
        for page in range(1, first.total_pages + 1):
            result = execute(large_store, None, sort, page=page, limit=limit)
            assert 0 <= len(result.data) <= limit
            if page < result.total_pages:
                assert len(result.data) == limit

    def test_pages_partition_the_result(self, large_store):
        sort = resolve_sort("finalAmount", "desc")
        seen = []
        for page in range(1, 4):
            seen.extend(ids(execute(large_store, None, sort, page=page, limit=100)))
        assert sorted(seen) == list(range(1, 251))

    def test_empty_result_reports_one_page(self, memory_store):
        predicate = compile_filters(TransactionFilters(customer_id="nobody"))
        result = execute(memory_store, predicate, resolve_sort(None), page=5, limit=10)
        assert (result.data, result.total, result.total_pages, result.page) == ([], 0, 1, 1)

    def test_limit_and_page_are_clamped(self, memory_store):
        result = execute(memory_store, None, RECENT_FIRST, page=-3, limit=5000)
        assert result.page == 1
        assert result.limit == 1000
        assert clamp_limit(0) == 1
        assert clamp_limit(None) == 100


class TestSorting:
    def test_default_sort_is_case_insensitive_name(self, memory_store):
        result = execute(memory_store, None, resolve_sort(None), limit=10)
        names = [t.customer_name for t in result.data]
        assert names == sorted(names, key=str.lower)
        assert names[0] == "aarav patel"

    def test_equal_keys_break_ties_by_transaction_id(self, memory_store):
        # Records 1 and 5 share both the name and the amount
        asc = execute(memory_store, None, resolve_sort("finalAmount", "asc"), limit=10)
        desc = execute(memory_store, None, resolve_sort("finalAmount", "desc"), limit=10)
        assert ids(asc) == [2, 3, 1, 5, 4]
        assert ids(desc) == [4, 1, 5, 3, 2]

    def test_recent_first(self, memory_store):
        result = execute(memory_store, None, RECENT_FIRST, limit=10)
        assert ids(result) == [4, 3, 2, 1, 5]

    def test_dates_render_as_calendar_strings(self, memory_store):
        result = execute(memory_store, None, RECENT_FIRST, limit=1)
        payload = result.model_dump(by_alias=True, mode="json")
        assert payload["data"][0]["date"] == "2023-04-01"
        assert "customerNameLower" not in payload["data"][0]
        assert payload["totalPages"] == 5

    def test_ties_within_a_page_boundary_are_stable(self):
        store = MemoryRecordStore([make_record(i, age=40) for i in range(10, 0, -1)])
        sort = SortSpec("age", descending=True)
        first = execute(store, MATCH_ALL, sort, page=1, limit=5)
        second = execute(store, MATCH_ALL, sort, page=2, limit=5)
        assert ids(first) + ids(second) == list(range(1, 11))
