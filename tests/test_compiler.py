"""Tests for the filter compiler."""

from datetime import date

from app.query.compiler import compile_filters
from app.query.predicates import MATCH_ALL, AnyOf, Contains, Equals, In, Or, Predicate, Range
from app.schemas.transaction import TransactionFilters


def compile_(**kwargs) -> Predicate:
    return compile_filters(TransactionFilters(**kwargs))


class TestCompileFilters:
    def test_empty_criteria_match_everything(self):
        assert compile_filters(None) is MATCH_ALL
        assert not compile_()
        assert not compile_(customer_name="   ", tags=[], min_amount="")

    def test_exact_fields(self):
        predicate = compile_(customer_id="CUST001", store_id="ST001", order_status="Completed")
        assert set(predicate.constraints) == {
            Equals("customer_id", "CUST001"),
            Equals("store_id", "ST001"),
            Equals("order_status", "Completed"),
        }

    def test_scalar_vs_list_selection(self):
        assert compile_(customer_region="North").constraints == (Equals("customer_region", "North"),)
        assert compile_(customer_region=["North", "South"]).constraints == (
            In("customer_region", ("North", "South")),
        )

    def test_brand_and_name_are_lowercased_contains(self):
        predicate = compile_(brand="SAMsung", customer_name="O'Brien")
        assert Contains("brand", "samsung") in predicate.constraints
        assert Contains("customer_name", "o'brien") in predicate.constraints

    def test_phone_is_reduced_to_digits(self):
        assert compile_(phone_number="+91 98765").constraints == (Contains("phone_number", "9198765"),)

    def test_name_and_phone_form_or_group(self):
        predicate = compile_(customer_name="neha", phone_number="98765")
        assert predicate.constraints == (
            Or((Contains("customer_name", "neha"), Contains("phone_number", "98765"))),
        )

    def test_phone_without_digits_falls_back_to_name(self):
        predicate = compile_(customer_name="neha", phone_number="abc")
        assert predicate.constraints == (Contains("customer_name", "neha"),)

    def test_tags_from_comma_string_or_list(self):
        expected = (AnyOf("tags", ("gadgets", "casual")),)
        assert compile_(tags="gadgets, casual,").constraints == expected
        assert compile_(tags=["gadgets", "casual"]).constraints == expected

    def test_exact_date_is_half_open_day(self):
        assert compile_(date="2023-03-15").constraints == (
            Range("date", date(2023, 3, 15), date(2023, 3, 16), upper_inclusive=False),
        )

    def test_last_calendar_day_has_open_upper_bound(self):
        assert compile_(date="9999-12-31").constraints == (Range("date", date.max, None),)

    def test_date_range_overrides_exact_date(self):
        with_date = compile_(date="2023-01-01", date_from="2023-03-01", date_to="2023-03-31")
        without = compile_(date_from="2023-03-01", date_to="2023-03-31")
        assert with_date == without
        assert without.constraints == (Range("date", date(2023, 3, 1), date(2023, 3, 31)),)

    def test_open_ended_date_range(self):
        assert compile_(date_to="2023-03-31").constraints == (Range("date", None, date(2023, 3, 31)),)

    def test_amount_bounds(self):
        assert compile_(min_amount="50", max_amount="100").constraints == (
            Range("final_amount", 50.0, 100.0),
        )

    def test_bad_amounts_are_ignored(self):
        assert compile_(min_amount="-5", max_amount="lots").constraints == ()
        assert compile_(min_amount="abc", max_amount="20").constraints == (Range("final_amount", None, 20.0),)

    def test_age_ranges(self):
        assert compile_(age_range="60+").constraints == (Range("age", 60, None),)
        assert compile_(age_range="18-25").constraints == (Range("age", 18, 25),)

    def test_malformed_age_range_is_ignored(self):
        for raw in ("70-60", "abc", "200+"):
            assert compile_(age_range=raw).constraints == ()

    def test_list_filters_are_capped(self):
        predicate = compile_filters(
            TransactionFilters(product_category=[f"C{i}" for i in range(300)]), max_values=100
        )
        assert len(predicate.constraints[0].values) == 100

    def test_sort_options_do_not_constrain(self):
        assert not compile_(sort_by="date", sort_order="desc")

    def test_compilation_is_deterministic(self):
        criteria = dict(
            customer_region=["North", "East"], tags="gadgets,casual", age_range="18-40",
            customer_name="neha", phone_number="987", date_from="2023-03-01",
        )
        first = compile_(**criteria)
        compile_(customer_id="other")
        assert compile_(**criteria) == first

    def test_unrecognized_keys_are_ignored(self):
        assert not compile_filters(TransactionFilters.model_validate({"favouriteColour": "blue"}))
