"""
Tests for query_collection and the aggregate helpers.
"""

import json

import pytest
from mcp.types import INTERNAL_ERROR, INVALID_PARAMS

from query.aggregations import (
    AggregateSpec,
    AggregationError,
    compute_aggregate,
    parse_aggregate,
)

ORDERS = [
    {"id": "o1", "amount": 10},
    {"id": "o2", "amount": "5.5"},
    {"id": "o3", "amount": "n/a"},
    {"id": "o4"},
    {"id": "o5", "amount": 4.5},
]


class TestQueryCollection:

    @pytest.mark.asyncio
    async def test_items_only_without_aggregate(self, helper, pb):
        pb.add_collection("orders", records=ORDERS)

        result = await helper.call_tool_json("query_collection", {"collection": "orders"})

        assert set(result) == {"items"}
        assert len(result["items"]) == 5

    @pytest.mark.asyncio
    async def test_sum_avg_count(self, helper, pb):
        pb.add_collection("orders", records=ORDERS)

        result = await helper.call_tool_json("query_collection", {
            "collection": "orders",
            "aggregate": {"total": "sum(amount)", "mean": "avg(amount)", "n": "count(id)"},
        })

        assert result["aggregations"] == {"total": 20, "mean": 4, "n": 5}

    @pytest.mark.asyncio
    async def test_fetches_first_page_of_100_with_query(self, helper, pb):
        pb.add_collection("orders")

        await helper.call_tool("query_collection", {
            "collection": "orders", "filter": "amount > 1", "sort": "-amount", "expand": "customer",
        })

        _, target, query = pb.calls_to("records.get_list")[0]
        assert target == "orders"
        assert query == {
            "page": 1, "per_page": 100, "filter": "amount > 1", "sort": "-amount", "expand": "customer",
        }

    @pytest.mark.asyncio
    async def test_aggregates_cover_only_the_fetched_page(self, helper, pb):
        pb.add_collection("orders", records=[{"id": str(i), "amount": 1} for i in range(150)])

        result = await helper.call_tool_json("query_collection", {
            "collection": "orders", "aggregate": {"n": "count(id)", "total": "sum(amount)"},
        })

        assert result["aggregations"] == {"n": 100, "total": 100}

    @pytest.mark.asyncio
    async def test_empty_result(self, helper, pb):
        pb.add_collection("orders")

        result = await helper.call_tool_json("query_collection", {
            "collection": "orders",
            "aggregate": {"total": "sum(amount)", "mean": "avg(amount)", "n": "count(id)"},
        })

        assert result == {"items": [], "aggregations": {"total": 0, "mean": 0, "n": 0}}

    @pytest.mark.asyncio
    async def test_infinite_values_serialize_as_null(self, helper, pb):
        pb.add_collection("orders", records=[{"id": "o1", "amount": "Infinity"}, {"id": "o2", "amount": 1}])

        text = await helper.call_tool("query_collection", {
            "collection": "orders",
            "aggregate": {"total": "sum(amount)", "mean": "avg(amount)", "n": "count(id)"},
        })

        def reject_constant(name):
            raise AssertionError(f"non-JSON constant in output: {name}")

        result = json.loads(text, parse_constant=reject_constant)
        assert result["aggregations"] == {"total": None, "mean": None, "n": 2}

    @pytest.mark.asyncio
    async def test_unsupported_function_rejected_before_fetch(self, helper, pb):
        pb.add_collection("orders", records=ORDERS)

        error = await helper.assert_tool_error("query_collection", {
            "collection": "orders", "aggregate": {"m": "median(amount)"},
        }, INVALID_PARAMS)

        assert error.message == "Unsupported aggregation function: median"
        assert pb.calls_to("records.get_list") == []

    @pytest.mark.asyncio
    async def test_malformed_expression_rejected(self, helper, pb):
        error = await helper.assert_tool_error("query_collection", {
            "collection": "orders", "aggregate": {"total": "amount"},
        }, INVALID_PARAMS)

        assert error.message == "Invalid aggregation expression: amount"
        assert pb.remote_calls == 0

    @pytest.mark.asyncio
    async def test_backend_failure(self, helper):
        error = await helper.assert_tool_error("query_collection", {"collection": "missing"}, INTERNAL_ERROR)
        assert error.message.startswith("Failed to query collection: ")


class TestAggregateHelpers:

    def test_parse_splits_on_first_paren(self):
        assert parse_aggregate("t", "sum(amount)") == AggregateSpec("t", "sum", "amount")

    def test_parse_tolerates_missing_close_paren(self):
        assert parse_aggregate("t", "avg(amount").field == "amount"

    def test_parse_rejects_unknown_function(self):
        with pytest.raises(AggregationError, match="Unsupported aggregation function: max"):
            parse_aggregate("t", "max(amount)")

    def test_count_ignores_argument(self):
        spec = AggregateSpec("n", "count", "anything")
        assert compute_aggregate(spec, [{}, {}, {}]) == 3

    def test_sum_parses_leading_numbers(self):
        spec = AggregateSpec("t", "sum", "v")
        items = [{"v": "12px"}, {"v": "3.5e1"}, {"v": None}, {"v": True}, {"v": ""}]
        assert compute_aggregate(spec, items) == 47

    def test_avg_returns_fraction(self):
        spec = AggregateSpec("a", "avg", "v")
        assert compute_aggregate(spec, [{"v": 1}, {"v": 2}]) == 1.5

    def test_non_finite_results_are_none(self):
        items = [{"v": "Infinity"}, {"v": "-Infinity"}]
        assert compute_aggregate(AggregateSpec("t", "sum", "v"), items[:1]) is None
        assert compute_aggregate(AggregateSpec("t", "sum", "v"), items) is None
