"""
Tests for query parameter extraction: filters, ordering, multi-valued keys.
"""

import pytest
from starlette.datastructures import QueryParams as StarletteQueryParams

from shared.config.constants import OrderDirection
from rest_api.routers._common.query import first_value, query_multidict
from rest_api.services.crud.params import (
    OrderParams,
    extract_filters,
    extract_order,
    parse_direction,
)


class TestQueryMultidict:
    """Normalization of the supported query containers."""

    def test_starlette_query_params_keep_every_value(self):
        query = StarletteQueryParams("status=active&status=inactive&page=2")
        assert query_multidict(query) == {"status": ["active", "inactive"], "page": ["2"]}

    def test_plain_mapping(self):
        assert query_multidict({"age": 26}) == {"age": ["26"]}

    def test_mapping_of_lists(self):
        assert query_multidict({"age": ["1", "2"]}) == {"age": ["1", "2"]}

    def test_none_is_empty(self):
        assert query_multidict(None) == {}

    def test_unsupported_container(self):
        with pytest.raises(TypeError):
            query_multidict(["page", "1"])


class TestFirstValue:
    """Duplicate keys resolve to the first value."""

    def test_first_value_wins_on_starlette(self):
        query = StarletteQueryParams("status=active&status=inactive")
        assert first_value(query, "status") == "active"

    def test_first_value_wins_on_mapping(self):
        assert first_value({"status": ["inactive", "active"]}, "status") == "inactive"

    def test_missing_key(self):
        assert first_value({}, "status") is None


class TestExtractOrder:
    """order_by / ordering parsing."""

    def test_order_by_with_direction(self):
        assert extract_order({"order_by": "age desc"}) == OrderParams("age", OrderDirection.DESC)

    def test_ordering_with_minus_prefix(self):
        assert extract_order({"ordering": "-age"}) == OrderParams("age", OrderDirection.DESC)

    def test_order_by_and_ordering_are_equivalent(self):
        assert extract_order({"order_by": "age desc"}) == extract_order({"ordering": "-age"})

    def test_order_by_without_direction_is_ascending(self):
        order = extract_order({"order_by": "name"})
        assert order.field == "name"
        assert order.direction is OrderDirection.ASC
        assert not order.descending

    def test_direction_is_case_insensitive(self):
        assert extract_order({"order_by": "age DeSc"}).descending

    def test_unknown_direction_collapses_to_ascending(self):
        assert extract_order({"order_by": "age sideways"}).direction is OrderDirection.ASC

    def test_order_by_takes_precedence(self):
        order = extract_order({"order_by": "name", "ordering": "-age"})
        assert order == OrderParams("name", OrderDirection.ASC)

    def test_ordering_ascending(self):
        assert extract_order({"ordering": "created_at"}) == OrderParams("created_at")

    def test_blank_order_by_means_no_order(self):
        assert extract_order({"order_by": "   "}) is None

    def test_no_order(self):
        assert extract_order({"status": "active"}) is None

    @pytest.mark.parametrize("raw,expected", [
        ("desc", OrderDirection.DESC),
        ("DESC", OrderDirection.DESC),
        ("asc", OrderDirection.ASC),
        (None, OrderDirection.ASC),
        ("", OrderDirection.ASC),
    ])
    def test_parse_direction(self, raw, expected):
        assert parse_direction(raw) is expected


class TestExtractFilters:
    """Every non-reserved key becomes an equality filter."""

    def test_reserved_keys_are_not_filters(self):
        params = extract_filters({
            "page": "1",
            "page_size": "10",
            "limit": "5",
            "offset": "0",
            "order_by": "age desc",
            "ordering": "-age",
            "status": "active",
        })
        assert params.filters == {"status": "active"}
        assert params.order == OrderParams("age", OrderDirection.DESC)

    def test_exclude_keys(self):
        params = extract_filters({"keyword": "zhang", "status": "active"}, exclude_keys={"keyword"})
        assert params.filters == {"status": "active"}

    def test_duplicate_key_uses_first_value(self):
        query = StarletteQueryParams("status=active&status=inactive")
        assert extract_filters(query).filters == {"status": "active"}

    def test_empty_query(self):
        params = extract_filters({})
        assert params.filters == {}
        assert params.order is None
