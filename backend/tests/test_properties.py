"""
Property-based testing with Hypothesis.

Covers the input-normalization policies: pagination clamping, order-field
sanitizing and order parsing.
"""

import re

from hypothesis import given, settings, strategies as st

from shared.config.constants import Limits, OrderDirection
from rest_api.routers._common.pagination import extract_pagination
from rest_api.services.crud.params import extract_order
from rest_api.services.crud.sanitizer import sanitize_order_field

FIELD_NAMES = st.from_regex(r"[a-z_][a-z0-9_]{0,20}", fullmatch=True)


class TestPaginationProperties:
    """Property-based tests for pagination extraction."""

    @given(
        page=st.integers(min_value=1, max_value=10_000),
        page_size=st.integers(min_value=1, max_value=100),
    )
    @settings(max_examples=100)
    def test_offset_and_limit_follow_page(self, page, page_size):
        """Property: offset == (page-1)*page_size and limit == page_size."""
        p = extract_pagination({"page": str(page), "page_size": str(page_size)})
        assert p.offset == (page - 1) * page_size
        assert p.limit == page_size

    @given(page_size=st.integers(min_value=101, max_value=10**9))
    @settings(max_examples=50)
    def test_large_page_size_is_clamped(self, page_size):
        """Property: page_size above the maximum becomes the maximum."""
        assert extract_pagination({"page_size": str(page_size)}).page_size == 100

    @given(page_size=st.integers(max_value=0))
    @settings(max_examples=50)
    def test_non_positive_page_size_uses_default(self, page_size):
        """Property: page_size <= 0 keeps the default."""
        assert extract_pagination({"page_size": str(page_size)}).page_size == 10

    @given(raw=st.text(alphabet=st.characters(exclude_categories=("Nd", "Cs")), max_size=10))
    @settings(max_examples=50)
    def test_non_numeric_page_size_uses_default(self, raw):
        """Property: values without digits keep the default."""
        assert extract_pagination({"page_size": raw}).page_size == 10

    @given(
        limit=st.integers(min_value=1, max_value=100),
        offset=st.integers(min_value=0, max_value=10**6),
    )
    @settings(max_examples=100)
    def test_limit_offset_window(self, limit, offset):
        """Property: page is derived from offset and limit."""
        p = extract_pagination({"limit": str(limit), "offset": str(offset)})
        assert p.limit == p.page_size == limit
        assert p.offset == offset
        assert p.page == offset // limit + 1

    @given(query=st.dictionaries(
        st.sampled_from(["page", "page_size", "limit", "offset"]),
        st.text(max_size=12),
    ))
    @settings(max_examples=200)
    def test_window_always_valid(self, query):
        """Property: whatever the input, the window stays within bounds."""
        p = extract_pagination(query)
        assert p.page >= 1
        assert 1 <= p.page_size <= 100
        assert p.limit == p.page_size
        assert p.offset >= 0

    @given(digits=st.integers(min_value=19, max_value=40), field=st.sampled_from(["page", "offset"]))
    @settings(max_examples=50)
    def test_offset_fits_storage_integer(self, digits, field):
        """Property: oversized page or offset never yields an offset beyond 64 bits."""
        p = extract_pagination({field: "9" * digits, "page_size": "100"})
        assert p.offset <= Limits.MAX_SQL_INTEGER


class TestSanitizerProperties:
    """Property-based tests for order-field sanitizing."""

    @given(raw=st.text(max_size=50))
    @settings(max_examples=200)
    def test_output_only_contains_safe_characters(self, raw):
        """Property: the sanitized field matches [A-Za-z0-9_.]*."""
        assert re.fullmatch(r"[A-Za-z0-9_.]*", sanitize_order_field(raw))

    @given(raw=st.text(max_size=50))
    @settings(max_examples=100)
    def test_idempotent(self, raw):
        """Property: sanitizing twice changes nothing."""
        once = sanitize_order_field(raw)
        assert sanitize_order_field(once) == once

    @given(field=FIELD_NAMES)
    def test_safe_names_pass_through(self, field):
        assert sanitize_order_field(field) == field


class TestOrderProperties:
    """Property-based tests for order parsing."""

    @given(field=FIELD_NAMES)
    def test_order_by_desc_equals_ordering_minus(self, field):
        """Property: ``order_by=f desc`` and ``ordering=-f`` are the same intent."""
        by = extract_order({"order_by": f"{field} desc"})
        minus = extract_order({"ordering": f"-{field}"})
        assert by == minus
        assert by.direction is OrderDirection.DESC

    @given(field=FIELD_NAMES, direction=st.text(max_size=6))
    def test_direction_is_asc_unless_desc(self, field, direction):
        order = extract_order({"order_by": f"{field} {direction}"})
        tokens = direction.split()
        expected = (
            OrderDirection.DESC
            if tokens and tokens[0].upper() == "DESC"
            else OrderDirection.ASC
        )
        assert order.field == field
        assert order.direction is expected
