import json

import pytest

from core.criteria import (
    Criteria, RequestCriteriaBuilder, EqualsFilter, EqualsAnyFilter, ContainsFilter,
    RangeFilter, MultiFilter, NotFilter, FieldSorting
)
from core.exceptions import InvalidCriteriaError


@pytest.fixture
def builder():
    return RequestCriteriaBuilder(max_limit=100, default_limit=20)


def test_empty_request_uses_default_limit(builder):
    criteria = builder.handle_request({})

    assert criteria.limit == 20
    assert criteria.offset is None
    assert criteria.filters == []
    assert criteria.sortings == []
    assert criteria.total_count_mode == Criteria.TOTAL_COUNT_MODE_NONE


def test_page_and_limit_become_offset(builder):
    criteria = builder.handle_request({"page": 3, "limit": 10, "total-count-mode": 1})

    assert criteria.limit == 10
    assert criteria.offset == 20
    assert criteria.get_page() == 3
    assert criteria.total_count_mode == Criteria.TOTAL_COUNT_MODE_EXACT


def test_limit_above_maximum_is_rejected(builder):
    with pytest.raises(InvalidCriteriaError) as exc_info:
        builder.handle_request({"limit": 101})

    assert exc_info.value.error_code == "FRAMEWORK__INVALID_CRITERIA"


@pytest.mark.parametrize("payload", [
    {"page": 0},
    {"filter": [{"type": "unknown", "field": "name"}]},
    {"filter": [{"type": "equals"}]},
    {"filter": [{"type": "multi", "queries": []}]},
    {"filter": [{"type": "range", "field": "price", "parameters": {"between": 1}}]},
    {"sort": [{"field": "name", "order": "sideways"}]},
    {"total-count-mode": 7},
])
def test_invalid_payloads_are_rejected(builder, payload):
    with pytest.raises(InvalidCriteriaError):
        builder.handle_request(payload)


def test_filters_are_parsed(builder):
    criteria = builder.handle_request({
        "filter": [
            {"type": "equals", "field": "active", "value": True},
            {"type": "equalsAny", "field": "id", "value": "a|b"},
            {"type": "contains", "field": "name", "value": "shirt"},
            {"type": "range", "field": "price", "parameters": {"gte": 10, "lt": 50}},
            {"type": "multi", "operator": "or", "queries": [
                {"type": "equals", "field": "stock", "value": 0},
                {"type": "not", "queries": [{"type": "equals", "field": "name", "value": "x"}]},
            ]},
        ],
        "post-filter": [{"type": "equals", "field": "stock", "value": 5}],
    })

    assert criteria.filters == [
        EqualsFilter("active", True),
        EqualsAnyFilter("id", ["a", "b"]),
        ContainsFilter("name", "shirt"),
        RangeFilter("price", {"gte": 10, "lt": 50}),
        MultiFilter("OR", [
            EqualsFilter("stock", 0),
            NotFilter("AND", [EqualsFilter("name", "x")]),
        ]),
    ]
    assert criteria.post_filters == [EqualsFilter("stock", 5)]
    assert criteria.get_fields() == ["active", "id", "name", "price", "stock", "name", "stock"]


def test_sort_shorthand(builder):
    criteria = builder.handle_request({"sort": "-createdAt, name"})

    assert criteria.sortings == [
        FieldSorting("createdAt", FieldSorting.DESCENDING),
        FieldSorting("name", FieldSorting.ASCENDING),
    ]


def test_query_string_parameters_are_json_decoded(builder):
    criteria = builder.from_query_params({
        "limit": "5",
        "filter": json.dumps([{"type": "equals", "field": "name", "value": "P1"}]),
        "sort": json.dumps([{"field": "price", "order": "DESC"}]),
        "associations": json.dumps({"visibilities": {}}),
    })

    assert criteria.limit == 5
    assert criteria.filters == [EqualsFilter("name", "P1")]
    assert criteria.sortings == [FieldSorting("price", FieldSorting.DESCENDING)]
    assert criteria.has_association("visibilities")


def test_query_string_ids_accept_pipe_and_json_forms(builder):
    assert builder.from_query_params({"ids": "a|b"}).ids == ["a", "b"]
    assert builder.from_query_params({"ids": "a"}).ids == ["a"]
    assert builder.from_query_params({"ids": json.dumps(["a", "b"])}).ids == ["a", "b"]


def test_query_string_with_broken_json_is_rejected(builder):
    with pytest.raises(InvalidCriteriaError):
        builder.from_query_params({"filter": "[{"})


def test_nested_associations(builder):
    criteria = builder.handle_request({
        "associations": {
            "wishlists": {
                "filter": [{"type": "equals", "field": "wishlistId", "value": "w1"}],
                "associations": {"wishlist": {}},
            },
        },
    })

    wishlists = criteria.get_association("wishlists")
    assert wishlists.filters == [EqualsFilter("wishlistId", "w1")]
    assert criteria.get_association("wishlists.wishlist") is wishlists.associations["wishlist"]


def test_association_list_form(builder):
    criteria = builder.handle_request({"associations": ["visibilities", "wishlists.wishlist"]})

    assert set(criteria.associations) == {"visibilities", "wishlists"}
    assert criteria.get_association("wishlists").has_association("wishlist")


def test_has_filter_looks_into_multi_filters():
    criteria = Criteria().add_filter(MultiFilter("AND", [ContainsFilter("name", "a")]))

    assert criteria.has_filter(ContainsFilter)
    assert not criteria.has_filter(RangeFilter)


def test_with_field_copies_filter():
    original = RangeFilter("wishlists.createdAt", {"gte": "2024-01-01"})
    copy = original.with_field("createdAt")

    assert copy == RangeFilter("createdAt", {"gte": "2024-01-01"})
    assert original.field == "wishlists.createdAt"
