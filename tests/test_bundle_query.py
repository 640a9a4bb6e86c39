"""
Bundle query tests: search, bounds, tags, sorting and filter flags.
"""
import pytest

from bundle_pricing.engine.bundle_query import (
    BundleQueryEngine,
    has_active_filters,
    parse_count_bound,
    parse_price_bound,
    timestamp_millis,
)
from bundle_pricing.engine.models import BundleFilterSpec, DiscountStrategy, FixedStrategy, PriceType


@pytest.fixture
def engine():
    return BundleQueryEngine("eur")


@pytest.fixture
def priced_bundles(make_bundle):
    """€5 sum, €20 fixed, €30 sum."""
    return [
        make_bundle(1, 500, created_at="2025-01-01T10:00:00Z"),
        make_bundle(2, 2000, strategy=FixedStrategy(fixed_price_minor=2000), created_at="2025-01-02T10:00:00Z"),
        make_bundle(3, 3000, created_at="2025-01-03T10:00:00Z"),
    ]


def ids(bundles):
    return [b.id for b in bundles]


def test_price_min_and_tag_filter(engine, priced_bundles):
    spec = BundleFilterSpec(price_min="10", price_types=["fixed"])
    assert ids(engine.apply(priced_bundles, spec)) == [2]


def test_zero_price_min_means_no_bound(engine, make_bundle):
    bundles = [make_bundle(1, 0), make_bundle(2, 99900)]
    spec = BundleFilterSpec(price_min="0", sort_field="price", sort_direction="asc")
    assert ids(engine.apply(bundles, spec)) == [1, 2]


def test_price_bounds_are_inclusive(engine, priced_bundles):
    spec = BundleFilterSpec(price_min="5", price_max="20.00", sort_field="price", sort_direction="asc")
    assert ids(engine.apply(priced_bundles, spec)) == [1, 2]


@pytest.mark.parametrize("value", ["", "0", "0.00", "-3", "abc", "nan", "inf", None])
def test_unset_or_malformed_price_bounds(value):
    assert parse_price_bound(value) is None


@pytest.mark.parametrize("value,expected", [("3", 3), ("2.7", 2), (" 4 ", 4), ("", None), ("0", None),
                                            ("-1", None), ("x", None)])
def test_count_bound_parsing(value, expected):
    assert parse_count_bound(value) == expected


def test_numeric_prefixed_bounds_are_unset():
    assert parse_price_bound("10abc") is None
    assert parse_count_bound("3abc") is None


def test_malformed_bound_matches_everything(engine, priced_bundles):
    spec = BundleFilterSpec(price_max="lots", service_count_min="many")
    assert len(engine.apply(priced_bundles, spec)) == 3


def test_service_count_bounds(engine, make_bundle):
    bundles = [make_bundle(1, 100, services=2), make_bundle(2, 100, services=3), make_bundle(3, 100, services=4)]
    spec = BundleFilterSpec(service_count_min="3", service_count_max="3")
    assert ids(engine.apply(bundles, spec)) == [2]


def test_search_matches_name_or_description(engine, make_bundle):
    bundles = [
        make_bundle(1, 100, name="Spa Day"),
        make_bundle(2, 100, name="Quick Cut", description="Includes a SPA towel"),
        make_bundle(3, 100, name="Beard Care"),
    ]
    spec = BundleFilterSpec(search_term="spa", sort_field="price")
    assert sorted(ids(engine.apply(bundles, spec))) == [1, 2]


def test_blank_search_matches_everything(engine, priced_bundles):
    assert len(engine.apply(priced_bundles, BundleFilterSpec(search_term="   "))) == 3


def test_search_term_keeps_surrounding_spaces(engine, make_bundle):
    bundles = [make_bundle(1, 100, name="spa"), make_bundle(2, 100, name="day spa package")]
    assert ids(engine.apply(bundles, BundleFilterSpec(search_term="spa "))) == [2]


def test_tag_filter_accepts_any_listed_type(engine, make_bundle):
    bundles = [
        make_bundle(1, 100),
        make_bundle(2, 100, strategy=FixedStrategy(fixed_price_minor=100)),
        make_bundle(3, 100, strategy=DiscountStrategy(discount_percentage=10)),
    ]
    spec = BundleFilterSpec(price_types=[PriceType.SUM, PriceType.DISCOUNT], sort_direction="asc")
    assert ids(engine.apply(bundles, spec)) == [1, 3]


def test_default_sort_is_newest_first(engine, priced_bundles):
    assert ids(engine.apply(priced_bundles, BundleFilterSpec.default())) == [3, 2, 1]


def test_sort_by_updated_at(engine, make_bundle):
    bundles = [
        make_bundle(1, 100, updated_at="2025-03-01T00:00:00Z"),
        make_bundle(2, 100, updated_at="2025-02-01T00:00:00Z"),
    ]
    spec = BundleFilterSpec(sort_field="updatedAt", sort_direction="asc")
    assert ids(engine.apply(bundles, spec)) == [2, 1]


def test_reversing_direction_reverses_when_no_ties(engine, priced_bundles):
    asc = engine.apply(priced_bundles, BundleFilterSpec(sort_field="price", sort_direction="asc"))
    desc = engine.apply(priced_bundles, BundleFilterSpec(sort_field="price", sort_direction="desc"))
    assert ids(desc) == list(reversed(ids(asc)))


def test_ties_keep_input_order_in_both_directions(engine, make_bundle):
    bundles = [make_bundle(1, 1000), make_bundle(2, 500), make_bundle(3, 1000)]

    asc = engine.apply(bundles, BundleFilterSpec(sort_field="price", sort_direction="asc"))
    desc = engine.apply(bundles, BundleFilterSpec(sort_field="price", sort_direction="desc"))

    assert ids(asc) == [2, 1, 3]
    assert ids(desc) == [1, 3, 2]


def test_apply_is_idempotent(engine, priced_bundles):
    spec = BundleFilterSpec(price_max="25", sort_field="price", sort_direction="asc")
    once = engine.apply(priced_bundles, spec)
    assert engine.apply(once, spec) == once


def test_apply_does_not_mutate_input(engine, priced_bundles):
    before = list(priced_bundles)
    engine.apply(priced_bundles, BundleFilterSpec(sort_field="price", sort_direction="desc"))
    assert priced_bundles == before


def test_filters_never_grow_the_result(engine, priced_bundles):
    base = engine.apply(priced_bundles, BundleFilterSpec())
    with_min = engine.apply(priced_bundles, BundleFilterSpec(price_min="6"))
    with_tag = engine.apply(priced_bundles, BundleFilterSpec(price_types=["sum"]))
    assert len(with_min) <= len(base)
    assert len(with_tag) <= len(base)


def test_has_active_filters():
    assert not has_active_filters(BundleFilterSpec())
    assert not has_active_filters(BundleFilterSpec(price_min="0", price_max="0", search_term="  "))
    assert has_active_filters(BundleFilterSpec(search_term="spa"))
    assert has_active_filters(BundleFilterSpec(price_max="10"))
    assert has_active_filters(BundleFilterSpec(service_count_min="2"))
    assert has_active_filters(BundleFilterSpec(price_types=["fixed"]))


def test_is_filtered_empty(engine, priced_bundles):
    assert engine.is_filtered_empty(priced_bundles, BundleFilterSpec(search_term="nothing"))
    assert not engine.is_filtered_empty([], BundleFilterSpec(search_term="nothing"))
    assert not engine.is_filtered_empty(priced_bundles, BundleFilterSpec())


def test_invalid_sort_options_are_rejected():
    with pytest.raises(ValueError):
        BundleFilterSpec(sort_field="name")
    with pytest.raises(ValueError):
        BundleFilterSpec(sort_direction="up")


def test_timestamp_millis():
    assert timestamp_millis("1970-01-01T00:00:01Z") == 1000
    assert timestamp_millis("1970-01-01T00:00:01") == 1000
    assert timestamp_millis("1970-01-01T01:00:01+01:00") == 1000
    assert timestamp_millis("garbage") == 0
    assert timestamp_millis("") == 0
