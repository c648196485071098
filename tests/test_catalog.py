"""
Tests for the catalog query engine
"""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from storefront.core.errors import InvalidArgument, NotFound
from storefront.database.products import CatalogQueryEngine, paginate, sort_products
from storefront.models.product import FilterCriteria, PriceRange, SortKey


def ids(products):
    return [p.id for p in products]


RELEVANCE_ORDER = [
    "p12", "p3", "p2", "p14", "p6",  # on sale, by rating
    "p5", "p1", "p11", "p9",         # new, by rating
    "p7", "p8", "p4", "p10", "p13",  # the rest, by rating
]


class TestPagination:
    """Tests for windowing the sorted result."""

    def test_two_pages_of_fourteen(self, catalog):
        first = catalog.query(page=1, page_size=12)
        assert len(first.items) == 12
        assert first.has_more is True
        assert first.total == 14

        second = catalog.query(page=2, page_size=12)
        assert len(second.items) == 2
        assert second.has_more is False
        assert second.total == 14

    @pytest.mark.parametrize("page_size", [1, 3, 5, 7, 12, 14, 20])
    def test_pages_concatenate_to_full_result(self, catalog, page_size):
        criteria = FilterCriteria(in_stock_only=True)
        full = catalog.query(criteria, SortKey.PRICE_ASC, page=1, page_size=100)

        collected = []
        page = 1
        while True:
            result = catalog.query(criteria, SortKey.PRICE_ASC, page=page, page_size=page_size)
            collected.extend(result.items)
            if not result.has_more:
                break
            assert len(result.items) == page_size
            page += 1

        assert ids(collected) == ids(full.items)
        assert len(set(ids(collected))) == full.total == 12
        assert page == -(-full.total // page_size)

    def test_page_past_the_end_is_empty(self, catalog):
        result = catalog.query(page=5, page_size=12)
        assert result.items == []
        assert result.total == 14
        assert result.has_more is False

    @pytest.mark.parametrize("page,page_size", [(0, 12), (-1, 12), (1, 0), (1, -5)])
    def test_invalid_window_rejected(self, catalog, page, page_size):
        with pytest.raises(InvalidArgument):
            catalog.query(page=page, page_size=page_size)

    def test_paginate_reports_request(self, products):
        result = paginate(products, page=3, page_size=4)
        assert result.page == 3
        assert result.page_size == 4
        assert ids(result.items) == ["p9", "p10", "p11", "p12"]


class TestSorting:
    """Tests for sort keys and their stability."""

    def test_relevance_is_default(self, catalog):
        result = catalog.query(page_size=20)
        assert ids(result.items) == RELEVANCE_ORDER

    def test_price_ascending(self, catalog):
        prices = [p.price for p in catalog.query(sort=SortKey.PRICE_ASC, page_size=20).items]
        assert prices == sorted(prices)

    def test_price_descending(self, catalog):
        prices = [p.price for p in catalog.query(sort=SortKey.PRICE_DESC, page_size=20).items]
        assert prices == sorted(prices, reverse=True)

    def test_equal_prices_keep_input_order(self, catalog):
        for sort in (SortKey.PRICE_ASC, SortKey.PRICE_DESC):
            order = ids(catalog.query(sort=sort, page_size=20).items)
            assert order.index("p2") < order.index("p5")
            assert order.index("p3") < order.index("p8")

    def test_newest_first(self, catalog):
        order = ids(catalog.query(sort=SortKey.NEWEST, page_size=20).items)
        assert order[:4] == ["p1", "p5", "p9", "p11"]
        assert order[4:] == ["p2", "p3", "p4", "p6", "p7", "p8", "p10", "p12", "p13", "p14"]

    def test_bestselling(self, catalog):
        order = ids(catalog.query(sort=SortKey.BESTSELLING, page_size=3).items)
        assert order == ["p13", "p7", "p4"]

    def test_rating(self, catalog):
        ratings = [p.rating for p in catalog.query(sort=SortKey.RATING, page_size=20).items]
        assert ratings == sorted(ratings, reverse=True)

    def test_sort_accepts_plain_values(self, products):
        assert ids(sort_products(products, "price-asc"))[0] == "p13"


class TestFiltering:
    """Tests for conjunctive filter predicates."""

    def test_category_set(self, catalog):
        result = catalog.query(FilterCriteria(categories={"audio", "gaming"}))
        assert ids(result.items) == ["p3", "p7", "p8", "p4"]

    def test_brand_set(self, catalog):
        result = catalog.query(FilterCriteria(brands=["Apple"]))
        assert result.total == 5
        assert all(p.brand == "Apple" for p in result.items)

    def test_price_range_is_inclusive(self, catalog):
        criteria = FilterCriteria(price_range=PriceRange(min=Decimal("109.99"), max=Decimal("349.99")))
        result = catalog.query(criteria, SortKey.PRICE_ASC)
        assert ids(result.items) == ["p14", "p4", "p3", "p8"]

    def test_price_range_without_max(self, catalog):
        criteria = FilterCriteria(price_range=PriceRange(min=Decimal("1500")))
        assert sorted(ids(catalog.query(criteria).items)) == ["p12", "p6"]

    def test_min_rating(self, catalog):
        result = catalog.query(FilterCriteria(min_rating=4.8))
        assert sorted(ids(result.items)) == ["p1", "p12", "p3", "p5", "p7", "p8"]

    def test_in_stock_only(self, catalog):
        result = catalog.query(FilterCriteria(in_stock_only=True), page_size=20)
        assert result.total == 12
        assert "p6" not in ids(result.items)
        assert "p14" not in ids(result.items)

    def test_on_sale_only(self, catalog):
        result = catalog.query(FilterCriteria(on_sale_only=True))
        assert ids(result.items) == ["p12", "p3", "p2", "p14", "p6"]

    def test_search_is_case_insensitive(self, catalog):
        assert ids(catalog.query(FilterCriteria(search="NOISE")).items) == ["p3"]

    def test_search_matches_brand(self, catalog):
        assert ids(catalog.query(FilterCriteria(search="garmin")).items) == ["p10"]

    def test_search_matches_tags(self, catalog):
        result = catalog.query(FilterCriteria(search="wireless"))
        assert sorted(ids(result.items)) == ["p14", "p3", "p4"]

    def test_search_matches_description(self, catalog):
        assert ids(catalog.query(FilterCriteria(search="dualsense")).items) == ["p7"]

    def test_filters_are_conjunctive(self, catalog):
        criteria = FilterCriteria(brands={"Apple"}, in_stock_only=True, min_rating=4.7)
        result = catalog.query(criteria)
        assert sorted(ids(result.items)) == ["p1", "p11", "p4", "p5"]

    def test_no_match(self, catalog):
        result = catalog.query(FilterCriteria(search="zzz-nothing"))
        assert result.total == 0
        assert result.items == []
        assert result.has_more is False

    @pytest.mark.parametrize("criteria", [
        FilterCriteria(categories={"computer", "accessori"}, in_stock_only=True),
        FilterCriteria(brands={"Sony", "Apple"}, min_rating=4.7),
        FilterCriteria(price_range=PriceRange(min=Decimal("100"), max=Decimal("700")), on_sale_only=True),
        FilterCriteria(search="console", min_rating=4.9),
        FilterCriteria(search="a", brands={"Apple"}, in_stock_only=True),
    ])
    def test_every_item_satisfies_criteria(self, catalog, products, criteria):
        result = catalog.query(criteria, page_size=100)
        expected = {p.id for p in products if criteria.matches(p)}

        assert set(ids(result.items)) == expected
        for product in result.items:
            if criteria.categories:
                assert product.category in criteria.categories
            if criteria.brands:
                assert product.brand in criteria.brands
            if criteria.price_range:
                assert criteria.price_range.min <= product.price <= criteria.price_range.max
            if criteria.min_rating is not None:
                assert product.rating >= criteria.min_rating
            if criteria.in_stock_only:
                assert product.in_stock
            if criteria.on_sale_only:
                assert product.is_on_sale


class TestFilterCriteria:
    """Tests for criteria validation."""

    def test_inverted_price_range_rejected(self):
        with pytest.raises(ValidationError):
            PriceRange(min=Decimal("10"), max=Decimal("5"))

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            PriceRange(min=Decimal("-1"), max=Decimal("5"))

    def test_rating_out_of_range_rejected(self):
        with pytest.raises(ValidationError):
            FilterCriteria(min_rating=6)

    def test_empty_values_are_absent(self):
        criteria = FilterCriteria(categories=[], brands=set(), search="   ")
        assert criteria.categories is None
        assert criteria.brands is None
        assert criteria.search is None

    def test_search_is_trimmed(self):
        assert FilterCriteria(search="  sony ").search == "sony"


class TestRelatedAndFeatured:
    """Tests for derived queries."""

    def test_related_same_category(self, catalog):
        assert ids(catalog.related("p3")) == ["p4"]
        assert ids(catalog.related("p4")) == ["p3"]

    def test_related_excludes_product(self, catalog):
        assert "p7" not in ids(catalog.related("p7"))

    def test_related_with_explicit_category(self, catalog):
        assert ids(catalog.related("unknown", category="gaming")) == ["p7", "p8"]

    def test_related_limit(self, catalog):
        assert ids(catalog.related("p8", limit=1, category="gaming")) == ["p7"]

    def test_related_unknown_product(self, catalog):
        with pytest.raises(NotFound):
            catalog.related("nope")

    def test_featured(self, catalog):
        assert ids(catalog.featured(6)) == ["p12", "p3", "p2", "p14", "p6", "p5"]

    def test_featured_skips_plain_products(self, catalog):
        assert "p13" not in ids(catalog.featured(20))


class TestLookups:
    """Tests for products, brands and categories."""

    def test_get_product(self, catalog):
        assert catalog.get_product("p5").name == "MacBook Air 13 M3"

    def test_get_product_missing(self, catalog):
        with pytest.raises(NotFound) as exc_info:
            catalog.get_product("nope")
        assert exc_info.value.identifier == "nope"
        assert catalog.find_product("nope") is None

    def test_fixture_aliases(self, catalog):
        product = catalog.get_product("p2")
        assert product.review_count == 980
        assert product.discount_percent == 13
        assert product.original_price == Decimal("1499.00")
        assert product.primary_image == "/images/products/galaxy-s24-ultra.jpg"

    def test_brands(self, catalog):
        assert catalog.brands() == [
            "Anker", "Apple", "Canon", "Dell", "Garmin",
            "Logitech", "Nintendo", "Samsung", "Sony",
        ]

    def test_categories_with_counts(self, catalog):
        categories = catalog.categories()
        assert categories[0].slug == "accessori"
        assert categories[0].product_count == 2
        assert categories[-1].slug == "smart-home"
        assert categories[-1].product_count == 0
        assert sum(c.product_count for c in categories) == 14

    def test_get_category(self, catalog):
        assert catalog.get_category("tablet").product_count == 1
        with pytest.raises(NotFound):
            catalog.get_category("nope")

    def test_empty_catalog(self):
        engine = CatalogQueryEngine([])
        assert engine.query().total == 0
        assert engine.categories() == []
