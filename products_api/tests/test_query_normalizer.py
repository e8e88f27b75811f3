"""Test the query normalizer."""

from decimal import Decimal

import pytest

from products_api.models.query import MAX_PAGE, ProductQuery, QuerySpec, SortDirection, SortField
from products_api.services.query_normalizer import normalize


def test_none_gives_defaults():
    """A missing query normalizes to the default spec with no filters."""
    spec = normalize(None)

    assert spec == QuerySpec()
    assert spec.page == 1
    assert spec.page_size == 20
    assert spec.sort_by is SortField.TITLE
    assert spec.sort_direction is SortDirection.ASC
    assert spec.has_filters is False


@pytest.mark.parametrize(
    "raw, page, page_size",
    [
        ({"pageSize": 500}, 1, 100),
        ({"pageSize": 0}, 1, 20),
        ({"page": -3}, 1, 20),
        ({"page": 0, "pageSize": -1}, 1, 20),
        ({"page": 4, "pageSize": 100}, 4, 100),
        ({"page": "abc", "pageSize": "50"}, 1, 50),
    ],
)
def test_paging_is_clamped(raw, page, page_size):
    spec = normalize(raw)

    assert spec.page == page
    assert spec.page_size == page_size


def test_huge_page_is_capped_to_a_valid_offset():
    """Page numbers beyond a 64-bit offset are pulled back to the last addressable page."""
    spec = normalize({"page": 10**19, "pageSize": 100})

    assert spec.page == MAX_PAGE
    assert spec.offset <= 2**63 - 1


def test_category_merged_with_categories():
    """The legacy single category joins the list, deduplicated."""
    spec = normalize({"category": " Laptops ", "categories": ["Phones", "Laptops", "", None, "  "]})

    assert spec.categories == ("Laptops", "Phones")


def test_string_lists_are_trimmed_and_deduplicated():
    spec = normalize({"brands": [" Apple", "Apple ", "Acme"], "colours": ["  "], "sizes": None})

    assert spec.brands == ("Acme", "Apple")
    assert spec.colours == ()
    assert spec.sizes == ()


def test_ids_deduplicated_and_garbage_dropped():
    spec = normalize({"ids": [3, "1", 3, "x", None, True]})

    assert spec.ids == (1, 3)


def test_inverted_price_bounds_are_swapped():
    spec = normalize({"minPrice": 50, "maxPrice": 10})

    assert spec.min_price == Decimal("10")
    assert spec.max_price == Decimal("50")


@pytest.mark.parametrize("value", [0, -5, "nope", "NaN", None])
def test_non_positive_prices_are_absent(value):
    spec = normalize({"minPrice": value, "maxPrice": value})

    assert spec.min_price is None
    assert spec.max_price is None


def test_min_rating_zero_is_absent():
    assert normalize({"minRating": 0}).min_rating is None
    assert normalize({"minRating": -1.5}).min_rating is None
    assert normalize({"minRating": "4.5"}).min_rating == 4.5


def test_free_text_trimmed():
    assert normalize({"query": "  laptop  "}).free_text == "laptop"
    assert normalize({"query": "   "}).free_text is None


def test_on_promotion_is_tri_state():
    assert normalize({"onPromotion": True}).on_promotion is True
    assert normalize({"onPromotion": False}).on_promotion is False
    assert normalize({}).on_promotion is None
    assert normalize({"onPromotion": "maybe"}).on_promotion is None


@pytest.mark.parametrize(
    "sort_by, expected",
    [("price", SortField.PRICE), (" RATING ", SortField.RATING), ("brand", SortField.BRAND), ("colour", SortField.TITLE), (None, SortField.TITLE)],
)
def test_sort_field_resolution(sort_by, expected):
    assert normalize({"sortBy": sort_by}).sort_by is expected


@pytest.mark.parametrize(
    "direction, expected",
    [("desc", SortDirection.DESC), ("DESCENDING", SortDirection.DESC), (" Desc ", SortDirection.DESC), ("down", SortDirection.ASC), (None, SortDirection.ASC)],
)
def test_sort_direction_resolution(direction, expected):
    assert normalize({"sortDirection": direction}).sort_direction is expected


def test_has_filters_tracks_every_dimension():
    assert normalize({"ids": [1]}).has_filters
    assert normalize({"query": "x"}).has_filters
    assert normalize({"onPromotion": False}).has_filters
    assert normalize({"maxPrice": 10}).has_filters
    assert not normalize({"brands": [" "], "minPrice": 0, "minRating": 0, "sortBy": "price"}).has_filters


def test_snake_case_and_model_input():
    """Accepts snake_case mappings and ProductQuery instances alike."""
    from_mapping = normalize({"page_size": 5, "min_price": "12.50"})
    from_model = normalize(ProductQuery(page_size=5, min_price=Decimal("12.50")))

    assert from_mapping == from_model
    assert from_mapping.min_price == Decimal("12.50")


def test_unreadable_query_falls_back_to_defaults():
    """A payload of the wrong shape never raises."""
    assert normalize(["not", "a", "query"]) == QuerySpec()


def test_ordering_and_whitespace_do_not_matter():
    a = normalize({"brands": ["Apple", "Acme"], "categories": ["Laptops"]})
    b = normalize({"brands": [" Acme ", "Apple", "Apple"], "category": "Laptops"})

    assert a == b
