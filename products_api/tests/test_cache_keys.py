"""Test cache key derivation."""

import hashlib
import re

from products_api.models.query import QuerySpec
from products_api.services.cache_keys import SEARCH_ERROR_KEY, EndpointKind, canonical_json, derive_key, is_cacheable
from products_api.services.query_normalizer import normalize


def test_literal_keys():
    """Fixed-parameter endpoints use readable keys."""
    assert derive_key(EndpointKind.COUNT) == "Products:Count"
    assert derive_key(EndpointKind.GET_BY_ID, 42) == "Products:GetById:42"
    assert derive_key(EndpointKind.LIST, {"page": 2, "pageSize": 10}) == "Products:Get:page=2;pageSize=10"


def test_list_key_uses_normalized_paging():
    assert derive_key(EndpointKind.LIST, {"page": 0, "pageSize": 500}) == "Products:Get:page=1;pageSize=100"


def test_search_key_is_uppercase_sha256():
    key = derive_key(EndpointKind.SEARCH, {"categories": ["Laptops"]})

    assert re.fullmatch(r"Products:Search:[0-9A-F]{64}", key)
    expected = hashlib.sha256(canonical_json(normalize({"categories": ["Laptops"]})).encode("utf-8")).hexdigest().upper()
    assert key == f"Products:Search:{expected}"


def test_equivalent_queries_share_a_key():
    """Ordering, duplicates, whitespace and legacy fields do not change the key."""
    a = derive_key(EndpointKind.SEARCH, {"brands": ["Apple", "Acme"], "categories": ["Laptops"], "minPrice": 10})
    b = derive_key(EndpointKind.SEARCH, {"brands": [" Acme", "Apple", "Apple"], "category": "Laptops", "minPrice": "10.00"})
    c = derive_key(EndpointKind.SEARCH, normalize({"category": "Laptops", "brands": ["Acme", "Apple"], "minPrice": 10.0}))

    assert a == b == c


def test_different_queries_get_different_keys():
    a = derive_key(EndpointKind.SEARCH, {"brands": ["Apple"]})
    b = derive_key(EndpointKind.SEARCH, {"brands": ["Acme"]})
    c = derive_key(EndpointKind.SEARCH, {"brands": ["Apple"], "page": 2})

    assert len({a, b, c}) == 3


def test_empty_and_missing_body_share_a_key():
    assert derive_key(EndpointKind.SEARCH, None) == derive_key(EndpointKind.SEARCH, {}) == derive_key(EndpointKind.SEARCH, QuerySpec())


def test_canonical_json_omits_absent_fields():
    payload = canonical_json(normalize({"brands": ["Apple"], "minPrice": "25.50"}))

    assert payload == '{"brands":["Apple"],"minPrice":"25.5","page":1,"pageSize":20,"sortBy":"title","sortDirection":"asc"}'


def test_serialization_failure_yields_sentinel(mocker):
    """A serialization error degrades to the reserved key instead of raising."""
    mocker.patch("products_api.services.cache_keys.json.dumps", side_effect=TypeError("boom"))

    key = derive_key(EndpointKind.SEARCH, {"brands": ["Apple"]})

    assert key == SEARCH_ERROR_KEY == "Products:Search:ERR"
    assert not is_cacheable(key)
