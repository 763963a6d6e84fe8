"""Tests for catalog filtering, search, sorting and grouping."""

import pytest

from shop.catalog import filter_products, group_by_collection, parse_price, sort_products
from shop.defaults import default_collections, default_products
from shop.models import Classification, Product


@pytest.fixture
def products():
    return default_products()


def ids(items):
    return [p.id for p in items]


class TestParsePrice:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("25.00 €", 25.0),
            ("12,50€", 12.5),
            ("€ 8", 8.0),
            ("1.250,00 €", 1250.0),
            ("1,250.50", 1250.5),
            ("1.250.000 €", 1250000.0),
            ("25 €.", 25.0),
            ("1.2,3,4 €", None),
            ("Consultar", None),
            ("", None),
            (None, None),
        ],
    )
    def test_parse(self, text, expected):
        assert parse_price(text) == expected


class TestFilterProducts:
    def test_sentinel_means_all(self, products):
        assert ids(filter_products(products, collection="Todas")) == ids(products)
        assert ids(filter_products(products)) == ids(products)

    def test_by_collection_keeps_order(self, products):
        assert ids(filter_products(products, collection="Nocturna")) == ["2", "6", "8", "10"]

    def test_by_category_and_material(self, products):
        result = filter_products(products, category="Collares", material="Baño de oro mate")
        assert ids(result) == ["11"]

    def test_search_is_case_insensitive(self, products):
        assert ids(filter_products(products, search="LUNA")) == ["2"]

    def test_search_matches_description_and_material(self, products):
        assert "5" in ids(filter_products(products, search="perla de río"))
        assert ids(filter_products(products, search="acetato")) == ["10"]

    def test_search_treats_input_literally(self, products):
        assert filter_products(products, search="(.*") == []

    def test_unknown_collection_empty(self, products):
        assert filter_products(products, collection="Invierno") == []

    def test_empty_input(self):
        assert filter_products([], search="x") == []


class TestSortProducts:
    def test_newest_keeps_store_order(self, products):
        assert ids(sort_products(products, "newest")) == ids(products)

    def test_by_name(self, products):
        names = [p.name for p in sort_products(products, "name")]
        assert names == sorted(names, key=str.casefold)

    def test_price_ascending(self, products):
        prices = [parse_price(p.price) for p in sort_products(products, "price_asc")]
        assert prices == sorted(prices)
        assert prices[0] == 10.0

    def test_price_descending(self, products):
        assert sort_products(products, "price_desc")[0].id == "9"

    def test_unparseable_price_sorts_last(self):
        items = [
            Product(id="a", name="A", category="", collection="", price="Consultar"),
            Product(id="b", name="B", category="", collection="", price="5 €"),
            Product(id="c", name="C", category="", collection="", price="3 €"),
        ]
        assert ids(sort_products(items, "price_asc")) == ["c", "b", "a"]
        assert ids(sort_products(items, "price_desc")) == ["b", "c", "a"]

    def test_thousands_separator_sorts_by_value(self):
        items = [
            Product(id="big", name="A", category="", collection="", price="1.250,00 €"),
            Product(id="small", name="B", category="", collection="", price="30,00 €"),
        ]
        assert ids(sort_products(items, "price_asc")) == ["small", "big"]

    def test_unknown_key(self, products):
        with pytest.raises(ValueError):
            sort_products(products, "popular")


class TestGroupByCollection:
    def test_sections_follow_collection_order(self, products):
        sections = group_by_collection(products, default_collections())

        assert [s["collection"].name for s in sections] == ["Aurora", "Nocturna", "Orgánica"]
        assert ids(sections[0]["products"]) == ["1", "3", "7", "9"]

    def test_empty_collections_are_skipped(self, products):
        collections = default_collections() + [Classification(name="Vacía")]
        sections = group_by_collection(products, collections)
        assert "Vacía" not in [s["collection"].name for s in sections]
