"""엔티티 분류 규칙 / 키 정규화 테스트"""

import pytest

from food_catalog.utils.text import (
    EntityClassifier,
    extract_category_tokens,
    is_likely_restaurant_label,
    is_valid_brand_label,
    key_from_filename,
    normalize_key,
)
from food_catalog.utils.text.classification import BrandRules, CategoryRules, RestaurantRules


class TestBrandLabel:
    @pytest.mark.parametrize("name", ["usda", "USDA", "Generic", "generic", "", "n/a", "None", "x"])
    def test_rejected(self, name):
        assert is_valid_brand_label(name) is False

    @pytest.mark.parametrize("name", ["Kraft", "Ben & Jerry's", "365 Everyday Value", "KIND"])
    def test_accepted(self, name):
        assert is_valid_brand_label(name) is True

    def test_lowercase_start_is_not_proper_noun(self):
        assert is_valid_brand_label("kraft") is False

    def test_length_bounds(self):
        assert is_valid_brand_label("A" * 50) is True
        assert is_valid_brand_label("A" * 51) is False


class TestRestaurantLabel:
    @pytest.mark.parametrize("name", ["Burger King", "Pizza Hut", "Olive Garden Italian Kitchen", "Starbucks"])
    def test_indicator_match(self, name):
        assert is_likely_restaurant_label(name) is True

    def test_plain_brand_is_not_restaurant(self):
        assert is_likely_restaurant_label("Kraft") is False

    def test_too_short(self):
        assert is_likely_restaurant_label("Bk") is False

    def test_permissive_accepts_proper_nouns(self):
        assert is_likely_restaurant_label("Wendy's", permissive=True) is True
        assert is_likely_restaurant_label("Wendy's") is False

    def test_permissive_stoplist(self):
        # "fresh"는 indicator에도 있지만 permissive에서는 먼저 제외
        assert is_likely_restaurant_label("fresh") is True
        assert is_likely_restaurant_label("Fresh", permissive=True) is False
        assert is_likely_restaurant_label("Organic", permissive=True) is False

    def test_permissive_min_length(self):
        assert is_likely_restaurant_label("Abc", permissive=True) is False


class TestCategoryTokens:
    def test_stoplist_and_order(self):
        assert extract_category_tokens("Generic Cheese") == ["cheese"]
        assert extract_category_tokens("Cheddar Block") == ["cheddar", "block"]

    def test_split_and_dedup(self):
        tokens = extract_category_tokens("Chicken Breast (Skinless, Chicken-Style) with Rice")
        assert tokens == ["chicken", "breast", "skinless", "style", "rice"]

    def test_length_bounds(self):
        assert extract_category_tokens("ox pie supercalifragilisticexpi") == ["pie"]

    def test_empty(self):
        assert extract_category_tokens("") == []


def test_classifier_accepts_injected_tables():
    classifier = EntityClassifier(
        brand=BrandRules(stoplist=frozenset({"acme"})),
        restaurant=RestaurantRules(indicators=("noodle",)),
        category=CategoryRules(stoplist=frozenset({"soup"})),
    )
    assert classifier.is_valid_brand_label("Acme") is False
    assert classifier.is_likely_restaurant_label("Noodle Bar") is True
    assert classifier.is_likely_restaurant_label("Burger King") is False
    assert classifier.extract_category_tokens("Tomato Soup") == ["tomato"]


class TestNormalizeKey:
    def test_examples(self):
        assert normalize_key("Ben & Jerry's") == "ben_jerrys"
        assert normalize_key("ben_jerrys") == "ben_jerrys"
        assert normalize_key("McDonald's") == "mcdonalds"
        assert normalize_key("  Taco   Bell!! ") == "taco_bell"
        assert normalize_key("Häagen-Dazs") == "haagen_dazs"

    def test_deterministic_and_idempotent(self):
        for name in ["Kraft", "Pizza Hut", "A&W Restaurants", "7-Eleven"]:
            key = normalize_key(name)
            assert key == normalize_key(name)
            assert normalize_key(key) == key

    def test_case_and_punctuation_collapse(self):
        assert normalize_key("KRAFT") == normalize_key("kraft") == normalize_key("Kraft.")

    def test_empty(self):
        assert normalize_key("") == ""
        assert normalize_key("!!!") == ""

    def test_key_from_filename(self):
        assert key_from_filename("ben_jerrys.json") == "ben_jerrys"
        assert key_from_filename("Taco Bell.json") == "taco_bell"
