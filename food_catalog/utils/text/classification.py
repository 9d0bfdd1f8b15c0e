"""Entity classification heuristics (brand / restaurant / category tokens).

원격 API는 "이 라벨이 레스토랑인가"에 대한 정답을 주지 않으므로,
여기 규칙들은 다수결 성격의 손실 있는 필터입니다.
규칙 어휘는 resources/classifier/*.yaml 에서 로드합니다.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional

from food_catalog.utils.resource_loader import (
    load_brand_rules,
    load_category_rules,
    load_restaurant_rules,
)


_CATEGORY_SPLIT = re.compile(r"[\s,\-_()]+")


@dataclass(frozen=True)
class BrandRules:
    stoplist: frozenset[str] = frozenset()
    min_length: int = 2
    max_length: int = 50


@dataclass(frozen=True)
class RestaurantRules:
    indicators: tuple[str, ...] = ()
    permissive_stoplist: frozenset[str] = frozenset()
    min_length: int = 3
    permissive_min_proper_length: int = 4


@dataclass(frozen=True)
class CategoryRules:
    stoplist: frozenset[str] = frozenset()
    min_length: int = 3
    max_length: int = 20


def _starts_like_proper_noun(name: str) -> bool:
    first = name[0]
    return first == first.upper()


@dataclass(frozen=True)
class EntityClassifier:
    """규칙 테이블을 묶은 순수 분류기"""

    brand: BrandRules = field(default_factory=BrandRules)
    restaurant: RestaurantRules = field(default_factory=RestaurantRules)
    category: CategoryRules = field(default_factory=CategoryRules)

    @classmethod
    def from_resources(cls) -> "EntityClassifier":
        b = load_brand_rules()
        r = load_restaurant_rules()
        c = load_category_rules()
        return cls(
            brand=BrandRules(
                stoplist=frozenset(b["stoplist"]),
                min_length=b["min_length"],
                max_length=b["max_length"],
            ),
            restaurant=RestaurantRules(
                indicators=r["indicators"],
                permissive_stoplist=frozenset(r["permissive_stoplist"]),
                min_length=r["min_length"],
                permissive_min_proper_length=r["permissive_min_proper_length"],
            ),
            category=CategoryRules(
                stoplist=frozenset(c["stoplist"]),
                min_length=c["min_length"],
                max_length=c["max_length"],
            ),
        )

    def is_valid_brand_label(self, name: str) -> bool:
        if not name:
            return False
        if name.lower() in self.brand.stoplist:
            return False
        if not (self.brand.min_length <= len(name) <= self.brand.max_length):
            return False
        # 소문자로 시작하면 고유명사로 보지 않음
        return _starts_like_proper_noun(name)

    def is_likely_restaurant_label(self, name: str, permissive: bool = False) -> bool:
        if not name or len(name) < self.restaurant.min_length:
            return False
        lowered = name.lower()

        if permissive and lowered in self.restaurant.permissive_stoplist:
            return False

        if any(indicator in lowered for indicator in self.restaurant.indicators):
            return True

        if permissive:
            return (
                len(name) >= self.restaurant.permissive_min_proper_length
                and self.is_valid_brand_label(name)
            )
        return False

    def extract_category_tokens(self, food_name: str) -> list[str]:
        """표시 이름에서 카테고리 토큰 추출 (첫 등장 순서, 중복 없음)"""
        if not food_name:
            return []
        tokens: list[str] = []
        for token in _CATEGORY_SPLIT.split(food_name.lower()):
            if not (self.category.min_length <= len(token) <= self.category.max_length):
                continue
            if token in self.category.stoplist or token in tokens:
                continue
            tokens.append(token)
        return tokens


_default: Optional[EntityClassifier] = None


def get_default_classifier() -> EntityClassifier:
    """resources 기반 기본 분류기 (지연 생성)"""
    global _default
    if _default is None:
        _default = EntityClassifier.from_resources()
    return _default


def is_valid_brand_label(name: str) -> bool:
    return get_default_classifier().is_valid_brand_label(name)


def is_likely_restaurant_label(name: str, permissive: bool = False) -> bool:
    return get_default_classifier().is_likely_restaurant_label(name, permissive=permissive)


def extract_category_tokens(food_name: str) -> list[str]:
    return get_default_classifier().extract_category_tokens(food_name)
