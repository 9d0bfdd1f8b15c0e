"""Discovery Engine - 시드어 기반 breadth-first 엔티티 발견

각 시드어를 페이지 단위로 훑으면서:
1. 결과를 food_id 기준으로 all_foods에 모음 (첫 등장 유지)
2. 연관 라벨(brand_name)을 브랜드/레스토랑 판별기로 분류
3. 표시 이름에서 카테고리 토큰 추출

예산이 소진되면 남은 시드어와 관계없이 발견 단계 전체를 멈춥니다.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Optional

from food_catalog.core.logging import logger
from food_catalog.crawlers.fatsecret.search import PaginatedSearchClient
from food_catalog.crawlers.result import PageStatus
from food_catalog.schemas.catalog_schema import EntityKind, FoodItem, RawResult
from food_catalog.utils.text.classification import EntityClassifier, get_default_classifier


@dataclass
class DiscoveryResult:
    """발견 단계 결과

    이름 컬렉션은 Counter로 히트 수를 보관합니다 (첫 등장 순서 유지).
    """

    brands: Counter = field(default_factory=Counter)
    restaurants: Counter = field(default_factory=Counter)
    categories: Counter = field(default_factory=Counter)
    all_foods: dict[str, FoodItem] = field(default_factory=dict)
    pages_walked: int = 0
    inconclusive_pages: int = 0
    budget_halted: bool = False

    def names(self, kind: EntityKind) -> Counter:
        return {
            EntityKind.BRAND: self.brands,
            EntityKind.RESTAURANT: self.restaurants,
            EntityKind.CATEGORY: self.categories,
        }[kind]

    def top(self, kind: EntityKind, n: Optional[int] = None) -> list[str]:
        """히트 수 내림차순 상위 n개 (동률은 첫 등장 순서)"""
        if n is not None and n <= 0:
            return []
        return [name for name, _ in self.names(kind).most_common(n)]

    def add_food(self, item: RawResult, discovered_via: str) -> bool:
        """새 food_id면 추가하고 True"""
        if item.food_id in self.all_foods:
            return False
        self.all_foods[item.food_id] = item.to_food_item(discovered_via)
        return True


class DiscoveryEngine:
    """시드어 목록으로 후보 엔티티를 발견"""

    def __init__(
        self,
        search: PaginatedSearchClient,
        classifier: Optional[EntityClassifier] = None,
        max_pages_per_term: int = 30,
        kinds: Iterable[EntityKind] = tuple(EntityKind),
        permissive_restaurants: bool = False,
    ):
        """
        Args:
            search: 페이지네이션 검색 클라이언트
            classifier: 엔티티 분류기 (기본: resources 기반)
            max_pages_per_term: 시드어 하나당 최대 페이지 수
            kinds: 수집할 엔티티 종류
            permissive_restaurants: 레스토랑 전용 실행의 완화된 판별 사용
        """
        if max_pages_per_term <= 0:
            raise ValueError(f"max_pages_per_term must be positive (got {max_pages_per_term})")
        self.search = search
        self.classifier = classifier or get_default_classifier()
        self.max_pages_per_term = max_pages_per_term
        self.kinds = frozenset(kinds)
        self.permissive_restaurants = permissive_restaurants

    @property
    def budget(self):
        return self.search.budget

    async def discover(
        self,
        seed_terms: Iterable[str],
        result: Optional[DiscoveryResult] = None,
    ) -> DiscoveryResult:
        """시드어를 순서대로 훑어 DiscoveryResult 반환

        Args:
            seed_terms: 시드어 목록
            result: 이어서 채울 기존 결과 (브랜드 카탈로그 시딩 후 등)
        """
        result = result or DiscoveryResult()

        for term in seed_terms:
            if self.budget.exhausted:
                result.budget_halted = True
                break
            await self._walk_term(term, result)
            if result.budget_halted:
                break

        if result.budget_halted:
            logger.warning(
                f"[DISCOVERY] Halted by request budget: issued={self.budget.issued}/{self.budget.ceiling}"
            )

        logger.info(
            f"[DISCOVERY] Done: foods={len(result.all_foods)}, brands={len(result.brands)}, "
            f"restaurants={len(result.restaurants)}, categories={len(result.categories)}, "
            f"pages={result.pages_walked}"
        )
        return result

    async def _walk_term(self, term: str, result: DiscoveryResult) -> None:
        new_foods = 0
        for page_number in range(self.max_pages_per_term):
            if self.budget.exhausted:
                result.budget_halted = True
                break

            page = await self.search.search_page(term, page_number)
            result.pages_walked += 1
            if page.status == PageStatus.INCONCLUSIVE:
                result.inconclusive_pages += 1

            for item in page.items:
                if result.add_food(item, term):
                    new_foods += 1
                self._classify(item, result)

            if not page.has_more:
                break

        logger.info(f"[DISCOVERY] '{term}': +{new_foods} foods (total {len(result.all_foods)})")

    def _classify(self, item: RawResult, result: DiscoveryResult) -> None:
        label = item.brand_name
        if label:
            if EntityKind.BRAND in self.kinds and self.classifier.is_valid_brand_label(label):
                result.brands[label] += 1
            if EntityKind.RESTAURANT in self.kinds and self.classifier.is_likely_restaurant_label(
                label, permissive=self.permissive_restaurants
            ):
                result.restaurants[label] += 1

        if EntityKind.CATEGORY in self.kinds:
            for token in self.classifier.extract_category_tokens(item.food_name):
                result.categories[token] += 1

    def seed_brands(self, names: Iterable[str], result: Optional[DiscoveryResult] = None) -> DiscoveryResult:
        """브랜드 카탈로그 이름을 브랜드 판별기를 거쳐 결과에 추가"""
        result = result or DiscoveryResult()
        added = 0
        for name in names:
            if self.classifier.is_valid_brand_label(name) and name not in result.brands:
                result.brands[name] += 1
                added += 1
        logger.info(f"[DISCOVERY] Seeded {added} brands from brand catalog")
        return result
