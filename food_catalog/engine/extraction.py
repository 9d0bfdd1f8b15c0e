"""Extraction Engine - 엔티티 하나의 전체 항목 수집

엔티티 이름으로 검색해 페이지를 넘기면서 해당 엔티티에 속하는 항목만 모읍니다.

종료 조건 (먼저 만족하는 것):
- has_more가 False이거나 페이지가 OK가 아님
- max_pages 도달
- 요청 예산 소진 (요청 전마다 확인)
- 브랜드/레스토랑: 연속 patience 페이지 매칭 0건 (조기 종료)
- 카테고리: 첫 페이지만

항목을 모은 뒤 응답 실패/예산 소진으로 끊기면 PARTIAL이며, 엔티티는 complete=False로 저장됩니다.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from food_catalog.core.config import Settings
from food_catalog.core.logging import logger
from food_catalog.crawlers.fatsecret.search import PaginatedSearchClient
from food_catalog.crawlers.result import PageStatus
from food_catalog.schemas.catalog_schema import Entity, EntityKind, RawResult
from food_catalog.utils.text.normalization import normalize_key

from .result import ExtractionOutcome, ExtractionStatus


def matches_brand(name: str, item: RawResult) -> bool:
    """라벨이 이름과 같거나, 이름을 포함하면서 길이 차이가 5 이하"""
    target = name.lower()
    label = item.brand_name.lower()
    if label == target:
        return True
    return target in label and abs(len(label) - len(target)) <= 5


def matches_restaurant(name: str, item: RawResult) -> bool:
    """라벨 일치/상호 포함, 또는 표시 이름에 이름 포함"""
    target = name.lower()
    label = item.brand_name.lower()
    if label == target:
        return True
    if label and (target in label or label in target):
        return True
    return target in item.food_name.lower()


def matches_category(name: str, item: RawResult) -> bool:
    return True


MATCHERS: dict[EntityKind, Callable[[str, RawResult], bool]] = {
    EntityKind.BRAND: matches_brand,
    EntityKind.RESTAURANT: matches_restaurant,
    EntityKind.CATEGORY: matches_category,
}


@dataclass(frozen=True)
class ExtractionPolicy:
    """추출 정책 (페이지 상한 / 조기 종료)

    조기 종료와 매칭 필터는 실제 데이터를 적게 셀 수 있으므로 설정으로 노출합니다.
    """

    brand_max_pages: int = 30
    restaurant_max_pages: int = 50
    category_max_pages: int = 1
    patience: int = 5

    def __post_init__(self):
        for name in ("brand_max_pages", "restaurant_max_pages", "category_max_pages", "patience"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive (got {getattr(self, name)})")

    @classmethod
    def from_settings(cls, s: Settings) -> "ExtractionPolicy":
        return cls(
            brand_max_pages=s.extraction_brand_max_pages,
            restaurant_max_pages=s.extraction_restaurant_max_pages,
            patience=s.extraction_patience,
        )

    def max_pages_for(self, kind: EntityKind) -> int:
        return {
            EntityKind.BRAND: self.brand_max_pages,
            EntityKind.RESTAURANT: self.restaurant_max_pages,
            EntityKind.CATEGORY: self.category_max_pages,
        }[kind]


class ExtractionEngine:
    """엔티티 단위 추출기"""

    def __init__(self, search: PaginatedSearchClient, policy: Optional[ExtractionPolicy] = None):
        self.search = search
        self.policy = policy or ExtractionPolicy()

    @property
    def budget(self):
        return self.search.budget

    async def extract(
        self,
        name: str,
        kind: EntityKind,
        max_pages: Optional[int] = None,
    ) -> ExtractionOutcome:
        """엔티티 하나를 추출

        Args:
            name: 엔티티 이름 (검색어로도 사용)
            kind: 엔티티 종류
            max_pages: 페이지 상한 (기본: 정책값, 카테고리는 항상 1)

        Returns:
            ExtractionOutcome: 항목이 있으면 entity 포함
        """
        key = normalize_key(name)
        if not key:
            logger.warning(f"[EXTRACTION] Skipping '{name}': empty normalized key")
            return ExtractionOutcome(name=name, kind=kind, key=key, status=ExtractionStatus.NO_MATCHES)

        if kind == EntityKind.CATEGORY:
            max_pages = self.policy.category_max_pages
        elif max_pages is None:
            max_pages = self.policy.max_pages_for(kind)

        matcher = MATCHERS[kind]
        items: dict[str, RawResult] = {}
        pages_extracted = 0
        total_search_results = 0
        zero_streak = 0
        budget_hit = False
        inconclusive = False

        for page_number in range(max_pages):
            if self.budget.exhausted:
                budget_hit = True
                break

            page = await self.search.search_page(name, page_number)
            if page.status == PageStatus.INCONCLUSIVE:
                inconclusive = True
                break
            if page.status == PageStatus.EMPTY:
                break

            pages_extracted += 1
            if page_number == 0:
                total_search_results = page.total_results

            matched = 0
            for item in page.items:
                if not matcher(name, item):
                    continue
                matched += 1
                items.setdefault(item.food_id, item)

            if matched:
                zero_streak = 0
            else:
                zero_streak += 1
                if zero_streak >= self.policy.patience:
                    logger.debug(
                        f"[EXTRACTION] Early stop for '{name}' at page {page_number} "
                        f"({zero_streak} pages without matches)"
                    )
                    break

            if not page.has_more:
                break

        truncated = inconclusive or budget_hit
        outcome = ExtractionOutcome(
            name=name,
            kind=kind,
            key=key,
            status=self._status(bool(items), budget_hit, inconclusive),
            pages_extracted=pages_extracted,
            total_search_results=total_search_results,
        )
        if items:
            outcome.entity = Entity(
                name=name,
                kind=kind,
                key=key,
                items=tuple(items.values()),
                pages_extracted=pages_extracted,
                total_search_results=total_search_results,
                complete=not truncated,
            )
            if truncated:
                reason = "a failed page" if inconclusive else "the request budget"
                logger.warning(f"[EXTRACTION] '{name}' truncated by {reason} after {pages_extracted} pages")

        logger.info(
            f"[EXTRACTION] {kind.value} '{name}': {outcome.status.value}, "
            f"items={outcome.item_count}, pages={pages_extracted}"
        )
        return outcome

    @staticmethod
    def _status(has_items: bool, budget_hit: bool, inconclusive: bool) -> ExtractionStatus:
        if has_items:
            if budget_hit or inconclusive:
                return ExtractionStatus.PARTIAL
            return ExtractionStatus.EXTRACTED
        if budget_hit:
            return ExtractionStatus.BUDGET_EXHAUSTED
        if inconclusive:
            return ExtractionStatus.INCONCLUSIVE
        return ExtractionStatus.NO_MATCHES
