"""Paginated Search Client - foods.search.v3 페이지네이션 규약

- 페이지 크기 고정 (max_results)
- page_number는 0부터
- 형태가 잘못된 응답은 "더 이상 페이지 없음"으로 취급 (예외 없음)
"""

from __future__ import annotations

from food_catalog.core.logging import logger
from food_catalog.crawlers.result import SearchPage

from .client import SignedRequestClient
from .parsing import BrandCatalog, decode_brand_catalog, parse_search_envelope

SEARCH_METHOD = "foods.search.v3"
BRAND_CATALOG_METHOD = "food_brands.get.v2"
CANARY_EXPRESSION = "apple"


class PaginatedSearchClient:
    """검색 전용 페이지네이션 클라이언트"""

    def __init__(self, client: SignedRequestClient, page_size: int = 50) -> None:
        if page_size <= 0:
            raise ValueError(f"page_size must be positive (got {page_size})")
        self.client = client
        self.page_size = page_size

    @property
    def budget(self):
        return self.client.budget

    async def search_page(self, expression: str, page_number: int) -> SearchPage:
        """검색 결과 한 페이지

        Returns:
            SearchPage: 실패/잘못된 응답도 예외 없이 상태로 표현
        """
        data = await self.client.send(
            SEARCH_METHOD,
            {
                "search_expression": expression,
                "max_results": str(self.page_size),
                "page_number": str(page_number),
            },
        )
        if data is None:
            logger.info(f"[SEARCH] No data: expression='{expression}', page={page_number}")
            return SearchPage.inconclusive(expression, page_number, self.page_size)

        parsed = parse_search_envelope(data)
        if parsed is None:
            return SearchPage.empty(expression, page_number, self.page_size)

        items, total = parsed
        return SearchPage(
            expression=expression,
            page_number=page_number,
            page_size=self.page_size,
            items=items,
            total_results=total,
        )

    async def probe(self) -> bool:
        """인증 확인용 카나리 검색 (foods_search envelope 존재 여부)"""
        data = await self.client.send(
            SEARCH_METHOD,
            {"search_expression": CANARY_EXPRESSION, "max_results": "1"},
        )
        return bool(data) and bool(data.get("foods_search"))

    async def fetch_brand_catalog(self) -> BrandCatalog:
        data = await self.client.send(BRAND_CATALOG_METHOD, {})
        catalog = decode_brand_catalog(data)
        logger.info(f"[SEARCH] Brand catalog: shape={catalog.shape}, brands={len(catalog.names)}")
        return catalog
