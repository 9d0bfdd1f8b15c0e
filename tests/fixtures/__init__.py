"""테스트 자산(데이터) 레이어

규칙:
- 단순 dict/list 빌더 (엔진/네트워크 의존 없음)
"""

from .search_payloads import BRAND_CATALOG_SHAPES, CHEESE_PAGE, food, search_response

__all__ = [
    "BRAND_CATALOG_SHAPES",
    "CHEESE_PAGE",
    "food",
    "search_response",
]
