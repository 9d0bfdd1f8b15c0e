"""Crawler Result Standard Format

검색 페이지 한 장의 표준 결과 형식을 정의합니다.
"""

from dataclasses import dataclass, field
from enum import Enum

from food_catalog.schemas.catalog_schema import RawResult


class PageStatus(str, Enum):
    """검색 페이지 상태

    - OK: 결과 envelope를 정상 파싱
    - EMPTY: 결과 없음 또는 형태가 잘못된 응답 ("더 이상 페이지 없음")
    - INCONCLUSIVE: 재시도 후에도 응답을 받지 못함 (원격 도달 불가)
    """

    OK = "ok"
    EMPTY = "empty"
    INCONCLUSIVE = "inconclusive"


@dataclass
class SearchPage:
    """검색 결과 페이지

    Attributes:
        expression: 검색어
        page_number: 0부터 시작하는 페이지 번호
        page_size: 요청한 페이지 크기
        items: 페이지의 결과 목록
        total_results: 원격이 보고한 전체 결과 수
        status: 페이지 상태
    """

    expression: str
    page_number: int
    page_size: int
    items: list[RawResult] = field(default_factory=list)
    total_results: int = 0
    status: PageStatus = PageStatus.OK

    @property
    def ok(self) -> bool:
        return self.status == PageStatus.OK

    @property
    def is_full(self) -> bool:
        return len(self.items) == self.page_size

    @property
    def has_more(self) -> bool:
        """다음 페이지를 요청할 가치가 있는지"""
        if not self.ok:
            return False
        return (self.page_number + 1) * self.page_size < self.total_results and self.is_full

    @classmethod
    def empty(cls, expression: str, page_number: int, page_size: int) -> "SearchPage":
        return cls(expression, page_number, page_size, status=PageStatus.EMPTY)

    @classmethod
    def inconclusive(cls, expression: str, page_number: int, page_size: int) -> "SearchPage":
        return cls(expression, page_number, page_size, status=PageStatus.INCONCLUSIVE)
