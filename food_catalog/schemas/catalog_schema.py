"""Pydantic 스키마 정의 (검색 결과 / 카탈로그 레코드)"""
from enum import Enum
from typing import Any, Optional
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator


SOURCE_LABEL = "FatSecret Platform API (OAuth 1.0)"


class EntityKind(str, Enum):
    """카탈로그 엔티티 종류"""

    BRAND = "brand"
    RESTAURANT = "restaurant"
    CATEGORY = "category"

    @property
    def directory(self) -> str:
        """엔티티 파일이 저장되는 디렉토리명"""
        return {
            EntityKind.BRAND: "brands",
            EntityKind.RESTAURANT: "restaurants",
            EntityKind.CATEGORY: "categories",
        }[self]

    @property
    def name_field(self) -> str:
        """엔티티 파일에서 이름을 담는 필드명"""
        return {
            EntityKind.BRAND: "brand_name",
            EntityKind.RESTAURANT: "restaurant",
            EntityKind.CATEGORY: "category",
        }[self]

    @property
    def discovery_method(self) -> str:
        return f"Dynamic {self.value} discovery"


class RawResult(BaseModel):
    """foods.search.v3 결과 한 건 (원격 응답 그대로, 불변)"""

    model_config = ConfigDict(frozen=True, extra="ignore")

    food_id: str = Field(..., min_length=1, description="원격 food id (중복 제거 키)")
    food_name: str = Field("", description="표시 이름")
    food_description: str = Field("", description="영양 정보 요약 텍스트")
    food_url: str = Field("", description="원격 상세 URL")
    brand_name: str = Field("", description="브랜드/레스토랑 라벨 (없을 수 있음)")
    food_type: str = Field("", description="Generic | Brand")

    @field_validator("food_id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        if v is None:
            return v
        return str(v).strip()

    @field_validator("food_name", "food_description", "food_url", "brand_name", "food_type", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        if v is None:
            return ""
        return str(v).strip()

    def to_food_item(self, discovered_via: str) -> "FoodItem":
        return FoodItem(**self.model_dump(), discovered_via=discovered_via)


class FoodItem(RawResult):
    """카탈로그에 보관되는 음식 단위 (출처 포함)"""

    discovered_via: str = Field("", description="이 항목을 처음 발견한 시드어/엔티티")

    def to_record(self) -> dict[str, str]:
        """aggregate 파일용 레코드"""
        return self.model_dump()


def item_record(result: RawResult, fallback_brand: str = "") -> dict[str, str]:
    """엔티티 파일의 items[] 레코드 (필드 순서 고정)"""
    return {
        "food_id": result.food_id,
        "food_name": result.food_name,
        "food_description": result.food_description,
        "food_url": result.food_url,
        "brand_name": result.brand_name or fallback_brand,
        "food_type": result.food_type,
    }


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class Entity(BaseModel):
    """추출이 끝난 브랜드/레스토랑/카테고리"""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="정규 이름 (발견된 그대로)")
    kind: EntityKind
    key: str = Field(..., min_length=1, description="파일명으로 쓰이는 정규화 키")
    items: tuple[RawResult, ...] = Field(default_factory=tuple)
    pages_extracted: int = Field(0, ge=0)
    total_search_results: int = Field(0, ge=0)
    last_updated: str = Field(default_factory=utc_now_iso)
    complete: bool = Field(True, description="False면 중간 페이지에서 끊긴 결과 (다음 실행에서 재추출)")

    @property
    def discovery_method(self) -> str:
        return self.kind.discovery_method

    @property
    def total_items(self) -> int:
        return len(self.items)

    def to_record(self) -> dict[str, Any]:
        """디스크에 저장되는 엔티티 파일 포맷 (키 순서 고정)"""
        return {
            self.kind.name_field: self.name,
            "total_items": self.total_items,
            "pages_extracted": self.pages_extracted,
            "total_search_results": self.total_search_results,
            "discovery_method": self.discovery_method,
            "last_updated": self.last_updated,
            "source": SOURCE_LABEL,
            "complete": self.complete,
            "items": [item_record(item, fallback_brand=self._fallback_brand()) for item in self.items],
        }

    def _fallback_brand(self) -> str:
        # 카테고리는 원격 라벨을 그대로 둡니다
        if self.kind == EntityKind.CATEGORY:
            return ""
        return self.name


class DiscoveryLog(BaseModel):
    """실행 단위 요약 로그 (실행 종료 시 1회 기록)"""

    model_config = ConfigDict(frozen=True)

    timestamp: str = Field(default_factory=utc_now_iso)
    mode: str
    state: str
    brands_discovered: int = 0
    restaurants_discovered: int = 0
    categories_discovered: int = 0
    foods_discovered: int = 0
    new_entities: dict[str, int] = Field(default_factory=dict)
    successful_extractions: int = 0
    total_foods_extracted: int = 0
    inconclusive_extractions: list[str] = Field(default_factory=list)
    truncated_extractions: list[str] = Field(default_factory=list)
    api_requests_used: int = 0
    api_request_ceiling: int = 0
    budget_terminated: bool = False
    extraction_results: dict[str, dict[str, int]] = Field(default_factory=dict)
    error: Optional[str] = None
