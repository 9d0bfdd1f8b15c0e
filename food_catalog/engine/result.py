"""Engine Results - 추출/실행 결과 표준 형식"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Optional

from food_catalog.schemas.catalog_schema import DiscoveryLog, Entity, EntityKind

if TYPE_CHECKING:
    from .discovery import DiscoveryResult


class ExtractionStatus(str, Enum):
    """엔티티 추출 상태"""

    EXTRACTED = "extracted"  # 1건 이상 추출
    NO_MATCHES = "no_matches"  # 정상 응답이었지만 매칭 0건
    PARTIAL = "partial"  # 일부 추출 후 응답 실패/예산 소진으로 중단 (저장하되 미완료 표시)
    INCONCLUSIVE = "inconclusive"  # 응답 실패로 중단 (다음 실행에서 재시도 대상)
    BUDGET_EXHAUSTED = "budget_exhausted"  # 예산 소진으로 중단


@dataclass
class ExtractionOutcome:
    """엔티티 하나의 추출 결과

    entity는 1건 이상 추출된 경우에만 존재합니다 (EXTRACTED, PARTIAL).
    """

    name: str
    kind: EntityKind
    key: str
    status: ExtractionStatus
    pages_extracted: int = 0
    total_search_results: int = 0
    entity: Optional[Entity] = None

    @property
    def item_count(self) -> int:
        return self.entity.total_items if self.entity else 0


class RunState(str, Enum):
    """실행 상태 머신"""

    AUTH_CHECK = "auth_check"
    LOAD_EXISTING = "load_existing"
    DISCOVER = "discover"
    EXTRACT_BRANDS = "extract_brands"
    EXTRACT_RESTAURANTS = "extract_restaurants"
    EXTRACT_CATEGORIES = "extract_categories"
    PERSIST = "persist"
    DONE = "done"
    ABORTED = "aborted"


@dataclass
class RunReport:
    """실행 전체 결과"""

    mode: str
    state: RunState
    outcomes: list[ExtractionOutcome] = field(default_factory=list)
    budget_terminated: bool = False
    discovery: Optional["DiscoveryResult"] = None
    log: Optional[DiscoveryLog] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.state == RunState.DONE

    def outcomes_for(self, kind: EntityKind) -> list[ExtractionOutcome]:
        return [o for o in self.outcomes if o.kind == kind]

    @property
    def total_foods_extracted(self) -> int:
        return sum(o.item_count for o in self.outcomes)
