"""Run Orchestrator - 실행 전체 상태 머신

AUTH_CHECK → LOAD_EXISTING → DISCOVER → EXTRACT_* → PERSIST → DONE
(인증 실패 시 AUTH_CHECK → ABORTED, 아무것도 저장하지 않음)

1. 카나리 검색으로 인증 확인
2. 이전 실행 결과(키/food_id) 로드
3. 시드어 기반 발견
4. 종류별 추출 (이미 저장된 키는 건너뜀)
5. 집계/로그/manifest 저장
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from food_catalog.core.config import Settings, settings as default_settings
from food_catalog.core.exceptions import AuthenticationException
from food_catalog.core.logging import logger
from food_catalog.crawlers.fatsecret.client import ClientOptions, SignedRequestClient
from food_catalog.crawlers.fatsecret.search import PaginatedSearchClient
from food_catalog.crawlers.http_client import FormTransport
from food_catalog.repositories.catalog_store import CatalogStore, ExistingCatalog
from food_catalog.schemas.catalog_schema import DiscoveryLog, EntityKind
from food_catalog.utils.resource_loader import load_seed_terms
from food_catalog.utils.text.classification import EntityClassifier, get_default_classifier
from food_catalog.utils.text.normalization import normalize_key

from .budget import BudgetConfig, RequestBudget
from .discovery import DiscoveryEngine, DiscoveryResult
from .extraction import ExtractionEngine, ExtractionPolicy
from .result import ExtractionOutcome, ExtractionStatus, RunReport, RunState


@dataclass(frozen=True)
class RunMode:
    """실행 모드 (수집 대상 종류 / 시드 목록 / 로그 파일명)"""

    name: str
    kinds: tuple[EntityKind, ...]
    log_name: str
    permissive_restaurants: bool = False

    @property
    def seed_list(self) -> str:
        return self.name


RUN_MODES: dict[str, RunMode] = {
    "comprehensive": RunMode(
        name="comprehensive",
        kinds=(EntityKind.BRAND, EntityKind.RESTAURANT, EntityKind.CATEGORY),
        log_name="discovery-log.json",
    ),
    "brands": RunMode(
        name="brands",
        kinds=(EntityKind.BRAND,),
        log_name="brand-discovery-log.json",
    ),
    "restaurants": RunMode(
        name="restaurants",
        kinds=(EntityKind.RESTAURANT,),
        log_name="restaurant-discovery-log.json",
        permissive_restaurants=True,
    ),
}

PHASE_STATES: dict[EntityKind, RunState] = {
    EntityKind.BRAND: RunState.EXTRACT_BRANDS,
    EntityKind.RESTAURANT: RunState.EXTRACT_RESTAURANTS,
    EntityKind.CATEGORY: RunState.EXTRACT_CATEGORIES,
}


def get_run_mode(name: str) -> RunMode:
    try:
        return RUN_MODES[name]
    except KeyError:
        raise ValueError(f"Unknown run mode: {name} (expected one of {sorted(RUN_MODES)})")


class RunOrchestrator:
    """발견/추출/저장 실행기

    요청 예산은 오케스트레이터가 소유하며 검색 클라이언트를 통해 모든 요청에 적용됩니다.
    """

    def __init__(
        self,
        search: PaginatedSearchClient,
        store: CatalogStore,
        settings: Optional[Settings] = None,
        classifier: Optional[EntityClassifier] = None,
        mode: str = "comprehensive",
        seed_terms: Optional[Sequence[str]] = None,
    ):
        """
        Args:
            search: 페이지네이션 검색 클라이언트 (예산 포함)
            store: 카탈로그 저장소
            settings: 설정 (기본: 전역 settings)
            classifier: 엔티티 분류기 (기본: resources 기반)
            mode: 실행 모드 이름
            seed_terms: 시드어 (기본: 모드별 resources 목록)
        """
        if search is None:
            raise ValueError("search must not be None")
        if store is None:
            raise ValueError("store must not be None")

        self.settings = settings or default_settings
        self.search = search
        self.store = store
        self.mode = get_run_mode(mode)
        self.seed_terms = list(seed_terms) if seed_terms is not None else load_seed_terms(self.mode.seed_list)

        classifier = classifier or get_default_classifier()
        self.discovery = DiscoveryEngine(
            search,
            classifier=classifier,
            max_pages_per_term=self.settings.discovery_max_pages_per_term,
            kinds=self.mode.kinds,
            permissive_restaurants=self.mode.permissive_restaurants,
        )
        self.extraction = ExtractionEngine(search, ExtractionPolicy.from_settings(self.settings))
        self.state = RunState.AUTH_CHECK

    @classmethod
    def from_settings(
        cls,
        s: Optional[Settings] = None,
        mode: str = "comprehensive",
        transport: Optional[FormTransport] = None,
        output_dir: Optional[str] = None,
        seed_terms: Optional[Sequence[str]] = None,
    ) -> "RunOrchestrator":
        """설정으로 예산/클라이언트/저장소를 조립"""
        s = s or default_settings
        budget = RequestBudget(
            BudgetConfig(ceiling=s.budget_max_requests, safety_margin=s.budget_safety_margin)
        )
        client = SignedRequestClient(budget, ClientOptions.from_settings(s), transport=transport)
        search = PaginatedSearchClient(client, page_size=s.search_page_size)
        store = CatalogStore(output_dir or s.output_dir)
        return cls(search, store, settings=s, mode=mode, seed_terms=seed_terms)

    @property
    def budget(self) -> RequestBudget:
        return self.search.budget

    def _enter(self, state: RunState) -> None:
        logger.debug(f"[RUN] {self.state.value} -> {state.value}")
        self.state = state

    def _limit_for(self, kind: EntityKind) -> int:
        return {
            EntityKind.BRAND: self.settings.max_brands,
            EntityKind.RESTAURANT: self.settings.max_restaurants,
            EntityKind.CATEGORY: self.settings.max_categories,
        }[kind]

    async def run(self) -> RunReport:
        """실행 전체

        Returns:
            RunReport: 최종 상태(DONE/ABORTED)와 추출 결과
        """
        report = RunReport(mode=self.mode.name, state=self.state)
        logger.info(
            f"[RUN] Start: mode={self.mode.name}, seeds={len(self.seed_terms)}, "
            f"ceiling={self.budget.ceiling}"
        )

        # 1. 인증 확인
        self._enter(RunState.AUTH_CHECK)
        try:
            await self._check_auth()
        except AuthenticationException as e:
            logger.error(f"[RUN] Aborted: {e}")
            self._enter(RunState.ABORTED)
            report.state = self.state
            report.error = str(e)
            return report

        # 2. 기존 결과 로드
        self._enter(RunState.LOAD_EXISTING)
        self.store.ensure_layout()
        existing = self.store.load_existing()

        # 3. 발견
        self._enter(RunState.DISCOVER)
        discovered = await self._discover()
        report.discovery = discovered

        # 4. 추출 (순차)
        handled: set[tuple[EntityKind, str]] = set()
        for kind in self.mode.kinds:
            if self.budget.exhausted:
                report.budget_terminated = True
                break
            self._enter(PHASE_STATES[kind])
            terminated = await self._extract_phase(kind, discovered, existing, handled, report)
            if terminated:
                report.budget_terminated = True
                break

        if report.budget_terminated or discovered.budget_halted:
            report.budget_terminated = True
            logger.warning(
                f"[RUN] Request budget reached ({self.budget.issued}/{self.budget.ceiling}); "
                f"persisting partial results"
            )

        # 5. 저장
        self._enter(RunState.PERSIST)
        report.log = self._persist(discovered, existing, report)

        self._enter(RunState.DONE)
        report.state = self.state
        logger.info(
            f"[RUN] Done: extracted={len(self._extracted(report.outcomes))}, "
            f"foods={report.total_foods_extracted}, requests={self.budget.issued}/{self.budget.ceiling}"
        )
        return report

    async def _check_auth(self) -> None:
        if not await self.search.probe():
            raise AuthenticationException("canary search returned no results envelope")
        logger.info("[RUN] Authentication OK")

    async def _discover(self) -> DiscoveryResult:
        result = DiscoveryResult()
        if self.settings.use_brand_catalog and EntityKind.BRAND in self.mode.kinds:
            catalog = await self.search.fetch_brand_catalog()
            if catalog.recognized:
                self.discovery.seed_brands(catalog.names, result)
            else:
                logger.warning(f"[RUN] Brand catalog not usable: shape={catalog.shape}")
        return await self.discovery.discover(self.seed_terms, result)

    def _candidates(
        self,
        kind: EntityKind,
        discovered: DiscoveryResult,
        existing: ExistingCatalog,
        handled: set[tuple[EntityKind, str]],
    ) -> list[str]:
        """기존/이번 실행 처리 키를 제외한 상위 N개 이름"""
        limit = self._limit_for(kind)
        picked: list[str] = []
        seen: set[str] = set()
        for name in discovered.top(kind):
            if len(picked) >= limit:
                break
            key = normalize_key(name)
            if not key or key in seen or existing.has(kind, key) or (kind, key) in handled:
                continue
            seen.add(key)
            picked.append(name)
        return picked

    async def _extract_phase(
        self,
        kind: EntityKind,
        discovered: DiscoveryResult,
        existing: ExistingCatalog,
        handled: set[tuple[EntityKind, str]],
        report: RunReport,
    ) -> bool:
        """종류 하나의 추출 단계

        Returns:
            bool: 예산 소진으로 단계가 끊겼으면 True
        """
        candidates = self._candidates(kind, discovered, existing, handled)
        logger.info(f"[RUN] Extracting {len(candidates)} new {kind.directory}")

        for index, name in enumerate(candidates, start=1):
            if self.budget.exhausted:
                return True

            outcome = await self.extraction.extract(name, kind)
            report.outcomes.append(outcome)
            handled.add((kind, outcome.key))

            if outcome.entity is not None:
                self.store.save(outcome.entity)

            if outcome.status == ExtractionStatus.BUDGET_EXHAUSTED:
                return True

            if index % 10 == 0:
                logger.info(
                    f"[RUN] {kind.directory}: {index}/{len(candidates)} processed, "
                    f"requests={self.budget.issued}/{self.budget.ceiling}"
                )
        return False

    @staticmethod
    def _extracted(outcomes: list[ExtractionOutcome]) -> list[ExtractionOutcome]:
        return [o for o in outcomes if o.status in (ExtractionStatus.EXTRACTED, ExtractionStatus.PARTIAL)]

    def _persist(
        self,
        discovered: DiscoveryResult,
        existing: ExistingCatalog,
        report: RunReport,
    ) -> DiscoveryLog:
        extraction_results = {
            kind.directory: {o.name: o.item_count for o in report.outcomes_for(kind)}
            for kind in self.mode.kinds
        }
        new_foods = sum(1 for food_id in discovered.all_foods if food_id not in existing.food_ids)

        self.store.save_aggregate(
            discovered.all_foods.values(),
            new_foods=new_foods,
            discovered={kind.directory: list(discovered.names(kind)) for kind in self.mode.kinds},
            api_requests_used=self.budget.issued,
            extraction_results=extraction_results,
        )

        extracted = self._extracted(report.outcomes)
        log = DiscoveryLog(
            mode=self.mode.name,
            state=RunState.DONE.value,
            brands_discovered=len(discovered.brands),
            restaurants_discovered=len(discovered.restaurants),
            categories_discovered=len(discovered.categories),
            foods_discovered=len(discovered.all_foods),
            new_entities={
                kind.directory: sum(1 for o in extracted if o.kind == kind) for kind in self.mode.kinds
            },
            successful_extractions=len(extracted),
            total_foods_extracted=report.total_foods_extracted,
            inconclusive_extractions=[
                f"{o.kind.value}:{o.name}" for o in report.outcomes if o.status == ExtractionStatus.INCONCLUSIVE
            ],
            truncated_extractions=[
                f"{o.kind.value}:{o.name}" for o in report.outcomes if o.status == ExtractionStatus.PARTIAL
            ],
            api_requests_used=self.budget.issued,
            api_request_ceiling=self.budget.ceiling,
            budget_terminated=report.budget_terminated,
            extraction_results=extraction_results,
        )
        self.store.write_log(log, self.mode.log_name)
        self.store.write_manifest()
        return log
