"""전역 테스트 설정

역할:
- 테스트 환경 구성
- 공통 Fake 주입 (네트워크 없이 원격 API 흉내)
- 테스트용 설정/저장소

금지:
- 실제 원격 호출
- 실제 자격 증명
"""

from __future__ import annotations

import json
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional
from urllib.parse import parse_qsl

import pytest


# 프로젝트 루트를 경로에 추가
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from food_catalog.core.config import Settings  # noqa: E402
from food_catalog.crawlers.fatsecret.client import ClientOptions, SignedRequestClient  # noqa: E402
from food_catalog.crawlers.fatsecret.search import PaginatedSearchClient  # noqa: E402
from food_catalog.engine.budget import BudgetConfig, RequestBudget  # noqa: E402
from food_catalog.repositories.catalog_store import CatalogStore  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def test_env() -> None:
    """테스트 환경 변수 설정 (세션 전역)"""
    os.environ["ENVIRONMENT"] = "test"
    os.environ["LOG_LEVEL"] = "INFO"


TEST_API_URL = "https://platform.example.test/rest/server.api"


def make_settings(**overrides: Any) -> Settings:
    """대기 시간 0, 작은 페이지의 테스트 설정"""
    values: dict[str, Any] = {
        "fatsecret_client_id": "test-key",
        "fatsecret_client_secret": "test-secret",
        "fatsecret_api_url": TEST_API_URL,
        "crawler_max_retries": 2,
        "crawler_retry_delay_s": 0,
        "crawler_min_request_interval_s": 0,
        "budget_max_requests": 200,
        "budget_safety_margin": 0,
        "search_page_size": 2,
        "discovery_max_pages_per_term": 5,
        "extraction_brand_max_pages": 10,
        "extraction_restaurant_max_pages": 10,
        "extraction_patience": 5,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@dataclass
class FakeTransport:
    """FormTransport Fake

    - (search_expression, page_number) 별로 응답 JSON을 스크립트
    - 스크립트에 없는 검색은 결과 없는 정상 envelope
    - failures에 있는 키는 전송 실패(None)
    - 모든 호출의 form 파라미터를 calls에 기록
    """

    pages: dict[tuple[str, int], Any] = field(default_factory=dict)
    failures: set[tuple[str, int]] = field(default_factory=set)
    brand_catalog: Any = None
    auth_ok: bool = True
    status: int = 200
    calls: list[dict[str, str]] = field(default_factory=list)

    async def post_form(self, url: str, body: str, *, timeout_s: float) -> Optional[tuple[int, str]]:
        _ = (url, timeout_s)
        params = dict(parse_qsl(body, keep_blank_values=True))
        self.calls.append(params)

        if params.get("method") == "food_brands.get.v2":
            return self.status, json.dumps(self.brand_catalog or {})

        expression = params.get("search_expression", "")
        # 카나리 검색 (page_number 없음)
        if "page_number" not in params:
            if not self.auth_ok:
                return 200, json.dumps({"error": {"code": 8, "message": "Invalid signature"}})
            return self.status, json.dumps({"foods_search": {"total_results": "1"}})

        page_number = int(params["page_number"])
        if (expression, page_number) in self.failures:
            return None
        body_json = self.pages.get(
            (expression, page_number),
            {"foods_search": {"total_results": "0", "page_number": str(page_number)}},
        )
        if isinstance(body_json, str):
            return self.status, body_json
        return self.status, json.dumps(body_json)

    def search_calls(self, expression: Optional[str] = None) -> list[dict[str, str]]:
        return [
            c for c in self.calls
            if "page_number" in c and (expression is None or c.get("search_expression") == expression)
        ]


@pytest.fixture
def settings_factory():
    return make_settings


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def transport_factory():
    return FakeTransport


def build_search(
    transport: FakeTransport,
    ceiling: int = 200,
    safety_margin: int = 0,
    page_size: int = 2,
    max_retries: int = 2,
) -> PaginatedSearchClient:
    budget = RequestBudget(BudgetConfig(ceiling=ceiling, safety_margin=safety_margin))
    options = ClientOptions(
        api_url=TEST_API_URL,
        consumer_key="test-key",
        consumer_secret="test-secret",
        timeout_s=1.0,
        max_retries=max_retries,
        retry_delay_s=0,
        min_interval_s=0,
    )
    client = SignedRequestClient(budget, options, transport=transport)
    return PaginatedSearchClient(client, page_size=page_size)


@pytest.fixture
def search_factory():
    return build_search


@pytest.fixture
def search_client(fake_transport: FakeTransport) -> PaginatedSearchClient:
    return build_search(fake_transport)


@pytest.fixture
def store(tmp_path: Path) -> CatalogStore:
    s = CatalogStore(tmp_path / "catalog")
    s.ensure_layout()
    return s
