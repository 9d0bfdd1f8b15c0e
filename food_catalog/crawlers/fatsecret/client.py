"""Signed Request Client - OAuth 1.0 서명 + 예산 + 재시도 + 속도 제한

send()는 절대 예외를 올리지 않습니다:
- 전송 실패/타임아웃: 최대 max_retries회 재시도 후 None
- JSON이 아닌 응답: None (재시도하지 않음)
- 예산 ceiling 도달: 전송하지 않고 None
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from food_catalog.core.config import Settings, settings as default_settings
from food_catalog.core.exceptions import BudgetExhaustedException
from food_catalog.core.logging import logger, sanitize_for_log
from food_catalog.crawlers.http_client import FormTransport, get_shared_http_client
from food_catalog.engine.budget import RequestBudget

from .signing import encode_form, sign_request_params


@dataclass(frozen=True)
class ClientOptions:
    """서명 클라이언트 동작 설정"""

    api_url: str
    consumer_key: str
    consumer_secret: str
    timeout_s: float = 30.0
    max_retries: int = 2
    retry_delay_s: float = 3.0
    min_interval_s: float = 1.0

    @classmethod
    def from_settings(cls, s: Optional[Settings] = None) -> "ClientOptions":
        s = s or default_settings
        return cls(
            api_url=s.fatsecret_api_url,
            consumer_key=s.fatsecret_client_id,
            consumer_secret=s.fatsecret_client_secret,
            timeout_s=s.crawler_request_timeout_s,
            max_retries=s.crawler_max_retries,
            retry_delay_s=s.crawler_retry_delay_s,
            min_interval_s=s.crawler_min_request_interval_s,
        )


class MinIntervalGate:
    """성공한 두 요청 사이 최소 간격을 강제하는 협조적 게이트 (blocking wait)"""

    def __init__(self, min_interval_s: float) -> None:
        self.min_interval_s = max(0.0, min_interval_s)
        self._last_success: Optional[float] = None

    async def wait(self) -> None:
        if self._last_success is None or self.min_interval_s <= 0:
            return
        loop = asyncio.get_running_loop()
        remaining = self._last_success + self.min_interval_s - loop.time()
        if remaining > 0:
            await asyncio.sleep(remaining)

    def mark_success(self) -> None:
        self._last_success = asyncio.get_running_loop().time()


class SignedRequestClient:
    """FatSecret REST API 서명 요청 클라이언트"""

    def __init__(
        self,
        budget: RequestBudget,
        options: Optional[ClientOptions] = None,
        transport: Optional[FormTransport] = None,
    ) -> None:
        self.budget = budget
        self.options = options or ClientOptions.from_settings()
        self.transport = transport or get_shared_http_client()
        self.gate = MinIntervalGate(self.options.min_interval_s)

    async def send(self, method: str, params: Mapping[str, Any]) -> Optional[dict]:
        """원격 프로시저 호출

        Args:
            method: 원격 프로시저명 (예: "foods.search.v3")
            params: 프로시저 파라미터 (문자열 값)

        Returns:
            Optional[dict]: 파싱된 JSON. 실패 시 None ("no data")
        """
        attempts = max(1, self.options.max_retries)

        for attempt in range(1, attempts + 1):
            try:
                self.budget.consume()
            except BudgetExhaustedException as e:
                logger.warning(f"[SIGNED_CLIENT] {e} - request not sent: method={method}")
                return None

            await self.gate.wait()

            signed = sign_request_params(
                method,
                params,
                url=self.options.api_url,
                consumer_key=self.options.consumer_key,
                consumer_secret=self.options.consumer_secret,
            )
            logger.debug(
                f"[SIGNED_CLIENT] POST method={method} attempt={attempt}/{attempts} "
                f"params={sanitize_for_log(signed)} issued={self.budget.issued}"
            )

            res = await self.transport.post_form(
                self.options.api_url,
                encode_form(signed),
                timeout_s=self.options.timeout_s,
            )

            if res is not None:
                status, text = res
                if status == 200:
                    self.gate.mark_success()
                    return self._decode(method, text)
                logger.info(f"[SIGNED_CLIENT] Non-200 status: {status} (method={method})")

            logger.warning(f"[SIGNED_CLIENT] Request failed (attempt {attempt}/{attempts}): method={method}")
            if attempt < attempts and self.options.retry_delay_s > 0:
                await asyncio.sleep(self.options.retry_delay_s)

        logger.error(f"[SIGNED_CLIENT] Giving up after {attempts} attempts: method={method}")
        return None

    @staticmethod
    def _decode(method: str, text: str) -> Optional[dict]:
        try:
            data = json.loads(text)
        except (TypeError, ValueError) as e:
            logger.warning(f"[SIGNED_CLIENT] Non-JSON response for method={method}: {e}")
            return None
        if not isinstance(data, dict):
            logger.warning(f"[SIGNED_CLIENT] Unexpected JSON type for method={method}: {type(data).__name__}")
            return None
        return data
