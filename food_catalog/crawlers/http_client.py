"""공유 HTTP 클라이언트 (curl_cffi)

- 요청마다 AsyncSession을 만들면 TLS/커넥션 오버헤드가 커지므로
  프로세스 단위로 세션을 재사용합니다.
- 실행 종료 시 close()로 정리합니다.
"""

from __future__ import annotations

import asyncio
from typing import Optional, Dict, Protocol

from curl_cffi.requests import AsyncSession

from food_catalog.core.config import settings
from food_catalog.core.logging import logger


class FormTransport(Protocol):
    """서명 클라이언트가 사용하는 전송 계층 인터페이스

    전송 실패(네트워크 오류/타임아웃) 시 None, 성공 시 (status, body)를 반환합니다.
    """

    async def post_form(
        self,
        url: str,
        body: str,
        *,
        timeout_s: float,
    ) -> Optional[tuple[int, str]]:
        ...


class SharedHttpClient:
    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._session: Optional[AsyncSession] = None

    async def _ensure_session(self) -> AsyncSession:
        async with self._lock:
            if self._session is not None:
                return self._session
            self._session = AsyncSession(
                impersonate=settings.crawler_http_impersonate,
                headers=self.default_headers(),
                allow_redirects=True,
                trust_env=False,
            )
            return self._session

    def default_headers(self) -> Dict[str, str]:
        return {
            "User-Agent": settings.crawler_user_agent,
            "Accept": "application/json",
            "Content-Type": "application/x-www-form-urlencoded",
        }

    async def post_form(
        self,
        url: str,
        body: str,
        *,
        timeout_s: float,
    ) -> Optional[tuple[int, str]]:
        """form-encoded POST. 네트워크 오류/타임아웃은 None으로 반환합니다."""
        sess = await self._ensure_session()
        try:
            resp = await asyncio.wait_for(
                sess.post(url, data=body, timeout=timeout_s),
                timeout=timeout_s + 1.0,
            )
            status = getattr(resp, "status_code", 0) or 0
            text = getattr(resp, "text", "") or ""
            return status, text
        except asyncio.TimeoutError:
            logger.info(f"[HTTP_CLIENT] POST timed out after {timeout_s:.1f}s")
            return None
        except Exception as e:
            logger.info(f"[HTTP_CLIENT] POST failed: {type(e).__name__}: {repr(e)}")
            return None

    async def close(self) -> None:
        async with self._lock:
            if self._session is None:
                return
            try:
                await self._session.close()
            except Exception as e:
                logger.debug(f"[HTTP_CLIENT] session close failed: {type(e).__name__}: {e}")
            self._session = None


_shared_http_client = SharedHttpClient()


def get_shared_http_client() -> SharedHttpClient:
    return _shared_http_client


async def shutdown_shared_http_client() -> None:
    await _shared_http_client.close()
