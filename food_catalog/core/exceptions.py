"""커스텀 예외 정의 (Structured Exception Hierarchy)"""
from typing import Any, Optional


# 기본 예외 클래스
class CatalogCrawlerException(Exception):
    """기본 예외 클래스 - 모든 커스텀 예외의 부모"""
    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[dict[str, Any]] = None):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


class ConfigurationException(CatalogCrawlerException):
    """필수 설정 누락/오류"""
    def __init__(self, setting: str, details: Optional[dict[str, Any]] = None):
        message = f"Missing or invalid setting: {setting}"
        super().__init__(message, "CONFIG_ERROR", details or {"setting": setting})


class AuthenticationException(CatalogCrawlerException):
    """원격 API 인증 실패 (실행 전체 중단)"""
    def __init__(self, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Authentication failed: {reason}"
        super().__init__(message, "AUTH_FAILED", details or {"reason": reason})


class BudgetExhaustedException(CatalogCrawlerException):
    """요청 예산 소진

    에러가 아니라 단계 종료 신호로 취급됩니다.
    """
    def __init__(self, issued: int, ceiling: int, details: Optional[dict[str, Any]] = None):
        message = f"Request budget exhausted ({issued}/{ceiling})"
        super().__init__(message, "BUDGET_EXHAUSTED", details or {"issued": issued, "ceiling": ceiling})


class CatalogStoreException(CatalogCrawlerException):
    """카탈로그 저장소 오류"""
    def __init__(self, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Catalog store error: {reason}"
        super().__init__(message, "STORE_ERROR", details or {"reason": reason})
