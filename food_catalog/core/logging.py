"""로깅 설정"""
import logging
import sys
import os
from food_catalog.core.config import settings


# Production 환경에서는 DEBUG 로그 비활성화
IS_PRODUCTION = os.getenv("ENVIRONMENT", "development") == "production"


def setup_logging() -> logging.Logger:
    """로거 초기화 및 설정"""

    logger = logging.getLogger("food_catalog")

    log_level = settings.log_level.upper()
    if IS_PRODUCTION and log_level == "DEBUG":
        log_level = "INFO"

    logger.setLevel(getattr(logging, log_level, logging.INFO))

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(getattr(logging, log_level, logging.INFO))

    if IS_PRODUCTION:
        formatter = logging.Formatter(
            fmt="%(asctime)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

    console_handler.setFormatter(formatter)

    if not logger.handlers:
        logger.addHandler(console_handler)

    return logger


logger = setup_logging()


def set_log_level(level: str) -> None:
    """CLI 등에서 런타임에 로그 레벨 변경"""
    value = getattr(logging, (level or "INFO").upper(), logging.INFO)
    logger.setLevel(value)
    for handler in logger.handlers:
        handler.setLevel(value)


_SENSITIVE_KEYS = ("secret", "signature", "consumer_key", "token", "password")


def sanitize_for_log(params: dict, max_length: int = 100) -> dict:
    """요청 파라미터에서 민감 정보를 마스킹한 사본 반환

    Args:
        params: 로깅할 파라미터
        max_length: 값 최대 길이

    Returns:
        마스킹된 파라미터 사본
    """
    if not params:
        return {}

    result = {}
    for key, value in params.items():
        text = str(value)
        if any(marker in key.lower() for marker in _SENSITIVE_KEYS):
            text = "***"
        elif len(text) > max_length:
            text = text[:max_length] + "..."
        result[key] = text
    return result
