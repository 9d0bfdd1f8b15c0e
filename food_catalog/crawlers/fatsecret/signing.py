"""OAuth 1.0 (HMAC-SHA1) request signing for the FatSecret REST API.

nonce/timestamp를 인자로 받는 순수 함수로 분리해 서명 결과를 테스트할 수 있게 합니다.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
import time
from typing import Mapping, Optional
from urllib.parse import quote

SIGNATURE_METHOD = "HMAC-SHA1"
OAUTH_VERSION = "1.0"


def percent_encode(value: object) -> str:
    """RFC 3986 percent-encoding (unreserved: A-Z a-z 0-9 - . _ ~)"""
    return quote(str(value), safe="~")


def normalize_params(params: Mapping[str, object]) -> str:
    """키 정렬 후 k=v 를 & 로 연결 (키/값 모두 인코딩)"""
    pairs = sorted((percent_encode(k), percent_encode(v)) for k, v in params.items())
    return "&".join(f"{k}={v}" for k, v in pairs)


def signature_base_string(http_method: str, url: str, params: Mapping[str, object]) -> str:
    return "&".join(
        [
            http_method.upper(),
            percent_encode(url),
            percent_encode(normalize_params(params)),
        ]
    )


def build_signature(
    http_method: str,
    url: str,
    params: Mapping[str, object],
    consumer_secret: str,
    token_secret: str = "",
) -> str:
    """HMAC-SHA1 서명 (base64)

    params에는 oauth_signature가 포함되지 않아야 합니다.
    """
    base = signature_base_string(http_method, url, params)
    signing_key = f"{percent_encode(consumer_secret)}&{percent_encode(token_secret)}"
    digest = hmac.new(signing_key.encode("utf-8"), base.encode("utf-8"), hashlib.sha1).digest()
    return base64.b64encode(digest).decode("ascii")


def generate_nonce() -> str:
    return secrets.token_hex(16)


def sign_request_params(
    remote_method: str,
    params: Mapping[str, object],
    *,
    url: str,
    consumer_key: str,
    consumer_secret: str,
    nonce: Optional[str] = None,
    timestamp: Optional[int] = None,
    http_method: str = "POST",
) -> dict[str, str]:
    """원격 프로시저 파라미터 + OAuth envelope + 서명을 합친 최종 form 파라미터"""
    signed: dict[str, str] = {
        "oauth_consumer_key": consumer_key,
        "oauth_nonce": nonce or generate_nonce(),
        "oauth_signature_method": SIGNATURE_METHOD,
        "oauth_timestamp": str(timestamp if timestamp is not None else int(time.time())),
        "oauth_version": OAUTH_VERSION,
        "method": remote_method,
        "format": "json",
    }
    signed.update({k: str(v) for k, v in params.items()})
    signed["oauth_signature"] = build_signature(http_method, url, signed, consumer_secret)
    return signed


def encode_form(params: Mapping[str, object]) -> str:
    """application/x-www-form-urlencoded body"""
    return "&".join(f"{percent_encode(k)}={percent_encode(v)}" for k, v in params.items())
