"""FatSecret 응답 파싱 (네트워크와 분리)

- foods.search.v3: foods_search.results.food 가 객체 하나 또는 배열
- food_brands.get.v2: 응답 형태가 문서화되어 있지 않아 알려진 형태를
  우선순위대로 시도하고, 모두 실패하면 "unrecognized"로 표시
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from pydantic import ValidationError

from food_catalog.core.logging import logger
from food_catalog.schemas.catalog_schema import RawResult


def as_list(value: Any) -> list:
    """단일 객체/배열 양쪽 형태를 리스트로 정규화"""
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def safe_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def remote_error(data: Any) -> Optional[str]:
    """{"error": {"code": .., "message": ..}} 형태의 원격 오류 메시지"""
    if not isinstance(data, dict):
        return None
    err = data.get("error")
    if not err:
        return None
    if isinstance(err, dict):
        return f"code={err.get('code')} message={err.get('message')}"
    return str(err)


def parse_results(rows: list) -> list[RawResult]:
    results: list[RawResult] = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        try:
            results.append(RawResult.model_validate(row))
        except ValidationError as e:
            logger.debug(f"[PARSING] Dropping malformed result row: {e.error_count()} error(s)")
    return results


def parse_search_envelope(data: Any) -> Optional[tuple[list[RawResult], int]]:
    """foods.search.v3 응답 → (결과 목록, 전체 결과 수)

    Returns:
        envelope가 없거나 형태가 잘못되면 None
    """
    err = remote_error(data)
    if err:
        logger.warning(f"[PARSING] Remote error envelope: {err}")
        return None
    if not isinstance(data, dict):
        return None

    search = data.get("foods_search")
    if not isinstance(search, dict):
        return None
    results = search.get("results")
    if not isinstance(results, dict) or not results.get("food"):
        return None

    items = parse_results(as_list(results.get("food")))
    if not items:
        return None
    return items, safe_int(search.get("total_results"), 0)


# --- food_brands.get.v2 -----------------------------------------------------


@dataclass(frozen=True)
class BrandCatalog:
    """브랜드 카탈로그 디코딩 결과 (tagged union)

    shape:
        - "food_brands.food_brand" | "brands" | "food_brand": 인식된 형태
        - "unrecognized": 응답은 받았지만 알려진 형태가 아님
        - "unavailable": 응답 자체를 받지 못함
    """

    shape: str
    names: tuple[str, ...] = field(default_factory=tuple)

    @property
    def recognized(self) -> bool:
        return self.shape not in ("unrecognized", "unavailable")


def _brand_names(entries: Any) -> tuple[str, ...]:
    names: list[str] = []
    for entry in as_list(entries):
        if isinstance(entry, str):
            name = entry
        elif isinstance(entry, dict):
            name = entry.get("brand_name") or entry.get("name") or ""
        else:
            continue
        name = str(name).strip()
        if name and name not in names:
            names.append(name)
    return tuple(names)


def _decode_nested_food_brands(data: dict) -> Optional[tuple[str, ...]]:
    nested = data.get("food_brands")
    if isinstance(nested, dict) and nested.get("food_brand"):
        return _brand_names(nested["food_brand"])
    return None


def _decode_brands(data: dict) -> Optional[tuple[str, ...]]:
    if data.get("brands"):
        return _brand_names(data["brands"])
    return None


def _decode_food_brand(data: dict) -> Optional[tuple[str, ...]]:
    if data.get("food_brand"):
        return _brand_names(data["food_brand"])
    return None


BRAND_CATALOG_DECODERS: list[tuple[str, Callable[[dict], Optional[tuple[str, ...]]]]] = [
    ("food_brands.food_brand", _decode_nested_food_brands),
    ("brands", _decode_brands),
    ("food_brand", _decode_food_brand),
]


def decode_brand_catalog(data: Any) -> BrandCatalog:
    """고정 우선순위로 디코더를 시도"""
    if data is None:
        return BrandCatalog(shape="unavailable")
    if not isinstance(data, dict):
        return BrandCatalog(shape="unrecognized")

    err = remote_error(data)
    if err:
        logger.warning(f"[PARSING] Brand catalog remote error: {err}")
        return BrandCatalog(shape="unrecognized")

    for shape, decoder in BRAND_CATALOG_DECODERS:
        names = decoder(data)
        if names is not None:
            return BrandCatalog(shape=shape, names=names)

    logger.info(f"[PARSING] Unrecognized brand catalog shape: keys={sorted(data.keys())[:10]}")
    return BrandCatalog(shape="unrecognized")
