"""리소스 파일(YAML) 로더 유틸리티"""
import os
import yaml
from typing import Any, Dict
from functools import lru_cache

from food_catalog.core.logging import logger


def get_resource_path(relative_path: str) -> str:
    """패키지 resources/ 기준 리소스 절대 경로 반환"""
    # food_catalog/utils/resource_loader.py -> food_catalog/utils -> food_catalog
    base_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    return os.path.join(base_dir, "resources", relative_path)


@lru_cache(maxsize=32)
def load_yaml_resource(relative_path: str) -> Dict[str, Any]:
    """YAML 리소스 로드 및 캐싱"""
    path = get_resource_path(relative_path)
    if not os.path.exists(path):
        logger.warning(f"Resource not found: {path}")
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Failed to load YAML resource {path}: {e}")
        return {}


def _lowered(values: Any) -> list[str]:
    return [str(v).strip().lower() for v in (values or []) if str(v).strip()]


def load_brand_rules() -> Dict[str, Any]:
    """브랜드 라벨 판별 규칙 로드"""
    data = load_yaml_resource("classifier/brand_rules.yaml")
    return {
        "stoplist": set(_lowered(data.get("stoplist"))),
        "min_length": int(data.get("min_length", 2)),
        "max_length": int(data.get("max_length", 50)),
    }


def load_restaurant_rules() -> Dict[str, Any]:
    """레스토랑 라벨 판별 규칙 로드 (indicator 순서 유지)"""
    data = load_yaml_resource("classifier/restaurant_rules.yaml")
    return {
        "indicators": tuple(_lowered(data.get("indicators"))),
        "permissive_stoplist": set(_lowered(data.get("permissive_stoplist"))),
        "min_length": int(data.get("min_length", 3)),
        "permissive_min_proper_length": int(data.get("permissive_min_proper_length", 4)),
    }


def load_category_rules() -> Dict[str, Any]:
    """카테고리 토큰 추출 규칙 로드"""
    data = load_yaml_resource("classifier/category_rules.yaml")
    return {
        "stoplist": set(_lowered(data.get("stoplist"))),
        "min_length": int(data.get("min_length", 3)),
        "max_length": int(data.get("max_length", 20)),
    }


def load_seed_terms(mode: str) -> list[str]:
    """실행 모드별 디스커버리 시드어 목록 (중복 제거, 순서 유지)"""
    data = load_yaml_resource("seeds/discovery_terms.yaml")
    terms = data.get(mode) or []
    return list(dict.fromkeys(str(t).strip() for t in terms if str(t).strip()))
