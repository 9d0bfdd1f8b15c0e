"""카탈로그 저장소 - 출력 디렉토리의 JSON 파일 관리

디렉토리 구조:
    <root>/brands/<key>.json
    <root>/restaurants/<key>.json
    <root>/categories/<key>.json
    <root>/discovered/all-foods.json
    <root>/<mode log>.json
    <root>/manifest.json

모든 쓰기는 임시 파일 + os.replace로 원자적으로 처리하고,
같은 내용은 항상 같은 바이트로 기록됩니다 (키 순서 고정, indent=2, 끝 개행).
"""

from __future__ import annotations

import json
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Union

from food_catalog.core.exceptions import CatalogStoreException
from food_catalog.core.logging import logger
from food_catalog.schemas.catalog_schema import DiscoveryLog, Entity, EntityKind, FoodItem, utc_now_iso
from food_catalog.utils.text.normalization import key_from_filename

AGGREGATE_DIR = "discovered"
AGGREGATE_FILE = "all-foods.json"
MANIFEST_FILE = "manifest.json"


@dataclass
class ExistingCatalog:
    """이전 실행에서 저장된 키/food_id 목록"""

    brand_keys: set[str] = field(default_factory=set)
    restaurant_keys: set[str] = field(default_factory=set)
    category_keys: set[str] = field(default_factory=set)
    food_ids: set[str] = field(default_factory=set)

    def keys_for(self, kind: EntityKind) -> set[str]:
        return {
            EntityKind.BRAND: self.brand_keys,
            EntityKind.RESTAURANT: self.restaurant_keys,
            EntityKind.CATEGORY: self.category_keys,
        }[kind]

    def has(self, kind: EntityKind, key: str) -> bool:
        return key in self.keys_for(kind)


def dump_json(data: Any) -> str:
    return json.dumps(data, ensure_ascii=False, indent=2) + "\n"


class CatalogStore:
    """출력 디렉토리 기반 카탈로그 저장소"""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    def kind_dir(self, kind: EntityKind) -> Path:
        return self.root / kind.directory

    @property
    def aggregate_path(self) -> Path:
        return self.root / AGGREGATE_DIR / AGGREGATE_FILE

    def ensure_layout(self) -> None:
        """엔티티/집계 디렉토리 생성"""
        try:
            for kind in EntityKind:
                self.kind_dir(kind).mkdir(parents=True, exist_ok=True)
            (self.root / AGGREGATE_DIR).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CatalogStoreException(f"cannot create layout under {self.root}: {e}")

    # --- read -----------------------------------------------------------------

    def load_existing(self) -> ExistingCatalog:
        """저장된 엔티티 키와 집계 파일의 food_id 로드

        complete가 False인 엔티티 파일은 기존 키에서 제외해 다음 실행에서 다시 추출합니다.
        """
        existing = ExistingCatalog()
        incomplete = 0
        for kind in EntityKind:
            directory = self.kind_dir(kind)
            if not directory.is_dir():
                continue
            keys = existing.keys_for(kind)
            for path in directory.glob("*.json"):
                key = key_from_filename(path.name)
                if not key:
                    continue
                record = self._read_record(path)
                if record is not None and record.get("complete") is False:
                    incomplete += 1
                    continue
                keys.add(key)

        existing.food_ids = self._load_food_ids()
        logger.info(
            f"[STORE] Existing: brands={len(existing.brand_keys)}, "
            f"restaurants={len(existing.restaurant_keys)}, categories={len(existing.category_keys)}, "
            f"foods={len(existing.food_ids)}, incomplete={incomplete}"
        )
        return existing

    def _load_food_ids(self) -> set[str]:
        path = self.aggregate_path
        if not path.exists():
            return set()
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"[STORE] Unreadable aggregate file {path}: {e}")
            return set()

        foods = data.get("foods") if isinstance(data, dict) else None
        if not isinstance(foods, list):
            logger.warning(f"[STORE] Aggregate file has no foods list: {path}")
            return set()
        return {str(f["food_id"]) for f in foods if isinstance(f, dict) and f.get("food_id")}

    # --- write ----------------------------------------------------------------

    def _write_atomic(self, path: Path, data: Any) -> Path:
        payload = dump_json(data)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
        except OSError as e:
            raise CatalogStoreException(f"cannot prepare {path}: {e}")
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
                f.write(payload)
            os.replace(tmp, path)
        except OSError as e:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise CatalogStoreException(f"failed to write {path}: {e}")
        return path

    def entity_path(self, entity: Entity) -> Path:
        return self.kind_dir(entity.kind) / f"{entity.key}.json"

    def save(self, entity: Entity) -> Path:
        """엔티티 파일 저장 (같은 키면 덮어씀)"""
        if not entity.key:
            raise CatalogStoreException(f"empty key for entity '{entity.name}'")
        path = self._write_atomic(self.entity_path(entity), entity.to_record())
        logger.debug(f"[STORE] Saved {entity.kind.value} '{entity.name}' -> {path}")
        return path

    def save_aggregate(
        self,
        foods: Iterable[FoodItem],
        *,
        new_foods: int,
        discovered: Mapping[str, Iterable[str]],
        api_requests_used: int,
        extraction_results: Mapping[str, Mapping[str, int]],
        timestamp: Optional[str] = None,
    ) -> Path:
        """discovered/all-foods.json 저장

        Args:
            foods: 이번 실행에서 발견한 전체 음식
            new_foods: 이전 실행에 없던 food_id 수
            discovered: 종류별 발견 이름 ({"brands": [...], ...})
            api_requests_used: 사용한 요청 수
            extraction_results: 종류별 엔티티당 추출 항목 수
        """
        food_list = [f.to_record() for f in foods]
        names = {kind: sorted(set(values)) for kind, values in discovered.items()}
        data = {
            "timestamp": timestamp or utc_now_iso(),
            "total_foods": len(food_list),
            "new_foods": new_foods,
            "discovered": {kind: len(values) for kind, values in names.items()},
            "api_requests_used": api_requests_used,
            "extraction_results": {kind: dict(results) for kind, results in extraction_results.items()},
            "discovered_names": names,
            "foods": food_list,
        }
        path = self._write_atomic(self.aggregate_path, data)
        logger.info(f"[STORE] Aggregate saved: foods={len(food_list)} -> {path}")
        return path

    def write_log(self, log: DiscoveryLog, name: str = "discovery-log.json") -> Path:
        """실행 로그 저장 (덮어씀)"""
        path = self._write_atomic(self.root / name, log.model_dump())
        logger.info(f"[STORE] Discovery log written -> {path}")
        return path

    def write_manifest(self) -> Path:
        """저장된 엔티티 파일 목록과 총 항목 수"""
        files: dict[str, list[str]] = {}
        total_items = 0
        for kind in EntityKind:
            directory = self.kind_dir(kind)
            paths = sorted(directory.glob("*.json")) if directory.is_dir() else []
            files[kind.directory] = [p.name for p in paths]
            for path in paths:
                total_items += self._item_count(path)

        data = {
            "generated_at": utc_now_iso(),
            "entity_counts": {kind: len(names) for kind, names in files.items()},
            "total_items": total_items,
            "files": files,
        }
        return self._write_atomic(self.root / MANIFEST_FILE, data)

    @staticmethod
    def _read_record(path: Path) -> Optional[dict]:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"[STORE] Unreadable entity file {path}: {e}")
            return None
        return data if isinstance(data, dict) else None

    @classmethod
    def _item_count(cls, path: Path) -> int:
        data = cls._read_record(path)
        if data is None:
            return 0
        count = data.get("total_items")
        if isinstance(count, int):
            return count
        items = data.get("items")
        return len(items) if isinstance(items, list) else 0
