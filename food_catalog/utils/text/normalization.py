"""Entity name normalization (file-safe keys)."""

from __future__ import annotations

import re
import unicodedata

_APOSTROPHES = re.compile(r"['’‘`]")
_NON_ALNUM_RUN = re.compile(r"[^a-z0-9]+")


def normalize_key(name: str) -> str:
    """엔티티 이름 → 파일명용 정규화 키.

    - ASCII 폴딩 후 소문자화
    - 아포스트로피 제거 ("Jerry's" → "jerrys")
    - 영숫자가 아닌 구간은 "_" 하나로 축약, 양끝 "_" 제거

    같은 이름이면 항상 같은 키가 나오며, 대소문자/구두점만 다른 이름은
    같은 키로 모입니다. 결과가 빈 문자열일 수 있습니다.
    """
    if not name:
        return ""
    folded = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii")
    lowered = _APOSTROPHES.sub("", folded.lower())
    return _NON_ALNUM_RUN.sub("_", lowered).strip("_")


def key_from_filename(filename: str) -> str:
    """저장된 엔티티 파일명(<key>.json)에서 키 복원"""
    stem = filename[:-5] if filename.endswith(".json") else filename
    return normalize_key(stem)
