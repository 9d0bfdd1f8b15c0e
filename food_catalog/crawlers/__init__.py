"""FatSecret crawler modules (signed HTTP client + paginated search).

공개 API는 이 파일에서만 export합니다.
"""

from .result import PageStatus, SearchPage

__all__ = [
        "PageStatus",
        "SearchPage",
]
