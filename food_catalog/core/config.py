"""설정 관리 - 환경 변수 로드 및 검증"""
from pydantic_settings import BaseSettings
from pydantic import field_validator


class Settings(BaseSettings):
    """크롤러 설정"""

    # FatSecret 자격 증명 (OAuth 1.0 consumer key/secret)
    fatsecret_client_id: str = ""
    fatsecret_client_secret: str = ""
    fatsecret_api_url: str = "https://platform.fatsecret.com/rest/server.api"

    # HTTP
    crawler_request_timeout_s: float = 30.0
    crawler_max_retries: int = 2
    crawler_retry_delay_s: float = 3.0
    crawler_min_request_interval_s: float = 1.0
    crawler_http_impersonate: str = "chrome110"
    crawler_user_agent: str = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"

    # 일일 요청 예산 (FatSecret 무료 플랜 한도보다 약간 낮게)
    budget_max_requests: int = 4200
    budget_safety_margin: int = 50

    # 검색/페이지네이션
    search_page_size: int = 50
    discovery_max_pages_per_term: int = 30

    # 추출 정책
    # - extraction_patience: 연속으로 매칭 0건인 페이지가 이만큼 나오면 조기 종료
    extraction_brand_max_pages: int = 30
    extraction_restaurant_max_pages: int = 50
    extraction_patience: int = 5

    # 단계별 상위 N개만 추출
    max_brands: int = 150
    max_restaurants: int = 100
    max_categories: int = 200

    # food_brands.get.v2 결과로 브랜드 후보를 보강할지 여부
    use_brand_catalog: bool = False

    # 출력
    output_dir: str = "."

    # 로깅
    log_level: str = "INFO"

    @field_validator(
        "crawler_request_timeout_s",
        "crawler_max_retries",
        "budget_max_requests",
        "search_page_size",
        "discovery_max_pages_per_term",
        "extraction_brand_max_pages",
        "extraction_restaurant_max_pages",
        "extraction_patience",
    )
    @classmethod
    def validate_positive(cls, v):
        if v <= 0:
            raise ValueError("value must be positive")
        return v

    @field_validator(
        "crawler_retry_delay_s",
        "crawler_min_request_interval_s",
        "budget_safety_margin",
        "max_brands",
        "max_restaurants",
        "max_categories",
    )
    @classmethod
    def validate_non_negative(cls, v):
        if v < 0:
            raise ValueError("value must be >= 0")
        return v

    @property
    def has_credentials(self) -> bool:
        return bool(self.fatsecret_client_id and self.fatsecret_client_secret)

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
