"""FatSecret Platform REST API client (OAuth 1.0 signed, paginated search).

공개 API는 이 파일에서만 export합니다.
"""

from .client import ClientOptions, MinIntervalGate, SignedRequestClient
from .parsing import BrandCatalog, decode_brand_catalog, parse_search_envelope
from .search import PaginatedSearchClient
from .signing import build_signature, sign_request_params

__all__ = [
    "BrandCatalog",
    "ClientOptions",
    "MinIntervalGate",
    "PaginatedSearchClient",
    "SignedRequestClient",
    "build_signature",
    "decode_brand_catalog",
    "parse_search_envelope",
    "sign_request_params",
]
