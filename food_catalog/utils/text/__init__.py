"""Text utilities: key normalization and entity classification."""

from .classification import (
    EntityClassifier,
    extract_category_tokens,
    get_default_classifier,
    is_likely_restaurant_label,
    is_valid_brand_label,
)
from .normalization import key_from_filename, normalize_key

__all__ = [
    "EntityClassifier",
    "extract_category_tokens",
    "get_default_classifier",
    "is_likely_restaurant_label",
    "is_valid_brand_label",
    "key_from_filename",
    "normalize_key",
]
