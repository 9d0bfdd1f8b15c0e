"""Catalog persistence (JSON files under the output directory)."""

from .catalog_store import CatalogStore, ExistingCatalog

__all__ = ["CatalogStore", "ExistingCatalog"]
