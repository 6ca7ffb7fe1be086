"""Service modules for catalog persistence."""

from .repository import CatalogRepository, InMemoryCatalogRepository, JsonCatalogRepository

__all__ = ["CatalogRepository", "InMemoryCatalogRepository", "JsonCatalogRepository"]
