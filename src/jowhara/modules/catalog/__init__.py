"""Jowhara Catalog Module - Categories, brands, gender categories and adapter presets."""

from jowhara.modules.catalog.router import brands_router, categories_router, gender_router
from jowhara.modules.catalog.service import CatalogService

__all__ = ["brands_router", "categories_router", "gender_router", "CatalogService"]
