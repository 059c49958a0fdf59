"""Jowhara Products Module - Product catalog administration."""

from jowhara.modules.products.router import router
from jowhara.modules.products.service import ProductsService

__all__ = ["router", "ProductsService"]
