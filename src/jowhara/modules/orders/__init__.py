"""Jowhara Orders Module - Order listing and creation."""

from jowhara.modules.orders.router import router
from jowhara.modules.orders.service import OrdersService

__all__ = ["router", "OrdersService"]
