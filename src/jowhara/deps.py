"""
Jowhara - Dependency Injection.

FastAPI dependencies for settings, feature flags and the store client.
"""

from typing import Annotated

from fastapi import Depends, Request

from jowhara.config import FeatureFlags, Settings, get_settings
from jowhara.core.supabase_client import StoreClient
from jowhara.exceptions import FeatureDisabledException, StoreNotConnectedException


# =============================================================================
# Settings Dependencies
# =============================================================================


def get_features(settings: Annotated[Settings, Depends(get_settings)]) -> FeatureFlags:
    """Get feature flags from settings."""
    return settings.features


# =============================================================================
# Store
# =============================================================================


def get_store(request: Request) -> StoreClient:
    """The store client opened by the application lifespan."""
    store = getattr(request.app.state, "store", None)
    if store is None or not store.connected:
        raise StoreNotConnectedException()
    return store


# =============================================================================
# Feature Flag Guards
# =============================================================================


def require_feature(feature_name: str):
    """Create a dependency that requires a specific feature to be enabled."""

    def check_feature(features: Annotated[FeatureFlags, Depends(get_features)]) -> bool:
        if not getattr(features, feature_name, False):
            raise FeatureDisabledException(feature_name)
        return True

    return check_feature


# Specific feature guards
require_products = Depends(require_feature("products"))
require_categories = Depends(require_feature("categories"))
require_brands = Depends(require_feature("brands"))
require_gender = Depends(require_feature("gender"))
require_orders = Depends(require_feature("orders"))
require_inventory = Depends(require_feature("inventory"))
require_realtime = Depends(require_feature("realtime"))
