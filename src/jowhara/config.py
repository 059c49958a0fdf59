"""
Jowhara Configuration Module.

Handles application settings, feature flags, and Supabase connection details.
Uses pydantic-settings for validation and type safety.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class FeatureFlags(BaseSettings):
    """Feature flags for enabling/disabling admin areas."""

    model_config = SettingsConfigDict(env_prefix="FEATURE_")

    products: bool = True
    categories: bool = True
    brands: bool = True
    gender: bool = True
    orders: bool = True
    inventory: bool = True
    realtime: bool = True

    def to_dict(self) -> dict[str, bool]:
        """Return feature flags as dictionary for health endpoint."""
        return {
            "products": self.products,
            "categories": self.categories,
            "brands": self.brands,
            "gender": self.gender,
            "orders": self.orders,
            "inventory": self.inventory,
            "realtime": self.realtime,
        }


class SupabaseSettings(BaseSettings):
    """Supabase project configuration."""

    model_config = SettingsConfigDict(env_prefix="SUPABASE_")

    url: str = Field(default="https://demo.supabase.co", description="Supabase project URL")
    anon_key: str = Field(default="demo-anon-key", description="Supabase anonymous key")
    service_role_key: str | None = Field(
        default=None,
        description="Supabase service role key (preferred for server-side access)",
    )

    @property
    def api_key(self) -> str:
        """Key used by the server: service role when configured, anon otherwise."""
        return self.service_role_key or self.anon_key


class LiveSettings(BaseSettings):
    """Server-Sent-Event live list configuration."""

    model_config = SettingsConfigDict(env_prefix="LIVE_")

    ping_seconds: int = Field(default=15, ge=1, description="SSE keep-alive interval")


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_env: Literal["development", "staging", "production"] = "development"
    app_debug: bool = False
    app_log_level: str = "INFO"

    # Nested settings
    features: FeatureFlags = Field(default_factory=FeatureFlags)
    supabase: SupabaseSettings = Field(default_factory=SupabaseSettings)
    live: LiveSettings = Field(default_factory=LiveSettings)

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
