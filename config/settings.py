"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache


class Settings(BaseSettings):
    """
    Application settings.

    All values loaded from .env file or environment variables.
    Validation happens automatically on startup.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),  # Check current dir, then parent
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra env vars
    )

    # ===================
    # SUPABASE
    # ===================
    supabase_url: str = Field(
        ...,
        description="Supabase project URL"
    )
    supabase_key: str = Field(
        ...,
        description="Supabase anon/public key"
    )
    inventory_table: str = Field(
        default="inventory_items",
        description="Table holding inventory items"
    )
    transactions_table: str = Field(
        default="inventory_transactions",
        description="Table holding the stock movement audit trail"
    )

    # ===================
    # SKU
    # ===================
    sku_max_generation_attempts: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Draws attempted before giving up on a collision-free SKU"
    )

    # ===================
    # LABELS
    # ===================
    payload_max_length: int = Field(
        default=4000,
        ge=1,
        le=7089,
        description="Maximum characters accepted in a scan payload"
    )
    label_size_px: int = Field(
        default=100,
        ge=21,
        le=4096,
        description="Default rendered label matrix size in pixels"
    )
    label_margin_px: int = Field(
        default=4,
        ge=0,
        le=64,
        description="Default quiet margin around the matrix in pixels"
    )

    # ===================
    # INVENTORY CHECK
    # ===================
    check_search_limit: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Maximum candidates shown while searching for an item to count"
    )
    check_session_ttl_seconds: int = Field(
        default=3600,
        ge=60,
        description="Idle time after which an open inventory check is discarded"
    )

    # ===================
    # APP SETTINGS
    # ===================
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Application environment"
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API host"
    )
    api_port: int = Field(
        default=8000,
        ge=1000,
        le=65535,
        description="API port"
    )

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If required env vars are missing or invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
