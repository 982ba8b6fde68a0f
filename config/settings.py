"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache
from typing import Optional


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
    supabase_service_key: Optional[str] = Field(
        None,
        description="Supabase service role key (for admin operations)"
    )

    # ===================
    # API SECURITY
    # ===================
    api_key: Optional[str] = Field(
        None,
        description="API key for authentication"
    )

    # ===================
    # CATALOG IMPORT
    # ===================
    import_header_offset: int = Field(
        default=2,
        ge=0,
        le=100,
        description="Added to the 0-based row index to get the spreadsheet row number"
    )
    import_max_rows: int = Field(
        default=5000,
        ge=1,
        le=100000,
        description="Maximum rows accepted in one import"
    )
    import_default_tax_rate: float = Field(
        default=5,
        ge=0,
        le=100,
        description="Rate (%) given to taxes created during import"
    )
    import_default_unit_type: str = Field(
        default="piece",
        min_length=1,
        description="Type given to units created during import"
    )
    import_default_max_purchase_qty: int = Field(
        default=10,
        ge=1,
        description="Max purchase quantity when the row leaves it blank"
    )
    import_default_low_stock_warning: int = Field(
        default=5,
        ge=0,
        description="Low stock warning level when the row leaves it blank"
    )
    preview_ttl_minutes: int = Field(
        default=30,
        ge=1,
        le=1440,
        description="Minutes a bulk import preview stays confirmable"
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
    cors_origins: list[str] = Field(
        default=[
            "http://localhost:3000",
            "http://localhost:5173",
        ],
        description="Origins allowed to call the API (admin dashboard)"
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
