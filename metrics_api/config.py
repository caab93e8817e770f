"""
Configuration management using pydantic-settings.
All settings loaded from environment variables (12-factor app).
"""

from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Web analytics (GA4 Data API)
    ga_service_account_json: str = Field(
        default="", description="Base64-encoded service account JSON"
    )
    ga_api_base_url: str = Field(
        default="https://analyticsdata.googleapis.com/v1beta",
        description="Analytics Data API base URL",
    )
    ga_property_id_somara: str = Field(default="", description="GA property for Somara")
    ga_property_id_ulink: str = Field(default="", description="GA property for ULink")
    ga_property_id_pushfire: str = Field(default="", description="GA property for PushFire")

    # Platform databases (PostgREST endpoints)
    ulink_supabase_url: str = Field(default="", description="ULink database URL")
    ulink_supabase_service_key: str = Field(default="", description="ULink service key")
    pushfire_supabase_url: str = Field(default="", description="PushFire database URL")
    pushfire_supabase_service_key: str = Field(default="", description="PushFire service key")
    somara_supabase_url: str = Field(default="", description="Somara database URL")
    somara_supabase_service_key: str = Field(default="", description="Somara service key")

    upstream_timeout_seconds: float = Field(
        default=30.0, gt=0, description="HTTP timeout for upstream calls"
    )

    # Metrics cache
    cache_backend: str = Field(default="redis", description="Cache backend (memory|redis|duckdb)")
    redis_url: str = Field(default="redis://localhost:6379/0", description="Redis connection URL")
    redis_max_connections: int = Field(default=50, description="Redis pool size")
    cache_db_path: str = Field(default="./data/metrics_cache.duckdb", description="DuckDB cache file")
    cache_ttl_seconds: int = Field(default=15 * 60, ge=1, description="Freshness TTL")
    cache_stale_retention_seconds: int = Field(
        default=0,
        ge=0,
        description="Keep Redis entries this long for stale fallback (0 = expire at TTL)",
    )

    # Session verification
    session_cookie_name: str = Field(default="fw_session", description="Session cookie name")
    session_secret: str = Field(
        default="change-this-to-a-secure-random-string-in-production",
        description="Session token signing secret",
    )
    session_algorithm: str = Field(default="HS256", description="Session token algorithm")
    session_expiration_minutes: int = Field(default=60 * 24 * 7, description="Session lifetime")

    # API
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")
    api_reload: bool = Field(default=True, description="Enable hot reload")
    cors_origins: str = Field(
        default="http://localhost:3000",
        description="CORS allowed origins (comma-separated)",
    )

    # Logging
    log_level: str = Field(default="info", description="Log level")
    log_format: str = Field(default="json", description="Log format (json|console)")

    # Development
    dev_mode: bool = Field(default=True, description="Development mode")
    testing: bool = Field(default=False, description="Testing mode")

    @field_validator("cors_origins")
    @classmethod
    def parse_cors_origins(cls, v: str) -> List[str]:
        """Parse comma-separated CORS origins."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("cache_backend")
    @classmethod
    def validate_cache_backend(cls, v: str) -> str:
        v = v.lower()
        if v not in ("memory", "redis", "duckdb"):
            raise ValueError(f"Unsupported cache backend: {v}")
        return v


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache to ensure singleton behavior.
    """
    return Settings()
