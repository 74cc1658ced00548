"""
Application configuration models and helpers.

Centralizes settings management so the webhook handlers, the SSO flow and the
token broker all share a consistent configuration surface. Secrets are read
here once and handed to each component through its constructor.
"""

from functools import lru_cache
from typing import Optional

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TOKEN_ENDPOINT = "https://api.digitalocean.com/v2/add-ons/oauth/token"
DEFAULT_API_BASE_URL = "https://api.digitalocean.com"


class _EnvSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


class MarketplaceSettings(_EnvSettings):
    """Credentials and endpoints issued by the marketplace platform."""

    app_slug: str = Field("sample_app", validation_alias="APP_SLUG")
    app_password: str = Field(..., validation_alias="APP_PASSWORD")
    app_salt: str = Field(
        ...,
        validation_alias="APP_SALT",
        description="Shared secret used to sign SSO requests and session tokens.",
    )
    client_secret: str = Field(..., validation_alias="CLIENT_SECRET")
    app_homepage: AnyHttpUrl = Field(
        ...,
        validation_alias="APP_HOMEPAGE",
        description="Front-end URL users are redirected to after SSO.",
    )
    token_endpoint: AnyHttpUrl = Field(
        DEFAULT_TOKEN_ENDPOINT, validation_alias="TOKEN_ENDPOINT"
    )
    api_base_url: AnyHttpUrl = Field(
        DEFAULT_API_BASE_URL, validation_alias="API_BASE_URL"
    )

    @field_validator("app_salt", "client_secret", "app_password")
    @classmethod
    def _require_non_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("must not be empty")
        return value


class SecuritySettings(_EnvSettings):
    """Security-related configuration."""

    token_encryption_secret: Optional[str] = Field(
        None,
        validation_alias="TOKEN_ENCRYPTION_SECRET",
        description=(
            "Secret used to derive the symmetric key for encrypting stored tokens."
        ),
    )
    sso_max_age_seconds: int = Field(120, validation_alias="SSO_MAX_AGE_SECONDS")
    session_token_ttl_seconds: int = Field(
        900, validation_alias="SESSION_TOKEN_TTL_SECONDS"
    )


class DatabaseSettings(_EnvSettings):
    """Location of the SQLite database holding accounts and tokens."""

    path: str = Field("data/marketplace.db", validation_alias="DATABASE_PATH")
    timeout_seconds: float = Field(5.0, validation_alias="DATABASE_TIMEOUT_SECONDS")


class AppSettings(_EnvSettings):
    """Root settings object for the FastAPI application."""

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    server_host: str = Field("0.0.0.0", validation_alias="SERVER_HOST")
    server_port: int = Field(8082, validation_alias="SERVER_PORT")
    upstream_timeout_seconds: float = Field(
        10.0,
        validation_alias="UPSTREAM_TIMEOUT_SECONDS",
        description="Deadline applied to every outbound call to the platform.",
    )
    marketplace: MarketplaceSettings = Field(default_factory=MarketplaceSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "DatabaseSettings",
    "MarketplaceSettings",
    "SecuritySettings",
    "get_settings",
]
