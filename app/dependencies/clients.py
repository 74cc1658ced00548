"""
Factory functions to provide shared clients and services as FastAPI dependencies.

Each factory is cached so a process holds one store, one broker (and with it
one set of per-resource refresh locks) and one copy of each secret-bearing
component.
"""

from datetime import timedelta
from functools import lru_cache

from app.clients import (
    AccountStore,
    PlatformConfigClient,
    PlatformTokenClient,
    SQLiteStore,
    TokenStore,
)
from app.dependencies.config import get_app_settings
from app.services import (
    AccountService,
    ConfigUpdateService,
    NotificationService,
    OAuthTokenBroker,
    SessionTokenIssuer,
    SsoValidator,
    TokenCipherService,
)


@lru_cache()
def get_sqlite_store() -> SQLiteStore:
    """Provide the shared SQLite database handle."""
    settings = get_app_settings()
    return SQLiteStore(
        settings.database.path, timeout=settings.database.timeout_seconds
    )


@lru_cache()
def get_token_cipher_service() -> TokenCipherService:
    """Provide symmetric encryption helper for token storage."""
    settings = get_app_settings()
    secret = (
        settings.security.token_encryption_secret
        or settings.marketplace.client_secret
    )
    return TokenCipherService(secret=secret)


@lru_cache()
def get_token_store() -> TokenStore:
    return TokenStore(get_sqlite_store(), get_token_cipher_service())


@lru_cache()
def get_account_store() -> AccountStore:
    return AccountStore(get_sqlite_store())


@lru_cache()
def get_platform_token_client() -> PlatformTokenClient:
    """Create a singleton client for the platform token endpoint."""
    settings = get_app_settings()
    return PlatformTokenClient(
        token_endpoint=str(settings.marketplace.token_endpoint),
        client_secret=settings.marketplace.client_secret,
        timeout=settings.upstream_timeout_seconds,
    )


@lru_cache()
def get_platform_config_client() -> PlatformConfigClient:
    settings = get_app_settings()
    return PlatformConfigClient(
        api_base_url=str(settings.marketplace.api_base_url),
        timeout=settings.upstream_timeout_seconds,
    )


@lru_cache()
def get_oauth_token_broker() -> OAuthTokenBroker:
    """Provide the process-wide access token broker."""
    settings = get_app_settings()
    return OAuthTokenBroker(
        token_store=get_token_store(),
        token_client=get_platform_token_client(),
        timeout_seconds=settings.upstream_timeout_seconds,
    )


@lru_cache()
def get_sso_validator() -> SsoValidator:
    settings = get_app_settings()
    return SsoValidator(
        secret=settings.marketplace.app_salt,
        max_age=timedelta(seconds=settings.security.sso_max_age_seconds),
    )


@lru_cache()
def get_session_token_issuer() -> SessionTokenIssuer:
    settings = get_app_settings()
    return SessionTokenIssuer(
        secret=settings.marketplace.app_salt,
        ttl=timedelta(seconds=settings.security.session_token_ttl_seconds),
    )


def get_account_service() -> AccountService:
    """Build the provisioning service from shared stores and broker."""
    return AccountService(
        account_store=get_account_store(),
        token_store=get_token_store(),
        token_broker=get_oauth_token_broker(),
    )


def get_notification_service() -> NotificationService:
    return NotificationService(get_account_store())


def get_config_update_service() -> ConfigUpdateService:
    return ConfigUpdateService(
        account_store=get_account_store(),
        token_broker=get_oauth_token_broker(),
        config_client=get_platform_config_client(),
    )


__all__ = [
    "get_account_service",
    "get_account_store",
    "get_config_update_service",
    "get_notification_service",
    "get_oauth_token_broker",
    "get_platform_config_client",
    "get_platform_token_client",
    "get_session_token_issuer",
    "get_sqlite_store",
    "get_sso_validator",
    "get_token_cipher_service",
    "get_token_store",
]
