"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    get_account_service,
    get_account_store,
    get_config_update_service,
    get_notification_service,
    get_oauth_token_broker,
    get_platform_config_client,
    get_platform_token_client,
    get_session_token_issuer,
    get_sqlite_store,
    get_sso_validator,
    get_token_cipher_service,
    get_token_store,
)
from .config import SettingsDependency, get_app_settings
from .security import PlatformAuthDependency, require_platform_credentials

__all__ = [
    "PlatformAuthDependency",
    "SettingsDependency",
    "get_account_service",
    "get_account_store",
    "get_app_settings",
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
    "require_platform_credentials",
]
