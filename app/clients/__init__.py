"""Expose constructed client wrappers."""

from .account_store import AccountStore
from .platform_api import PlatformConfigClient, PlatformTokenClient
from .sqlite_store import SQLiteStore
from .token_store import TokenStore

__all__ = [
    "AccountStore",
    "PlatformConfigClient",
    "PlatformTokenClient",
    "SQLiteStore",
    "TokenStore",
]
