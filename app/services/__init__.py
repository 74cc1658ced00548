"""Service layer exports."""

from .accounts import AccountService
from .config_updates import ConfigUpdateService
from .notifications import NotificationService
from .oauth_tokens import OAuthTokenBroker
from .session_tokens import SessionClaims, SessionTokenIssuer
from .sso import SsoValidator
from .token_cipher import TokenCipherService

__all__ = [
    "AccountService",
    "ConfigUpdateService",
    "NotificationService",
    "OAuthTokenBroker",
    "SessionClaims",
    "SessionTokenIssuer",
    "SsoValidator",
    "TokenCipherService",
]
