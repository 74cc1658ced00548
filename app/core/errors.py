"""Exception taxonomy shared by the services and the HTTP layer."""

from __future__ import annotations


class MarketplaceError(Exception):
    """Base class for errors raised by the add-on backend."""


class MalformedInputError(MarketplaceError):
    """Raised when a request carries values that cannot be parsed."""


class UnauthorizedError(MarketplaceError):
    """Raised when a signature, staleness window or session token check fails."""


class InvalidSessionTokenError(UnauthorizedError):
    """Raised when a front-end session token is tampered with or expired."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Invalid session token: {reason}")


class NoCredentialsError(MarketplaceError):
    """Raised when a resource never completed the authorization code exchange."""


class UpstreamTokenError(MarketplaceError):
    """Raised when the platform token endpoint fails or returns garbage."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class TokenEndpointTimeoutError(UpstreamTokenError):
    """Raised when the token endpoint does not answer before the deadline."""


class PlatformAPIError(MarketplaceError):
    """Raised when a call to the platform resource API fails."""


class PersistenceError(MarketplaceError):
    """Raised when the backing store cannot be read or written."""


class ResourceNotFoundError(MarketplaceError):
    """Raised when no account exists for a resource UUID."""


class ResourceConflictError(MarketplaceError):
    """Raised when a resource UUID has already been provisioned."""


__all__ = [
    "InvalidSessionTokenError",
    "MalformedInputError",
    "MarketplaceError",
    "NoCredentialsError",
    "PersistenceError",
    "PlatformAPIError",
    "ResourceConflictError",
    "ResourceNotFoundError",
    "TokenEndpointTimeoutError",
    "UnauthorizedError",
    "UpstreamTokenError",
]
