"""Public schema exports."""

from .auth import AuthorizeRequest, AuthorizeResponse, SsoRequest
from .notifications import Notification, UnrecognizedNotification, parse_notification
from .provisioning import (
    ErrorResponse,
    OAuthGrant,
    PlanChangeRequest,
    ProvisioningConfig,
    ProvisioningMetadata,
    ProvisioningRequest,
    ProvisioningResponse,
)

__all__ = [
    "AuthorizeRequest",
    "AuthorizeResponse",
    "ErrorResponse",
    "Notification",
    "OAuthGrant",
    "PlanChangeRequest",
    "ProvisioningConfig",
    "ProvisioningMetadata",
    "ProvisioningRequest",
    "ProvisioningResponse",
    "SsoRequest",
    "UnrecognizedNotification",
    "parse_notification",
]
