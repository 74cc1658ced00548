"""
Pydantic models for platform provisioning and plan change callbacks.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ProvisioningMetadata(BaseModel):
    """Customizable metadata a platform user sets on the resource."""

    language: Optional[str] = None
    email_preference: bool = False


class OAuthGrant(BaseModel):
    """Authorization code that can be exchanged for an access token."""

    type: str = "code"
    code: str = Field(..., min_length=1)
    expires_at: Optional[int] = None


class ProvisioningRequest(BaseModel):
    """Sent by the platform when a user adds the add-on to their team."""

    model_config = ConfigDict(populate_by_name=True)

    app_slug: str
    plan_slug: str
    resource_uuid: str = Field(..., alias="uuid", min_length=1)
    metadata: ProvisioningMetadata = Field(default_factory=ProvisioningMetadata)
    email: str = Field(
        ...,
        description="Obfuscated address that forwards to the user's email.",
    )
    creator_id: str = Field(
        ..., description="Obfuscated identifier of the provisioning team."
    )
    oauth_grant: Optional[OAuthGrant] = None


class ProvisioningConfig(BaseModel):
    """Configuration variables displayed to the user on the platform."""

    model_config = ConfigDict(populate_by_name=True)

    license_key: str = Field(..., alias="LICENSE_KEY")


class ProvisioningResponse(BaseModel):
    """Returned to the platform once the account exists."""

    id: str
    config: ProvisioningConfig
    message: str = "Account provisioning succeeded!"


class PlanChangeRequest(BaseModel):
    plan_slug: str = Field(..., min_length=1)


class ErrorResponse(BaseModel):
    message: str


__all__ = [
    "ErrorResponse",
    "OAuthGrant",
    "PlanChangeRequest",
    "ProvisioningConfig",
    "ProvisioningMetadata",
    "ProvisioningRequest",
    "ProvisioningResponse",
]
