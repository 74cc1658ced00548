"""Schemas for the SSO hand-off and front-end authorization."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class SsoRequest(BaseModel):
    """Parameters the platform posts when a user opens the add-on."""

    resource_uuid: str = Field(..., min_length=1)
    token: str = Field(..., description="Hex-encoded HMAC of timestamp:resource_uuid.")
    timestamp: str = Field(..., description="Epoch seconds when the platform signed.")
    user_email: Optional[str] = None
    user_id: Optional[str] = None


class AuthorizeRequest(BaseModel):
    """Body the front-end sends to exchange its session token for a login."""

    secret: str = Field(..., description="Session token from the SSO redirect.")


class AuthorizeResponse(BaseModel):
    """Account details returned to the front-end after a successful login."""

    access_token: str
    email: str
    app_slug: str
    plan_slug: str
    created_at: datetime
    modified_at: datetime
    resource_uuid: str
    message: str = "Welcome to your dashboard!"


__all__ = ["AuthorizeRequest", "AuthorizeResponse", "SsoRequest"]
