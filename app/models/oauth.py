"""
Domain models for OAuth token persistence.
"""

from pydantic import BaseModel, Field


class OAuthTokenRecord(BaseModel):
    """Access/refresh token pair stored for a single provisioned resource."""

    resource_uuid: str = Field(..., description="Platform identifier of the resource.")
    access_token: str
    refresh_token: str
    expires_at: int = Field(
        ...,
        description="Epoch seconds at which the stored access token stops working.",
    )

    def is_expired(self, now: float) -> bool:
        return self.expires_at <= now


class TokenGrant(BaseModel):
    """Successful response body from the platform token endpoint."""

    access_token: str = Field(..., min_length=1)
    refresh_token: str = Field(..., min_length=1)
    expires_in: int = Field(..., gt=0)
    token_type: str = "bearer"

    def to_record(self, resource_uuid: str, *, issued_at: float) -> OAuthTokenRecord:
        return OAuthTokenRecord(
            resource_uuid=resource_uuid,
            access_token=self.access_token,
            refresh_token=self.refresh_token,
            expires_at=int(issued_at) + self.expires_in,
        )


__all__ = ["OAuthTokenRecord", "TokenGrant"]
