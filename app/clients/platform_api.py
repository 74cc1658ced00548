"""
Outbound clients for the marketplace platform API.

``PlatformTokenClient`` trades authorization codes and refresh tokens at the
platform token endpoint. ``PlatformConfigClient`` pushes updated resource
configuration (the license key) using a resource-scoped access token.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from app.core.errors import (
    PlatformAPIError,
    TokenEndpointTimeoutError,
    UpstreamTokenError,
)
from app.models.oauth import TokenGrant
from app.utils.http import RetryConfig, request_with_retry

logger = logging.getLogger(__name__)


class PlatformTokenClient:
    """Exchange authorization codes and refresh tokens for token grants."""

    def __init__(
        self,
        *,
        token_endpoint: str,
        client_secret: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not client_secret:
            raise ValueError("OAuth client secret must be provided.")
        self._token_endpoint = token_endpoint
        self._client_secret = client_secret
        self._timeout = timeout
        self._transport = transport

    async def exchange_authorization_code(self, code: str) -> TokenGrant:
        """Trade the code issued at provisioning for an access/refresh pair."""
        return await self._request_token(
            {
                "grant_type": "authorization_code",
                "code": code,
                "client_secret": self._client_secret,
            }
        )

    async def refresh(self, refresh_token: str) -> TokenGrant:
        """Trade a refresh token for a new, rotated access/refresh pair."""
        return await self._request_token(
            {
                "grant_type": "refresh_token",
                "refresh_token": refresh_token,
                "client_secret": self._client_secret,
            }
        )

    async def _request_token(self, payload: Dict[str, str]) -> TokenGrant:
        grant_type = payload["grant_type"]
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(self._token_endpoint, json=payload)
        except httpx.TimeoutException as exc:
            raise TokenEndpointTimeoutError(
                f"Token endpoint timed out during {grant_type} grant."
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamTokenError(
                f"Token endpoint unreachable during {grant_type} grant: {exc}"
            ) from exc

        if not response.is_success:
            logger.warning(
                "Token endpoint rejected %s grant with %s: %s",
                grant_type,
                response.status_code,
                response.text[:500],
            )
            raise UpstreamTokenError(
                f"Token endpoint returned {response.status_code}.",
                status_code=response.status_code,
            )

        try:
            return TokenGrant.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise UpstreamTokenError(
                f"Unparsable token response for {grant_type} grant.",
                status_code=response.status_code,
            ) from exc


class PlatformConfigClient:
    """Send configuration updates for a resource back to the platform."""

    CONFIG_PATH = "/v2/add-ons/resources/{resource_uuid}/config"

    def __init__(
        self,
        *,
        api_base_url: str,
        timeout: float = 10.0,
        retry_config: Optional[RetryConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = api_base_url.rstrip("/")
        self._timeout = timeout
        self._retry_config = retry_config
        self._transport = transport

    async def update_config(
        self, *, resource_uuid: str, access_token: str, config: Dict[str, Any]
    ) -> None:
        url = self._base_url + self.CONFIG_PATH.format(resource_uuid=resource_uuid)
        headers = {"Authorization": f"Bearer {access_token}"}
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await request_with_retry(
                    client.patch,
                    url,
                    json={"config": config},
                    headers=headers,
                    retry_config=self._retry_config,
                )
        except httpx.HTTPError as exc:
            raise PlatformAPIError(f"Config update request failed: {exc}") from exc

        if response.status_code >= 400:
            logger.warning(
                "Config update for %s rejected with %s: %s",
                resource_uuid,
                response.status_code,
                response.text[:500],
            )
            raise PlatformAPIError(
                f"Config update returned {response.status_code}."
            )


__all__ = ["PlatformConfigClient", "PlatformTokenClient"]
