"""Rotate a resource's license key and report it to the platform."""

from __future__ import annotations

import asyncio
import logging

from app.clients.account_store import AccountStore
from app.clients.platform_api import PlatformConfigClient
from app.core.errors import ResourceNotFoundError
from app.services.accounts import new_license_key
from app.services.oauth_tokens import OAuthTokenBroker

logger = logging.getLogger(__name__)


class ConfigUpdateService:
    """Issue a fresh license key and push it as the resource's config."""

    def __init__(
        self,
        *,
        account_store: AccountStore,
        token_broker: OAuthTokenBroker,
        config_client: PlatformConfigClient,
    ) -> None:
        self._accounts = account_store
        self._broker = token_broker
        self._config = config_client

    async def rotate_license_key(self, resource_uuid: str) -> str:
        account = await asyncio.to_thread(self._accounts.get, resource_uuid)
        if account is None:
            raise ResourceNotFoundError(f"Resource {resource_uuid} not found.")

        logger.info("Searching for tokens for %s", resource_uuid)
        access_token = await self._broker.get_access_token(resource_uuid)

        license_key = new_license_key()
        # Only keep the key once the platform has accepted it.
        await self._config.update_config(
            resource_uuid=resource_uuid,
            access_token=access_token,
            config={"LICENSE_KEY": license_key},
        )
        await asyncio.to_thread(
            self._accounts.update_license_key, resource_uuid, license_key
        )
        logger.info("Pushed rotated license key for %s", resource_uuid)
        return license_key


__all__ = ["ConfigUpdateService"]
