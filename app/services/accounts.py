"""
Provisioning lifecycle for marketplace resources.
"""

from __future__ import annotations

import asyncio
import logging
import uuid

from app.clients.account_store import AccountStore
from app.clients.token_store import TokenStore
from app.core.errors import PersistenceError, UpstreamTokenError
from app.models.account import AccountStatus
from app.schemas.provisioning import (
    ProvisioningConfig,
    ProvisioningRequest,
    ProvisioningResponse,
)
from app.services.oauth_tokens import OAuthTokenBroker

logger = logging.getLogger(__name__)


def new_license_key() -> str:
    return str(uuid.uuid4())


class AccountService:
    """Create, retire and re-plan accounts in response to platform callbacks."""

    def __init__(
        self,
        *,
        account_store: AccountStore,
        token_store: TokenStore,
        token_broker: OAuthTokenBroker,
    ) -> None:
        self._accounts = account_store
        self._tokens = token_store
        self._broker = token_broker

    async def provision(self, request: ProvisioningRequest) -> ProvisioningResponse:
        """
        Create the account, then trade the provisioning code for tokens.

        A failed code exchange is logged rather than raised: the platform has
        already committed the resource and the access token can be obtained
        on first real use.
        """
        account = await asyncio.to_thread(
            self._accounts.create,
            resource_uuid=request.resource_uuid,
            name=request.creator_id,
            email=request.email,
            app_slug=request.app_slug,
            plan_slug=request.plan_slug,
            license_key=new_license_key(),
            language=request.metadata.language,
            email_preference=request.metadata.email_preference,
        )
        logger.info("Provisioned account %s", account.resource_uuid)

        if request.oauth_grant is not None:
            try:
                await self._broker.exchange_code(
                    request.oauth_grant.code, request.resource_uuid
                )
            except (UpstreamTokenError, PersistenceError) as exc:
                logger.warning(
                    "Authorization code exchange failed for %s: %s",
                    request.resource_uuid,
                    exc,
                )
        else:
            logger.warning(
                "Provisioning request for %s had no oauth_grant",
                account.resource_uuid,
            )

        return ProvisioningResponse(
            id=account.resource_uuid,
            config=ProvisioningConfig(license_key=account.license_key),
        )

    async def deprovision(self, resource_uuid: str) -> None:
        """Mark the account deprovisioned and drop its platform credentials."""
        await asyncio.to_thread(
            self._accounts.set_status, resource_uuid, AccountStatus.DEPROVISIONED
        )
        await asyncio.to_thread(self._tokens.delete, resource_uuid)
        logger.info("Deprovisioned account %s", resource_uuid)

    async def change_plan(self, resource_uuid: str, plan_slug: str) -> None:
        await asyncio.to_thread(self._accounts.update_plan, resource_uuid, plan_slug)
        logger.info("Moved account %s to plan %s", resource_uuid, plan_slug)


__all__ = ["AccountService", "new_license_key"]
