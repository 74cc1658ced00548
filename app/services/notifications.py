"""Dispatch of platform notifications into the activity log."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Dict, List

from app.clients.account_store import AccountStore
from app.core.errors import PersistenceError, ResourceNotFoundError
from app.models.account import AccountStatus
from app.schemas.notifications import (
    DEPROVISIONING_FAILED,
    REACTIVATED,
    SUSPENDED,
    UPDATED,
    Notification,
)

logger = logging.getLogger(__name__)


class NotificationService:
    """Apply each notification kind and record it as an activity."""

    def __init__(self, account_store: AccountStore) -> None:
        self._accounts = account_store
        self._handlers: Dict[str, Callable[[Notification], Awaitable[List[str]]]] = {
            SUSPENDED: self._on_suspended,
            REACTIVATED: self._on_reactivated,
            DEPROVISIONING_FAILED: self._on_deprovisioning_failed,
            UPDATED: self._on_updated,
        }

    async def handle(self, notification: Notification) -> List[str]:
        """Process ``notification`` and return per-resource error messages."""
        logger.info("Got notification of type %s", notification.type)
        handler = self._handlers.get(notification.type)
        if handler is None:
            logger.info("Unrecognized notification type %r", notification.type)
            return ["unrecognized notification type"]
        return await handler(notification)

    async def _on_suspended(self, notification: Notification) -> List[str]:
        return await self._apply_to_resources(notification, AccountStatus.SUSPENDED)

    async def _on_reactivated(self, notification: Notification) -> List[str]:
        return await self._apply_to_resources(notification, AccountStatus.ACTIVE)

    async def _on_deprovisioning_failed(self, notification: Notification) -> List[str]:
        return await self._apply_to_resources(notification, None)

    async def _on_updated(self, notification: Notification) -> List[str]:
        payload = notification.payload
        resource_uuid = payload.resource.uuid
        try:
            if payload.plan is not None and payload.plan.slug:
                await asyncio.to_thread(
                    self._accounts.update_plan, resource_uuid, payload.plan.slug
                )
            await self._record(notification, resource_uuid)
        except (ResourceNotFoundError, PersistenceError) as exc:
            logger.error("Error applying update for %s: %s", resource_uuid, exc)
            return [f"{resource_uuid}: {exc}"]
        return []

    async def _apply_to_resources(
        self, notification: Notification, status: AccountStatus | None
    ) -> List[str]:
        errors: List[str] = []
        for resource_uuid in notification.payload.resource_uuids:
            try:
                if status is not None:
                    await asyncio.to_thread(
                        self._accounts.set_status, resource_uuid, status
                    )
                await self._record(notification, resource_uuid)
            except (ResourceNotFoundError, PersistenceError) as exc:
                logger.error(
                    "Error writing notification for %s: %s", resource_uuid, exc
                )
                errors.append(f"{resource_uuid}: {exc}")
        return errors

    async def _record(self, notification: Notification, resource_uuid: str) -> None:
        await asyncio.to_thread(
            self._accounts.record_activity,
            resource_uuid,
            title=notification.type,
            body=notification.payload_json(),
        )


__all__ = ["NotificationService"]
