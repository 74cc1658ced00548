"""
Helpers for obtaining and refreshing platform OAuth tokens per resource.
"""

from __future__ import annotations

import asyncio
import logging
import time
import weakref
from typing import Awaitable, Callable, Protocol, TypeVar

from app.core.errors import (
    NoCredentialsError,
    TokenEndpointTimeoutError,
)
from app.models.oauth import OAuthTokenRecord, TokenGrant

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TokenRecordStore(Protocol):
    def get(self, resource_uuid: str) -> OAuthTokenRecord | None: ...

    def put(self, record: OAuthTokenRecord) -> None: ...


class TokenGrantClient(Protocol):
    async def exchange_authorization_code(self, code: str) -> TokenGrant: ...

    async def refresh(self, refresh_token: str) -> TokenGrant: ...


class OAuthTokenBroker:
    """
    Hands out currently-valid access tokens for provisioned resources.

    The store is the single source of truth: every call re-reads it and no
    token outlives the call in memory. Refreshes are serialized per resource
    within the process, so concurrent callers holding the same expired token
    wait for one refresh instead of each rotating the refresh token.
    """

    def __init__(
        self,
        *,
        token_store: TokenRecordStore,
        token_client: TokenGrantClient,
        timeout_seconds: float = 10.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = token_store
        self._client = token_client
        self._timeout = timeout_seconds
        self._clock = clock
        self._refresh_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    async def exchange_code(self, code: str, resource_uuid: str) -> OAuthTokenRecord:
        """Trade a provisioning authorization code and persist the token pair."""
        issued_at = self._clock()
        grant = await self._call_upstream(
            self._client.exchange_authorization_code(code)
        )
        record = grant.to_record(resource_uuid, issued_at=issued_at)
        await asyncio.to_thread(self._store.put, record)
        logger.info("Stored initial OAuth tokens for %s", resource_uuid)
        return record

    async def get_access_token(self, resource_uuid: str) -> str:
        """Return a valid access token, refreshing it first when expired."""
        record = await self._read(resource_uuid)
        if not record.is_expired(self._clock()):
            return record.access_token

        lock = self._lock_for(resource_uuid)
        async with lock:
            # Another caller may have refreshed while we waited for the lock.
            record = await self._read(resource_uuid)
            if not record.is_expired(self._clock()):
                return record.access_token
            record = await self._refresh(record)
        return record.access_token

    async def _read(self, resource_uuid: str) -> OAuthTokenRecord:
        record = await asyncio.to_thread(self._store.get, resource_uuid)
        if record is None:
            raise NoCredentialsError(
                f"No OAuth tokens stored for resource {resource_uuid}."
            )
        return record

    async def _refresh(self, record: OAuthTokenRecord) -> OAuthTokenRecord:
        logger.info("Refreshing expired access token for %s", record.resource_uuid)
        issued_at = self._clock()
        grant = await self._call_upstream(self._client.refresh(record.refresh_token))
        refreshed = grant.to_record(record.resource_uuid, issued_at=issued_at)
        await asyncio.to_thread(self._store.put, refreshed)
        return refreshed

    def _lock_for(self, resource_uuid: str) -> asyncio.Lock:
        lock = self._refresh_locks.get(resource_uuid)
        if lock is None:
            lock = asyncio.Lock()
            self._refresh_locks[resource_uuid] = lock
        return lock

    async def _call_upstream(self, call: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(call, timeout=self._timeout)
        except asyncio.TimeoutError as exc:
            raise TokenEndpointTimeoutError(
                f"Token endpoint did not respond within {self._timeout}s."
            ) from exc


__all__ = ["OAuthTokenBroker", "TokenGrantClient", "TokenRecordStore"]
