"""Persistence of per-resource OAuth token pairs."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from app.clients.sqlite_store import SQLiteStore
from app.models.oauth import OAuthTokenRecord

if TYPE_CHECKING:
    from app.services.token_cipher import TokenCipherService


class TokenStore:
    """
    One row per resource UUID holding the current access/refresh pair.

    Both tokens are encrypted at rest. ``put`` is an upsert, so repeated or
    concurrent writes for the same resource leave exactly one row behind.
    """

    def __init__(self, store: SQLiteStore, cipher: TokenCipherService) -> None:
        self._store = store
        self._cipher = cipher

    def get(self, resource_uuid: str) -> Optional[OAuthTokenRecord]:
        with self._store.connection() as conn:
            row = conn.execute(
                """
                SELECT access_token_encrypted, refresh_token_encrypted, expires_at
                FROM tokens WHERE resource_uuid = ?
                """,
                (resource_uuid,),
            ).fetchone()
        if row is None:
            return None
        return OAuthTokenRecord(
            resource_uuid=resource_uuid,
            access_token=self._cipher.decrypt(row["access_token_encrypted"]),
            refresh_token=self._cipher.decrypt(row["refresh_token_encrypted"]),
            expires_at=row["expires_at"],
        )

    def put(self, record: OAuthTokenRecord) -> None:
        with self._store.connection() as conn:
            conn.execute(
                """
                INSERT INTO tokens (
                    resource_uuid,
                    access_token_encrypted,
                    refresh_token_encrypted,
                    expires_at,
                    updated_at
                )
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(resource_uuid) DO UPDATE SET
                    access_token_encrypted = excluded.access_token_encrypted,
                    refresh_token_encrypted = excluded.refresh_token_encrypted,
                    expires_at = excluded.expires_at,
                    updated_at = excluded.updated_at
                """,
                (
                    record.resource_uuid,
                    self._cipher.encrypt(record.access_token),
                    self._cipher.encrypt(record.refresh_token),
                    record.expires_at,
                    datetime.now(timezone.utc).isoformat(),
                ),
            )

    def delete(self, resource_uuid: str) -> bool:
        with self._store.connection() as conn:
            deleted = conn.execute(
                "DELETE FROM tokens WHERE resource_uuid = ?", (resource_uuid,)
            ).rowcount
        return deleted > 0


__all__ = ["TokenStore"]
