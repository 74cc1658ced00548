"""Account and activity rows backing the provisioning lifecycle."""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from typing import Optional

from app.clients.sqlite_store import SQLiteStore
from app.core.errors import (
    PersistenceError,
    ResourceConflictError,
    ResourceNotFoundError,
)
from app.models.account import Account, AccountStatus, Activity


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _row_to_account(row: sqlite3.Row) -> Account:
    return Account(
        id=row["id"],
        resource_uuid=row["resource_uuid"],
        name=row["name"],
        email=row["email"],
        app_slug=row["app_slug"],
        plan_slug=row["plan_slug"],
        language=row["language"],
        email_preference=bool(row["email_preference"]),
        source=row["source"],
        status=AccountStatus(row["status"]),
        license_key=row["license_key"],
        created_at=datetime.fromisoformat(row["created_at"]),
        modified_at=datetime.fromisoformat(row["modified_at"]),
    )


class AccountStore:
    """CRUD helpers over the ``accounts`` and ``activities`` tables."""

    def __init__(self, store: SQLiteStore) -> None:
        self._store = store

    def create(
        self,
        *,
        resource_uuid: str,
        name: str,
        email: str,
        app_slug: str,
        plan_slug: str,
        license_key: str,
        language: Optional[str] = None,
        email_preference: bool = False,
        source: str = "DigitalOcean",
    ) -> Account:
        timestamp = _now()
        try:
            with self._store.connection() as conn:
                conn.execute(
                    """
                    INSERT INTO accounts (
                        resource_uuid, name, email, app_slug, plan_slug, language,
                        email_preference, source, status, license_key,
                        created_at, modified_at
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        resource_uuid,
                        name,
                        email,
                        app_slug,
                        plan_slug,
                        language,
                        int(email_preference),
                        source,
                        AccountStatus.ACTIVE.value,
                        license_key,
                        timestamp,
                        timestamp,
                    ),
                )
        except sqlite3.IntegrityError as exc:
            raise ResourceConflictError(
                f"Resource {resource_uuid} is already provisioned."
            ) from exc
        account = self.get(resource_uuid)
        if account is None:
            raise PersistenceError(
                f"Account {resource_uuid} was not readable after insert."
            )
        return account

    def get(self, resource_uuid: str) -> Optional[Account]:
        with self._store.connection() as conn:
            row = conn.execute(
                "SELECT * FROM accounts WHERE resource_uuid = ?", (resource_uuid,)
            ).fetchone()
        return _row_to_account(row) if row else None

    def _update(self, resource_uuid: str, column: str, value: object) -> None:
        with self._store.connection() as conn:
            updated = conn.execute(
                f"UPDATE accounts SET {column} = ?, modified_at = ? "
                "WHERE resource_uuid = ?",
                (value, _now(), resource_uuid),
            ).rowcount
        if updated == 0:
            raise ResourceNotFoundError(f"Resource {resource_uuid} not found.")

    def set_status(self, resource_uuid: str, status: AccountStatus) -> None:
        self._update(resource_uuid, "status", status.value)

    def update_plan(self, resource_uuid: str, plan_slug: str) -> None:
        self._update(resource_uuid, "plan_slug", plan_slug)

    def update_license_key(self, resource_uuid: str, license_key: str) -> None:
        self._update(resource_uuid, "license_key", license_key)

    def record_activity(
        self, resource_uuid: str, *, title: str, body: str, source: str = "DigitalOcean"
    ) -> Activity:
        account = self.get(resource_uuid)
        if account is None:
            raise ResourceNotFoundError(f"Resource {resource_uuid} not found.")
        created_at = _now()
        with self._store.connection() as conn:
            activity_id = conn.execute(
                """
                INSERT INTO activities (
                    account_id, resource_uuid, source, title, body, created_at
                )
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (account.id, resource_uuid, source, title, body, created_at),
            ).lastrowid
        return Activity(
            id=activity_id,
            account_id=account.id,
            resource_uuid=resource_uuid,
            source=source,
            title=title,
            body=body,
            created_at=datetime.fromisoformat(created_at),
        )

    def list_activities(self, resource_uuid: Optional[str] = None) -> list[Activity]:
        query = "SELECT * FROM activities"
        params: tuple = ()
        if resource_uuid:
            query += " WHERE resource_uuid = ?"
            params = (resource_uuid,)
        query += " ORDER BY id"
        with self._store.connection() as conn:
            rows = conn.execute(query, params).fetchall()
        return [
            Activity(
                id=row["id"],
                account_id=row["account_id"],
                resource_uuid=row["resource_uuid"],
                source=row["source"],
                title=row["title"],
                body=row["body"],
                created_at=datetime.fromisoformat(row["created_at"]),
            )
            for row in rows
        ]


__all__ = ["AccountStore"]
