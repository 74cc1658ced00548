"""
Domain models for provisioned accounts and the activity log.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class AccountStatus(str, Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"
    DEPROVISIONED = "deprovisioned"


class Account(BaseModel):
    """A single add-on resource provisioned through the marketplace."""

    id: int
    resource_uuid: str
    name: str
    email: str
    app_slug: str
    plan_slug: str
    language: Optional[str] = None
    email_preference: bool = False
    source: str = "DigitalOcean"
    status: AccountStatus = AccountStatus.ACTIVE
    license_key: str
    created_at: datetime
    modified_at: datetime


class Activity(BaseModel):
    """A platform notification recorded against an account."""

    id: int
    account_id: int
    resource_uuid: str
    source: str
    title: str
    body: str
    created_at: datetime


__all__ = ["Account", "AccountStatus", "Activity"]
