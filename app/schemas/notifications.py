"""
Platform notification payloads modelled as a tagged union on ``type``.

Each known notification kind has its own model; anything else parses into
``UnrecognizedNotification`` so callers always receive a value they can
dispatch on.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

SUSPENDED = "resources.suspended"
REACTIVATED = "resources.reactivated"
DEPROVISIONING_FAILED = "resources.deprovisioning.failed"
UPDATED = "resources.updated"


class ResourceListPayload(BaseModel):
    resource_uuids: List[str] = Field(default_factory=list, alias="resources_uuids")


class ResourceState(BaseModel):
    uuid: str
    name: Optional[str] = None
    state: Optional[str] = None
    created_at: Optional[int] = None
    updated_at: Optional[int] = None


class PlanState(BaseModel):
    display_name: Optional[str] = None
    slug: Optional[str] = None
    created_at: Optional[int] = None
    updated_at: Optional[int] = None


class UpdatedPayload(BaseModel):
    resource: ResourceState
    plan: Optional[PlanState] = None


class _NotificationBase(BaseModel):
    created_at: int = 0

    @field_validator("payload", mode="before", check_fields=False)
    @classmethod
    def _decode_payload(cls, value: Any) -> Any:
        """The platform sends the payload as a JSON-encoded string."""
        if isinstance(value, str):
            return json.loads(value)
        return value

    def payload_json(self) -> str:
        payload = getattr(self, "payload")
        if isinstance(payload, BaseModel):
            return payload.model_dump_json(by_alias=True)
        return json.dumps(payload)


class SuspendedNotification(_NotificationBase):
    type: Literal["resources.suspended"]
    payload: ResourceListPayload


class ReactivatedNotification(_NotificationBase):
    type: Literal["resources.reactivated"]
    payload: ResourceListPayload


class DeprovisioningFailedNotification(_NotificationBase):
    type: Literal["resources.deprovisioning.failed"]
    payload: ResourceListPayload


class UpdatedNotification(_NotificationBase):
    type: Literal["resources.updated"]
    payload: UpdatedPayload


class UnrecognizedNotification(_NotificationBase):
    type: str = ""
    payload: Any = None


Notification = Union[
    SuspendedNotification,
    ReactivatedNotification,
    DeprovisioningFailedNotification,
    UpdatedNotification,
    UnrecognizedNotification,
]

_NOTIFICATION_MODELS: Dict[str, type[_NotificationBase]] = {
    SUSPENDED: SuspendedNotification,
    REACTIVATED: ReactivatedNotification,
    DEPROVISIONING_FAILED: DeprovisioningFailedNotification,
    UPDATED: UpdatedNotification,
}


def parse_notification(data: Dict[str, Any]) -> Notification:
    """Validate ``data`` against the model selected by its ``type`` tag."""
    tag = data.get("type")
    model: type[_NotificationBase] = UnrecognizedNotification
    if isinstance(tag, str):
        model = _NOTIFICATION_MODELS.get(tag, UnrecognizedNotification)
    return model.model_validate(data)  # type: ignore[return-value]


__all__ = [
    "DEPROVISIONING_FAILED",
    "DeprovisioningFailedNotification",
    "Notification",
    "PlanState",
    "REACTIVATED",
    "ReactivatedNotification",
    "ResourceListPayload",
    "ResourceState",
    "SUSPENDED",
    "SuspendedNotification",
    "UPDATED",
    "UnrecognizedNotification",
    "UpdatedNotification",
    "UpdatedPayload",
    "parse_notification",
]
