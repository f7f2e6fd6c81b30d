from datetime import datetime
from enum import Enum
from typing import List

from pydantic import BaseModel, Field


class Capability(str, Enum):
    GRANTED = "granted"
    DENIED = "denied"
    UNSUPPORTED = "unsupported"


class ReminderEvent(BaseModel):
    title: str
    body: str
    count: int
    assignment_ids: List[str] = Field(default_factory=list)


class NotificationMessage(BaseModel):
    """Payload pubblicato sul broker."""
    tag: str
    title: str
    body: str
    requireInteraction: bool = True
    sentAt: datetime


class PermissionStatus(BaseModel):
    permission: Capability
    supported: bool
    # False finché il permesso non è mai stato chiesto: "denied" allora vuol dire "non ancora concesso"
    requested: bool = False


class ReminderCheckResult(BaseModel):
    permission: Capability
    notified: bool
    event: ReminderEvent | None = None
