"""Notification schema (status messages shown above the lists)."""

from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field


class NotificationType(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"
    WARNING = "warning"


class Notification(BaseModel):
    """Single user-facing message."""
    id: str = Field(default_factory=lambda: uuid4().hex)
    type: NotificationType
    content: str
    dismissible: bool = True


class NotificationListResponse(BaseModel):
    notifications: list[Notification]
