"""Domain entity representing an in-app notification."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

NOTIFICATION_TYPE_INFO = "info"
NOTIFICATION_TYPE_SUCCESS = "success"
NOTIFICATION_TYPE_WARNING = "warning"
NOTIFICATION_TYPE_ERROR = "error"

NOTIFICATION_TYPES = (
    NOTIFICATION_TYPE_INFO,
    NOTIFICATION_TYPE_SUCCESS,
    NOTIFICATION_TYPE_WARNING,
    NOTIFICATION_TYPE_ERROR,
)


@dataclass
class Notification:
    """Information message shown to a member inside the dashboard."""

    id: int | None
    tenant_id: int
    user_id: int
    title: str
    description: str
    type: str = NOTIFICATION_TYPE_INFO
    created_at: datetime | None = None
    read_at: datetime | None = None


__all__ = [
    "NOTIFICATION_TYPES",
    "NOTIFICATION_TYPE_ERROR",
    "NOTIFICATION_TYPE_INFO",
    "NOTIFICATION_TYPE_SUCCESS",
    "NOTIFICATION_TYPE_WARNING",
    "Notification",
]
