"""Domain entity describing how a member wants to receive digests."""

from dataclasses import dataclass
from datetime import datetime, time

FREQUENCY_DAILY = "daily"
FREQUENCY_WEEKLY = "weekly"
FREQUENCY_NONE = "none"

FREQUENCIES = (FREQUENCY_DAILY, FREQUENCY_WEEKLY, FREQUENCY_NONE)

DEFAULT_PREFERRED_TIME = time(9, 0)
DEFAULT_WEEKLY_ANCHOR_DAY = 1  # ISO weekday, Monday


@dataclass
class NotificationPreference:
    """Per-membership notification settings."""

    id: int | None
    user_id: int
    tenant_id: int
    email_notifications_enabled: bool = True
    frequency: str = FREQUENCY_NONE
    notification_email: str | None = None
    preferred_notification_time: time = DEFAULT_PREFERRED_TIME
    weekly_anchor_day: int = DEFAULT_WEEKLY_ANCHOR_DAY
    timezone: str | None = None
    last_daily_sent_at: datetime | None = None
    last_weekly_sent_at: datetime | None = None

    def wants(self, frequency: str) -> bool:
        """Return ``True`` when digests of ``frequency`` are enabled."""

        return self.email_notifications_enabled and self.frequency == frequency


__all__ = [
    "DEFAULT_PREFERRED_TIME",
    "DEFAULT_WEEKLY_ANCHOR_DAY",
    "FREQUENCIES",
    "FREQUENCY_DAILY",
    "FREQUENCY_NONE",
    "FREQUENCY_WEEKLY",
    "NotificationPreference",
]
