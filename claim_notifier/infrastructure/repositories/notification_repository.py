"""Persistence helpers for in-app notification entities."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from sqlalchemy.orm import Session

from claim_notifier.domain.entities import Notification
from claim_notifier.infrastructure.models import NotificationModel
from claim_notifier.utils import ensure_app_naive_datetime, now_in_app_timezone

TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 500


class NotificationRepository:
    """Write in-app notification rows; reading them belongs to the dashboard API."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def bulk_create(self, notifications: Iterable[Notification], *, commit: bool = True) -> int:
        """Persist ``notifications`` in a single transaction and return how many.

        With ``commit=False`` the rows are only flushed, leaving the transaction
        to whoever owns the session.
        """

        created_at = ensure_app_naive_datetime(now_in_app_timezone())
        models = [self._to_model(item, created_at) for item in notifications]
        if not models:
            return 0
        self.session.add_all(models)
        if commit:
            self.session.commit()
        else:
            self.session.flush()
        return len(models)

    @staticmethod
    def _to_model(notification: Notification, default_created_at: datetime | None) -> NotificationModel:
        return NotificationModel(
            tenant_id=notification.tenant_id,
            user_id=notification.user_id,
            title=notification.title[:TITLE_MAX_LENGTH],
            description=notification.description[:DESCRIPTION_MAX_LENGTH],
            type=notification.type,
            created_at=ensure_app_naive_datetime(notification.created_at) or default_created_at,
            read_at=ensure_app_naive_datetime(notification.read_at),
        )


__all__ = ["NotificationRepository"]
