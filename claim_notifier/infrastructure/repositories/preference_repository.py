"""Persistence layer for digest preferences and their sent markers."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from claim_notifier.domain.entities import (
    NotificationKind,
    NotificationPreference,
    Subscription,
)
from claim_notifier.infrastructure.models import (
    DigestDispatchModel,
    NotificationPreferenceModel,
    TenantModel,
    UserModel,
    UserTenantModel,
)
from claim_notifier.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_timezone,
)

from .membership_repository import MembershipRepository
from .tenant_repository import TenantRepository
from .user_repository import UserRepository

logger = logging.getLogger(__name__)

DuePredicate = Callable[[Subscription, datetime], bool]


class PreferenceRepository:
    """Provide access to preferences and the idempotency markers of digests."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, tenant_id: int, user_id: int) -> NotificationPreference | None:
        model = self._get_model(tenant_id, user_id)
        return self._to_entity(model) if model else None

    def list_due_candidates(
        self,
        kind: NotificationKind,
        reference_time: datetime,
        *,
        tenant_id: int | None = None,
        user_id: int | None = None,
        is_due: DuePredicate | None = None,
    ) -> list[Subscription]:
        """Return subscriptions to ``kind`` digests of active members.

        When ``is_due`` is provided only subscriptions for which it returns
        ``True`` at ``reference_time`` are kept.
        """

        kind = NotificationKind(kind)
        if not kind.is_digest:
            raise ValueError(f"Preferences do not drive '{kind.value}' notifications")

        subscriptions = self._list_subscriptions(
            kind.value, tenant_id=tenant_id, user_id=user_id
        )
        if is_due is None:
            return subscriptions
        return [item for item in subscriptions if is_due(item, reference_time)]

    def list_subscribers(self, tenant_id: int, frequency: str) -> list[Subscription]:
        return self._list_subscriptions(frequency, tenant_id=tenant_id)

    def has_sent_marker(
        self, tenant_id: int, user_id: int, kind: NotificationKind, period_key: str
    ) -> bool:
        query = (
            self.session.query(DigestDispatchModel.id)
            .filter(DigestDispatchModel.tenant_id == tenant_id)
            .filter(DigestDispatchModel.user_id == user_id)
            .filter(DigestDispatchModel.kind == NotificationKind(kind).value)
            .filter(DigestDispatchModel.period_key == period_key)
        )
        return query.first() is not None

    def mark_sent(
        self,
        tenant_id: int,
        user_id: int,
        kind: NotificationKind,
        period_key: str,
        *,
        sent_at: datetime | None = None,
    ) -> bool:
        """Record a delivered digest for ``period_key``.

        Returns ``False`` when another writer already recorded the same period.
        """

        kind = NotificationKind(kind)
        stored_at = ensure_app_naive_datetime(sent_at or now_in_app_timezone())
        self.session.add(
            DigestDispatchModel(
                tenant_id=tenant_id,
                user_id=user_id,
                kind=kind.value,
                period_key=period_key,
                sent_at=stored_at,
            )
        )
        model = self._get_model(tenant_id, user_id)
        if model is not None:
            if kind is NotificationKind.DAILY:
                model.last_daily_sent_at = stored_at
            else:
                model.last_weekly_sent_at = stored_at
            self.session.add(model)

        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            logger.info(
                "Digest %s %s already recorded for tenant %s user %s",
                kind.value,
                period_key,
                tenant_id,
                user_id,
            )
            return False
        return True

    def _list_subscriptions(
        self,
        frequency: str,
        *,
        tenant_id: int | None = None,
        user_id: int | None = None,
    ) -> list[Subscription]:
        query = (
            self.session.query(NotificationPreferenceModel, UserTenantModel)
            .join(TenantModel, NotificationPreferenceModel.tenant_id == TenantModel.id)
            .join(UserModel, NotificationPreferenceModel.user_id == UserModel.id)
            .join(
                UserTenantModel,
                (UserTenantModel.user_id == NotificationPreferenceModel.user_id)
                & (UserTenantModel.tenant_id == NotificationPreferenceModel.tenant_id),
            )
            .filter(TenantModel.active.is_(True))
            .filter(UserModel.is_active.is_(True))
            .filter(NotificationPreferenceModel.email_notifications_enabled.is_(True))
            .filter(NotificationPreferenceModel.frequency == frequency)
        )
        if tenant_id is not None:
            query = query.filter(NotificationPreferenceModel.tenant_id == tenant_id)
        if user_id is not None:
            query = query.filter(NotificationPreferenceModel.user_id == user_id)
        query = query.order_by(
            NotificationPreferenceModel.tenant_id, NotificationPreferenceModel.user_id
        )

        return [
            Subscription(
                preference=self._to_entity(preference),
                tenant=TenantRepository._to_entity(preference.tenant),
                user=UserRepository._to_entity(preference.user),
                membership=MembershipRepository._to_entity(membership),
            )
            for preference, membership in query.all()
        ]

    def _get_model(
        self, tenant_id: int, user_id: int
    ) -> NotificationPreferenceModel | None:
        return (
            self.session.query(NotificationPreferenceModel)
            .filter(NotificationPreferenceModel.tenant_id == tenant_id)
            .filter(NotificationPreferenceModel.user_id == user_id)
            .first()
        )

    @staticmethod
    def _to_entity(model: NotificationPreferenceModel) -> NotificationPreference:
        return NotificationPreference(
            id=model.id,
            user_id=model.user_id,
            tenant_id=model.tenant_id,
            email_notifications_enabled=bool(model.email_notifications_enabled),
            frequency=model.frequency,
            notification_email=model.notification_email,
            preferred_notification_time=model.preferred_notification_time,
            weekly_anchor_day=model.weekly_anchor_day,
            timezone=model.timezone,
            last_daily_sent_at=ensure_app_timezone(model.last_daily_sent_at),
            last_weekly_sent_at=ensure_app_timezone(model.last_weekly_sent_at),
        )


__all__ = ["DuePredicate", "PreferenceRepository"]
