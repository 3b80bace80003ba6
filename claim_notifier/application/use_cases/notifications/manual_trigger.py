"""On-demand runs of the scheduled notification ticks."""

from __future__ import annotations

import logging

from claim_notifier.domain.entities import (
    FREQUENCY_DAILY,
    FREQUENCY_WEEKLY,
    DispatchSummary,
    NotificationKind,
    NotificationPreference,
    Subscription,
    SummaryPayload,
)
from claim_notifier.domain.exceptions import NotFoundError
from claim_notifier.infrastructure.repositories import (
    ClaimRepository,
    MembershipRepository,
    PreferenceRepository,
    TenantRepository,
)

from .content import generate
from .due import slot_for_preference
from .scheduler import NotificationScheduler

logger = logging.getLogger(__name__)


class ManualTriggerGateway:
    """Run ticks on demand, optionally scoped to one tenant or member.

    Scoped runs bypass the preferred-time check but still respect sent
    markers unless ``force`` is given. Unscoped runs behave exactly like a
    scheduled tick at the current time.
    """

    def __init__(self, scheduler: NotificationScheduler) -> None:
        self._scheduler = scheduler
        self._session_factory = scheduler.session_factory

    def trigger_daily(
        self,
        tenant_id: int | None = None,
        user_id: int | None = None,
        force: bool = False,
    ) -> DispatchSummary:
        return self._trigger(NotificationKind.DAILY, tenant_id, user_id, force)

    def trigger_weekly(
        self, tenant_id: int | None = None, force: bool = False
    ) -> DispatchSummary:
        return self._trigger(NotificationKind.WEEKLY, tenant_id, None, force)

    def trigger_sla(self, tenant_id: int | None = None) -> DispatchSummary:
        if tenant_id is not None:
            self._ensure_scope(tenant_id, None)
        return self._scheduler.tick(NotificationKind.SLA, tenant_id=tenant_id)

    def preview(
        self, tenant_id: int, user_id: int, kind: NotificationKind = NotificationKind.DAILY
    ) -> SummaryPayload:
        """Build the digest ``user_id`` would receive now, without sending it.

        Raises:
            NotFoundError: unknown tenant or user outside the tenant.
            NoDataError: nothing to report for the current period.
        """

        kind = NotificationKind(kind)
        if not kind.is_digest:
            raise ValueError("Only digests can be previewed")
        self._ensure_scope(tenant_id, user_id)

        session = self._session_factory()
        try:
            tenant = TenantRepository(session).get(tenant_id)
            membership = MembershipRepository(session).get(tenant_id, user_id)
            reference = self._scheduler.now()
            preference = PreferenceRepository(session).get(tenant_id, user_id)
            if preference is None:
                preference = NotificationPreference(
                    id=None, user_id=user_id, tenant_id=tenant_id
                )
            window = slot_for_preference(preference, tenant, kind, reference).window
            claims = ClaimRepository(session, sla_days=self._scheduler.settings.sla_days)
            return generate(
                claims, tenant, membership, kind, window, settings=self._scheduler.settings
            )
        finally:
            session.close()

    def list_subscribers(self, tenant_id: int, frequency: str) -> list[Subscription]:
        if frequency not in (FREQUENCY_DAILY, FREQUENCY_WEEKLY):
            raise ValueError(f"Unsupported digest frequency '{frequency}'")
        self._ensure_scope(tenant_id, None)
        session = self._session_factory()
        try:
            return PreferenceRepository(session).list_subscribers(tenant_id, frequency)
        finally:
            session.close()

    def _trigger(
        self,
        kind: NotificationKind,
        tenant_id: int | None,
        user_id: int | None,
        force: bool,
    ) -> DispatchSummary:
        if user_id is not None and tenant_id is None:
            raise ValueError("A tenant is required to trigger a single user")
        if tenant_id is None:
            if force:
                logger.warning("Ignoring force for unscoped %s trigger", kind.value)
            return self._scheduler.tick(kind)

        self._ensure_scope(tenant_id, user_id)
        logger.info(
            "Manual %s trigger for tenant %s user %s (force=%s)",
            kind.value,
            tenant_id,
            user_id,
            force,
        )
        return self._scheduler.tick(
            kind,
            tenant_id=tenant_id,
            user_id=user_id,
            bypass_due=True,
            force=force,
        )

    def _ensure_scope(self, tenant_id: int, user_id: int | None) -> None:
        session = self._session_factory()
        try:
            if TenantRepository(session).get(tenant_id) is None:
                raise NotFoundError("Tenant", tenant_id)
            memberships = MembershipRepository(session)
            if user_id is not None and memberships.get(tenant_id, user_id) is None:
                raise NotFoundError("User", user_id)
        finally:
            session.close()


__all__ = ["ManualTriggerGateway"]
