"""Coordinate content generation, delivery and markers for one unit."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import datetime

from sqlalchemy.orm import Session

from claim_notifier.config import Settings, get_settings
from claim_notifier.domain.entities import (
    NOTIFICATION_TYPE_INFO,
    NOTIFICATION_TYPE_WARNING,
    DispatchOutcome,
    NotificationKind,
    NotificationUnit,
    SlaPayload,
    SummaryPayload,
    User,
)
from claim_notifier.domain.exceptions import NoDataError, NotFoundError
from claim_notifier.infrastructure.database import SessionFactory
from claim_notifier.infrastructure.email import (
    build_sla_subject,
    build_summary_subject,
    render_sla_email,
    render_summary_email,
)
from claim_notifier.infrastructure.notifications import (
    ChannelFactory,
    Delivery,
    Recipient,
    build_channels,
)
from claim_notifier.infrastructure.repositories import (
    ClaimRepository,
    MembershipRepository,
    PreferenceRepository,
    TenantRepository,
    UserRepository,
)
from claim_notifier.utils import now_in_app_timezone

from .content import all_clear_summary, generate

logger = logging.getLogger(__name__)

SLA_TITLE = "SLA en riesgo"

_DIGEST_TITLES = {
    NotificationKind.DAILY: "Resumen diario",
    NotificationKind.WEEKLY: "Resumen semanal",
}


class DispatchCoordinator:
    """Turn a :class:`NotificationUnit` into a :class:`DispatchOutcome`.

    Each call opens its own session from ``session_factory`` so units can run
    on separate threads.
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        *,
        settings: Settings | None = None,
        channel_factory: ChannelFactory = build_channels,
        clock: Callable[[], datetime] = now_in_app_timezone,
    ) -> None:
        self._session_factory = session_factory
        self._settings = settings or get_settings()
        self._channel_factory = channel_factory
        self._clock = clock

    def dispatch(self, unit: NotificationUnit) -> DispatchOutcome:
        """Dispatch ``unit``; failures are returned, never raised."""

        session = self._session_factory()
        try:
            if unit.kind is NotificationKind.SLA:
                outcome = self._dispatch_sla(session, unit)
            else:
                outcome = self._dispatch_digest(session, unit)
        except Exception as exc:
            session.rollback()
            logger.exception("Dispatch failed for %s (%s)", unit.describe(), unit.kind.value)
            return DispatchOutcome.failure(unit, str(exc) or exc.__class__.__name__)
        finally:
            session.close()

        if outcome.skipped or outcome.excluded:
            logger.debug(
                "%s %s not delivered: %s", unit.kind.value, unit.describe(), outcome.reason
            )
        return outcome

    def _dispatch_digest(self, session: Session, unit: NotificationUnit) -> DispatchOutcome:
        if unit.user_id is None or unit.window is None or unit.period_key is None:
            raise ValueError("Digest units require a user, a window and a period")

        tenant = TenantRepository(session).get(unit.tenant_id)
        if tenant is None or not tenant.active:
            return DispatchOutcome.exclude(unit, "tenant_inactive")

        membership = MembershipRepository(session).get(unit.tenant_id, unit.user_id)
        user = UserRepository(session).get(unit.user_id)
        if membership is None or user is None or not user.is_active:
            return DispatchOutcome.exclude(unit, "member_inactive")

        preferences = PreferenceRepository(session)
        if not unit.force and preferences.has_sent_marker(
            unit.tenant_id, unit.user_id, unit.kind, unit.period_key
        ):
            return DispatchOutcome.skip(unit, "already_sent")

        claims = ClaimRepository(session, sla_days=self._settings.sla_days)
        try:
            payload = generate(
                claims, tenant, membership, unit.kind, unit.window, settings=self._settings
            )
        except NoDataError:
            if not tenant.send_empty_digest:
                return DispatchOutcome.skip(unit, "no_data")
            payload = all_clear_summary(
                tenant, unit.user_id, unit.kind, unit.window, settings=self._settings
            )

        preference = preferences.get(unit.tenant_id, unit.user_id)
        email = (preference.notification_email or "").strip() if preference else ""
        recipient = Recipient(
            user_id=user.id,
            email=email or user.email,
            name=user.full_name or user.email,
        )
        delivery = self._summary_delivery(payload, recipient)
        self._deliver(session, self._settings.digest_channels, delivery)

        if not preferences.mark_sent(
            unit.tenant_id,
            unit.user_id,
            unit.kind,
            unit.period_key,
            sent_at=self._clock(),
        ):
            logger.info("Digest for %s was recorded concurrently", unit.describe())
        return DispatchOutcome.delivered(unit)

    def _dispatch_sla(self, session: Session, unit: NotificationUnit) -> DispatchOutcome:
        if unit.claim_id is None or unit.breach_at is None:
            raise ValueError("SLA units require a claim and a breach instant")

        tenant = TenantRepository(session).get(unit.tenant_id)
        if tenant is None or not tenant.active:
            return DispatchOutcome.exclude(unit, "tenant_inactive")

        claims = ClaimRepository(session, sla_days=self._settings.sla_days)
        claim = claims.get(unit.claim_id)
        if claim is None:
            raise NotFoundError("Claim", unit.claim_id)
        if claim.resolved:
            return DispatchOutcome.skip(unit, "resolved")
        if claims.has_sla_marker(claim.id, unit.breach_at):
            return DispatchOutcome.skip(unit, "already_notified")

        if claim.assigned_user_id:
            recipient_ids = [claim.assigned_user_id]
        else:
            recipient_ids = MembershipRepository(session).list_admin_user_ids(tenant.id)
        if not recipient_ids:
            logger.warning("No SLA recipients for claim %s of tenant %s", claim.code, tenant.id)
            return DispatchOutcome.skip(unit, "no_recipients")

        payload = generate(
            claims,
            tenant,
            None,
            NotificationKind.SLA,
            None,
            reference_time=unit.reference_time,
            claim=claim,
            breach_at=unit.breach_at,
            recipient_ids=recipient_ids,
            settings=self._settings,
        )
        users = UserRepository(session).get_map_by_ids(payload.recipient_ids)
        recipients = tuple(
            self._recipient(user_id, users.get(user_id)) for user_id in payload.recipient_ids
        )
        delivery = self._sla_delivery(payload, recipients)
        self._deliver(session, self._settings.sla_channels, delivery)

        if not claims.mark_sla_notified(claim.id, unit.breach_at, notified_at=self._clock()):
            logger.info("SLA alert for %s was recorded concurrently", unit.describe())
        return DispatchOutcome.delivered(unit)

    def _deliver(
        self, session: Session, channel_names: Sequence[str], delivery: Delivery
    ) -> None:
        for channel in self._channel_factory(channel_names, session):
            channel.deliver(delivery)

    @staticmethod
    def _recipient(user_id: int, user: User | None) -> Recipient:
        if user is None:
            return Recipient(user_id=user_id)
        return Recipient(user_id=user_id, email=user.email, name=user.full_name)

    @staticmethod
    def _summary_delivery(payload: SummaryPayload, recipient: Recipient) -> Delivery:
        counts = payload.counts
        if payload.all_clear:
            description = "Sin novedades en tus reclamos."
        else:
            description = (
                f"{counts.created} nuevos, {counts.resolved} resueltos, "
                f"{counts.overdue} con SLA vencido."
            )
        return Delivery(
            tenant_id=payload.tenant_id,
            recipients=(recipient,),
            subject=build_summary_subject(payload),
            html_body=render_summary_email(payload, recipient.name),
            title=_DIGEST_TITLES.get(payload.kind, payload.kind.value),
            description=description,
            type=NOTIFICATION_TYPE_INFO,
        )

    @staticmethod
    def _sla_delivery(payload: SlaPayload, recipients: tuple[Recipient, ...]) -> Delivery:
        return Delivery(
            tenant_id=payload.tenant_id,
            recipients=recipients,
            subject=build_sla_subject(payload),
            html_body=render_sla_email(payload),
            title=SLA_TITLE,
            description=f"SLA en riesgo: {payload.claim.code}",
            type=NOTIFICATION_TYPE_WARNING,
        )


__all__ = ["DispatchCoordinator", "SLA_TITLE"]
