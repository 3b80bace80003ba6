"""Read access to claims plus the SLA breach markers."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime, timedelta

from sqlalchemy import and_, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from claim_notifier.domain.entities import (
    CLAIM_STATUS_ASSIGNED,
    CLAIM_STATUS_IN_PROGRESS,
    CLAIM_STATUS_NEW,
    Claim,
    ClaimCounts,
    ResolutionStats,
    TimeWindow,
)
from claim_notifier.infrastructure.models import (
    ClaimModel,
    SlaNotificationModel,
    TenantModel,
)
from claim_notifier.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_timezone,
)

logger = logging.getLogger(__name__)


class ClaimRepository:
    """Queries over the claim table used to build digests and SLA alerts.

    Every query accepts ``assigned_user_id`` to restrict results to the claims
    assigned to a single member; ``None`` covers the whole tenant.
    """

    def __init__(self, session: Session, *, sla_days: int = 15) -> None:
        self.session = session
        self.sla_days = sla_days

    def get(self, claim_id: int) -> Claim | None:
        model = self.session.get(ClaimModel, claim_id)
        return self._to_entity(model) if model else None

    def deadline_for(self, claim: Claim) -> datetime | None:
        """Return the SLA deadline of ``claim`` as an aware datetime."""

        if claim.sla_due_at is not None:
            return claim.sla_due_at
        if claim.creation_date is None:
            return None
        return claim.creation_date + timedelta(days=self.sla_days)

    def aggregate_claim_counts(
        self,
        tenant_id: int,
        window: TimeWindow,
        *,
        assigned_user_id: int | None = None,
        warning_days: int = 2,
    ) -> ClaimCounts:
        start = ensure_app_naive_datetime(window.start)
        end = ensure_app_naive_datetime(window.end)

        def _count(*criteria) -> int:
            query = self._scoped(tenant_id, assigned_user_id).with_entities(
                func.count(ClaimModel.id)
            )
            return int(query.filter(*criteria).scalar() or 0)

        created = _count(ClaimModel.creation_date >= start, ClaimModel.creation_date < end)
        resolved = _count(
            ClaimModel.resolved.is_(True),
            ClaimModel.resolved_at >= start,
            ClaimModel.resolved_at < end,
        )
        updated = _count(ClaimModel.update_date >= start, ClaimModel.update_date < end)
        pending = _count(
            ClaimModel.status == CLAIM_STATUS_NEW,
            ClaimModel.assigned_user_id.is_(None),
            ClaimModel.resolved.is_(False),
        )
        processing = _count(
            ClaimModel.status.in_([CLAIM_STATUS_ASSIGNED, CLAIM_STATUS_IN_PROGRESS]),
            ClaimModel.resolved.is_(False),
        )

        by_status_query = (
            self._scoped(tenant_id, assigned_user_id)
            .with_entities(ClaimModel.status, func.count(ClaimModel.id))
            .group_by(ClaimModel.status)
        )
        by_status = {status: int(total) for status, total in by_status_query.all()}

        overdue = at_risk = on_track = 0
        warning = timedelta(days=warning_days)
        for claim in self._open_claims(tenant_id, assigned_user_id):
            deadline = self.deadline_for(claim)
            if deadline is None:
                continue
            if deadline <= window.end:
                overdue += 1
            elif deadline - window.end <= warning:
                at_risk += 1
            else:
                on_track += 1

        return ClaimCounts(
            created=created,
            pending=pending,
            processing=processing,
            resolved=resolved,
            updated=updated,
            by_status=by_status,
            overdue=overdue,
            at_risk=at_risk,
            on_track=on_track,
        )

    def list_attention_claims(
        self,
        tenant_id: int,
        reference_time: datetime,
        *,
        assigned_user_id: int | None = None,
        warning_days: int = 2,
        limit: int = 5,
    ) -> list[tuple[Claim, datetime]]:
        """Return open claims already overdue or about to be, oldest deadline first."""

        horizon = reference_time + timedelta(days=warning_days)
        flagged: list[tuple[Claim, datetime]] = []
        for claim in self._open_claims(tenant_id, assigned_user_id):
            deadline = self.deadline_for(claim)
            if deadline is not None and deadline <= horizon:
                flagged.append((claim, deadline))
        flagged.sort(key=lambda item: item[1])
        return flagged[:limit]

    def list_recent_activity(
        self,
        tenant_id: int,
        window: TimeWindow,
        *,
        assigned_user_id: int | None = None,
        limit: int = 10,
    ) -> Sequence[Claim]:
        query = (
            self._scoped(tenant_id, assigned_user_id)
            .filter(ClaimModel.update_date >= ensure_app_naive_datetime(window.start))
            .filter(ClaimModel.update_date < ensure_app_naive_datetime(window.end))
            .order_by(ClaimModel.update_date.desc(), ClaimModel.id.desc())
            .limit(limit)
        )
        return [self._to_entity(model) for model in query.all()]

    def resolution_stats(
        self,
        tenant_id: int,
        since: datetime,
        *,
        assigned_user_id: int | None = None,
    ) -> ResolutionStats:
        """Summarize resolution of claims created on or after ``since``."""

        query = self._scoped(tenant_id, assigned_user_id).filter(
            ClaimModel.creation_date >= ensure_app_naive_datetime(since)
        )
        total = 0
        durations: list[timedelta] = []
        for model in query.all():
            total += 1
            if model.resolved and model.resolved_at is not None:
                durations.append(model.resolved_at - model.creation_date)

        average = sum(durations, timedelta()) / len(durations) if durations else None
        return ResolutionStats(
            resolved_claims=len(durations),
            total_claims=total,
            average_resolution=average,
        )

    def list_overdue_unresolved_claims(
        self, tenant_id: int | None, reference_time: datetime
    ) -> list[tuple[Claim, datetime]]:
        """Return ``(claim, breach_at)`` pairs for open claims past their deadline.

        Claims of deactivated tenants are left out.
        """

        reference = ensure_app_naive_datetime(reference_time)
        fallback_cutoff = reference - timedelta(days=self.sla_days)
        query = (
            self.session.query(ClaimModel)
            .join(TenantModel, ClaimModel.tenant_id == TenantModel.id)
            .filter(TenantModel.active.is_(True))
            .filter(ClaimModel.resolved.is_(False))
            .filter(
                or_(
                    ClaimModel.sla_due_at <= reference,
                    and_(
                        ClaimModel.sla_due_at.is_(None),
                        ClaimModel.creation_date <= fallback_cutoff,
                    ),
                )
            )
            .order_by(ClaimModel.tenant_id, ClaimModel.id)
        )
        if tenant_id is not None:
            query = query.filter(ClaimModel.tenant_id == tenant_id)

        breaches: list[tuple[Claim, datetime]] = []
        for model in query.all():
            claim = self._to_entity(model)
            deadline = self.deadline_for(claim)
            if deadline is not None:
                breaches.append((claim, deadline))
        return breaches

    def has_sla_marker(self, claim_id: int, breach_at: datetime) -> bool:
        query = (
            self.session.query(SlaNotificationModel.id)
            .filter(SlaNotificationModel.claim_id == claim_id)
            .filter(SlaNotificationModel.breach_at == ensure_app_naive_datetime(breach_at))
        )
        return query.first() is not None

    def mark_sla_notified(
        self,
        claim_id: int,
        breach_at: datetime,
        *,
        notified_at: datetime | None = None,
    ) -> bool:
        """Record the alert for ``breach_at``; ``False`` when it already existed."""

        self.session.add(
            SlaNotificationModel(
                claim_id=claim_id,
                breach_at=ensure_app_naive_datetime(breach_at),
                notified_at=ensure_app_naive_datetime(notified_at or now_in_app_timezone()),
            )
        )
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            logger.info("SLA breach of claim %s already recorded", claim_id)
            return False
        return True

    def _scoped(self, tenant_id: int, assigned_user_id: int | None) -> Query:
        query = self.session.query(ClaimModel).filter(ClaimModel.tenant_id == tenant_id)
        if assigned_user_id is not None:
            query = query.filter(ClaimModel.assigned_user_id == assigned_user_id)
        return query

    def _open_claims(self, tenant_id: int, assigned_user_id: int | None) -> list[Claim]:
        query = self._scoped(tenant_id, assigned_user_id).filter(
            ClaimModel.resolved.is_(False)
        )
        return [self._to_entity(model) for model in query.order_by(ClaimModel.id).all()]

    @staticmethod
    def _to_entity(model: ClaimModel) -> Claim:
        return Claim(
            id=model.id,
            code=model.code,
            tenant_id=model.tenant_id,
            customer_name=model.customer_name,
            assigned_user_id=model.assigned_user_id,
            status=model.status,
            resolved=bool(model.resolved),
            sla_due_at=ensure_app_timezone(model.sla_due_at),
            resolved_at=ensure_app_timezone(model.resolved_at),
            creation_date=ensure_app_timezone(model.creation_date),
            update_date=ensure_app_timezone(model.update_date),
        )


__all__ = ["ClaimRepository"]
