"""Build digest and SLA payloads from claim data."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timedelta

from claim_notifier.config import Settings, get_settings
from claim_notifier.domain.entities import (
    CLAIM_STATUS_ASSIGNED,
    CLAIM_STATUS_IN_PROGRESS,
    CLAIM_STATUS_NEW,
    CLAIM_STATUS_RESOLVED,
    ActivityItem,
    AttentionItem,
    Claim,
    ClaimCounts,
    Membership,
    NotificationKind,
    SlaPayload,
    SummaryPayload,
    Tenant,
    TimeWindow,
)
from claim_notifier.domain.exceptions import NoDataError
from claim_notifier.infrastructure.repositories import ClaimRepository

RESOLUTION_LOOKBACK = timedelta(days=30)

_STATUS_LABELS = {
    CLAIM_STATUS_NEW: "Creado",
    CLAIM_STATUS_ASSIGNED: "Asignado",
    CLAIM_STATUS_IN_PROGRESS: "En proceso",
    CLAIM_STATUS_RESOLVED: "Resuelto",
}


def status_label(status: str) -> str:
    return _STATUS_LABELS.get(status, status)


def dashboard_url(tenant: Tenant, settings: Settings | None = None) -> str | None:
    settings = settings or get_settings()
    if not settings.frontend_url:
        return None
    return f"{settings.frontend_url.rstrip('/')}/dashboard?tenant={tenant.id}"


def generate(
    claims: ClaimRepository,
    tenant: Tenant,
    membership: Membership | None,
    kind: NotificationKind,
    window: TimeWindow | None,
    *,
    reference_time: datetime | None = None,
    claim: Claim | None = None,
    breach_at: datetime | None = None,
    recipient_ids: Sequence[int] = (),
    settings: Settings | None = None,
) -> SummaryPayload | SlaPayload:
    """Return the payload of one notification unit.

    Digests need ``membership`` and ``window``; SLA alerts need ``claim``,
    ``breach_at`` and ``reference_time``. Only reads through ``claims``.

    Raises:
        NoDataError: nothing visible to the member happened inside ``window``.
        ValueError: the arguments required by ``kind`` are missing.
    """

    kind = NotificationKind(kind)
    settings = settings or get_settings()

    if kind is NotificationKind.SLA:
        if claim is None or breach_at is None or reference_time is None:
            raise ValueError("SLA payloads require a claim, its breach and a reference time")
        return SlaPayload(
            tenant_id=tenant.id,
            company_name=tenant.display_name,
            claim=claim,
            breach_at=breach_at,
            overdue_by=max(reference_time - breach_at, timedelta()),
            recipient_ids=tuple(dict.fromkeys(recipient_ids)),
        )

    if membership is None or window is None:
        raise ValueError("Digest payloads require a membership and a window")
    if membership.tenant_id != tenant.id:
        raise ValueError(
            f"User {membership.user_id} is not a member of tenant {tenant.id}"
        )

    scope = None if membership.is_admin() else membership.user_id
    counts = claims.aggregate_claim_counts(
        tenant.id,
        window,
        assigned_user_id=scope,
        warning_days=settings.sla_warning_days,
    )
    if counts.is_empty:
        raise NoDataError(
            f"No claim activity for tenant {tenant.id} between "
            f"{window.start.isoformat()} and {window.end.isoformat()}"
        )

    attention = tuple(
        AttentionItem(code=item.code, reason=_attention_reason(deadline, window.end))
        for item, deadline in claims.list_attention_claims(
            tenant.id,
            window.end,
            assigned_user_id=scope,
            warning_days=settings.sla_warning_days,
        )
    )
    time_format = "%H:%M" if kind is NotificationKind.DAILY else "%d/%m %H:%M"
    activity = tuple(
        ActivityItem(
            code=item.code,
            action=status_label(item.status),
            time=item.update_date.astimezone(window.end.tzinfo).strftime(time_format),
        )
        for item in claims.list_recent_activity(tenant.id, window, assigned_user_id=scope)
        if item.update_date is not None
    )
    resolution = claims.resolution_stats(
        tenant.id, window.end - RESOLUTION_LOOKBACK, assigned_user_id=scope
    )

    return SummaryPayload(
        kind=kind,
        tenant_id=tenant.id,
        user_id=membership.user_id,
        company_name=tenant.display_name,
        window=window,
        counts=counts,
        attention=attention,
        recent_activity=activity,
        resolution=resolution,
        dashboard_url=dashboard_url(tenant, settings),
    )


def all_clear_summary(
    tenant: Tenant,
    user_id: int,
    kind: NotificationKind,
    window: TimeWindow,
    *,
    settings: Settings | None = None,
) -> SummaryPayload:
    """Digest sent instead of skipping when a tenant opted into empty digests."""

    return SummaryPayload(
        kind=NotificationKind(kind),
        tenant_id=tenant.id,
        user_id=user_id,
        company_name=tenant.display_name,
        window=window,
        counts=ClaimCounts(),
        dashboard_url=dashboard_url(tenant, settings),
        all_clear=True,
    )


def _attention_reason(deadline: datetime, reference_time: datetime) -> str:
    if deadline <= reference_time:
        return "SLA vencido"
    local = deadline.astimezone(reference_time.tzinfo)
    return f"Vence el {local:%d/%m %H:%M}"


__all__ = [
    "RESOLUTION_LOOKBACK",
    "all_clear_summary",
    "dashboard_url",
    "generate",
    "status_label",
]
