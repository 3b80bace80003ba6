"""Rutas administrativas para consultar y ejecutar los jobs de resúmenes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from claim_notifier.application.use_cases.notifications import (
    ManualTriggerGateway,
    NotificationScheduler,
)
from claim_notifier.domain.entities import (
    DispatchSummary,
    NotificationKind,
    Subscription,
    SummaryPayload,
)
from claim_notifier.domain.exceptions import NoDataError, NotFoundError
from claim_notifier.infrastructure.email import format_days
from claim_notifier.interfaces.api.dependencies import (
    get_notification_scheduler,
    get_trigger_gateway,
    require_admin_key,
)
from claim_notifier.interfaces.api.schemas import (
    ActivityItemRead,
    ApiResponse,
    AttentionItemRead,
    ClaimCountsRead,
    DispatchSummaryRead,
    ResolutionRead,
    SchedulerStatusRead,
    SubscriberRead,
    SummaryPreviewRead,
)

router = APIRouter(
    prefix="/admin/jobs/summary",
    tags=["summary-jobs"],
    dependencies=[Depends(require_admin_key)],
)


def _summary_to_schema(summary: DispatchSummary) -> DispatchSummaryRead:
    return DispatchSummaryRead(
        kind=summary.kind.value,
        reference_time=summary.reference_time,
        processed=summary.processed,
        sent=summary.sent,
        failed=summary.failed,
        skipped=summary.skipped,
        excluded=summary.excluded,
        errors=list(summary.errors),
    )


def _summary_response(summary: DispatchSummary, label: str) -> ApiResponse[DispatchSummaryRead]:
    return ApiResponse[DispatchSummaryRead](
        success=summary.failed == 0 and not summary.errors,
        data=_summary_to_schema(summary),
        message=f"{label}: {summary.sent} enviados, {summary.failed} fallidos",
    )


def _preview_to_schema(payload: SummaryPayload) -> SummaryPreviewRead:
    counts = payload.counts
    resolution = None
    if payload.resolution is not None:
        resolution = ResolutionRead(
            resolved_claims=payload.resolution.resolved_claims,
            total_claims=payload.resolution.total_claims,
            resolution_rate=payload.resolution.resolution_rate,
            average_resolution=format_days(payload.resolution.average_resolution),
        )
    return SummaryPreviewRead(
        kind=payload.kind.value,
        tenant_id=payload.tenant_id,
        user_id=payload.user_id,
        company_name=payload.company_name,
        window_start=payload.window.start,
        window_end=payload.window.end,
        counts=ClaimCountsRead(
            created=counts.created,
            pending=counts.pending,
            processing=counts.processing,
            resolved=counts.resolved,
            updated=counts.updated,
            by_status=dict(counts.by_status),
            overdue=counts.overdue,
            at_risk=counts.at_risk,
            on_track=counts.on_track,
        ),
        attention=[
            AttentionItemRead(code=item.code, reason=item.reason) for item in payload.attention
        ],
        recent_activity=[
            ActivityItemRead(code=item.code, action=item.action, time=item.time)
            for item in payload.recent_activity
        ],
        resolution=resolution,
        dashboard_url=payload.dashboard_url,
    )


def _subscriber_to_schema(subscription: Subscription) -> SubscriberRead:
    preference = subscription.preference
    return SubscriberRead(
        user_id=subscription.user.id,
        name=subscription.user.full_name,
        email=subscription.delivery_email,
        role=subscription.membership.role,
        frequency=preference.frequency,
        preferred_notification_time=preference.preferred_notification_time,
        weekly_anchor_day=preference.weekly_anchor_day,
        timezone=preference.timezone,
    )


def _not_found(exc: NotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message)


def _bad_request(exc: ValueError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.get("/status", response_model=ApiResponse[SchedulerStatusRead])
def get_status(
    scheduler: NotificationScheduler = Depends(get_notification_scheduler),
) -> ApiResponse[SchedulerStatusRead]:
    """Devuelve el estado del scheduler y la próxima ejecución de cada job."""

    return ApiResponse[SchedulerStatusRead](
        data=SchedulerStatusRead.model_validate(scheduler.status()),
    )


@router.post("/trigger-daily", response_model=ApiResponse[DispatchSummaryRead])
def trigger_daily(
    tenant_id: int | None = Query(default=None),
    user_id: int | None = Query(default=None),
    force: bool = Query(default=False),
    gateway: ManualTriggerGateway = Depends(get_trigger_gateway),
) -> ApiResponse[DispatchSummaryRead]:
    """Ejecuta manualmente el resumen diario para un tenant, un usuario o todos."""

    try:
        summary = gateway.trigger_daily(tenant_id=tenant_id, user_id=user_id, force=force)
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    except ValueError as exc:
        raise _bad_request(exc) from exc
    return _summary_response(summary, "Resumen diario")


@router.post("/trigger-weekly", response_model=ApiResponse[DispatchSummaryRead])
def trigger_weekly(
    tenant_id: int | None = Query(default=None),
    force: bool = Query(default=False),
    gateway: ManualTriggerGateway = Depends(get_trigger_gateway),
) -> ApiResponse[DispatchSummaryRead]:
    """Ejecuta manualmente el resumen semanal."""

    try:
        summary = gateway.trigger_weekly(tenant_id=tenant_id, force=force)
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    return _summary_response(summary, "Resumen semanal")


@router.post("/trigger-sla", response_model=ApiResponse[DispatchSummaryRead])
def trigger_sla(
    tenant_id: int | None = Query(default=None),
    gateway: ManualTriggerGateway = Depends(get_trigger_gateway),
) -> ApiResponse[DispatchSummaryRead]:
    """Ejecuta manualmente la revisión de SLA vencidos."""

    try:
        summary = gateway.trigger_sla(tenant_id=tenant_id)
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    return _summary_response(summary, "Alertas SLA")


@router.get(
    "/preview/{tenant_id}/{user_id}",
    response_model=ApiResponse[SummaryPreviewRead],
)
def preview_summary(
    tenant_id: int,
    user_id: int,
    kind: NotificationKind = Query(default=NotificationKind.DAILY),
    gateway: ManualTriggerGateway = Depends(get_trigger_gateway),
) -> ApiResponse[SummaryPreviewRead]:
    """Genera el resumen que recibiría el usuario sin enviarlo."""

    try:
        payload = gateway.preview(tenant_id, user_id, kind)
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    except NoDataError:
        return ApiResponse[SummaryPreviewRead](data=None, message="Sin actividad para el periodo")
    except ValueError as exc:
        raise _bad_request(exc) from exc
    return ApiResponse[SummaryPreviewRead](data=_preview_to_schema(payload))


@router.get("/subscribers/{tenant_id}", response_model=ApiResponse[list[SubscriberRead]])
def list_subscribers(
    tenant_id: int,
    frequency: str = Query(default="daily", pattern="^(daily|weekly)$"),
    gateway: ManualTriggerGateway = Depends(get_trigger_gateway),
) -> ApiResponse[list[SubscriberRead]]:
    """Lista los usuarios del tenant suscritos al resumen indicado."""

    try:
        subscribers = gateway.list_subscribers(tenant_id, frequency)
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    data = [_subscriber_to_schema(item) for item in subscribers]
    return ApiResponse[list[SubscriberRead]](
        data=data,
        message=f"{len(data)} usuarios suscritos",
    )
