"""FastAPI dependency utilities."""

from secrets import compare_digest

from fastapi import Depends, Header, HTTPException, Request, status

from claim_notifier.application.use_cases.notifications import (
    ManualTriggerGateway,
    NotificationScheduler,
)
from claim_notifier.config import get_settings
from claim_notifier.infrastructure.database import get_db

__all__ = [
    "get_db",
    "get_notification_scheduler",
    "get_trigger_gateway",
    "require_admin_key",
]


def require_admin_key(x_admin_key: str | None = Header(default=None)) -> None:
    """Validate the shared secret sent in the ``X-Admin-Key`` header."""

    expected = get_settings().admin_api_key
    if not expected:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Administración de jobs deshabilitada",
        )
    if not x_admin_key or not compare_digest(x_admin_key, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Credenciales inválidas",
        )


def get_notification_scheduler(request: Request) -> NotificationScheduler:
    scheduler = getattr(request.app.state, "notification_scheduler", None)
    if scheduler is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Scheduler no inicializado",
        )
    return scheduler


def get_trigger_gateway(
    scheduler: NotificationScheduler = Depends(get_notification_scheduler),
) -> ManualTriggerGateway:
    return ManualTriggerGateway(scheduler)
