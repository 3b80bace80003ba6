"""Persistence layer for tenant data."""

from __future__ import annotations

from sqlalchemy.orm import Session

from claim_notifier.domain.entities import Tenant
from claim_notifier.infrastructure.models import TenantModel
from claim_notifier.utils import ensure_app_timezone


class TenantRepository:
    """Read tenants consumed by the notification engine."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, tenant_id: int) -> Tenant | None:
        model = self.session.get(TenantModel, tenant_id)
        return self._to_entity(model) if model else None

    @staticmethod
    def _to_entity(model: TenantModel) -> Tenant:
        return Tenant(
            id=model.id,
            slug=model.slug,
            legal_name=model.legal_name,
            brand_name=model.brand_name,
            contact_email=model.contact_email,
            timezone=model.timezone,
            send_empty_digest=bool(model.send_empty_digest),
            active=bool(model.active),
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["TenantRepository"]
