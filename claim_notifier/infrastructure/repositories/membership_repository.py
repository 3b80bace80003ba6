"""Persistence layer for tenant memberships."""

from __future__ import annotations

from sqlalchemy.orm import Session

from claim_notifier.domain.entities import ADMIN_ROLES, Membership
from claim_notifier.infrastructure.models import UserModel, UserTenantModel


class MembershipRepository:
    """Resolve which users belong to a tenant and with which role."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, tenant_id: int, user_id: int) -> Membership | None:
        model = (
            self.session.query(UserTenantModel)
            .filter(UserTenantModel.tenant_id == tenant_id)
            .filter(UserTenantModel.user_id == user_id)
            .first()
        )
        return self._to_entity(model) if model else None

    def list_admin_user_ids(self, tenant_id: int) -> list[int]:
        """Return active owners and admins of ``tenant_id``."""

        query = (
            self.session.query(UserTenantModel.user_id)
            .join(UserModel, UserTenantModel.user_id == UserModel.id)
            .filter(UserTenantModel.tenant_id == tenant_id)
            .filter(UserTenantModel.role.in_(sorted(ADMIN_ROLES)))
            .filter(UserModel.is_active.is_(True))
            .order_by(UserTenantModel.user_id)
        )
        return [user_id for (user_id,) in query.all()]

    @staticmethod
    def _to_entity(model: UserTenantModel) -> Membership:
        return Membership(
            id=model.id,
            user_id=model.user_id,
            tenant_id=model.tenant_id,
            role=model.role,
        )


__all__ = ["MembershipRepository"]
