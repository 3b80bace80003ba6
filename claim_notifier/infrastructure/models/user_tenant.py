"""SQLAlchemy model for tenant memberships."""

from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from claim_notifier.domain.entities import ROLE_STAFF
from claim_notifier.infrastructure.database import Base


class UserTenantModel(Base):
    """Role held by a user inside a tenant."""

    __tablename__ = "user_tenant"
    __table_args__ = (UniqueConstraint("user_id", "tenant_id", name="uq_user_tenant"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    tenant_id = Column(
        Integer, ForeignKey("tenant.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role = Column(String(20), nullable=False, default=ROLE_STAFF)

    user = relationship("UserModel", back_populates="memberships", lazy="joined")
    tenant = relationship("TenantModel", lazy="joined")


__all__ = ["UserTenantModel"]
