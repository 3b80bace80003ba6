"""SQLAlchemy model for the claim table."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.sql import expression

from claim_notifier.domain.entities import CLAIM_STATUS_NEW
from claim_notifier.infrastructure.database import Base
from claim_notifier.utils import now_in_app_naive_datetime


class ClaimModel(Base):
    """Subset of the claim table read by the notification engine."""

    __tablename__ = "claim"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(40), nullable=False, unique=True)
    tenant_id = Column(
        Integer, ForeignKey("tenant.id", ondelete="CASCADE"), nullable=False, index=True
    )
    customer_name = Column(String(200), nullable=True)
    assigned_user_id = Column(Integer, ForeignKey("user.id"), nullable=True, index=True)
    status = Column(String(20), nullable=False, default=CLAIM_STATUS_NEW, index=True)
    resolved = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    sla_due_at = Column(DateTime, nullable=True)
    resolved_at = Column(DateTime, nullable=True)
    creation_date = Column(DateTime, nullable=False, default=now_in_app_naive_datetime)
    update_date = Column(
        DateTime,
        nullable=False,
        default=now_in_app_naive_datetime,
        onupdate=now_in_app_naive_datetime,
    )


__all__ = ["ClaimModel"]
