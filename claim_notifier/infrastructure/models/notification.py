"""SQLAlchemy model for persisted in-app notifications."""

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String

from claim_notifier.domain.entities import NOTIFICATION_TYPE_INFO
from claim_notifier.infrastructure.database import Base
from claim_notifier.utils import now_in_app_naive_datetime


class NotificationModel(Base):
    """Database representation for user notifications."""

    __tablename__ = "notification"
    __table_args__ = (
        Index("ix_notification_tenant_user", "tenant_id", "user_id"),
        Index("ix_notification_user_read", "user_id", "read_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenant.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(200), nullable=False)
    description = Column(String(500), nullable=False)
    type = Column(String(10), nullable=False, default=NOTIFICATION_TYPE_INFO)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)
    read_at = Column(DateTime(), nullable=True)


__all__ = ["NotificationModel"]
