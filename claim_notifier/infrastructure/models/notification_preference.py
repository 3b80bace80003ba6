"""SQLAlchemy model for per-membership notification preferences."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Time,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from claim_notifier.domain.entities import (
    DEFAULT_PREFERRED_TIME,
    DEFAULT_WEEKLY_ANCHOR_DAY,
    FREQUENCY_NONE,
)
from claim_notifier.infrastructure.database import Base


class NotificationPreferenceModel(Base):
    """Database representation of digest preferences."""

    __tablename__ = "notification_preference"
    __table_args__ = (
        UniqueConstraint("user_id", "tenant_id", name="uq_notification_preference_member"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    tenant_id = Column(
        Integer, ForeignKey("tenant.id", ondelete="CASCADE"), nullable=False, index=True
    )
    email_notifications_enabled = Column(Boolean, nullable=False, default=True)
    frequency = Column(String(10), nullable=False, default=FREQUENCY_NONE, index=True)
    notification_email = Column(String(255), nullable=True)
    preferred_notification_time = Column(Time, nullable=False, default=DEFAULT_PREFERRED_TIME)
    weekly_anchor_day = Column(Integer, nullable=False, default=DEFAULT_WEEKLY_ANCHOR_DAY)
    timezone = Column(String(64), nullable=True)
    last_daily_sent_at = Column(DateTime, nullable=True)
    last_weekly_sent_at = Column(DateTime, nullable=True)

    user = relationship("UserModel", lazy="joined")
    tenant = relationship("TenantModel", lazy="joined")


__all__ = ["NotificationPreferenceModel"]
