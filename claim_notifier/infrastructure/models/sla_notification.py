"""SQLAlchemy model recording SLA breaches that were already alerted."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, UniqueConstraint

from claim_notifier.infrastructure.database import Base
from claim_notifier.utils import now_in_app_naive_datetime


class SlaNotificationModel(Base):
    """One row per alerted (claim, breach instant)."""

    __tablename__ = "sla_notification"
    __table_args__ = (
        UniqueConstraint("claim_id", "breach_at", name="uq_sla_notification_breach"),
    )

    id = Column(Integer, primary_key=True, index=True)
    claim_id = Column(Integer, ForeignKey("claim.id", ondelete="CASCADE"), nullable=False)
    breach_at = Column(DateTime, nullable=False)
    notified_at = Column(DateTime, nullable=False, default=now_in_app_naive_datetime)


__all__ = ["SlaNotificationModel"]
