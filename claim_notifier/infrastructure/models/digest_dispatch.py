"""SQLAlchemy model recording which digest periods were already delivered."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint

from claim_notifier.infrastructure.database import Base
from claim_notifier.utils import now_in_app_naive_datetime


class DigestDispatchModel(Base):
    """One row per delivered (tenant, user, kind, period) digest."""

    __tablename__ = "digest_dispatch"
    __table_args__ = (
        UniqueConstraint(
            "tenant_id", "user_id", "kind", "period_key", name="uq_digest_dispatch_period"
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenant.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    kind = Column(String(10), nullable=False)
    period_key = Column(String(10), nullable=False)
    sent_at = Column(DateTime, nullable=False, default=now_in_app_naive_datetime)


__all__ = ["DigestDispatchModel"]
