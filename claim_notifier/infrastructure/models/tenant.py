"""SQLAlchemy model for the tenant table."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.sql import expression

from claim_notifier.infrastructure.database import Base
from claim_notifier.utils import now_in_app_naive_datetime


class TenantModel(Base):
    """Database representation of a tenant company."""

    __tablename__ = "tenant"

    id = Column(Integer, primary_key=True, index=True)
    slug = Column(String(80), nullable=False, unique=True)
    legal_name = Column(String(200), nullable=False)
    brand_name = Column(String(200), nullable=False)
    contact_email = Column(String(255), nullable=True)
    timezone = Column(String(64), nullable=True)
    send_empty_digest = Column(
        Boolean,
        nullable=False,
        default=False,
        server_default=expression.false(),
    )
    active = Column(Boolean, nullable=False, default=True, server_default=expression.true())
    created_at = Column(DateTime, nullable=False, default=now_in_app_naive_datetime)


__all__ = ["TenantModel"]
