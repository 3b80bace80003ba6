"""Domain entity representing a consumer claim."""

from dataclasses import dataclass
from datetime import datetime

CLAIM_STATUS_NEW = "new"
CLAIM_STATUS_ASSIGNED = "assigned"
CLAIM_STATUS_IN_PROGRESS = "in_progress"
CLAIM_STATUS_RESOLVED = "resolved"

CLAIM_STATUSES = (
    CLAIM_STATUS_NEW,
    CLAIM_STATUS_ASSIGNED,
    CLAIM_STATUS_IN_PROGRESS,
    CLAIM_STATUS_RESOLVED,
)
OPEN_CLAIM_STATUSES = (
    CLAIM_STATUS_NEW,
    CLAIM_STATUS_ASSIGNED,
    CLAIM_STATUS_IN_PROGRESS,
)


@dataclass
class Claim:
    """Claim attributes consumed by the notification engine."""

    id: int | None
    code: str
    tenant_id: int
    customer_name: str | None
    assigned_user_id: int | None
    status: str
    resolved: bool
    sla_due_at: datetime | None
    resolved_at: datetime | None
    creation_date: datetime | None
    update_date: datetime | None


__all__ = [
    "CLAIM_STATUSES",
    "CLAIM_STATUS_ASSIGNED",
    "CLAIM_STATUS_IN_PROGRESS",
    "CLAIM_STATUS_NEW",
    "CLAIM_STATUS_RESOLVED",
    "Claim",
    "OPEN_CLAIM_STATUSES",
]
