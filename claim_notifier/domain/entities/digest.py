"""Payloads produced by the content generator."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta

from .claim import Claim
from .dispatch import NotificationKind, TimeWindow


@dataclass(frozen=True)
class ClaimCounts:
    """Claim counters visible to one member for a time window."""

    created: int = 0
    pending: int = 0
    processing: int = 0
    resolved: int = 0
    updated: int = 0
    by_status: dict[str, int] = field(default_factory=dict)
    overdue: int = 0
    at_risk: int = 0
    on_track: int = 0

    @property
    def is_empty(self) -> bool:
        """``True`` when nothing happened to a visible claim inside the window."""

        return self.created == 0 and self.resolved == 0 and self.updated == 0


@dataclass(frozen=True)
class AttentionItem:
    code: str
    reason: str


@dataclass(frozen=True)
class ActivityItem:
    code: str
    action: str
    time: str


@dataclass(frozen=True)
class ResolutionStats:
    """Trailing resolution metrics for the tenant scope of a member."""

    resolved_claims: int
    total_claims: int
    average_resolution: timedelta | None

    @property
    def resolution_rate(self) -> int:
        if self.total_claims <= 0:
            return 0
        return round(self.resolved_claims / self.total_claims * 100)


@dataclass(frozen=True)
class SummaryPayload:
    """Data needed to render a daily or weekly digest."""

    kind: NotificationKind
    tenant_id: int
    user_id: int
    company_name: str
    window: TimeWindow
    counts: ClaimCounts
    attention: tuple[AttentionItem, ...] = ()
    recent_activity: tuple[ActivityItem, ...] = ()
    resolution: ResolutionStats | None = None
    dashboard_url: str | None = None
    all_clear: bool = False


@dataclass(frozen=True)
class SlaPayload:
    """Data needed to render an SLA breach alert."""

    tenant_id: int
    company_name: str
    claim: Claim
    breach_at: datetime
    overdue_by: timedelta
    recipient_ids: tuple[int, ...] = ()


__all__ = [
    "ActivityItem",
    "AttentionItem",
    "ClaimCounts",
    "ResolutionStats",
    "SlaPayload",
    "SummaryPayload",
]
