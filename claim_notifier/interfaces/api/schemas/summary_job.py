"""Pydantic models returned by the summary job administration routes."""

from __future__ import annotations

from datetime import datetime, time
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Envelope shared by every admin job endpoint."""

    success: bool = True
    data: T | None = None
    message: str | None = None


class DispatchSummaryRead(BaseModel):
    kind: str
    reference_time: datetime
    processed: int
    sent: int
    failed: int
    skipped: int
    excluded: int
    errors: list[str] = Field(default_factory=list)


class SchedulerJobRead(BaseModel):
    id: str
    name: str
    next_run_time: str | None = None


class SchedulerStatusRead(BaseModel):
    running: bool
    jobs: list[SchedulerJobRead] = Field(default_factory=list)


class ClaimCountsRead(BaseModel):
    created: int
    pending: int
    processing: int
    resolved: int
    updated: int
    by_status: dict[str, int] = Field(default_factory=dict)
    overdue: int
    at_risk: int
    on_track: int


class AttentionItemRead(BaseModel):
    code: str
    reason: str


class ActivityItemRead(BaseModel):
    code: str
    action: str
    time: str


class ResolutionRead(BaseModel):
    resolved_claims: int
    total_claims: int
    resolution_rate: int
    average_resolution: str


class SummaryPreviewRead(BaseModel):
    """Digest content a member would receive, rendered as data."""

    kind: str
    tenant_id: int
    user_id: int
    company_name: str
    window_start: datetime
    window_end: datetime
    counts: ClaimCountsRead
    attention: list[AttentionItemRead] = Field(default_factory=list)
    recent_activity: list[ActivityItemRead] = Field(default_factory=list)
    resolution: ResolutionRead | None = None
    dashboard_url: str | None = None


class SubscriberRead(BaseModel):
    user_id: int
    name: str
    email: str
    role: str
    frequency: str
    preferred_notification_time: time
    weekly_anchor_day: int
    timezone: str | None = None


__all__ = [
    "ActivityItemRead",
    "ApiResponse",
    "AttentionItemRead",
    "ClaimCountsRead",
    "DispatchSummaryRead",
    "ResolutionRead",
    "SchedulerJobRead",
    "SchedulerStatusRead",
    "SubscriberRead",
    "SummaryPreviewRead",
]
