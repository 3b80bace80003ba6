"""Ephemeral descriptors exchanged between the scheduler and the dispatcher."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Iterable


class NotificationKind(str, Enum):
    """Kinds of scheduled notifications handled by the engine."""

    DAILY = "daily"
    WEEKLY = "weekly"
    SLA = "sla"

    @property
    def is_digest(self) -> bool:
        return self is not NotificationKind.SLA


@dataclass(frozen=True)
class TimeWindow:
    """Half-open ``[start, end)`` interval covered by a digest."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start.tzinfo is None or self.end.tzinfo is None:
            raise ValueError("Time window bounds must be timezone-aware")
        if self.end <= self.start:
            raise ValueError("Time window end must be after its start")

    def contains(self, value: datetime | None) -> bool:
        return value is not None and self.start <= value < self.end


@dataclass(frozen=True)
class NotificationUnit:
    """One candidate send produced during enumeration.

    Digest units carry ``user_id``, ``window`` and ``period_key``; SLA units
    carry ``claim_id`` and ``breach_at`` instead.
    """

    tenant_id: int
    kind: NotificationKind
    reference_time: datetime
    user_id: int | None = None
    window: TimeWindow | None = None
    period_key: str | None = None
    claim_id: int | None = None
    breach_at: datetime | None = None
    force: bool = False

    def describe(self) -> str:
        if self.kind is NotificationKind.SLA:
            return f"Tenant {self.tenant_id} / Claim {self.claim_id}"
        return f"Tenant {self.tenant_id} / User {self.user_id}"


@dataclass(frozen=True)
class DispatchOutcome:
    """Result of dispatching a single :class:`NotificationUnit`."""

    unit: NotificationUnit
    succeeded: bool
    skipped: bool = False
    excluded: bool = False
    reason: str | None = None
    error: str | None = None

    @property
    def sent(self) -> bool:
        return self.succeeded and not self.skipped and not self.excluded

    @classmethod
    def delivered(cls, unit: NotificationUnit) -> "DispatchOutcome":
        return cls(unit=unit, succeeded=True)

    @classmethod
    def skip(cls, unit: NotificationUnit, reason: str) -> "DispatchOutcome":
        return cls(unit=unit, succeeded=True, skipped=True, reason=reason)

    @classmethod
    def exclude(cls, unit: NotificationUnit, reason: str) -> "DispatchOutcome":
        return cls(unit=unit, succeeded=False, excluded=True, reason=reason)

    @classmethod
    def failure(cls, unit: NotificationUnit, error: str) -> "DispatchOutcome":
        return cls(unit=unit, succeeded=False, error=error)


@dataclass
class DispatchSummary:
    """Aggregated counters for one tick or manual trigger."""

    kind: NotificationKind
    reference_time: datetime
    processed: int = 0
    sent: int = 0
    failed: int = 0
    skipped: int = 0
    excluded: int = 0
    errors: list[str] = field(default_factory=list)

    @classmethod
    def fold(
        cls,
        kind: NotificationKind,
        reference_time: datetime,
        outcomes: Iterable[DispatchOutcome],
        *,
        errors: Iterable[str] = (),
    ) -> "DispatchSummary":
        """Build a summary from per-unit ``outcomes`` and enumeration ``errors``."""

        summary = cls(kind=kind, reference_time=reference_time, errors=list(errors))
        for outcome in outcomes:
            summary.processed += 1
            if outcome.excluded:
                summary.excluded += 1
            elif not outcome.succeeded:
                summary.failed += 1
                summary.errors.append(
                    f"{outcome.unit.describe()}: {outcome.error or 'unknown error'}"
                )
            elif outcome.skipped:
                summary.skipped += 1
            else:
                summary.sent += 1
        return summary

    def as_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "reference_time": self.reference_time.isoformat(),
            "processed": self.processed,
            "sent": self.sent,
            "failed": self.failed,
            "skipped": self.skipped,
            "excluded": self.excluded,
            "errors": list(self.errors),
        }


__all__ = [
    "DispatchOutcome",
    "DispatchSummary",
    "NotificationKind",
    "NotificationUnit",
    "TimeWindow",
]
