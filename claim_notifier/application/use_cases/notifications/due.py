"""Due-ness rules deciding when a digest subscription should be sent."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo

from claim_notifier.domain.entities import (
    DEFAULT_WEEKLY_ANCHOR_DAY,
    NotificationKind,
    NotificationPreference,
    Subscription,
    Tenant,
    TimeWindow,
)
from claim_notifier.infrastructure.repositories import DuePredicate
from claim_notifier.utils import (
    daily_period_key,
    localize_wall_time,
    resolve_timezone,
    truncate_to_minute,
    weekly_period_key,
)


@dataclass(frozen=True)
class DueSlot:
    """Occurrence of a subscription that a reference time falls into."""

    due_at: datetime
    period_key: str
    window: TimeWindow


def preference_timezone(preference: NotificationPreference, tenant: Tenant) -> tzinfo:
    """Preference timezone, then tenant timezone, then the application one."""

    return resolve_timezone(preference.timezone, tenant.timezone)


def compute_slot(
    subscription: Subscription, kind: NotificationKind, reference_time: datetime
) -> DueSlot:
    return slot_for_preference(
        subscription.preference, subscription.tenant, kind, reference_time
    )


def slot_for_preference(
    preference: NotificationPreference,
    tenant: Tenant,
    kind: NotificationKind,
    reference_time: datetime,
) -> DueSlot:
    """Return the occurrence and digest window of ``preference`` at ``reference_time``.

    Both kinds resolve to the most recent preferred instant at or before
    ``reference_time``. Before today's preferred time a daily slot belongs to
    yesterday, and a weekly slot may belong to the previous ISO week. The
    period key follows the local date of that instant.
    """

    kind = NotificationKind(kind)
    tz = preference_timezone(preference, tenant)
    local = reference_time.astimezone(tz)
    at = preference.preferred_notification_time

    if kind is NotificationKind.DAILY:
        day = local.date()
        due_at = localize_wall_time(day, at, tz)
        if due_at > truncate_to_minute(reference_time):
            day -= timedelta(days=1)
            due_at = localize_wall_time(day, at, tz)
        previous = localize_wall_time(day - timedelta(days=1), at, tz)
        return DueSlot(
            due_at=due_at,
            period_key=daily_period_key(day),
            window=TimeWindow(start=previous, end=reference_time),
        )

    if kind is NotificationKind.WEEKLY:
        anchor = preference.weekly_anchor_day
        if anchor not in range(1, 8):
            anchor = DEFAULT_WEEKLY_ANCHOR_DAY
        anchor_day = local.date() - timedelta(days=(local.isoweekday() - anchor) % 7)
        due_at = localize_wall_time(anchor_day, at, tz)
        if due_at > truncate_to_minute(reference_time):
            anchor_day -= timedelta(days=7)
            due_at = localize_wall_time(anchor_day, at, tz)
        previous = localize_wall_time(anchor_day - timedelta(days=7), at, tz)
        return DueSlot(
            due_at=due_at,
            period_key=weekly_period_key(anchor_day),
            window=TimeWindow(start=previous, end=reference_time),
        )

    raise ValueError(f"'{kind.value}' notifications are not driven by preferences")


def is_due(
    subscription: Subscription, kind: NotificationKind, reference_time: datetime
) -> bool:
    """Return ``True`` once the occurrence of the current period has been reached."""

    slot = compute_slot(subscription, kind, reference_time)
    return slot.due_at <= truncate_to_minute(reference_time)


def due_predicate(kind: NotificationKind) -> DuePredicate:
    kind = NotificationKind(kind)

    def _predicate(subscription: Subscription, reference_time: datetime) -> bool:
        return is_due(subscription, kind, reference_time)

    return _predicate


__all__ = [
    "DueSlot",
    "compute_slot",
    "due_predicate",
    "is_due",
    "preference_timezone",
    "slot_for_preference",
]
