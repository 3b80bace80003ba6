"""Helpers for working with timezone-aware datetimes."""

from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from functools import lru_cache
from typing import Final

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from claim_notifier.config import get_settings

_DEFAULT_TIMEZONE: Final[str] = "America/Lima"
_OFFSET_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^(?:UTC|GMT)(?P<sign>[+-])(?P<hours>\d{1,2})(?::?(?P<minutes>\d{2}))?$",
    re.IGNORECASE,
)
_MAX_GAP_MINUTES: Final[int] = 24 * 60


@lru_cache(maxsize=1)
def get_app_timezone() -> tzinfo:
    """Return the configured application timezone.

    The timezone is resolved using the ``APP_TIMEZONE`` environment variable (via
    the ``Settings`` model). If the provided value cannot be resolved, the
    default ``America/Lima`` timezone is used as a fallback.
    """

    settings = get_settings()
    tz_name = (settings.app_timezone or "").strip() or _DEFAULT_TIMEZONE
    return _resolve_timezone(tz_name)


def resolve_timezone(*candidates: str | None) -> tzinfo:
    """Return the first resolvable timezone in ``candidates``.

    Falls back to the application timezone when every candidate is empty.
    """

    for candidate in candidates:
        name = (candidate or "").strip()
        if name:
            return _resolve_timezone(name)
    return get_app_timezone()


def now_in_app_timezone() -> datetime:
    """Return the current time localized to the configured timezone."""

    return datetime.now(tz=get_app_timezone())


def now_in_app_naive_datetime() -> datetime:
    """Return the current localized time without attaching ``tzinfo``."""

    localized = ensure_app_naive_datetime(now_in_app_timezone())
    if localized is None:  # pragma: no cover - defensive guard
        msg = "Failed to compute the application naive datetime"
        raise RuntimeError(msg)
    return localized


def ensure_app_timezone(value: datetime | None) -> datetime | None:
    """Normalize ``value`` so it is expressed in the configured timezone."""

    if value is None:
        return None

    tz = get_app_timezone()
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


def ensure_app_naive_datetime(value: datetime | None) -> datetime | None:
    """Return ``value`` localized to the app timezone but without ``tzinfo``.

    Database ``DATETIME`` columns are stored without an offset. This helper
    allows us to keep working with aware datetimes in the domain layer while
    storing the localized (naive) representation in the database.
    """

    localized = ensure_app_timezone(value)
    if localized is None:
        return None
    return localized.replace(tzinfo=None)


def truncate_to_minute(value: datetime) -> datetime:
    """Drop seconds and microseconds from ``value``."""

    return value.replace(second=0, microsecond=0)


def localize_wall_time(day: date, at: time, tz: tzinfo) -> datetime:
    """Attach ``tz`` to the wall-clock ``day``/``at`` combination.

    Wall times that do not exist because of a daylight-saving gap resolve to
    the first valid minute after the gap.
    """

    naive = datetime.combine(day, at.replace(second=0, microsecond=0, tzinfo=None))
    for offset in range(_MAX_GAP_MINUTES + 1):
        candidate = naive + timedelta(minutes=offset)
        if _is_valid_wall_time(candidate, tz):
            return candidate.replace(tzinfo=tz)
    msg = f"Could not resolve {naive.isoformat()} in timezone {tz}"
    raise ValueError(msg)


def start_of_local_day(value: datetime, tz: tzinfo) -> datetime:
    """Return the first valid instant of the calendar day of ``value`` in ``tz``."""

    local = value.astimezone(tz)
    return localize_wall_time(local.date(), time(0, 0), tz)


def daily_period_key(day: date) -> str:
    """Return the idempotency period identifier for a daily digest."""

    return day.isoformat()


def weekly_period_key(day: date) -> str:
    """Return the ISO week identifier (``YYYY-Www``) that contains ``day``."""

    iso_year, iso_week, _ = day.isocalendar()
    return f"{iso_year}-W{iso_week:02d}"


def _is_valid_wall_time(naive: datetime, tz: tzinfo) -> bool:
    aware = naive.replace(tzinfo=tz)
    roundtrip = aware.astimezone(timezone.utc).astimezone(tz)
    return roundtrip.replace(tzinfo=None) == naive


def _resolve_timezone(tz_name: str) -> tzinfo:
    """Resolve ``tz_name`` into a ``timezone`` instance."""

    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        match = _OFFSET_PATTERN.match(tz_name)
        if match:
            sign = -1 if match.group("sign") == "-" else 1
            hours = int(match.group("hours"))
            minutes = int(match.group("minutes") or 0)
            offset = timedelta(hours=hours, minutes=minutes)
            return timezone(sign * offset)
    return ZoneInfo(_DEFAULT_TIMEZONE)
