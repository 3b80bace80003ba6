"""Utility helpers for reusable functionality."""

from .datetime import (
    daily_period_key,
    ensure_app_naive_datetime,
    ensure_app_timezone,
    get_app_timezone,
    localize_wall_time,
    now_in_app_naive_datetime,
    now_in_app_timezone,
    resolve_timezone,
    start_of_local_day,
    truncate_to_minute,
    weekly_period_key,
)

__all__ = [
    "daily_period_key",
    "ensure_app_naive_datetime",
    "ensure_app_timezone",
    "get_app_timezone",
    "localize_wall_time",
    "now_in_app_naive_datetime",
    "now_in_app_timezone",
    "resolve_timezone",
    "start_of_local_day",
    "truncate_to_minute",
    "weekly_period_key",
]
