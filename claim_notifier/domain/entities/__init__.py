"""Domain entities exposed by the application."""

from .claim import (
    CLAIM_STATUSES,
    CLAIM_STATUS_ASSIGNED,
    CLAIM_STATUS_IN_PROGRESS,
    CLAIM_STATUS_NEW,
    CLAIM_STATUS_RESOLVED,
    OPEN_CLAIM_STATUSES,
    Claim,
)
from .digest import (
    ActivityItem,
    AttentionItem,
    ClaimCounts,
    ResolutionStats,
    SlaPayload,
    SummaryPayload,
)
from .dispatch import (
    DispatchOutcome,
    DispatchSummary,
    NotificationKind,
    NotificationUnit,
    TimeWindow,
)
from .membership import ADMIN_ROLES, ROLE_ADMIN, ROLE_OWNER, ROLE_STAFF, Membership
from .notification import (
    NOTIFICATION_TYPES,
    NOTIFICATION_TYPE_ERROR,
    NOTIFICATION_TYPE_INFO,
    NOTIFICATION_TYPE_SUCCESS,
    NOTIFICATION_TYPE_WARNING,
    Notification,
)
from .notification_preference import (
    DEFAULT_PREFERRED_TIME,
    DEFAULT_WEEKLY_ANCHOR_DAY,
    FREQUENCIES,
    FREQUENCY_DAILY,
    FREQUENCY_NONE,
    FREQUENCY_WEEKLY,
    NotificationPreference,
)
from .subscription import Subscription
from .tenant import Tenant
from .user import User

__all__ = [
    "ADMIN_ROLES",
    "ActivityItem",
    "AttentionItem",
    "CLAIM_STATUSES",
    "CLAIM_STATUS_ASSIGNED",
    "CLAIM_STATUS_IN_PROGRESS",
    "CLAIM_STATUS_NEW",
    "CLAIM_STATUS_RESOLVED",
    "Claim",
    "ClaimCounts",
    "DEFAULT_PREFERRED_TIME",
    "DEFAULT_WEEKLY_ANCHOR_DAY",
    "DispatchOutcome",
    "DispatchSummary",
    "FREQUENCIES",
    "FREQUENCY_DAILY",
    "FREQUENCY_NONE",
    "FREQUENCY_WEEKLY",
    "Membership",
    "NOTIFICATION_TYPES",
    "NOTIFICATION_TYPE_ERROR",
    "NOTIFICATION_TYPE_INFO",
    "NOTIFICATION_TYPE_SUCCESS",
    "NOTIFICATION_TYPE_WARNING",
    "Notification",
    "NotificationKind",
    "NotificationPreference",
    "NotificationUnit",
    "OPEN_CLAIM_STATUSES",
    "ROLE_ADMIN",
    "ROLE_OWNER",
    "ROLE_STAFF",
    "ResolutionStats",
    "SlaPayload",
    "Subscription",
    "SummaryPayload",
    "Tenant",
    "TimeWindow",
    "User",
]
