"""ORM models used by the application infrastructure."""

from .claim import ClaimModel
from .digest_dispatch import DigestDispatchModel
from .notification import NotificationModel
from .notification_preference import NotificationPreferenceModel
from .sla_notification import SlaNotificationModel
from .tenant import TenantModel
from .user import UserModel
from .user_tenant import UserTenantModel

__all__ = [
    "ClaimModel",
    "DigestDispatchModel",
    "NotificationModel",
    "NotificationPreferenceModel",
    "SlaNotificationModel",
    "TenantModel",
    "UserModel",
    "UserTenantModel",
]
