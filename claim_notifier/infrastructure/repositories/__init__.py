"""Repository implementations for infrastructure layer."""

from .claim_repository import ClaimRepository
from .membership_repository import MembershipRepository
from .notification_repository import NotificationRepository
from .preference_repository import DuePredicate, PreferenceRepository
from .tenant_repository import TenantRepository
from .user_repository import UserRepository

__all__ = [
    "ClaimRepository",
    "DuePredicate",
    "MembershipRepository",
    "NotificationRepository",
    "PreferenceRepository",
    "TenantRepository",
    "UserRepository",
]
