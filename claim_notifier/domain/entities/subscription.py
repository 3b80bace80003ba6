"""Read model joining a preference with the member it belongs to."""

from dataclasses import dataclass

from .membership import Membership
from .notification_preference import NotificationPreference
from .tenant import Tenant
from .user import User


@dataclass(frozen=True)
class Subscription:
    """Digest subscription of one user inside one tenant."""

    preference: NotificationPreference
    tenant: Tenant
    user: User
    membership: Membership

    @property
    def delivery_email(self) -> str:
        """Return the alternate notification address or the account email."""

        alternate = (self.preference.notification_email or "").strip()
        return alternate or self.user.email


__all__ = ["Subscription"]
