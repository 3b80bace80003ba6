"""Domain entity representing a tenant (a company using the platform)."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Tenant:
    """Core attributes of a tenant relevant to notification delivery."""

    id: int | None
    slug: str
    legal_name: str
    brand_name: str
    contact_email: str | None
    timezone: str | None
    send_empty_digest: bool
    active: bool
    created_at: datetime | None = None

    @property
    def display_name(self) -> str:
        """Return the name shown to recipients of tenant communications."""

        return self.legal_name or self.brand_name or self.slug


__all__ = ["Tenant"]
