"""Domain entity linking a user to a tenant with a role."""

from dataclasses import dataclass

ROLE_OWNER = "owner"
ROLE_ADMIN = "admin"
ROLE_STAFF = "staff"

ADMIN_ROLES = frozenset({ROLE_OWNER, ROLE_ADMIN})


@dataclass
class Membership:
    """Role held by a user inside a tenant."""

    id: int | None
    user_id: int
    tenant_id: int
    role: str

    def has_role(self, alias: str) -> bool:
        """Return ``True`` when the membership role matches ``alias``."""

        return self.role.lower() == alias.lower()

    def is_admin(self) -> bool:
        """Return ``True`` when the member can see every claim of the tenant."""

        return self.role.lower() in ADMIN_ROLES


__all__ = ["ADMIN_ROLES", "Membership", "ROLE_ADMIN", "ROLE_OWNER", "ROLE_STAFF"]
