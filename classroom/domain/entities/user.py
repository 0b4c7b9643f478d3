"""Domain entity representing a user."""

from dataclasses import dataclass
from datetime import datetime

ROLE_ADMIN = "admin"
ROLE_TEACHER = "teacher"
ROLE_STUDENT = "student"

ROLES = (ROLE_ADMIN, ROLE_TEACHER, ROLE_STUDENT)


@dataclass
class User:
    """Core attributes describing a platform user."""

    id: int | None
    username: str
    email: str
    password: str
    full_name: str
    role: str
    is_active: bool = True
    created_at: datetime | None = None

    def has_role(self, alias: str) -> bool:
        """Return ``True`` when the user's role matches ``alias``."""

        return self.role.lower() == alias.lower()

    def is_admin(self) -> bool:
        """Return ``True`` when the user is an administrator."""

        return self.has_role(ROLE_ADMIN)


__all__ = ["User", "ROLES", "ROLE_ADMIN", "ROLE_TEACHER", "ROLE_STUDENT"]
