# app/services/actor.py
"""Explicit caller identity passed into every engine operation."""

from dataclasses import dataclass

from app.errors import Forbidden
from app.models.enums import Role

STAFF_ROLES = (Role.STAFF.value, Role.ADMIN.value)


@dataclass(frozen=True)
class Actor:
    user_id: str
    role: str = Role.CUSTOMER.value

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value

    def require_owner_or_staff(self, owner_id: str) -> None:
        if owner_id != self.user_id and not self.is_staff:
            raise Forbidden("Access denied")

    def require_staff(self) -> None:
        if not self.is_staff:
            raise Forbidden("Staff or admin access required")

    def require_admin(self) -> None:
        if not self.is_admin:
            raise Forbidden("Admin access required")
