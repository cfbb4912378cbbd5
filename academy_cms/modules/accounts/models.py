"""Domain models for accounts."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class Role(str, Enum):
    USER = "User"
    SUPER_ADMIN = "SuperAdmin"
    ADMISSIONS_ADMIN = "AdmissionsAdmin"
    CONTENT_ADMIN = "ContentAdmin"
    AUDIENCE_ADMIN = "AudienceAdmin"

    @classmethod
    def parse(cls, value: object) -> "Role | None":
        """Return the matching role, or ``None`` for anything outside the enumeration."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


ADMIN_ROLES = frozenset(
    {Role.SUPER_ADMIN, Role.ADMISSIONS_ADMIN, Role.CONTENT_ADMIN, Role.AUDIENCE_ADMIN}
)


@dataclass(slots=True)
class Account:
    id: str
    username: str
    email: str
    role: Role
    password_hash: str = field(repr=False)
    reset_token_hash: Optional[str] = field(default=None, repr=False)
    reset_token_expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    def is_super_admin(self) -> bool:
        return self.role is Role.SUPER_ADMIN

    def has_pending_reset(self) -> bool:
        return self.reset_token_hash is not None


@dataclass(slots=True)
class AccountCreateInput:
    username: str
    email: str
    password: str
    role: Role = Role.USER
