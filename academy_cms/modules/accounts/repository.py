"""Repository protocol for accounts."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence

from .models import Account, Role


class AccountRepository(Protocol):
    """Abstract repository interface for account persistence.

    Every mutating method is a single read-modify-write against one record.
    """

    async def get_by_id(self, account_id: str) -> Account | None:
        ...

    async def get_by_email(self, email: str) -> Account | None:
        ...

    async def get_by_username(self, username: str) -> Account | None:
        ...

    async def get_by_reset_token_hash(self, token_hash: str) -> Account | None:
        ...

    async def list_accounts(self) -> Sequence[Account]:
        ...

    async def create_account(
        self,
        *,
        username: str,
        email: str,
        password_hash: str,
        role: Role,
    ) -> Account:
        ...

    async def update_role(self, account_id: str, role: Role) -> Account:
        ...

    async def update_password(self, account_id: str, password_hash: str) -> Account:
        """Store a new password hash and drop any pending reset token."""
        ...

    async def set_reset_token(
        self,
        account_id: str,
        token_hash: str | None,
        expires_at: datetime | None,
    ) -> None:
        """Set or clear (both ``None``) the pending reset token."""
        ...

    async def complete_password_reset(
        self,
        account_id: str,
        token_hash: str,
        password_hash: str,
        *,
        now: datetime,
    ) -> Account | None:
        """Swap the password only if ``token_hash`` is still pending and unexpired at ``now``.

        Returns ``None`` when another request consumed or replaced the token first.
        """
        ...

    async def delete_account(self, account_id: str) -> None:
        ...
