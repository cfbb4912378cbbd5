"""Domain services for account management."""

from __future__ import annotations

import logging
from typing import Sequence

from academy_cms.core.crypto import PasswordHasher

from .exceptions import (
    AccountAlreadyExistsError,
    AccountNotFoundError,
    InvalidCredentialsError,
    InvalidRoleError,
    ProtectedAccountError,
)
from .models import Account, AccountCreateInput, Role
from .repository import AccountRepository

logger = logging.getLogger(__name__)


class AccountService:
    """Encapsulates core account use cases."""

    def __init__(self, repository: AccountRepository, hasher: PasswordHasher) -> None:
        self._repository = repository
        self._hasher = hasher

    async def get_by_id(self, account_id: str) -> Account | None:
        return await self._repository.get_by_id(account_id)

    async def get_by_email(self, email: str) -> Account | None:
        return await self._repository.get_by_email(email)

    async def list_accounts(self) -> Sequence[Account]:
        return await self._repository.list_accounts()

    async def register(self, payload: AccountCreateInput) -> Account:
        if await self._repository.get_by_email(payload.email) is not None:
            raise AccountAlreadyExistsError(payload.email)
        if await self._repository.get_by_username(payload.username) is not None:
            raise AccountAlreadyExistsError(payload.username)

        account = await self._repository.create_account(
            username=payload.username,
            email=payload.email,
            password_hash=self._hasher.hash(payload.password),
            role=payload.role,
        )
        logger.info("Registered account %s with role %s", account.id, account.role.value)
        return account

    async def authenticate(self, email: str, password: str) -> Account:
        account = await self._repository.get_by_email(email)
        if account is None:
            self._hasher.burn(password)
            raise InvalidCredentialsError()
        if not self._hasher.verify(password, account.password_hash):
            raise InvalidCredentialsError()
        return account

    async def change_role(self, account_id: str, new_role: str | Role) -> Account:
        role = Role.parse(new_role)
        if role is None:
            raise InvalidRoleError(str(new_role))

        current = await self._repository.get_by_id(account_id)
        if current is None:
            raise AccountNotFoundError(account_id)

        account = await self._repository.update_role(account_id, role)
        logger.info(
            "Changed role of account %s from %s to %s",
            account_id,
            current.role.value,
            role.value,
        )
        return account

    async def change_password(self, account_id: str, current_password: str, new_password: str) -> Account:
        account = await self._repository.get_by_id(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        if not self._hasher.verify(current_password, account.password_hash):
            raise InvalidCredentialsError()
        return await self._repository.update_password(account_id, self._hasher.hash(new_password))

    async def delete_account(self, account_id: str) -> None:
        account = await self._repository.get_by_id(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        if account.is_super_admin():
            raise ProtectedAccountError(account_id)

        await self._repository.delete_account(account_id)
        logger.info("Deleted account %s", account_id)
