"""SQLAlchemy implementation of the account repository."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Sequence

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from academy_cms.infrastructure.database.models import AccountModel
from academy_cms.modules.accounts.exceptions import AccountAlreadyExistsError, AccountNotFoundError
from academy_cms.modules.accounts.models import Account, Role
from academy_cms.modules.accounts.repository import AccountRepository


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes; everything is stored in UTC.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SqlAccountRepository(AccountRepository):
    """Account repository backed by SQLAlchemy models."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, account_id: str) -> Account | None:
        return self._to_domain(await self._get_model(account_id))

    async def get_by_email(self, email: str) -> Account | None:
        stmt = select(AccountModel).where(AccountModel.email == email)
        result = await self._session.execute(stmt)
        return self._to_domain(result.scalar_one_or_none())

    async def get_by_username(self, username: str) -> Account | None:
        stmt = select(AccountModel).where(AccountModel.username == username)
        result = await self._session.execute(stmt)
        return self._to_domain(result.scalar_one_or_none())

    async def get_by_reset_token_hash(self, token_hash: str) -> Account | None:
        stmt = select(AccountModel).where(AccountModel.reset_token_hash == token_hash)
        result = await self._session.execute(stmt)
        return self._to_domain(result.scalar_one_or_none())

    async def list_accounts(self) -> Sequence[Account]:
        stmt = select(AccountModel).order_by(AccountModel.created_at.desc())
        result = await self._session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()]

    async def create_account(
        self,
        *,
        username: str,
        email: str,
        password_hash: str,
        role: Role,
    ) -> Account:
        model = AccountModel(
            username=username,
            email=email,
            password_hash=password_hash,
            role=Role(role).value,
        )
        self._session.add(model)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            raise AccountAlreadyExistsError(username) from exc
        await self._session.refresh(model)
        return self._to_domain(model)

    async def update_role(self, account_id: str, role: Role) -> Account:
        model = await self._require_model(account_id)
        model.role = Role(role).value
        return await self._flush(model)

    async def update_password(self, account_id: str, password_hash: str) -> Account:
        model = await self._require_model(account_id)
        model.password_hash = password_hash
        model.reset_token_hash = None
        model.reset_token_expires_at = None
        return await self._flush(model)

    async def set_reset_token(
        self,
        account_id: str,
        token_hash: str | None,
        expires_at: datetime | None,
    ) -> None:
        if (token_hash is None) != (expires_at is None):
            raise ValueError("reset token hash and expiry must be set or cleared together")
        model = await self._require_model(account_id)
        model.reset_token_hash = token_hash
        model.reset_token_expires_at = expires_at
        await self._session.flush()

    async def complete_password_reset(
        self,
        account_id: str,
        token_hash: str,
        password_hash: str,
        *,
        now: datetime,
    ) -> Account | None:
        stmt = (
            update(AccountModel)
            .where(
                AccountModel.id == account_id,
                AccountModel.reset_token_hash == token_hash,
                AccountModel.reset_token_expires_at > now,
            )
            .values(
                password_hash=password_hash,
                reset_token_hash=None,
                reset_token_expires_at=None,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        if result.rowcount != 1:
            return None

        model = await self._require_model(account_id)
        await self._session.refresh(model)
        return self._to_domain(model)

    async def delete_account(self, account_id: str) -> None:
        result = await self._session.execute(delete(AccountModel).where(AccountModel.id == account_id))
        if result.rowcount == 0:
            raise AccountNotFoundError(account_id)

    async def _get_model(self, account_id: str) -> AccountModel | None:
        stmt = select(AccountModel).where(AccountModel.id == account_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def _require_model(self, account_id: str) -> AccountModel:
        model = await self._get_model(account_id)
        if model is None:
            raise AccountNotFoundError(account_id)
        return model

    async def _flush(self, model: AccountModel) -> Account:
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_domain(model)

    @staticmethod
    def _to_domain(model: AccountModel | None) -> Account | None:
        if model is None:
            return None
        return Account(
            id=str(model.id),
            username=model.username,
            email=model.email,
            role=Role(model.role),
            password_hash=model.password_hash,
            reset_token_hash=model.reset_token_hash,
            reset_token_expires_at=_as_utc(model.reset_token_expires_at),
            created_at=_as_utc(model.created_at),
            updated_at=_as_utc(model.updated_at),
        )
