"""Account related dependency providers."""

from datetime import timedelta

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from academy_cms.core.container import ApplicationContainer, get_container
from academy_cms.infrastructure.database.repositories.account_repository import SqlAccountRepository
from academy_cms.modules.accounts import AccountService, PasswordResetService

from .database import get_db_session


def get_account_repository(db: AsyncSession = Depends(get_db_session)) -> SqlAccountRepository:
    return SqlAccountRepository(db)


def get_account_service(
    repository: SqlAccountRepository = Depends(get_account_repository),
    container: ApplicationContainer = Depends(get_container),
) -> AccountService:
    return AccountService(repository, container.hasher)


def get_password_reset_service(
    repository: SqlAccountRepository = Depends(get_account_repository),
    container: ApplicationContainer = Depends(get_container),
) -> PasswordResetService:
    settings = container.settings
    return PasswordResetService(
        repository,
        container.hasher,
        container.mailer,
        reset_url_base=settings.frontend.base_url,
        ttl=timedelta(minutes=settings.reset_token_expire_minutes),
        clock=container.clock,
        response_floor=timedelta(seconds=settings.security.reset_response_floor_seconds),
    )


__all__ = [
    "get_account_repository",
    "get_account_service",
    "get_password_reset_service",
]
