"""
Academy CMS - pytest configuration.
Shared fakes and fixtures for unit and API tests.
"""

import re
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest
from fastapi.testclient import TestClient

from academy_cms.core.config import get_settings
from academy_cms.core.container import ApplicationContainer, get_container
from academy_cms.core.crypto import PasswordHasher
from academy_cms.core.security import TokenIssuer
from academy_cms.infrastructure.database import session as db_session
from academy_cms.infrastructure.database.repositories import SqlAccountRepository
from academy_cms.modules.accounts import (
    Account,
    AccountAlreadyExistsError,
    AccountNotFoundError,
    AccountService,
    PasswordResetService,
    Role,
)
from academy_cms.modules.notifications import MailDeliveryError

TEST_SECRET = "test-signing-key-0123456789"
RESET_LINK = re.compile(r"/reset-password/([0-9a-f]{64})")


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: Optional[datetime] = None) -> None:
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class RecordingMailer:
    """Mailer that keeps every message, or fails on demand."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str, str]] = []
        self.fail = False

    async def send(self, address: str, subject: str, body: str) -> None:
        if self.fail:
            raise MailDeliveryError("smtp relay unreachable")
        self.sent.append((address, subject, body))

    def last_token(self) -> str:
        _, _, body = self.sent[-1]
        match = RESET_LINK.search(body)
        assert match is not None, body
        return match.group(1)


class InMemoryAccountRepository:
    """Dict-backed account store with the same contract as the SQL repository."""

    def __init__(self) -> None:
        self.accounts: dict[str, Account] = {}
        self._next_id = 1

    async def get_by_id(self, account_id):
        account = self.accounts.get(account_id)
        return replace(account) if account else None

    async def get_by_email(self, email):
        return self._find(lambda a: a.email == email)

    async def get_by_username(self, username):
        return self._find(lambda a: a.username == username)

    async def get_by_reset_token_hash(self, token_hash):
        return self._find(lambda a: a.reset_token_hash == token_hash)

    async def list_accounts(self):
        return [replace(a) for a in self.accounts.values()]

    async def create_account(self, *, username, email, password_hash, role):
        if any(a.username == username or a.email == email for a in self.accounts.values()):
            raise AccountAlreadyExistsError(username)
        account_id = f"acc-{self._next_id}"
        self._next_id += 1
        self.accounts[account_id] = Account(
            id=account_id,
            username=username,
            email=email,
            role=Role(role),
            password_hash=password_hash,
        )
        return replace(self.accounts[account_id])

    async def update_role(self, account_id, role):
        self._require(account_id).role = Role(role)
        return replace(self.accounts[account_id])

    async def update_password(self, account_id, password_hash):
        account = self._require(account_id)
        account.password_hash = password_hash
        account.reset_token_hash = None
        account.reset_token_expires_at = None
        return replace(account)

    async def set_reset_token(self, account_id, token_hash, expires_at):
        assert (token_hash is None) == (expires_at is None)
        account = self._require(account_id)
        account.reset_token_hash = token_hash
        account.reset_token_expires_at = expires_at

    async def complete_password_reset(self, account_id, token_hash, password_hash, *, now):
        account = self._require(account_id)
        if account.reset_token_hash != token_hash or account.reset_token_expires_at <= now:
            return None
        return await self.update_password(account_id, password_hash)

    async def delete_account(self, account_id):
        self._require(account_id)
        del self.accounts[account_id]

    def _find(self, predicate):
        for account in self.accounts.values():
            if predicate(account):
                return replace(account)
        return None

    def _require(self, account_id):
        if account_id not in self.accounts:
            raise AccountNotFoundError(account_id)
        return self.accounts[account_id]


# ══════════════════════════════════════════════════════════════════════════════
# UNIT FIXTURES
# ══════════════════════════════════════════════════════════════════════════════


@pytest.fixture
def hasher() -> PasswordHasher:
    """Cheapest bcrypt cost, keeps the suite fast."""
    return PasswordHasher(rounds=4)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
def repository() -> InMemoryAccountRepository:
    return InMemoryAccountRepository()


@pytest.fixture
def account_service(repository, hasher) -> AccountService:
    return AccountService(repository, hasher)


@pytest.fixture
def reset_service(repository, hasher, mailer, clock) -> PasswordResetService:
    return PasswordResetService(
        repository,
        hasher,
        mailer,
        reset_url_base="https://academy.test/",
        ttl=timedelta(minutes=10),
        clock=clock,
    )


@pytest.fixture
def issuer() -> TokenIssuer:
    return TokenIssuer(TEST_SECRET, expires_in=timedelta(hours=1))


# ══════════════════════════════════════════════════════════════════════════════
# API FIXTURES
# ══════════════════════════════════════════════════════════════════════════════


@pytest.fixture
def test_settings(monkeypatch):
    """Settings pointing at a private in-memory database."""
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("DATABASE__URL", "sqlite+aiosqlite:///:memory:")
    monkeypatch.setenv("SECURITY__SECRET_KEY", TEST_SECRET)
    monkeypatch.setenv("SECURITY__BCRYPT_ROUNDS", "4")
    monkeypatch.setenv("SECURITY__RESET_RESPONSE_FLOOR_SECONDS", "0")
    monkeypatch.setenv("FRONTEND__BASE_URL", "https://academy.test")
    get_settings.cache_clear()
    get_container.cache_clear()
    yield get_settings()
    get_settings.cache_clear()
    get_container.cache_clear()


@pytest.fixture
def container(test_settings, mailer, clock) -> ApplicationContainer:
    return ApplicationContainer.from_settings(test_settings, mailer=mailer, clock=clock)


@pytest.fixture
def client(container):
    from academy_cms.main import create_app

    app = create_app(container)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_header(container):
    """Build a bearer header for an arbitrary account id and role."""

    def build(account_id: str, role: Role) -> dict[str, str]:
        return {"Authorization": f"Bearer {container.issuer.issue(account_id, role)}"}

    return build


@pytest.fixture
def super_admin_header(auth_header) -> dict[str, str]:
    return auth_header("root-admin", Role.SUPER_ADMIN)


@pytest.fixture
def stored_account(client):
    """Read an account by email straight from the app's database."""

    async def load(email: str) -> Optional[Account]:
        async with db_session.AsyncSessionFactory() as session:
            return await SqlAccountRepository(session).get_by_email(email)

    def fetch(email: str) -> Optional[Account]:
        return client.portal.call(load, email)

    return fetch
