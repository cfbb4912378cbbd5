"""Password reset tokens: issue, deliver and redeem."""

from __future__ import annotations

import asyncio
import hashlib
import logging
import secrets
import time
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable

from academy_cms.core.crypto import PasswordHasher
from academy_cms.modules.notifications import MailDeliveryError, Mailer

from .exceptions import PasswordMismatchError, PasswordResetDeliveryError, ResetTokenInvalidError
from .models import Account
from .repository import AccountRepository

logger = logging.getLogger(__name__)

RESET_TOKEN_BYTES = 32
DEFAULT_RESET_TTL = timedelta(minutes=10)

RESET_SUBJECT = "Password Reset Link (Valid for {minutes} min)"
RESET_BODY = """You requested a password reset.
Please click the following link (valid for {minutes} minutes):

{url}

If you did not request this, please ignore this email.
"""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def digest_reset_token(token: str) -> str:
    """SHA-256 hex digest under which a reset token is stored."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class PasswordResetService:
    """Single-use, time-bound reset tokens.

    Only the digest of a token is persisted. The plaintext leaves this class
    once, through the mailer, and a later redemption is matched by digest.
    """

    def __init__(
        self,
        repository: AccountRepository,
        hasher: PasswordHasher,
        mailer: Mailer,
        *,
        reset_url_base: str,
        ttl: timedelta = DEFAULT_RESET_TTL,
        clock: Callable[[], datetime] = _utcnow,
        response_floor: timedelta = timedelta(0),
        timer: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._repository = repository
        self._hasher = hasher
        self._mailer = mailer
        self._reset_url_base = reset_url_base.rstrip("/")
        self._ttl = ttl
        self._clock = clock
        self._response_floor = response_floor.total_seconds()
        self._timer = timer
        self._sleep = sleep

    @property
    def ttl_minutes(self) -> int:
        return int(self._ttl.total_seconds() // 60)

    async def issue_token(self, account: Account) -> str:
        """Store a fresh token digest on the account and return the plaintext.

        A second call replaces the first token; only the latest one redeems.
        """
        token = secrets.token_hex(RESET_TOKEN_BYTES)
        await self._repository.set_reset_token(
            account.id,
            digest_reset_token(token),
            self._clock() + self._ttl,
        )
        return token

    async def request_reset(self, email: str) -> None:
        """Send a reset link if ``email`` belongs to an account.

        Returns the same way whether or not the account exists, and no sooner
        than ``response_floor`` after the call started, so neither the reply
        nor its latency tells a caller which addresses are registered.
        """
        started = self._timer()
        try:
            await self._send_reset_link(email)
        except PasswordResetDeliveryError:
            await self._wait_out_floor(started)
            raise
        await self._wait_out_floor(started)

    async def _send_reset_link(self, email: str) -> None:
        account = await self._repository.get_by_email(email)
        if account is None:
            return

        token = await self.issue_token(account)
        url = f"{self._reset_url_base}/reset-password/{token}"
        try:
            await self._mailer.send(
                account.email,
                RESET_SUBJECT.format(minutes=self.ttl_minutes),
                RESET_BODY.format(minutes=self.ttl_minutes, url=url),
            )
        except MailDeliveryError as exc:
            logger.error("Password reset delivery failed for account %s: %s", account.id, exc)
            await self._repository.set_reset_token(account.id, None, None)
            raise PasswordResetDeliveryError(account.id) from exc
        except Exception as exc:
            logger.exception("Mailer raised unexpectedly for account %s", account.id)
            await self._repository.set_reset_token(account.id, None, None)
            raise PasswordResetDeliveryError(account.id) from exc

        logger.info("Password reset issued for account %s", account.id)

    async def _wait_out_floor(self, started: float) -> None:
        remaining = self._response_floor - (self._timer() - started)
        if remaining > 0:
            await self._sleep(remaining)

    async def redeem(self, token: str, password: str, confirm_password: str) -> Account:
        token_hash = digest_reset_token(token)
        account = await self._repository.get_by_reset_token_hash(token_hash)
        if account is None:
            raise ResetTokenInvalidError()

        expires_at = account.reset_token_expires_at
        if expires_at is None or expires_at <= self._clock():
            await self._repository.set_reset_token(account.id, None, None)
            logger.info("Expired password reset token discarded for account %s", account.id)
            raise ResetTokenInvalidError()

        if password != confirm_password:
            raise PasswordMismatchError()

        updated = await self._repository.complete_password_reset(
            account.id,
            token_hash,
            self._hasher.hash(password),
            now=self._clock(),
        )
        if updated is None:
            raise ResetTokenInvalidError()

        logger.info("Password reset completed for account %s", account.id)
        return updated
