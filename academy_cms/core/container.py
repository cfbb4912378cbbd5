"""Simple dependency container for wiring core services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Callable

from academy_cms.core.config import Settings, get_settings
from academy_cms.core.crypto import PasswordHasher
from academy_cms.core.security import AuthorizationGate, TokenIssuer
from academy_cms.modules.notifications import Mailer, build_mailer


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ConfigurationError(RuntimeError):
    """Raised when the process cannot start with the given settings."""


@dataclass(slots=True)
class ApplicationContainer:
    settings: Settings
    hasher: PasswordHasher
    issuer: TokenIssuer
    gate: AuthorizationGate
    mailer: Mailer
    # Wall clock for reset-token expiry.
    clock: Callable[[], datetime] = _utcnow

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        mailer: Mailer | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> "ApplicationContainer":
        security = settings.security
        if security.secret_key is None or not security.secret_key.get_secret_value():
            raise ConfigurationError("SECURITY__SECRET_KEY must be set")

        issuer = TokenIssuer(
            security.secret_key.get_secret_value(),
            algorithm=security.algorithm,
            expires_in=timedelta(minutes=security.access_token_expire_minutes),
            extra_roles=security.extra_allowed_roles,
        )
        return cls(
            settings=settings,
            hasher=PasswordHasher(rounds=security.bcrypt_rounds),
            issuer=issuer,
            gate=AuthorizationGate(issuer, extra_allowed_roles=security.extra_allowed_roles),
            mailer=mailer if mailer is not None else build_mailer(settings.mail),
            clock=clock if clock is not None else _utcnow,
        )


@lru_cache()
def get_container() -> ApplicationContainer:
    return ApplicationContainer.from_settings(get_settings())


__all__ = ["ApplicationContainer", "ConfigurationError", "get_container"]
