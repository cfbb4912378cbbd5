"""Session tokens and role-based authorization."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, Optional

from jose import JWTError, jwt

from academy_cms.modules.accounts.models import Role


class InvalidTokenError(Exception):
    """A session token is malformed, forged or expired."""


class NotAuthenticatedError(Exception):
    """No usable session token accompanied the request."""


class PermissionDeniedError(Exception):
    """The caller's role is outside the operation's allow-set."""


@dataclass(frozen=True, slots=True)
class TokenData:
    account_id: str
    # A Role value, or a legacy name the deployment still accepts.
    role: str


# Verified identity handed to protected handlers.
Principal = TokenData


class TokenIssuer:
    """Signs and validates stateless session tokens."""

    def __init__(
        self,
        secret_key: str,
        *,
        algorithm: str = "HS256",
        expires_in: timedelta = timedelta(days=7),
        extra_roles: Iterable[str] = (),
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        if not secret_key:
            raise ValueError("secret_key must not be empty")
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._expires_in = expires_in
        self._accepted_roles = frozenset(role.value for role in Role) | frozenset(extra_roles)
        self._clock = clock

    def __repr__(self) -> str:
        return f"TokenIssuer(algorithm={self._algorithm!r}, expires_in={self._expires_in!r})"

    def issue(self, account_id: str, role: Role | str, expires_delta: Optional[timedelta] = None) -> str:
        issued_at = self._clock()
        payload = {
            "sub": account_id,
            "role": Role(role).value,
            "iat": issued_at,
            "exp": issued_at + (expires_delta if expires_delta is not None else self._expires_in),
        }
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def validate(self, token: str) -> TokenData:
        """Return the token's identity or raise :class:`InvalidTokenError`.

        The reason for a rejection is never part of the raised error.
        """
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self._algorithm])
        except JWTError as exc:
            raise InvalidTokenError() from exc

        account_id = payload.get("sub")
        role = payload.get("role")
        if not isinstance(account_id, str) or not account_id:
            raise InvalidTokenError()
        if not isinstance(role, str) or role not in self._accepted_roles:
            raise InvalidTokenError()
        return TokenData(account_id=account_id, role=role)


class AuthorizationGate:
    """Checks a bearer token against a per-operation role allow-set.

    Stateless: every call validates the token again.
    """

    def __init__(self, issuer: TokenIssuer, extra_allowed_roles: Iterable[str] = ()) -> None:
        self._issuer = issuer
        self._extra_allowed_roles = frozenset(extra_allowed_roles)

    def allow_set(self, roles: Iterable[Role | str]) -> frozenset[str]:
        names = frozenset(role.value if isinstance(role, Role) else role for role in roles)
        return names | self._extra_allowed_roles

    def authorize(self, token: Optional[str], allowed_roles: Iterable[Role | str]) -> Principal:
        if not token:
            raise NotAuthenticatedError()
        try:
            principal = self._issuer.validate(token)
        except InvalidTokenError as exc:
            raise NotAuthenticatedError() from exc

        if principal.role not in self.allow_set(allowed_roles):
            raise PermissionDeniedError()
        return principal
