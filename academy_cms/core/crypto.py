"""Utilities for password hashing and verification."""

from __future__ import annotations

import bcrypt

DEFAULT_ROUNDS = 12


class PasswordHasher:
    """Salted bcrypt hashing with a tunable cost factor."""

    def __init__(self, rounds: int = DEFAULT_ROUNDS) -> None:
        self.rounds = rounds
        self._dummy_hash: str | None = None

    def hash(self, password: str) -> str:
        """Hash plain text password using bcrypt with a fresh salt."""
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify(self, password: str, hashed_password: str) -> bool:
        """Verify a plain text password against a stored bcrypt hash.

        Never raises: malformed hashes, non-string input and passwords bcrypt
        refuses to process all verify as ``False``.
        """
        if not isinstance(password, str) or not isinstance(hashed_password, str):
            return False
        try:
            return bcrypt.checkpw(password.encode("utf-8"), hashed_password.encode("utf-8"))
        except ValueError:
            return False

    def burn(self, password: str) -> None:
        """Spend one verification worth of CPU against a throwaway hash.

        Used on lookup misses so that a missing account costs as much as a
        wrong password.
        """
        if self._dummy_hash is None:
            self._dummy_hash = self.hash("academy-cms-dummy-password")
        self.verify(password, self._dummy_hash)


__all__ = ["DEFAULT_ROUNDS", "PasswordHasher"]
