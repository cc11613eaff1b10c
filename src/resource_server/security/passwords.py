"""Password hashing for provider-authenticated accounts.

Accounts created through an identity provider never log in with a local
password, but the host's user table requires a non-null hash. Resource
servers receive a PasswordHasher so the hashing backend can be swapped
or stubbed without a host runtime.
"""

from __future__ import annotations

import secrets
from typing import Protocol, runtime_checkable

import bcrypt


# bcrypt only considers the first 72 bytes of a password
_BCRYPT_MAX_BYTES = 72


@runtime_checkable
class PasswordHasher(Protocol):
    """Protocol for password hashing backends."""

    def hash(self, password: str) -> str:
        """Return a salted hash of ``password``."""
        ...

    def verify(self, password: str, hashed: str) -> bool:
        """Return True if ``password`` matches ``hashed``."""
        ...


class BcryptPasswordHasher:
    """PasswordHasher backed by bcrypt."""

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds

    def hash(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(password.encode("utf-8")[:_BCRYPT_MAX_BYTES], salt).decode("utf-8")

    def verify(self, password: str, hashed: str) -> bool:
        try:
            return bcrypt.checkpw(
                password.encode("utf-8")[:_BCRYPT_MAX_BYTES],
                hashed.encode("utf-8"),
            )
        except ValueError:
            # Not a bcrypt hash
            return False


def random_password_seed() -> str:
    """Random value hashed into the password of provider-created accounts."""
    return secrets.token_hex(16)
