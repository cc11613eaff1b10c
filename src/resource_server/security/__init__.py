"""Security helpers for provider-authenticated accounts."""

from resource_server.security.passwords import BcryptPasswordHasher, PasswordHasher


__all__ = ["BcryptPasswordHasher", "PasswordHasher"]
