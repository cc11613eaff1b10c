"""Remote identity factories for generating test data.

Uses polyfactory for consistent test data generation.
"""

from __future__ import annotations

from typing import Any

from polyfactory.factories.pydantic_factory import ModelFactory

from resource_server.servers.models import (
    GitHubResourceOwner,
    GitLabResourceOwner,
    PermissionRecord,
)
from resource_server.servers.permissions import GITHUB_PERMISSION_IMPLIES, READ, WRITE


class GitHubResourceOwnerFactory(ModelFactory[GitHubResourceOwner]):
    """Factory for generating GitHubResourceOwner instances."""

    __model__ = GitHubResourceOwner

    @classmethod
    def id(cls) -> int:
        return cls.__faker__.random_int(min=1, max=99_999_999)

    @classmethod
    def login(cls) -> str:
        return cls.__faker__.user_name()

    @classmethod
    def email(cls) -> str:
        return cls.__faker__.email()

    @classmethod
    def raw(cls) -> dict[str, Any]:
        return {}


class GitLabResourceOwnerFactory(ModelFactory[GitLabResourceOwner]):
    """Factory for generating GitLabResourceOwner instances."""

    __model__ = GitLabResourceOwner

    @classmethod
    def id(cls) -> int:
        return cls.__faker__.random_int(min=1, max=99_999_999)

    @classmethod
    def username(cls) -> str:
        return cls.__faker__.user_name()

    @classmethod
    def email(cls) -> str:
        return cls.__faker__.email()

    @classmethod
    def raw(cls) -> dict[str, Any]:
        return {}


class PermissionRecordFactory(ModelFactory[PermissionRecord]):
    """Factory for generating PermissionRecord instances."""

    __model__ = PermissionRecord

    @classmethod
    def permissions(cls) -> frozenset[str]:
        return GITHUB_PERMISSION_IMPLIES[READ]

    @classmethod
    def access_level(cls) -> int | None:
        return None

    @classmethod
    def role_name(cls) -> str | None:
        return READ

    @classmethod
    def expires_at(cls) -> None:
        return None

    @classmethod
    def writer(cls, **kwargs: Any) -> PermissionRecord:
        """Create a record of a collaborator with push access."""
        return cls.build(
            permissions=GITHUB_PERMISSION_IMPLIES[WRITE],
            role_name=WRITE,
            **kwargs,
        )
