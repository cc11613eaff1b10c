"""Resource server models.

This module defines the remote identities produced by the OAuth2 client
adapter, the provider configuration, and the permission records resolved
against the hosting platform.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from enum import StrEnum
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, Field, field_validator, model_validator

from resource_server.core.config import ProviderType, parse_list
from resource_server.servers.permissions import GitLabAccessLevel, grants


# =============================================================================
# Remote Identities
# =============================================================================


class ResourceOwner(BaseModel, ABC):
    """Authenticated user as described by the OAuth2 identity provider.

    Abstract: every provider supplies its own subclass defining ``nickname``.

    Attributes:
        id: Provider-assigned numeric user id.
        name: Display name, if the user set one.
        email: Public or primary email, if disclosed.
        raw: Profile payload as returned by the provider.
    """

    id: int
    name: str | None = None
    email: str | None = None
    raw: dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}

    @property
    def remote_id(self) -> str:
        """Provider-unique identifier as a string."""
        return str(self.id)

    @property
    @abstractmethod
    def nickname(self) -> str:
        """Provider handle used for permission lookups and usernames."""

    def to_dict(self) -> dict[str, Any]:
        """Return the profile payload, or the model fields if none was kept."""
        if self.raw:
            return dict(self.raw)
        return self.model_dump(exclude={"raw"})


class GitHubResourceOwner(ResourceOwner):
    """GitHub user from ``GET /user``."""

    login: str

    @property
    def nickname(self) -> str:
        return self.login

    @classmethod
    def from_profile(cls, payload: dict[str, Any]) -> GitHubResourceOwner:
        return cls(
            id=payload["id"],
            login=payload["login"],
            name=payload.get("name"),
            email=payload.get("email"),
            raw=dict(payload),
        )


class GitLabResourceOwner(ResourceOwner):
    """GitLab user from ``GET /api/v4/user``."""

    username: str

    @property
    def nickname(self) -> str:
        return self.username

    @classmethod
    def from_profile(cls, payload: dict[str, Any]) -> GitLabResourceOwner:
        return cls(
            id=payload["id"],
            username=payload["username"],
            name=payload.get("name"),
            email=payload.get("email") or payload.get("public_email") or None,
            raw=dict(payload),
        )


# =============================================================================
# Configuration
# =============================================================================


class ProviderConfig(BaseModel):
    """Immutable configuration of one provider instance.

    Attributes:
        provider_type: Which resource server implementation to build.
        provider_name: Key distinguishing this provider; namespaces identifiers.
        client_id: OAuth2 client id.
        client_secret: OAuth2 client secret.
        redirect_uri: Callback URL registered with the provider.
        project_name: Project checked for permissions; None disables the check.
        admin_user_level: Access level from which users become administrators.
        default_groups: Group ids assigned when the host opts in.
        user_option: Numeric option flag stamped onto merged records.
        storage_pid: Placement marker of freshly created records.
        server_url: Base URL of self-hosted platforms (GitLab).
        api_token: Token for the permission API, if client credentials
            are not sufficient.
        timeout: HTTP timeout in seconds for platform calls.
    """

    provider_type: ProviderType
    provider_name: str = Field(..., min_length=1)
    client_id: str
    client_secret: str
    redirect_uri: str
    project_name: str | None = None
    admin_user_level: int = int(GitLabAccessLevel.DEVELOPER)
    default_groups: Annotated[tuple[str, ...], BeforeValidator(parse_list)] = ()
    user_option: int = 0
    storage_pid: int = 0
    server_url: str | None = None
    api_token: str | None = None
    timeout: float = 10.0

    model_config = {"frozen": True}

    @field_validator("project_name", "server_url", "api_token", mode="before")
    @classmethod
    def _blank_to_none(cls, v: str | None) -> str | None:
        if isinstance(v, str) and not v.strip():
            return None
        return v


# =============================================================================
# Permission Records
# =============================================================================


class PermissionRecord(BaseModel):
    """Result of a permission lookup against the configured project.

    Attributes:
        permissions: Granted permission strings ("read", "write", ...).
        access_level: Numeric access level, for platforms that report one.
        role_name: Platform role name, if reported.
        expires_at: When the membership expires, if it does.
    """

    permissions: frozenset[str] = frozenset()
    access_level: int | None = None
    role_name: str | None = None
    expires_at: datetime | None = None

    model_config = {"frozen": True}

    def grants(self, permission: str) -> bool:
        """Return True if this record grants ``permission`` directly or implied."""
        return grants(self.permissions, permission)


class PermissionState(StrEnum):
    """Resolution state of a resource server's permission cache."""

    UNRESOLVED = "unresolved"
    RESOLVED = "resolved"
    ABSENT = "absent"


class PermissionCacheCell(BaseModel):
    """Memoized outcome of the permission lookup.

    ``RESOLVED`` carries a record; ``ABSENT`` means the lookup was skipped or
    failed. Both are terminal.
    """

    state: PermissionState = PermissionState.UNRESOLVED
    record: PermissionRecord | None = None

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _record_matches_state(self) -> PermissionCacheCell:
        if (self.record is not None) != (self.state is PermissionState.RESOLVED):
            msg = f"{self.state.value} cache cell cannot carry record={self.record!r}"
            raise ValueError(msg)
        return self

    @classmethod
    def unresolved(cls) -> PermissionCacheCell:
        return cls()

    @classmethod
    def resolved(cls, record: PermissionRecord) -> PermissionCacheCell:
        return cls(state=PermissionState.RESOLVED, record=record)

    @classmethod
    def absent(cls) -> PermissionCacheCell:
        return cls(state=PermissionState.ABSENT)

    @property
    def is_resolved(self) -> bool:
        return self.state is not PermissionState.UNRESOLVED
