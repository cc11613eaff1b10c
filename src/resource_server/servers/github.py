"""GitHub resource server.

Authenticates through a GitHub OAuth app and authorizes against the
collaborator permission of a configured repository: collaborators with
read access are active, those with write access or stronger are admins.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from resource_server.servers.base import BaseResourceServer
from resource_server.servers.exceptions import ConfigurationError
from resource_server.servers.models import GitHubResourceOwner
from resource_server.servers.permissions import READ, WRITE


if TYPE_CHECKING:
    from resource_server.clients.github import GitHubPermissionClient
    from resource_server.oauth2.client import OAuth2ClientAdapter
    from resource_server.security.passwords import PasswordHasher
    from resource_server.servers.models import (
        PermissionRecord,
        ProviderConfig,
        ResourceOwner,
    )


def split_repository(project_name: str) -> tuple[str, str]:
    """Split ``owner/repo`` into its parts.

    Raises:
        ConfigurationError: If ``project_name`` is not exactly ``owner/repo``.
    """
    owner, sep, repo = project_name.strip().strip("/").partition("/")
    if not sep or not owner or not repo or "/" in repo:
        msg = f"GitHub project must be given as 'owner/repo', got {project_name!r}"
        raise ConfigurationError(msg)
    return owner, repo


class GitHubResourceServer(BaseResourceServer):
    """Resource server for GitHub identities."""

    identity_type = GitHubResourceOwner
    scopes = ("user",)

    permission_client: GitHubPermissionClient

    def __init__(
        self,
        config: ProviderConfig,
        oauth_client: OAuth2ClientAdapter[Any],
        permission_client: GitHubPermissionClient,
        password_hasher: PasswordHasher | None = None,
    ) -> None:
        super().__init__(config, oauth_client, permission_client, password_hasher)
        self.repository: tuple[str, str] | None = (
            split_repository(config.project_name) if config.project_name else None
        )

    def _lookup_permissions(self, identity: ResourceOwner) -> PermissionRecord | None:
        assert self.repository is not None
        owner, repo = self.repository
        return self.permission_client.get_collaborator_permission(
            owner, repo, identity.nickname
        )

    def user_should_be_admin(self, identity: ResourceOwner) -> bool:
        record = self._permission_record(identity)
        # Grant admin access from write (push) permission onwards
        return record is not None and record.grants(WRITE)

    def user_is_active(self, identity: ResourceOwner) -> bool:
        record = self._permission_record(identity)
        return record is not None and record.grants(READ)
