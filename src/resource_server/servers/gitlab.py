"""GitLab resource server.

Authorizes against the member access level on a configured project.
Reporters and above are active; the admin threshold is the provider's
``admin_user_level``. Membership expiry dates carry over as user expiry.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from resource_server.servers.base import BaseResourceServer
from resource_server.servers.models import GitLabResourceOwner
from resource_server.servers.permissions import GitLabAccessLevel


if TYPE_CHECKING:
    from datetime import datetime

    from resource_server.clients.gitlab import GitLabPermissionClient
    from resource_server.servers.models import PermissionRecord, ResourceOwner


class GitLabResourceServer(BaseResourceServer):
    """Resource server for GitLab identities."""

    identity_type = GitLabResourceOwner
    scopes = ("read_user",)

    ACTIVE_ACCESS_LEVEL = GitLabAccessLevel.REPORTER

    permission_client: GitLabPermissionClient

    def _lookup_permissions(self, identity: ResourceOwner) -> PermissionRecord | None:
        assert self.config.project_name is not None
        return self.permission_client.get_member_permission(
            self.config.project_name, identity.id
        )

    def _access_level(self, identity: ResourceOwner) -> int | None:
        record = self._permission_record(identity)
        return record.access_level if record is not None else None

    def user_should_be_admin(self, identity: ResourceOwner) -> bool:
        level = self._access_level(identity)
        return level is not None and level >= self.config.admin_user_level

    def user_is_active(self, identity: ResourceOwner) -> bool:
        level = self._access_level(identity)
        return level is not None and level >= self.ACTIVE_ACCESS_LEVEL

    def user_expires_at(self, identity: ResourceOwner) -> datetime | None:
        record = self._permission_record(identity)
        return record.expires_at if record is not None else None
