"""Shared resource server behaviour.

Provider implementations subclass BaseResourceServer and supply the
identity type, the scopes to request, the permission lookup and the two
authorization predicates. Everything else (identifiers, memoized lookup,
usernames, record merging) is identical across providers.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, ClassVar, Self

from resource_server.observability.logging import get_logger
from resource_server.records.merger import create_record_shell, merge_record
from resource_server.security.passwords import BcryptPasswordHasher
from resource_server.servers.exceptions import IdentityMismatchError
from resource_server.servers.models import PermissionCacheCell, PermissionRecord


if TYPE_CHECKING:
    from datetime import datetime

    from resource_server.oauth2.client import OAuth2ClientAdapter
    from resource_server.records.merger import LocalRecord
    from resource_server.security.passwords import PasswordHasher
    from resource_server.servers.models import ProviderConfig, ResourceOwner

logger = get_logger(__name__)

USERNAME_MAX_LENGTH = 50


class BaseResourceServer(ABC):
    """Base class implementing the provider-independent part of ResourceServer.

    Attributes:
        config: Provider configuration.
        permission_client: Platform permission lookup client.
        password_hasher: Hashes the unused password of new records.
    """

    identity_type: ClassVar[type[ResourceOwner]]
    scopes: ClassVar[tuple[str, ...]]

    def __init__(
        self,
        config: ProviderConfig,
        oauth_client: OAuth2ClientAdapter[Any],
        permission_client: Any,
        password_hasher: PasswordHasher | None = None,
    ) -> None:
        self.config = config
        self._oauth_client = oauth_client
        self.permission_client = permission_client
        self.password_hasher = password_hasher or BcryptPasswordHasher()
        self._permissions = PermissionCacheCell.unresolved()

    @property
    def provider_name(self) -> str:
        return self.config.provider_name

    @property
    def oauth_client(self) -> OAuth2ClientAdapter[Any]:
        return self._oauth_client

    @property
    def permission_cache(self) -> PermissionCacheCell:
        """Current state of the memoized permission lookup."""
        return self._permissions

    def close(self) -> None:
        """Close the OAuth2 and permission lookup HTTP clients."""
        self._oauth_client.close()
        self.permission_client.close()
        logger.debug("Resource server closed", provider=self.provider_name)

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def accepts(self, identity: ResourceOwner) -> bool:
        return isinstance(identity, self.identity_type)

    def _ensure_identity(self, identity: ResourceOwner) -> None:
        if not self.accepts(identity):
            msg = (
                f"Resource owner {type(identity).__name__} is no suitable "
                f"{self.identity_type.__name__} for provider {self.provider_name!r}"
            )
            raise IdentityMismatchError(msg)

    # =========================================================================
    # Identity
    # =========================================================================

    def get_authorization_url(self) -> str:
        return self._oauth_client.get_authorization_url(self.scopes)

    def get_oauth_identifier(self, identity: ResourceOwner) -> str:
        return f"{self.provider_name}|{identity.remote_id}"

    def get_username_from_user(self, identity: ResourceOwner) -> str:
        return f"{self.provider_name}_{identity.nickname}"[:USERNAME_MAX_LENGTH]

    def get_email_from_user(self, identity: ResourceOwner) -> str:
        return identity.email or ""

    # =========================================================================
    # Authorization
    # =========================================================================

    def load_user_details(self, identity: ResourceOwner) -> None:
        """Resolve the permission record for ``identity`` at most once.

        Without a configured project the provider only authenticates and
        the record stays absent. Lookup failures of any kind leave the record
        absent as well; they are logged and never raised.

        Raises:
            IdentityMismatchError: If ``identity`` is not this provider's type.
        """
        self._ensure_identity(identity)

        if self._permissions.is_resolved:
            return

        if not self.config.project_name:
            logger.debug(
                "No project configured, skipping permission lookup",
                provider=self.provider_name,
            )
            self._permissions = PermissionCacheCell.absent()
            return

        # Absent unless a usable record comes back
        cell = PermissionCacheCell.absent()
        try:
            record = self._lookup_permissions(identity)
            if record is None:
                logger.debug(
                    "Permission lookup returned no record",
                    provider=self.provider_name,
                    project=self.config.project_name,
                )
            else:
                cell = PermissionCacheCell.resolved(record)
        except Exception as e:  # noqa: BLE001
            logger.warning(
                "Permission lookup failed, treating user as unauthorized",
                provider=self.provider_name,
                project=self.config.project_name,
                error=str(e),
            )
        self._permissions = cell

    def _permission_record(self, identity: ResourceOwner) -> PermissionRecord | None:
        self.load_user_details(identity)
        return self._permissions.record

    @abstractmethod
    def _lookup_permissions(self, identity: ResourceOwner) -> PermissionRecord | None:
        """Query the platform for the user's permission on the project."""

    @abstractmethod
    def user_should_be_admin(self, identity: ResourceOwner) -> bool: ...

    @abstractmethod
    def user_is_active(self, identity: ResourceOwner) -> bool: ...

    def user_expires_at(self, identity: ResourceOwner) -> datetime | None:  # noqa: ARG002
        return None

    # =========================================================================
    # Local record
    # =========================================================================

    def update_user_record(
        self,
        identity: ResourceOwner,
        current_record: Mapping[str, Any] | None,
        auth_context: Mapping[str, Any] | None = None,  # noqa: ARG002
    ) -> LocalRecord:
        """Merge identity fields into the host's user record.

        A missing or malformed record is replaced by a fresh shell. The
        returned record is a new dict and is not persisted.

        Args:
            identity: Authenticated remote identity.
            current_record: Existing local record, if any.
            auth_context: Host authentication context; accepted for interface
                compatibility.

        Returns:
            The merged record.
        """
        if not isinstance(current_record, Mapping):
            logger.debug(
                "Creating record shell for new user",
                provider=self.provider_name,
                storage_pid=self.config.storage_pid,
            )
            current_record = create_record_shell(
                self.password_hasher,
                storage_pid=self.config.storage_pid,
            )

        return merge_record(
            current_record,
            {
                "email": self.get_email_from_user(identity),
                "realname": identity.name or "",
                "username": self.get_username_from_user(identity),
                "options": self.config.user_option,
            },
        )
