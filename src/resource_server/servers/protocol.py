"""Resource server protocol definition.

This module defines the ResourceServer protocol that every identity
provider implementation must satisfy. The host application talks to
resource servers only through this interface.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, Self, runtime_checkable


if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime

    from resource_server.oauth2.client import OAuth2ClientAdapter
    from resource_server.records.merger import LocalRecord
    from resource_server.servers.models import ResourceOwner


@runtime_checkable
class ResourceServer(Protocol):
    """Protocol for resource servers.

    A resource server decides who an authenticated user is and what they may
    do. It is built per authentication transaction: permission lookups are
    resolved at most once per instance and the result is kept for its
    lifetime.

    Typical host flow, one server per request:
        with create_resource_server(config) as server:
            url = server.get_authorization_url()
            session["oauth2_state"] = server.oauth_client.state
            redirect(url)
        ...
        with create_resource_server(config) as server:
            identity = server.oauth_client.exchange_code_for_identity(
                code, state, expected_state=session.pop("oauth2_state", None)
            )
            if not server.user_is_active(identity):
                deny()
            record = server.update_user_record(identity, existing_record)
            record["admin"] = server.user_should_be_admin(identity)
    """

    @property
    def provider_name(self) -> str:
        """Configured provider name, namespacing identifiers and usernames."""
        ...

    @property
    def oauth_client(self) -> OAuth2ClientAdapter[Any]:
        """OAuth2 client adapter used for the code exchange."""
        ...

    def close(self) -> None:
        """Release the HTTP clients held by the server."""
        ...

    def __enter__(self) -> Self:
        ...

    def __exit__(self, *exc_info: object) -> None:
        ...

    def accepts(self, identity: ResourceOwner) -> bool:
        """Return True if ``identity`` is of this provider's identity type."""
        ...

    def get_authorization_url(self) -> str:
        """Return the provider authorization URL for the minimum scope."""
        ...

    def get_oauth_identifier(self, identity: ResourceOwner) -> str:
        """Return ``"<provider_name>|<remote id>"``."""
        ...

    def load_user_details(self, identity: ResourceOwner) -> None:
        """Resolve the user's permission record once per instance.

        Raises:
            IdentityMismatchError: If ``identity`` is not this provider's type.
        """
        ...

    def user_should_be_admin(self, identity: ResourceOwner) -> bool:
        """Return True if the user gets administrator rights."""
        ...

    def user_is_active(self, identity: ResourceOwner) -> bool:
        """Return True if the user may log in at all."""
        ...

    def user_expires_at(self, identity: ResourceOwner) -> datetime | None:
        """Return when the user's access ends, or None if it does not."""
        ...

    def get_username_from_user(self, identity: ResourceOwner) -> str:
        """Return the local username derived from the identity."""
        ...

    def get_email_from_user(self, identity: ResourceOwner) -> str:
        """Return the identity's email address."""
        ...

    def update_user_record(
        self,
        identity: ResourceOwner,
        current_record: Mapping[str, Any] | None,
        auth_context: Mapping[str, Any] | None = None,
    ) -> LocalRecord:
        """Merge identity-derived fields into the host's user record."""
        ...
