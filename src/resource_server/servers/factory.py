"""Resource server factory.

This module builds resource servers from provider configuration and routes
remote identities to the server of the matching provider. Servers hold
per-transaction state, so hosts build a fresh set for every request.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

from resource_server.clients.github import GitHubPermissionClient
from resource_server.clients.gitlab import GITLAB_URL, GitLabPermissionClient
from resource_server.core.config import ProviderType, get_settings
from resource_server.oauth2.client import OAuth2ClientAdapter, ProviderEndpoints
from resource_server.oauth2.redirect import build_redirect_uri
from resource_server.observability.logging import get_logger
from resource_server.servers.exceptions import ConfigurationError, IdentityMismatchError
from resource_server.servers.github import GitHubResourceServer
from resource_server.servers.gitlab import GitLabResourceServer
from resource_server.servers.models import (
    GitHubResourceOwner,
    GitLabResourceOwner,
    ProviderConfig,
)


if TYPE_CHECKING:
    from resource_server.core.config import Settings
    from resource_server.security.passwords import PasswordHasher
    from resource_server.servers.models import ResourceOwner
    from resource_server.servers.protocol import ResourceServer

logger = get_logger(__name__)


def build_provider_config(settings: Settings, provider_name: str) -> ProviderConfig:
    """Build the immutable ProviderConfig of a configured provider.

    Args:
        settings: Loaded settings.
        provider_name: Key of the provider under ``providers``.

    Returns:
        ProviderConfig with the redirect URI derived from the callback URL.

    Raises:
        ConfigurationError: If the provider is not configured.
    """
    provider = settings.providers.get(provider_name)
    if provider is None:
        msg = f"Unknown provider: {provider_name}"
        raise ConfigurationError(msg)

    return ProviderConfig(
        provider_type=provider.type,
        provider_name=provider_name,
        client_id=provider.client_id,
        client_secret=provider.client_secret,
        redirect_uri=build_redirect_uri(settings.oauth2.callback_url, provider_name),
        project_name=provider.project_name,
        admin_user_level=provider.admin_user_level,
        default_groups=provider.default_groups,
        user_option=provider.user_option,
        storage_pid=provider.storage_pid,
        server_url=provider.server_url,
        api_token=provider.api_token,
        timeout=settings.oauth2.timeout,
    )


def _validate(config: ProviderConfig) -> None:
    if not config.client_id:
        msg = f"client_id is required for provider {config.provider_name!r}"
        raise ConfigurationError(msg)
    if not config.client_secret:
        msg = f"client_secret is required for provider {config.provider_name!r}"
        raise ConfigurationError(msg)


def create_resource_server(
    config: ProviderConfig,
    password_hasher: PasswordHasher | None = None,
) -> ResourceServer:
    """Create the resource server for a provider configuration.

    - GITHUB: GitHub OAuth app + collaborator permission lookup
    - GITLAB: GitLab application + project member lookup

    Args:
        config: Provider configuration.
        password_hasher: Hasher for new records; bcrypt when None.

    Returns:
        A resource server in its unresolved state.

    Raises:
        ConfigurationError: If credentials are missing or the project is malformed.
    """
    _validate(config)
    logger.info(
        "Creating resource server",
        provider=config.provider_name,
        type=config.provider_type.value,
        project=config.project_name,
    )

    if config.provider_type == ProviderType.GITHUB:
        oauth_client = OAuth2ClientAdapter(
            client_id=config.client_id,
            client_secret=config.client_secret,
            redirect_uri=config.redirect_uri,
            endpoints=ProviderEndpoints.github(),
            identity_factory=GitHubResourceOwner.from_profile,
            timeout=config.timeout,
        )
        return GitHubResourceServer(
            config,
            oauth_client,
            GitHubPermissionClient(
                client_id=config.client_id,
                client_secret=config.client_secret,
                api_token=config.api_token,
                timeout=config.timeout,
            ),
            password_hasher,
        )

    if config.provider_type == ProviderType.GITLAB:
        server_url = config.server_url or GITLAB_URL
        oauth_client = OAuth2ClientAdapter(
            client_id=config.client_id,
            client_secret=config.client_secret,
            redirect_uri=config.redirect_uri,
            endpoints=ProviderEndpoints.gitlab(server_url),
            identity_factory=GitLabResourceOwner.from_profile,
            timeout=config.timeout,
        )
        return GitLabResourceServer(
            config,
            oauth_client,
            GitLabPermissionClient(
                server_url=server_url,
                api_token=config.api_token,
                timeout=config.timeout,
            ),
            password_hasher,
        )

    # Should not reach here due to enum validation
    msg = f"Unknown provider type: {config.provider_type}"
    raise ConfigurationError(msg)


def create_resource_servers(
    settings: Settings | None = None,
    password_hasher: PasswordHasher | None = None,
) -> dict[str, ResourceServer]:
    """Create one resource server per enabled provider, keyed by provider name."""
    if settings is None:
        settings = get_settings()

    return {
        name: create_resource_server(build_provider_config(settings, name), password_hasher)
        for name in settings.enabled_providers
    }


def select_resource_server(
    identity: ResourceOwner,
    servers: Mapping[str, ResourceServer] | Iterable[ResourceServer],
    provider_name: str | None = None,
) -> ResourceServer:
    """Return the resource server responsible for ``identity``.

    Args:
        identity: Remote identity produced by a code exchange.
        servers: Candidate servers, as a list or keyed by provider name.
        provider_name: Provider the callback was issued for; required to
            disambiguate several providers of the same type.

    Raises:
        IdentityMismatchError: If no candidate accepts the identity.
    """
    candidates = list(servers.values()) if isinstance(servers, Mapping) else list(servers)
    if provider_name is not None:
        candidates = [s for s in candidates if s.provider_name == provider_name]

    for server in candidates:
        if server.accepts(identity):
            return server

    msg = f"No resource server accepts {type(identity).__name__}"
    if provider_name is not None:
        msg += f" for provider {provider_name!r}"
    raise IdentityMismatchError(msg)
