"""Resource servers package.

One resource server per identity provider, all implementing the
ResourceServer protocol. Build them with the factory:

    from resource_server.servers.factory import create_resource_servers

    servers = create_resource_servers()
    url = servers["github"].get_authorization_url()
"""

from resource_server.servers.base import BaseResourceServer
from resource_server.servers.exceptions import (
    ConfigurationError,
    IdentityMismatchError,
    OAuth2ExchangeError,
    PermissionLookupError,
    ResourceServerError,
)
from resource_server.servers.github import GitHubResourceServer
from resource_server.servers.gitlab import GitLabResourceServer
from resource_server.servers.models import (
    GitHubResourceOwner,
    GitLabResourceOwner,
    PermissionCacheCell,
    PermissionRecord,
    PermissionState,
    ProviderConfig,
    ResourceOwner,
)
from resource_server.servers.protocol import ResourceServer


__all__ = [
    "BaseResourceServer",
    "ConfigurationError",
    "GitHubResourceOwner",
    "GitHubResourceServer",
    "GitLabResourceOwner",
    "GitLabResourceServer",
    "IdentityMismatchError",
    "OAuth2ExchangeError",
    "PermissionCacheCell",
    "PermissionLookupError",
    "PermissionRecord",
    "PermissionState",
    "ProviderConfig",
    "ResourceOwner",
    "ResourceServer",
    "ResourceServerError",
]
