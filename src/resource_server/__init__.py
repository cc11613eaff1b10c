"""OAuth2 resource servers.

Authenticate users through an OAuth2 identity provider, authorize them
against a project on the provider's hosting platform, and map the result
onto the host application's user records.
"""

from resource_server.servers import (
    ConfigurationError,
    GitHubResourceOwner,
    GitLabResourceOwner,
    IdentityMismatchError,
    OAuth2ExchangeError,
    PermissionLookupError,
    PermissionRecord,
    ProviderConfig,
    ResourceOwner,
    ResourceServer,
    ResourceServerError,
)
from resource_server.servers.factory import (
    build_provider_config,
    create_resource_server,
    create_resource_servers,
    select_resource_server,
)


__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "GitHubResourceOwner",
    "GitLabResourceOwner",
    "IdentityMismatchError",
    "OAuth2ExchangeError",
    "PermissionLookupError",
    "PermissionRecord",
    "ProviderConfig",
    "ResourceOwner",
    "ResourceServer",
    "ResourceServerError",
    "build_provider_config",
    "create_resource_server",
    "create_resource_servers",
    "select_resource_server",
]
