"""Permission lookup clients for the supported hosting platforms."""

from resource_server.clients.github import GitHubPermissionClient
from resource_server.clients.gitlab import GitLabPermissionClient


__all__ = ["GitHubPermissionClient", "GitLabPermissionClient"]
