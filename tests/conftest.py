"""Shared test fixtures for the resource server tests.

Provides provider configurations, remote identities, and doubles for the
OAuth2 client adapter, the permission lookup clients and password hashing.
"""

from __future__ import annotations

from collections.abc import Iterator
from unittest.mock import MagicMock

import pytest

from resource_server.clients.github import GitHubPermissionClient
from resource_server.clients.gitlab import GitLabPermissionClient
from resource_server.core.config import ProviderType, get_settings
from resource_server.oauth2.client import OAuth2ClientAdapter
from resource_server.servers.github import GitHubResourceServer
from resource_server.servers.gitlab import GitLabResourceServer
from resource_server.servers.models import (
    GitHubResourceOwner,
    GitLabResourceOwner,
    ProviderConfig,
)


class StubPasswordHasher:
    """Deterministic PasswordHasher double."""

    def hash(self, password: str) -> str:
        return f"stub${password}"

    def verify(self, password: str, hashed: str) -> bool:
        return hashed == f"stub${password}"


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> Iterator[None]:
    """Reset cached settings around every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def password_hasher() -> StubPasswordHasher:
    return StubPasswordHasher()


# =============================================================================
# Provider Configuration
# =============================================================================


@pytest.fixture
def github_config() -> ProviderConfig:
    """GitHub provider guarding the acme/website repository."""
    return ProviderConfig(
        provider_type=ProviderType.GITHUB,
        provider_name="gh",
        client_id="gh-client-id",
        client_secret="gh-client-secret",
        redirect_uri="https://cms.example.com/oauth2/callback?oauth2-provider=gh",
        project_name="acme/website",
        default_groups="1, 2",
        user_option=3,
    )


@pytest.fixture
def gitlab_config() -> ProviderConfig:
    """GitLab provider guarding project 42, admins from Maintainer."""
    return ProviderConfig(
        provider_type=ProviderType.GITLAB,
        provider_name="gl",
        client_id="gl-client-id",
        client_secret="gl-client-secret",
        redirect_uri="https://cms.example.com/oauth2/callback?oauth2-provider=gl",
        project_name="42",
        admin_user_level="40",
        user_option="1",
        storage_pid=7,
        server_url="https://gitlab.example.com",
        api_token="glpat-test",
    )


# =============================================================================
# Identities
# =============================================================================


@pytest.fixture
def github_identity() -> GitHubResourceOwner:
    return GitHubResourceOwner(
        id=583231,
        login="octocat",
        name="The Octocat",
        email="octocat@github.com",
    )


@pytest.fixture
def gitlab_identity() -> GitLabResourceOwner:
    return GitLabResourceOwner(
        id=583231,
        username="tanuki",
        name="Tanuki",
        email="tanuki@gitlab.example.com",
    )


# =============================================================================
# Collaborator Doubles
# =============================================================================


@pytest.fixture
def mock_oauth_client() -> MagicMock:
    client = MagicMock(spec=OAuth2ClientAdapter)
    client.get_authorization_url.return_value = (
        "https://github.com/login/oauth/authorize?client_id=gh-client-id&state=abc"
    )
    return client


@pytest.fixture
def mock_github_permissions() -> MagicMock:
    return MagicMock(spec=GitHubPermissionClient)


@pytest.fixture
def mock_gitlab_permissions() -> MagicMock:
    return MagicMock(spec=GitLabPermissionClient)


@pytest.fixture
def github_server(
    github_config: ProviderConfig,
    mock_oauth_client: MagicMock,
    mock_github_permissions: MagicMock,
    password_hasher: StubPasswordHasher,
) -> GitHubResourceServer:
    return GitHubResourceServer(
        github_config,
        mock_oauth_client,
        mock_github_permissions,
        password_hasher,
    )


@pytest.fixture
def gitlab_server(
    gitlab_config: ProviderConfig,
    mock_oauth_client: MagicMock,
    mock_gitlab_permissions: MagicMock,
    password_hasher: StubPasswordHasher,
) -> GitLabResourceServer:
    return GitLabResourceServer(
        gitlab_config,
        mock_oauth_client,
        mock_gitlab_permissions,
        password_hasher,
    )
