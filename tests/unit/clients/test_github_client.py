"""Unit tests for GitHubPermissionClient."""

from __future__ import annotations

import base64
from collections.abc import Iterator

import httpx
import pytest
import respx

from resource_server.clients.github import GITHUB_API_VERSION, GitHubPermissionClient
from resource_server.servers.exceptions import PermissionLookupError
from resource_server.servers.permissions import ADMIN, READ, TRIAGE, WRITE


pytestmark = pytest.mark.unit

PERMISSION_URL = "https://api.github.com/repos/acme/website/collaborators/octocat/permission"


@pytest.fixture
def client() -> Iterator[GitHubPermissionClient]:
    with GitHubPermissionClient(client_id="gh-id", client_secret="gh-secret") as client:
        yield client


class TestPermissionUrl:
    """Tests for URL construction."""

    def test_builds_collaborator_url(self, client: GitHubPermissionClient) -> None:
        """Should target the collaborator permission endpoint."""
        assert client.permission_url("acme", "website", "octocat") == PERMISSION_URL

    def test_encodes_segments(self, client: GitHubPermissionClient) -> None:
        """Should not let a handle escape its path segment."""
        url = client.permission_url("acme", "website", "../admin")

        assert url.endswith("/collaborators/..%2Fadmin/permission")

    def test_custom_base_url(self) -> None:
        """Should support GitHub Enterprise API roots."""
        client = GitHubPermissionClient("id", "secret", base_url="https://ghe.example.com/api/v3/")

        assert client.permission_url("a", "b", "c") == (
            "https://ghe.example.com/api/v3/repos/a/b/collaborators/c/permission"
        )


class TestGetCollaboratorPermission:
    """Tests for get_collaborator_permission."""

    @respx.mock
    def test_returns_expanded_permissions(self, client: GitHubPermissionClient) -> None:
        """Should expand the reported role into implied permissions."""
        route = respx.get(PERMISSION_URL).mock(
            return_value=httpx.Response(
                200,
                json={
                    "permission": "write",
                    "role_name": "write",
                    "user": {"login": "octocat", "permissions": {"pull": True, "push": True}},
                },
            )
        )

        record = client.get_collaborator_permission("acme", "website", "octocat")

        assert route.called
        assert record.permissions == {WRITE, TRIAGE, READ}
        assert record.role_name == "write"
        assert record.grants(WRITE) is True
        assert record.grants(ADMIN) is False

    @respx.mock
    def test_uses_client_credentials_by_default(self, client: GitHubPermissionClient) -> None:
        """Should authenticate with basic auth and send API headers."""
        route = respx.get(PERMISSION_URL).mock(
            return_value=httpx.Response(200, json={"permission": "read"})
        )

        client.get_collaborator_permission("acme", "website", "octocat")

        request = route.calls.last.request
        credentials = base64.b64encode(b"gh-id:gh-secret").decode()
        assert request.headers["Authorization"] == f"Basic {credentials}"
        assert request.headers["X-GitHub-Api-Version"] == GITHUB_API_VERSION

    @respx.mock
    def test_uses_api_token_when_configured(self) -> None:
        """Should send the API token as bearer token."""
        route = respx.get(PERMISSION_URL).mock(
            return_value=httpx.Response(200, json={"permission": "admin"})
        )

        with GitHubPermissionClient("gh-id", "gh-secret", api_token="ghp_token") as client:
            record = client.get_collaborator_permission("acme", "website", "octocat")

        assert route.calls.last.request.headers["Authorization"] == "Bearer ghp_token"
        assert ADMIN in record.permissions

    @respx.mock
    def test_not_a_collaborator(self, client: GitHubPermissionClient) -> None:
        """Should raise PermissionLookupError with the 404 status."""
        respx.get(PERMISSION_URL).mock(
            return_value=httpx.Response(404, json={"message": "Not Found"})
        )

        with pytest.raises(PermissionLookupError, match="not a collaborator") as exc_info:
            client.get_collaborator_permission("acme", "website", "octocat")

        assert exc_info.value.status_code == 404

    @respx.mock
    def test_server_error(self, client: GitHubPermissionClient) -> None:
        """Should raise PermissionLookupError for server errors."""
        respx.get(PERMISSION_URL).mock(return_value=httpx.Response(502))

        with pytest.raises(PermissionLookupError) as exc_info:
            client.get_collaborator_permission("acme", "website", "octocat")

        assert exc_info.value.status_code == 502

    @respx.mock
    def test_timeout(self, client: GitHubPermissionClient) -> None:
        """Should raise PermissionLookupError on timeout."""
        respx.get(PERMISSION_URL).mock(side_effect=httpx.ReadTimeout("timed out"))

        with pytest.raises(PermissionLookupError, match="timed out"):
            client.get_collaborator_permission("acme", "website", "octocat")

    @respx.mock
    def test_connection_error(self, client: GitHubPermissionClient) -> None:
        """Should raise PermissionLookupError when GitHub is unreachable."""
        respx.get(PERMISSION_URL).mock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(PermissionLookupError, match="Cannot connect"):
            client.get_collaborator_permission("acme", "website", "octocat")

    @respx.mock
    def test_non_json_response(self, client: GitHubPermissionClient) -> None:
        """Should raise PermissionLookupError for non-JSON bodies."""
        respx.get(PERMISSION_URL).mock(return_value=httpx.Response(200, text="<html>"))

        with pytest.raises(PermissionLookupError, match="non-JSON"):
            client.get_collaborator_permission("acme", "website", "octocat")


class TestLifecycle:
    """Tests for client lifecycle."""

    def test_close_without_requests(self) -> None:
        """Should close cleanly before any request was made."""
        client = GitHubPermissionClient("id", "secret")

        client.close()

        assert client._http_client is None
