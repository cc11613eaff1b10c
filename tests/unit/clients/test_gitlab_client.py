"""Unit tests for GitLabPermissionClient."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC, datetime

import httpx
import pytest
import respx

from resource_server.clients.gitlab import GitLabPermissionClient
from resource_server.servers.exceptions import PermissionLookupError
from resource_server.servers.permissions import MAINTAIN, READ


pytestmark = pytest.mark.unit

MEMBER_URL = "https://gitlab.example.com/api/v4/projects/42/members/all/583231"


@pytest.fixture
def client() -> Iterator[GitLabPermissionClient]:
    with GitLabPermissionClient(
        server_url="https://gitlab.example.com/",
        api_token="glpat-test",
    ) as client:
        yield client


class TestMemberUrl:
    """Tests for URL construction."""

    def test_numeric_project(self, client: GitLabPermissionClient) -> None:
        """Should use numeric project ids as they are."""
        assert client.member_url("42", 583231) == MEMBER_URL

    def test_encodes_project_path(self, client: GitLabPermissionClient) -> None:
        """Should URL-encode namespace/project paths."""
        assert client.member_url("acme/website", 1) == (
            "https://gitlab.example.com/api/v4/projects/acme%2Fwebsite/members/all/1"
        )


class TestGetMemberPermission:
    """Tests for get_member_permission."""

    @respx.mock
    def test_returns_access_level(self, client: GitLabPermissionClient) -> None:
        """Should return level, derived permissions and expiry."""
        route = respx.get(MEMBER_URL).mock(
            return_value=httpx.Response(
                200,
                json={
                    "id": 583231,
                    "username": "tanuki",
                    "access_level": 40,
                    "expires_at": "2027-01-31",
                },
            )
        )

        record = client.get_member_permission("42", 583231)

        assert route.calls.last.request.headers["PRIVATE-TOKEN"] == "glpat-test"
        assert record.access_level == 40
        assert MAINTAIN in record.permissions
        assert record.expires_at == datetime(2027, 1, 31, tzinfo=UTC)

    @respx.mock
    def test_membership_without_expiry(self, client: GitLabPermissionClient) -> None:
        """Should leave expires_at unset for permanent members."""
        respx.get(MEMBER_URL).mock(
            return_value=httpx.Response(200, json={"access_level": 20, "expires_at": None})
        )

        record = client.get_member_permission("42", 583231)

        assert record.expires_at is None
        assert record.permissions == {READ}

    @respx.mock
    def test_not_a_member(self, client: GitLabPermissionClient) -> None:
        """Should raise PermissionLookupError with the 404 status."""
        respx.get(MEMBER_URL).mock(
            return_value=httpx.Response(404, json={"message": "404 Not found"})
        )

        with pytest.raises(PermissionLookupError, match="not a member") as exc_info:
            client.get_member_permission("42", 583231)

        assert exc_info.value.status_code == 404

    @respx.mock
    def test_malformed_response(self, client: GitLabPermissionClient) -> None:
        """Should raise PermissionLookupError without an access level."""
        respx.get(MEMBER_URL).mock(return_value=httpx.Response(200, json={"id": 1}))

        with pytest.raises(PermissionLookupError, match="malformed"):
            client.get_member_permission("42", 583231)

    @respx.mock
    def test_timeout(self, client: GitLabPermissionClient) -> None:
        """Should raise PermissionLookupError on timeout."""
        respx.get(MEMBER_URL).mock(side_effect=httpx.ConnectTimeout("timed out"))

        with pytest.raises(PermissionLookupError, match="timed out"):
            client.get_member_permission("42", 583231)
