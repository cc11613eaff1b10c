"""HTTP client for the GitLab project member API."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any
from urllib.parse import quote

import httpx

from resource_server.observability.logging import get_logger
from resource_server.servers.exceptions import PermissionLookupError
from resource_server.servers.models import PermissionRecord
from resource_server.servers.permissions import gitlab_permissions_for


logger = get_logger(__name__)

GITLAB_URL = "https://gitlab.com"


def _parse_expiry(value: str | None) -> datetime | None:
    """Parse GitLab's ``expires_at`` date into an aware datetime."""
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


class GitLabPermissionClient:
    """Synchronous client for ``GET /projects/{id}/members/all/{user_id}``.

    The ``all`` variant includes members inherited from parent groups.
    Requests carry ``api_token`` as a PRIVATE-TOKEN header when configured.

    Attributes:
        server_url: GitLab instance root, e.g. https://gitlab.com.
        timeout: HTTP request timeout in seconds.
    """

    def __init__(
        self,
        server_url: str = GITLAB_URL,
        api_token: str | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.server_url = server_url.rstrip("/")
        self.api_token = api_token
        self.timeout = timeout
        self._http_client: httpx.Client | None = None

    @property
    def api_url(self) -> str:
        """REST API v4 root."""
        return f"{self.server_url}/api/v4"

    def member_url(self, project: str, user_id: int) -> str:
        """Build the project member endpoint URL; project paths are URL-encoded."""
        return f"{self.api_url}/projects/{quote(str(project), safe='')}/members/all/{user_id}"

    def _get_http_client(self) -> httpx.Client:
        if self._http_client is None:
            headers = {"Accept": "application/json"}
            if self.api_token:
                headers["PRIVATE-TOKEN"] = self.api_token
            self._http_client = httpx.Client(
                timeout=httpx.Timeout(self.timeout),
                headers=headers,
            )
            logger.info(
                "GitLabPermissionClient initialized",
                server_url=self.server_url,
                timeout=self.timeout,
            )
        return self._http_client

    def close(self) -> None:
        """Close the HTTP client and release connections."""
        if self._http_client is not None:
            self._http_client.close()
            self._http_client = None

    def __enter__(self) -> GitLabPermissionClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def get_member_permission(self, project: str, user_id: int) -> PermissionRecord:
        """Look up the access level of a user on a project.

        Args:
            project: Numeric project id or ``namespace/project`` path.
            user_id: GitLab user id.

        Returns:
            PermissionRecord carrying the access level, derived permissions
            and membership expiry.

        Raises:
            PermissionLookupError: If GitLab cannot be reached, the user is
                not a member, or the response is malformed.
        """
        url = self.member_url(project, user_id)

        try:
            response = self._get_http_client().get(url)
            response.raise_for_status()
            payload: dict[str, Any] = response.json()
            access_level = int(payload["access_level"])
            expires_at = _parse_expiry(payload.get("expires_at"))

        except httpx.TimeoutException as e:
            msg = f"GitLab member lookup timed out after {self.timeout}s"
            raise PermissionLookupError(msg) from e

        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            if status_code == httpx.codes.NOT_FOUND:
                msg = f"User {user_id} is not a member of {project}"
            else:
                msg = f"GitLab returned {status_code} for member lookup"
            raise PermissionLookupError(msg, status_code=status_code) from e

        except httpx.RequestError as e:
            msg = f"Cannot connect to GitLab: {e}"
            raise PermissionLookupError(msg) from e

        except (KeyError, TypeError, ValueError) as e:
            msg = "GitLab returned a malformed member response"
            raise PermissionLookupError(msg) from e

        logger.debug(
            "Resolved GitLab member access level",
            project=project,
            user_id=user_id,
            access_level=access_level,
        )
        return PermissionRecord(
            permissions=gitlab_permissions_for(access_level),
            access_level=access_level,
            expires_at=expires_at,
        )
