"""HTTP client for the GitHub collaborator permission API.

This module provides a synchronous client that asks GitHub which permission
a user holds on a repository. Lookups block the calling request; failures
are raised as PermissionLookupError for the resource server to handle.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx

from resource_server.observability.logging import get_logger
from resource_server.servers.exceptions import PermissionLookupError
from resource_server.servers.models import PermissionRecord
from resource_server.servers.permissions import expand_github_permissions


logger = get_logger(__name__)

GITHUB_API_URL = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"


class GitHubPermissionClient:
    """Synchronous client for ``GET /repos/{owner}/{repo}/collaborators/{user}/permission``.

    Requests are authenticated with ``api_token`` when one is configured,
    otherwise with the OAuth app's client credentials.

    Attributes:
        base_url: GitHub REST API root.
        timeout: HTTP request timeout in seconds.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        api_token: str | None = None,
        base_url: str = GITHUB_API_URL,
        timeout: float = 10.0,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.api_token = api_token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._http_client: httpx.Client | None = None

    def permission_url(self, owner: str, repo: str, handle: str) -> str:
        """Build the collaborator permission endpoint URL."""
        segments = "/".join(quote(part, safe="") for part in (owner, repo))
        return f"{self.base_url}/repos/{segments}/collaborators/{quote(handle, safe='')}/permission"

    def _get_http_client(self) -> httpx.Client:
        if self._http_client is None:
            headers = {
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": GITHUB_API_VERSION,
            }
            auth: httpx.Auth | None = None
            if self.api_token:
                headers["Authorization"] = f"Bearer {self.api_token}"
            else:
                auth = httpx.BasicAuth(self.client_id, self.client_secret)

            self._http_client = httpx.Client(
                timeout=httpx.Timeout(self.timeout),
                headers=headers,
                auth=auth,
            )
            logger.info(
                "GitHubPermissionClient initialized",
                base_url=self.base_url,
                timeout=self.timeout,
                token_auth=bool(self.api_token),
            )
        return self._http_client

    def close(self) -> None:
        """Close the HTTP client and release connections."""
        if self._http_client is not None:
            self._http_client.close()
            self._http_client = None
            logger.debug("GitHubPermissionClient closed")

    def __enter__(self) -> GitHubPermissionClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def get_collaborator_permission(
        self,
        owner: str,
        repo: str,
        handle: str,
    ) -> PermissionRecord:
        """Look up the permission ``handle`` holds on ``owner/repo``.

        Args:
            owner: Repository owner (user or organization).
            repo: Repository name.
            handle: GitHub login of the user.

        Returns:
            PermissionRecord with every granted and implied permission.

        Raises:
            PermissionLookupError: If GitHub cannot be reached, the user is
                not a collaborator, or the response is malformed.
        """
        url = self.permission_url(owner, repo, handle)

        try:
            response = self._get_http_client().get(url)
            response.raise_for_status()
            payload: dict[str, Any] = response.json()

        except httpx.TimeoutException as e:
            msg = f"GitHub permission lookup timed out after {self.timeout}s"
            raise PermissionLookupError(msg) from e

        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            if status_code == httpx.codes.NOT_FOUND:
                msg = f"{handle} is not a collaborator of {owner}/{repo}"
            else:
                msg = f"GitHub returned {status_code} for permission lookup"
            raise PermissionLookupError(msg, status_code=status_code) from e

        except httpx.RequestError as e:
            msg = f"Cannot connect to GitHub: {e}"
            raise PermissionLookupError(msg) from e

        except ValueError as e:
            msg = "GitHub returned a non-JSON permission response"
            raise PermissionLookupError(msg) from e

        role = payload.get("role_name") or payload.get("permission")
        flags = (payload.get("user") or {}).get("permissions")
        record = PermissionRecord(
            permissions=expand_github_permissions(role, flags),
            role_name=role,
        )
        logger.debug(
            "Resolved GitHub collaborator permission",
            repository=f"{owner}/{repo}",
            handle=handle,
            role=role,
        )
        return record
