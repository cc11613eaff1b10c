"""OAuth2 authorization-code client adapter.

Wraps authlib's httpx OAuth2Client: builds the authorization URL for a
provider and turns an authorization code into a remote identity. The token
exchange protocol itself is authlib's; this adapter only knows the
provider's endpoints and how to read its profile payload.
"""

from __future__ import annotations

import secrets
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import httpx
from authlib.integrations.base_client import OAuthError
from authlib.integrations.httpx_client import OAuth2Client
from pydantic import ValidationError

from resource_server.observability.logging import get_logger
from resource_server.servers.exceptions import OAuth2ExchangeError
from resource_server.servers.models import ResourceOwner


logger = get_logger(__name__)

IdentityT = TypeVar("IdentityT", bound=ResourceOwner)


@dataclass(frozen=True)
class ProviderEndpoints:
    """OAuth2 and profile endpoints of an identity provider."""

    authorize_url: str
    token_url: str
    userinfo_url: str

    @classmethod
    def github(cls) -> ProviderEndpoints:
        return cls(
            authorize_url="https://github.com/login/oauth/authorize",
            token_url="https://github.com/login/oauth/access_token",
            userinfo_url="https://api.github.com/user",
        )

    @classmethod
    def gitlab(cls, server_url: str = "https://gitlab.com") -> ProviderEndpoints:
        root = server_url.rstrip("/")
        return cls(
            authorize_url=f"{root}/oauth/authorize",
            token_url=f"{root}/oauth/token",
            userinfo_url=f"{root}/api/v4/user",
        )


class OAuth2ClientAdapter(Generic[IdentityT]):
    """Authorization-code flow for one provider.

    Attributes:
        endpoints: Provider endpoints.
        state: CSRF state of the last authorization URL; the host stores it
            in the session and hands it back on the callback.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        endpoints: ProviderEndpoints,
        identity_factory: Callable[[dict[str, Any]], IdentityT],
        timeout: float = 10.0,
    ) -> None:
        self.endpoints = endpoints
        self.identity_factory = identity_factory
        self.state: str | None = None
        self._client = OAuth2Client(
            client_id=client_id,
            client_secret=client_secret,
            redirect_uri=redirect_uri,
            timeout=timeout,
        )

    @property
    def redirect_uri(self) -> str:
        return self._client.redirect_uri

    def get_authorization_url(self, scopes: Sequence[str]) -> str:
        """Build the URL the user is redirected to for authentication.

        Args:
            scopes: OAuth2 scopes to request.

        Returns:
            Authorization URL including client id, redirect URI, scope and state.
        """
        self._client.scope = " ".join(scopes)
        url, state = self._client.create_authorization_url(self.endpoints.authorize_url)
        self.state = state
        return url

    def exchange_code_for_identity(
        self,
        code: str,
        state: str | None,
        expected_state: str | None = None,
    ) -> IdentityT:
        """Exchange an authorization code and fetch the authenticated user.

        Args:
            code: Authorization code from the provider callback.
            state: State returned on the callback.
            expected_state: State the host stored in its session when it
                redirected the user. Defaults to the state this adapter
                issued, for hosts that keep one adapter across both requests.

        Returns:
            The provider's remote identity.

        Raises:
            OAuth2ExchangeError: On a missing or mismatching state, token
                endpoint errors, or an unusable profile response.
        """
        self._verify_state(state, expected_state or self.state)

        try:
            self._client.fetch_token(self.endpoints.token_url, code=code)
            response = self._client.get(self.endpoints.userinfo_url)
            response.raise_for_status()
            payload = response.json()

        except OAuthError as e:
            msg = f"Token exchange failed: {e.error}"
            raise OAuth2ExchangeError(msg) from e

        except httpx.HTTPStatusError as e:
            msg = f"Profile request returned {e.response.status_code}"
            raise OAuth2ExchangeError(msg) from e

        except httpx.HTTPError as e:
            msg = f"Cannot reach identity provider: {e}"
            raise OAuth2ExchangeError(msg) from e

        except ValueError as e:
            msg = "Identity provider returned a non-JSON response"
            raise OAuth2ExchangeError(msg) from e

        try:
            identity = self.identity_factory(payload)
        except (KeyError, TypeError, ValidationError) as e:
            msg = "Identity provider profile is missing required fields"
            raise OAuth2ExchangeError(msg) from e

        logger.info(
            "Authenticated remote identity",
            identity_type=type(identity).__name__,
            remote_id=identity.remote_id,
        )
        return identity

    @staticmethod
    def _verify_state(state: str | None, expected_state: str | None) -> None:
        if not expected_state:
            msg = "No OAuth2 state was issued for this callback"
            raise OAuth2ExchangeError(msg)
        if not state or not secrets.compare_digest(state.encode(), expected_state.encode()):
            msg = "OAuth2 state mismatch"
            raise OAuth2ExchangeError(msg)

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()
