"""Resource server exceptions.

This module defines exceptions raised by resource servers, their permission
lookup clients and the OAuth2 client adapter. Permission lookup failures are
caught inside the resource server and never reach the host application.
"""

from __future__ import annotations


class ResourceServerError(Exception):
    """Base exception for resource server errors."""


class IdentityMismatchError(ResourceServerError):
    """Raised when an identity is routed to a provider of another type."""


class ConfigurationError(ResourceServerError):
    """Raised when a resource server is misconfigured."""


class PermissionLookupError(ResourceServerError):
    """Raised when the platform permission API cannot answer a lookup.

    Covers transport failures, API errors and users who are not
    collaborators or members of the configured project.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class OAuth2ExchangeError(ResourceServerError):
    """Raised when the authorization code exchange or profile fetch fails."""
