"""OAuth2 client adapter and redirect URI helpers."""

from resource_server.oauth2.client import OAuth2ClientAdapter, ProviderEndpoints
from resource_server.oauth2.redirect import build_redirect_uri


__all__ = ["OAuth2ClientAdapter", "ProviderEndpoints", "build_redirect_uri"]
