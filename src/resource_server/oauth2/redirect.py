"""Redirect URI construction."""

from __future__ import annotations

import httpx


PROVIDER_PARAM = "oauth2-provider"


def build_redirect_uri(callback_url: str, provider_name: str) -> str:
    """Return the host callback URL tagged with the provider name.

    The host reads ``oauth2-provider`` on the callback to route the code to
    the matching resource server. Existing query parameters are kept.
    """
    url = httpx.URL(callback_url).copy_set_param(PROVIDER_PARAM, provider_name)
    return str(url)
