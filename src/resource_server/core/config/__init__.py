"""Configuration module with YAML and environment variable support."""

from .settings import (
    LoggingSettings,
    OAuth2Settings,
    ProviderSettings,
    ProviderType,
    Settings,
    get_settings,
    parse_list,
)


__all__ = [
    "LoggingSettings",
    "OAuth2Settings",
    "ProviderSettings",
    "ProviderType",
    "Settings",
    "get_settings",
    "parse_list",
]
