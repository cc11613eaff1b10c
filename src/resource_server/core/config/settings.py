"""Library configuration using Pydantic Settings with YAML support.

This module provides centralized configuration management with:
- YAML-based configuration files (config/base/ and config/environments/)
- Environment variable loading for secrets (client secrets, API tokens)
- Type validation and coercion of the string-typed provider options
- Caching for performance
"""

from __future__ import annotations

from enum import StrEnum
from functools import lru_cache
from typing import TYPE_CHECKING, Annotated

from pydantic import BaseModel, BeforeValidator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .yaml_source import MultiYamlConfigSettingsSource


if TYPE_CHECKING:
    from pydantic_settings import PydanticBaseSettingsSource


class ProviderType(StrEnum):
    """Identity provider implementations.

    - GITHUB: GitHub OAuth app, authorized via repository collaborator permission
    - GITLAB: GitLab application, authorized via project member access level
    """

    GITHUB = "github"
    GITLAB = "gitlab"


def parse_list(v: str | list[str] | tuple[str, ...] | None) -> list[str]:
    """Parse comma-separated string or list into list of strings."""
    if v is None:
        return []
    if isinstance(v, str):
        return [x.strip() for x in v.split(",") if x.strip()]
    return [str(x).strip() for x in v if str(x).strip()]


# =============================================================================
# Nested Configuration Models (from YAML)
# =============================================================================


class AppSettings(BaseModel):
    """Library identity settings."""

    name: str = "OAuth2 Resource Server"
    version: str = "0.1.0"


class LoggingSettings(BaseModel):
    """Logging configuration settings."""

    level: str = "INFO"
    format: str = "json"


class OAuth2Settings(BaseModel):
    """Settings shared by all providers."""

    callback_url: str = "http://localhost:8000/oauth2/callback"
    timeout: float = 10.0


class ProviderSettings(BaseModel):
    """Settings of one configured provider, keyed by provider name.

    The numeric options arrive as strings from YAML and environment
    variables and are coerced here.
    """

    type: ProviderType = ProviderType.GITHUB
    client_id: str = ""
    client_secret: str = ""
    project_name: str | None = None
    admin_user_level: int = 30
    default_groups: Annotated[list[str], BeforeValidator(parse_list)] = []
    user_option: int = 0
    storage_pid: int = 0
    server_url: str | None = None
    api_token: str | None = None
    enabled: bool = True


# =============================================================================
# Main Settings Class
# =============================================================================


class Settings(BaseSettings):
    """Settings with YAML + environment variable support.

    Configuration is loaded from multiple sources with the following priority
    (highest to lowest):
    1. Values passed to Settings()
    2. Environment variables
    3. .env file (secrets only)
    4. Environment-specific YAML files (config/environments/{APP_ENV}/)
    5. Base YAML files (config/base/)
    6. Default values in code

    Environment variables can override any setting using the nested delimiter '__'.
    For example: PROVIDERS__GITHUB__CLIENT_SECRET=... sets the GitHub secret.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
        case_sensitive=False,
        env_nested_delimiter="__",
    )

    APP_ENV: str = "development"

    app: AppSettings = AppSettings()
    logging: LoggingSettings = LoggingSettings()
    oauth2: OAuth2Settings = OAuth2Settings()
    providers: dict[str, ProviderSettings] = {}

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings loading order (init, env, .env, YAML, secrets)."""
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            MultiYamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )

    @property
    def enabled_providers(self) -> dict[str, ProviderSettings]:
        """Providers that are switched on."""
        return {name: p for name, p in self.providers.items() if p.enabled}

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.APP_ENV == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.APP_ENV == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
