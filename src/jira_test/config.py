"""Configuration loading for jira-test.

This module provides:
- JiraSettings: Raw environment settings (JIRA_* variables, optional .env)
- BasicAuth / PatAuth: Jira Cloud and Jira Data Center/Server credentials
- JiraConfig / AppConfig: Validated, immutable connection configuration
- load_config: Build AppConfig from the environment
- get_config_summary: Sanitized summary safe for display

Environment:
    JIRA_BASE_URL: Jira instance URL (required)
    JIRA_EMAIL + JIRA_API_TOKEN: Jira Cloud basic authentication
    JIRA_PAT: Jira Data Center/Server personal access token
    JIRA_API_VERSION: "v2", "v3" or "auto" (default "auto")
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from jira_test.errors import ConfigError

ApiVersion = Literal["v2", "v3"]


class JiraSettings(BaseSettings):
    """Jira settings read from environment variables with the JIRA_ prefix.

    Fields are all optional here; completeness is enforced by load_config()
    so that missing values produce a ConfigError with setup guidance.

    Example:
        >>> settings = JiraSettings(_env_file=None)
        >>> settings.api_version
        'auto'
    """

    model_config = SettingsConfigDict(
        env_prefix="JIRA_",
        env_file=".env",
        extra="ignore",
    )

    base_url: str | None = Field(default=None, description="Jira instance URL")
    email: str | None = Field(default=None, description="Jira Cloud account email")
    api_token: SecretStr | None = Field(default=None, description="Jira Cloud API token")
    pat: SecretStr | None = Field(default=None, description="Jira DC/Server personal access token")
    api_version: Literal["v2", "v3", "auto"] = Field(
        default="auto",
        description="REST API version, or 'auto' to detect on first use",
    )


class BasicAuth(BaseModel):
    """Jira Cloud credentials (email + API token)."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["basic"] = "basic"
    email: str = Field(..., min_length=1)
    api_token: SecretStr


class PatAuth(BaseModel):
    """Jira Data Center/Server personal access token."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["pat"] = "pat"
    token: SecretStr


class JiraConfig(BaseModel):
    """Jira connection configuration.

    Attributes:
        base_url: Jira instance URL, normalized without trailing slashes.
        auth: Basic (Cloud) or PAT (DC/Server) credentials.
        api_version: Fixed API version, or "auto" for lazy detection.

    Example:
        >>> config = JiraConfig(
        ...     base_url="https://example.atlassian.net/",
        ...     auth=PatAuth(token="secret"),
        ... )
        >>> config.base_url
        'https://example.atlassian.net'
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    base_url: str = Field(..., min_length=1)
    auth: BasicAuth | PatAuth = Field(..., discriminator="type")
    api_version: Literal["v2", "v3", "auto"] = "auto"

    @field_validator("base_url")
    @classmethod
    def normalize_base_url(cls, v: str) -> str:
        """Strip trailing slashes from the base URL."""
        return v.rstrip("/")


class AppConfig(BaseModel):
    """Top-level application configuration."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    jira: JiraConfig


def load_config(env_file: str | None = ".env") -> AppConfig:
    """Load configuration from environment variables.

    Jira Cloud credentials (JIRA_EMAIL + JIRA_API_TOKEN) take precedence
    over a personal access token (JIRA_PAT) when both are present.

    Args:
        env_file: Optional dotenv file consulted after the process environment.
            Pass None to read the process environment only.

    Returns:
        Validated AppConfig.

    Raises:
        ConfigError: If the base URL or credentials are missing, or a value
            fails validation.
    """
    try:
        settings = JiraSettings(_env_file=env_file)  # type: ignore[call-arg]
    except ValidationError as e:
        raise ConfigError(format_validation_error(e, env_prefix="JIRA_")) from e

    if not settings.base_url:
        msg = (
            "JIRA_BASE_URL environment variable is required.\n"
            "Set it to your Jira instance URL (e.g., https://your-domain.atlassian.net)"
        )
        raise ConfigError(msg)

    auth = _load_auth(settings)
    try:
        return AppConfig(
            jira=JiraConfig(
                base_url=settings.base_url,
                auth=auth,
                api_version=settings.api_version,
            )
        )
    except ValidationError as e:
        raise ConfigError(format_validation_error(e)) from e


def format_validation_error(err: ValidationError, env_prefix: str = "") -> str:
    """Format a pydantic ValidationError as one ``loc: msg`` line per error.

    Example:
        >>> format_validation_error(err, env_prefix="JIRA_")
        "Invalid configuration:\\n  - JIRA_API_VERSION: Input should be 'v2', 'v3' or 'auto'"
    """
    lines = ["Invalid configuration:"]
    for e in err.errors():
        loc = ".".join(str(x) for x in e["loc"])
        if env_prefix:
            loc = f"{env_prefix}{loc}".upper()
        lines.append(f"  - {loc}: {e['msg']}")
    return "\n".join(lines)


def _load_auth(settings: JiraSettings) -> BasicAuth | PatAuth:
    """Pick the authentication scheme from settings.

    Raises:
        ConfigError: If no usable credentials are configured.
    """
    api_token = settings.api_token.get_secret_value() if settings.api_token else ""
    if settings.email and api_token:
        return BasicAuth(email=settings.email, api_token=settings.api_token)

    if settings.pat and settings.pat.get_secret_value():
        return PatAuth(token=settings.pat)

    msg = (
        "Jira authentication not configured.\n"
        "For Jira Cloud: Set JIRA_EMAIL and JIRA_API_TOKEN\n"
        "For Jira Data Center/Server: Set JIRA_PAT"
    )
    raise ConfigError(msg)


def get_config_summary(config: AppConfig) -> dict[str, str]:
    """Return a sanitized configuration summary for debugging.

    Credentials are never included.
    """
    return {
        "base_url": config.jira.base_url,
        "auth_type": config.jira.auth.type,
        "auth_configured": "yes",
        "api_version": config.jira.api_version,
    }


__all__ = [
    "ApiVersion",
    "AppConfig",
    "BasicAuth",
    "JiraConfig",
    "JiraSettings",
    "PatAuth",
    "format_validation_error",
    "get_config_summary",
    "load_config",
]
