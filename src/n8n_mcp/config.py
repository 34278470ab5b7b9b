"""Server configuration loaded from environment variables.

Environment Variables:
    N8N_BASE_URL: n8n instance URL, e.g. https://n8n.example.com (required)
    N8N_API_KEY: n8n API key (required)
    N8N_USER / N8N_PASSWORD: Optional basic auth credentials for webhook triggers
    N8N_MCP_REQUEST_TIMEOUT: HTTP request timeout in seconds (default: 30, range: 1-1800)
    N8N_MCP_TOOL_TIMEOUT: Per tool call timeout in seconds (default: 60, range: 1-3600)
    N8N_MCP_VERIFY_SSL: Verify TLS certificates (default: true)
    N8N_MCP_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR or CRITICAL (default: INFO)

Architecture:
- Read once during server startup
- Validated with Pydantic; invalid values raise ConfigError with every problem listed
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping

from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic import ValidationError as PydanticValidationError

logger = logging.getLogger(__name__)

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

_ENV_FIELDS = {
    "N8N_BASE_URL": "base_url",
    "N8N_API_KEY": "api_key",
    "N8N_USER": "user",
    "N8N_PASSWORD": "password",
    "N8N_MCP_REQUEST_TIMEOUT": "request_timeout",
    "N8N_MCP_TOOL_TIMEOUT": "tool_timeout",
    "N8N_MCP_VERIFY_SSL": "verify_ssl",
}


class ConfigError(Exception):
    """Raised when the server configuration is missing or invalid."""

    pass


class ServerConfig(BaseModel):
    """Validated server settings."""

    base_url: str = Field(description="n8n instance base URL")
    api_key: SecretStr = Field(description="n8n API key (sent as X-N8N-API-KEY)")
    user: str | None = Field(default=None, description="Webhook basic auth user")
    password: SecretStr | None = Field(default=None, description="Webhook basic auth password")
    request_timeout: float = Field(
        default=30.0,
        ge=1,
        le=1800,
        description="HTTP request timeout in seconds",
    )
    tool_timeout: float = Field(
        default=60.0,
        ge=1,
        le=3600,
        description="Timeout for one tool call in seconds",
    )
    verify_ssl: bool = Field(default=True, description="Whether to verify TLS certificates")

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an http(s) URL and strip trailing slashes."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"must start with http:// or https://, got '{v}'")
        return v.rstrip("/")

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value().strip():
            raise ValueError("must not be empty")
        return v


def load_config(environ: Mapping[str, str] | None = None) -> ServerConfig:
    """Build ServerConfig from environment variables.

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        Validated ServerConfig

    Raises:
        ConfigError: If required variables are missing or values are invalid
    """
    env = os.environ if environ is None else environ

    missing = [name for name in ("N8N_BASE_URL", "N8N_API_KEY") if not env.get(name)]
    if missing:
        raise ConfigError(
            f"Missing required environment variables: {', '.join(missing)}. "
            "Set N8N_BASE_URL to your n8n instance URL and N8N_API_KEY to an API key "
            "created under Settings > n8n API."
        )

    values = {field: env[name] for name, field in _ENV_FIELDS.items() if env.get(name)}

    try:
        return ServerConfig.model_validate(values)
    except PydanticValidationError as e:
        field_to_env = {field: name for name, field in _ENV_FIELDS.items()}
        problems = [
            f"{field_to_env.get(str(err['loc'][0]), err['loc'][0])}: {err['msg']}"
            for err in e.errors()
        ]
        raise ConfigError("Invalid configuration: " + "; ".join(problems)) from e


def get_log_level(environ: Mapping[str, str] | None = None) -> tuple[str, str | None]:
    """Resolve N8N_MCP_LOG_LEVEL.

    Returns:
        Tuple of (level name, warning message or None when the value was invalid)
    """
    env = os.environ if environ is None else environ
    level = env.get("N8N_MCP_LOG_LEVEL", "INFO").upper()
    if level not in VALID_LOG_LEVELS:
        return "INFO", (
            f"Warning: Invalid N8N_MCP_LOG_LEVEL '{level}'. "
            f"Valid levels: {', '.join(sorted(VALID_LOG_LEVELS))}. Using INFO."
        )
    return level, None


__all__ = ["ConfigError", "ServerConfig", "get_log_level", "load_config"]
