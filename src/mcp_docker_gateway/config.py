"""Configuration management for the MCP Docker gateway."""

import json

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from mcp_docker_gateway.version import __version__

DEFAULT_ENGINE_API_VERSION = "v1.47"
DEFAULT_HUB_API_URL = "https://hub.docker.com/v2"


def _parse_comma_separated_list(value: str | list[str] | None) -> list[str]:
    """Parse comma-separated string or JSON array into list of strings.

    Supports multiple input formats:
    - JSON array: '["value1","value2"]'
    - Comma-separated: 'value1,value2' or 'value1, value2'
    - Already a list: ['value1', 'value2']
    - None or empty string: []

    Args:
        value: Input value (string, list, or None)

    Returns:
        List of strings
    """
    if value is None or value == "":
        return []
    if isinstance(value, list):
        return [item.strip() for item in value if item and item.strip()]
    value_stripped = value.strip()
    if value_stripped.startswith("[") and value_stripped.endswith("]"):
        try:
            parsed = json.loads(value_stripped)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list):
            return [str(item).strip() for item in parsed if str(item).strip()]
    return [item.strip() for item in value.split(",") if item.strip()]


class EngineConfig(BaseSettings):
    """Docker Engine API settings shared by every tenant."""

    model_config = SettingsConfigDict(
        env_prefix="DOCKER_ENGINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_version: str = Field(
        default=DEFAULT_ENGINE_API_VERSION,
        description="Engine API version used when a tenant does not override it",
    )
    timeout: float = Field(
        default=60,
        description="Timeout for a single Engine API request in seconds",
        gt=0,
    )

    @field_validator("api_version")
    @classmethod
    def normalize_api_version(cls, value: str) -> str:
        """Accept both '1.47' and 'v1.47'."""
        value = value.strip()
        if not value:
            raise ValueError("API version must not be empty")
        return value if value.startswith("v") else f"v{value}"


class HubConfig(BaseSettings):
    """Docker Hub API settings."""

    model_config = SettingsConfigDict(
        env_prefix="DOCKER_HUB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_url: str = Field(
        default=DEFAULT_HUB_API_URL,
        description="Base URL of the Docker Hub v2 API",
    )
    timeout: float = Field(
        default=30,
        description="Timeout for a single Hub API request in seconds",
        gt=0,
    )
    default_page_size: int = Field(
        default=25,
        description="Page size used by Hub listings when the caller does not pass one",
        ge=1,
        le=100,
    )
    max_page_size: int = Field(
        default=100,
        description="Largest page size accepted by Hub listings",
        ge=1,
        le=100,
    )

    @field_validator("api_url")
    @classmethod
    def strip_trailing_slash(cls, url: str) -> str:
        """Store the base URL without a trailing slash."""
        return url.rstrip("/")


class ToolFilterConfig(BaseSettings):
    """Allow/deny lists applied at tool registration time."""

    model_config = SettingsConfigDict(
        env_prefix="TOOLS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # str | list[str] keeps pydantic-settings from JSON-decoding empty env values
    allowed_tools: str | list[str] = Field(
        default=[],
        description=(
            "Allowed tool names (empty = allow all). "
            "Can be set via TOOLS_ALLOWED_TOOLS as comma-separated string."
        ),
    )
    denied_tools: str | list[str] = Field(
        default=[],
        description=(
            "Denied tool names (takes precedence over allowed_tools). "
            "Can be set via TOOLS_DENIED_TOOLS as comma-separated string."
        ),
    )

    @field_validator("allowed_tools", "denied_tools", mode="before")
    @classmethod
    def parse_tool_list(cls, value: str | list[str] | None) -> list[str]:
        """Normalize comma-separated or JSON list input to a list of names."""
        return _parse_comma_separated_list(value)


class TenantDefaults(BaseSettings):
    """Credentials used when a call carries no tenant metadata.

    Read from the standard Docker environment variables so a single-tenant
    stdio deployment behaves like the docker CLI.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    docker_host: str = Field(default="", validation_alias="DOCKER_HOST")
    tls_verify: str = Field(default="", validation_alias="DOCKER_TLS_VERIFY")
    cert_path: str = Field(default="", validation_alias="DOCKER_CERT_PATH")
    api_version: str = Field(default="", validation_alias="DOCKER_API_VERSION")
    hub_token: str = Field(default="", validation_alias="DOCKER_HUB_TOKEN")
    hub_username: str = Field(default="", validation_alias="DOCKER_HUB_USERNAME")
    hub_password: str = Field(default="", validation_alias="DOCKER_HUB_PASSWORD")
    registry: str = Field(default="", validation_alias="DOCKER_REGISTRY")
    registry_username: str = Field(default="", validation_alias="DOCKER_REGISTRY_USERNAME")
    registry_password: str = Field(default="", validation_alias="DOCKER_REGISTRY_PASSWORD")

    def __repr__(self) -> str:
        """Return representation without secrets."""
        return (
            f"TenantDefaults(docker_host={self.docker_host!r}, "
            f"hub_token={'***' if self.hub_token else ''!r}, "
            f"hub_username={self.hub_username!r}, registry={self.registry!r})"
        )


class ServerConfig(BaseSettings):
    """MCP server configuration."""

    model_config = SettingsConfigDict(
        env_prefix="MCP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    server_name: str = Field(
        default="mcp-docker-gateway",
        description="MCP server name",
    )
    server_version: str = Field(
        default=__version__,
        description="MCP server version",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    log_format: str = Field(
        default=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
        description="Log format string for loguru",
    )
    json_logging: bool = Field(
        default=False,
        description="Enable JSON structured logging",
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode (verbose diagnostics, do not use in production)",
    )
    character_limit: int = Field(
        default=50000,
        description="Maximum characters in a single tool response (0 = unlimited)",
        ge=0,
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, level: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        level_upper = level.upper()
        if level_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {level}. Must be one of {valid_levels}")
        return level_upper


class Config:
    """Main configuration container."""

    def __init__(self) -> None:
        """Initialize configuration from environment and .env file."""
        self.engine = EngineConfig()
        self.hub = HubConfig()
        self.tools = ToolFilterConfig()
        self.tenant = TenantDefaults()
        self.server = ServerConfig()

    def __repr__(self) -> str:
        """Return string representation of config."""
        return (
            f"Config(engine={self.engine!r}, hub={self.hub!r}, tools={self.tools!r}, "
            f"tenant={self.tenant!r}, server={self.server!r})"
        )
