"""
Configuration management for the Discord Embed Bridge.

This module handles all configuration loading from environment variables
and provides typed configuration objects for use throughout the application.

The configuration is loaded from environment variables and .env files.
OAuth2 values are intentionally not validated at startup; a missing client
id or secret surfaces as an upstream authorization failure instead.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field, validator
from pydantic_settings import BaseSettings


class DiscordConfig(BaseSettings):
    """Discord bot and OAuth2 application credentials."""

    bot_token: str = Field(
        default="",
        description="Discord bot token from Developer Portal"
    )
    client_id: str = Field(
        default="",
        description="OAuth2 application client ID"
    )
    client_secret: str = Field(
        default="",
        description="OAuth2 application client secret"
    )
    redirect_uri: str = Field(
        default="",
        description="OAuth2 redirect URI registered for the application"
    )

    class Config:
        env_prefix = ""


class DiscordAPIConfig(BaseSettings):
    """Discord REST API client settings."""

    base: str = Field(
        default="https://discord.com/api",
        description="Base URL of the Discord REST API"
    )
    timeout: int = Field(
        default=15,
        gt=0,
        description="Request timeout in seconds"
    )

    class Config:
        env_prefix = "DISCORD_API_"

    @validator("base")
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize the base URL so paths can be appended directly."""
        return v.rstrip("/")


class ServerConfig(BaseSettings):
    """HTTP bridge listener settings."""

    host: str = Field(
        default="0.0.0.0",
        description="Interface the HTTP bridge binds to"
    )
    port: int = Field(
        default=3000,
        gt=0,
        lt=65536,
        description="Port the HTTP bridge listens on"
    )
    frontend_url: Optional[str] = Field(
        default=None,
        description="Allowed CORS origin (any origin when unset)"
    )

    class Config:
        env_prefix = ""

    @property
    def cors_origin(self) -> str:
        """Origin used for CORS, falling back to any origin."""
        return self.frontend_url or "*"


class LoggingConfig(BaseSettings):
    """Logging configuration settings."""

    level: str = Field(
        default="INFO",
        description="Logging level"
    )
    format: str = Field(
        default="text",
        description="Log format: 'json' or 'text'"
    )

    class Config:
        env_prefix = "LOG_"

    @validator("level")
    def validate_level(cls, v: str) -> str:
        """Validate logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @validator("format")
    def validate_format(cls, v: str) -> str:
        """Validate log format."""
        if v not in {"json", "text"}:
            raise ValueError("Log format must be 'json' or 'text'")
        return v


class AppConfig(BaseSettings):
    """Main application configuration."""

    debug: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Sub-configurations
    discord: DiscordConfig = Field(default_factory=DiscordConfig)
    discord_api: DiscordAPIConfig = Field(default_factory=DiscordAPIConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    class Config:
        # Load from .env file if present
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


def load_config() -> AppConfig:
    """
    Load and validate application configuration.

    This function loads configuration from environment variables and .env files,
    validates all settings, and returns a fully configured AppConfig instance.

    Returns:
        AppConfig: Validated application configuration

    Raises:
        ValidationError: If configuration is invalid

    Example:
        ```python
        config = load_config()
        print(f"Bridge will listen on port {config.server.port}")
        ```
    """
    # The sub-configurations read os.environ, so the .env file is loaded
    # into the process environment first.
    env_file = Path(".env")
    if env_file.exists():
        from dotenv import load_dotenv
        load_dotenv(env_file)

    return AppConfig()
