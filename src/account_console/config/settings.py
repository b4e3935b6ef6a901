"""Settings configuration for the account console."""

import os
import tomllib
from pathlib import Path
from typing import Any

import structlog
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from account_console.config.discovery import find_toml_config_file
from account_console.notifications import Placement


__all__ = [
    "Settings",
    "GatewaySettings",
    "LoggingSettings",
    "UISettings",
    "ConfigurationError",
    "ConfigurationManager",
    "config_manager",
    "get_settings",
]

logger = structlog.get_logger(__name__)

CONFIG_FILE_ENV = "ACCOUNT_CONSOLE_CONFIG"


class ConfigurationError(Exception):
    """Raised when configuration loading or validation fails."""

    pass


class GatewaySettings(BaseSettings):
    """Remote account gateway connection settings."""

    model_config = SettingsConfigDict(
        env_prefix="ACCOUNT_CONSOLE_GATEWAY_",
        case_sensitive=False,
        extra="ignore",
    )

    base_url: str = Field(
        default="http://localhost:8000",
        description="Base URL of the account gateway API",
    )

    api_token: str | None = Field(
        default=None,
        description="Bearer token sent with every gateway request (optional)",
    )

    request_timeout: float = Field(
        default=30.0,
        gt=0,
        le=300,
        description="Per-request timeout in seconds",
    )

    verify_tls: bool = Field(
        default=True,
        description="Verify TLS certificates of the gateway",
    )

    verbose_api: bool = Field(
        default=False,
        description="Log full gateway error bodies instead of a preview",
    )

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Gateway URL must be http(s): {v!r}")
        return v.rstrip("/")


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="ACCOUNT_CONSOLE_LOG_",
        case_sensitive=False,
        extra="ignore",
    )

    level: str = Field(default="INFO", description="Root log level")
    json_logs: bool = Field(default=False, description="Render logs as JSON lines")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {v}")
        return level


class UISettings(BaseSettings):
    """Operator-facing presentation settings."""

    model_config = SettingsConfigDict(
        env_prefix="ACCOUNT_CONSOLE_UI_",
        case_sensitive=False,
        extra="ignore",
    )

    notification_placement: Placement = Field(
        default=Placement.TOP_RIGHT,
        description="Where notifications are shown",
    )
    open_browser: bool = Field(
        default=True,
        description="Open the authorization page in a browser when linking",
    )


def _coerce_settings(value: Any, settings_class: type) -> Any:
    """Coerce value to settings class instance.

    Handles: None → default, dict → instance, passthrough existing instances.
    """
    if value is None:
        return settings_class()
    if isinstance(value, settings_class):
        return value
    if isinstance(value, dict):
        return settings_class(**value)
    return value


class Settings(BaseSettings):
    """
    Configuration settings for the account console.

    Settings are loaded from environment variables, .env files, and TOML configuration files.
    Environment variables take precedence over .env file values.
    TOML configuration files are discovered in the following order:
    1. Path in the ACCOUNT_CONSOLE_CONFIG environment variable
    2. .account_console.toml / account_console.toml in current directory
    3. config.toml in user config directory/account_console/ (platform-specific)
    """

    model_config = SettingsConfigDict(
        env_prefix="ACCOUNT_CONSOLE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__",
    )

    gateway: GatewaySettings = Field(
        default_factory=GatewaySettings,
        description="Gateway connection settings",
    )

    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Logging settings",
    )

    ui: UISettings = Field(
        default_factory=UISettings,
        description="Presentation settings",
    )

    @field_validator("gateway", mode="before")
    @classmethod
    def validate_gateway(cls, v: Any) -> Any:
        return _coerce_settings(v, GatewaySettings)

    @field_validator("logging", mode="before")
    @classmethod
    def validate_logging(cls, v: Any) -> Any:
        return _coerce_settings(v, LoggingSettings)

    @field_validator("ui", mode="before")
    @classmethod
    def validate_ui(cls, v: Any) -> Any:
        return _coerce_settings(v, UISettings)

    def model_dump_safe(self) -> dict[str, Any]:
        """
        Dump model data with sensitive information masked.

        Returns:
            dict: Configuration with the gateway token masked
        """
        data = self.model_dump()
        if data["gateway"].get("api_token"):
            data["gateway"]["api_token"] = "***"
        return data

    @classmethod
    def load_toml_config(cls, toml_path: Path) -> dict[str, Any]:
        """Load configuration from a TOML file.

        Args:
            toml_path: Path to the TOML configuration file

        Returns:
            dict: Configuration data from the TOML file

        Raises:
            ValueError: If the TOML file is invalid or cannot be read
        """
        try:
            with toml_path.open("rb") as f:
                return tomllib.load(f)
        except OSError as e:
            raise ValueError(f"Cannot read TOML config file {toml_path}: {e}") from e
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid TOML syntax in {toml_path}: {e}") from e

    @classmethod
    def from_config(
        cls, config_path: Path | str | None = None, **kwargs: Any
    ) -> "Settings":
        """Create Settings instance from configuration file.

        Args:
            config_path: Path to configuration file. Can be:
                - None: Auto-discover config file or use ACCOUNT_CONSOLE_CONFIG env var
                - Path or str: Use this specific config file
            **kwargs: Additional keyword arguments to override config values

        Returns:
            Settings: Configured Settings instance
        """
        if config_path is None:
            config_path_env = os.environ.get(CONFIG_FILE_ENV)
            if config_path_env:
                config_path = Path(config_path_env)

        if isinstance(config_path, str):
            config_path = Path(config_path)

        if config_path is None:
            config_path = find_toml_config_file()

        config_data: dict[str, Any] = {}
        if config_path and config_path.exists():
            if config_path.suffix.lower() != ".toml":
                raise ValueError(
                    f"Unsupported config file format: {config_path.suffix}. "
                    "Only TOML (.toml) files are supported."
                )
            config_data = cls.load_toml_config(config_path)

        # Merge config with kwargs (kwargs take precedence)
        merged_config = {**config_data, **kwargs}

        return cls(**merged_config)


class ConfigurationManager:
    """Centralized configuration management for the CLI."""

    def __init__(self) -> None:
        self._settings: Settings | None = None
        self._config_path: Path | None = None

    def load_settings(
        self,
        config_path: Path | None = None,
        cli_overrides: dict[str, Any] | None = None,
    ) -> Settings:
        """Load settings with CLI overrides and caching."""
        if self._settings is None or config_path != self._config_path or cli_overrides:
            try:
                self._settings = Settings.from_config(
                    config_path=config_path, **(cli_overrides or {})
                )
                self._config_path = config_path
            except (OSError, ValueError) as e:
                # pydantic's ValidationError is a ValueError subclass
                raise ConfigurationError(f"Failed to load configuration: {e}") from e

        return self._settings

    def reset(self) -> None:
        """Reset configuration state (useful for testing)."""
        self._settings = None
        self._config_path = None


# Global configuration manager instance
config_manager = ConfigurationManager()


def get_settings(config_path: Path | str | None = None) -> Settings:
    """Get the global settings instance with configuration file support.

    Args:
        config_path: Optional path to a TOML configuration file

    Returns:
        Settings: Loaded settings
    """
    path = Path(config_path) if isinstance(config_path, str) else config_path
    settings = config_manager.load_settings(config_path=path)
    logger.debug("settings_loaded", config_path=str(path) if path else None)
    return settings
