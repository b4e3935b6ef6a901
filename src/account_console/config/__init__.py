"""Configuration module for the account console."""

from .settings import (
    ConfigurationError,
    ConfigurationManager,
    GatewaySettings,
    LoggingSettings,
    Settings,
    UISettings,
    config_manager,
    get_settings,
)


__all__ = [
    "ConfigurationError",
    "ConfigurationManager",
    "GatewaySettings",
    "LoggingSettings",
    "Settings",
    "UISettings",
    "config_manager",
    "get_settings",
]
