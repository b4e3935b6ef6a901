"""Tests for console settings and configuration loading."""

from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from account_console.config.discovery import find_toml_config_file, get_config_dir
from account_console.config.settings import (
    ConfigurationError,
    ConfigurationManager,
    GatewaySettings,
    LoggingSettings,
    Settings,
    get_settings,
)
from account_console.notifications import Placement


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run each test from an empty directory without config env vars."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("ACCOUNT_CONSOLE_CONFIG", raising=False)
    monkeypatch.setattr(
        "account_console.config.discovery.get_config_dir",
        lambda: tmp_path / "user-config",
    )
    return tmp_path


class TestGatewaySettings:
    """Tests for gateway connection settings."""

    def test_defaults(self) -> None:
        settings = GatewaySettings()

        assert settings.base_url == "http://localhost:8000"
        assert settings.api_token is None
        assert settings.request_timeout == 30.0
        assert settings.verify_tls is True

    def test_trailing_slash_stripped(self) -> None:
        assert GatewaySettings(base_url="https://gw.example.com/").base_url == (
            "https://gw.example.com"
        )

    def test_non_http_url_rejected(self) -> None:
        with pytest.raises(ValidationError):
            GatewaySettings(base_url="ftp://gw.example.com")

    def test_timeout_bounds(self) -> None:
        with pytest.raises(ValidationError):
            GatewaySettings(request_timeout=0)

    def test_env_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ACCOUNT_CONSOLE_GATEWAY_BASE_URL", "https://env.example.com")
        monkeypatch.setenv("ACCOUNT_CONSOLE_GATEWAY_API_TOKEN", "tok")

        settings = GatewaySettings()

        assert settings.base_url == "https://env.example.com"
        assert settings.api_token == "tok"


class TestLoggingSettings:
    def test_level_uppercased(self) -> None:
        assert LoggingSettings(level="debug").level == "DEBUG"

    def test_invalid_level_rejected(self) -> None:
        with pytest.raises(ValidationError):
            LoggingSettings(level="chatty")


class TestSettings:
    """Tests for the root settings model."""

    def test_nested_dicts_coerced(self) -> None:
        settings = Settings(
            gateway={"base_url": "https://gw.example.com"},
            ui={"notification_placement": "bottom-left"},
        )

        assert settings.gateway.base_url == "https://gw.example.com"
        assert settings.ui.notification_placement == Placement.BOTTOM_LEFT
        assert settings.logging.level == "INFO"

    def test_model_dump_safe_masks_token(self) -> None:
        settings = Settings(gateway={"api_token": "very-secret"})

        dumped = settings.model_dump_safe()

        assert dumped["gateway"]["api_token"] == "***"
        assert settings.gateway.api_token == "very-secret"

    def test_from_config_reads_toml(self, isolated_config: Path) -> None:
        config_file = isolated_config / "console.toml"
        config_file.write_text(
            '[gateway]\nbase_url = "https://toml.example.com"\n\n'
            '[logging]\nlevel = "warning"\n\n'
            "[ui]\nopen_browser = false\n"
        )

        settings = Settings.from_config(config_file)

        assert settings.gateway.base_url == "https://toml.example.com"
        assert settings.logging.level == "WARNING"
        assert settings.ui.open_browser is False

    def test_from_config_env_var_path(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        config_file = isolated_config / "elsewhere.toml"
        config_file.write_text('[gateway]\nbase_url = "https://env-path.example.com"\n')
        monkeypatch.setenv("ACCOUNT_CONSOLE_CONFIG", str(config_file))

        settings = Settings.from_config()

        assert settings.gateway.base_url == "https://env-path.example.com"

    def test_from_config_discovers_local_file(self, isolated_config: Path) -> None:
        (isolated_config / ".account_console.toml").write_text(
            '[gateway]\nbase_url = "https://local.example.com"\n'
        )

        settings = Settings.from_config()

        assert settings.gateway.base_url == "https://local.example.com"

    def test_kwargs_override_file(self, isolated_config: Path) -> None:
        config_file = isolated_config / "console.toml"
        config_file.write_text('[logging]\nlevel = "ERROR"\n')

        settings = Settings.from_config(config_file, logging={"level": "DEBUG"})

        assert settings.logging.level == "DEBUG"

    def test_non_toml_rejected(self, isolated_config: Path) -> None:
        config_file = isolated_config / "console.json"
        config_file.write_text("{}")

        with pytest.raises(ValueError, match="Only TOML"):
            Settings.from_config(config_file)

    def test_invalid_toml_rejected(self, isolated_config: Path) -> None:
        config_file = isolated_config / "broken.toml"
        config_file.write_text("[gateway\n")

        with pytest.raises(ValueError, match="Invalid TOML"):
            Settings.from_config(config_file)


class TestDiscovery:
    def test_no_file_found(self) -> None:
        assert find_toml_config_file() is None

    def test_dotfile_preferred(self, isolated_config: Path) -> None:
        (isolated_config / "account_console.toml").write_text("")
        (isolated_config / ".account_console.toml").write_text("")

        expected = (isolated_config / ".account_console.toml").resolve()
        assert find_toml_config_file() == expected

    def test_user_config_dir(self, isolated_config: Path) -> None:
        config_dir = isolated_config / "user-config"
        config_dir.mkdir()
        (config_dir / "config.toml").write_text("")

        assert find_toml_config_file() == config_dir / "config.toml"

    def test_config_dir_named_after_app(self) -> None:
        assert get_config_dir().name == "account_console"


class TestConfigurationManager:
    """Tests for cached settings loading."""

    def test_settings_cached(self) -> None:
        manager = ConfigurationManager()

        assert manager.load_settings() is manager.load_settings()

    def test_reload_on_new_path(self, isolated_config: Path) -> None:
        manager = ConfigurationManager()
        first = manager.load_settings()
        config_file = isolated_config / "console.toml"
        config_file.write_text('[gateway]\nbase_url = "https://other.example.com"\n')

        second = manager.load_settings(config_path=config_file)

        assert second is not first
        assert second.gateway.base_url == "https://other.example.com"

    def test_invalid_config_wrapped(self, isolated_config: Path) -> None:
        config_file = isolated_config / "console.toml"
        config_file.write_text('[gateway]\nbase_url = "not-a-url"\n')

        with pytest.raises(ConfigurationError):
            ConfigurationManager().load_settings(config_path=config_file)

    def test_get_settings_logs_load(self, isolated_config: Path) -> None:
        config_file = isolated_config / "console.toml"
        config_file.write_text('[logging]\nlevel = "ERROR"\n')

        with patch("account_console.config.settings.logger") as mock_logger:
            settings = get_settings(str(config_file))

        assert settings.logging.level == "ERROR"
        mock_logger.debug.assert_called_once_with(
            "settings_loaded", config_path=str(config_file)
        )
