"""Tests for the account-console CLI commands."""

from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from account_console import __version__
from account_console.cli import app
from account_console.models import AccountType, Status


runner = CliRunner()


@pytest.fixture(autouse=True)
def cli_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Isolate config discovery and keep the browser closed."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("ACCOUNT_CONSOLE_CONFIG", raising=False)
    monkeypatch.setenv("ACCOUNT_CONSOLE_UI_OPEN_BROWSER", "false")
    monkeypatch.setattr(
        "account_console.config.discovery.get_config_dir",
        lambda: tmp_path / "user-config",
    )
    with patch("account_console.cli.main.setup_logging") as mock_setup:
        yield mock_setup


@pytest.fixture
def patched_gateway(gateway):
    with patch("account_console.cli.helpers.build_gateway", return_value=gateway):
        yield gateway


class TestRootOptions:
    """Tests for global options."""

    def test_version(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_log_level_override(self, cli_env, patched_gateway):
        result = runner.invoke(app, ["--log-level", "DEBUG", "accounts", "list"])

        assert result.exit_code == 0
        cli_env.assert_called_once_with(level="DEBUG", json_logs=False)

    def test_config_file_used(self, cli_env, patched_gateway, tmp_path: Path):
        config_file = tmp_path / "console.toml"
        config_file.write_text('[logging]\nlevel = "ERROR"\njson_logs = true\n')

        result = runner.invoke(app, ["--config", str(config_file), "accounts", "list"])

        assert result.exit_code == 0
        cli_env.assert_called_once_with(level="ERROR", json_logs=True)

    def test_invalid_config_exits(self, patched_gateway, tmp_path: Path):
        config_file = tmp_path / "console.toml"
        config_file.write_text('[gateway]\nbase_url = "nope"\n')

        result = runner.invoke(app, ["--config", str(config_file), "accounts", "list"])

        assert result.exit_code == 1
        assert "Failed to load configuration" in result.output
        assert patched_gateway.calls == []


class TestAccountsCommands:
    """Tests for the accounts command group."""

    def test_list(self, patched_gateway):
        result = runner.invoke(app, ["accounts", "list"])

        assert result.exit_code == 0
        assert "2 accounts" in result.output
        assert "acc-1" in result.output
        assert "Never used" in result.output
        assert patched_gateway.closed

    def test_list_empty(self, patched_gateway):
        patched_gateway.accounts = []

        result = runner.invoke(app, ["accounts", "list"])

        assert result.exit_code == 0
        assert "No accounts linked" in result.output

    def test_list_failure(self, patched_gateway, gateway_error):
        patched_gateway.failures["list_accounts"] = gateway_error

        result = runner.invoke(app, ["accounts", "list"])

        assert result.exit_code == 1
        assert "Load failed" in result.output

    def test_toggle(self, patched_gateway):
        result = runner.invoke(app, ["accounts", "toggle", "acc-1"])

        assert result.exit_code == 0
        assert "Account disabled" in result.output
        assert patched_gateway.calls_to("update_account_status") == [
            ("acc-1", Status.DISABLED)
        ]

    def test_toggle_unknown_account(self, patched_gateway):
        result = runner.invoke(app, ["accounts", "toggle", "missing"])

        assert result.exit_code == 1
        assert "not found" in result.output
        assert patched_gateway.calls_to("update_account_status") == []

    def test_delete_forced(self, patched_gateway):
        result = runner.invoke(app, ["accounts", "delete", "acc-2", "--force"])

        assert result.exit_code == 0
        assert patched_gateway.calls_to("delete_account") == [("acc-2",)]

    def test_delete_declined(self, patched_gateway):
        result = runner.invoke(app, ["accounts", "delete", "acc-2"], input="n\n")

        assert result.exit_code == 1
        assert patched_gateway.calls_to("delete_account") == []

    def test_delete_confirmed(self, patched_gateway):
        result = runner.invoke(app, ["accounts", "delete", "acc-2"], input="y\n")

        assert result.exit_code == 0
        assert patched_gateway.calls_to("delete_account") == [("acc-2",)]


class TestAddAccount:
    """Tests for linking through the CLI."""

    def test_add_shared(self, patched_gateway):
        result = runner.invoke(
            app, ["accounts", "add", "--shared"], input="https://cb?code=abc\n"
        )

        assert result.exit_code == 0
        assert patched_gateway.auth_url in result.output
        assert patched_gateway.calls_to("get_authorization_url") == [
            (AccountType.SHARED,)
        ]
        assert patched_gateway.calls_to("submit_authorization_callback") == [
            ("https://cb?code=abc",)
        ]
        assert len(patched_gateway.calls_to("list_accounts")) == 1

    def test_empty_input_reprompts(self, patched_gateway):
        result = runner.invoke(app, ["accounts", "add"], input="\nhttps://cb?code=abc\n")

        assert result.exit_code == 0
        assert "Please enter the callback URL" in result.output
        assert patched_gateway.calls_to("submit_authorization_callback") == [
            ("https://cb?code=abc",)
        ]

    def test_rejected_callback_resubmits_kept_input(self, patched_gateway, gateway_error):
        patched_gateway.failures["submit_authorization_callback"] = gateway_error

        result = runner.invoke(app, ["accounts", "add"], input="https://cb?code=abc\n\n")

        assert result.exit_code == 0
        assert "Submission failed" in result.output
        assert patched_gateway.calls_to("submit_authorization_callback") == [
            ("https://cb?code=abc",),
            ("https://cb?code=abc",),
        ]

    def test_abort_cancels_linking(self, patched_gateway):
        result = runner.invoke(app, ["accounts", "add"], input="")

        assert result.exit_code == 1
        assert "Linking cancelled" in result.output
        assert patched_gateway.calls_to("submit_authorization_callback") == []

    def test_start_failure(self, patched_gateway, gateway_error):
        patched_gateway.failures["get_authorization_url"] = gateway_error

        result = runner.invoke(app, ["accounts", "add"])

        assert result.exit_code == 1
        assert "Authorization link unavailable" in result.output


class TestQuotasCommands:
    """Tests for the quotas command group."""

    def test_show(self, patched_gateway):
        result = runner.invoke(app, ["quotas", "show", "acc-1"])

        assert result.exit_code == 0
        assert "Gemini 2.5 Pro" in result.output
        assert "0.7500" in result.output

    def test_show_empty(self, patched_gateway):
        result = runner.invoke(app, ["quotas", "show", "acc-2"])

        assert result.exit_code == 0
        assert "No quota information" in result.output

    def test_show_failure(self, patched_gateway, gateway_error):
        patched_gateway.failures["list_account_quotas"] = gateway_error

        result = runner.invoke(app, ["quotas", "show", "acc-1"])

        assert result.exit_code == 1
        assert "Failed" in result.output or "Gateway unavailable" in result.output

    def test_toggle(self, patched_gateway):
        result = runner.invoke(app, ["quotas", "toggle", "acc-1", "gemini-2.5-pro"])

        assert result.exit_code == 0
        assert "Model Gemini 2.5 Pro disabled" in result.output
        assert patched_gateway.calls_to("update_quota_status") == [
            ("acc-1", "gemini-2.5-pro", Status.DISABLED)
        ]

    def test_toggle_unknown_model(self, patched_gateway):
        result = runner.invoke(app, ["quotas", "toggle", "acc-1", "no-such-model"])

        assert result.exit_code == 1
        assert patched_gateway.calls_to("update_quota_status") == []
