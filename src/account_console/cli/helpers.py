"""Shared helpers for CLI commands."""

from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from account_console.config.settings import Settings
from account_console.console import AccountConsole
from account_console.display import (
    ModelFamily,
    account_type_label,
    format_date,
    format_last_used,
    format_quota,
    format_reset_time,
    model_display_name,
    model_family,
    quota_status_label,
    status_label,
)
from account_console.gateway.http import HttpAccountGateway
from account_console.models import Account, Quota, Status
from account_console.notifications import ConsoleNotifier


console = Console()


def get_cli_settings(ctx: typer.Context) -> Settings:
    """Settings loaded by the root callback."""
    settings = ctx.find_root().obj
    if not isinstance(settings, Settings):
        console.print("[red]Configuration was not loaded.[/red]")
        raise typer.Exit(1)
    return settings


def build_gateway(settings: Settings) -> HttpAccountGateway:
    return HttpAccountGateway(settings.gateway)


@asynccontextmanager
async def console_session(settings: Settings) -> AsyncIterator[AccountConsole]:
    """Open an operator session against the configured gateway."""
    gateway = build_gateway(settings)
    session = AccountConsole(
        gateway,
        ConsoleNotifier(),
        placement=settings.ui.notification_placement,
    )
    try:
        yield session
    finally:
        session.dispose()
        await gateway.aclose()


_FAMILY_STYLES = {
    ModelFamily.GEMINI: "blue",
    ModelFamily.CLAUDE: "dark_orange",
    ModelFamily.OPENAI: "green",
    ModelFamily.GENERIC: "white",
}


def _status_cell(status: Status, label: str) -> str:
    color = "green" if status == Status.ENABLED else "red"
    return f"[{color}]{label}[/{color}]"


def accounts_table(accounts: Iterable[Account], title: str) -> Table:
    table = Table(title=title)
    table.add_column("Account ID", style="cyan")
    table.add_column("Type")
    table.add_column("Status")
    table.add_column("Added")
    table.add_column("Last used")

    for account in accounts:
        table.add_row(
            account.cookie_id,
            account_type_label(account.is_shared),
            _status_cell(account.status, status_label(account.status)),
            format_date(account.created_at),
            format_last_used(account.last_used_at),
        )
    return table


def quotas_table(quotas: Iterable[Quota], title: str) -> Table:
    table = Table(title=title)
    table.add_column("Model")
    table.add_column("Model ID")
    table.add_column("Quota", justify="right")
    table.add_column("Resets")
    table.add_column("Status")

    for quota in quotas:
        table.add_row(
            f"[{_FAMILY_STYLES[model_family(quota.model_name)]}]"
            f"{escape(model_display_name(quota.model_name))}[/]",
            quota.model_name,
            format_quota(quota.quota),
            format_reset_time(quota.reset_time),
            _status_cell(quota.status, quota_status_label(quota.status)),
        )
    return table
