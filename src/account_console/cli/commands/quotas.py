"""Per-account model quota commands."""

import asyncio
from typing import Annotated

import typer

from account_console.cli.helpers import (
    console,
    console_session,
    get_cli_settings,
    quotas_table,
)
from account_console.console import AccountConsole


app = typer.Typer(name="quotas", help="Inspect and toggle per-model quotas")


def _print_quotas(session: AccountConsole, cookie_id: str) -> None:
    quotas = session.quota_panel.quotas
    if not quotas:
        console.print(f"[yellow]No quota information for {cookie_id}.[/yellow]")
        return
    console.print(quotas_table(quotas, title=f"Quotas for {cookie_id}"))


@app.command(name="show")
def show_quotas(
    ctx: typer.Context,
    cookie_id: Annotated[str, typer.Argument(help="Account ID to inspect")],
) -> None:
    """Show the model quotas of one account."""
    settings = get_cli_settings(ctx)

    async def _run() -> None:
        async with console_session(settings) as session:
            if not await session.view_quotas(cookie_id):
                raise typer.Exit(1)
            _print_quotas(session, cookie_id)

    asyncio.run(_run())


@app.command(name="toggle")
def toggle_quota(
    ctx: typer.Context,
    cookie_id: Annotated[str, typer.Argument(help="Account ID owning the quota")],
    model_name: Annotated[str, typer.Argument(help="Model ID, e.g. claude-sonnet-4-5")],
) -> None:
    """Enable or disable one model for an account."""
    settings = get_cli_settings(ctx)

    async def _run() -> None:
        async with console_session(settings) as session:
            if not await session.view_quotas(cookie_id):
                raise typer.Exit(1)
            if not await session.toggle_quota(model_name):
                raise typer.Exit(1)
            _print_quotas(session, cookie_id)

    asyncio.run(_run())
