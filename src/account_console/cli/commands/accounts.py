"""Account management commands."""

import asyncio
from typing import Annotated

import typer
from structlog import get_logger

from account_console.cli.helpers import (
    accounts_table,
    console,
    console_session,
    get_cli_settings,
)
from account_console.config.settings import Settings
from account_console.console import AccountConsole
from account_console.models import AccountType


app = typer.Typer(name="accounts", help="List, toggle, delete and link accounts")

logger = get_logger(__name__)


def _print_accounts(session: AccountConsole) -> None:
    if not session.store.count:
        console.print("[yellow]No accounts linked.[/yellow]")
        return
    console.print(accounts_table(session.accounts, title=session.store.summary()))


@app.command(name="list")
def list_accounts(ctx: typer.Context) -> None:
    """List linked accounts."""
    settings = get_cli_settings(ctx)

    async def _run() -> None:
        async with console_session(settings) as session:
            if not await session.refresh():
                raise typer.Exit(1)
            _print_accounts(session)

    asyncio.run(_run())


@app.command(name="toggle")
def toggle_account(
    ctx: typer.Context,
    cookie_id: Annotated[str, typer.Argument(help="Account ID to enable or disable")],
) -> None:
    """Enable a disabled account or disable an enabled one."""
    settings = get_cli_settings(ctx)

    async def _run() -> None:
        async with console_session(settings) as session:
            if not await session.refresh():
                raise typer.Exit(1)
            if not await session.toggle_account(cookie_id):
                raise typer.Exit(1)

    asyncio.run(_run())


@app.command(name="delete")
def delete_account(
    ctx: typer.Context,
    cookie_id: Annotated[str, typer.Argument(help="Account ID to delete")],
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Skip confirmation")
    ] = False,
) -> None:
    """Permanently delete an account."""
    settings = get_cli_settings(ctx)

    if not force:
        confirm = typer.confirm(f"Permanently delete account {cookie_id}?")
        if not confirm:
            raise typer.Abort()

    async def _run() -> None:
        async with console_session(settings) as session:
            if not await session.refresh():
                raise typer.Exit(1)
            if not await session.delete_account(cookie_id):
                raise typer.Exit(1)

    asyncio.run(_run())


async def _link_account(
    session: AccountConsole, settings: Settings, account_type: AccountType
) -> bool:
    """Walk the operator through one linking session.

    Returns False when the session could not be started or was abandoned.
    """
    if not await session.add_account(account_type):
        return False

    console.print()
    console.print("[bold]Authorize the account at:[/bold]")
    console.print(session.linking.authorize_url, soft_wrap=True, markup=False)
    console.print()
    if settings.ui.open_browser:
        session.open_authorization_page()

    while True:
        try:
            callback_text = typer.prompt(
                "Paste the callback URL",
                default=session.linking.callback_input,
                show_default=False,
            )
        except typer.Abort:
            session.cancel_linking()
            console.print("[yellow]Linking cancelled.[/yellow]")
            return False

        if await session.submit_callback(callback_text):
            return True
        logger.debug("callback_submission_retry", state=str(session.linking.state))


@app.command(name="add")
def add_account(
    ctx: typer.Context,
    shared: Annotated[
        bool,
        typer.Option("--shared", help="Link as a shared account instead of exclusive"),
    ] = False,
) -> None:
    """Link a new account through the gateway's OAuth flow."""
    settings = get_cli_settings(ctx)
    account_type = AccountType.SHARED if shared else AccountType.EXCLUSIVE

    async def _run() -> None:
        async with console_session(settings) as session:
            if not await _link_account(session, settings, account_type):
                raise typer.Exit(1)
            _print_accounts(session)

    asyncio.run(_run())
