"""Entry point for the account-console CLI."""

from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape

from account_console import __version__
from account_console.cli.commands import accounts_app, quotas_app
from account_console.cli.helpers import console
from account_console.config.settings import ConfigurationError, config_manager
from account_console.core.logging import setup_logging


app = typer.Typer(
    name="account-console",
    help="Operator console for accounts and model quotas behind an account gateway",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.add_typer(accounts_app)
app.add_typer(quotas_app)


def version_callback(value: bool) -> None:
    if value:
        console.print(f"account-console {__version__}")
        raise typer.Exit()


@app.callback()
def app_main(
    ctx: typer.Context,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to a TOML configuration file",
            exists=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option("--log-level", help="Override the configured log level"),
    ] = None,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """Manage gateway accounts and their model quotas."""
    try:
        settings = config_manager.load_settings(config_path=config)
    except ConfigurationError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1) from e

    setup_logging(
        level=log_level or settings.logging.level,
        json_logs=settings.logging.json_logs,
    )
    ctx.obj = settings


def main() -> None:
    app()
