"""Main CLI application for llmusage."""

from __future__ import annotations

import asyncio
from enum import IntEnum

import typer

from llmusage.cli.atyper import ATyper

# Create the main app
app = ATyper(
    name="llmusage",
    help="Track usage across LLM provider accounts",
    add_completion=False,
    no_args_is_help=False,
    invoke_without_command=True,
)


class ExitCode(IntEnum):
    """Exit codes for llmusage."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    CONFIG_ERROR = 4
    PARTIAL_FAILURE = 5


class OutputFormat:
    PRETTY = "pretty"
    JSON = "json"
    WAYBAR = "waybar"


@app.callback()
def main(
    ctx: typer.Context,
    json: bool = typer.Option(False, "--json", "-j", help="Output in JSON format"),
    waybar: bool = typer.Option(False, "--waybar", "-w", help="Output in waybar JSON format"),
    provider: str = typer.Option(None, "--provider", "-p", help="Only show this provider"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    version: bool = typer.Option(False, "--version", help="Show version and exit"),
) -> None:
    """Show usage statistics for every stored provider account."""
    from llmusage.config.settings import get_config
    from llmusage.logging import setup_logging

    if version:
        from llmusage import __version__

        typer.echo(f"llmusage {__version__}")
        raise typer.Exit()

    setup_logging("debug" if verbose else get_config().log_level)

    if waybar:
        output = OutputFormat.WAYBAR
    elif json:
        output = OutputFormat.JSON
    else:
        output = OutputFormat.PRETTY

    # Store options in context
    ctx.meta["output"] = output
    ctx.meta["verbose"] = verbose

    # If no command provided, show usage
    if ctx.invoked_subcommand is None:
        from llmusage.cli.commands.usage import run_usage

        exit_code = asyncio.run(run_usage(output=output, provider=provider, verbose=verbose))
        raise typer.Exit(exit_code)


def run_app() -> None:
    """Run the CLI app."""
    app()


# Import command modules; these must come after app is defined
from llmusage.cli.commands import setup as setup_cmd  # noqa: E402

app.add_typer(setup_cmd.setup_app, name="setup")
