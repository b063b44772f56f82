"""Usage display for llmusage."""

from __future__ import annotations

import time

import structlog
from rich.console import Console

from llmusage.cli.app import ExitCode
from llmusage.cli.app import OutputFormat
from llmusage.config.credentials import CredentialStore
from llmusage.config.settings import get_config
from llmusage.core.aggregate import fetch_configured_usage
from llmusage.core.http import cleanup
from llmusage.display.json import output_json
from llmusage.display.rich import render_stats
from llmusage.display.waybar import build_waybar
from llmusage.display.waybar import build_waybar_error
from llmusage.display.waybar import output_waybar
from llmusage.errors.types import CredentialStoreError
from llmusage.models import UsageStats

logger = structlog.get_logger()


async def run_usage(
    output: str = OutputFormat.PRETTY,
    provider: str | None = None,
    verbose: bool = False,
    store: CredentialStore | None = None,
    console: Console | None = None,
) -> ExitCode:
    """Fetch usage for all stored accounts and render it.

    Returns:
        The process exit code
    """
    console = console or Console()
    store = store or CredentialStore()

    start_time = time.monotonic()
    try:
        with store:
            stats = await fetch_configured_usage(store, provider)
    except CredentialStoreError as e:
        logger.error("credential_store_failed", error=str(e))
        if output == OutputFormat.WAYBAR:
            output_waybar(build_waybar_error(str(e)))
            return ExitCode.SUCCESS
        console.print(f"[red]Error:[/red] {e}")
        return ExitCode.CONFIG_ERROR
    finally:
        await cleanup()
    duration_ms = (time.monotonic() - start_time) * 1000

    logger.debug("usage_fetched", providers=len(stats.providers), duration_ms=round(duration_ms))
    return display_stats(console, stats, output, verbose=verbose, duration_ms=duration_ms)


def display_stats(
    console: Console,
    stats: UsageStats,
    output: str,
    verbose: bool = False,
    duration_ms: float = 0,
) -> ExitCode:
    """Render stats in the requested format and pick the exit code."""
    if output == OutputFormat.WAYBAR:
        if not stats.providers:
            output_waybar(build_waybar_error("No accounts configured. Run 'llmusage setup'."))
        else:
            output_waybar(build_waybar(stats))
        # waybar treats a non-zero exit as a broken module
        return ExitCode.SUCCESS

    if output == OutputFormat.JSON:
        output_json(stats)
    elif not stats.providers:
        console.print("[yellow]No accounts configured.[/yellow]")
        console.print("[dim]Run 'llmusage setup' to add one.[/dim]")
    else:
        config = get_config()
        render_stats(
            console,
            stats,
            bar_width=config.display.bar_width,
            show_extra=config.display.show_extra,
        )
        if verbose and duration_ms > 0:
            console.print(f"\nFetched in {duration_ms:.0f}ms", style="dim")

    if not stats.providers:
        return ExitCode.CONFIG_ERROR

    failed = stats.failed_providers()
    if not failed:
        return ExitCode.SUCCESS
    if len(failed) == len(stats.providers):
        return ExitCode.GENERAL_ERROR
    return ExitCode.PARTIAL_FAILURE
