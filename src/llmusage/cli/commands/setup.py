"""Credential setup commands for llmusage."""

from __future__ import annotations

from datetime import datetime

import msgspec
import typer
from rich.console import Console
from rich.table import Table

from llmusage.cli.app import ExitCode
from llmusage.cli.atyper import ATyper
from llmusage.config.credentials import DEFAULT_ACCOUNT
from llmusage.config.credentials import Credential
from llmusage.config.credentials import CredentialStore
from llmusage.errors.types import CredentialStoreError
from llmusage.models import format_duration
from llmusage.providers import get_provider
from llmusage.providers import list_provider_ids
from llmusage.providers import provider_name

setup_app = ATyper(help="Configure LLM provider credentials.")

# Wizard menu entries, in display order
MENU_ITEMS = (
    "Add Account",
    "List Accounts",
    "Rename Account",
    "Remove Account",
    "Migrate Claude CLI credentials",
    "Quit",
)


def get_store() -> CredentialStore:
    """Return the credential store used by setup commands."""
    return CredentialStore()


def _validate_provider(console: Console, provider_id: str) -> None:
    if get_provider(provider_id) is None:
        console.print(f"[red]Unknown provider:[/red] {provider_id}")
        console.print(f"[dim]Available: {', '.join(list_provider_ids())}[/dim]")
        raise typer.Exit(ExitCode.CONFIG_ERROR)


def _parse_expiry(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        expires_at = datetime.fromisoformat(value)
    except ValueError as e:
        raise typer.BadParameter(f"not an ISO-8601 datetime: {value}") from e
    if expires_at.tzinfo is None:
        expires_at = expires_at.astimezone()
    return expires_at


def _expiry_status(credential: Credential | None) -> str:
    if credential is None:
        return "missing"
    delta = credential.expires_in()
    if delta is None:
        return "no expiry"
    if credential.is_expired():
        return "expired"
    return f"expires in {format_duration(delta)}"


def list_accounts(store: CredentialStore, provider_id: str | None = None) -> list[dict]:
    """Describe stored accounts as plain dicts, in configuration order."""
    rows = []
    for pid, account in store.accounts(provider_id):
        credential = store.resolve(pid, account)
        rows.append(
            {
                "provider": pid,
                "account": account,
                "status": _expiry_status(credential),
                "keyring": bool(credential and credential.in_keyring),
            }
        )
    return rows


def display_accounts(console: Console, rows: list[dict]) -> None:
    """Print stored accounts as a table."""
    if not rows:
        console.print("[yellow]No accounts configured.[/yellow]")
        console.print("[dim]Run 'llmusage setup add <provider>' to add one.[/dim]")
        return

    table = Table(title="Configured Accounts", show_header=True, header_style="bold")
    table.add_column("Provider", style="bold")
    table.add_column("Account")
    table.add_column("Status")
    for row in rows:
        status_style = "red" if row["status"] in ("expired", "missing") else "green"
        table.add_row(
            provider_name(row["provider"]),
            row["account"],
            f"[{status_style}]{row['status']}[/{status_style}]",
        )
    console.print(table)


@setup_app.callback(invoke_without_command=True)
def setup_callback(ctx: typer.Context) -> None:
    """Run the interactive setup wizard when no subcommand is given."""
    if ctx.invoked_subcommand is not None:
        return
    run_wizard(Console(), get_store())


@setup_app.command("add")
def add_command(
    provider: str = typer.Argument(..., help="Provider ID (e.g., claude, kimi)"),
    account: str = typer.Argument(DEFAULT_ACCOUNT, help="Account name"),
    secret: str = typer.Option(
        None, "--secret", "-s", help="Access token or API key (or enter interactively)"
    ),
    expires_at: str = typer.Option(
        None, "--expires-at", help="Credential expiry as an ISO-8601 datetime"
    ),
) -> None:
    """Add an account for a provider."""
    console = Console()
    _validate_provider(console, provider)

    if secret is None:
        kind = get_provider(provider).metadata.credential_kind
        label = "OAuth access token" if kind == "oauth" else "API key"
        secret = typer.prompt(f"Enter {provider_name(provider)} {label}", hide_input=True)

    credential = Credential(secret=secret.strip(), expires_at=_parse_expiry(expires_at))
    try:
        with get_store() as store:
            store.add(provider, account, credential)
    except CredentialStoreError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(ExitCode.CONFIG_ERROR) from None

    console.print(f"[green]✓[/green] Added account '{account}' for {provider_name(provider)}")


@setup_app.command("list")
def list_command(
    provider: str = typer.Argument(None, help="Only list this provider's accounts"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output in JSON format"),
) -> None:
    """List configured accounts."""
    console = Console()
    try:
        with get_store() as store:
            rows = list_accounts(store, provider)
    except CredentialStoreError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(ExitCode.CONFIG_ERROR) from None

    if json_output:
        typer.echo(msgspec.json.encode(rows).decode())
        return
    display_accounts(console, rows)


@setup_app.command("rename")
def rename_command(
    provider: str = typer.Argument(..., help="Provider ID"),
    old_name: str = typer.Argument(..., help="Current account name"),
    new_name: str = typer.Argument(..., help="New account name"),
) -> None:
    """Rename an account."""
    console = Console()
    try:
        with get_store() as store:
            store.rename(provider, old_name, new_name)
    except CredentialStoreError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(ExitCode.CONFIG_ERROR) from None

    console.print(
        f"Successfully renamed account '{old_name}' to '{new_name}' for {provider}"
    )


@setup_app.command("remove")
def remove_command(
    provider: str = typer.Argument(..., help="Provider ID"),
    account: str = typer.Argument(..., help="Account name"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
) -> None:
    """Remove an account."""
    console = Console()
    if not force and not typer.confirm(f"Remove account '{account}' from {provider}?"):
        raise typer.Abort()

    try:
        with get_store() as store:
            store.remove(provider, account)
    except CredentialStoreError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(ExitCode.CONFIG_ERROR) from None

    console.print(f"Successfully removed account '{account}' from {provider}")


@setup_app.command("migrate-claude")
def migrate_claude_command(
    account: str = typer.Option(DEFAULT_ACCOUNT, "--account", "-a", help="Account name"),
) -> None:
    """Migrate OAuth credentials from the Claude CLI (~/.claude/.credentials.json)."""
    console = Console()
    try:
        with get_store() as store:
            credential = store.migrate_claude_cli(account=account)
    except CredentialStoreError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(ExitCode.CONFIG_ERROR) from None

    console.print(f"[green]✓[/green] Migrated Claude CLI credentials to account '{account}'")
    console.print(f"[dim]Token {_expiry_status(credential)}[/dim]")


def _choose(console: Console, title: str, options: list[str]) -> str | None:
    """Prompt for one of options by number; None when there is nothing to pick."""
    if not options:
        return None
    console.print(f"\n[bold]{title}[/bold]")
    for index, option in enumerate(options, start=1):
        console.print(f"  [cyan]{index}[/cyan]. {option}")
    choice = typer.prompt("Select", type=int)
    if not 1 <= choice <= len(options):
        console.print("[red]Invalid selection[/red]")
        return None
    return options[choice - 1]


def _choose_account(console: Console, store: CredentialStore) -> tuple[str, str] | None:
    pairs = store.accounts()
    labels = [f"{provider_name(pid)} / {account}" for pid, account in pairs]
    choice = _choose(console, "Accounts", labels)
    if choice is None:
        if not pairs:
            console.print("[yellow]No accounts configured.[/yellow]")
        return None
    return pairs[labels.index(choice)]


def _wizard_step(console: Console, store: CredentialStore, action: str) -> None:
    """Run one wizard action against an open store."""
    if action == "Add Account":
        provider_id = _choose(console, "Provider", list_provider_ids())
        if provider_id is None:
            return
        account = typer.prompt("Account name", default=DEFAULT_ACCOUNT)
        secret = typer.prompt(f"Enter {provider_name(provider_id)} credential", hide_input=True)
        store.add(provider_id, account, Credential(secret=secret.strip()))
        console.print(f"[green]✓[/green] Added account '{account}'")

    elif action == "List Accounts":
        display_accounts(console, list_accounts(store))

    elif action == "Rename Account":
        selected = _choose_account(console, store)
        if selected is not None:
            new_name = typer.prompt("New account name")
            store.rename(selected[0], selected[1], new_name)
            console.print(f"[green]✓[/green] Renamed to '{new_name}'")

    elif action == "Remove Account":
        selected = _choose_account(console, store)
        if selected is not None and typer.confirm(f"Remove '{selected[1]}'?"):
            store.remove(*selected)
            console.print("[green]✓[/green] Removed")

    elif action == "Migrate Claude CLI credentials":
        store.migrate_claude_cli()
        console.print("[green]✓[/green] Migrated Claude CLI credentials")


def run_wizard(console: Console, store: CredentialStore) -> None:
    """Interactive menu loop over the setup operations.

    Changes are saved when the wizard exits.
    """
    console.print("[bold cyan]LLM Usage Setup[/bold cyan]")
    console.print("[dim]Configure your LLM provider credentials[/dim]")

    with store:
        while True:
            action = _choose(console, "Main Menu", list(MENU_ITEMS))
            if action is None:
                continue
            if action == "Quit":
                return
            try:
                _wizard_step(console, store, action)
            except CredentialStoreError as e:
                console.print(f"[red]Error:[/red] {e}")
