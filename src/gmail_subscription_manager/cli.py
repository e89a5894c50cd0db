"""CLI entry point for Gmail Subscription Manager."""

from __future__ import annotations

import logging

import click
from rich.logging import RichHandler

from .auth import check_auth, get_gmail_service
from .constants import CATEGORIES, MAX_MESSAGES, SUBSCRIPTION_QUERY
from .display import console, create_progress, display_subscriptions
from .exceptions import AuthError, ScanInProgressError
from .export import export_subscriptions
from .gmail_client import GmailMailSource
from .models import ScanProgress
from .scanner import run_scan
from .store import SubscriptionStore
from .unsubscribe import ACTION_DELETE, ACTION_OPEN, interactive_unsubscribe


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@click.group()
@click.version_option(version="0.1.0", prog_name="gmail-subscription-manager")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """Gmail Subscription Manager - find and leave mailing lists in your Gmail."""
    _configure_logging(verbose)


@cli.command()
@click.option("-q", "--query", default=SUBSCRIPTION_QUERY, show_default=True, help="Gmail search query.")
@click.option("-m", "--max-messages", default=MAX_MESSAGES, show_default=True, type=int, help="Maximum messages to scan.")
def scan(query: str, max_messages: int) -> None:
    """Scan your Gmail inbox for subscriptions."""
    try:
        service = get_gmail_service()
    except AuthError as e:
        raise click.ClickException(str(e)) from e

    source = GmailMailSource(service, query=query, max_results=max_messages)

    with SubscriptionStore() as store, create_progress("Scanning emails") as progress:
        task = progress.add_task("scanning", total=None)

        def on_progress(event: ScanProgress) -> None:
            progress.update(task, completed=event.processed, total=event.total)

        try:
            outcome = run_scan(source, store, on_progress=on_progress)
        except ScanInProgressError as e:
            raise click.ClickException(str(e)) from e

    if not outcome.success:
        raise click.ClickException(f"Failed to scan emails: {outcome.error}")

    console.print(f"Found [bold]{len(outcome.subscriptions)}[/bold] unique subscriptions")
    display_subscriptions(outcome.subscriptions)


@cli.command(name="list")
@click.option(
    "-c",
    "--category",
    type=click.Choice(["all", *CATEGORIES]),
    default="all",
    help="Only show one category.",
)
def list_cmd(category: str) -> None:
    """Show subscriptions from the latest scan."""
    with SubscriptionStore() as store:
        records = store.load_subscriptions()
        last_scan = store.last_scan_date()

    if category != "all":
        records = [r for r in records if r.category == category]

    display_subscriptions(records, last_scan=last_scan)


@cli.command()
@click.option("--delete", "delete", is_flag=True, help="Delete the messages instead of opening links.")
@click.option("--execute", is_flag=True, help="Actually act on the selection (default is dry-run).")
def unsubscribe(delete: bool, execute: bool) -> None:
    """Interactively select subscriptions and unsubscribe from them."""
    service = None
    if delete and execute:
        try:
            service = get_gmail_service()
        except AuthError as e:
            raise click.ClickException(str(e)) from e

    with SubscriptionStore() as store:
        interactive_unsubscribe(
            service,
            store,
            action=ACTION_DELETE if delete else ACTION_OPEN,
            execute=execute,
        )


@cli.command(name="export")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["csv", "json"]),
    default="csv",
    help="Output format.",
)
@click.option("-o", "--output", required=True, help="Output file path.")
def export_cmd(fmt: str, output: str) -> None:
    """Export subscriptions to CSV or JSON."""
    with SubscriptionStore() as store:
        records = store.load_subscriptions()
        last_scan = store.last_scan_date()

    if last_scan is None:
        raise click.ClickException("No saved scan found. Run 'scan' first.")

    export_subscriptions(records, format=fmt, output_path=output)


@cli.command()
def auth() -> None:
    """Test Gmail authentication."""
    check_auth()


@cli.group(name="store")
def store_group() -> None:
    """Manage the subscription store."""


@store_group.command(name="info")
def store_info() -> None:
    """Show store statistics."""
    with SubscriptionStore() as store:
        info = store.get_info()

    if info["last_scan_date"] is None:
        console.print("[dim]Store is empty.[/dim]")
        return

    console.print(f"[bold]Database size:[/bold] {info['db_file_size'] / 1024:.1f} KB")
    console.print(f"[bold]Last scan:[/bold] {info['last_scan_date']}")
    console.print(f"[bold]Subscriptions:[/bold] {info['subscription_count']}")
    console.print(f"[bold]Emails:[/bold] {info['email_count']}")


@store_group.command(name="clear")
def store_clear() -> None:
    """Clear the subscription store."""
    with SubscriptionStore() as store:
        store.clear()
    console.print("[green]Store cleared.[/green]")
