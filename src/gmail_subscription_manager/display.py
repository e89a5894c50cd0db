"""Rich-based display functions for Gmail Subscription Manager."""

from collections import Counter
from datetime import datetime

from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.prompt import Prompt
from rich.table import Table

from .consolidation import parse_date
from .constants import (
    CATEGORY_NEWSLETTER,
    CATEGORY_OTHER,
    CATEGORY_SERVICE,
    CATEGORY_SOCIAL,
    SUBJECT_DISPLAY_LIMIT,
)
from .models import ConsolidatedRecord
from .sender import parse_display_name

console = Console()

_CATEGORY_COLORS = {
    CATEGORY_NEWSLETTER: "cyan",
    CATEGORY_SOCIAL: "magenta",
    CATEGORY_SERVICE: "yellow",
    CATEGORY_OTHER: "white",
}


def format_date(value: str | None) -> str:
    """Return a short date like "Jan 3" (with the year when not this year)."""
    parsed = parse_date(value)
    if parsed is None:
        return "Unknown date"
    if parsed.year != datetime.now().year:
        return parsed.strftime("%b %d, %Y")
    return parsed.strftime("%b %d")


def format_last_scan(last_scan: str | None, now: datetime | None = None) -> str:
    """Describe the last scan time relative to now."""
    if not last_scan:
        return "Never scanned"

    try:
        scanned = datetime.fromisoformat(last_scan)
    except ValueError:
        return f"Last scan: {last_scan}"

    seconds = ((now or datetime.now()) - scanned).total_seconds()
    if seconds < 60:
        ago = "Just now"
    elif seconds < 3600:
        minutes = int(seconds // 60)
        ago = f"{minutes} minute{'' if minutes == 1 else 's'} ago"
    elif seconds < 86400:
        hours = int(seconds // 3600)
        ago = f"{hours} hour{'' if hours == 1 else 's'} ago"
    else:
        days = int(seconds // 86400)
        ago = f"{days} day{'' if days == 1 else 's'} ago"
    return f"Last scan: {ago}"


def _truncate(text: str, limit: int = SUBJECT_DISPLAY_LIMIT) -> str:
    return text if len(text) <= limit else text[: limit - 1] + "…"


def display_subscriptions(
    records: list[ConsolidatedRecord],
    last_scan: str | None = None,
) -> None:
    """Display records in a numbered table followed by a category summary."""
    if not records:
        console.print('[dim]No subscriptions found. Run "scan" to start.[/dim]')
        return

    table = Table(title="Subscriptions")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Sender")
    table.add_column("Category")
    table.add_column("Emails", justify="right")
    table.add_column("Last")
    table.add_column("Latest subject")
    table.add_column("Link", justify="center")

    for idx, record in enumerate(records, start=1):
        color = _CATEGORY_COLORS.get(record.category, "white")
        name = parse_display_name(record.from_raw)
        sender = f"{name} <{record.sender_key}>" if name else record.sender_key
        table.add_row(
            str(idx),
            sender,
            f"[{color}]{record.category}[/{color}]",
            str(record.email_count),
            format_date(record.date),
            _truncate(record.subject),
            "[green]yes[/green]" if record.unsubscribe_link else "[red]no[/red]",
        )

    console.print(table)

    counts = Counter(record.category for record in records)
    summary = (
        f"Total: {len(records)}  |  "
        f"Newsletters: {counts[CATEGORY_NEWSLETTER]}  |  "
        f"Social: {counts[CATEGORY_SOCIAL]}  |  "
        f"Service: {counts[CATEGORY_SERVICE]}  |  "
        f"Other: {counts[CATEGORY_OTHER]}"
    )
    if last_scan is not None:
        summary += f"\n{format_last_scan(last_scan)}"
    console.print(Panel(summary, title="Summary"))


def create_progress(description: str) -> Progress:
    """Create a configured Rich Progress bar."""
    return Progress(
        SpinnerColumn(),
        TextColumn(f"[bold blue]{description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
    )


def display_record_detail(record: ConsolidatedRecord) -> None:
    """Display detailed information for a single subscription."""
    color = _CATEGORY_COLORS.get(record.category, "white")

    lines = [
        f"[bold]Sender:[/bold] {record.from_raw or record.sender_key}",
        f"[bold]Key:[/bold] {record.sender_key}",
        f"[bold]Category:[/bold] [{color}]{record.category}[/{color}]",
        f"[bold]Emails:[/bold] {record.email_count}",
        f"[bold]Last:[/bold] {format_date(record.date)}",
        f"[bold]Unsubscribe:[/bold] {record.unsubscribe_link or '[red]not found[/red]'}",
    ]

    if record.related_emails:
        lines.append("")
        lines.append("[bold]Related emails:[/bold]")
        for related in record.related_emails:
            lines.append(f"  - {format_date(related.date)}: {related.subject}")

    console.print(Panel("\n".join(lines), title="Subscription Detail"))


def confirm_action(selected: list[ConsolidatedRecord], action: str) -> bool:
    """Prompt the user to confirm an unsubscribe action on the selected records."""
    keyword = action.upper()

    lines = [f"[bold]The following subscriptions will be handled ({action}):[/bold]", ""]
    for record in selected:
        lines.append(f"  - {record.sender_key} -> {record.unsubscribe_link}")
    lines.append("")
    lines.append(f"[bold]Total: {len(selected)}[/bold]")

    console.print(Panel("\n".join(lines), title="Confirm"))

    answer = Prompt.ask(f'[bold red]Type "{keyword}" to confirm[/bold red]', console=console)
    return answer == keyword


def display_action_summary(handled: int, action: str, skipped: int = 0) -> None:
    """Display a summary after an unsubscribe action."""
    text = f"[bold green]{action.capitalize()}: {handled} subscriptions handled.[/bold green]"
    if skipped:
        text += f"\n[yellow]{skipped} skipped (no unsubscribe link or action failed).[/yellow]"
    console.print(Panel(text, title="Done"))
