"""Interactive unsubscribe workflow - select subscriptions, open links or delete messages."""

from __future__ import annotations

import json
import logging
import webbrowser
from datetime import datetime
from typing import Callable

import httplib2
from googleapiclient.errors import HttpError

from . import constants
from .display import (
    confirm_action,
    console,
    display_action_summary,
    display_record_detail,
    display_subscriptions,
)
from .gmail_client import delete_message
from .models import ConsolidatedRecord, UnsubscribeRequest
from .store import SubscriptionStore

logger = logging.getLogger(__name__)

ACTION_OPEN = "open"
ACTION_DELETE = "delete"


def build_requests(
    records: list[ConsolidatedRecord],
) -> tuple[list[UnsubscribeRequest], list[ConsolidatedRecord]]:
    """Split records into unsubscribe requests and records without a link."""
    requests: list[UnsubscribeRequest] = []
    without_link: list[ConsolidatedRecord] = []
    for record in records:
        link = (record.unsubscribe_link or "").strip()
        if link:
            requests.append(UnsubscribeRequest(id=record.id, unsubscribe_link=link))
        else:
            without_link.append(record)
    return requests, without_link


def _openable(link: str) -> str:
    # Bare addresses come from mailto: links with the scheme stripped.
    if "://" not in link and "@" in link:
        return f"mailto:{link}"
    return link


def open_links(
    requests: list[UnsubscribeRequest],
    opener: Callable[[str], bool] = webbrowser.open,
) -> list[str]:
    """Open each unsubscribe link for manual completion. Returns the handled ids."""
    handled: list[str] = []
    for request in requests:
        if opener(_openable(request.unsubscribe_link)):
            handled.append(request.id)
        else:
            logger.warning("Could not open unsubscribe link for message %s", request.id)
    return handled


def delete_messages(service, message_ids: list[str]) -> list[str]:
    """Delete each message via the Gmail API. Returns the ids that were deleted."""
    deleted: list[str] = []
    for message_id in message_ids:
        try:
            delete_message(service, message_id)
        except (HttpError, OSError, httplib2.HttpLib2Error) as exc:
            logger.warning("Failed to delete message %s: %s", message_id, exc)
            continue
        deleted.append(message_id)
    return deleted


def _save_action_log(action: str, records: list[ConsolidatedRecord], handled_ids: list[str]) -> None:
    """Append an unsubscribe action to the audit log."""
    log_path = constants.ACTION_LOG_PATH
    log_path.parent.mkdir(parents=True, exist_ok=True)

    log: list = []
    if log_path.exists():
        with open(log_path) as f:
            try:
                log = json.load(f)
            except json.JSONDecodeError:
                log = []

    entry = {
        "date": datetime.now().isoformat(),
        "action": action,
        "subscriptions": [
            {
                "id": r.id,
                "sender_key": r.sender_key,
                "unsubscribe_link": r.unsubscribe_link,
            }
            for r in records
            if r.id in handled_ids
        ],
        "handled_ids": handled_ids,
    }
    log.append(entry)

    with open(log_path, "w") as f:
        json.dump(log, f, indent=2)


def _select(records: list[ConsolidatedRecord], selection: str) -> list[ConsolidatedRecord] | None:
    if selection.lower() == "all":
        return list(records)
    try:
        indices = [int(x.strip()) - 1 for x in selection.split(",")]
    except ValueError:
        return None
    unique = dict.fromkeys(i for i in indices if 0 <= i < len(records))
    return [records[i] for i in unique]


def interactive_unsubscribe(
    service,
    store: SubscriptionStore,
    action: str = ACTION_OPEN,
    execute: bool = False,
    opener: Callable[[str], bool] = webbrowser.open,
) -> dict:
    """Run the interactive unsubscribe workflow.

    Returns a summary dict with keys: selected, skipped, handled.
    """
    records = store.load_subscriptions()
    empty = {"selected": 0, "skipped": 0, "handled": 0}

    if not records:
        console.print("[yellow]No subscriptions stored. Run 'scan' first.[/yellow]")
        return empty

    display_subscriptions(records)

    console.print()
    console.print(
        "[bold]Select subscriptions (comma-separated numbers, 'all', or 'q' to quit):[/bold]"
    )
    selection = console.input("> ").strip()

    if selection.lower() == "q":
        console.print("[dim]Cancelled.[/dim]")
        return empty

    selected = _select(records, selection)
    if selected is None:
        console.print("[red]Invalid selection.[/red]")
        return empty
    if not selected:
        console.print("[yellow]No subscriptions selected.[/yellow]")
        return empty

    console.print()
    for record in selected:
        display_record_detail(record)

    requests, without_link = build_requests(selected)
    if without_link:
        console.print(
            f"[yellow]Could not find unsubscribe links for {len(without_link)} selected items[/yellow]"
        )
    summary = {"selected": len(selected), "skipped": len(without_link), "handled": 0}

    if not requests:
        return summary

    if not execute:
        console.print(
            f"\n[yellow][DRY RUN] {len(requests)} subscriptions would be handled ({action}). "
            "Use --execute to act on them.[/yellow]"
        )
        return summary

    requested_ids = {request.id for request in requests}
    with_link = [r for r in selected if r.id in requested_ids]
    if not confirm_action(with_link, action):
        console.print("[dim]Cancelled.[/dim]")
        return summary

    if action == ACTION_DELETE:
        handled_ids = delete_messages(service, [r.id for r in requests])
    else:
        handled_ids = open_links(requests, opener=opener)

    _save_action_log(action, with_link, handled_ids)
    removed = store.remove_subscriptions(handled_ids)
    logger.info("Removed %d subscriptions from the store", removed)

    summary["skipped"] += len(requests) - len(handled_ids)
    summary["handled"] = len(handled_ids)
    display_action_summary(summary["handled"], action, skipped=summary["skipped"])
    return summary
