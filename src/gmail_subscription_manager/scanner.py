"""Scan orchestration - fetches messages, detects subscriptions, consolidates."""

from __future__ import annotations

import logging
import math
import threading
from datetime import datetime
from typing import Callable, Protocol

from .consolidation import ConsolidationEngine
from .detector import detect
from .exceptions import DetailFetchError, ScanInProgressError, SubscriptionManagerError
from .models import ConsolidatedRecord, RawMessage, ScanOutcome, ScanProgress
from .store import SubscriptionStore

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ScanProgress], None]

_scan_lock = threading.Lock()


class MailSource(Protocol):
    def list_message_ids(self) -> list[str]: ...

    def get_message(self, message_id: str) -> RawMessage: ...


def _percentage(processed: int, total: int) -> int:
    if total <= 0:
        return 100
    return math.floor(processed * 100 / total + 0.5)


def _notify(on_progress: ProgressCallback | None, progress: ScanProgress) -> None:
    if on_progress is None:
        return
    try:
        on_progress(progress)
    except Exception:  # noqa: BLE001
        logger.warning("Progress observer failed at %d/%d", progress.processed, progress.total, exc_info=True)


def scan_mailbox(
    source: MailSource,
    on_progress: ProgressCallback | None = None,
) -> list[ConsolidatedRecord]:
    """Detect and consolidate subscriptions across the source's messages.

    Messages are processed one at a time in listing order. A message that
    cannot be fetched is logged and skipped; listing and auth failures
    propagate.
    """
    ids = source.list_message_ids()
    total = len(ids)
    engine = ConsolidationEngine()

    for processed, message_id in enumerate(ids, start=1):
        try:
            message = source.get_message(message_id)
        except DetailFetchError as exc:
            logger.warning("Skipping message %s: %s", message_id, exc)
        else:
            detection = detect(message)
            if detection is not None:
                engine.add(detection)

        _notify(on_progress, ScanProgress(processed, total, _percentage(processed, total)))

    records = engine.snapshot()
    logger.info("Found %d unique subscriptions in %d messages", len(records), total)
    return records


def run_scan(
    source: MailSource,
    store: SubscriptionStore,
    on_progress: ProgressCallback | None = None,
) -> ScanOutcome:
    """Run a full scan and persist its result.

    The stored set is replaced only when the whole scan succeeds. Only one
    scan may run at a time; a concurrent call raises ScanInProgressError.
    """
    if not _scan_lock.acquire(blocking=False):
        raise ScanInProgressError("A scan is already in progress")

    try:
        records = scan_mailbox(source, on_progress=on_progress)
        store.replace_subscriptions(records, scan_date=datetime.now().isoformat())
    except SubscriptionManagerError as exc:
        logger.error("Scan failed: %s", exc)
        return ScanOutcome(success=False, error=str(exc))
    finally:
        _scan_lock.release()

    return ScanOutcome(success=True, subscriptions=records)
