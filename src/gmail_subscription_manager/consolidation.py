"""Folding per-message detections into one record per sender."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime

from .models import ConsolidatedRecord, Detection, RelatedEmail

logger = logging.getLogger(__name__)


def parse_date(value: str | None) -> datetime | None:
    """Parse an RFC 2822 or ISO 8601 date. Returns None when unparseable.

    Naive results are taken to be UTC so every parsed value is comparable.
    """
    if not value:
        return None
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError, OverflowError):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def is_newer(candidate: str | None, current: str | None) -> bool:
    """True only when both dates parse and ``candidate`` is strictly later."""
    candidate_dt = parse_date(candidate)
    if candidate_dt is None:
        return False
    current_dt = parse_date(current)
    if current_dt is None:
        return False
    return candidate_dt > current_dt


class ConsolidationEngine:
    """Collects detections for a single scan, keyed by sender.

    The record's category and id come from the first detection seen for
    a sender and are never changed by later merges. Subject, date and
    link follow the most recent message.
    """

    def __init__(self) -> None:
        self._records: dict[str, ConsolidatedRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, sender_key: object) -> bool:
        return sender_key in self._records

    def add(self, detection: Detection) -> ConsolidatedRecord:
        """Merge a detection and return the record it landed in."""
        related = RelatedEmail(id=detection.id, subject=detection.subject, date=detection.date)
        record = self._records.get(detection.sender_key)

        if record is None:
            record = ConsolidatedRecord(
                id=detection.id,
                subject=detection.subject,
                from_raw=detection.from_raw,
                sender_key=detection.sender_key,
                category=detection.category,
                unsubscribe_link=detection.unsubscribe_link,
                date=detection.date,
                related_emails=[related],
            )
            self._records[detection.sender_key] = record
            return record

        if is_newer(detection.date, record.date):
            record.subject = detection.subject
            record.date = detection.date
            if detection.unsubscribe_link is not None:
                record.unsubscribe_link = detection.unsubscribe_link
        else:
            logger.debug(
                "Message %s is not newer than record for %s; keeping primary fields",
                detection.id,
                detection.sender_key,
            )

        record.related_emails.append(related)
        return record

    def snapshot(self) -> list[ConsolidatedRecord]:
        """Return copies of all records in first-seen sender order."""
        return [
            replace(record, related_emails=list(record.related_emails))
            for record in self._records.values()
        ]
