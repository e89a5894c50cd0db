"""Shared fixtures for tests."""

from __future__ import annotations

import base64

import pytest

from gmail_subscription_manager.models import BodyPart, ConsolidatedRecord, RawMessage, RelatedEmail


def encode(text: str) -> str:
    """Encode text the way Gmail does: base64url without padding."""
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii").rstrip("=")


def make_message(
    message_id: str,
    sender: str = "News <news@example.com>",
    subject: str = "Weekly news",
    date: str | None = "Mon, 01 Jan 2024 10:00:00 +0000",
    html: str | None = None,
    plain: str | None = None,
    extra_headers: list[tuple[str, str]] | None = None,
) -> RawMessage:
    headers = [("From", sender), ("Subject", subject)]
    if date is not None:
        headers.append(("Date", date))
    headers.extend(extra_headers or [])

    parts = []
    if plain is not None:
        parts.append(BodyPart(mime_type="text/plain", data=encode(plain)))
    if html is not None:
        parts.append(BodyPart(mime_type="text/html", data=encode(html)))
    return RawMessage(id=message_id, headers=headers, parts=parts)


class FakeMailSource:
    """In-memory mail source; ids listed in ``failing`` raise on fetch."""

    def __init__(self, messages: list[RawMessage], failing: dict[str, Exception] | None = None) -> None:
        self.messages = {m.id: m for m in messages}
        self.order = [m.id for m in messages] + [i for i in (failing or {}) if i not in self.messages]
        self.failing = failing or {}

    def list_message_ids(self) -> list[str]:
        return list(self.order)

    def get_message(self, message_id: str) -> RawMessage:
        if message_id in self.failing:
            raise self.failing[message_id]
        return self.messages[message_id]


@pytest.fixture
def newsletter_message() -> RawMessage:
    return make_message(
        "msg_nl_001",
        sender="Newsletter Team <noreply+weekly@Example-Newsletter.com>",
        subject="Weekly Digest: Top Stories This Week",
        html=(
            "<html><body><p>Top stories</p>"
            '<a href="https://example-newsletter.com/unsubscribe?u=1">Unsubscribe</a>'
            "</body></html>"
        ),
    )


@pytest.fixture
def personal_message() -> RawMessage:
    return make_message(
        "msg_ps_001",
        sender="Alice Smith <alice.smith@gmail.com>",
        subject="Re: Lunch tomorrow?",
        date="Sat, 01 Jun 2024 12:00:00 +0000",
        plain="See you at noon.",
    )


@pytest.fixture
def sample_records() -> list[ConsolidatedRecord]:
    return [
        ConsolidatedRecord(
            id="m1",
            subject="Weekly digest",
            from_raw="News <news@example.com>",
            sender_key="news@example.com",
            category="newsletter",
            unsubscribe_link="https://example.com/unsubscribe",
            date="Wed, 03 Jan 2024 10:00:00 +0000",
            related_emails=[
                RelatedEmail(id="m1", subject="Weekly digest", date="Wed, 03 Jan 2024 10:00:00 +0000"),
                RelatedEmail(id="m2", subject="Older digest", date="Mon, 01 Jan 2024 10:00:00 +0000"),
            ],
        ),
        ConsolidatedRecord(
            id="m3",
            subject="Your bill is ready",
            from_raw="Billing <billing@utility.com>",
            sender_key="billing@utility.com",
            category="service",
            unsubscribe_link=None,
            date="Tue, 02 Jan 2024 10:00:00 +0000",
            related_emails=[
                RelatedEmail(id="m3", subject="Your bill is ready", date="Tue, 02 Jan 2024 10:00:00 +0000"),
            ],
        ),
    ]


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    """Keep Rich tables from wrapping cells in captured output."""
    from gmail_subscription_manager.display import console

    monkeypatch.setattr(console, "width", 200)
