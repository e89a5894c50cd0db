"""Data models for Gmail Subscription Manager."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class BodyPart:
    """One MIME part of a message body, still base64url encoded."""

    mime_type: str
    data: str = ""


@dataclass
class RawMessage:
    """A fetched message as handed over by the mail-fetch collaborator.

    ``headers`` keeps the provider's order and may repeat names. It is
    ``None`` when the headers could not be read at all.
    """

    id: str
    headers: list[tuple[str, str]] | None = field(default_factory=list)
    parts: list[BodyPart] = field(default_factory=list)
    body_data: str = ""  # Top-level body, used when there are no parts


@dataclass
class Detection:
    """Analysis result for a single message."""

    id: str
    subject: str
    from_raw: str  # Full From header value
    sender_key: str
    category: str
    unsubscribe_link: str | None = None
    date: str | None = None  # Raw Date header value


@dataclass
class RelatedEmail:
    """Compact reference to one message folded into a record."""

    id: str
    subject: str
    date: str | None = None


@dataclass
class ConsolidatedRecord:
    """The merged subscription record for one sender key."""

    id: str
    subject: str
    from_raw: str
    sender_key: str
    category: str
    unsubscribe_link: str | None = None
    date: str | None = None
    related_emails: list[RelatedEmail] = field(default_factory=list)

    @property
    def email_count(self) -> int:
        return len(self.related_emails)


@dataclass
class ScanProgress:
    """Progress event emitted after each processed message."""

    processed: int
    total: int
    percentage: int


@dataclass
class ScanOutcome:
    """Terminal result of a scan run."""

    success: bool
    subscriptions: list[ConsolidatedRecord] = field(default_factory=list)
    error: str | None = None


@dataclass
class UnsubscribeRequest:
    """A record selected for an unsubscribe action."""

    id: str
    unsubscribe_link: str
