"""Exceptions raised while scanning a mailbox for subscriptions."""

from __future__ import annotations


class SubscriptionManagerError(Exception):
    """Base exception for all Gmail Subscription Manager errors."""


class AuthError(SubscriptionManagerError):
    """No usable credential could be obtained. Fatal to a scan."""


class ListFetchError(SubscriptionManagerError):
    """Candidate messages could not be enumerated. Fatal to a scan."""


class DetailFetchError(SubscriptionManagerError):
    """A single message could not be retrieved. The message is skipped."""

    def __init__(self, message_id: str, reason: str) -> None:
        super().__init__(f"Failed to fetch message {message_id}: {reason}")
        self.message_id = message_id


class DecodeError(SubscriptionManagerError):
    """A message body payload is not valid base64."""

    def __init__(self, message_id: str, reason: str) -> None:
        super().__init__(f"Failed to decode body of message {message_id}: {reason}")
        self.message_id = message_id


class PersistenceError(SubscriptionManagerError):
    """The consolidated record set could not be written."""


class ScanInProgressError(SubscriptionManagerError):
    """Another scan is already running in this process."""
