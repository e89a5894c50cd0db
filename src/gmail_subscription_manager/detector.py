"""Per-message subscription detection."""

from __future__ import annotations

import logging

from .categorizer import categorize
from .decoder import decode_body
from .exceptions import DecodeError
from .extractor import extract_unsubscribe_link, get_header
from .models import Detection, RawMessage
from .sender import normalize_sender_key

logger = logging.getLogger(__name__)


def detect(message: RawMessage) -> Detection | None:
    """Analyze one message and return its Detection.

    Returns None only when the message headers are unreadable. A body
    that fails to decode is treated as empty.
    """
    headers = message.headers
    if headers is None:
        logger.warning("Skipping message %s: headers could not be read", message.id)
        return None

    subject = get_header(headers, "Subject") or ""
    from_raw = get_header(headers, "From") or ""
    date = get_header(headers, "Date")

    try:
        body = decode_body(message)
    except DecodeError as exc:
        logger.warning("%s; continuing with an empty body", exc)
        body = ""

    return Detection(
        id=message.id,
        subject=subject,
        from_raw=from_raw,
        sender_key=normalize_sender_key(from_raw),
        category=categorize(subject, from_raw, body),
        unsubscribe_link=extract_unsubscribe_link(headers, body),
        date=date,
    )
