"""Decoding of Gmail body payloads into text."""

from __future__ import annotations

import base64
import binascii

from .exceptions import DecodeError
from .models import RawMessage

_URLSAFE_TO_STANDARD = str.maketrans("-_", "+/")


def decode_payload(data: str, message_id: str = "") -> str:
    """Decode a base64url payload to text.

    Raises DecodeError when the payload is not valid base64.
    """
    translated = data.strip().translate(_URLSAFE_TO_STANDARD)
    translated += "=" * (-len(translated) % 4)
    try:
        raw = base64.b64decode(translated, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError(message_id, str(exc)) from exc
    return raw.decode("utf-8", errors="replace")


def _first_part_data(message: RawMessage, mime_type: str) -> str:
    for part in message.parts:
        if part.mime_type == mime_type and part.data:
            return part.data
    return ""


def decode_body(message: RawMessage) -> str:
    """Return the message body as text, preferring HTML over plain text.

    Falls back to the top-level body when neither part is present and
    returns an empty string when there is nothing to decode.
    """
    data = (
        _first_part_data(message, "text/html")
        or _first_part_data(message, "text/plain")
        or message.body_data
    )
    if not data:
        return ""
    return decode_payload(data, message_id=message.id)
