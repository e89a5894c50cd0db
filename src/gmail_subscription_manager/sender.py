"""Sender identity helpers."""

from __future__ import annotations

import re

_ANGLE_ADDRESS_RE = re.compile(r"<(.+?)>")
_SUBADDRESS_RE = re.compile(r"\+[^@]+@")
_FROM_RE = re.compile(r"^(.*?)\s*<([^>]+)>$")


def normalize_sender_key(from_raw: str) -> str:
    """Canonicalize a From header value into a deduplication key.

      "News <Deals+spring@Shop.com>" -> "deals@shop.com"
      "a@x.com"                      -> "a@x.com"
      "not an address"               -> "not an address"
    """
    match = _ANGLE_ADDRESS_RE.search(from_raw)
    address = match.group(1) if match else from_raw.strip()
    return _SUBADDRESS_RE.sub("@", address.lower(), count=1)


def parse_display_name(from_raw: str) -> str:
    """Return the display name part of a From header, or an empty string."""
    if not from_raw:
        return ""
    m = _FROM_RE.match(from_raw.strip())
    if m:
        return m.group(1).strip().strip('"').strip("'")
    return ""
