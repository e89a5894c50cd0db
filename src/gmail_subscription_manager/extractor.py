"""Unsubscribe link extraction from headers and decoded body text.

Rules are tried in priority order and the first match wins:

1. ``List-Unsubscribe`` header with an angle-bracketed http(s) URL
2. anchor whose text mentions "unsubscribe"
3. "unsubscribe link: URL" label
4. "click here to unsubscribe: URL" label
5. anchor href containing "unsubscribe"
6. anchor href containing a preferences/manage keyword
7. generic "unsubscribe"/"opt-out"/"... preferences" label followed by a URL
8. ``mailto:unsubscribe@...`` address

Broad substring fallbacks come last so incidental "manage" or "pref"
links only win when nothing more specific exists.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Sequence

from .constants import PREFERENCE_HREF_KEYWORDS

logger = logging.getLogger(__name__)

Headers = Sequence[tuple[str, str]]
Matcher = Callable[[Headers, str], "str | None"]

_HEADER_URL_RE = re.compile(r"<(https?://[^>]+)>")
_ANCHOR_TEXT_RE = re.compile(
    r"<a[^>]*href=[\"']([^\"']+)[\"'][^>]*>(?:[^<]*)?unsubscribe(?:[^<]*)?</a>",
    re.IGNORECASE,
)
_UNSUBSCRIBE_LINK_LABEL_RE = re.compile(
    r"unsubscribe\s*link:\s*(https?://[^\s<>\"]+)", re.IGNORECASE
)
_CLICK_HERE_LABEL_RE = re.compile(
    r"click\s*here\s*to\s*unsubscribe:\s*(https?://[^\s<>\"]+)", re.IGNORECASE
)
_ANCHOR_HREF_UNSUBSCRIBE_RE = re.compile(
    r"<a[^>]*href=[\"'](https?://[^\"']*unsubscribe[^\"']*)[\"'][^>]*>", re.IGNORECASE
)
_ANCHOR_HREF_PREFERENCE_RES = tuple(
    re.compile(
        r"<a[^>]*href=[\"'](https?://[^\"']*" + re.escape(keyword) + r"[^\"']*)[\"'][^>]*>",
        re.IGNORECASE,
    )
    for keyword in PREFERENCE_HREF_KEYWORDS
)
_GENERIC_LABEL_RE = re.compile(
    r"(?:unsubscribe|opt-out|manage\s+preferences|email\s+preferences)[:\s]\s*(https?://[^\s<>\"']+)",
    re.IGNORECASE,
)
_MAILTO_RE = re.compile(r"(mailto:unsubscribe@[^\s<>\"'?]+)", re.IGNORECASE)

_MAILTO_PREFIX = "mailto:"


def get_header(headers: Headers, name: str) -> str | None:
    """Return the value of the first header called ``name`` (case-insensitive)."""
    wanted = name.lower()
    for header_name, value in headers:
        if header_name.lower() == wanted:
            return value
    return None


def _search(pattern: re.Pattern[str], text: str) -> str | None:
    m = pattern.search(text)
    return m.group(1) if m else None


def _list_unsubscribe_header(headers: Headers, body: str) -> str | None:
    value = get_header(headers, "List-Unsubscribe")
    if not value:
        return None
    return _search(_HEADER_URL_RE, value)


def _anchor_text(headers: Headers, body: str) -> str | None:
    return _search(_ANCHOR_TEXT_RE, body)


def _unsubscribe_link_label(headers: Headers, body: str) -> str | None:
    return _search(_UNSUBSCRIBE_LINK_LABEL_RE, body)


def _click_here_label(headers: Headers, body: str) -> str | None:
    return _search(_CLICK_HERE_LABEL_RE, body)


def _anchor_href_unsubscribe(headers: Headers, body: str) -> str | None:
    return _search(_ANCHOR_HREF_UNSUBSCRIBE_RE, body)


def _anchor_href_preferences(headers: Headers, body: str) -> str | None:
    for pattern in _ANCHOR_HREF_PREFERENCE_RES:
        link = _search(pattern, body)
        if link:
            return link
    return None


def _generic_label(headers: Headers, body: str) -> str | None:
    return _search(_GENERIC_LABEL_RE, body)


def _mailto_unsubscribe(headers: Headers, body: str) -> str | None:
    return _search(_MAILTO_RE, body)


RULES: tuple[tuple[str, Matcher], ...] = (
    ("list_unsubscribe_header", _list_unsubscribe_header),
    ("anchor_text", _anchor_text),
    ("unsubscribe_link_label", _unsubscribe_link_label),
    ("click_here_label", _click_here_label),
    ("anchor_href_unsubscribe", _anchor_href_unsubscribe),
    ("anchor_href_preferences", _anchor_href_preferences),
    ("generic_label", _generic_label),
    ("mailto_unsubscribe", _mailto_unsubscribe),
)


def _strip_mailto(link: str) -> str:
    if link.lower().startswith(_MAILTO_PREFIX):
        return link[len(_MAILTO_PREFIX):]
    return link


def extract_unsubscribe_link(headers: Headers, body: str) -> str | None:
    """Return the unsubscribe URL or bare address for a message, if any."""
    for name, matcher in RULES:
        link = matcher(headers, body)
        if link:
            logger.debug("Unsubscribe link found by rule %s: %s", name, link)
            return _strip_mailto(link)
    return None
