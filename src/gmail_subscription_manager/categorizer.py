"""Keyword categorization of subscription messages."""

from .constants import CATEGORY_KEYWORDS, CATEGORY_OTHER


def categorize(subject: str, from_raw: str, body: str) -> str:
    """Return the category of a message.

    Categories are checked in ``CATEGORY_KEYWORDS`` order, so a message
    mentioning both "newsletter" and "linkedin" is a newsletter.
    Messages without any keyword fall into "other".
    """
    text = f"{subject} {from_raw} {body}".lower()

    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return category

    return CATEGORY_OTHER
