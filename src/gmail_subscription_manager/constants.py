"""Constants for Gmail Subscription Manager."""

from pathlib import Path

# --- Config paths ---
CONFIG_DIR = Path.home() / ".gmail-subscription-manager"
CREDENTIALS_PATH = CONFIG_DIR / "credentials.json"
TOKEN_PATH = CONFIG_DIR / "token.json"
STORE_DB_PATH = CONFIG_DIR / "subscriptions.db"
ACTION_LOG_PATH = CONFIG_DIR / "action_log.json"

# --- Gmail API ---
SCOPES = [
    "https://www.googleapis.com/auth/gmail.readonly",
    "https://www.googleapis.com/auth/gmail.modify",
]
SUBSCRIPTION_QUERY = "in:inbox (unsubscribe OR subscription OR newsletter)"
MAX_MESSAGES = 100  # messages per scan
PAGE_SIZE = 100  # messages per list page

# --- Categories ---
CATEGORY_NEWSLETTER = "newsletter"
CATEGORY_SOCIAL = "social"
CATEGORY_SERVICE = "service"
CATEGORY_OTHER = "other"

# Order is priority: the first category with a keyword hit wins.
CATEGORY_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    (
        CATEGORY_NEWSLETTER,
        ("unsubscribe", "subscription", "newsletter", "mailing list", "email preferences"),
    ),
    (
        CATEGORY_SOCIAL,
        ("linkedin", "facebook", "twitter", "instagram", "youtube", "reddit", "pinterest"),
    ),
    (
        CATEGORY_SERVICE,
        ("account", "billing", "payment", "service", "membership"),
    ),
)

CATEGORIES = tuple(name for name, _ in CATEGORY_KEYWORDS) + (CATEGORY_OTHER,)

# --- Unsubscribe link fallbacks ---
PREFERENCE_HREF_KEYWORDS = (
    "preferences",
    "email-preferences",
    "manage-subscription",
    "subscription-preferences",
    "pref",
    "manage",
)

# --- Display ---
SUBJECT_DISPLAY_LIMIT = 60
