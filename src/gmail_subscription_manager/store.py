"""SQLite store for the consolidated subscription set."""

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path

from gmail_subscription_manager import constants
from gmail_subscription_manager.exceptions import PersistenceError
from gmail_subscription_manager.models import ConsolidatedRecord, RelatedEmail

logger = logging.getLogger(__name__)

_CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS scan_metadata (
    key TEXT PRIMARY KEY,
    value TEXT
);

CREATE TABLE IF NOT EXISTS subscriptions (
    position INTEGER PRIMARY KEY,
    id TEXT,
    sender_key TEXT UNIQUE,
    from_raw TEXT,
    subject TEXT,
    category TEXT,
    unsubscribe_link TEXT,
    date TEXT,
    related_emails_json TEXT
);
"""


def _related_to_json(related: list[RelatedEmail]) -> str:
    return json.dumps([{"id": r.id, "subject": r.subject, "date": r.date} for r in related])


def _related_from_json(raw: str) -> list[RelatedEmail]:
    return [RelatedEmail(id=r["id"], subject=r["subject"], date=r.get("date")) for r in json.loads(raw)]


class SubscriptionStore:
    """Persistent SQLite store holding the result of the latest scan."""

    def __init__(self, db_path: Path | None = None) -> None:
        self.db_path = Path(db_path or constants.STORE_DB_PATH)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self.db_path))
        self._conn.row_factory = sqlite3.Row
        self._create_tables()

    def _create_tables(self) -> None:
        self._conn.executescript(_CREATE_TABLES_SQL)

    # --- public API ---

    def replace_subscriptions(self, records: list[ConsolidatedRecord], scan_date: str) -> None:
        """Replace the stored set with ``records`` in a single transaction.

        On failure nothing changes and PersistenceError is raised.
        """
        try:
            with self._conn:
                self._conn.execute("DELETE FROM subscriptions")
                for position, record in enumerate(records):
                    self._conn.execute(
                        "INSERT INTO subscriptions (position, id, sender_key, from_raw, subject, "
                        "category, unsubscribe_link, date, related_emails_json) "
                        "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                        (
                            position,
                            record.id,
                            record.sender_key,
                            record.from_raw,
                            record.subject,
                            record.category,
                            record.unsubscribe_link,
                            record.date,
                            _related_to_json(record.related_emails),
                        ),
                    )
                self._conn.execute(
                    "INSERT OR REPLACE INTO scan_metadata (key, value) VALUES ('last_scan', ?)",
                    (scan_date,),
                )
        except sqlite3.Error as exc:
            raise PersistenceError(f"Failed to save subscriptions to {self.db_path}: {exc}") from exc

        logger.info("Saved %d subscriptions (scan %s)", len(records), scan_date)

    def load_subscriptions(self) -> list[ConsolidatedRecord]:
        """Load the stored records in scan order."""
        rows = self._conn.execute("SELECT * FROM subscriptions ORDER BY position").fetchall()
        return [
            ConsolidatedRecord(
                id=row["id"],
                subject=row["subject"],
                from_raw=row["from_raw"],
                sender_key=row["sender_key"],
                category=row["category"],
                unsubscribe_link=row["unsubscribe_link"],
                date=row["date"],
                related_emails=_related_from_json(row["related_emails_json"]),
            )
            for row in rows
        ]

    def last_scan_date(self) -> str | None:
        row = self._conn.execute(
            "SELECT value FROM scan_metadata WHERE key = 'last_scan'"
        ).fetchone()
        return row["value"] if row else None

    def remove_subscriptions(self, ids: list[str]) -> int:
        """Remove records whose id is in ``ids``. Returns the number removed."""
        if not ids:
            return 0
        placeholders = ",".join("?" for _ in ids)
        try:
            with self._conn:
                cursor = self._conn.execute(
                    f"DELETE FROM subscriptions WHERE id IN ({placeholders})", list(ids)
                )
        except sqlite3.Error as exc:
            raise PersistenceError(f"Failed to remove subscriptions: {exc}") from exc
        return cursor.rowcount

    def clear(self) -> None:
        """Drop and recreate all tables."""
        self._conn.executescript(
            "DROP TABLE IF EXISTS subscriptions;"
            "DROP TABLE IF EXISTS scan_metadata;"
        )
        self._create_tables()

    def get_info(self) -> dict:
        """Return store statistics."""
        file_size = self.db_path.stat().st_size if self.db_path.exists() else 0
        subscription_count = self._conn.execute(
            "SELECT COUNT(*) AS c FROM subscriptions"
        ).fetchone()["c"]
        email_count = sum(
            len(json.loads(row["related_emails_json"]))
            for row in self._conn.execute("SELECT related_emails_json FROM subscriptions")
        )

        return {
            "db_file_size": file_size,
            "last_scan_date": self.last_scan_date(),
            "subscription_count": subscription_count,
            "email_count": email_count,
        }

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    # --- context manager ---

    def __enter__(self) -> SubscriptionStore:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        self.close()
