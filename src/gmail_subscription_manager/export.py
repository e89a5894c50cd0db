"""Export stored subscriptions to CSV or JSON."""

import csv
import json

from .models import ConsolidatedRecord

_FIELDNAMES = [
    "sender_key",
    "sender",
    "category",
    "unsubscribe_link",
    "date",
    "subject",
    "email_count",
]


def _row(record: ConsolidatedRecord) -> dict:
    return {
        "sender_key": record.sender_key,
        "sender": record.from_raw,
        "category": record.category,
        "unsubscribe_link": record.unsubscribe_link or "",
        "date": record.date or "",
        "subject": record.subject,
        "email_count": record.email_count,
    }


def export_subscriptions(records: list[ConsolidatedRecord], format: str, output_path: str) -> None:
    """Export subscription records to a file.

    Args:
        records: The consolidated records to export.
        format: Output format, either 'csv' or 'json'.
        output_path: Path to write the output file.
    """
    if format == "csv":
        with open(output_path, "w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=_FIELDNAMES)
            writer.writeheader()
            for record in records:
                writer.writerow(_row(record))
    elif format == "json":
        rows = []
        for record in records:
            row = _row(record)
            row["related_emails"] = [
                {"id": r.id, "subject": r.subject, "date": r.date} for r in record.related_emails
            ]
            rows.append(row)
        with open(output_path, "w") as f:
            json.dump(rows, f, indent=2)

    print(f"Results saved to {output_path}")
