"""Tests for consolidating detections per sender."""

from gmail_subscription_manager.consolidation import ConsolidationEngine, is_newer, parse_date
from gmail_subscription_manager.models import Detection

JAN_1 = "Mon, 01 Jan 2024 10:00:00 +0000"
JAN_2 = "Tue, 02 Jan 2024 10:00:00 +0000"
JAN_3 = "Wed, 03 Jan 2024 10:00:00 +0000"


def _detection(
    message_id: str,
    date: str | None,
    subject: str = "Subject",
    link: str | None = None,
    category: str = "newsletter",
    sender_key: str = "news@example.com",
) -> Detection:
    return Detection(
        id=message_id,
        subject=subject,
        from_raw=f"News <{sender_key}>",
        sender_key=sender_key,
        category=category,
        unsubscribe_link=link,
        date=date,
    )


def test_first_detection_creates_record():
    engine = ConsolidationEngine()
    engine.add(_detection("m1", JAN_1, subject="Hello", link="https://ex.com/u"))

    [record] = engine.snapshot()
    assert record.id == "m1"
    assert record.subject == "Hello"
    assert record.unsubscribe_link == "https://ex.com/u"
    assert record.date == JAN_1
    assert [(r.id, r.subject, r.date) for r in record.related_emails] == [("m1", "Hello", JAN_1)]


def test_older_detection_after_newer_keeps_newer_fields():
    engine = ConsolidationEngine()
    engine.add(_detection("m2", JAN_3, subject="Newer", link="https://ex.com/new"))
    engine.add(_detection("m1", JAN_1, subject="Older", link="https://ex.com/old"))

    [record] = engine.snapshot()
    assert record.subject == "Newer"
    assert record.date == JAN_3
    assert record.unsubscribe_link == "https://ex.com/new"
    assert [r.id for r in record.related_emails] == ["m2", "m1"]


def test_newer_detection_updates_primary_fields():
    engine = ConsolidationEngine()
    engine.add(_detection("m1", JAN_1, subject="Older", link="https://ex.com/old"))
    engine.add(_detection("m2", JAN_3, subject="Newer", link="https://ex.com/new"))

    [record] = engine.snapshot()
    assert record.id == "m1"
    assert record.subject == "Newer"
    assert record.date == JAN_3
    assert record.unsubscribe_link == "https://ex.com/new"


def test_newer_detection_without_link_keeps_existing_link():
    engine = ConsolidationEngine()
    engine.add(_detection("m1", JAN_1, link="https://ex.com/old"))
    engine.add(_detection("m2", JAN_3, link=None))

    [record] = engine.snapshot()
    assert record.date == JAN_3
    assert record.unsubscribe_link == "https://ex.com/old"


def test_category_is_pinned_to_first_detection():
    engine = ConsolidationEngine()
    engine.add(_detection("m1", JAN_1, category="service"))
    engine.add(_detection("m2", JAN_3, category="newsletter"))

    [record] = engine.snapshot()
    assert record.category == "service"


def test_unparseable_date_never_updates_primary_fields():
    engine = ConsolidationEngine()
    engine.add(_detection("m1", JAN_1, subject="Valid", link="https://ex.com/u"))
    engine.add(_detection("m2", "not a date", subject="Broken", link="https://ex.com/other"))

    [record] = engine.snapshot()
    assert record.subject == "Valid"
    assert record.date == JAN_1
    assert record.unsubscribe_link == "https://ex.com/u"
    assert len(record.related_emails) == 2


def test_missing_date_never_updates_primary_fields():
    engine = ConsolidationEngine()
    engine.add(_detection("m1", JAN_1, subject="Valid"))
    engine.add(_detection("m2", None, subject="No date"))

    [record] = engine.snapshot()
    assert record.subject == "Valid"
    assert [r.date for r in record.related_emails] == [JAN_1, None]


def test_equal_dates_do_not_update():
    engine = ConsolidationEngine()
    engine.add(_detection("m1", JAN_2, subject="First"))
    engine.add(_detection("m2", JAN_2, subject="Second"))

    [record] = engine.snapshot()
    assert record.subject == "First"


def test_snapshot_preserves_first_insertion_order():
    engine = ConsolidationEngine()
    engine.add(_detection("m1", JAN_1, sender_key="b@example.com"))
    engine.add(_detection("m2", JAN_1, sender_key="a@example.com"))
    engine.add(_detection("m3", JAN_3, sender_key="b@example.com"))

    assert [r.sender_key for r in engine.snapshot()] == ["b@example.com", "a@example.com"]
    assert len(engine) == 2
    assert "a@example.com" in engine


def test_snapshot_is_a_copy():
    engine = ConsolidationEngine()
    engine.add(_detection("m1", JAN_1))
    snap = engine.snapshot()
    snap[0].related_emails.clear()
    snap[0].subject = "changed"

    [record] = engine.snapshot()
    assert record.subject == "Subject"
    assert len(record.related_emails) == 1


def test_is_newer_rules():
    assert is_newer(JAN_3, JAN_1) is True
    assert is_newer(JAN_1, JAN_3) is False
    assert is_newer("garbage", JAN_1) is False
    assert is_newer(None, JAN_1) is False
    assert is_newer(JAN_3, "garbage") is False
    assert is_newer(JAN_3, None) is False


def test_parse_date_formats():
    assert parse_date(JAN_1).day == 1
    assert parse_date("2024-01-03T10:00:00").tzinfo is not None
    assert parse_date("") is None
    assert parse_date("yesterday") is None


def test_timezones_are_compared_as_instants():
    # 10:00 -0500 is 15:00 UTC, later than 12:00 UTC the same day
    assert is_newer("Mon, 01 Jan 2024 10:00:00 -0500", "Mon, 01 Jan 2024 12:00:00 +0000") is True
