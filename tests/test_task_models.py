# tests/test_task_models.py

from __future__ import annotations

from datetime import UTC, datetime

from tasklane.tasks.task_models import Priority, format_iso, parse_due_date


def test_priority_parse_defaults_to_medium() -> None:
    assert Priority.parse("HIGH ") == Priority.HIGH
    assert Priority.parse("low") == Priority.LOW
    assert Priority.parse("urgent") == Priority.MEDIUM
    assert Priority.parse(None) == Priority.MEDIUM
    assert Priority.parse(3) == Priority.MEDIUM


def test_priority_cycle() -> None:
    assert Priority.LOW.next() == Priority.MEDIUM
    assert Priority.MEDIUM.next() == Priority.HIGH
    assert Priority.HIGH.next() == Priority.LOW


def test_parse_due_date() -> None:
    assert parse_due_date("2025-01-01T00:00:00Z") == datetime(2025, 1, 1, tzinfo=UTC)
    assert parse_due_date("") is None
    assert parse_due_date("next friday") is None
    assert parse_due_date(12345) is None

    naive = parse_due_date("2025-06-01T09:30")
    assert naive is not None and naive.tzinfo is not None


def test_format_iso_roundtrips_through_parse() -> None:
    dt = datetime(2025, 1, 1, 8, 15, tzinfo=UTC)
    assert parse_due_date(format_iso(dt)) == dt
    assert format_iso(None) is None


def test_parse_due_date_rejects_values_off_the_utc_timeline() -> None:
    assert parse_due_date("9999-12-31T23:00:00-05:00") is None
    assert parse_due_date("0001-01-01T00:00:00+05:00") is None
    assert parse_due_date("9999-12-31T00:00:00+00:00") == datetime(9999, 12, 31, tzinfo=UTC)
