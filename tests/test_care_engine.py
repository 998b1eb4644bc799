"""
tests/test_care_engine.py - Tests for due-date computation.

Tests cover:
- Next due date for completed and never-completed steps
- Calendar-day (not 24h) overdue and countdown semantics
- Due-today classification
- Status labels and the early-warning window
"""

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from plantcare.plants import care_engine
from tests.conftest import NOW, days_ago


def test_never_completed_is_due_now_and_not_overdue():
    assert care_engine.next_due_date(None, 7, NOW) == NOW
    assert care_engine.is_overdue(None, 7, NOW) is False
    assert care_engine.is_due_today(None, 7, NOW) is True
    assert care_engine.days_until_due(None, 7, NOW) is None
    assert care_engine.days_since_last_completed(None, NOW) is None


def test_next_due_date_adds_frequency():
    last = days_ago(3)
    assert care_engine.next_due_date(last, 7, NOW) == last + timedelta(days=7)


def test_completed_six_days_ago_is_due_tomorrow():
    last = days_ago(6)
    assert care_engine.is_overdue(last, 7, NOW) is False
    assert care_engine.days_until_due(last, 7, NOW) == 1


def test_completed_eight_days_ago_is_one_day_overdue():
    last = days_ago(8)
    assert care_engine.is_overdue(last, 7, NOW) is True
    assert care_engine.days_since_last_completed(last, NOW) - 7 == 1
    assert care_engine.days_until_due(last, 7, NOW) == -1


def test_due_later_today_is_due_today_not_overdue():
    # Due at 18:00, checked at 12:00 the same day.
    last = datetime(2024, 6, 8, 18, 0, tzinfo=timezone.utc)
    assert care_engine.is_due_today(last, 7, NOW) is True
    assert care_engine.is_overdue(last, 7, NOW) is False


def test_due_earlier_today_is_still_not_overdue():
    # Due at 06:00, checked at 12:00: same calendar day, so not overdue yet.
    last = datetime(2024, 6, 8, 6, 0, tzinfo=timezone.utc)
    assert care_engine.is_overdue(last, 7, NOW) is False
    assert care_engine.is_due_today(last, 7, NOW) is True


def test_days_counted_by_calendar_date():
    last = datetime(2024, 6, 14, 23, 0, tzinfo=timezone.utc)
    now = datetime(2024, 6, 15, 1, 0, tzinfo=timezone.utc)
    assert care_engine.days_since_last_completed(last, now) == 1


def test_calendar_days_follow_the_given_timezone():
    tz = ZoneInfo("Asia/Kolkata")
    # 20:00 UTC is 01:30 the next day in Kolkata.
    last = datetime(2024, 6, 14, 20, 0, tzinfo=timezone.utc)
    now = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)
    assert care_engine.days_since_last_completed(last, now, timezone.utc) == 1
    assert care_engine.days_since_last_completed(last, now, tz) == 0


def test_naive_datetimes_are_read_in_the_given_timezone():
    last = datetime(2024, 6, 8, 12, 0)
    assert care_engine.is_due_today(last, 7, NOW) is True


def test_classify_never_done():
    status = care_engine.classify_care_step(None, 7, NOW)
    assert status.urgency == care_engine.NEVER_DONE
    assert status.label == "Not done yet"
    assert status.days_until_due is None
    assert status.next_due_date == NOW


def test_classify_overdue_label():
    status = care_engine.classify_care_step(days_ago(10), 7, NOW)
    assert status.urgency == care_engine.OVERDUE
    assert status.days_overdue == 3
    assert status.label == "Overdue by 3 days"

    status = care_engine.classify_care_step(days_ago(8), 7, NOW)
    assert status.label == "Overdue by 1 day"


def test_classify_due_today_soon_and_upcoming():
    assert care_engine.classify_care_step(days_ago(7), 7, NOW).urgency == care_engine.DUE_TODAY

    tomorrow = care_engine.classify_care_step(days_ago(6), 7, NOW)
    assert tomorrow.urgency == care_engine.DUE_SOON
    assert tomorrow.label == "Due tomorrow"

    in_two = care_engine.classify_care_step(days_ago(5), 7, NOW, early_warning_days=2)
    assert in_two.urgency == care_engine.DUE_SOON
    assert in_two.label == "Due in 2 days"

    later = care_engine.classify_care_step(days_ago(1), 7, NOW, early_warning_days=2)
    assert later.urgency == care_engine.UPCOMING
    assert later.days_until_due == 6


def test_early_warning_window_of_zero():
    status = care_engine.classify_care_step(days_ago(6), 7, NOW, early_warning_days=0)
    assert status.urgency == care_engine.UPCOMING
    assert status.label == "Due in 1 day"
