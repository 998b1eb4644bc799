"""Care due-date engine.

Deterministic rules (no I/O, no caching) used for:
- Plant and routine status ("Overdue by 2 days", "Due today")
- Reminder generation (ReminderService)
- UI colour coding via the early-warning window

Every value is derived from ``(last_completed_date, frequency_days, now)`` on
each call. Differences are counted in calendar days, not 24h intervals: a step
completed at 23:00 and checked at 01:00 the next day was done "1 day ago".
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Optional


NEVER_DONE = "never_done"
OVERDUE = "overdue"
DUE_TODAY = "due_today"
DUE_SOON = "due_soon"
UPCOMING = "upcoming"


@dataclass(frozen=True)
class CareStatus:
    urgency: str  # "never_done" | "overdue" | "due_today" | "due_soon" | "upcoming"
    next_due_date: datetime
    days_until_due: Optional[int]
    days_overdue: int
    label: str


def _tz(tz: Optional[tzinfo]) -> tzinfo:
    return tz or timezone.utc


def to_aware(dt: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Attach ``tz`` to naive datetimes (treated as wall time there)."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=_tz(tz))
    return dt


def resolve_now(now: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> datetime:
    if now is None:
        return datetime.now(_tz(tz))
    return now


def local_date(dt: datetime, tz: Optional[tzinfo] = None) -> date:
    """Calendar date of ``dt`` in ``tz``."""
    return to_aware(dt, tz).astimezone(_tz(tz)).date()


def calendar_days_between(start: datetime, end: datetime, tz: Optional[tzinfo] = None) -> int:
    """Whole calendar days from ``start`` to ``end`` (negative if end is earlier)."""
    return (local_date(end, tz) - local_date(start, tz)).days


def next_due_date(
    last_completed: Optional[datetime],
    frequency_days: int,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> datetime:
    """
    Date the next occurrence is owed.

    A step that was never completed is due immediately, so ``now`` is returned.
    """
    if last_completed is None:
        return resolve_now(now, tz)
    return last_completed + timedelta(days=frequency_days)


def is_overdue(
    last_completed: Optional[datetime],
    frequency_days: int,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> bool:
    """True once the calendar date of ``now`` is strictly after the due date."""
    now = resolve_now(now, tz)
    due = next_due_date(last_completed, frequency_days, now, tz)
    return local_date(now, tz) > local_date(due, tz)


def is_due_today(
    last_completed: Optional[datetime],
    frequency_days: int,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> bool:
    now = resolve_now(now, tz)
    due = next_due_date(last_completed, frequency_days, now, tz)
    return local_date(now, tz) == local_date(due, tz)


def days_since_last_completed(
    last_completed: Optional[datetime],
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> Optional[int]:
    if last_completed is None:
        return None
    return calendar_days_between(last_completed, resolve_now(now, tz), tz)


def days_until_due(
    last_completed: Optional[datetime],
    frequency_days: int,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> Optional[int]:
    """
    Calendar days left before the due date.

    ``None`` for a never-completed step (there is no countdown from an unset
    baseline). Negative once overdue; callers showing a countdown should check
    ``is_overdue`` first.
    """
    if last_completed is None:
        return None
    now = resolve_now(now, tz)
    return calendar_days_between(now, next_due_date(last_completed, frequency_days, now, tz), tz)


def _plural(value: int, unit: str) -> str:
    return f"{value} {unit}" + ("s" if value != 1 else "")


def classify_care_step(
    last_completed: Optional[datetime],
    frequency_days: int,
    now: Optional[datetime] = None,
    early_warning_days: int = 2,
    tz: Optional[tzinfo] = None,
) -> CareStatus:
    """
    Classify a care step for display and reminders.

    Rules:
    - never completed -> never_done (due now, not overdue, no countdown)
    - due date before today -> overdue
    - due date today -> due_today
    - due within ``early_warning_days`` -> due_soon
    - otherwise -> upcoming
    """
    now = resolve_now(now, tz)
    due = next_due_date(last_completed, frequency_days, now, tz)

    if last_completed is None:
        return CareStatus(
            urgency=NEVER_DONE,
            next_due_date=due,
            days_until_due=None,
            days_overdue=0,
            label="Not done yet",
        )

    remaining = calendar_days_between(now, due, tz)
    if remaining < 0:
        return CareStatus(
            urgency=OVERDUE,
            next_due_date=due,
            days_until_due=remaining,
            days_overdue=abs(remaining),
            label=f"Overdue by {_plural(abs(remaining), 'day')}",
        )
    if remaining == 0:
        urgency = DUE_TODAY
        label = "Due today"
    elif remaining <= early_warning_days:
        urgency = DUE_SOON
        label = "Due tomorrow" if remaining == 1 else f"Due in {_plural(remaining, 'day')}"
    else:
        urgency = UPCOMING
        label = f"Due in {_plural(remaining, 'day')}"

    return CareStatus(
        urgency=urgency,
        next_due_date=due,
        days_until_due=remaining,
        days_overdue=0,
        label=label,
    )
