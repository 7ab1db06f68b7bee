import enum
from dataclasses import dataclass
from datetime import datetime, timezone


class RecencySource(str, enum.Enum):
    BOOKING = "booking"
    GRADE = "grade"
    ENROL = "enrol"


@dataclass(frozen=True)
class Recency:
    days: int
    source: RecencySource
    anchor: datetime


def as_utc(value: datetime | None) -> datetime | None:
    # SQLite often returns naive datetimes; treat as UTC
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def days_between(earlier: datetime, later: datetime) -> int:
    """Whole days from earlier to later, truncated and never negative."""
    return max(0, (as_utc(later) - as_utc(earlier)).days)


def resolve_recency(
    bookings: list[datetime],
    last_graded_at: datetime | None,
    enrolled_at: datetime | None,
    now: datetime,
) -> Recency | None:
    """
    Pick the date a student's wait is measured from.

    ``bookings`` holds the student's most recent booked sessions, newest
    first (only the first two are looked at). The rules run in order and
    the first one that yields a date wins:

    1. newest booking is still upcoming and the one before it is past:
       use the past one, an upcoming session hasn't happened yet
    2. newest booking is past: use it
    3. last graded session
    4. enrolment date

    Returns None when none of them applies.
    """
    now = as_utc(now)
    last = as_utc(bookings[0]) if bookings else None
    previous = as_utc(bookings[1]) if len(bookings) > 1 else None

    rules = (
        (
            lambda: previous
            if last is not None and last > now and previous is not None and previous <= now
            else None,
            RecencySource.BOOKING,
        ),
        (
            lambda: last if last is not None and last <= now else None,
            RecencySource.BOOKING,
        ),
        (lambda: as_utc(last_graded_at), RecencySource.GRADE),
        (lambda: as_utc(enrolled_at), RecencySource.ENROL),
    )
    for pick, source in rules:
        anchor = pick()
        if anchor is not None:
            return Recency(days=days_between(anchor, now), source=source, anchor=anchor)
    return None
