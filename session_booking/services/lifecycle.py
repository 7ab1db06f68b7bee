"""
Posting wait restriction and the on-hold / suspension lifecycle.

Schedule for an inactive student, measured from the recency anchor:
- on-hold warning: a week before the on-hold date
- on-hold: anchor + course on-hold period
- suspension: on-hold date + suspension period

A daily run applies whatever falls on today's calendar day, skipping
students marked keep-active. The same run reminds the course instructor
every posting wait x INSTRUCTOR_INACTIVE_MULTIPLIER days without a booking.
"""

import enum
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy.orm import Session

from session_booking.core.config import (
    INSTRUCTOR_INACTIVE_MULTIPLIER,
    SUSPEND_WAIT_MULTIPLIER,
    WARNING_BAND_DAYS,
)
from session_booking.models.course import Course
from session_booking.models.enrollment import Enrollment
from session_booking.models.user import User
from session_booking.services.metrics import SqlMetricsProvider
from session_booking.services.notifications import Notifier
from session_booking.services.recency import as_utc, days_between

logger = logging.getLogger(__name__)


class LifecycleAction(str, enum.Enum):
    WARN_ON_HOLD = "onhold_warning"
    PLACE_ON_HOLD = "onhold"
    SUSPEND = "suspension"
    INSTRUCTOR_OVERDUE = "session_overdue"


@dataclass(frozen=True)
class HoldSchedule:
    warning_at: datetime
    on_hold_at: datetime
    suspend_at: datetime


def start_of_day(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def next_allowed_session_date(
    anchor: datetime,
    posting_wait_days: int,
    now: datetime,
    waived: bool = False,
) -> datetime:
    """First day a student may post availability again."""
    now = as_utc(now)
    allowed = now
    if posting_wait_days > 0 and not waived:
        allowed = max(as_utc(anchor) + timedelta(days=posting_wait_days), now)
    return start_of_day(allowed)


def suspension_period(course: Course) -> int:
    if course.suspension_period_days is not None:
        return course.suspension_period_days
    return course.posting_wait_days * SUSPEND_WAIT_MULTIPLIER


def compute_hold_schedule(
    anchor: datetime,
    on_hold_period_days: int,
    suspension_period_days: int,
) -> HoldSchedule:
    on_hold_at = as_utc(anchor) + timedelta(days=on_hold_period_days)
    return HoldSchedule(
        warning_at=on_hold_at - timedelta(days=WARNING_BAND_DAYS),
        on_hold_at=on_hold_at,
        suspend_at=on_hold_at + timedelta(days=suspension_period_days),
    )


def due_actions(schedule: HoldSchedule, today: datetime) -> list[LifecycleAction]:
    today = as_utc(today).date()
    return [
        action
        for action, when in (
            (LifecycleAction.WARN_ON_HOLD, schedule.warning_at),
            (LifecycleAction.PLACE_ON_HOLD, schedule.on_hold_at),
            (LifecycleAction.SUSPEND, schedule.suspend_at),
        )
        if when.date() == today
    ]


def instructor_overdue(last_booking_at: datetime | None, posting_wait_days: int, now: datetime) -> bool:
    """
    True on each multiple of the inactivity interval since the instructor's
    last booking. An instructor who never booked is reminded on every run.
    """
    if posting_wait_days <= 0:
        return False
    if last_booking_at is None:
        return True
    interval = posting_wait_days * INSTRUCTOR_INACTIVE_MULTIPLIER
    days = days_between(last_booking_at, now)
    return days >= interval and days % interval == 0


def set_suspended(enrollment: Enrollment, suspended: bool, now: datetime) -> None:
    enrollment.suspended = suspended
    enrollment.suspended_at = as_utc(now) if suspended else None


def update_enrollment_status(
    enrollment: Enrollment,
    now: datetime,
    on_hold: bool | None = None,
    suspended: bool | None = None,
    keep_active: bool | None = None,
) -> None:
    """Instructor override of the lifecycle flags; None leaves a flag as is."""
    if on_hold is not None:
        enrollment.on_hold = on_hold
    if suspended is not None and suspended != enrollment.suspended:
        set_suspended(enrollment, suspended, now)
    if keep_active is not None:
        enrollment.keep_active = keep_active


def _student_actions(
    db: Session,
    course: Course,
    provider: SqlMetricsProvider,
    now: datetime,
) -> list[tuple[int, LifecycleAction, dict[str, Any]]]:
    suspend_days = suspension_period(course)

    enrollments = (
        db.query(Enrollment)
        .join(User, User.id == Enrollment.student_id)
        .filter(
            Enrollment.course_id == course.id,
            Enrollment.suspended.is_(False),
            Enrollment.keep_active.is_(False),
            User.role == "student",
        )
        .order_by(Enrollment.student_id.asc())
        .all()
    )

    actions = []
    for enrollment in enrollments:
        recency = provider.get_recency(course.id, enrollment.student_id)
        schedule = compute_hold_schedule(recency.anchor, course.on_hold_period_days, suspend_days)

        for action in due_actions(schedule, now):
            if action is LifecycleAction.PLACE_ON_HOLD:
                enrollment.on_hold = True
            elif action is LifecycleAction.SUSPEND:
                set_suspended(enrollment, True, now)

            actions.append(
                (
                    enrollment.student_id,
                    action,
                    {
                        "course_id": course.id,
                        "course_title": course.title,
                        "last_session_date": recency.anchor.date().isoformat(),
                        "onhold_date": schedule.on_hold_at.date().isoformat(),
                        "suspend_date": schedule.suspend_at.date().isoformat(),
                    },
                )
            )
    return actions


def run_lifecycle(
    db: Session,
    course: Course,
    notifier: Notifier,
    now: datetime,
) -> list[tuple[int, LifecycleAction]]:
    """
    Apply today's on-hold warnings, on-hold placements and suspensions, then
    check the instructor for booking inactivity.

    Messages go out only after the changes are committed. Returns the
    (user_id, action) pairs applied, in processing order.
    """
    provider = SqlMetricsProvider(db, now)

    outbox: list[tuple[int, LifecycleAction, dict[str, Any]]] = []
    if course.on_hold_period_days > 0:
        outbox.extend(_student_actions(db, course, provider, now))
    else:
        logger.info("course %s: on-hold restrictions disabled", course.id)

    last_booking_at = provider.get_instructor_last_booking(course.id, course.instructor_id)
    if instructor_overdue(last_booking_at, course.posting_wait_days, now):
        outbox.append(
            (
                course.instructor_id,
                LifecycleAction.INSTRUCTOR_OVERDUE,
                {
                    "course_id": course.id,
                    "course_title": course.title,
                    "last_booking_date": last_booking_at.date().isoformat()
                    if last_booking_at
                    else None,
                },
            )
        )

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    for user_id, action, data in outbox:
        notifier.send(action.value, user_id, data)
        logger.info("course %s: %s for user %s", course.id, action.value, user_id)

    return [(user_id, action) for user_id, action, _ in outbox]
