import logging
import math
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Session

from session_booking.core.errors import ConfigurationError, MissingMetricsError
from session_booking.models.activity import ActivityLog
from session_booking.models.booking import Booking
from session_booking.models.enrollment import Enrollment
from session_booking.models.grade import Grade
from session_booking.models.lesson import LessonCompletion
from session_booking.models.setting import PluginSetting
from session_booking.models.slot import Slot
from session_booking.services.priority import StudentMetrics
from session_booking.services.recency import Recency, as_utc, resolve_recency

logger = logging.getLogger(__name__)


def parse_weight(name: str, raw: str | None) -> float | None:
    """Blank or missing means unset; anything else must be a finite number."""
    if raw is None or not raw.strip():
        return None
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(name, raw) from None
    if not math.isfinite(value):
        raise ConfigurationError(name, raw)
    return value


class SqlMetricsProvider:
    """Reads the raw priority metrics for one request from the database."""

    def __init__(self, db: Session, now: datetime):
        self.db = db
        self.now = as_utc(now)

    def get_enrollment(self, course_id: int, student_id: int) -> Enrollment:
        enrollment = (
            self.db.query(Enrollment)
            .filter(Enrollment.course_id == course_id, Enrollment.student_id == student_id)
            .first()
        )
        if enrollment is None:
            raise MissingMetricsError(course_id, student_id, "enrolment")
        return enrollment

    def get_instructor_last_booking(self, course_id: int, instructor_id: int) -> datetime | None:
        """When the instructor last made a booking in the course, if ever."""
        last = (
            self.db.query(func.max(Booking.created_at))
            .filter(Booking.course_id == course_id, Booking.instructor_id == instructor_id)
            .scalar()
        )
        return as_utc(last)

    def get_recency(self, course_id: int, student_id: int) -> Recency:
        recent_sessions = [
            row.session_at
            for row in (
                self.db.query(Booking.session_at)
                .filter(Booking.course_id == course_id, Booking.student_id == student_id)
                .order_by(Booking.session_at.desc(), Booking.id.desc())
                .limit(2)
                .all()
            )
        ]

        last_graded_at = (
            self.db.query(func.max(Grade.graded_at))
            .filter(Grade.course_id == course_id, Grade.student_id == student_id)
            .scalar()
        )

        enrolled_at = (
            self.db.query(Enrollment.created_at)
            .filter(Enrollment.course_id == course_id, Enrollment.student_id == student_id)
            .scalar()
        )

        recency = resolve_recency(recent_sessions, last_graded_at, enrolled_at, self.now)
        if recency is None:
            raise MissingMetricsError(course_id, student_id, "recency")
        return recency

    def get_session_recency(self, course_id: int, student_id: int):
        recency = self.get_recency(course_id, student_id)
        return recency.days, recency.source

    def get_slot_count(self, course_id: int, student_id: int) -> int:
        return (
            self.db.query(func.count(Slot.id))
            .filter(
                Slot.course_id == course_id,
                Slot.student_id == student_id,
                Slot.status == "",
                Slot.starts_at > self.now,
            )
            .scalar()
        ) or 0

    def get_activity_count(self, course_id: int, student_id: int) -> int:
        return (
            self.db.query(func.count(ActivityLog.id))
            .filter(ActivityLog.course_id == course_id, ActivityLog.user_id == student_id)
            .scalar()
        ) or 0

    def get_lesson_completions(self, course_id: int, student_id: int) -> int:
        return (
            self.db.query(func.count(func.distinct(LessonCompletion.lesson_id)))
            .filter(
                LessonCompletion.course_id == course_id,
                LessonCompletion.student_id == student_id,
                LessonCompletion.completed.is_(True),
            )
            .scalar()
        ) or 0

    def has_active_booking(self, course_id: int, student_id: int) -> bool:
        return (
            self.db.query(Booking.id)
            .filter(
                Booking.course_id == course_id,
                Booking.student_id == student_id,
                Booking.active.is_(True),
            )
            .first()
            is not None
        )

    def get_config_weight(self, name: str) -> float | None:
        setting = self.db.get(PluginSetting, name)
        return parse_weight(name, setting.value if setting else None)

    def get_student_metrics(self, course_id: int, student_id: int) -> tuple[StudentMetrics, Recency]:
        self.get_enrollment(course_id, student_id)
        recency = self.get_recency(course_id, student_id)

        metrics = StudentMetrics(
            student_id=student_id,
            recency_days=recency.days,
            slot_count=self.get_slot_count(course_id, student_id),
            activity_count_raw=self.get_activity_count(course_id, student_id),
            lesson_completions=self.get_lesson_completions(course_id, student_id),
        )
        return metrics, recency
