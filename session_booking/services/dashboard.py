import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from session_booking.core.config import DASHBOARD_PAGE_SIZE
from session_booking.models.course import Course
from session_booking.models.enrollment import Enrollment
from session_booking.models.user import User
from session_booking.schemas.instructor_dashboard import (
    DashboardQueue,
    QueueFilter,
    QueueSort,
    StudentQueueRow,
)
from session_booking.services.lifecycle import next_allowed_session_date
from session_booking.services.metrics import SqlMetricsProvider
from session_booking.services.priority import (
    PriorityScore,
    StudentMetrics,
    WeightConfig,
    compute_score,
    load_weight_config,
)
from session_booking.services.recency import Recency, as_utc
from session_booking.services.warning_flags import WarningFlag, compute_warning

logger = logging.getLogger(__name__)

STATUS_BOOKED = "booked"
STATUS_POSTED = "posted"
STATUS_WAITING = "waiting"


@dataclass(frozen=True)
class _Entry:
    user: User
    enrollment: Enrollment
    metrics: StudentMetrics
    recency: Recency
    priority: PriorityScore
    status: str


def _students_query(db: Session, course_id: int, queue_filter: QueueFilter):
    q = (
        db.query(User, Enrollment)
        .join(Enrollment, Enrollment.student_id == User.id)
        .filter(Enrollment.course_id == course_id, User.role == "student")
    )
    if queue_filter == "active":
        q = q.filter(Enrollment.on_hold.is_(False), Enrollment.suspended.is_(False))
    elif queue_filter == "onhold":
        q = q.filter(Enrollment.on_hold.is_(True), Enrollment.suspended.is_(False))
    else:
        q = q.filter(Enrollment.suspended.is_(True))
    return q


def _sort_key(queue_filter: QueueFilter, sort: QueueSort):
    """
    Queue ordering:
    - suspended filter: earliest suspension first, then newest student id,
      whatever the requested sort
    - "s": highest score first, student id as stable tie-break
    - "a": students with open slots and no booking first, then booked
      students, then longest wait first, then student id
    """
    if queue_filter == "suspended":
        return lambda e: (
            e.enrollment.suspended_at is None,
            as_utc(e.enrollment.suspended_at) or datetime.min.replace(tzinfo=timezone.utc),
            -e.user.id,
        )

    if sort == "s":
        return lambda e: (-e.priority.score, e.user.id)

    rank = {STATUS_POSTED: 0, STATUS_BOOKED: 1, STATUS_WAITING: 2}
    return lambda e: (rank[e.status], -e.recency.days, e.user.id)


def _student_status(provider: SqlMetricsProvider, course_id: int, metrics: StudentMetrics) -> str:
    if provider.has_active_booking(course_id, metrics.student_id):
        return STATUS_BOOKED
    if metrics.slot_count > 0:
        return STATUS_POSTED
    return STATUS_WAITING


def build_queue(
    db: Session,
    course: Course,
    now: datetime,
    queue_filter: QueueFilter = "active",
    sort: QueueSort = "s",
    page: int = 0,
) -> DashboardQueue:
    """
    Rank a course's students for the instructor dashboard.

    Metrics are read fresh and scores are recomputed on every call; weights
    are loaded once and shared by every student in the request.
    """
    provider = SqlMetricsProvider(db, now)
    weights: WeightConfig = load_weight_config(provider)

    entries: list[_Entry] = []
    for user, enrollment in _students_query(db, course.id, queue_filter).all():
        metrics, recency = provider.get_student_metrics(course.id, user.id)
        entries.append(
            _Entry(
                user=user,
                enrollment=enrollment,
                metrics=metrics,
                recency=recency,
                priority=compute_score(metrics, weights),
                status=_student_status(provider, course.id, metrics),
            )
        )

    entries.sort(key=_sort_key(queue_filter, sort))

    offset = page * DASHBOARD_PAGE_SIZE
    page_entries = entries[offset : offset + DASHBOARD_PAGE_SIZE]
    flags_enabled = queue_filter in ("active", "onhold")

    rows: list[StudentQueueRow] = []
    total_days = 0
    for i, e in enumerate(page_entries, start=1):
        warning = WarningFlag.NONE
        if flags_enabled:
            warning = compute_warning(
                e.recency.days, course.posting_wait_days, course.on_hold_period_days
            )
            total_days += e.recency.days

        rows.append(
            StudentQueueRow(
                sequence=offset + i,
                student_id=e.user.id,
                student_name=e.user.full_name,
                student_email=e.user.email,
                score=e.priority.score,
                recency_days=e.recency.days,
                recency_source=e.recency.source,
                slot_count=e.metrics.slot_count,
                activity_count=e.metrics.activity_count_raw,
                activity_count_normalized=e.priority.activity_count_normalized,
                completions=e.priority.completions,
                warning=warning,
                status=e.status,
                keep_active=e.enrollment.keep_active,
                next_allowed_session_date=next_allowed_session_date(
                    e.recency.anchor,
                    course.posting_wait_days,
                    now,
                    waived=e.enrollment.keep_active,
                ),
            )
        )

    average_wait = math.ceil(total_days / len(rows)) if rows and total_days else 0

    logger.info(
        "course %s queue: filter=%s sort=%s page=%s -> %s of %s students",
        course.id,
        queue_filter,
        sort,
        page,
        len(rows),
        len(entries),
    )

    return DashboardQueue(
        course_id=course.id,
        course_title=course.title,
        filter=queue_filter,
        sort=sort,
        page=page,
        total_students=len(entries),
        average_wait_days=average_wait,
        restrictions_enabled=course.on_hold_period_days > 0,
        students=rows,
    )
