from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from session_booking.core.deps import get_db
from session_booking.core.permissions import require_instructor
from session_booking.models.course import Course
from session_booking.models.enrollment import Enrollment
from session_booking.models.user import User
from session_booking.schemas.enrollment import EnrollmentOut, EnrollmentStatusUpdate
from session_booking.schemas.instructor_dashboard import DashboardQueue, QueueFilter, QueueSort
from session_booking.services.dashboard import build_queue
from session_booking.services.lifecycle import update_enrollment_status

router = APIRouter(tags=["instructor"])


def _ensure_course_instructor(db: Session, course_id: int, instructor: User) -> Course:
    course = db.query(Course).filter(Course.id == course_id).first()
    if not course:
        raise HTTPException(status_code=404, detail="Course not found")
    if course.instructor_id != instructor.id:
        raise HTTPException(status_code=403, detail="Not course instructor")
    return course


@router.get("/instructor/courses/{course_id}/queue", response_model=DashboardQueue)
def instructor_queue(
    course_id: int,
    filter: QueueFilter = Query("active"),
    sort: QueueSort = Query("s"),
    page: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    me: User = Depends(require_instructor),
):
    course = _ensure_course_instructor(db, course_id, me)

    return build_queue(
        db,
        course,
        now=datetime.now(timezone.utc),
        queue_filter=filter,
        sort=sort,
        page=page,
    )


@router.patch(
    "/instructor/courses/{course_id}/students/{student_id}/status",
    response_model=EnrollmentOut,
)
def set_student_status(
    course_id: int,
    student_id: int,
    payload: EnrollmentStatusUpdate,
    db: Session = Depends(get_db),
    me: User = Depends(require_instructor),
):
    """Place on hold, suspend, keep active, or release a student."""
    _ensure_course_instructor(db, course_id, me)

    enrollment = (
        db.query(Enrollment)
        .filter(Enrollment.course_id == course_id, Enrollment.student_id == student_id)
        .first()
    )
    if enrollment is None:
        raise HTTPException(status_code=404, detail="Student not enrolled in this course")

    update_enrollment_status(
        enrollment,
        datetime.now(timezone.utc),
        **payload.model_dump(exclude_none=True),
    )
    db.commit()
    db.refresh(enrollment)
    return enrollment
