from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from session_booking.core.deps import get_db
from session_booking.core.permissions import require_instructor
from session_booking.models.booking import Booking
from session_booking.models.course import Course
from session_booking.models.enrollment import Enrollment
from session_booking.models.grade import Grade
from session_booking.models.user import User
from session_booking.schemas.grade import GradeCreate, GradeRead

router = APIRouter()


@router.post(
    "/courses/{course_id}/grades",
    response_model=GradeRead,
    status_code=status.HTTP_201_CREATED,
)
def grade_session(
    course_id: int,
    payload: GradeCreate,
    db: Session = Depends(get_db),
    instructor: User = Depends(require_instructor),
):
    course = db.query(Course).filter(Course.id == course_id).first()
    if not course:
        raise HTTPException(status_code=404, detail="Course not found")
    if course.instructor_id != instructor.id:
        raise HTTPException(status_code=403, detail="Not course instructor")

    enrollment = (
        db.query(Enrollment)
        .filter(Enrollment.course_id == course_id, Enrollment.student_id == payload.student_id)
        .first()
    )
    if enrollment is None:
        raise HTTPException(status_code=404, detail="Student not enrolled in this course")

    grade = Grade(
        course_id=course_id,
        student_id=payload.student_id,
        instructor_id=instructor.id,
        exercise=payload.exercise,
        score=payload.score,
        feedback=payload.feedback,
        graded_at=payload.graded_at or datetime.now(timezone.utc),
    )
    db.add(grade)

    # a graded session closes the student's active booking
    db.query(Booking).filter(
        Booking.course_id == course_id,
        Booking.student_id == payload.student_id,
        Booking.active.is_(True),
    ).update({Booking.active: False}, synchronize_session=False)

    # keep-active lasts until the next graded session
    enrollment.keep_active = False

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(grade)
    return grade
