from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from session_booking.core.current_user import get_current_user
from session_booking.core.deps import get_db
from session_booking.core.permissions import require_student
from session_booking.models.activity import ActivityLog
from session_booking.models.enrollment import Enrollment
from session_booking.models.lesson import LessonCompletion
from session_booking.models.user import User
from session_booking.schemas.activity import ActivityCreate, ActivityRead, LessonCompletionRead

router = APIRouter()


def _ensure_student_enrolled(db: Session, course_id: int, student_id: int) -> None:
    enrolled = (
        db.query(Enrollment)
        .filter(Enrollment.course_id == course_id, Enrollment.student_id == student_id)
        .first()
        is not None
    )
    if not enrolled:
        raise HTTPException(status_code=403, detail="Not enrolled in this course")


@router.post(
    "/courses/{course_id}/activity",
    response_model=ActivityRead,
    status_code=status.HTTP_201_CREATED,
)
def log_activity(
    course_id: int,
    payload: ActivityCreate,
    db: Session = Depends(get_db),
    me: User = Depends(get_current_user),
):
    _ensure_student_enrolled(db, course_id, me.id)

    entry = ActivityLog(course_id=course_id, user_id=me.id, event=payload.event)
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry


@router.post(
    "/courses/{course_id}/lessons/{lesson_id}/complete",
    response_model=LessonCompletionRead,
)
def complete_lesson(
    course_id: int,
    lesson_id: int,
    db: Session = Depends(get_db),
    me: User = Depends(require_student),
):
    _ensure_student_enrolled(db, course_id, me.id)

    completion = LessonCompletion(course_id=course_id, student_id=me.id, lesson_id=lesson_id)
    db.add(completion)

    try:
        db.commit()
    except IntegrityError:
        # completing the same lesson twice keeps the first record
        db.rollback()
        completion = (
            db.query(LessonCompletion)
            .filter(
                LessonCompletion.course_id == course_id,
                LessonCompletion.student_id == me.id,
                LessonCompletion.lesson_id == lesson_id,
            )
            .first()
        )
        if completion is None:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Lesson completion conflict")
        return completion

    db.refresh(completion)
    return completion
