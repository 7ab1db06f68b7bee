from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from session_booking.core.deps import get_db
from session_booking.core.permissions import require_student
from session_booking.models.course import Course
from session_booking.models.enrollment import Enrollment
from session_booking.models.slot import Slot
from session_booking.models.user import User
from session_booking.schemas.slot import SlotCreate, SlotRead
from session_booking.services.lifecycle import next_allowed_session_date
from session_booking.services.metrics import SqlMetricsProvider

router = APIRouter()


def _ensure_course_exists(db: Session, course_id: int) -> Course:
    course = db.query(Course).filter(Course.id == course_id).first()
    if not course:
        raise HTTPException(status_code=404, detail="Course not found")
    return course


def _ensure_active_enrollment(db: Session, course_id: int, student_id: int) -> Enrollment:
    enrollment = (
        db.query(Enrollment)
        .filter(Enrollment.course_id == course_id, Enrollment.student_id == student_id)
        .first()
    )
    if enrollment is None:
        raise HTTPException(status_code=403, detail="Not enrolled in this course")
    if enrollment.suspended:
        raise HTTPException(status_code=403, detail="Enrolment suspended")
    return enrollment


@router.post(
    "/courses/{course_id}/slots",
    response_model=SlotRead,
    status_code=status.HTTP_201_CREATED,
)
def post_slot(
    course_id: int,
    payload: SlotCreate,
    db: Session = Depends(get_db),
    me: User = Depends(require_student),
):
    course = _ensure_course_exists(db, course_id)
    enrollment = _ensure_active_enrollment(db, course_id, me.id)

    now = datetime.now(timezone.utc)
    if payload.starts_at <= now:
        raise HTTPException(status_code=400, detail="Slot must start in the future")

    # posting wait restriction since the last session
    recency = SqlMetricsProvider(db, now).get_recency(course_id, me.id)
    allowed = next_allowed_session_date(
        recency.anchor, course.posting_wait_days, now, waived=enrollment.keep_active
    )
    if payload.starts_at < allowed:
        raise HTTPException(
            status_code=400,
            detail=f"Availability can be posted from {allowed.date().isoformat()}",
        )

    slot = Slot(
        course_id=course_id,
        student_id=me.id,
        starts_at=payload.starts_at,
        ends_at=payload.ends_at,
        status="",
    )
    db.add(slot)
    db.commit()
    db.refresh(slot)
    return slot


@router.get("/courses/{course_id}/slots/me", response_model=list[SlotRead])
def my_slots(
    course_id: int,
    db: Session = Depends(get_db),
    me: User = Depends(require_student),
):
    _ensure_course_exists(db, course_id)
    return (
        db.query(Slot)
        .filter(Slot.course_id == course_id, Slot.student_id == me.id)
        .order_by(Slot.starts_at.asc(), Slot.id.asc())
        .all()
    )


@router.delete("/courses/{course_id}/slots/{slot_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_slot(
    course_id: int,
    slot_id: int,
    db: Session = Depends(get_db),
    me: User = Depends(require_student),
):
    slot = (
        db.query(Slot)
        .filter(Slot.id == slot_id, Slot.course_id == course_id, Slot.student_id == me.id)
        .first()
    )
    if not slot:
        raise HTTPException(status_code=404, detail="Slot not found")
    if slot.status:
        raise HTTPException(status_code=409, detail="Slot is part of a booking")

    db.delete(slot)
    db.commit()
