from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from session_booking.core.current_user import get_current_user
from session_booking.core.deps import get_db
from session_booking.core.permissions import require_instructor, require_student
from session_booking.models.booking import Booking
from session_booking.models.course import Course
from session_booking.models.enrollment import Enrollment
from session_booking.models.slot import Slot
from session_booking.models.user import User
from session_booking.schemas.booking import BookingCreate, BookingRead

router = APIRouter()


def _ensure_course_instructor(db: Session, course_id: int, instructor: User) -> Course:
    course = db.query(Course).filter(Course.id == course_id).first()
    if not course:
        raise HTTPException(status_code=404, detail="Course not found")
    if course.instructor_id != instructor.id:
        raise HTTPException(status_code=403, detail="Not course instructor")
    return course


def _get_booking(db: Session, booking_id: int) -> Booking:
    booking = db.query(Booking).filter(Booking.id == booking_id).first()
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")
    return booking


@router.post(
    "/courses/{course_id}/bookings",
    response_model=BookingRead,
    status_code=status.HTTP_201_CREATED,
)
def book_session(
    course_id: int,
    payload: BookingCreate,
    db: Session = Depends(get_db),
    instructor: User = Depends(require_instructor),
):
    _ensure_course_instructor(db, course_id, instructor)

    enrolled = (
        db.query(Enrollment)
        .filter(
            Enrollment.course_id == course_id,
            Enrollment.student_id == payload.student_id,
            Enrollment.suspended.is_(False),
        )
        .first()
    )
    if enrolled is None:
        raise HTTPException(status_code=404, detail="Student not enrolled in this course")

    # one active booking per student
    active = (
        db.query(Booking)
        .filter(
            Booking.course_id == course_id,
            Booking.student_id == payload.student_id,
            Booking.active.is_(True),
        )
        .first()
    )
    if active is not None:
        raise HTTPException(status_code=409, detail="Student already has an active booking")

    slot = None
    if payload.slot_id is not None:
        slot = (
            db.query(Slot)
            .filter(
                Slot.id == payload.slot_id,
                Slot.course_id == course_id,
                Slot.student_id == payload.student_id,
            )
            .first()
        )
        if slot is None:
            raise HTTPException(status_code=404, detail="Slot not found")
        if slot.status:
            raise HTTPException(status_code=409, detail="Slot already booked")
        slot.status = "tentative"

    booking = Booking(
        course_id=course_id,
        student_id=payload.student_id,
        instructor_id=instructor.id,
        slot_id=payload.slot_id,
        session_at=payload.session_at,
        active=True,
        confirmed=False,
    )
    db.add(booking)

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(booking)
    return booking


@router.post("/bookings/{booking_id}/confirm", response_model=BookingRead)
def confirm_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    me: User = Depends(require_student),
):
    booking = _get_booking(db, booking_id)
    if booking.student_id != me.id:
        raise HTTPException(status_code=403, detail="Not your booking")
    if not booking.active:
        raise HTTPException(status_code=409, detail="Booking is no longer active")

    booking.confirmed = True
    if booking.slot_id is not None:
        slot = db.get(Slot, booking.slot_id)
        if slot is not None:
            slot.status = "booked"

    db.commit()
    db.refresh(booking)
    return booking


@router.post("/bookings/{booking_id}/cancel", status_code=status.HTTP_204_NO_CONTENT)
def cancel_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    me: User = Depends(get_current_user),
):
    booking = _get_booking(db, booking_id)
    if me.id not in (booking.student_id, booking.instructor_id):
        raise HTTPException(status_code=403, detail="Not your booking")
    if not booking.active:
        raise HTTPException(status_code=409, detail="Booking is no longer active")

    # the slot goes back to open availability
    if booking.slot_id is not None:
        slot = db.get(Slot, booking.slot_id)
        if slot is not None:
            slot.status = ""

    db.delete(booking)
    db.commit()
