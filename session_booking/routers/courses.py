from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from session_booking.core.current_user import get_current_user
from session_booking.core.deps import get_db
from session_booking.core.permissions import require_instructor
from session_booking.models.course import Course
from session_booking.models.user import User
from session_booking.schemas.course import CourseCreate, CourseRead, CourseSettingsUpdate

router = APIRouter()


@router.get("/", response_model=list[CourseRead])
def list_courses(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return db.query(Course).order_by(Course.id.asc()).all()


@router.post("/", response_model=CourseRead, status_code=status.HTTP_201_CREATED)
def create_course(
    payload: CourseCreate,
    db: Session = Depends(get_db),
    instructor: User = Depends(require_instructor),
):
    course = Course(instructor_id=instructor.id, **payload.model_dump())
    db.add(course)
    db.commit()
    db.refresh(course)
    return course


@router.patch("/{course_id}/settings", response_model=CourseRead)
def update_course_settings(
    course_id: int,
    payload: CourseSettingsUpdate,
    db: Session = Depends(get_db),
    instructor: User = Depends(require_instructor),
):
    course = db.query(Course).filter(Course.id == course_id).first()
    if not course:
        raise HTTPException(status_code=404, detail="Course not found")
    if course.instructor_id != instructor.id:
        raise HTTPException(status_code=403, detail="Not course instructor")

    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is None and field != "suspension_period_days":
            continue
        setattr(course, field, value)

    db.commit()
    db.refresh(course)
    return course
