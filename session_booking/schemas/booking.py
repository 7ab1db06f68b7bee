from datetime import datetime

from pydantic import BaseModel, field_validator

from session_booking.services.recency import as_utc


class BookingCreate(BaseModel):
    student_id: int
    session_at: datetime
    slot_id: int | None = None

    @field_validator("session_at")
    @classmethod
    def to_utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class BookingRead(BaseModel):
    id: int
    course_id: int
    student_id: int
    instructor_id: int
    slot_id: int | None = None
    session_at: datetime
    active: bool
    confirmed: bool

    class Config:
        from_attributes = True
