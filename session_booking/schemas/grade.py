from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from session_booking.services.recency import as_utc


class GradeCreate(BaseModel):
    student_id: int
    exercise: str = Field(min_length=1, max_length=255)
    score: Optional[float] = None
    feedback: Optional[str] = None
    graded_at: Optional[datetime] = None

    @field_validator("graded_at")
    @classmethod
    def to_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)


class GradeRead(BaseModel):
    id: int
    course_id: int
    student_id: int
    instructor_id: int
    exercise: str
    score: Optional[float] = None
    feedback: Optional[str] = None
    graded_at: datetime

    class Config:
        from_attributes = True
