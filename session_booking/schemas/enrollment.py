from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class EnrollmentCreate(BaseModel):
    course_id: int


class EnrollmentOut(BaseModel):
    id: int
    student_id: int
    course_id: int
    created_at: datetime
    on_hold: bool
    suspended: bool
    suspended_at: Optional[datetime] = None
    keep_active: bool

    class Config:
        from_attributes = True


class EnrollmentStatusUpdate(BaseModel):
    """Fields left out are not changed."""

    on_hold: Optional[bool] = None
    suspended: Optional[bool] = None
    keep_active: Optional[bool] = None
