from datetime import datetime

from pydantic import BaseModel, field_validator, model_validator

from session_booking.services.recency import as_utc


class SlotCreate(BaseModel):
    starts_at: datetime
    ends_at: datetime

    # stored as UTC; SQLite drops the offset
    @field_validator("starts_at", "ends_at")
    @classmethod
    def to_utc(cls, value: datetime) -> datetime:
        return as_utc(value)

    @model_validator(mode="after")
    def check_order(self):
        if self.ends_at <= self.starts_at:
            raise ValueError("ends_at must be after starts_at")
        return self


class SlotRead(BaseModel):
    id: int
    course_id: int
    student_id: int
    starts_at: datetime
    ends_at: datetime
    status: str

    class Config:
        from_attributes = True
