from datetime import datetime

from pydantic import BaseModel, Field


class ActivityCreate(BaseModel):
    event: str = Field(min_length=1, max_length=255)


class ActivityRead(BaseModel):
    id: int
    course_id: int
    user_id: int
    event: str
    created_at: datetime

    class Config:
        from_attributes = True


class LessonCompletionRead(BaseModel):
    id: int
    course_id: int
    student_id: int
    lesson_id: int
    completed: bool
    completed_at: datetime

    class Config:
        from_attributes = True
