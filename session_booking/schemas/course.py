from pydantic import BaseModel, Field


class CourseCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str | None = None
    posting_wait_days: int = Field(default=0, ge=0)
    on_hold_period_days: int = Field(default=0, ge=0)
    suspension_period_days: int | None = Field(default=None, ge=0)


class CourseSettingsUpdate(BaseModel):
    posting_wait_days: int | None = Field(default=None, ge=0)
    on_hold_period_days: int | None = Field(default=None, ge=0)
    suspension_period_days: int | None = Field(default=None, ge=0)


class CourseRead(BaseModel):
    id: int
    title: str
    description: str | None = None
    instructor_id: int
    posting_wait_days: int
    on_hold_period_days: int
    suspension_period_days: int | None = None

    class Config:
        from_attributes = True
