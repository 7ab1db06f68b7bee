from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from session_booking.services.recency import RecencySource
from session_booking.services.warning_flags import WarningFlag

QueueFilter = Literal["active", "onhold", "suspended"]
QueueSort = Literal["s", "a"]  # score | availability


class StudentQueueRow(BaseModel):
    sequence: int
    student_id: int
    student_name: str | None = None
    student_email: str

    score: float
    recency_days: int
    recency_source: RecencySource
    slot_count: int
    activity_count: int
    activity_count_normalized: int
    completions: int

    warning: WarningFlag = WarningFlag.NONE
    status: str  # "booked" | "posted" | "waiting"
    keep_active: bool = False
    next_allowed_session_date: datetime


class DashboardQueue(BaseModel):
    course_id: int
    course_title: str
    filter: QueueFilter
    sort: QueueSort
    page: int
    total_students: int
    average_wait_days: int
    restrictions_enabled: bool
    students: list[StudentQueueRow]
