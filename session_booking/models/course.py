from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from session_booking.db.base_class import Base


class Course(Base):
    __tablename__ = "courses"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    instructor_id: Mapped[int] = mapped_column(nullable=False, index=True)

    # 0 disables the posting wait restriction and the warning badges
    posting_wait_days: Mapped[int] = mapped_column(nullable=False, default=0)
    on_hold_period_days: Mapped[int] = mapped_column(nullable=False, default=0)
    # None: posting wait x SUSPEND_WAIT_MULTIPLIER
    suspension_period_days: Mapped[int | None] = mapped_column(nullable=True)

    enrollments = relationship(
        "Enrollment", back_populates="course", cascade="all, delete-orphan"
    )
