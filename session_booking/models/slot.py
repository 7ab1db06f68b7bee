from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from session_booking.db.base_class import Base


class Slot(Base):
    """A block of time a student marked as available for training."""

    __tablename__ = "slots"

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    starts_at = Column(DateTime(timezone=True), nullable=False)
    ends_at = Column(DateTime(timezone=True), nullable=False)

    # "" open, "tentative" offered by an instructor, "booked" confirmed
    status = Column(String(20), nullable=False, default="")

    student = relationship("User")
