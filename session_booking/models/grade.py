from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text, func

from session_booking.db.base_class import Base


class Grade(Base):
    __tablename__ = "grades"

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    instructor_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    exercise = Column(String(255), nullable=False)
    score = Column(Float, nullable=True)
    feedback = Column(Text, nullable=True)

    graded_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
