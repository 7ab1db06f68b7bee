from session_booking.db.base_class import Base  # noqa: F401

# import models so Base.metadata sees every table
from session_booking.models import (  # noqa: F401
    activity,
    booking,
    course,
    enrollment,
    grade,
    lesson,
    setting,
    slot,
    user,
)
