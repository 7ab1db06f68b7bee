import os
from datetime import timedelta
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent.parent

DATABASE_URL = os.getenv(
    "SESSION_BOOKING_DATABASE_URL", f"sqlite:///{BASE_DIR}/session_booking.db"
)

# DEV ONLY: hardcoded secret. Later we will load from env vars.
SECRET_KEY = "change-me-in-production"
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE = timedelta(minutes=60)

# Priority weights used when the plugin setting is unset
DEFAULT_RECENCY_WEIGHT = 10.0
DEFAULT_SLOT_WEIGHT = 10.0
DEFAULT_ACTIVITY_WEIGHT = 1.0
DEFAULT_COMPLETION_WEIGHT = 10.0

# plugin_settings names for the weights
RECENCY_WEIGHT_SETTING = "recencydaysweight"
SLOT_WEIGHT_SETTING = "slotcountweight"
ACTIVITY_WEIGHT_SETTING = "activitycountweight"
COMPLETION_WEIGHT_SETTING = "completionweight"

ACTIVITY_NORMALIZER = 10  # log events per activity point
WARNING_BAND_DAYS = 7  # amber a week after the wait, red a week before on-hold

# Suspension follows on-hold after posting wait x multiplier (unless set per course)
SUSPEND_WAIT_MULTIPLIER = 9

# Instructors are reminded every posting wait x multiplier days without a booking
INSTRUCTOR_INACTIVE_MULTIPLIER = 3

DASHBOARD_PAGE_SIZE = 20
