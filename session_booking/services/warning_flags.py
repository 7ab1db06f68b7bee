import enum

from session_booking.core.config import WARNING_BAND_DAYS


class WarningFlag(str, enum.Enum):
    NONE = "none"
    OVERDUE = "overdue"  # amber
    LATE = "late"  # red


def compute_warning(
    recency_days: int,
    posting_wait_days: int,
    on_hold_period_days: int,
) -> WarningFlag:
    """
    Badge for a student's wait since the last session.

    Amber a week after the posting wait has passed, red from a week before
    the on-hold date. Rules are checked in order and the first match wins,
    so OVERDUE is tested before LATE.
    """
    if posting_wait_days <= 0 or on_hold_period_days <= 0:
        return WarningFlag.NONE

    rules = (
        (
            lambda: posting_wait_days + WARNING_BAND_DAYS
            < recency_days
            < on_hold_period_days - WARNING_BAND_DAYS,
            WarningFlag.OVERDUE,
        ),
        (
            lambda: recency_days >= on_hold_period_days - WARNING_BAND_DAYS,
            WarningFlag.LATE,
        ),
    )
    for matches, flag in rules:
        if matches():
            return flag
    return WarningFlag.NONE
