import pytest

from session_booking.services.warning_flags import WarningFlag, compute_warning


@pytest.mark.parametrize(
    "recency, wait, on_hold, expected",
    [
        (0, 0, 0, WarningFlag.NONE),
        (20, 10, 40, WarningFlag.OVERDUE),
        (34, 10, 40, WarningFlag.LATE),
        (16, 10, 40, WarningFlag.NONE),
    ],
)
def test_documented_cases(recency, wait, on_hold, expected):
    assert compute_warning(recency, wait, on_hold) is expected


@pytest.mark.parametrize(
    "recency, expected",
    [
        (17, WarningFlag.NONE),  # not past wait + 7
        (18, WarningFlag.OVERDUE),
        (32, WarningFlag.OVERDUE),
        (33, WarningFlag.LATE),  # on-hold - 7 reached
        (400, WarningFlag.LATE),
    ],
)
def test_band_boundaries(recency, expected):
    assert compute_warning(recency, 10, 40) is expected


@pytest.mark.parametrize("wait, on_hold", [(0, 40), (10, 0), (-1, 40), (10, -5)])
def test_disabled_when_either_threshold_unset(wait, on_hold):
    assert compute_warning(1000, wait, on_hold) is WarningFlag.NONE


def test_late_when_wait_band_overlaps_on_hold_band():
    # wait + 7 = 37 is beyond on-hold - 7 = 33, so OVERDUE can never match
    assert compute_warning(35, 30, 40) is WarningFlag.LATE
    assert compute_warning(38, 30, 40) is WarningFlag.LATE
    assert compute_warning(20, 30, 40) is WarningFlag.NONE
