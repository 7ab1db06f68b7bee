import pytest

from session_booking.core.config import (
    DEFAULT_ACTIVITY_WEIGHT,
    DEFAULT_COMPLETION_WEIGHT,
    DEFAULT_RECENCY_WEIGHT,
    DEFAULT_SLOT_WEIGHT,
)
from session_booking.services.priority import (
    StudentMetrics,
    WeightConfig,
    compute_score,
    load_weight_config,
    normalize_activity_count,
)


def metrics(recency=0, slots=0, activity=0, completions=0):
    return StudentMetrics(
        student_id=1,
        recency_days=recency,
        slot_count=slots,
        activity_count_raw=activity,
        lesson_completions=completions,
    )


def test_dashboard_scenario_scores_41_5():
    weights = WeightConfig(
        recency_weight=1.0, slot_weight=2.0, activity_weight=3.0, completion_weight=0.5
    )
    result = compute_score(metrics(recency=20, slots=5, activity=37, completions=2), weights)

    assert result.activity_count_normalized == 3
    assert result.score == pytest.approx(41.5)
    assert result.recency_days == 20
    assert result.slot_count == 5
    assert result.completions == 2


@pytest.mark.parametrize(
    "raw, expected",
    [(0, 0), (9, 0), (10, 1), (19, 1), (20, 2), (37, 3)],
)
def test_activity_count_is_floored_per_ten(raw, expected):
    assert normalize_activity_count(raw) == expected


def test_score_is_deterministic():
    m = metrics(recency=12, slots=3, activity=55, completions=4)
    w = WeightConfig(recency_weight=1.5, slot_weight=-2.0, activity_weight=0.25, completion_weight=3.0)
    assert compute_score(m, w) == compute_score(m, w)


def test_completion_weight_is_added_not_multiplied():
    w = WeightConfig(recency_weight=0.0, slot_weight=0.0, activity_weight=0.0, completion_weight=5.0)
    assert compute_score(metrics(completions=3), w).score == pytest.approx(8.0)
    # still contributes with zero completions
    assert compute_score(metrics(), w).score == pytest.approx(5.0)


def test_zero_and_negative_weights_propagate():
    w = WeightConfig(recency_weight=-1.0, slot_weight=0.0, activity_weight=-2.0, completion_weight=0.0)
    result = compute_score(metrics(recency=10, slots=7, activity=25, completions=1), w)
    # -10 + 0 + (2 * -2) + (1 + 0)
    assert result.score == pytest.approx(-13.0)


def test_default_weights():
    w = WeightConfig()
    assert (w.recency_weight, w.slot_weight, w.activity_weight, w.completion_weight) == (
        DEFAULT_RECENCY_WEIGHT,
        DEFAULT_SLOT_WEIGHT,
        DEFAULT_ACTIVITY_WEIGHT,
        DEFAULT_COMPLETION_WEIGHT,
    )


class FakeProvider:
    def __init__(self, values):
        self.values = values
        self.calls = []

    def get_config_weight(self, name):
        self.calls.append(name)
        return self.values.get(name)


def test_load_weight_config_falls_back_per_weight():
    provider = FakeProvider({"slotcountweight": 2.5, "completionweight": 0.0})

    weights = load_weight_config(provider)

    assert weights.recency_weight == DEFAULT_RECENCY_WEIGHT
    assert weights.slot_weight == 2.5
    assert weights.activity_weight == DEFAULT_ACTIVITY_WEIGHT
    # an explicit zero is a value, not "unset"
    assert weights.completion_weight == 0.0
    assert sorted(provider.calls) == [
        "activitycountweight",
        "completionweight",
        "recencydaysweight",
        "slotcountweight",
    ]
