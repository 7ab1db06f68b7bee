"""
Student priority scoring for the instructor dashboard queue.

The score is a weighted sum of four metrics:
- recency days: whole days since the student's last training event
- slot count: open availability slots the student has posted
- activity count: course log events, normalized to one point per ACTIVITY_NORMALIZER events
- lesson completions: distinct lessons the student has finished

Note the completion term is ``completions + completion_weight``, not a product.
Dashboard order depends on it, so it is kept as the source system computes it.
"""

import logging
from dataclasses import dataclass

from session_booking.core.config import (
    ACTIVITY_NORMALIZER,
    ACTIVITY_WEIGHT_SETTING,
    COMPLETION_WEIGHT_SETTING,
    DEFAULT_ACTIVITY_WEIGHT,
    DEFAULT_COMPLETION_WEIGHT,
    DEFAULT_RECENCY_WEIGHT,
    DEFAULT_SLOT_WEIGHT,
    RECENCY_WEIGHT_SETTING,
    SLOT_WEIGHT_SETTING,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StudentMetrics:
    student_id: int
    recency_days: int
    slot_count: int
    activity_count_raw: int
    lesson_completions: int


@dataclass(frozen=True)
class WeightConfig:
    recency_weight: float = DEFAULT_RECENCY_WEIGHT
    slot_weight: float = DEFAULT_SLOT_WEIGHT
    activity_weight: float = DEFAULT_ACTIVITY_WEIGHT
    completion_weight: float = DEFAULT_COMPLETION_WEIGHT


@dataclass(frozen=True)
class PriorityScore:
    score: float
    recency_days: int
    slot_count: int
    activity_count_normalized: int
    completions: int


def normalize_activity_count(activity_count_raw: int) -> int:
    # floor, not round: 9 -> 0, 10 -> 1
    return activity_count_raw // ACTIVITY_NORMALIZER


def compute_score(metrics: StudentMetrics, weights: WeightConfig) -> PriorityScore:
    activity = normalize_activity_count(metrics.activity_count_raw)

    score = (
        metrics.recency_days * weights.recency_weight
        + metrics.slot_count * weights.slot_weight
        + activity * weights.activity_weight
        + (metrics.lesson_completions + weights.completion_weight)
    )

    return PriorityScore(
        score=score,
        recency_days=metrics.recency_days,
        slot_count=metrics.slot_count,
        activity_count_normalized=activity,
        completions=metrics.lesson_completions,
    )


def load_weight_config(provider) -> WeightConfig:
    """
    Build the weights for one request from the provider's settings.

    ``provider.get_config_weight(name)`` returns a float or None when unset;
    unset weights fall back to the defaults in core.config.
    """
    defaults = WeightConfig()
    resolved = {}
    for field_name, setting_name, default in (
        ("recency_weight", RECENCY_WEIGHT_SETTING, defaults.recency_weight),
        ("slot_weight", SLOT_WEIGHT_SETTING, defaults.slot_weight),
        ("activity_weight", ACTIVITY_WEIGHT_SETTING, defaults.activity_weight),
        ("completion_weight", COMPLETION_WEIGHT_SETTING, defaults.completion_weight),
    ):
        value = provider.get_config_weight(setting_name)
        if value is None:
            logger.debug("weight %s unset, using default %s", setting_name, default)
            value = default
        resolved[field_name] = value

    return WeightConfig(**resolved)
