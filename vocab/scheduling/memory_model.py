"""
Memory Model - Review State Updates

Recomputes an item's memory state after one review.

Stage rules:
- NeverReviewed: fixed defaults, re-show in 5 minutes regardless of quality
- SecondReview: fixed stability 0.1, re-show in 5 minutes
- Steady: the general recurrence below

Steady recurrence:
    R_before = exp(ln(0.9) * Δt / S)
    delta    = quality - R_before
    D'       = clip(D + delta * (0.1 - 0.02 * D), 1, 10)
    factor   = 1 + exp(-D') * (19^delta - 1) * Δt^-0.5
    S'       = max(0.1, S * factor)
    interval = clip(S' * ln(0.9)/ln(0.95), 5 min, 365 days)

Recalling better than predicted (delta > 0) grows stability, recalling worse
shrinks it. Everything here is pure: no I/O, no clock reads.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
import logging
import math

from vocab.scheduling.constants import (
    DEFAULT_DIFFICULTY,
    DEFAULT_RETRIEVABILITY,
    DEFAULT_STABILITY,
    DIFFICULTY_BASE_RATE,
    DIFFICULTY_DECAY,
    D_MAX,
    D_MIN,
    MAX_INTERVAL_DAYS,
    MIN_INTERVAL_DAYS,
    MS_PER_DAY,
    OPTIMAL_FACTOR,
    RELEARN_DELAY_MS,
    SECOND_REVIEW_ELAPSED_DAYS,
    SECOND_REVIEW_STABILITY,
    STABILITY_GROWTH_BASE,
    S_FLOOR,
)
from vocab.scheduling.grading import clamp_quality
from vocab.scheduling.memory_state import (
    ReviewState,
    calculate_retrievability,
    clamp,
    round_half_up,
    round_to_minute,
)
from vocab.scheduling.stages import NeverReviewed, SecondReview, Stage, Steady, classify

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpdateResult:
    """New state plus the intermediate values worth logging."""
    state: ReviewState
    stage: Stage
    quality: float
    retrievability_before: Optional[float]


def update_difficulty(difficulty: float, delta: float) -> float:
    """
    Move difficulty by the recall surprise.

    The drift rate (0.1 - 0.02 * D) shrinks as difficulty grows and turns
    negative above 5, so hard items respond to surprise in the opposite
    direction with a small step.
    """
    new_difficulty = difficulty + delta * (DIFFICULTY_BASE_RATE - difficulty * DIFFICULTY_DECAY)
    return clamp(new_difficulty, D_MIN, D_MAX)


def stability_factor(difficulty: float, delta: float, elapsed_days: float) -> float:
    """
    Multiplicative stability change for one review.

    Greater than 1 when delta > 0, less than 1 when delta < 0, exactly 1 when
    the outcome matched the prediction. Long gaps damp the change.
    """
    surprise = STABILITY_GROWTH_BASE ** delta - 1.0
    return 1.0 + math.exp(-difficulty) * surprise * elapsed_days ** -0.5


def update_stability(
    stability: float,
    difficulty: float,
    delta: float,
    elapsed_days: float
) -> float:
    """Apply the stability factor and enforce the stability floor."""
    factor = stability_factor(difficulty, delta, elapsed_days)
    return max(S_FLOOR, stability * factor)


def interval_days(stability: float) -> float:
    """Days until the next review, bounded to [5 minutes, 1 year]."""
    return clamp(stability * OPTIMAL_FACTOR, MIN_INTERVAL_DAYS, MAX_INTERVAL_DAYS)


def update(
    quality: float,
    prior: ReviewState,
    now: int,
    correct: Optional[bool] = None
) -> ReviewState:
    """
    Compute the state after reviewing an item at `now`.

    Args:
        quality: Review quality in [0, 1]; out-of-range values are clamped
        prior: State before the review
        now: Review time in ms
        correct: Whether the answer counts as a success; when omitted any
            quality above 0 counts

    Returns:
        New ReviewState with total_reviews advanced by exactly one
    """
    return apply_review(quality, prior, now, correct).state


def apply_review(
    quality: float,
    prior: ReviewState,
    now: int,
    correct: Optional[bool] = None
) -> UpdateResult:
    """
    Same as update(), but also returns the stage and pre-review values.
    """
    quality = clamp_quality(quality)
    stage = classify(prior, now)

    if isinstance(stage, NeverReviewed):
        if stage.malformed:
            logger.warning(
                "Malformed review state (stability=%s, difficulty=%s); resetting to defaults",
                prior.stability, prior.difficulty
            )
        fields = _first_review()
        retrievability_before = None
    elif isinstance(stage, SecondReview):
        fields = _second_review()
        retrievability_before = None
    elif isinstance(stage, Steady):
        fields, retrievability_before = _steady_review(quality, prior, stage, now)
    else:
        raise TypeError(f"Unhandled review stage: {stage!r}")

    success = correct if correct is not None else quality > 0.0
    stability, difficulty, retrievability, next_review_at = fields
    if next_review_at is None:
        next_review_at = now + RELEARN_DELAY_MS

    state = ReviewState(
        stability=round_half_up(stability),
        difficulty=round_half_up(difficulty),
        retrievability=round_half_up(retrievability),
        last_reviewed_at=now,
        next_review_at=next_review_at,
        total_reviews=prior.total_reviews + 1,
        success_count=prior.success_count + (1 if success else 0),
        last_grade=round_half_up(quality),
    )

    logger.debug(
        "Review stage=%s quality=%.2f -> S=%.2f D=%.2f next=%s",
        stage.name, quality, state.stability, state.difficulty, state.next_review_at
    )

    return UpdateResult(
        state=state,
        stage=stage,
        quality=quality,
        retrievability_before=retrievability_before,
    )


def _first_review() -> tuple[float, float, float, Optional[int]]:
    return DEFAULT_STABILITY, DEFAULT_DIFFICULTY, DEFAULT_RETRIEVABILITY, None


def _second_review() -> tuple[float, float, float, Optional[int]]:
    # Hardcoded 0.1, independent of SECOND_REVIEW_STABILITY
    retrievability = calculate_retrievability(0.1, SECOND_REVIEW_ELAPSED_DAYS)
    return SECOND_REVIEW_STABILITY, DEFAULT_DIFFICULTY, retrievability, None


def _steady_review(
    quality: float,
    prior: ReviewState,
    stage: Steady,
    now: int
) -> tuple[tuple[float, float, float, Optional[int]], float]:
    elapsed = stage.elapsed_days

    retrievability_before = calculate_retrievability(prior.stability, elapsed)
    delta = quality - retrievability_before

    new_difficulty = update_difficulty(prior.difficulty, delta)
    new_stability = update_stability(prior.stability, new_difficulty, delta, elapsed)

    interval = interval_days(new_stability)
    next_review_at = round_to_minute(now + interval * MS_PER_DAY)
    retrievability_after = calculate_retrievability(new_stability, interval)

    fields = (new_stability, new_difficulty, retrievability_after, next_review_at)
    return fields, retrievability_before
