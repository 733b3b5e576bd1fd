"""
Review stages.

An item moves through three stages keyed on how many reviews it has had.
Each stage is its own type so the memory model can dispatch exhaustively:

    NeverReviewed -> SecondReview -> Steady -> Steady -> ...

A prior state that cannot be trusted (non-positive stability, difficulty out
of range, a steady item without a review timestamp) is classified as
NeverReviewed so the item restarts instead of getting stuck.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Union

from vocab.scheduling.constants import MIN_ELAPSED_DAYS
from vocab.scheduling.memory_state import ReviewState, days_between, is_well_formed


@dataclass(frozen=True)
class NeverReviewed:
    """First review of an item (or a reset of a corrupt one)."""
    malformed: bool = False

    name = "never_reviewed"


@dataclass(frozen=True)
class SecondReview:
    """Second review, shortly after the first."""

    name = "second_review"


@dataclass(frozen=True)
class Steady:
    """Third and later reviews, driven by the general recurrence."""
    elapsed_days: float

    name = "steady"


Stage = Union[NeverReviewed, SecondReview, Steady]


def classify(prior: ReviewState, now: int) -> Stage:
    """
    Determine which stage a review of `prior` at `now` falls into.

    Args:
        prior: State before the review
        now: Review time in ms

    Returns:
        Stage instance; Steady carries the floored elapsed days
    """
    if prior.total_reviews <= 0:
        return NeverReviewed()

    if not is_well_formed(prior):
        return NeverReviewed(malformed=True)

    if prior.total_reviews == 1:
        return SecondReview()

    if prior.last_reviewed_at is None:
        return NeverReviewed(malformed=True)

    elapsed = max(MIN_ELAPSED_DAYS, days_between(prior.last_reviewed_at, now))
    return Steady(elapsed_days=elapsed)
