"""
Memory State - Review State and Retrievability

Defines the per-item memory state and the derived quantities used by the
scheduling engine.

Key concepts:
- Stability (S): How slowly memory decays (in days)
- Difficulty (D): How hard the item is to learn (1-10 scale)
- Retrievability (R): Probability of successful recall at time t

Timestamps are integer milliseconds since the Unix epoch.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional
import math

from vocab.scheduling.constants import (
    DEFAULT_DIFFICULTY,
    DEFAULT_RETRIEVABILITY,
    DEFAULT_STABILITY,
    D_MAX,
    D_MIN,
    LN_R_REFERENCE,
    MS_PER_DAY,
    MS_PER_MINUTE,
    STORAGE_DECIMALS,
)


@dataclass(frozen=True)
class ReviewState:
    """
    Memory state for a single learnable item.

    Owned by the item store; replaced (never mutated) by the memory model
    once per review event.
    """
    # Long-term memory parameters
    stability: float = DEFAULT_STABILITY    # S, in days
    difficulty: float = DEFAULT_DIFFICULTY  # D, range 1-10
    retrievability: float = DEFAULT_RETRIEVABILITY  # R at the next scheduled review

    # Scheduling
    last_reviewed_at: Optional[int] = None  # None = never reviewed
    next_review_at: Optional[int] = None

    # Counters
    total_reviews: int = 0
    success_count: int = 0

    # Audit only, not read by the scheduler
    last_grade: float = 0.0

    @property
    def is_new(self) -> bool:
        """True if the item has never been reviewed."""
        return self.total_reviews == 0 or self.last_reviewed_at is None


def new_review_state(now: Optional[int] = None) -> ReviewState:
    """
    Create the default state for a freshly created item.

    Args:
        now: Creation time in ms; the item is due immediately

    Returns:
        Never-reviewed ReviewState
    """
    return ReviewState(next_review_at=now)


def calculate_retrievability(stability: float, elapsed_days: float) -> float:
    """
    Calculate retrievability on the exponential forgetting curve.

    Formula: R = exp(ln(0.9) * Δt / S)

    R is exactly 0.9 when Δt equals S, which is what makes stability read
    as "days until recall drops to 90%".

    Args:
        stability: Current stability in days
        elapsed_days: Time since the last review in days

    Returns:
        Retrievability between 0 and 1
    """
    if elapsed_days <= 0:
        return 1.0

    return math.exp(LN_R_REFERENCE * elapsed_days / stability)


def days_between(start_ms: int, end_ms: int) -> float:
    """Elapsed time between two ms timestamps, in days."""
    return (end_ms - start_ms) / MS_PER_DAY


def is_well_formed(state: ReviewState) -> bool:
    """
    Check that a persisted state can be fed to the update formulas.

    Stability must be positive and finite, difficulty must lie in [1, 10].
    """
    if not math.isfinite(state.stability) or state.stability <= 0:
        return False
    if not math.isfinite(state.difficulty):
        return False
    return D_MIN <= state.difficulty <= D_MAX


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def round_half_up(value: float, decimals: int = STORAGE_DECIMALS) -> float:
    """
    Round to a fixed number of decimals, halves away from zero.

    Python's round() rounds halves to even; storage uses the schoolbook rule
    so the same inputs always persist the same digits.
    """
    # Decimal quantize overflows its precision on huge values; such floats
    # have no fractional digits anyway
    if not math.isfinite(value) or abs(value) >= 2 ** 52:
        return value
    quantum = Decimal(1).scaleb(-decimals)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def round_to_minute(timestamp_ms: float) -> int:
    """Round a ms timestamp to the nearest whole minute (halves up)."""
    return int(math.floor(timestamp_ms / MS_PER_MINUTE + 0.5)) * MS_PER_MINUTE


# ---- Clock ----

def now_ms() -> int:
    """Current UTC time as integer milliseconds since the epoch."""
    return to_millis(datetime.now(timezone.utc))


def to_millis(moment: datetime) -> int:
    """Convert an aware (or UTC-naive) datetime to epoch milliseconds."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(round(moment.timestamp() * 1000))


def from_millis(timestamp_ms: Optional[int]) -> Optional[datetime]:
    """Convert epoch milliseconds to an aware UTC datetime."""
    if timestamp_ms is None:
        return None
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)
