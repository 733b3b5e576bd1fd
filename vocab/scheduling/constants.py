"""
Scheduling Constants and Parameters

All tunable values of the review-scheduling engine in one place.
Times are milliseconds since the epoch; durations in the formulas are days.
"""

import math


# ---- Time Units ----

MS_PER_MINUTE = 60 * 1000
MS_PER_DAY = 24 * 60 * MS_PER_MINUTE


# ---- Default State (never-reviewed item) ----

DEFAULT_STABILITY = 0.01     # Stability of a brand-new item (days)
DEFAULT_DIFFICULTY = 4.93    # Starting difficulty
DEFAULT_RETRIEVABILITY = 0.0


# ---- Second Review ----

SECOND_REVIEW_STABILITY = 0.1
SECOND_REVIEW_ELAPSED_DAYS = 5 / 1440  # The 5-minute relearning gap, in days


# ---- Bounds ----

S_FLOOR = 0.1     # Minimum stability after a steady-state update (days)
D_MIN = 1.0
D_MAX = 10.0
MIN_ELAPSED_DAYS = 1.0

MIN_INTERVAL_DAYS = 5 / 1440   # 5 minutes
MAX_INTERVAL_DAYS = 365.0      # 1 year


# ---- Forgetting Curve ----

R_REFERENCE = 0.9              # Retention at t = S
LN_R_REFERENCE = math.log(R_REFERENCE)

# Converts a stability into the interval that keeps expected recall on target
OPTIMAL_FACTOR = math.log(0.9) / math.log(0.95)


# ---- Learning Parameters ----

DIFFICULTY_BASE_RATE = 0.1     # Difficulty drift per unit surprise
DIFFICULTY_DECAY = 0.02        # Harder items drift less
STABILITY_GROWTH_BASE = 19.0   # Base of the surprise exponent in the stability factor


# ---- Scheduling ----

RELEARN_DELAY_MS = 5 * MS_PER_MINUTE   # Re-show delay for the first two reviews
GRACE_WINDOW_MS = 5 * MS_PER_MINUTE    # Items are due this much before their instant
DEFAULT_SESSION_SIZE = 10

# Numeric fields are stored with this many decimals
STORAGE_DECIMALS = 2
