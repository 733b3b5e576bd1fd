"""
Review scheduling engine.

Decides when each vocabulary item should be shown next and how well it is
believed to be retained:
- Grade mapping: answer + confidence -> quality in [0, 1]
- Memory model: three-stage state update with an exponential forgetting curve
- Due-set selection: least stable due items first, bounded batch size

Quick start:
    from vocab import scheduling

    # Score an answer and update one item (pure, no DB calls)
    quality = scheduling.grade(correct=True, confidence=0.8)
    state = scheduling.update(quality, state, now)

    # Pick what to show next from a snapshot of all items
    selection = scheduling.select(store.snapshot(), now, limit=10)
"""

# Core algorithm (pure)
from vocab.scheduling.grading import grade, clamp_quality
from vocab.scheduling.memory_model import update, apply_review, UpdateResult
from vocab.scheduling.due_set import select, is_due, DueSelection
from vocab.scheduling.scheduler import process_review

# Stages
from vocab.scheduling.stages import NeverReviewed, SecondReview, Steady, Stage, classify

# Memory state
from vocab.scheduling.memory_state import (
    ReviewState,
    new_review_state,
    calculate_retrievability,
    now_ms,
    to_millis,
    from_millis,
)

# Storage
from vocab.scheduling.database import (
    init_db,
    reset_db,
    create_db_engine,
    get_engine,
    get_session_factory,
    ReviewStore,
    SqlReviewStore,
    InMemoryReviewStore,
    ItemNotFoundError,
    DuplicateItemError,
)

# Parameters
from vocab.scheduling.constants import (
    DEFAULT_STABILITY,
    DEFAULT_DIFFICULTY,
    S_FLOOR,
    D_MIN,
    D_MAX,
    GRACE_WINDOW_MS,
    RELEARN_DELAY_MS,
    DEFAULT_SESSION_SIZE,
)


__all__ = [
    # Core algorithm
    "grade",
    "clamp_quality",
    "update",
    "apply_review",
    "UpdateResult",
    "select",
    "is_due",
    "DueSelection",
    "process_review",

    # Stages
    "NeverReviewed",
    "SecondReview",
    "Steady",
    "Stage",
    "classify",

    # Memory state
    "ReviewState",
    "new_review_state",
    "calculate_retrievability",
    "now_ms",
    "to_millis",
    "from_millis",

    # Storage
    "init_db",
    "reset_db",
    "create_db_engine",
    "get_engine",
    "get_session_factory",
    "ReviewStore",
    "SqlReviewStore",
    "InMemoryReviewStore",
    "ItemNotFoundError",
    "DuplicateItemError",

    # Parameters
    "DEFAULT_STABILITY",
    "DEFAULT_DIFFICULTY",
    "S_FLOOR",
    "D_MIN",
    "D_MAX",
    "GRACE_WINDOW_MS",
    "RELEARN_DELAY_MS",
    "DEFAULT_SESSION_SIZE",
]
