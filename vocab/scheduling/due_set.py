"""
Due-set selection.

Picks the items to present next from a point-in-time snapshot of the whole
collection. Least stable items come first.
"""

from __future__ import annotations
from typing import Hashable, Iterable, NamedTuple, Optional

from vocab.scheduling.constants import (
    DEFAULT_SESSION_SIZE,
    GRACE_WINDOW_MS,
    RELEARN_DELAY_MS,
)
from vocab.scheduling.memory_state import ReviewState


class DueSelection(NamedTuple):
    """
    Ordered due item ids plus an advisory time for the caller's next poll.

    Unpacks as `(item_ids, next_poll_at)`.
    """
    item_ids: list
    next_poll_at: int


def is_due(state: ReviewState, now: int) -> bool:
    """
    Check whether an item is eligible for review at `now`.

    New items are always due. Scheduled items become due a grace window
    before their exact instant.
    """
    if state.is_new or state.next_review_at is None:
        return True
    return now >= state.next_review_at - GRACE_WINDOW_MS


def select(
    items: Iterable[tuple[Hashable, ReviewState]],
    now: int,
    limit: int = DEFAULT_SESSION_SIZE
) -> DueSelection:
    """
    Select the due items, least stable first.

    Args:
        items: (item_id, state) pairs in insertion order
        now: Current time in ms
        limit: Maximum number of ids to return

    Returns:
        DueSelection with at most `limit` ids; ties keep input order
    """
    due = [(item_id, state) for item_id, state in items if is_due(state, now)]

    # list.sort is stable, so equal stabilities keep insertion order
    due.sort(key=lambda pair: pair[1].stability)

    chosen = due[:max(0, limit)]

    return DueSelection(
        item_ids=[item_id for item_id, _ in chosen],
        next_poll_at=_next_poll_at([state for _, state in chosen], now),
    )


def _next_poll_at(states: list[ReviewState], now: int) -> int:
    if not states:
        return now + RELEARN_DELAY_MS

    earliest: Optional[int] = None
    for state in states:
        scheduled = now if state.is_new or state.next_review_at is None else state.next_review_at
        if earliest is None or scheduled < earliest:
            earliest = scheduled
    return earliest
