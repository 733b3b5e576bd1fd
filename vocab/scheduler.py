"""
Study session service.

Glue between the item store and the scheduling engine:
- start_session(): which items to show now
- submit_answer(): score one answer and persist the new state

The engine stays pure; all loading and saving happens here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Hashable, Optional

from vocab import config
from vocab.scheduling import due_set
from vocab.scheduling.scheduler import process_review
from vocab.scheduling.database import ReviewStore
from vocab.scheduling.memory_state import ReviewState, now_ms

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StudyBatch:
    """
    Items to study now, most urgent first.

    `item_ids` is the selector output; `entries` are what the store resolves
    them to (VocabEntry for the SQL store), in the same order. An item deleted
    after the snapshot has no entry.
    """
    item_ids: list
    entries: list
    next_poll_at: int

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True)
class ReviewOutcome:
    """Result of one submitted answer."""
    item_id: Hashable
    state: ReviewState
    event: dict


def start_session(
    store: ReviewStore,
    now: Optional[int] = None,
    limit: Optional[int] = None
) -> StudyBatch:
    """
    Pick the batch of items to study now.

    Args:
        store: Item store to snapshot
        now: Current time in ms (defaults to now)
        limit: Batch size (defaults to SESSION_SIZE)

    Returns:
        StudyBatch with the resolved entries and the suggested next poll time
    """
    if now is None:
        now = now_ms()
    if limit is None:
        limit = config.get_session_size()

    item_ids, next_poll_at = due_set.select(store.snapshot(), now, limit)
    entries = store.entries(item_ids)
    if len(entries) != len(item_ids):
        logger.warning("%d selected items vanished before lookup", len(item_ids) - len(entries))

    logger.info("Study batch: %d due items, next poll at %s", len(entries), next_poll_at)
    return StudyBatch(item_ids=item_ids, entries=entries, next_poll_at=next_poll_at)


def submit_answer(
    store: ReviewStore,
    item_id: Hashable,
    correct: bool,
    confidence: float = 1.0,
    now: Optional[int] = None
) -> ReviewOutcome:
    """
    Record an answer for one item.

    Load, update, save and event log run as one store operation.

    Args:
        store: Item store holding the item
        item_id: Item identifier
        correct: Whether the answer was correct
        confidence: Learner confidence in [0, 1]
        now: Review time in ms (defaults to now)

    Returns:
        ReviewOutcome with the persisted state and the logged event

    Raises:
        ItemNotFoundError: If the store has no such item
    """
    if now is None:
        now = now_ms()

    state, event = store.apply(
        item_id,
        lambda prior: process_review(prior, correct, confidence, timestamp=now)
    )

    logger.info(
        "Item %s answered %s (stage=%s): next review at %s",
        item_id, "correctly" if correct else "incorrectly", event['stage'], state.next_review_at
    )
    return ReviewOutcome(item_id=item_id, state=state, event=event)

