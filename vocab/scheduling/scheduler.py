"""
Scheduler - Review Processing

Pure scheduling for one answered item (no database calls).

Main workflow:
1. Load item state (caller's responsibility)
2. Map the answer to a quality grade
3. Run the memory model
4. Return updated state + event data dict

Database I/O is handled by the database module.
"""

from __future__ import annotations
from typing import Optional, Tuple

from vocab.scheduling import grading, memory_model
from vocab.scheduling.memory_state import ReviewState, now_ms


def process_review(
    state: ReviewState,
    correct: bool,
    confidence: float = 1.0,
    timestamp: Optional[int] = None
) -> Tuple[ReviewState, dict]:
    """
    Process an answer and return the new state + event data.

    Caller is responsible for:
    1. Loading the state
    2. Saving the returned state
    3. Persisting the event

    Args:
        state: ReviewState before the answer
        correct: Whether the answer was correct
        confidence: Learner confidence in [0, 1] (default: fully confident)
        timestamp: Review time in ms (defaults to now)

    Returns:
        Tuple of (new_state, event_data_dict)
        event_data_dict is ready for ReviewStore.log_event() or save()
    """
    if timestamp is None:
        timestamp = now_ms()

    quality = grading.grade(correct, confidence)
    result = memory_model.apply_review(quality, state, timestamp, correct=correct)
    new_state = result.state

    event_data = {
        'timestamp': timestamp,
        'correct': bool(correct),
        'confidence': grading.clamp_quality(float(confidence)),
        'quality': result.quality,
        'stage': result.stage.name,
        'stability_before': state.stability if not state.is_new else None,
        'difficulty_before': state.difficulty if not state.is_new else None,
        'retrievability_before': result.retrievability_before,
        'stability_after': new_state.stability,
        'difficulty_after': new_state.difficulty,
        'retrievability_after': new_state.retrievability,
        'next_review_at': new_state.next_review_at,
    }

    return new_state, event_data
