"""
Tests for due-set selection.
"""

import pytest

from vocab.scheduling.constants import MS_PER_DAY, MS_PER_MINUTE
from vocab.scheduling.due_set import is_due, select
from vocab.scheduling.memory_state import ReviewState

from conftest import T0


def _scheduled(due_at, stability=1.0):
    return ReviewState(
        stability=stability,
        difficulty=5.0,
        last_reviewed_at=due_at - MS_PER_DAY,
        next_review_at=due_at,
        total_reviews=3,
        success_count=2,
    )


class TestIsDue:

    def test_new_item_always_due(self):
        assert is_due(ReviewState(), T0)
        assert is_due(ReviewState(next_review_at=T0 + MS_PER_DAY), T0)

    def test_grace_window(self):
        state = _scheduled(T0)
        assert is_due(state, T0 - 4 * MS_PER_MINUTE)
        assert is_due(state, T0 - 5 * MS_PER_MINUTE)
        assert not is_due(state, T0 - 6 * MS_PER_MINUTE)

    def test_overdue(self):
        assert is_due(_scheduled(T0), T0 + 3 * MS_PER_DAY)


class TestSelect:

    def test_orders_by_stability(self):
        items = [
            ("a", _scheduled(T0, stability=3.0)),
            ("b", _scheduled(T0, stability=0.5)),
            ("c", _scheduled(T0, stability=1.2)),
        ]
        assert select(items, T0).item_ids == ["b", "c", "a"]

    def test_ties_keep_input_order(self):
        items = [(name, _scheduled(T0, stability=1.0)) for name in "xyzw"]
        assert select(items, T0).item_ids == ["x", "y", "z", "w"]

    def test_skips_items_not_yet_due(self):
        items = [
            (1, _scheduled(T0 + MS_PER_DAY, stability=0.1)),
            (2, _scheduled(T0 - MS_PER_DAY, stability=5.0)),
            (3, ReviewState()),
        ]
        assert select(items, T0).item_ids == [3, 2]

    def test_limit(self):
        items = [(i, _scheduled(T0, stability=float(i))) for i in range(25)]

        assert select(items, T0).item_ids == list(range(10))
        assert select(items, T0, limit=3).item_ids == [0, 1, 2]
        assert len(select(items, T0, limit=100).item_ids) == 25

    @pytest.mark.parametrize("limit", [0, -5])
    def test_non_positive_limit_returns_nothing(self, limit):
        items = [(1, ReviewState())]
        assert select(items, T0, limit=limit).item_ids == []

    def test_empty_collection(self):
        selection = select([], T0)
        assert selection.item_ids == []
        assert selection.next_poll_at == T0 + 5 * MS_PER_MINUTE

    def test_unpacks_as_pair(self):
        items = [("old", _scheduled(T0 - MS_PER_DAY, stability=2.0)), ("new", ReviewState())]

        item_ids, next_poll_at = select(items, T0)

        assert item_ids == ["new", "old"]
        assert next_poll_at == T0 - MS_PER_DAY

    def test_next_poll_is_earliest_returned(self):
        items = [
            ("late", _scheduled(T0 - MS_PER_MINUTE, stability=0.5)),
            ("early", _scheduled(T0 - 2 * MS_PER_DAY, stability=2.0)),
            ("future", _scheduled(T0 + MS_PER_DAY, stability=0.1)),
        ]
        selection = select(items, T0)
        assert selection.item_ids == ["late", "early"]
        assert selection.next_poll_at == T0 - 2 * MS_PER_DAY

    def test_next_poll_ignores_truncated_items(self):
        items = [
            ("a", _scheduled(T0, stability=0.5)),
            ("b", _scheduled(T0 - MS_PER_DAY, stability=2.0)),
        ]
        assert select(items, T0, limit=1).next_poll_at == T0

    def test_new_items_poll_now(self):
        assert select([(1, ReviewState())], T0).next_poll_at == T0

    def test_result_is_sorted_subset_of_due(self):
        items = [
            (i, _scheduled(T0 + (i % 3 - 1) * MS_PER_DAY, stability=(i * 7) % 5 + 0.1))
            for i in range(30)
        ]
        selection = select(items, T0, limit=8)
        states = dict(items)

        assert len(selection.item_ids) <= 8
        assert all(is_due(states[i], T0) for i in selection.item_ids)
        stabilities = [states[i].stability for i in selection.item_ids]
        assert stabilities == sorted(stabilities)

    def test_idempotent(self):
        items = [(i, _scheduled(T0, stability=(i * 3) % 4)) for i in range(12)]
        assert select(items, T0, limit=5) == select(items, T0, limit=5)

    def test_accepts_generator(self):
        items = ((i, ReviewState()) for i in range(3))
        assert select(items, T0).item_ids == [0, 1, 2]
