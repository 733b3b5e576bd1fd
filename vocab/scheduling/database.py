"""
Database - Item Store I/O

Handles all persistence of review state and review events.
Uses SQLAlchemy ORM (sqlite by default, Postgres via DATABASE_URL).

This module handles ONLY I/O.
Algorithm logic lives in the memory_model and due_set modules.
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Callable, Hashable, Optional, Protocol, Tuple

from sqlalchemy import create_engine, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from vocab import config
from vocab.scheduling.memory_state import ReviewState
from vocab.scheduling.models import Base, ReviewEvent as ReviewEventModel, VocabItem
from vocab.schemas import VocabEntry

logger = logging.getLogger(__name__)

# Process-wide engine, created on first use
_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


class ItemNotFoundError(LookupError):
    """Raised when an item id is not in the store."""

    def __init__(self, item_id):
        super().__init__(f"Item not found: {item_id}")
        self.item_id = item_id


class DuplicateItemError(ValueError):
    """Raised when a word/meaning pair already exists."""


# ---- Engine & Sessions ----

def create_db_engine(db_url: str) -> Engine:
    """
    Create a SQLAlchemy engine for the given URL.

    sqlite files get their parent directory created; in-memory sqlite uses a
    single shared connection so every session sees the same database.
    Server databases use connection pooling.

    Args:
        db_url: SQLAlchemy connection string

    Returns:
        SQLAlchemy Engine instance
    """
    url = make_url(db_url)

    if url.get_backend_name() == "sqlite":
        if url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
            return create_engine(db_url, connect_args={"check_same_thread": False})
        return create_engine(
            db_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    return create_engine(
        db_url,
        pool_size=5,           # Keep 5 connections open
        max_overflow=10,       # Allow up to 10 extra connections
        pool_pre_ping=True,    # Verify connections before use
        echo=False
    )


def get_engine() -> Engine:
    """Get the process-wide engine, creating it from config on first use."""
    global _engine
    if _engine is None:
        _engine = create_db_engine(config.get_database_url())
    return _engine


def get_session_factory(engine: Optional[Engine] = None) -> sessionmaker:
    """
    Get a session factory.

    Args:
        engine: Explicit engine; omit to use the process-wide one

    Returns:
        sessionmaker bound to the engine
    """
    global _session_factory
    if engine is not None:
        return sessionmaker(bind=engine, expire_on_commit=False)

    if _session_factory is None:
        _session_factory = sessionmaker(bind=get_engine(), expire_on_commit=False)
    return _session_factory


def init_db(engine: Optional[Engine] = None):
    """
    Initialize database schema if tables don't exist.

    Safe to call multiple times - only creates missing tables.
    """
    engine = engine or get_engine()

    existing_tables = set(inspect(engine).get_table_names())
    if {'vocab_items', 'review_events'} <= existing_tables:
        return

    Base.metadata.create_all(engine)
    logger.info("Created vocabulary tables")


def reset_db(engine: Optional[Engine] = None):
    """
    DANGEROUS: Delete all data and recreate tables.

    Only use this for testing or when you want to start fresh.
    All review history will be lost!
    """
    engine = engine or get_engine()
    Base.metadata.drop_all(engine)
    logger.warning("All vocabulary tables dropped")

    init_db(engine)


# ---- Store Abstraction ----

# Pure review step: prior state -> (new state, event dict)
ReviewFn = Callable[[ReviewState], Tuple[ReviewState, dict]]


class ReviewStore(Protocol):
    """
    Capability the study service needs from storage.

    Implementations must give read-your-writes for an item just saved and
    return snapshots in insertion order.
    """

    def load(self, item_id: Hashable) -> ReviewState:
        ...

    def save(self, item_id: Hashable, state: ReviewState, event: Optional[dict] = None) -> None:
        ...

    def apply(self, item_id: Hashable, review: ReviewFn) -> Tuple[ReviewState, dict]:
        ...

    def log_event(self, item_id: Hashable, event: dict) -> None:
        ...

    def snapshot(self) -> list[tuple[Hashable, ReviewState]]:
        ...

    def entries(self, item_ids: list) -> list:
        ...

    def recent_events(self, limit: int = 10) -> list[dict]:
        ...


def state_from_row(row: VocabItem) -> ReviewState:
    """Build a ReviewState from a VocabItem row."""
    return ReviewState(
        stability=row.stability,
        difficulty=row.difficulty,
        retrievability=row.retrievability,
        last_reviewed_at=row.last_reviewed_at,
        next_review_at=row.next_review_at,
        total_reviews=row.total_reviews,
        success_count=row.success_count,
        last_grade=row.last_grade,
    )


def apply_state_to_row(row: VocabItem, state: ReviewState):
    """Copy ReviewState fields onto a VocabItem row."""
    row.stability = state.stability
    row.difficulty = state.difficulty
    row.retrievability = state.retrievability
    row.last_reviewed_at = state.last_reviewed_at
    row.next_review_at = state.next_review_at
    row.total_reviews = state.total_reviews
    row.success_count = state.success_count
    row.last_grade = state.last_grade


class SqlReviewStore:
    """ReviewStore backed by the vocab_items / review_events tables."""

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self._session_factory = session_factory or get_session_factory()

    def _session(self) -> Session:
        return self._session_factory()

    def load(self, item_id: int) -> ReviewState:
        """
        Load the review state of one item.

        Raises:
            ItemNotFoundError: If no item has this id
        """
        session = self._session()
        try:
            row = session.get(VocabItem, item_id)
            if row is None:
                raise ItemNotFoundError(item_id)
            return state_from_row(row)
        finally:
            session.close()

    def save(self, item_id: int, state: ReviewState, event: Optional[dict] = None):
        """
        Persist a new state, and its review event if given, in one transaction.

        Raises:
            ItemNotFoundError: If no item has this id
        """
        session = self._session()
        try:
            row = session.get(VocabItem, item_id)
            if row is None:
                raise ItemNotFoundError(item_id)

            apply_state_to_row(row, state)
            if event is not None:
                session.add(_event_model(item_id, event))

            session.commit()
            logger.debug("Saved review state for item %s (reviews=%d)", item_id, state.total_reviews)
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def apply(self, item_id: int, review: ReviewFn) -> Tuple[ReviewState, dict]:
        """
        Run one review against an item in a single transaction.

        The row is read (locked where the backend supports it), passed through
        `review`, written back and its event appended before one commit.
        Nothing is written if `review` raises.

        Args:
            item_id: Item to review
            review: Pure function from the prior state to (new_state, event)

        Returns:
            The (new_state, event) pair produced by `review`

        Raises:
            ItemNotFoundError: If no item has this id
        """
        session = self._session()
        try:
            row = session.get(VocabItem, item_id, with_for_update=True)
            if row is None:
                raise ItemNotFoundError(item_id)

            state, event = review(state_from_row(row))

            apply_state_to_row(row, state)
            session.add(_event_model(item_id, event))
            session.commit()
            logger.debug("Reviewed item %s (reviews=%d)", item_id, state.total_reviews)
            return state, event
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def log_event(self, item_id: int, event: dict):
        """
        Append one review event without touching the item's state.

        Raises:
            ItemNotFoundError: If no item has this id
        """
        session = self._session()
        try:
            if session.get(VocabItem, item_id) is None:
                raise ItemNotFoundError(item_id)
            session.add(_event_model(item_id, event))
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def snapshot(self) -> list[tuple[int, ReviewState]]:
        """All (id, state) pairs in insertion order, read in one transaction."""
        session = self._session()
        try:
            rows = session.query(VocabItem).order_by(VocabItem.id).all()
            return [(row.id, state_from_row(row)) for row in rows]
        finally:
            session.close()

    def entries(self, item_ids: list[int]) -> list[VocabEntry]:
        """Catalog entries for `item_ids`, in that order; unknown ids are dropped."""
        if not item_ids:
            return []

        session = self._session()
        try:
            rows = session.query(VocabItem).filter(VocabItem.id.in_(item_ids)).all()
            by_id = {row.id: row for row in rows}
            return [VocabEntry.model_validate(by_id[i]) for i in item_ids if i in by_id]
        finally:
            session.close()

    def recent_events(self, limit: int = 10) -> list[dict]:
        """
        Get recent review events.

        Args:
            limit: Maximum number of events to return

        Returns:
            List of recent events (newest first)
        """
        session = self._session()
        try:
            events = session.query(ReviewEventModel).order_by(
                ReviewEventModel.timestamp.desc(),
                ReviewEventModel.id.desc()
            ).limit(limit).all()
            return [_event_dict(event) for event in events]
        finally:
            session.close()


class InMemoryReviewStore:
    """
    ReviewStore over a plain dict, for tests and scripting.

    Dicts keep insertion order, which is the tie-break order of the due set.
    Entries are the (item_id, state) pairs themselves.
    """

    def __init__(self, states: Optional[dict] = None):
        self._states: dict = dict(states or {})
        self._events: list[dict] = []

    def add(self, item_id: Hashable, state: Optional[ReviewState] = None):
        """Register an item, by default with a never-reviewed state."""
        self._states[item_id] = state or ReviewState()

    def load(self, item_id: Hashable) -> ReviewState:
        try:
            return self._states[item_id]
        except KeyError:
            raise ItemNotFoundError(item_id) from None

    def save(self, item_id: Hashable, state: ReviewState, event: Optional[dict] = None):
        if item_id not in self._states:
            raise ItemNotFoundError(item_id)
        self._states[item_id] = state
        if event is not None:
            self.log_event(item_id, event)

    def apply(self, item_id: Hashable, review: ReviewFn) -> Tuple[ReviewState, dict]:
        state, event = review(self.load(item_id))
        self.save(item_id, state, event)
        return state, event

    def log_event(self, item_id: Hashable, event: dict):
        if item_id not in self._states:
            raise ItemNotFoundError(item_id)
        self._events.append({'item_id': item_id, **event})

    def snapshot(self) -> list[tuple[Hashable, ReviewState]]:
        return list(self._states.items())

    def entries(self, item_ids: list) -> list[tuple[Hashable, ReviewState]]:
        return [(i, self._states[i]) for i in item_ids if i in self._states]

    def recent_events(self, limit: int = 10) -> list[dict]:
        return list(reversed(self._events))[:limit]


def _event_model(item_id: int, event: dict) -> ReviewEventModel:
    return ReviewEventModel(
        item_id=item_id,
        timestamp=event['timestamp'],
        correct=event['correct'],
        confidence=event['confidence'],
        quality=event['quality'],
        stage=event['stage'],
        stability_before=event.get('stability_before'),
        difficulty_before=event.get('difficulty_before'),
        retrievability_before=event.get('retrievability_before'),
        stability_after=event['stability_after'],
        difficulty_after=event['difficulty_after'],
        retrievability_after=event['retrievability_after'],
        next_review_at=event['next_review_at'],
    )


def _event_dict(event: ReviewEventModel) -> dict:
    return {
        "id": event.id,
        "item_id": event.item_id,
        "timestamp": event.timestamp,
        "correct": event.correct,
        "confidence": event.confidence,
        "quality": event.quality,
        "stage": event.stage,
        "stability_before": event.stability_before,
        "difficulty_before": event.difficulty_before,
        "retrievability_before": event.retrievability_before,
        "stability_after": event.stability_after,
        "difficulty_after": event.difficulty_after,
        "retrievability_after": event.retrievability_after,
        "next_review_at": event.next_review_at,
    }
