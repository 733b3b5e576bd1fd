"""
SQL repository for the vocabulary catalog.

Provides functions to add, query, rename and delete words. Creating a word
also creates its never-reviewed review state, so it is due immediately.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from vocab.schemas import NewWord, VocabEntry
from vocab.scheduling.database import (
    DuplicateItemError,
    ItemNotFoundError,
    SqlReviewStore,
    apply_state_to_row,
    get_session_factory,
)
from vocab.scheduling.memory_state import new_review_state, now_ms
from vocab.scheduling.models import ReviewEvent, VocabItem

logger = logging.getLogger(__name__)


def _factory(session_factory: Optional[sessionmaker]) -> sessionmaker:
    return session_factory or get_session_factory()


def _new_row(entry: NewWord, created_at: int) -> VocabItem:
    row = VocabItem(word=entry.word, meaning=entry.meaning, created_at=created_at)
    apply_state_to_row(row, new_review_state(created_at))
    return row


# ---- Create ----

def add_word(
    word: str,
    meaning: str,
    now: Optional[int] = None,
    session_factory: Optional[sessionmaker] = None
) -> VocabEntry:
    """
    Add a word to the catalog.

    Args:
        word: The word being learned
        meaning: Its translation
        now: Creation time in ms (defaults to now)
        session_factory: Optional explicit session factory

    Returns:
        The stored entry

    Raises:
        pydantic.ValidationError: If word or meaning is blank
        DuplicateItemError: If the word/meaning pair already exists
    """
    entry = NewWord(word=word, meaning=meaning)
    created_at = now if now is not None else now_ms()

    session = _factory(session_factory)()
    try:
        existing = session.query(VocabItem.id).filter(
            VocabItem.word == entry.word,
            VocabItem.meaning == entry.meaning
        ).first()
        if existing is not None:
            raise DuplicateItemError(f"Word already exists: {entry.word!r} ({entry.meaning!r})")

        row = _new_row(entry, created_at)
        session.add(row)
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            raise DuplicateItemError(f"Word already exists: {entry.word!r} ({entry.meaning!r})") from None

        logger.info("Added word %r (id=%s)", entry.word, row.id)
        return VocabEntry.model_validate(row)
    finally:
        session.close()


def add_words(
    pairs: Iterable[tuple[str, str]],
    now: Optional[int] = None,
    session_factory: Optional[sessionmaker] = None
) -> tuple[list[VocabEntry], list[tuple[str, str]]]:
    """
    Add many words in one transaction, skipping duplicates and blank rows.

    Args:
        pairs: (word, meaning) tuples
        now: Creation time in ms (defaults to now)
        session_factory: Optional explicit session factory

    Returns:
        (added entries, skipped pairs)
    """
    created_at = now if now is not None else now_ms()
    added_rows: list[VocabItem] = []
    skipped: list[tuple[str, str]] = []

    session = _factory(session_factory)()
    try:
        seen = {(w, m) for w, m in session.query(VocabItem.word, VocabItem.meaning).all()}

        for word, meaning in pairs:
            try:
                entry = NewWord(word=word, meaning=meaning)
            except ValidationError:
                skipped.append((word, meaning))
                continue

            key = (entry.word, entry.meaning)
            if key in seen:
                skipped.append((word, meaning))
                continue

            seen.add(key)
            row = _new_row(entry, created_at)
            session.add(row)
            added_rows.append(row)

        session.commit()
        logger.info("Imported %d words (%d skipped)", len(added_rows), len(skipped))
        return [VocabEntry.model_validate(row) for row in added_rows], skipped
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


# ---- Read ----

def get_word(item_id: int, session_factory: Optional[sessionmaker] = None) -> Optional[VocabEntry]:
    """
    Get a single entry by id.

    Returns:
        VocabEntry, or None if not found
    """
    session = _factory(session_factory)()
    try:
        row = session.get(VocabItem, item_id)
        return VocabEntry.model_validate(row) if row is not None else None
    finally:
        session.close()


def get_words(item_ids: list[int], session_factory: Optional[sessionmaker] = None) -> list[VocabEntry]:
    """
    Get entries for a list of ids, keeping the order of `item_ids`.

    Unknown ids are dropped.
    """
    return SqlReviewStore(_factory(session_factory)).entries(item_ids)


def list_words(session_factory: Optional[sessionmaker] = None) -> list[VocabEntry]:
    """All entries in insertion order."""
    session = _factory(session_factory)()
    try:
        rows = session.query(VocabItem).order_by(VocabItem.id).all()
        return [VocabEntry.model_validate(row) for row in rows]
    finally:
        session.close()


# ---- Update / Delete ----

def rename_word(
    item_id: int,
    word: Optional[str] = None,
    meaning: Optional[str] = None,
    session_factory: Optional[sessionmaker] = None
) -> VocabEntry:
    """
    Change the text of an entry. Review state is kept.

    Raises:
        ItemNotFoundError: If no item has this id
        DuplicateItemError: If the new pair collides with another entry
    """
    session = _factory(session_factory)()
    try:
        row = session.get(VocabItem, item_id)
        if row is None:
            raise ItemNotFoundError(item_id)

        entry = NewWord(
            word=word if word is not None else row.word,
            meaning=meaning if meaning is not None else row.meaning,
        )
        row.word = entry.word
        row.meaning = entry.meaning
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            raise DuplicateItemError(f"Word already exists: {entry.word!r} ({entry.meaning!r})") from None

        return VocabEntry.model_validate(row)
    finally:
        session.close()


def delete_word(item_id: int, session_factory: Optional[sessionmaker] = None):
    """
    Delete an entry together with its review state and review history.

    Raises:
        ItemNotFoundError: If no item has this id
    """
    session = _factory(session_factory)()
    try:
        row = session.get(VocabItem, item_id)
        if row is None:
            raise ItemNotFoundError(item_id)

        session.query(ReviewEvent).filter(ReviewEvent.item_id == item_id).delete()
        session.delete(row)
        session.commit()
        logger.info("Deleted word %r (id=%s)", row.word, item_id)
    finally:
        session.close()
