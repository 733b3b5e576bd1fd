"""
SQLAlchemy ORM Models for the Vocabulary Database

Defines VocabItem (word + its review state) and ReviewEvent (append-only
review log). Timestamps are stored as epoch milliseconds.
"""

from sqlalchemy import BigInteger, Boolean, Column, Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import declarative_base

from vocab.scheduling.constants import DEFAULT_DIFFICULTY, DEFAULT_STABILITY

Base = declarative_base()


class VocabItem(Base):
    """
    A learnable word and its persistent memory state.

    The review columns mirror ReviewState one to one.
    """
    __tablename__ = 'vocab_items'
    __table_args__ = (
        UniqueConstraint('word', 'meaning', name='uq_vocab_items_word_meaning'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Catalog data
    word = Column(String(255), nullable=False)
    meaning = Column(String(255), nullable=False)
    created_at = Column(BigInteger, nullable=False)

    # Long-term memory parameters
    stability = Column(Float, nullable=False, default=DEFAULT_STABILITY)
    difficulty = Column(Float, nullable=False, default=DEFAULT_DIFFICULTY)
    retrievability = Column(Float, nullable=False, default=0.0)

    # Scheduling
    last_reviewed_at = Column(BigInteger, nullable=True)  # NULL = never reviewed
    next_review_at = Column(BigInteger, nullable=True)

    # Review tracking
    total_reviews = Column(Integer, nullable=False, default=0)
    success_count = Column(Integer, nullable=False, default=0)
    last_grade = Column(Float, nullable=False, default=0.0)

    def __repr__(self):
        return f"<VocabItem({self.id}, {self.word!r})>"


class ReviewEvent(Base):
    """
    Log entry for a single answered review.

    Captures the answer and the state before/after the update.
    """
    __tablename__ = 'review_events'

    id = Column(Integer, primary_key=True, autoincrement=True)
    item_id = Column(Integer, ForeignKey('vocab_items.id', ondelete='CASCADE'), nullable=False, index=True)

    # Answer
    timestamp = Column(BigInteger, nullable=False, index=True)
    correct = Column(Boolean, nullable=False)
    confidence = Column(Float, nullable=False)
    quality = Column(Float, nullable=False)
    stage = Column(String(50), nullable=False)  # never_reviewed, second_review, steady

    # State before review
    stability_before = Column(Float, nullable=True)
    difficulty_before = Column(Float, nullable=True)
    retrievability_before = Column(Float, nullable=True)

    # State after review
    stability_after = Column(Float, nullable=False)
    difficulty_after = Column(Float, nullable=False)
    retrievability_after = Column(Float, nullable=False)
    next_review_at = Column(BigInteger, nullable=False)

    def __repr__(self):
        return f"<ReviewEvent(id={self.id}, item={self.item_id}, correct={self.correct})>"
