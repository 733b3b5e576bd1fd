"""
Pydantic models for vocabulary entries and study payloads.

These validate data crossing into the system (CSV rows, UI answers) and
shape what the catalog hands back.
"""

from __future__ import annotations

import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ---- Normalization ----

def normalize_text(value: str) -> str:
    """Strip and collapse internal whitespace."""
    return re.sub(r"\s+", " ", str(value)).strip()


# ---- Catalog ----

class NewWord(BaseModel):
    """A word to add to the catalog."""
    word: str = Field(..., max_length=255, description="The word being learned")
    meaning: str = Field(..., max_length=255, description="Its translation or definition")

    @field_validator("word", "meaning", mode="before")
    @classmethod
    def _normalize(cls, value):
        if value is None:
            raise ValueError("must not be empty")
        value = normalize_text(value)
        if not value:
            raise ValueError("must not be empty")
        return value


class VocabEntry(BaseModel):
    """
    A catalog entry with its current review state.

    Built from a VocabItem row.
    """
    model_config = ConfigDict(from_attributes=True)

    id: int
    word: str
    meaning: str
    created_at: int

    stability: float
    difficulty: float
    retrievability: float
    last_reviewed_at: Optional[int] = None
    next_review_at: Optional[int] = None
    total_reviews: int = 0
    success_count: int = 0
    last_grade: float = 0.0

    @property
    def accuracy(self) -> Optional[float]:
        """Share of correct answers, None before the first review."""
        if self.total_reviews == 0:
            return None
        return self.success_count / self.total_reviews


# ---- Study ----

class AnswerSubmission(BaseModel):
    """
    One answer from the learner.

    Confidence is rejected rather than clamped when out of range, so bad
    input is caught at the edge instead of silently reshaped.
    """
    item_id: int
    correct: bool
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)
