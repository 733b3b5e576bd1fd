"""
Grade mapping.

Turns an answer (correct or not, plus how confident the learner felt) into a
continuous quality grade in [0, 1] for the memory model.
"""

from __future__ import annotations
import math


def clamp_quality(value: float) -> float:
    """Clamp a quality-like value into [0, 1]; NaN maps to 0."""
    if math.isnan(value):
        return 0.0
    return max(0.0, min(1.0, value))


def grade(correct: bool, confidence: float) -> float:
    """
    Map an answer to a quality grade.

    A correct answer is worth its confidence, so a lucky guess counts for
    less than a confident recall. An incorrect answer is always 0.

    Args:
        correct: Whether the learner answered correctly
        confidence: Self-reported confidence, nominally in [0, 1]

    Returns:
        Quality in [0, 1]
    """
    if not correct:
        return 0.0
    return clamp_quality(float(confidence))
