"""
Tests for grade mapping (answer + confidence -> quality).
"""

import math

import pytest

from vocab.scheduling.grading import clamp_quality, grade


class TestGrade:

    @pytest.mark.parametrize("confidence", [0.0, 0.25, 0.5, 0.9, 1.0])
    def test_correct_answer_uses_confidence(self, confidence):
        assert grade(True, confidence) == confidence

    @pytest.mark.parametrize("confidence", [0.0, 0.3, 1.0, 5.0])
    def test_incorrect_answer_is_zero(self, confidence):
        assert grade(False, confidence) == 0.0

    def test_low_confidence_weighs_less(self):
        assert grade(True, 0.2) < grade(True, 0.9)

    def test_confidence_is_clamped(self):
        assert grade(True, 1.5) == 1.0
        assert grade(True, -0.5) == 0.0

    def test_nan_confidence_counts_as_zero(self):
        assert grade(True, math.nan) == 0.0


class TestClampQuality:

    def test_in_range_unchanged(self):
        assert clamp_quality(0.42) == 0.42

    def test_bounds(self):
        assert clamp_quality(-1) == 0.0
        assert clamp_quality(2) == 1.0
