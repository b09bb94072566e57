"""
Overall score and grade.

Scoring model:
- Each category analyzer already produced a clamped 0–100 score.
- The overall score is the arithmetic mean of the category scores, rounded half-up
  (72.5 → 73, never banker's rounding).
- The grade is the first threshold in GRADE_THRESHOLDS the score reaches.
"""
from __future__ import annotations

import math
from typing import Iterable

from config import FAILING_GRADE, GRADE_THRESHOLDS
from models import CategoryResult, OverallReport


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def grade_for(score: float) -> str:
    for threshold, grade in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return FAILING_GRADE


def aggregate(results: Iterable[CategoryResult]) -> OverallReport:
    """
    Combine category results into an OverallReport.

    An empty input yields score 0 / grade F rather than dividing by zero.
    """
    categories = {r.category: r for r in results}
    if not categories:
        return OverallReport(score=0, grade=FAILING_GRADE, categories={})

    mean = sum(r.score for r in categories.values()) / len(categories)
    score = round_half_up(mean)
    return OverallReport(score=score, grade=grade_for(score), categories=categories)


def score_label(score: float) -> str:
    if score >= 90:
        return "Excellent"
    elif score >= 75:
        return "Good"
    elif score >= 50:
        return "Needs Work"
    else:
        return "Poor"


def score_color(score: float) -> str:
    if score >= 90:
        return "#00C851"
    elif score >= 75:
        return "#FFD700"
    elif score >= 50:
        return "#FF8800"
    else:
        return "#FF4444"
