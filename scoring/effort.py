"""
Effort heuristics: difficulty from the wording of a solution, hours from the
priority × difficulty table.
"""
from __future__ import annotations

import re

from config import DEFAULT_DIFFICULTY, DIFFICULTY_KEYWORDS, EFFORT_HOURS

_KEYWORD_PATTERNS = [
    (difficulty, re.compile(r"\b(" + "|".join(map(re.escape, words)) + r")\b", re.IGNORECASE))
    for difficulty, words in DIFFICULTY_KEYWORDS
]


def estimate_difficulty(solution: str) -> str:
    """First difficulty (easy → medium → hard) whose keyword appears as a word in the solution."""
    for difficulty, pattern in _KEYWORD_PATTERNS:
        if pattern.search(solution or ""):
            return difficulty
    return DEFAULT_DIFFICULTY


def estimate_hours(priority: str, difficulty: str) -> float:
    row = EFFORT_HOURS.get(priority, EFFORT_HOURS["info"])
    return row.get(difficulty, row[DEFAULT_DIFFICULTY])
