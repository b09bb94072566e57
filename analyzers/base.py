"""
Base class for all category analyzers.

An analyzer is a typed rule table plus two hooks: `collect` turns the snapshot
into a metrics dict, `evaluate` decides which rules fire. Scoring is shared:
start from the baseline, subtract every fired rule's deduction, floor at 0.
`finalize` may then add score-dependent details.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional

from config import BASELINE_SCORE, DEGRADED_SCORE
from models import CategoryResult, Issue, IssueType, PageSnapshot, Priority


@dataclass(frozen=True)
class Rule:
    key: str
    issue_type: str
    priority: str
    deduction: int            # fixed deduction, or the cap when per_unit is set
    message: str              # str.format template; receives count + hit params
    impact: str
    solution: str
    per_unit: int = 0
    location: Optional[str] = None


@dataclass(frozen=True)
class Hit:
    rule: Rule
    count: int = 1
    params: dict[str, Any] = field(default_factory=dict)

    @property
    def deduction(self) -> int:
        if self.rule.per_unit:
            return min(self.count * self.rule.per_unit, self.rule.deduction)
        return self.rule.deduction


def rule_table(*rules: Rule) -> dict[str, Rule]:
    return {r.key: r for r in rules}


class BaseAnalyzer(ABC):
    """All category analyzers inherit from this class."""

    category: str = ""
    rules: dict[str, Rule] = {}

    def analyze(self, snapshot: PageSnapshot) -> CategoryResult:
        details = self.collect(snapshot)
        hits = self.evaluate(snapshot, details)

        deductions = sum(h.deduction for h in hits)
        score = max(BASELINE_SCORE - deductions, 0)
        self.finalize(details, score, hits)

        return CategoryResult(
            category=self.category,
            score=score,
            issues=tuple(self._issue(h) for h in hits),
            details=details,
        )

    @abstractmethod
    def collect(self, snapshot: PageSnapshot) -> dict[str, Any]:
        """Measure the snapshot. The returned dict becomes CategoryResult.details."""
        ...

    @abstractmethod
    def evaluate(self, snapshot: PageSnapshot, details: dict[str, Any]) -> list[Hit]:
        """Return the rules that fire, in report order."""
        ...

    def finalize(self, details: dict[str, Any], score: int, hits: list[Hit]) -> None:
        """Add details that depend on the final score. No-op by default."""

    # ── Convenience factory ───────────────────────────────────────────────────

    def hit(self, key: str, count: int = 1, **params) -> Hit:
        return Hit(self.rules[key], count, params)

    def _issue(self, hit: Hit) -> Issue:
        rule = hit.rule
        return Issue(
            category=self.category,
            issue_type=rule.issue_type,
            priority=rule.priority,
            message=rule.message.format(count=hit.count, **hit.params),
            impact=rule.impact,
            solution=rule.solution,
            location=rule.location,
        )


def degraded_result(category: str, error: BaseException) -> CategoryResult:
    """Stand-in result for a category whose analyzer failed or never finished."""
    label = type(error).__name__
    return CategoryResult(
        category=category,
        score=DEGRADED_SCORE,
        issues=(Issue(
            category=category,
            issue_type=IssueType.ERROR,
            priority=Priority.HIGH,
            message="Analysis error: this category could not be fully analysed.",
            impact="A technical problem prevented a complete analysis of this category.",
            solution="Run the audit again later; if the problem persists, check that the page loads correctly.",
        ),),
        details={"error": f"{label}: {error}" if str(error) else label},
    )
