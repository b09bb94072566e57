"""
Turns an OverallReport into a prioritized remediation plan.

Single synchronous pass, no I/O. Every step is a no-op on an empty issue list,
and all orderings use stable sorts with fixed keys so identical input always
yields identical output.
"""
from __future__ import annotations

from dataclasses import dataclass

from config import (
    BUCKET_CAPS,
    CATEGORY_WEIGHTS,
    EXPECTED_IMPACT,
    HIGH_ROI_LIMIT,
    IMPROVEMENT_POINTS,
    PRIORITY_WEIGHTS,
    ROADMAP_PHASES,
)
from models import (
    Category,
    CategoryImprovement,
    CategoryPriority,
    Issue,
    OverallReport,
    PrioritizedRecommendations,
    Priority,
    ROIItem,
    RoadmapPhase,
    Task,
)
from scoring.effort import estimate_difficulty, estimate_hours
from scoring.scorer import round_half_up

# Bucket each priority lands in
_BUCKET_FOR = {
    Priority.CRITICAL: "immediate",
    Priority.HIGH:     "short_term",
    Priority.MEDIUM:   "medium_term",
    Priority.LOW:      "long_term",
    Priority.INFO:     "long_term",
}


@dataclass(frozen=True)
class ScoredIssue:
    """An Issue seen through the prioritizer: its category score plus derived ranking data."""
    issue: Issue
    category_score: int
    impact: float
    difficulty: str
    hours: float

    @property
    def roi(self) -> int:
        return round_half_up(self.impact / self.hours * 10) if self.hours else 0

    def to_task(self) -> Task:
        return Task(
            category=self.issue.category,
            category_name=Category.label(self.issue.category),
            task=self.issue.message,
            solution=self.issue.solution,
            difficulty=self.difficulty,
            estimated_hours=self.hours,
            priority=self.issue.priority,
            impact_score=round(self.impact, 2),
        )


def impact_score(priority: str, category: str, category_score: int) -> float:
    weight = PRIORITY_WEIGHTS.get(priority, 0)
    return weight * CATEGORY_WEIGHTS.get(category, 1.0) * (100 - category_score) / 100


def prioritize(overall: OverallReport) -> PrioritizedRecommendations:
    scored = _flatten(overall)
    ordered = sorted(scored, key=lambda s: (-Priority.RANK[s.issue.priority], -s.impact))

    buckets = _bucket(ordered)
    return PrioritizedRecommendations(
        immediate=buckets["immediate"],
        short_term=buckets["short_term"],
        medium_term=buckets["medium_term"],
        long_term=buckets["long_term"],
        potential_improvement=_potential_improvement(overall),
        category_priority=_category_priority(overall),
        roadmap=_roadmap(ordered),
        high_roi=_high_roi(scored),
        total_issues=len(scored),
    )


# ── Steps ─────────────────────────────────────────────────────────────────────

def _flatten(overall: OverallReport) -> list[ScoredIssue]:
    out: list[ScoredIssue] = []
    for category in _canonical_order(overall):
        result = overall.categories[category]
        for issue in result.issues:
            difficulty = estimate_difficulty(issue.solution)
            out.append(ScoredIssue(
                issue=issue,
                category_score=result.score,
                impact=impact_score(issue.priority, issue.category, result.score),
                difficulty=difficulty,
                hours=estimate_hours(issue.priority, difficulty),
            ))
    return out


def _canonical_order(overall: OverallReport) -> list[str]:
    known = [c for c in Category.ALL if c in overall.categories]
    return known + [c for c in overall.categories if c not in Category.ALL]


def _bucket(ordered: list[ScoredIssue]) -> dict[str, tuple[Task, ...]]:
    grouped: dict[str, list[Task]] = {name: [] for name in BUCKET_CAPS}
    for scored in ordered:
        name = _BUCKET_FOR[scored.issue.priority]
        if len(grouped[name]) < BUCKET_CAPS[name]:
            grouped[name].append(scored.to_task())
    return {name: tuple(tasks) for name, tasks in grouped.items()}


def _potential_improvement(overall: OverallReport) -> dict[str, CategoryImprovement]:
    out: dict[str, CategoryImprovement] = {}
    for category in _canonical_order(overall):
        result = overall.categories[category]
        delta = sum(IMPROVEMENT_POINTS.get(issue.priority, 0) for issue in result.issues)
        out[category] = CategoryImprovement(
            current_score=result.score,
            potential_score=min(100, result.score + delta),
            improvement=delta,
        )
    return out


def _category_priority(overall: OverallReport) -> tuple[CategoryPriority, ...]:
    rows = [
        CategoryPriority(
            category=result.category,
            name=result.name,
            score=result.score,
            critical_issues=result.count(Priority.CRITICAL),
            high_issues=result.count(Priority.HIGH),
            total_issues=len(result.issues),
        )
        for result in overall.categories.values()
    ]
    rows.sort(key=lambda r: (-r.critical_issues, r.score, r.category))
    return tuple(rows)


def _high_roi(scored: list[ScoredIssue]) -> tuple[ROIItem, ...]:
    ranked = sorted(scored, key=lambda s: -s.roi)[:HIGH_ROI_LIMIT]
    return tuple(
        ROIItem(
            category=s.issue.category,
            category_name=Category.label(s.issue.category),
            improvement=s.issue.message,
            solution=s.issue.solution,
            estimated_hours=s.hours,
            expected_impact=EXPECTED_IMPACT.get(s.issue.priority, ""),
            roi_score=s.roi,
        )
        for s in ranked
    )


def _roadmap(ordered: list[ScoredIssue]) -> tuple[RoadmapPhase, ...]:
    phases = []
    for phase in ROADMAP_PHASES:
        categories = phase["categories"]
        selected = [
            s for s in ordered
            if s.issue.priority in phase["priorities"]
            and (categories is None or s.issue.category in categories)
        ][: phase["limit"]]
        tasks = tuple(s.to_task() for s in selected)
        phases.append(RoadmapPhase(
            key=phase["key"],
            title=phase["title"],
            description=phase["description"],
            tasks=tasks,
            estimated_hours=sum(t.estimated_hours for t in tasks),
            expected_improvement=phase["expected_improvement"],
        ))
    return tuple(phases)
