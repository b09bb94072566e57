"""
Converts an AuditReport into the JSON report structure (camelCase keys).
"""
from __future__ import annotations

import json
from typing import Any

from models import (
    AuditReport,
    CategoryResult,
    Issue,
    PrioritizedRecommendations,
    ROIItem,
    RoadmapPhase,
    Task,
)


def report_to_dict(report: AuditReport) -> dict[str, Any]:
    return {
        "url": report.url,
        "generatedAt": report.generated_at.isoformat() if report.generated_at else None,
        "overall": {"score": report.overall.score, "grade": report.overall.grade},
        "categories": {cat: category_to_dict(result) for cat, result in report.categories.items()},
        "prioritizedRecommendations": recommendations_to_dict(report.recommendations),
    }


def report_to_json(report: AuditReport, indent: int = 2) -> str:
    return json.dumps(report_to_dict(report), indent=indent, ensure_ascii=False)


# ── Pieces ────────────────────────────────────────────────────────────────────

def category_to_dict(result: CategoryResult) -> dict[str, Any]:
    return {
        "name": result.name,
        "score": result.score,
        "issues": [issue_to_dict(i) for i in result.issues],
        "details": _camelize_keys(result.details),
    }


def issue_to_dict(issue: Issue) -> dict[str, Any]:
    out = {
        "category": issue.category,
        "type": issue.issue_type,
        "priority": issue.priority,
        "message": issue.message,
        "impact": issue.impact,
        "solution": issue.solution,
    }
    if issue.location:
        out["location"] = issue.location
    return out


def task_to_dict(task: Task) -> dict[str, Any]:
    return {
        "category": task.category,
        "task": task.task,
        "solution": task.solution,
        "difficulty": task.difficulty,
        "estimatedHours": task.estimated_hours,
        "priority": task.priority,
        "impactScore": task.impact_score,
    }


def recommendations_to_dict(recs: PrioritizedRecommendations) -> dict[str, Any]:
    return {
        "immediate": [task_to_dict(t) for t in recs.immediate],
        "shortTerm": [task_to_dict(t) for t in recs.short_term],
        "mediumTerm": [task_to_dict(t) for t in recs.medium_term],
        "longTerm": [task_to_dict(t) for t in recs.long_term],
        "potentialImprovement": {
            cat: {
                "currentScore": imp.current_score,
                "potentialScore": imp.potential_score,
                "improvement": imp.improvement,
            }
            for cat, imp in recs.potential_improvement.items()
        },
        "categoryPriority": [
            {
                "category": row.category,
                "name": row.name,
                "score": row.score,
                "criticalIssues": row.critical_issues,
                "highIssues": row.high_issues,
                "totalIssues": row.total_issues,
            }
            for row in recs.category_priority
        ],
        "roadmap": {phase.key: _phase_to_dict(phase) for phase in recs.roadmap},
        "highROI": [_roi_to_dict(item) for item in recs.high_roi],
        "totalIssues": recs.total_issues,
    }


def _phase_to_dict(phase: RoadmapPhase) -> dict[str, Any]:
    return {
        "title": phase.title,
        "description": phase.description,
        "tasks": [task_to_dict(t) for t in phase.tasks],
        "estimatedHours": phase.estimated_hours,
        "expectedImprovement": phase.expected_improvement,
    }


def _roi_to_dict(item: ROIItem) -> dict[str, Any]:
    return {
        "category": item.category,
        "improvement": item.improvement,
        "solution": item.solution,
        "estimatedHours": item.estimated_hours,
        "expectedImpact": item.expected_impact,
        "roiScore": item.roi_score,
    }


# ── Helpers ───────────────────────────────────────────────────────────────────

def _camel(snake: str) -> str:
    head, *rest = snake.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def _camelize_keys(value: Any) -> Any:
    if isinstance(value, dict):
        return {(_camel(k) if isinstance(k, str) else k): _camelize_keys(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_camelize_keys(v) for v in value]
    return value
