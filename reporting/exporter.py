"""
Converts AuditReport data to Pandas DataFrames and CSV bytes for export.
"""
from __future__ import annotations

import io

import pandas as pd

from models import AuditReport, Category, Priority
from scoring.scorer import score_label

_ISSUE_COLUMNS = ["Priority", "Type", "Category", "Issue", "Impact", "Solution", "Location"]
_TASK_COLUMNS = ["Bucket", "Priority", "Category", "Task", "Solution", "Difficulty", "Hours", "Impact Score"]
_ROI_COLUMNS = ["Category", "Improvement", "Solution", "Hours", "Expected Impact", "ROI Score"]


# ── Categories ────────────────────────────────────────────────────────────────

def categories_to_df(report: AuditReport) -> pd.DataFrame:
    rows = []
    for category, result in report.categories.items():
        potential = report.recommendations.potential_improvement.get(category)
        rows.append({
            "Category":        result.name,
            "Score":           result.score,
            "Rating":          score_label(result.score),
            "Potential Score": potential.potential_score if potential else result.score,
            "Critical":        result.count(Priority.CRITICAL),
            "High":            result.count(Priority.HIGH),
            "Issues":          len(result.issues),
        })
    return pd.DataFrame(rows, columns=[
        "Category", "Score", "Rating", "Potential Score", "Critical", "High", "Issues",
    ])


# ── Issues DataFrame ───────────────────────────────────────────────────────────

def issues_to_df(report: AuditReport) -> pd.DataFrame:
    issues = report.all_issues
    if not issues:
        return pd.DataFrame(columns=_ISSUE_COLUMNS)

    rows = []
    for issue in issues:
        rows.append({
            "Priority": issue.priority.upper(),
            "Type":     issue.issue_type,
            "Category": Category.label(issue.category),
            "Issue":    issue.message,
            "Impact":   issue.impact,
            "Solution": issue.solution,
            "Location": issue.location or "",
        })

    df = pd.DataFrame(rows, columns=_ISSUE_COLUMNS)

    # Priority sort order; ties keep canonical category order
    df["_order"] = df["Priority"].str.lower().map(lambda p: -Priority.RANK[p])
    df = df.sort_values("_order", kind="stable").drop(columns=["_order"])
    return df.reset_index(drop=True)


# ── Plan ──────────────────────────────────────────────────────────────────────

def tasks_to_df(report: AuditReport) -> pd.DataFrame:
    recs = report.recommendations
    buckets = [
        ("immediate", recs.immediate),
        ("short_term", recs.short_term),
        ("medium_term", recs.medium_term),
        ("long_term", recs.long_term),
    ]
    rows = [
        {
            "Bucket":       _humanize(bucket),
            "Priority":     task.priority.upper(),
            "Category":     task.category_name,
            "Task":         task.task,
            "Solution":     task.solution,
            "Difficulty":   task.difficulty,
            "Hours":        task.estimated_hours,
            "Impact Score": task.impact_score,
        }
        for bucket, tasks in buckets
        for task in tasks
    ]
    return pd.DataFrame(rows, columns=_TASK_COLUMNS)


def roi_to_df(report: AuditReport) -> pd.DataFrame:
    rows = [
        {
            "Category":        item.category_name,
            "Improvement":     item.improvement,
            "Solution":        item.solution,
            "Hours":           item.estimated_hours,
            "Expected Impact": item.expected_impact,
            "ROI Score":       item.roi_score,
        }
        for item in report.recommendations.high_roi
    ]
    return pd.DataFrame(rows, columns=_ROI_COLUMNS)


def roadmap_to_df(report: AuditReport) -> pd.DataFrame:
    rows = [
        {
            "Phase":                phase.title,
            "Tasks":                len(phase.tasks),
            "Hours":                phase.estimated_hours,
            "Expected Improvement": phase.expected_improvement,
        }
        for phase in report.recommendations.roadmap
    ]
    return pd.DataFrame(rows, columns=["Phase", "Tasks", "Hours", "Expected Improvement"])


# ── CSV export ─────────────────────────────────────────────────────────────────

def to_csv_bytes(df: pd.DataFrame) -> bytes:
    buf = io.StringIO()
    df.to_csv(buf, index=False)
    return buf.getvalue().encode("utf-8")


# ── Helpers ────────────────────────────────────────────────────────────────────

def _humanize(snake: str) -> str:
    """Convert snake_case to Title Case for display."""
    return snake.replace("_", " ").title()
