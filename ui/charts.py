"""
Plotly chart builders for the page audit dashboard.
All functions return plotly Figure objects.
"""
from __future__ import annotations

import plotly.graph_objects as go

from models import AuditReport, Priority
from scoring.scorer import score_color

_BG = "#1A1D27"
_PAPER = "#0E1117"
_GRID = "#2A2D3A"
_TEXT = "#FAFAFA"


def _base_layout(**kwargs) -> dict:
    return {
        "paper_bgcolor": _PAPER,
        "plot_bgcolor":  _BG,
        "font": {"color": _TEXT, "family": "sans-serif"},
        "margin": {"l": 20, "r": 20, "t": 40, "b": 20},
        **kwargs,
    }


def _title(text: str) -> dict:
    return {"text": text, "x": 0.5, "xanchor": "center", "font": {"size": 14, "color": _TEXT}}


# ── Overall score gauge ────────────────────────────────────────────────────────

def overall_score_gauge(score: float, grade: str) -> go.Figure:
    color = score_color(score)
    fig = go.Figure(go.Indicator(
        mode="gauge+number",
        value=score,
        domain={"x": [0, 1], "y": [0, 1]},
        number={"font": {"size": 48, "color": color}, "suffix": f" ({grade})"},
        gauge={
            "axis": {"range": [0, 100], "tickcolor": _TEXT, "tickfont": {"color": _TEXT}},
            "bar": {"color": color, "thickness": 0.25},
            "bgcolor": _BG,
            "borderwidth": 2,
            "bordercolor": _GRID,
            "steps": [
                {"range": [0, 60],   "color": "#3A1A1A"},
                {"range": [60, 70],  "color": "#3A2E1A"},
                {"range": [70, 80],  "color": "#333A1A"},
                {"range": [80, 90],  "color": "#2A3A1A"},
                {"range": [90, 100], "color": "#1A3A1A"},
            ],
        },
    ))
    fig.update_layout(**_base_layout(height=260), title=_title("Overall Score"))
    return fig


# ── Category scores (current vs. potential) ───────────────────────────────────

def category_scores_bar(report: AuditReport) -> go.Figure:
    if not report.categories:
        return _empty_chart("No categories analysed")

    names, current, extra, colors = [], [], [], []
    for category, result in report.categories.items():
        potential = report.recommendations.potential_improvement.get(category)
        names.append(result.name)
        current.append(result.score)
        extra.append(potential.potential_score - result.score if potential else 0)
        colors.append(score_color(result.score))

    fig = go.Figure()
    fig.add_trace(go.Bar(
        y=names,
        x=current,
        name="Current",
        orientation="h",
        marker_color=colors,
        hovertemplate="<b>%{y}</b><br>Score: %{x}<extra></extra>",
    ))
    fig.add_trace(go.Bar(
        y=names,
        x=extra,
        name="Potential gain",
        orientation="h",
        marker_color="#6C63FF",
        opacity=0.45,
        hovertemplate="<b>%{y}</b><br>+%{x} if fixed<extra></extra>",
    ))
    fig.update_layout(
        **_base_layout(height=max(300, len(names) * 38 + 80)),
        title=_title("Category Scores"),
        barmode="stack",
        legend={"orientation": "h", "y": -0.15, "font": {"color": _TEXT}},
        xaxis={"title": "Score", "range": [0, 100], "gridcolor": _GRID, "color": _TEXT},
        yaxis={"gridcolor": _GRID, "color": _TEXT, "automargin": True, "autorange": "reversed"},
    )
    return fig


# ── Issues by priority donut ───────────────────────────────────────────────────

def issues_by_priority_donut(report: AuditReport) -> go.Figure:
    by_priority = report.issues_by_priority
    labels = [p.capitalize() for p in Priority.ALL]
    values = [len(by_priority[p]) for p in Priority.ALL]
    colors = [Priority.COLORS[p] for p in Priority.ALL]

    fig = go.Figure(go.Pie(
        labels=labels,
        values=values,
        hole=0.6,
        sort=False,
        marker={"colors": colors, "line": {"color": _BG, "width": 2}},
        hovertemplate="<b>%{label}</b>: %{value} issues<extra></extra>",
    ))
    total = sum(values)
    fig.update_layout(
        **_base_layout(height=260),
        title=_title("Issues by Priority"),
        annotations=[{
            "text": f"<b>{total}</b><br>Total",
            "x": 0.5, "y": 0.5,
            "font_size": 18,
            "font_color": _TEXT,
            "showarrow": False,
        }],
        legend={"font": {"color": _TEXT}},
        showlegend=True,
    )
    return fig


# ── Roadmap effort ─────────────────────────────────────────────────────────────

def roadmap_hours_bar(report: AuditReport) -> go.Figure:
    phases = report.recommendations.roadmap
    if not any(phase.tasks for phase in phases):
        return _empty_chart("Nothing to schedule")

    fig = go.Figure(go.Bar(
        x=[phase.title.split(":")[0] for phase in phases],
        y=[phase.estimated_hours for phase in phases],
        text=[f"{len(phase.tasks)} tasks" for phase in phases],
        textposition="outside",
        marker_color=["#FF4B4B", "#FF8800", "#FFA500", "#4B9EFF"][: len(phases)],
        hovertemplate="<b>%{x}</b><br>%{y:.1f} h<extra></extra>",
    ))
    fig.update_layout(
        **_base_layout(height=280),
        title=_title("Estimated Hours per Roadmap Phase"),
        xaxis={"gridcolor": _GRID, "color": _TEXT},
        yaxis={"title": "Hours", "gridcolor": _GRID, "color": _TEXT},
        showlegend=False,
    )
    return fig


# ── Helper ─────────────────────────────────────────────────────────────────────

def _empty_chart(message: str) -> go.Figure:
    fig = go.Figure()
    fig.add_annotation(text=message, x=0.5, y=0.5, showarrow=False, font={"color": _TEXT, "size": 14})
    fig.update_layout(**_base_layout(height=260))
    return fig
