"""
Page Audit: Streamlit application
Scores one web page across nine quality categories and builds a remediation plan.
"""
from __future__ import annotations

from datetime import datetime

import pandas as pd
import streamlit as st

from models import AuditConfig, AuditReport, Category, Issue, IssueType, Priority
from crawler.fetcher import FetchError
from pipeline import run_audit as run_page_audit
from reporting.exporter import (
    categories_to_df,
    issues_to_df,
    roadmap_to_df,
    roi_to_df,
    tasks_to_df,
    to_csv_bytes,
)
from reporting.serializer import report_to_json
from scoring.scorer import score_color, score_label
from storage.store import AuditStatus, InMemoryStore
from ui.charts import (
    category_scores_bar,
    issues_by_priority_donut,
    overall_score_gauge,
    roadmap_hours_bar,
)
from config import DEFAULT_ANALYZER_TIMEOUT, DEFAULT_REQUEST_TIMEOUT, USER_AGENT_PRESETS

# ── Page config ────────────────────────────────────────────────────────────────
st.set_page_config(
    page_title="Page Audit",
    page_icon="🔍",
    layout="wide",
    initial_sidebar_state="expanded",
)

# ── Custom CSS ─────────────────────────────────────────────────────────────────
st.markdown("""
<style>
.block-container { padding-top: 1rem; }

/* Metric cards */
.metric-card {
    background: #1A1D27;
    border-radius: 10px;
    padding: 1rem 1.2rem;
    margin-bottom: 0.5rem;
    border-left: 4px solid;
}
.metric-card.critical { border-color: #FF4B4B; }
.metric-card.high     { border-color: #FF8800; }
.metric-card.medium   { border-color: #FFA500; }
.metric-card.low      { border-color: #4B9EFF; }
.metric-card.neutral  { border-color: #6C63FF; }

.metric-val  { font-size: 2rem; font-weight: 700; margin: 0; }
.metric-lbl  { font-size: 0.8rem; color: #888; text-transform: uppercase; letter-spacing: 0.05em; }

/* Priority pills */
.pill {
    display: inline-block;
    padding: 2px 10px;
    border-radius: 12px;
    font-size: 0.75rem;
    font-weight: 600;
    letter-spacing: 0.05em;
    text-transform: uppercase;
}
.pill.critical { background: #FF4B4B22; color: #FF4B4B; border: 1px solid #FF4B4B55; }
.pill.high     { background: #FF880022; color: #FF8800; border: 1px solid #FF880055; }
.pill.medium   { background: #FFA50022; color: #FFA500; border: 1px solid #FFA50055; }
.pill.low      { background: #4B9EFF22; color: #4B9EFF; border: 1px solid #4B9EFF55; }

.modebar { display: none !important; }

.sidebar-logo { font-size: 1.5rem; font-weight: 800; color: #6C63FF; margin-bottom: 0.5rem; }
</style>
""", unsafe_allow_html=True)


# ── State helpers ──────────────────────────────────────────────────────────────

@st.cache_resource
def get_store() -> InMemoryStore:
    return InMemoryStore()


def _clear_results():
    st.session_state.pop("audit_report", None)


def _has_result() -> bool:
    return st.session_state.get("audit_report") is not None


# ── Sidebar ────────────────────────────────────────────────────────────────────

def render_sidebar() -> tuple[str, AuditConfig] | None:
    with st.sidebar:
        st.markdown('<div class="sidebar-logo">🔍 Page Audit</div>', unsafe_allow_html=True)
        st.caption("Nine-category page quality audit")
        st.divider()

        st.subheader("Target")
        url = st.text_input(
            "Page URL",
            placeholder="https://example.com",
            help="Full URL including https://",
        )

        st.subheader("Scope")
        legacy = st.toggle(
            "Core categories only",
            value=False,
            help="SEO, performance, security, accessibility and mobile",
        )

        st.subheader("Advanced")
        timeout = st.slider("Request timeout (s)", 5, 60, DEFAULT_REQUEST_TIMEOUT, 5)
        analyzer_timeout = st.slider("Analysis timeout (s)", 5, 120, int(DEFAULT_ANALYZER_TIMEOUT), 5)
        fetch_css = st.toggle("Download stylesheets", value=True)
        ua_label = st.selectbox(
            "Fetch as",
            options=list(USER_AGENT_PRESETS.keys()),
            index=0,
        )
        user_agent = USER_AGENT_PRESETS[ua_label]
        st.caption(f"`{user_agent}`")

        st.divider()

        if _has_result():
            if st.button("🔄 New Audit", type="primary", use_container_width=True):
                _clear_results()
                st.rerun()
            st.divider()

        start = st.button("Start Audit", type="primary", use_container_width=True)

        if not _has_result():
            st.divider()
            st.caption("Enter a page URL and click **Start Audit**.")

    if start and url:
        return url, AuditConfig(
            categories=Category.CORE if legacy else Category.ALL,
            analyzer_timeout=float(analyzer_timeout),
            request_timeout=timeout,
            user_agent=user_agent,
            fetch_stylesheets=fetch_css,
        )

    return None


# ── Run audit ──────────────────────────────────────────────────────────────────

def run_audit(url: str, config: AuditConfig) -> None:
    with st.status("Running audit…", expanded=True) as status_widget:
        st.write(f"Fetching **{url}** and analysing…")
        try:
            report = run_page_audit(url, config=config, store=get_store())
        except FetchError as exc:
            status_widget.update(label="Audit failed", state="error")
            st.error(f"Could not fetch the page: {exc.reason}")
            return
        except ValueError as exc:
            status_widget.update(label="Audit failed", state="error")
            st.error(str(exc))
            return

        st.write(f"Found **{report.recommendations.total_issues}** issues.")
        status_widget.update(label="Audit complete!", state="complete")

    st.session_state.audit_report = report
    st.rerun()


# ── Dashboard: Overview ────────────────────────────────────────────────────────

def render_overview(report: AuditReport) -> None:
    by_priority = report.issues_by_priority
    overall = report.overall

    col_gauge, col_stats = st.columns([1, 2])

    with col_gauge:
        st.plotly_chart(overall_score_gauge(overall.score, overall.grade), use_container_width=True)
        color = score_color(overall.score)
        st.markdown(
            f'<div style="text-align:center;font-size:1.1rem;font-weight:700;color:{color}">'
            f'{score_label(overall.score)}</div>',
            unsafe_allow_html=True,
        )

    with col_stats:
        c1, c2, c3, c4 = st.columns(4)
        _metric_card(c1, "Grade",    overall.grade,                         "neutral")
        _metric_card(c2, "Critical", len(by_priority[Priority.CRITICAL]),   "critical")
        _metric_card(c3, "High",     len(by_priority[Priority.HIGH]),       "high")
        _metric_card(c4, "Medium",   len(by_priority[Priority.MEDIUM]),     "medium")

        hours = sum(phase.estimated_hours for phase in report.recommendations.roadmap)
        c5, c6, c7, c8 = st.columns(4)
        _metric_card(c5, "Low / Info",  len(by_priority[Priority.LOW]) + len(by_priority[Priority.INFO]), "low")
        _metric_card(c6, "Categories",  len(report.categories),                "neutral")
        _metric_card(c7, "Total Issues", report.recommendations.total_issues, "neutral")
        _metric_card(c8, "Roadmap",     f"{hours:.1f} h",                      "neutral")

    st.divider()
    c_left, c_right = st.columns(2)
    with c_left:
        st.plotly_chart(category_scores_bar(report), use_container_width=True)
    with c_right:
        st.plotly_chart(issues_by_priority_donut(report), use_container_width=True)

    st.divider()
    st.subheader("Immediate Actions")
    if report.recommendations.immediate:
        _render_task_table(report.recommendations.immediate)
    else:
        st.success("No critical issues found!")


# ── Dashboard: Categories ─────────────────────────────────────────────────────

def render_categories(report: AuditReport) -> None:
    st.dataframe(categories_to_df(report), use_container_width=True, hide_index=True)

    for row in report.recommendations.category_priority:
        result = report.categories[row.category]
        badge_html = " ".join(
            f'<span class="pill {p}">{result.count(p)} {p}</span>'
            for p in (Priority.CRITICAL, Priority.HIGH, Priority.MEDIUM, Priority.LOW)
            if result.count(p)
        )
        with st.expander(f"**{row.name}** — {result.score}/100 · {len(result.issues)} issues"):
            st.markdown(badge_html, unsafe_allow_html=True)
            if "error" in result.details:
                st.warning(f"Analysis degraded: {result.details['error']}")
            if result.category == Category.ACCESSIBILITY and "wcag_level" in result.details:
                st.markdown(f"**Estimated WCAG level:** {result.details['wcag_level']}")
            if result.issues:
                _render_issue_table(list(result.issues))
            else:
                st.success("No issues in this category.")
            with st.expander("Measurements"):
                st.json(result.details)


# ── Dashboard: Action plan ────────────────────────────────────────────────────

def render_plan(report: AuditReport) -> None:
    recs = report.recommendations
    sections = [
        ("Immediate (critical)",   recs.immediate),
        ("Short term (high)",      recs.short_term),
        ("Medium term (medium)",   recs.medium_term),
        ("Long term (low / info)", recs.long_term),
    ]
    for title, tasks in sections:
        st.subheader(f"{title} — {len(tasks)}")
        if tasks:
            _render_task_table(tasks)
        else:
            st.caption("Nothing here.")


def render_roadmap(report: AuditReport) -> None:
    st.plotly_chart(roadmap_hours_bar(report), use_container_width=True)

    for phase in report.recommendations.roadmap:
        with st.expander(f"**{phase.title}** — {len(phase.tasks)} tasks · {phase.estimated_hours:.1f} h"):
            st.markdown(f"{phase.description}  \n**Expected improvement:** {phase.expected_improvement}")
            if phase.tasks:
                _render_task_table(phase.tasks)

    st.divider()
    st.subheader("Highest ROI fixes")
    df_roi = roi_to_df(report)
    if df_roi.empty:
        st.success("Nothing to fix.")
    else:
        st.dataframe(df_roi, use_container_width=True, hide_index=True)


# ── Dashboard: History ────────────────────────────────────────────────────────

def render_history() -> None:
    records = get_store().list(limit=50)
    if not records:
        st.info("No audits yet.")
        return

    rows = []
    for record in records:
        rows.append({
            "Started":  record.started_at.strftime("%Y-%m-%d %H:%M:%S"),
            "URL":      record.url,
            "Status":   record.status,
            "Score":    record.report.overall.score if record.report else None,
            "Grade":    record.report.overall.grade if record.report else "",
            "Error":    record.error or "",
        })
    st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)

    completed = {r.id: r for r in records if r.status == AuditStatus.COMPLETED}
    if completed:
        choice = st.selectbox(
            "Open a previous audit",
            options=[""] + list(completed.keys()),
            format_func=lambda rid: "" if not rid else f"{completed[rid].url} ({completed[rid].started_at:%H:%M:%S})",
        )
        if choice and st.button("Open"):
            st.session_state.audit_report = completed[choice].report
            st.rerun()


# ── Dashboard: Export ─────────────────────────────────────────────────────────

def render_export(report: AuditReport) -> None:
    st.subheader("Export Data")
    stamp = datetime.now().strftime("%Y%m%d_%H%M")

    col1, col2, col3 = st.columns(3)
    with col1:
        st.download_button(
            "Download Report (JSON)",
            data=report_to_json(report).encode("utf-8"),
            file_name=f"audit_{stamp}.json",
            mime="application/json",
            use_container_width=True,
        )
    with col2:
        df_issues = issues_to_df(report)
        st.download_button(
            "Download All Issues (CSV)",
            data=to_csv_bytes(df_issues),
            file_name=f"issues_{stamp}.csv",
            mime="text/csv",
            use_container_width=True,
        )
        st.caption(f"{len(df_issues)} issues")
    with col3:
        st.download_button(
            "Download Action Plan (CSV)",
            data=to_csv_bytes(tasks_to_df(report)),
            file_name=f"plan_{stamp}.csv",
            mime="text/csv",
            use_container_width=True,
        )

    col4, col5, _ = st.columns(3)
    with col4:
        st.download_button(
            "Download Category Scores (CSV)",
            data=to_csv_bytes(categories_to_df(report)),
            file_name=f"categories_{stamp}.csv",
            mime="text/csv",
            use_container_width=True,
        )
    with col5:
        st.download_button(
            "Download Roadmap (CSV)",
            data=to_csv_bytes(roadmap_to_df(report)),
            file_name=f"roadmap_{stamp}.csv",
            mime="text/csv",
            use_container_width=True,
        )

    st.divider()
    st.subheader("All Issues Table")
    if not df_issues.empty:
        st.dataframe(df_issues, use_container_width=True, height=600, hide_index=True)


# ── Helpers ────────────────────────────────────────────────────────────────────

def _metric_card(col, label: str, value, card_class: str = "neutral") -> None:
    with col:
        st.markdown(
            f'<div class="metric-card {card_class}">'
            f'<div class="metric-lbl">{label}</div>'
            f'<div class="metric-val">{value}</div>'
            f'</div>',
            unsafe_allow_html=True,
        )


def _render_issue_table(issues: list[Issue]) -> None:
    rows = [
        {
            "Priority": i.priority.upper(),
            "Type":     f"{IssueType.ICONS.get(i.issue_type, '•')} {i.issue_type}",
            "Issue":    i.message,
            "Impact":   i.impact,
            "Solution": i.solution,
        }
        for i in issues
    ]
    st.dataframe(
        pd.DataFrame(rows),
        use_container_width=True,
        hide_index=True,
        height=min(600, len(rows) * 36 + 60),
        column_config={
            "Priority": st.column_config.TextColumn("Priority", width="small"),
            "Issue":    st.column_config.TextColumn("Issue",    width="large"),
            "Solution": st.column_config.TextColumn("Solution", width="large"),
        },
    )


def _render_task_table(tasks) -> None:
    rows = [
        {
            "Category":   t.category_name,
            "Task":       t.task,
            "Solution":   t.solution,
            "Difficulty": t.difficulty,
            "Hours":      t.estimated_hours,
            "Impact":     t.impact_score,
        }
        for t in tasks
    ]
    st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)


# ── Landing / empty state ──────────────────────────────────────────────────────

def render_landing() -> None:
    st.markdown("""
    <div style="text-align:center; padding: 4rem 2rem;">
        <div style="font-size:4rem">🔍</div>
        <h1 style="font-size:2.5rem; font-weight:800; color:#6C63FF; margin:0.5rem 0">Page Audit</h1>
        <p style="font-size:1.1rem; color:#888; max-width:600px; margin:0 auto 2rem">
            Scores a page on SEO, performance, security, accessibility, mobile, content,
            advanced performance, advanced security and business metrics, then turns the
            findings into a prioritized, phased remediation plan.
        </p>
    </div>
    """, unsafe_allow_html=True)

    col1, col2, col3, col4 = st.columns(4)
    _feature_card(col1, "📊", "9 Categories", "Scored 0–100 each, averaged into an A–F grade")
    _feature_card(col2, "🎯", "Prioritized", "Issues ranked by priority and weighted impact")
    _feature_card(col3, "🗺️", "Roadmap", "Four phases with effort estimates in hours")
    _feature_card(col4, "💰", "ROI", "The fixes with the best impact per hour")


def _feature_card(col, icon: str, title: str, desc: str) -> None:
    with col:
        st.markdown(
            f'<div class="metric-card neutral" style="text-align:center">'
            f'<div style="font-size:2rem">{icon}</div>'
            f'<div style="font-weight:700;margin:0.5rem 0">{title}</div>'
            f'<div style="font-size:0.85rem;color:#888">{desc}</div>'
            f'</div>',
            unsafe_allow_html=True,
        )


# ── Main ───────────────────────────────────────────────────────────────────────

def main():
    request = render_sidebar()

    if request is not None:
        _clear_results()
        run_audit(*request)
        return

    if not _has_result():
        render_landing()
        tab_history, = st.tabs(["History"])
        with tab_history:
            render_history()
        return

    report: AuditReport = st.session_state.audit_report

    n_crit = len(report.issues_by_priority[Priority.CRITICAL])
    st.title(f"Audit: {report.url}")
    st.caption(
        f"Score: **{report.overall.score}/100 ({report.overall.grade})** · "
        f"{report.recommendations.total_issues} issues · "
        f"{n_crit} critical"
    )

    tab_names = ["Overview", "Categories", "Action Plan", "Roadmap & ROI", "History", "Export"]
    tabs = st.tabs(tab_names)

    with tabs[0]:
        render_overview(report)

    with tabs[1]:
        render_categories(report)

    with tabs[2]:
        render_plan(report)

    with tabs[3]:
        render_roadmap(report)

    with tabs[4]:
        render_history()

    with tabs[5]:
        render_export(report)


if __name__ == "__main__":
    main()
