import threading
from datetime import datetime, timezone

import pytest

from analyzers.base import BaseAnalyzer, Rule, rule_table
from analyzers.orchestrator import ANALYZERS, audit_snapshot, run_all_analyzers
from models import AuditConfig, Category
from reporting.serializer import report_to_json

FIXED_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


class ExplodingAnalyzer(BaseAnalyzer):
    category = Category.SEO

    def collect(self, snapshot):
        raise RuntimeError("parser exploded")

    def evaluate(self, snapshot, details):
        return []


class BlockingAnalyzer(BaseAnalyzer):
    category = Category.PERFORMANCE

    def __init__(self, release):
        self.release = release

    def collect(self, snapshot):
        self.release.wait(5)
        return {}

    def evaluate(self, snapshot, details):
        return []


class OneIssueAnalyzer(BaseAnalyzer):
    category = Category.MOBILE
    rules = rule_table(Rule(
        "always", "warning", "medium", 10,
        "Always fires.", "None.", "Set something.",
    ))

    def collect(self, snapshot):
        return {"checked": True}

    def evaluate(self, snapshot, details):
        return [self.hit("always")]


def test_results_follow_category_order(make_snapshot):
    results = run_all_analyzers(make_snapshot())

    assert [r.category for r in results] == list(Category.ALL)
    assert all(r.score == 100 for r in results)


def test_core_configuration_runs_five_categories(make_snapshot):
    results = run_all_analyzers(make_snapshot(), AuditConfig(categories=Category.CORE))

    assert [r.category for r in results] == list(Category.CORE)


def test_no_enabled_categories(make_snapshot):
    assert run_all_analyzers(make_snapshot(), AuditConfig(categories=())) == []


def test_failing_analyzer_is_degraded(make_snapshot):
    registry = {Category.SEO: ExplodingAnalyzer(), Category.MOBILE: OneIssueAnalyzer()}
    results = run_all_analyzers(make_snapshot(), analyzers=registry)
    seo, mobile = results

    assert seo.score == 50
    assert len(seo.issues) == 1
    assert seo.issues[0].issue_type == "error"
    assert seo.issues[0].priority == "high"
    assert seo.details["error"] == "RuntimeError: parser exploded"
    assert mobile.score == 90


def test_slow_analyzer_times_out(make_snapshot):
    release = threading.Event()
    registry = {Category.PERFORMANCE: BlockingAnalyzer(release), Category.MOBILE: OneIssueAnalyzer()}
    try:
        results = run_all_analyzers(make_snapshot(), AuditConfig(analyzer_timeout=0.2), analyzers=registry)
    finally:
        release.set()

    performance, mobile = results
    assert performance.score == 50
    assert performance.details["error"].startswith("TimeoutError")
    assert mobile.score == 90


def test_audit_snapshot_builds_full_report(make_snapshot, page_html):
    report = audit_snapshot(make_snapshot(page_html(title=None, description=None)), generated_at=FIXED_TIME)

    assert report.url == "https://example.com/"
    assert report.generated_at == FIXED_TIME
    assert report.categories[Category.SEO].score == 65
    assert report.recommendations.total_issues == len(report.all_issues)
    assert report.recommendations.immediate[0].priority == "critical"


def test_clean_page_report(make_snapshot):
    report = audit_snapshot(make_snapshot(), generated_at=FIXED_TIME)

    assert report.overall.score == 100
    assert report.overall.grade == "A"
    assert report.recommendations.total_issues == 0


@pytest.mark.parametrize("html", [None, "<html><body><p>Short.</p></body></html>"])
def test_same_snapshot_same_report(make_snapshot, html):
    first = audit_snapshot(make_snapshot(html), generated_at=FIXED_TIME)
    second = audit_snapshot(make_snapshot(html), generated_at=FIXED_TIME)

    assert report_to_json(first) == report_to_json(second)


def test_registry_covers_every_category():
    assert list(ANALYZERS) == list(Category.ALL)
    assert all(ANALYZERS[c].category == c for c in Category.ALL)
