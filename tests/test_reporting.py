import json
from datetime import datetime, timezone

import pytest

from analyzers.orchestrator import audit_snapshot
from models import Category, Issue
from reporting.exporter import (
    categories_to_df,
    issues_to_df,
    roadmap_to_df,
    roi_to_df,
    tasks_to_df,
    to_csv_bytes,
)
from reporting.serializer import issue_to_dict, report_to_dict, report_to_json


@pytest.fixture
def report(make_snapshot, page_html):
    snapshot = make_snapshot(page_html(title=None, description=None), headers={"Content-Type": "text/html"})
    return audit_snapshot(snapshot, generated_at=datetime(2024, 1, 1, tzinfo=timezone.utc))


class TestSerializer:
    def test_top_level_shape(self, report):
        data = report_to_dict(report)

        assert list(data) == ["url", "generatedAt", "overall", "categories", "prioritizedRecommendations"]
        assert data["generatedAt"] == "2024-01-01T00:00:00+00:00"
        assert data["overall"] == {"score": report.overall.score, "grade": report.overall.grade}
        assert list(data["categories"]) == list(Category.ALL)

    def test_category_details_use_camel_case(self, report):
        seo = report_to_dict(report)["categories"]["seo"]

        assert seo["score"] == 65
        assert seo["details"]["titleLength"] == 0
        assert "openGraph" in seo["details"]
        assert report_to_dict(report)["categories"]["accessibility"]["details"]["wcagLevel"] in ("A", "AA", "AAA")

    def test_recommendations_shape(self, report):
        recs = report_to_dict(report)["prioritizedRecommendations"]

        assert set(recs) == {
            "immediate", "shortTerm", "mediumTerm", "longTerm", "potentialImprovement",
            "categoryPriority", "roadmap", "highROI", "totalIssues",
        }
        assert list(recs["roadmap"]) == ["phase1", "phase2", "phase3", "phase4"]
        assert set(recs["immediate"][0]) == {
            "category", "task", "solution", "difficulty", "estimatedHours", "priority", "impactScore",
        }
        assert recs["totalIssues"] == len(report.all_issues)

    def test_json_round_trips_through_the_parser(self, report):
        assert json.loads(report_to_json(report))["url"] == "https://example.com/"

    def test_location_only_when_present(self):
        issue = Issue(Category.SEO, "info", "low", "msg", "impact", "fix")

        assert "location" not in issue_to_dict(issue)
        assert issue_to_dict(Issue(Category.SEO, "info", "low", "m", "i", "f", "<head>"))["location"] == "<head>"


class TestExporter:
    def test_categories(self, report):
        df = categories_to_df(report)

        assert len(df) == 9
        seo = df[df["Category"] == "SEO"].iloc[0]
        assert seo["Score"] == 65
        assert seo["Potential Score"] == 90

    def test_issues_sorted_by_priority(self, report):
        df = issues_to_df(report)
        ranks = {"CRITICAL": 4, "HIGH": 3, "MEDIUM": 2, "LOW": 1, "INFO": 0}

        assert len(df) == len(report.all_issues)
        assert list(df["Priority"].map(ranks)) == sorted(df["Priority"].map(ranks), reverse=True)

    def test_tasks_roi_and_roadmap(self, report):
        tasks = tasks_to_df(report)

        assert set(tasks["Bucket"]) <= {"Immediate", "Short Term", "Medium Term", "Long Term"}
        assert len(roi_to_df(report)) == len(report.recommendations.high_roi)
        assert list(roadmap_to_df(report)["Tasks"]) == [len(p.tasks) for p in report.recommendations.roadmap]

    def test_empty_report_exports_headers_only(self, make_snapshot):
        report = audit_snapshot(make_snapshot())
        df = issues_to_df(report)

        assert df.empty
        assert to_csv_bytes(df).decode("utf-8").startswith("Priority,Type,Category")

    def test_csv_bytes(self, report):
        csv = to_csv_bytes(categories_to_df(report)).decode("utf-8")

        assert csv.splitlines()[0] == "Category,Score,Rating,Potential Score,Critical,High,Issues"
