from dataclasses import replace
from datetime import timedelta

from models import OverallReport, PrioritizedRecommendations, AuditReport
from storage.store import AuditRecord, AuditStatus, InMemoryStore


def _report(url="https://example.com/"):
    return AuditReport(url=url, overall=OverallReport(score=80, grade="B"), recommendations=PrioritizedRecommendations())


class TestAuditRecord:
    def test_lifecycle(self):
        record = AuditRecord.start("https://example.com/")

        assert record.status == AuditStatus.RUNNING
        assert record.completed_at is None

        done = record.complete(_report())
        assert done.id == record.id
        assert done.status == AuditStatus.COMPLETED
        assert done.report.overall.grade == "B"
        assert done.completed_at >= done.started_at

    def test_failure_keeps_the_error(self):
        failed = AuditRecord.start("https://example.com/").fail("HTTP 500")

        assert failed.status == AuditStatus.FAILED
        assert failed.error == "HTTP 500"
        assert failed.report is None


class TestInMemoryStore:
    def test_save_replaces_by_id(self):
        store = InMemoryStore()
        record = AuditRecord.start("https://example.com/")
        store.save(record)
        store.save(record.complete(_report()))

        assert len(store.list()) == 1
        assert store.get(record.id).status == AuditStatus.COMPLETED

    def test_get_unknown_id(self):
        assert InMemoryStore().get("nope") is None

    def test_list_newest_first(self):
        store = InMemoryStore()
        first = AuditRecord.start("https://a.example/")
        second = replace(AuditRecord.start("https://b.example/"), started_at=first.started_at + timedelta(seconds=5))
        store.save(first)
        store.save(second)

        assert [r.url for r in store.list()] == ["https://b.example/", "https://a.example/"]
        assert [r.url for r in store.list(limit=1)] == ["https://b.example/"]
