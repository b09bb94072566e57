import pytest

from crawler.fetcher import FetchError
from fakes import FakeResponse, FakeSession, html_response
from models import AuditConfig, Category
from pipeline import normalize_url, run_audit
from storage.store import AuditStatus, InMemoryStore

PAGE = "https://example.com/"


@pytest.mark.parametrize("raw,expected", [
    ("example.com", "https://example.com"),
    ("  https://example.com/a ", "https://example.com/a"),
    ("HTTP://example.com", "HTTP://example.com"),
    ("", ""),
])
def test_normalize_url(raw, expected):
    assert normalize_url(raw) == expected


def test_clean_page_end_to_end(page_html, secure_headers):
    session = FakeSession({PAGE: html_response(page_html(), headers=secure_headers)}, head_routes={
        "https://example.com/img/plane.jpg": FakeResponse(200, headers={"Content-Length": "1000"}),
    })
    store = InMemoryStore()
    report = run_audit(PAGE, store=store, session=session)

    assert report.overall.score == 100
    assert report.overall.grade == "A"
    assert list(report.categories) == list(Category.ALL)

    records = store.list()
    assert len(records) == 1
    assert records[0].status == AuditStatus.COMPLETED
    assert records[0].report is report


def test_core_configuration(page_html, secure_headers):
    session = FakeSession({PAGE: html_response(page_html(title=None), headers=secure_headers)})
    report = run_audit("example.com/", config=AuditConfig(categories=Category.CORE), session=session)

    assert list(report.categories) == list(Category.CORE)
    assert report.categories[Category.SEO].score == 80


def test_fetch_failure_is_recorded_and_raised():
    session = FakeSession({PAGE: FakeResponse(503, "down", {"Content-Type": "text/html"})})
    store = InMemoryStore()

    with pytest.raises(FetchError):
        run_audit(PAGE, store=store, session=session)

    record = store.list()[0]
    assert record.status == AuditStatus.FAILED
    assert "HTTP 503" in record.error


def test_unexpected_failure_is_recorded_and_raised(monkeypatch, page_html, secure_headers):
    def crash(snapshot, config):
        raise RuntimeError("aggregation broke")

    monkeypatch.setattr("pipeline.audit_snapshot", crash)
    session = FakeSession({PAGE: html_response(page_html(), headers=secure_headers)})
    store = InMemoryStore()

    with pytest.raises(RuntimeError):
        run_audit(PAGE, store=store, session=session)

    record = store.list()[0]
    assert record.status == AuditStatus.FAILED
    assert record.error == "RuntimeError: aggregation broke"


def test_malformed_redirect_is_recorded_as_fetch_failure():
    session = FakeSession({PAGE: FakeResponse(302, headers={"Location": "http://[broken/"})})
    store = InMemoryStore()

    with pytest.raises(FetchError):
        run_audit(PAGE, store=store, session=session)

    assert store.list()[0].status == AuditStatus.FAILED


def test_empty_url():
    with pytest.raises(ValueError):
        run_audit("   ")
