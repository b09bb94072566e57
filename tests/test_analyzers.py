import pytest

from analyzers.accessibility import AccessibilityAnalyzer, wcag_level
from analyzers.advanced_performance import AdvancedPerformanceAnalyzer
from analyzers.advanced_security import AdvancedSecurityAnalyzer
from analyzers.business import BusinessMetricsAnalyzer
from analyzers.content import ContentQualityAnalyzer
from analyzers.mobile import MobileAnalyzer
from analyzers.orchestrator import ANALYZERS
from analyzers.performance import PerformanceAnalyzer
from analyzers.security import SecurityAnalyzer
from analyzers.seo import SEOAnalyzer
from models import Category, Resource, RuntimeMetrics, TimingMarks

BARE_HTML = "<html><body><p>Short.</p></body></html>"


def _messages(result):
    return [issue.message for issue in result.issues]


@pytest.mark.parametrize("category", Category.ALL)
def test_clean_page_has_no_issues(make_snapshot, category):
    result = ANALYZERS[category].analyze(make_snapshot())

    assert result.category == category
    assert result.score == 100
    assert result.issues == ()


@pytest.mark.parametrize("category", Category.ALL)
def test_scores_stay_within_bounds_on_bare_page(make_snapshot, category):
    result = ANALYZERS[category].analyze(make_snapshot(BARE_HTML, url="http://example.com/", headers={}))

    assert 0 <= result.score <= 100
    assert all(issue.category == category for issue in result.issues)


_EMAIL = "<p>Write to sales@example.com.</p>"
_BLOCKING = '<script src="/a.js"></script>'
_LONG_FORM = '<form action="/quote">' + '<input type="text" name="f">' * 6 + "</form>"


def _broken_images(n):
    return tuple(Resource(kind="image", url=f"https://example.com/{i}.png", failed=True) for i in range(n))


# One triggering condition, then the same condition plus another
WORSENING = {
    Category.SEO: lambda page: [
        {"html": page(title=None)},
        {"html": page(title=None, description=None)},
    ],
    Category.SECURITY: lambda page: [
        {"headers": {"Content-Type": "text/html"}},
        {"headers": {"Content-Type": "text/html"}, "url": "http://example.com/"},
    ],
    Category.ACCESSIBILITY: lambda page: [
        {"html": page(lang="")},
        {"html": page(lang="", body_extra="<h4>Deep</h4>")},
    ],
    Category.PERFORMANCE: lambda page: [
        {"response_time_ms": 2500},
        {"response_time_ms": 2500, "timing": TimingMarks(fcp_s=1.0, lcp_s=1.5, cls=0.3)},
    ],
    Category.MOBILE: lambda page: [
        {"runtime": RuntimeMetrics(small_touch_targets=12)},
        {"runtime": RuntimeMetrics(small_touch_targets=12, horizontal_scroll=True)},
    ],
    Category.CONTENT_QUALITY: lambda page: [
        {"resources": _broken_images(1)},
        {"resources": _broken_images(3)},
    ],
    Category.ADVANCED_PERFORMANCE: lambda page: [
        {"html": page(head_extra=_BLOCKING)},
        {"html": page(head_extra=_BLOCKING), "runtime": RuntimeMetrics(long_task_durations_ms=(600.0, 600.0))},
    ],
    Category.ADVANCED_SECURITY: lambda page: [
        {"html": page(body_extra=_EMAIL)},
        {"html": page(body_extra=_EMAIL + "<script>eval('1+1')</script>")},
    ],
    Category.BUSINESS_METRICS: lambda page: [
        {"html": page(body_extra=_LONG_FORM)},
        {"html": page(body_extra=_LONG_FORM * 2)},
    ],
}


@pytest.mark.parametrize("category", Category.ALL)
def test_more_issues_never_raise_the_score(make_snapshot, page_html, category):
    analyzer = ANALYZERS[category]
    one, two = (analyzer.analyze(make_snapshot(**kwargs)) for kwargs in WORSENING[category](page_html))

    assert len(one.issues) >= 1
    assert one.score < 100
    assert two.score <= one.score
    assert len(two.issues) >= len(one.issues)


class TestSEOAnalyzer:
    def test_missing_title_and_description(self, make_snapshot, page_html):
        snapshot = make_snapshot(page_html(title=None, description=None))
        result = SEOAnalyzer().analyze(snapshot)

        assert result.score == 65
        assert [i.priority for i in result.issues] == ["critical", "high"]
        assert [i.issue_type for i in result.issues] == ["error", "error"]
        assert result.details["headings"]["h1"] == 1

    def test_long_title(self, make_snapshot, page_html):
        result = SEOAnalyzer().analyze(make_snapshot(page_html(title="x" * 75)))

        assert result.score == 90
        assert _messages(result) == ["Title is too long (75 characters)."]

    def test_multiple_h1(self, make_snapshot, page_html):
        result = SEOAnalyzer().analyze(make_snapshot(page_html(body_extra="<h1>Second</h1>")))

        assert result.score == 95
        assert _messages(result) == ["The page has 2 H1 headings."]

    def test_missing_alt_deduction_is_capped(self, make_snapshot, page_html):
        images = '<img src="/a.jpg">' * 15
        result = SEOAnalyzer().analyze(make_snapshot(page_html(body_extra=images)))

        assert result.score == 80
        assert result.details["images_without_alt"] == 15

    def test_plain_http(self, make_snapshot):
        result = SEOAnalyzer().analyze(make_snapshot(url="http://example.com/"))

        assert result.score == 90
        assert result.issues[0].priority == "high"


class TestSecurityAnalyzer:
    def test_missing_headers(self, make_snapshot):
        result = SecurityAnalyzer().analyze(make_snapshot(headers={"Content-Type": "text/html"}))

        assert result.score == 62
        assert len(result.issues) == 5

    def test_plain_http_page(self, make_snapshot):
        result = SecurityAnalyzer().analyze(make_snapshot(url="http://example.com/"))

        # the search form now submits over http as well
        assert result.score == 35
        assert [i.priority for i in result.issues] == ["critical", "critical"]

    def test_mixed_content(self, make_snapshot, page_html):
        html = page_html(body_extra='<img src="http://cdn.example.com/a.png" alt="logo">')
        result = SecurityAnalyzer().analyze(make_snapshot(html))

        assert result.score == 80
        assert result.details["mixed_content"] == 1

    def test_post_form_without_csrf_token(self, make_snapshot, page_html):
        form = (
            '<form method="post" action="/subscribe">'
            '<label for="e">Email</label><input id="e" name="email" type="email">'
            '{token}<button type="submit">Send</button></form>'
        )
        without = SecurityAnalyzer().analyze(make_snapshot(page_html(body_extra=form.format(token=""))))
        with_token = SecurityAnalyzer().analyze(make_snapshot(page_html(
            body_extra=form.format(token='<input type="hidden" name="csrf_token" value="abc">'),
        )))

        assert without.score == 90
        assert with_token.score == 100

    def test_cookie_advice_costs_nothing(self, make_snapshot, secure_headers):
        headers = dict(secure_headers, **{"Set-Cookie": "sid=1; Path=/"})
        result = SecurityAnalyzer().analyze(make_snapshot(headers=headers))

        assert result.score == 100
        assert [i.priority for i in result.issues] == ["medium"]


class TestAccessibilityAnalyzer:
    def test_clean_page_reaches_aaa(self, make_snapshot):
        result = AccessibilityAnalyzer().analyze(make_snapshot())

        assert result.details["wcag_level"] == "AAA"

    def test_missing_lang(self, make_snapshot, page_html):
        result = AccessibilityAnalyzer().analyze(make_snapshot(page_html(lang="")))

        assert result.score == 92
        assert result.details["wcag_level"] == "AA"

    def test_unlabeled_fields(self, make_snapshot, page_html):
        fields = '<input type="text" name="a"><input type="text" name="b"><input type="hidden" name="c">'
        result = AccessibilityAnalyzer().analyze(make_snapshot(page_html(body_extra=fields)))

        assert result.score == 90
        assert result.details["unlabeled_fields"] == 2
        assert result.details["wcag_level"] == "A"

    def test_skipped_heading_levels(self, make_snapshot, page_html):
        result = AccessibilityAnalyzer().analyze(make_snapshot(page_html(body_extra="<h4>Deep</h4>")))

        assert result.score == 90

    def test_missing_alt_cap(self, make_snapshot, page_html):
        result = AccessibilityAnalyzer().analyze(make_snapshot(page_html(body_extra='<img src="/a.jpg">' * 15)))

        assert result.score == 70

    def test_wcag_level_follows_the_final_score(self, make_snapshot):
        result = AccessibilityAnalyzer().analyze(make_snapshot(BARE_HTML, headers={}))

        assert result.details["wcag_level"] == wcag_level(result.score, [i.priority for i in result.issues])
        assert result.details["wcag_level"] == "A"

    @pytest.mark.parametrize("score,priorities,expected", [
        (100, [], "AAA"),
        (96, ["high"], "AA"),
        (90, ["medium"], "AA"),
        (90, ["critical"], "A"),
        (80, [], "A"),
    ])
    def test_wcag_level(self, score, priorities, expected):
        assert wcag_level(score, priorities) == expected


class TestPerformanceAnalyzer:
    def test_slow_page_without_timing_marks(self, make_snapshot):
        result = PerformanceAnalyzer().analyze(make_snapshot(response_time_ms=6000))

        assert result.score == 30
        assert [i.priority for i in result.issues] == ["critical", "high", "high"]
        assert result.details["fcp_measured"] is False

    def test_improvable_load_time(self, make_snapshot):
        result = PerformanceAnalyzer().analyze(make_snapshot(response_time_ms=2500))

        assert result.score == 90

    def test_layout_shift(self, make_snapshot):
        snapshot = make_snapshot(timing=TimingMarks(fcp_s=1.0, lcp_s=1.5, cls=0.3))
        result = PerformanceAnalyzer().analyze(snapshot)

        assert result.score == 75

    def test_heavy_images(self, make_snapshot):
        image = Resource(kind="image", url="https://example.com/big.png", transfer_size=3 * 1024 * 1024)
        result = PerformanceAnalyzer().analyze(make_snapshot(resources=(image,)))

        assert result.score == 90
        assert result.details["image_bytes"] == 3 * 1024 * 1024


class TestMobileAnalyzer:
    def test_bare_page(self, make_snapshot):
        result = MobileAnalyzer().analyze(make_snapshot(BARE_HTML))

        assert result.score == 25
        assert result.issues[0].priority == "critical"

    def test_zoom_disabled(self, make_snapshot):
        html = (
            '<html><head><meta name="viewport" content="width=device-width, initial-scale=1, user-scalable=no">'
            "<style>body { display: grid; width: 100%; } @media (max-width: 600px) { body { display: block; } }"
            "</style></head><body><p>Hi</p></body></html>"
        )
        result = MobileAnalyzer().analyze(make_snapshot(html))

        assert result.score == 90
        assert _messages(result) == ["User zoom is disabled (user-scalable=no)."]

    def test_runtime_measurements(self, make_snapshot):
        runtime = RuntimeMetrics(small_touch_targets=12, small_text_ratio=0.5, horizontal_scroll=True)
        result = MobileAnalyzer().analyze(make_snapshot(runtime=runtime))

        assert result.score == 53
        assert "50% of the text is smaller than 16 px." in _messages(result)


class TestContentQualityAnalyzer:
    def test_bare_page(self, make_snapshot):
        result = ContentQualityAnalyzer().analyze(make_snapshot(BARE_HTML))

        assert result.score == 51

    def test_broken_images(self, make_snapshot):
        broken = tuple(
            Resource(kind="image", url=f"https://example.com/{n}.png", failed=True) for n in range(2)
        )
        result = ContentQualityAnalyzer().analyze(make_snapshot(resources=broken))

        assert result.score == 90
        assert result.details["broken_images"] == 2

    def test_script_text_is_not_counted(self, make_snapshot, page_html):
        analyzer = ContentQualityAnalyzer()
        plain = analyzer.analyze(make_snapshot())
        scripted = analyzer.analyze(make_snapshot(page_html(body_extra="<script>var x = 1;</script>")))

        assert scripted.details["text"] == plain.details["text"]
        assert scripted.score == 100


class TestAdvancedPerformanceAnalyzer:
    def test_long_tasks(self, make_snapshot):
        runtime = RuntimeMetrics(long_task_durations_ms=(600.0, 600.0))
        result = AdvancedPerformanceAnalyzer().analyze(make_snapshot(runtime=runtime))

        assert result.score == 70
        assert result.details["long_tasks"]["total_ms"] == 1200.0

    def test_heap_rules_do_not_stack(self, make_snapshot):
        runtime = RuntimeMetrics(js_heap_used_mb=90.0, js_heap_limit_mb=100.0)
        result = AdvancedPerformanceAnalyzer().analyze(make_snapshot(runtime=runtime))

        assert result.score == 75
        assert len(result.issues) == 1

    def test_render_blocking_scripts(self, make_snapshot, page_html):
        head = '<script src="/a.js"></script><script src="/b.js" defer></script>'
        result = AdvancedPerformanceAnalyzer().analyze(make_snapshot(page_html(head_extra=head)))

        assert result.score == 95
        assert result.details["render_blocking_scripts"] == 1

    def test_low_cache_hit_rate(self, make_snapshot):
        resources = tuple(
            Resource(kind="image", url=f"https://example.com/{n}.png", cached=n < 3) for n in range(12)
        )
        result = AdvancedPerformanceAnalyzer().analyze(make_snapshot(resources=resources))

        assert result.score == 95
        assert result.details["cache"]["hit_rate"] == 25
        assert _messages(result) == ["Low cache hit rate (25%)."]

    def test_unrequested_resources_do_not_count_towards_cache_rate(self, make_snapshot):
        scripts = tuple(Resource(kind="script", url=f"https://example.com/{n}.js") for n in range(12))
        images = tuple(Resource(kind="image", url=f"https://example.com/{n}.png", cached=True) for n in range(2))
        result = AdvancedPerformanceAnalyzer().analyze(make_snapshot(resources=scripts + images))

        assert result.score == 100
        assert result.details["cache"] == {
            "total_resources": 14,
            "measured_resources": 2,
            "cached_resources": 2,
            "hit_rate": 100,
        }


class TestAdvancedSecurityAnalyzer:
    def test_exposed_contact_data(self, make_snapshot, page_html):
        html = page_html(body_extra="<p>Write to sales@example.com or call 555-123-4567.</p>")
        result = AdvancedSecurityAnalyzer().analyze(make_snapshot(html))

        assert result.score == 95
        assert result.details["personal_data"]["emails"] == ["sales@example.com"]

    def test_eval_in_inline_script(self, make_snapshot, page_html):
        result = AdvancedSecurityAnalyzer().analyze(make_snapshot(page_html(body_extra="<script>eval('1+1')</script>")))

        assert result.score == 70
        assert result.issues[0].priority == "critical"

    def test_scripts_without_integrity(self, make_snapshot, page_html):
        head = '<script src="https://cdn.example.net/lib.js" async></script>'
        result = AdvancedSecurityAnalyzer().analyze(make_snapshot(page_html(head_extra=head)))

        assert result.score == 85
        assert result.details["external_domains"] == ["cdn.example.net"]


class TestBusinessMetricsAnalyzer:
    def test_bare_page_floors_at_zero(self, make_snapshot):
        result = BusinessMetricsAnalyzer().analyze(make_snapshot(BARE_HTML))

        assert result.score == 0
        assert len(result.issues) == 8

    def test_contact_details(self, make_snapshot):
        result = BusinessMetricsAnalyzer().analyze(make_snapshot())

        assert result.details["contact_info"]["email"] == "hello@example.com"
        assert result.details["trust_pages"] == {"about": True, "privacy": True, "terms": True, "contact": True}
        assert len(result.details["cta_buttons"]) == 2
