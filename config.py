"""
Global configuration constants for the page audit engine.
All tunable thresholds live here.
"""

# ── SEO thresholds ────────────────────────────────────────────────────────────
TITLE_MIN_CHARS = 30
TITLE_MAX_CHARS = 60
DESCRIPTION_MAX_CHARS = 160
MIN_INTERNAL_LINKS = 3

# ── Performance thresholds ────────────────────────────────────────────────────
LOAD_TIME_CRITICAL_S = 5.0
LOAD_TIME_SLOW_S = 3.0
LOAD_TIME_IMPROVABLE_S = 2.0
FCP_SLOW_S = 3.0
LCP_SLOW_S = 4.0
CLS_POOR = 0.25
CLS_NEEDS_IMPROVEMENT = 0.1
FCP_FALLBACK_RATIO = 0.6                  # of load time, when FCP was not measured
LCP_FALLBACK_RATIO = 0.9
TOTAL_RESOURCE_BYTES_MAX = 5 * 1024 * 1024
IMAGE_RESOURCE_BYTES_MAX = 2 * 1024 * 1024

# ── Advanced performance thresholds ───────────────────────────────────────────
LONG_TASK_TOTAL_CRITICAL_MS = 1000
LONG_TASK_TOTAL_WARNING_MS = 500
LONG_TASK_COUNT_MAX = 5
HEAP_USAGE_PERCENT_MAX = 80
HEAP_USED_MB_MAX = 50
THIRD_PARTY_SCRIPT_COUNT_MAX = 10
THIRD_PARTY_SCRIPT_BYTES_MAX = 500 * 1024
CACHE_HIT_RATE_MIN = 50
CACHE_MIN_RESOURCES = 10

# ── Mobile thresholds ─────────────────────────────────────────────────────────
SMALL_TEXT_RATIO_MAX = 0.3
MOBILE_IMAGE_COUNT_MAX = 10

# ── Content thresholds ────────────────────────────────────────────────────────
VERY_THIN_CONTENT_CHARS = 300
THIN_CONTENT_CHARS = 500
SENTENCE_LENGTH_MAX = 100
AFFILIATE_LINKS_MAX = 5

# ── Advanced security thresholds ──────────────────────────────────────────────
SRI_COVERAGE_MIN = 50
EXTERNAL_DOMAINS_MAX = 10
TRACKING_HOSTS_MAX = 3
INLINE_SCRIPTS_MAX = 5

# ── Business thresholds ───────────────────────────────────────────────────────
LONG_FORM_FIELDS = 5
MIN_TRUST_PAGES = 2
ALL_TRUST_PAGES = 4
MIN_OG_TAGS = 3
MIN_UX_FEATURES = 2

# ── Category analysis ─────────────────────────────────────────────────────────
BASELINE_SCORE = 100
DEGRADED_SCORE = 50                       # score of a category whose analyzer failed

# ── Grades (first threshold the score reaches wins) ───────────────────────────
GRADE_THRESHOLDS: list[tuple[int, str]] = [
    (90, "A"),
    (80, "B"),
    (70, "C"),
    (60, "D"),
]
FAILING_GRADE = "F"

# ── Prioritization ────────────────────────────────────────────────────────────
PRIORITY_WEIGHTS: dict[str, float] = {
    "critical": 100,
    "high":      75,
    "medium":    50,
    "low":       25,
    "info":      10,
}

# Categories not listed weigh 1.0
CATEGORY_WEIGHTS: dict[str, float] = {
    "security":    1.5,
    "performance": 1.3,
    "seo":         1.2,
    "mobile":      1.1,
}

# Score points recovered by fixing one issue of the given priority
IMPROVEMENT_POINTS: dict[str, int] = {
    "critical": 15,
    "high":     10,
    "medium":    5,
    "low":       2,
    "info":      0,
}

BUCKET_CAPS: dict[str, int] = {
    "immediate":   5,
    "short_term": 10,
    "medium_term": 15,
    "long_term":  20,
}

HIGH_ROI_LIMIT = 10

# Estimated hours per fix, by priority and difficulty
EFFORT_HOURS: dict[str, dict[str, float]] = {
    "critical": {"easy": 2.0,  "medium": 4.0, "hard": 8.0},
    "high":     {"easy": 1.0,  "medium": 3.0, "hard": 6.0},
    "medium":   {"easy": 0.5,  "medium": 2.0, "hard": 4.0},
    "low":      {"easy": 0.25, "medium": 1.0, "hard": 2.0},
    "info":     {"easy": 1.0,  "medium": 1.0, "hard": 1.0},
}

# Checked in order; the first difficulty with a matching word wins
DIFFICULTY_KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    ("easy",   ("add", "configure", "set")),
    ("medium", ("implement", "change")),
    ("hard",   ("rebuild", "migrate")),
]
DEFAULT_DIFFICULTY = "medium"

EXPECTED_IMPACT: dict[str, str] = {
    "critical": "Immediate improvement in user experience and business metrics",
    "high":     "Clear improvement expected in the short term",
    "medium":   "Site quality improves over the medium term",
    "low":      "Contributes to long-term optimisation",
    "info":     "Prevents future problems",
}

# Roadmap phases: which issues each phase takes and how many
ROADMAP_PHASES: list[dict] = [
    {
        "key": "phase1",
        "title": "Phase 1: Emergency fixes (1 week)",
        "description": "Resolve critical security and usability problems",
        "priorities": ("critical",),
        "categories": None,
        "limit": 5,
        "expected_improvement": "Overall score +10-15 points",
    },
    {
        "key": "phase2",
        "title": "Phase 2: Core improvements (2-3 weeks)",
        "description": "Resolve the main SEO and performance problems",
        "priorities": ("high",),
        "categories": ("seo", "performance"),
        "limit": 8,
        "expected_improvement": "Overall score +15-20 points",
    },
    {
        "key": "phase3",
        "title": "Phase 3: Quality improvements (1-2 months)",
        "description": "Improve accessibility and mobile support",
        "priorities": ("medium",),
        "categories": ("accessibility", "mobile"),
        "limit": 10,
        "expected_improvement": "Overall score +10-15 points",
    },
    {
        "key": "phase4",
        "title": "Phase 4: Optimisation (2-3 months)",
        "description": "Fine-tuning and continuous improvement",
        "priorities": ("low", "info"),
        "categories": None,
        "limit": 10,
        "expected_improvement": "Overall score +5-10 points",
    },
]

# ── Engine / fetcher defaults ─────────────────────────────────────────────────
DEFAULT_MAX_WORKERS = 9
DEFAULT_ANALYZER_TIMEOUT = 30.0          # seconds for the whole fan-out join
DEFAULT_REQUEST_TIMEOUT = 15             # seconds
DEFAULT_MAX_STYLESHEETS = 5
DEFAULT_MAX_IMAGE_CHECKS = 10          # images probed with HEAD for size and breakage
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

# User-agent strings offered in the sidebar dropdown
USER_AGENT_PRESETS = {
    "Desktop Chrome (default)": DEFAULT_USER_AGENT,
    "Mobile Safari": (
        "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 "
        "(KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1"
    ),
    "Googlebot": "Mozilla/5.0 (compatible; Googlebot/2.1; +http://www.google.com/bot.html)",
}
