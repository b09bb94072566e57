"""
Core data models for the page audit engine.
All modules import from here; nothing else is cross-imported at this level.

NOTE: `from __future__ import annotations` is intentionally omitted here.
Python 3.13.0 has a regression (bpo-121814) where that import causes a crash
in the dataclasses decorator when the module is not yet fully registered in
sys.modules. Python 3.9+ supports generic aliases (list[str], dict[str, Any])
natively, so the future import is unnecessary.
"""

from dataclasses import dataclass, field
from datetime import datetime
from functools import cached_property
from typing import Any, Optional

from bs4 import BeautifulSoup

from config import (
    DEFAULT_ANALYZER_TIMEOUT,
    DEFAULT_MAX_IMAGE_CHECKS,
    DEFAULT_MAX_STYLESHEETS,
    DEFAULT_MAX_WORKERS,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_USER_AGENT,
)


# ── Enumerations ──────────────────────────────────────────────────────────────
class Category:
    SEO                  = "seo"
    PERFORMANCE          = "performance"
    SECURITY             = "security"
    ACCESSIBILITY        = "accessibility"
    MOBILE               = "mobile"
    CONTENT_QUALITY      = "content_quality"
    ADVANCED_PERFORMANCE = "advanced_performance"
    ADVANCED_SECURITY    = "advanced_security"
    BUSINESS_METRICS     = "business_metrics"

    # Canonical order: flattening, reporting and tie-breaks all follow it.
    ALL = (
        SEO, PERFORMANCE, SECURITY, ACCESSIBILITY, MOBILE,
        CONTENT_QUALITY, ADVANCED_PERFORMANCE, ADVANCED_SECURITY, BUSINESS_METRICS,
    )

    # Legacy reduced configuration: same rules, first five categories only.
    CORE = (SEO, PERFORMANCE, SECURITY, ACCESSIBILITY, MOBILE)

    LABELS = {
        SEO:                  "SEO",
        PERFORMANCE:          "Performance",
        SECURITY:             "Security",
        ACCESSIBILITY:        "Accessibility",
        MOBILE:               "Mobile",
        CONTENT_QUALITY:      "Content Quality",
        ADVANCED_PERFORMANCE: "Advanced Performance",
        ADVANCED_SECURITY:    "Advanced Security",
        BUSINESS_METRICS:     "Business Metrics",
    }

    @classmethod
    def label(cls, category: str) -> str:
        return cls.LABELS.get(category, category)


class IssueType:
    ERROR   = "error"
    WARNING = "warning"
    INFO    = "info"

    ALL = (ERROR, WARNING, INFO)

    ICONS = {
        ERROR:   "🔴",
        WARNING: "🟡",
        INFO:    "🔵",
    }


class Priority:
    CRITICAL = "critical"
    HIGH     = "high"
    MEDIUM   = "medium"
    LOW      = "low"
    INFO     = "info"

    ALL = (CRITICAL, HIGH, MEDIUM, LOW, INFO)

    RANK = {
        CRITICAL: 4,
        HIGH:     3,
        MEDIUM:   2,
        LOW:      1,
        INFO:     0,
    }

    COLORS = {
        CRITICAL: "#FF4B4B",
        HIGH:     "#FF8800",
        MEDIUM:   "#FFA500",
        LOW:      "#4B9EFF",
        INFO:     "#8A8FA3",
    }


class Difficulty:
    EASY   = "easy"
    MEDIUM = "medium"
    HARD   = "hard"

    ALL = (EASY, MEDIUM, HARD)


class ResourceKind:
    SCRIPT     = "script"
    STYLESHEET = "stylesheet"
    IMAGE      = "image"
    FONT       = "font"
    OTHER      = "other"

    ALL = (SCRIPT, STYLESHEET, IMAGE, FONT, OTHER)


# ── Snapshot sub-structures ────────────────────────────────────────────────────
@dataclass(frozen=True)
class Resource:
    kind: str
    url: str = ""
    transfer_size: int = 0
    cached: Optional[bool] = None     # None when the resource was never requested
    third_party: bool = False
    failed: bool = False
    duration_ms: float = 0.0


@dataclass(frozen=True)
class TimingMarks:
    fcp_s: Optional[float] = None
    lcp_s: Optional[float] = None
    cls: Optional[float] = None


@dataclass(frozen=True)
class RuntimeMetrics:
    """Measurements only a rendering browser can take. None means not measured."""
    long_task_durations_ms: Optional[tuple[float, ...]] = None
    js_heap_used_mb: Optional[float] = None
    js_heap_limit_mb: Optional[float] = None
    small_touch_targets: Optional[int] = None
    small_text_ratio: Optional[float] = None
    horizontal_scroll: Optional[bool] = None


# ── Core page model ────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class PageSnapshot:
    url: str
    final_url: str = ""

    # HTTP response
    http_status: int = 0
    response_headers: dict[str, str] = field(default_factory=dict)
    response_time_ms: float = 0.0
    content_length: int = 0

    # Raw HTML (queried through .soup)
    html: str = ""

    resources: tuple[Resource, ...] = ()
    timing: TimingMarks = field(default_factory=TimingMarks)
    runtime: RuntimeMetrics = field(default_factory=RuntimeMetrics)

    # Concatenated text of external stylesheets, when the fetcher retrieved them
    stylesheet_text: str = ""

    @property
    def effective_url(self) -> str:
        return self.final_url or self.url

    @property
    def is_https(self) -> bool:
        return self.effective_url.lower().startswith("https://")

    @cached_property
    def soup(self) -> BeautifulSoup:
        try:
            return BeautifulSoup(self.html or "", "lxml")
        except Exception:
            return BeautifulSoup(self.html or "", "html.parser")

    @cached_property
    def _lower_headers(self) -> dict[str, str]:
        return {str(k).lower(): str(v) for k, v in (self.response_headers or {}).items()}

    def header(self, name: str, default: str = "") -> str:
        return self._lower_headers.get(name.lower(), default)

    def has_header(self, name: str) -> bool:
        return name.lower() in self._lower_headers


# ── Issue model ────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class Issue:
    category: str
    issue_type: str        # IssueType.ERROR / WARNING / INFO
    priority: str          # Priority.CRITICAL … INFO
    message: str
    impact: str
    solution: str
    location: Optional[str] = None   # hint such as "<head>" or "HTTP response headers"

    def __post_init__(self):
        if self.category not in Category.ALL:
            raise ValueError(f"Unknown category: {self.category!r}")
        if self.issue_type not in IssueType.ALL:
            raise ValueError(f"Unknown issue type: {self.issue_type!r}")
        if self.priority not in Priority.ALL:
            raise ValueError(f"Unknown priority: {self.priority!r}")


@dataclass(frozen=True)
class CategoryResult:
    category: str
    score: int
    issues: tuple[Issue, ...] = ()
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return Category.label(self.category)

    def count(self, priority: str) -> int:
        return sum(1 for issue in self.issues if issue.priority == priority)


@dataclass(frozen=True)
class OverallReport:
    score: int
    grade: str
    categories: dict[str, CategoryResult] = field(default_factory=dict)


# ── Prioritization output ─────────────────────────────────────────────────────
@dataclass(frozen=True)
class Task:
    category: str
    category_name: str
    task: str
    solution: str
    difficulty: str
    estimated_hours: float
    priority: str
    impact_score: float


@dataclass(frozen=True)
class CategoryImprovement:
    current_score: int
    potential_score: int
    improvement: int


@dataclass(frozen=True)
class CategoryPriority:
    category: str
    name: str
    score: int
    critical_issues: int
    high_issues: int
    total_issues: int


@dataclass(frozen=True)
class RoadmapPhase:
    key: str
    title: str
    description: str
    tasks: tuple[Task, ...]
    estimated_hours: float
    expected_improvement: str


@dataclass(frozen=True)
class ROIItem:
    category: str
    category_name: str
    improvement: str
    solution: str
    estimated_hours: float
    expected_impact: str
    roi_score: int


@dataclass(frozen=True)
class PrioritizedRecommendations:
    immediate: tuple[Task, ...] = ()
    short_term: tuple[Task, ...] = ()
    medium_term: tuple[Task, ...] = ()
    long_term: tuple[Task, ...] = ()
    potential_improvement: dict[str, CategoryImprovement] = field(default_factory=dict)
    category_priority: tuple[CategoryPriority, ...] = ()
    roadmap: tuple[RoadmapPhase, ...] = ()
    high_roi: tuple[ROIItem, ...] = ()
    total_issues: int = 0


# ── Top-level audit result ─────────────────────────────────────────────────────
@dataclass(frozen=True)
class AuditReport:
    url: str
    overall: OverallReport
    recommendations: PrioritizedRecommendations
    generated_at: Optional[datetime] = None

    @property
    def categories(self) -> dict[str, CategoryResult]:
        return self.overall.categories

    @property
    def all_issues(self) -> list[Issue]:
        return [issue for result in self.categories.values() for issue in result.issues]

    @property
    def issues_by_priority(self) -> dict[str, list[Issue]]:
        out: dict[str, list[Issue]] = {p: [] for p in Priority.ALL}
        for issue in self.all_issues:
            out[issue.priority].append(issue)
        return out


# ── Audit configuration ────────────────────────────────────────────────────────
@dataclass
class AuditConfig:
    categories: tuple[str, ...] = Category.ALL
    max_workers: int = DEFAULT_MAX_WORKERS
    analyzer_timeout: float = DEFAULT_ANALYZER_TIMEOUT
    request_timeout: int = DEFAULT_REQUEST_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT
    fetch_stylesheets: bool = True
    max_stylesheets: int = DEFAULT_MAX_STYLESHEETS
    max_image_checks: int = DEFAULT_MAX_IMAGE_CHECKS
