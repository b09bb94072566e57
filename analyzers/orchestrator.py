"""
Runs the category analyzers over one PageSnapshot and assembles the AuditReport.

Analyzers fan out on a thread pool and are joined once with a timeout. A
category whose analyzer raises, is cancelled or does not finish in time gets
a degraded result instead of aborting the audit.
"""
from __future__ import annotations

from concurrent.futures import CancelledError, Future, ThreadPoolExecutor, wait
from datetime import datetime, timezone
from typing import Mapping, Optional

from logger import get_logger
from models import AuditConfig, AuditReport, Category, CategoryResult, PageSnapshot
from scoring.prioritizer import prioritize
from scoring.scorer import aggregate

from analyzers.base import BaseAnalyzer, degraded_result
from analyzers.seo import SEOAnalyzer
from analyzers.performance import PerformanceAnalyzer
from analyzers.security import SecurityAnalyzer
from analyzers.accessibility import AccessibilityAnalyzer
from analyzers.mobile import MobileAnalyzer
from analyzers.content import ContentQualityAnalyzer
from analyzers.advanced_performance import AdvancedPerformanceAnalyzer
from analyzers.advanced_security import AdvancedSecurityAnalyzer
from analyzers.business import BusinessMetricsAnalyzer

logger = get_logger(__name__)


# One analyzer per category, in canonical order
ANALYZERS: dict[str, BaseAnalyzer] = {
    Category.SEO:                  SEOAnalyzer(),
    Category.PERFORMANCE:          PerformanceAnalyzer(),
    Category.SECURITY:             SecurityAnalyzer(),
    Category.ACCESSIBILITY:        AccessibilityAnalyzer(),
    Category.MOBILE:               MobileAnalyzer(),
    Category.CONTENT_QUALITY:      ContentQualityAnalyzer(),
    Category.ADVANCED_PERFORMANCE: AdvancedPerformanceAnalyzer(),
    Category.ADVANCED_SECURITY:    AdvancedSecurityAnalyzer(),
    Category.BUSINESS_METRICS:     BusinessMetricsAnalyzer(),
}


def run_all_analyzers(
    snapshot: PageSnapshot,
    config: Optional[AuditConfig] = None,
    analyzers: Optional[Mapping[str, BaseAnalyzer]] = None,
) -> list[CategoryResult]:
    """
    Run every enabled analyzer concurrently and return one result per category,
    in canonical category order.
    """
    config = config or AuditConfig()
    registry = analyzers if analyzers is not None else ANALYZERS
    enabled = [c for c in Category.ALL if c in config.categories and c in registry]
    if not enabled:
        return []

    # Parse once up front; the analyzers only read the tree afterwards.
    try:
        snapshot.soup
    except Exception as exc:
        logger.error("Could not parse HTML for %s: %s", snapshot.effective_url, exc)
        return [degraded_result(c, exc) for c in enabled]

    executor = ThreadPoolExecutor(max_workers=max(1, min(config.max_workers, len(enabled))))
    try:
        futures: dict[str, Future] = {
            category: executor.submit(registry[category].analyze, snapshot) for category in enabled
        }
        done, not_done = wait(futures.values(), timeout=config.analyzer_timeout)
        for future in not_done:
            future.cancel()
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    results = []
    for category, future in futures.items():
        results.append(_collect(category, future, future in done, config.analyzer_timeout))
    return results


def _collect(category: str, future: Future, finished: bool, timeout: float) -> CategoryResult:
    if not finished:
        logger.warning("Analyzer %s did not finish within %.1fs", category, timeout)
        return degraded_result(category, TimeoutError(f"analysis exceeded {timeout:.1f}s"))
    try:
        return future.result()
    except CancelledError as exc:
        logger.warning("Analyzer %s was cancelled", category)
        return degraded_result(category, exc)
    except Exception as exc:
        # Never let one analyzer crash the whole audit
        logger.exception("Analyzer %s failed", category)
        return degraded_result(category, exc)


def audit_snapshot(
    snapshot: PageSnapshot,
    config: Optional[AuditConfig] = None,
    generated_at: Optional[datetime] = None,
    analyzers: Optional[Mapping[str, BaseAnalyzer]] = None,
) -> AuditReport:
    """Full core pass: analyzers → aggregate → prioritize."""
    results = run_all_analyzers(snapshot, config, analyzers)
    overall = aggregate(results)
    return AuditReport(
        url=snapshot.effective_url,
        overall=overall,
        recommendations=prioritize(overall),
        generated_at=generated_at or datetime.now(timezone.utc),
    )
