"""
Advanced performance analyzer: main-thread long tasks, JS heap, third-party
scripts, cache efficiency and render-blocking scripts.
"""
from __future__ import annotations

from typing import Any, Optional

from analyzers.base import BaseAnalyzer, Hit, Rule, rule_table
from config import (
    CACHE_HIT_RATE_MIN,
    CACHE_MIN_RESOURCES,
    HEAP_USAGE_PERCENT_MAX,
    HEAP_USED_MB_MAX,
    LONG_TASK_COUNT_MAX,
    LONG_TASK_TOTAL_CRITICAL_MS,
    LONG_TASK_TOTAL_WARNING_MS,
    THIRD_PARTY_SCRIPT_BYTES_MAX,
    THIRD_PARTY_SCRIPT_COUNT_MAX,
)
from models import Category, PageSnapshot, ResourceKind


RULES = rule_table(
    Rule(
        "long_tasks_critical", "error", "critical", 30,
        "JavaScript blocks the main thread for a very long time ({total_ms:.0f} ms).",
        "The page responds slowly to clicks and typing.",
        "Split heavy JavaScript and migrate expensive work to a Web Worker.",
    ),
    Rule(
        "long_tasks_warning", "warning", "high", 15,
        "JavaScript blocks the main thread for a long time ({total_ms:.0f} ms).",
        "Interactivity suffers while scripts run.",
        "Implement code splitting and lazy loading for non-critical scripts.",
    ),
    Rule(
        "many_long_tasks", "warning", "high", 10,
        "{count} long tasks were detected.",
        "User input is handled late and the page feels sluggish.",
        "Break work into smaller chunks scheduled with requestIdleCallback.",
    ),
    Rule(
        "heap_usage_high", "error", "critical", 25,
        "JavaScript heap usage is very high ({percent:.0f}%).",
        "A memory leak may crash the page on low-memory devices.",
        "Remove detached DOM nodes and unregister unused event listeners.",
    ),
    Rule(
        "heap_large", "warning", "medium", 10,
        "JavaScript heap is large ({megabytes:.0f} MB).",
        "Low-end devices may slow down.",
        "Reduce retained objects and large in-memory data structures.",
    ),
    Rule(
        "many_third_party_scripts", "warning", "high", 15,
        "The page loads {count} third-party scripts.",
        "External dependencies slow the page down and widen the attack surface.",
        "Keep only the third-party scripts you need and load the rest lazily.",
    ),
    Rule(
        "heavy_third_party_scripts", "warning", "medium", 10,
        "Third-party scripts weigh {kilobytes:.0f} KB.",
        "Downloads take longer and first render is delayed.",
        "Change heavy libraries to lighter alternatives or trim the bundle.",
    ),
    Rule(
        "low_cache_hit_rate", "info", "low", 5,
        "Low cache hit rate ({rate}%).",
        "Repeat visits do not benefit from the browser cache.",
        "Configure Cache-Control headers for static assets.",
        location="HTTP response headers",
    ),
    Rule(
        "render_blocking_scripts", "warning", "high", 25,
        "{count} script(s) block rendering.",
        "Visitors stare at a blank screen while the scripts load.",
        "Add the async or defer attribute to script tags in <head>.",
        per_unit=5,
        location="<head><script>",
    ),
)


def _render_blocking_scripts(soup) -> int:
    head = soup.find("head")
    if head is None:
        return 0
    count = 0
    for script in head.find_all("script", src=True):
        if script.has_attr("async") or script.has_attr("defer"):
            continue
        if (script.get("type") or "").lower() == "module":
            continue
        count += 1
    return count


def _heap_usage_percent(used: Optional[float], limit: Optional[float]) -> Optional[float]:
    if used is None or not limit:
        return None
    return round(used / limit * 100)


class AdvancedPerformanceAnalyzer(BaseAnalyzer):
    category = Category.ADVANCED_PERFORMANCE
    rules = RULES

    def collect(self, snapshot: PageSnapshot) -> dict[str, Any]:
        runtime = snapshot.runtime
        long_tasks = runtime.long_task_durations_ms
        third_party = [
            r for r in snapshot.resources if r.kind == ResourceKind.SCRIPT and r.third_party
        ]
        measured = [r for r in snapshot.resources if r.cached is not None]
        cached = sum(1 for r in measured if r.cached)

        return {
            "long_tasks": {
                "measured": long_tasks is not None,
                "count": len(long_tasks or ()),
                "total_ms": sum(long_tasks or ()),
            },
            "memory": {
                "used_mb": runtime.js_heap_used_mb,
                "limit_mb": runtime.js_heap_limit_mb,
                "usage_percent": _heap_usage_percent(runtime.js_heap_used_mb, runtime.js_heap_limit_mb),
            },
            "third_party": {
                "count": len(third_party),
                "bytes": sum(r.transfer_size for r in third_party),
                "urls": [r.url for r in third_party],
            },
            "cache": {
                "total_resources": len(snapshot.resources),
                "measured_resources": len(measured),
                "cached_resources": cached,
                "hit_rate": round(cached / len(measured) * 100) if measured else 0,
            },
            "render_blocking_scripts": _render_blocking_scripts(snapshot.soup),
        }

    def evaluate(self, snapshot: PageSnapshot, details: dict[str, Any]) -> list[Hit]:
        hits: list[Hit] = []

        # ── Main thread ───────────────────────────────────────────────────────
        tasks = details["long_tasks"]
        if tasks["total_ms"] > LONG_TASK_TOTAL_CRITICAL_MS:
            hits.append(self.hit("long_tasks_critical", total_ms=tasks["total_ms"]))
        elif tasks["total_ms"] > LONG_TASK_TOTAL_WARNING_MS:
            hits.append(self.hit("long_tasks_warning", total_ms=tasks["total_ms"]))
        if tasks["count"] > LONG_TASK_COUNT_MAX:
            hits.append(self.hit("many_long_tasks", count=tasks["count"]))

        # ── Memory ────────────────────────────────────────────────────────────
        memory = details["memory"]
        if memory["usage_percent"] is not None and memory["usage_percent"] > HEAP_USAGE_PERCENT_MAX:
            hits.append(self.hit("heap_usage_high", percent=memory["usage_percent"]))
        elif memory["used_mb"] is not None and memory["used_mb"] > HEAP_USED_MB_MAX:
            hits.append(self.hit("heap_large", megabytes=memory["used_mb"]))

        # ── Third parties ─────────────────────────────────────────────────────
        third_party = details["third_party"]
        if third_party["count"] > THIRD_PARTY_SCRIPT_COUNT_MAX:
            hits.append(self.hit("many_third_party_scripts", count=third_party["count"]))
        if third_party["bytes"] > THIRD_PARTY_SCRIPT_BYTES_MAX:
            hits.append(self.hit("heavy_third_party_scripts", kilobytes=third_party["bytes"] / 1024))

        cache = details["cache"]
        if cache["hit_rate"] < CACHE_HIT_RATE_MIN and cache["measured_resources"] > CACHE_MIN_RESOURCES:
            hits.append(self.hit("low_cache_hit_rate", rate=cache["hit_rate"]))

        if details["render_blocking_scripts"]:
            hits.append(self.hit("render_blocking_scripts", count=details["render_blocking_scripts"]))

        return hits
