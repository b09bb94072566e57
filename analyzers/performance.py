"""
Performance analyzer: load time, paint timings, layout shift and transfer size.

Load time is the server response time. Paint timings fall back to fixed
fractions of the load time when the snapshot carries no measurement.
"""
from __future__ import annotations

from typing import Any

from analyzers.base import BaseAnalyzer, Hit, Rule, rule_table
from config import (
    CLS_NEEDS_IMPROVEMENT,
    CLS_POOR,
    FCP_FALLBACK_RATIO,
    FCP_SLOW_S,
    IMAGE_RESOURCE_BYTES_MAX,
    LCP_FALLBACK_RATIO,
    LCP_SLOW_S,
    LOAD_TIME_CRITICAL_S,
    LOAD_TIME_IMPROVABLE_S,
    LOAD_TIME_SLOW_S,
    TOTAL_RESOURCE_BYTES_MAX,
)
from models import Category, PageSnapshot, ResourceKind


RULES = rule_table(
    Rule(
        "load_time_critical", "error", "critical", 40,
        "Page load is very slow ({seconds:.2f} s).",
        "Most visitors leave and search rankings drop sharply.",
        "Compress images, minify CSS and JavaScript, and serve static files from a CDN.",
    ),
    Rule(
        "load_time_slow", "warning", "high", 25,
        "Page load is slow ({seconds:.2f} s).",
        "Bounce rate rises and conversions fall.",
        "Enable lazy loading for images and remove unused scripts and styles.",
    ),
    Rule(
        "load_time_improvable", "info", "medium", 10,
        "Page load could be faster ({seconds:.2f} s).",
        "A faster page improves user experience and conversions.",
        "Enable browser caching and gzip compression on the server.",
    ),
    Rule(
        "slow_fcp", "warning", "high", 15,
        "First Contentful Paint is slow ({seconds:.2f} s).",
        "Visitors wait too long before seeing any content.",
        "Inline critical CSS and defer non-essential JavaScript.",
    ),
    Rule(
        "slow_lcp", "warning", "high", 15,
        "Largest Contentful Paint is slow ({seconds:.2f} s).",
        "The main content appears late, hurting Core Web Vitals.",
        "Preload the hero image and compress above-the-fold images.",
    ),
    Rule(
        "cls_poor", "error", "critical", 25,
        "Cumulative Layout Shift is high ({cls:.3f}).",
        "Content jumps while loading and users click the wrong elements.",
        "Set explicit width and height on images, embeds and ad slots.",
    ),
    Rule(
        "cls_needs_improvement", "warning", "medium", 10,
        "Cumulative Layout Shift needs improvement ({cls:.3f}).",
        "Visible layout shifts degrade the experience.",
        "Reserve space for late-loading content and web fonts.",
    ),
    Rule(
        "heavy_page", "warning", "high", 15,
        "Total transfer size is large ({megabytes:.1f} MB).",
        "Pages load slowly on mobile networks and cost users data.",
        "Reduce page weight: compress assets and drop unused libraries.",
    ),
    Rule(
        "heavy_images", "warning", "medium", 10,
        "Images weigh {megabytes:.1f} MB in total.",
        "Image downloads dominate load time.",
        "Convert images to WebP or AVIF and serve responsive sizes with srcset.",
    ),
)


class PerformanceAnalyzer(BaseAnalyzer):
    category = Category.PERFORMANCE
    rules = RULES

    def collect(self, snapshot: PageSnapshot) -> dict[str, Any]:
        load_time = (snapshot.response_time_ms or 0.0) / 1000
        timing = snapshot.timing
        total_bytes = sum(r.transfer_size for r in snapshot.resources) + (snapshot.content_length or 0)
        image_bytes = sum(r.transfer_size for r in snapshot.resources if r.kind == ResourceKind.IMAGE)

        return {
            "load_time_s": round(load_time, 3),
            "fcp_s": timing.fcp_s if timing.fcp_s is not None else load_time * FCP_FALLBACK_RATIO,
            "lcp_s": timing.lcp_s if timing.lcp_s is not None else load_time * LCP_FALLBACK_RATIO,
            "cls": timing.cls if timing.cls is not None else 0.0,
            "fcp_measured": timing.fcp_s is not None,
            "lcp_measured": timing.lcp_s is not None,
            "resource_count": len(snapshot.resources),
            "total_bytes": total_bytes,
            "image_bytes": image_bytes,
        }

    def evaluate(self, snapshot: PageSnapshot, details: dict[str, Any]) -> list[Hit]:
        hits: list[Hit] = []

        # ── Load time ─────────────────────────────────────────────────────────
        load = details["load_time_s"]
        if load > LOAD_TIME_CRITICAL_S:
            hits.append(self.hit("load_time_critical", seconds=load))
        elif load > LOAD_TIME_SLOW_S:
            hits.append(self.hit("load_time_slow", seconds=load))
        elif load > LOAD_TIME_IMPROVABLE_S:
            hits.append(self.hit("load_time_improvable", seconds=load))

        # ── Core Web Vitals ───────────────────────────────────────────────────
        if details["fcp_s"] > FCP_SLOW_S:
            hits.append(self.hit("slow_fcp", seconds=details["fcp_s"]))
        if details["lcp_s"] > LCP_SLOW_S:
            hits.append(self.hit("slow_lcp", seconds=details["lcp_s"]))

        cls = details["cls"]
        if cls > CLS_POOR:
            hits.append(self.hit("cls_poor", cls=cls))
        elif cls > CLS_NEEDS_IMPROVEMENT:
            hits.append(self.hit("cls_needs_improvement", cls=cls))

        # ── Weight ────────────────────────────────────────────────────────────
        if details["total_bytes"] > TOTAL_RESOURCE_BYTES_MAX:
            hits.append(self.hit("heavy_page", megabytes=details["total_bytes"] / (1024 * 1024)))
        if details["image_bytes"] > IMAGE_RESOURCE_BYTES_MAX:
            hits.append(self.hit("heavy_images", megabytes=details["image_bytes"] / (1024 * 1024)))

        return hits
