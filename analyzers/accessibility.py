"""
Accessibility analyzer: alt text, form labels, heading structure, landmarks,
link names, page title, document language and keyboard focus.

Also estimates the WCAG conformance level the page could reach (A / AA / AAA).
"""
from __future__ import annotations

from typing import Any

from analyzers import dom
from analyzers.base import BaseAnalyzer, Hit, Rule, rule_table
from models import Category, PageSnapshot, Priority


RULES = rule_table(
    Rule(
        "images_missing_alt", "error", "high", 30,
        "{count} image(s) have no alt attribute.",
        "Screen-reader users cannot understand the content of the images.",
        'Add an alt attribute to every image; use alt="" for decorative images.',
        per_unit=3,
        location="<img>",
    ),
    Rule(
        "unlabeled_fields", "error", "critical", 25,
        "{count} form field(s) have no label.",
        "Users of assistive technology cannot tell what the fields are for.",
        "Add a <label> element or an aria-label attribute to each form field.",
        per_unit=5,
        location="<form>",
    ),
    Rule(
        "missing_h1", "error", "high", 15,
        "The page has no H1 heading.",
        "The main content is unclear and structural navigation is impossible.",
        "Add an <h1> with the page's main heading.",
        location="<body>",
    ),
    Rule(
        "multiple_h1", "warning", "medium", 8,
        "The page has {count} H1 headings.",
        "The main heading becomes ambiguous for assistive technology.",
        "Keep a single H1 per page and use lower levels for the rest.",
    ),
    Rule(
        "skipped_heading_levels", "warning", "medium", 10,
        "Heading levels are skipped.",
        "The logical structure is unclear and heading navigation becomes confusing.",
        "Use headings in order (H1, H2, H3…) without skipping levels.",
    ),
    Rule(
        "empty_headings", "warning", "medium", 15,
        "{count} heading(s) are empty.",
        "Screen readers announce meaningless headings.",
        "Remove empty heading tags or give them text.",
        per_unit=3,
    ),
    Rule(
        "no_landmarks", "warning", "medium", 12,
        "No landmark roles or semantic sectioning elements are used.",
        "Users cannot jump quickly between the main parts of the page.",
        "Use main, nav, header and footer elements or the matching role attributes.",
    ),
    Rule(
        "no_skip_link", "info", "low", 5,
        "There is no skip link.",
        "Keyboard users cannot reach the main content quickly.",
        'Add a "Skip to main content" link at the top of the page.',
    ),
    Rule(
        "unnamed_links", "warning", "medium", 20,
        "{count} link(s) have no accessible name.",
        "The purpose of the links is unclear to assistive technology users.",
        "Give every link descriptive text or an aria-label attribute.",
        per_unit=2,
        location="<a>",
    ),
    Rule(
        "missing_title", "error", "high", 15,
        "The page has no title.",
        "The page cannot be identified in browser tabs or bookmarks.",
        "Add a <title> describing the page.",
        location="<head>",
    ),
    Rule(
        "missing_lang", "warning", "medium", 8,
        "The page language is not declared.",
        "Screen readers cannot choose the right speech synthesis.",
        'Add a lang attribute to the <html> tag, e.g. lang="en".',
        location="<html>",
    ),
    Rule(
        "missing_main", "warning", "medium", 10,
        "The main content area is not marked up.",
        "Users cannot identify and jump to the main content.",
        'Wrap the main content in <main> or an element with role="main".',
    ),
    Rule(
        "no_focusable_elements", "info", "low", 3,
        "The page has no focusable elements.",
        "Keyboard navigation may be limited.",
        "Check that interactive elements can receive keyboard focus.",
    ),
)

_LANDMARK_ROLES = {"main", "navigation", "banner", "contentinfo"}
_LANDMARK_TAGS = ("main", "nav", "header", "footer")
_UNLABELED_EXEMPT_TYPES = {"hidden", "submit", "button", "reset", "image"}
_FOCUSABLE_TAGS = ("a", "button", "input", "textarea", "select")


def _unlabeled_field_count(soup) -> int:
    label_targets = {label.get("for") for label in soup.find_all("label") if label.get("for")}
    count = 0
    for field in soup.find_all(("input", "textarea", "select")):
        if (field.get("type") or "").lower() in _UNLABELED_EXEMPT_TYPES:
            continue
        if field.get("id") and field["id"] in label_targets:
            continue
        if field.find_parent("label") is not None:
            continue
        if any((field.get(attr) or "").strip() for attr in ("aria-label", "aria-labelledby", "title")):
            continue
        count += 1
    return count


def _landmark_count(soup) -> int:
    tags = len(soup.find_all(_LANDMARK_TAGS))
    roles = len(soup.find_all(attrs={"role": lambda r: r and r.strip().lower() in _LANDMARK_ROLES}))
    return tags + roles


def _has_skip_link(soup) -> bool:
    for a in soup.find_all("a", href=True):
        if not a["href"].startswith("#"):
            continue
        if "skip" in a.get_text(" ", strip=True).lower() or "skip" in dom.class_string(a):
            return True
    first = (soup.body or soup).find("a", href=True)
    return first is not None and first["href"].startswith("#") and len(first["href"]) > 1


def _focusable_count(soup) -> int:
    tags = sum(
        1 for tag in soup.find_all(_FOCUSABLE_TAGS)
        if tag.name != "a" or tag.has_attr("href")
    )
    return tags + len(soup.find_all(attrs={"tabindex": "0"}))


def wcag_level(score: int, priorities: list[str]) -> str:
    if score >= 95 and not any(p in (Priority.CRITICAL, Priority.HIGH) for p in priorities):
        return "AAA"
    if score >= 85 and Priority.CRITICAL not in priorities:
        return "AA"
    return "A"


class AccessibilityAnalyzer(BaseAnalyzer):
    category = Category.ACCESSIBILITY
    rules = RULES

    def collect(self, snapshot: PageSnapshot) -> dict[str, Any]:
        soup = snapshot.soup
        headings = dom.heading_counts(soup)
        html_tag = soup.find("html")
        images = soup.find_all("img")

        return {
            "images": {
                "total": len(images),
                "missing_alt": sum(1 for img in images if not img.has_attr("alt")),
            },
            "unlabeled_fields": _unlabeled_field_count(soup),
            "headings": headings,
            "skipped_levels": dom.has_skipped_heading_levels(headings),
            "empty_headings": dom.empty_heading_count(soup),
            "landmarks": _landmark_count(soup),
            "has_skip_link": _has_skip_link(soup),
            "unnamed_links": sum(1 for a in soup.find_all("a") if not dom.accessible_name(a)),
            "has_title": bool(dom.title_text(soup)),
            "lang": (html_tag.get("lang") or "").strip() if html_tag is not None else "",
            "has_main": soup.find("main") is not None or soup.find(attrs={"role": "main"}) is not None,
            "focusable_elements": _focusable_count(soup),
        }

    def evaluate(self, snapshot: PageSnapshot, details: dict[str, Any]) -> list[Hit]:
        hits: list[Hit] = []

        if details["images"]["missing_alt"]:
            hits.append(self.hit("images_missing_alt", count=details["images"]["missing_alt"]))
        if details["unlabeled_fields"]:
            hits.append(self.hit("unlabeled_fields", count=details["unlabeled_fields"]))

        # ── Headings ──────────────────────────────────────────────────────────
        h1 = details["headings"]["h1"]
        if h1 == 0:
            hits.append(self.hit("missing_h1"))
        elif h1 > 1:
            hits.append(self.hit("multiple_h1", count=h1))
        if details["skipped_levels"]:
            hits.append(self.hit("skipped_heading_levels"))
        if details["empty_headings"]:
            hits.append(self.hit("empty_headings", count=details["empty_headings"]))

        # ── Navigation ────────────────────────────────────────────────────────
        if details["landmarks"] == 0:
            hits.append(self.hit("no_landmarks"))
        if not details["has_skip_link"]:
            hits.append(self.hit("no_skip_link"))
        if details["unnamed_links"]:
            hits.append(self.hit("unnamed_links", count=details["unnamed_links"]))

        # ── Document ──────────────────────────────────────────────────────────
        if not details["has_title"]:
            hits.append(self.hit("missing_title"))
        if not details["lang"]:
            hits.append(self.hit("missing_lang"))
        if not details["has_main"]:
            hits.append(self.hit("missing_main"))
        if details["focusable_elements"] == 0:
            hits.append(self.hit("no_focusable_elements"))

        return hits

    def finalize(self, details: dict[str, Any], score: int, hits: list[Hit]) -> None:
        details["wcag_level"] = wcag_level(score, [h.rule.priority for h in hits])
