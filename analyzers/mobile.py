"""
Mobile-friendliness analyzer: viewport meta, responsive CSS, touch targets and text size.

Touch target, text size and horizontal scroll rules need runtime measurements;
they are skipped when the snapshot does not carry them.
"""
from __future__ import annotations

from typing import Any

from analyzers import dom
from analyzers.base import BaseAnalyzer, Hit, Rule, rule_table
from config import MOBILE_IMAGE_COUNT_MAX, SMALL_TEXT_RATIO_MAX
from models import Category, PageSnapshot


RULES = rule_table(
    Rule(
        "missing_viewport", "error", "critical", 35,
        "No viewport meta tag.",
        "Mobile browsers render the desktop layout zoomed out and the page is hard to use.",
        'Add <meta name="viewport" content="width=device-width, initial-scale=1"> inside <head>.',
        location="<head>",
    ),
    Rule(
        "viewport_without_device_width", "warning", "high", 15,
        "The viewport does not use width=device-width.",
        "The layout does not adapt to the screen width of the device.",
        "Set width=device-width in the viewport meta tag.",
        location='<meta name="viewport">',
    ),
    Rule(
        "viewport_without_initial_scale", "info", "low", 5,
        "The viewport does not set initial-scale.",
        "The initial zoom level may differ between devices.",
        "Add initial-scale=1 to the viewport meta tag.",
        location='<meta name="viewport">',
    ),
    Rule(
        "zoom_disabled", "warning", "medium", 10,
        "User zoom is disabled (user-scalable=no).",
        "Visitors with low vision cannot enlarge the text.",
        "Remove user-scalable=no from the viewport meta tag.",
        location='<meta name="viewport">',
    ),
    Rule(
        "no_media_queries", "warning", "high", 25,
        "No responsive media queries were found.",
        "The layout cannot adjust to small screens.",
        "Implement responsive breakpoints with @media (max-width: …) rules.",
    ),
    Rule(
        "no_modern_layout", "info", "medium", 10,
        "Neither flexbox nor CSS grid is used.",
        "Fixed layouts are harder to make responsive.",
        "Rebuild the page layout with flexbox or CSS grid.",
    ),
    Rule(
        "no_relative_units", "info", "low", 5,
        "No relative CSS units (%, em, rem, vw, vh) were found.",
        "Fixed pixel sizes scale poorly across screens.",
        "Change fixed pixel sizes to rem, % or viewport units.",
    ),
    Rule(
        "small_touch_targets", "warning", "medium", 15,
        "{count} touch target(s) are smaller than 44×44 px.",
        "Users tap the wrong element on touch screens.",
        "Set a minimum size of 44×44 px on buttons and links.",
        per_unit=2,
    ),
    Rule(
        "small_text", "warning", "medium", 12,
        "{percent:.0f}% of the text is smaller than 16 px.",
        "Text is hard to read on phones without zooming.",
        "Set the base font size to at least 16 px.",
    ),
    Rule(
        "horizontal_scroll", "error", "high", 20,
        "The page scrolls horizontally on a phone-sized viewport.",
        "Content is cut off and users must scroll sideways.",
        "Change fixed-width elements to fluid widths and constrain media with max-width: 100%.",
    ),
    Rule(
        "many_images", "info", "low", 5,
        "The page loads {count} images.",
        "Many images slow down pages on mobile networks.",
        'Add loading="lazy" to images below the fold.',
        location="<img>",
    ),
)


def _viewport(soup) -> dict[str, Any]:
    content = dom.meta_content(soup, name="viewport")
    if content is None:
        return {"present": False, "content": ""}
    normalized = content.replace(" ", "").lower()
    return {
        "present": True,
        "content": content,
        "device_width": "width=device-width" in normalized,
        "initial_scale": "initial-scale" in normalized,
        "zoom_disabled": "user-scalable=no" in normalized or "user-scalable=0" in normalized,
    }


def _responsive_link_media(soup) -> bool:
    for link in soup.find_all("link", media=True):
        if "width" in link["media"].lower():
            return True
    return False


class MobileAnalyzer(BaseAnalyzer):
    category = Category.MOBILE
    rules = RULES

    def collect(self, snapshot: PageSnapshot) -> dict[str, Any]:
        soup = snapshot.soup
        css = dom.css_text(soup, snapshot.stylesheet_text)
        runtime = snapshot.runtime

        return {
            "viewport": _viewport(soup),
            "responsive": {
                "media_queries": dom.has_media_queries(css) or _responsive_link_media(soup),
                "modern_layout": dom.has_modern_layout(css),
                "relative_units": dom.has_relative_units(css),
            },
            "small_touch_targets": runtime.small_touch_targets,
            "small_text_ratio": runtime.small_text_ratio,
            "horizontal_scroll": runtime.horizontal_scroll,
            "image_count": len(soup.find_all("img")),
        }

    def evaluate(self, snapshot: PageSnapshot, details: dict[str, Any]) -> list[Hit]:
        hits: list[Hit] = []

        # ── Viewport ──────────────────────────────────────────────────────────
        viewport = details["viewport"]
        if not viewport["present"]:
            hits.append(self.hit("missing_viewport"))
        else:
            if not viewport["device_width"]:
                hits.append(self.hit("viewport_without_device_width"))
            if not viewport["initial_scale"]:
                hits.append(self.hit("viewport_without_initial_scale"))
            if viewport["zoom_disabled"]:
                hits.append(self.hit("zoom_disabled"))

        # ── Responsive CSS ────────────────────────────────────────────────────
        responsive = details["responsive"]
        if not responsive["media_queries"]:
            hits.append(self.hit("no_media_queries"))
        if not responsive["modern_layout"]:
            hits.append(self.hit("no_modern_layout"))
        if not responsive["relative_units"]:
            hits.append(self.hit("no_relative_units"))

        # ── Runtime measurements ──────────────────────────────────────────────
        if details["small_touch_targets"]:
            hits.append(self.hit("small_touch_targets", count=details["small_touch_targets"]))
        ratio = details["small_text_ratio"]
        if ratio is not None and ratio > SMALL_TEXT_RATIO_MAX:
            hits.append(self.hit("small_text", percent=ratio * 100))
        if details["horizontal_scroll"]:
            hits.append(self.hit("horizontal_scroll"))

        if details["image_count"] > MOBILE_IMAGE_COUNT_MAX:
            hits.append(self.hit("many_images", count=details["image_count"]))

        return hits
