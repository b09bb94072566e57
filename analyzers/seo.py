"""
SEO analyzer: title, meta description, headings, alt text, Open Graph, internal links, HTTPS.
"""
from __future__ import annotations

from typing import Any

from analyzers import dom
from analyzers.base import BaseAnalyzer, Hit, Rule, rule_table
from config import DESCRIPTION_MAX_CHARS, MIN_INTERNAL_LINKS, TITLE_MAX_CHARS, TITLE_MIN_CHARS
from models import Category, PageSnapshot


RULES = rule_table(
    Rule(
        "missing_title", "error", "critical", 20,
        "The page has no <title> tag.",
        "No title is shown in search results and most of the page's SEO value is lost.",
        "Add a <title> of 30-60 characters describing the page inside <head>.",
        location="<head>",
    ),
    Rule(
        "title_too_long", "warning", "medium", 10,
        "Title is too long ({length} characters).",
        "The title may be truncated in search results.",
        "Shorten the title to 30-60 characters and move important keywords to the front.",
        location="<head><title>",
    ),
    Rule(
        "title_too_short", "warning", "medium", 5,
        "Title is too short ({length} characters).",
        "The title carries too few keywords, which can lower rankings.",
        "Expand the title to 30-60 characters and include the target keyword.",
        location="<head><title>",
    ),
    Rule(
        "missing_description", "error", "high", 15,
        "The page has no meta description.",
        "Search snippets are not optimised and click-through rate may drop.",
        'Add <meta name="description" content="…"> with a 120-160 character summary inside <head>.',
        location="<head>",
    ),
    Rule(
        "description_too_long", "warning", "medium", 5,
        "Meta description is too long ({length} characters).",
        "The description may be truncated in search results.",
        "Shorten the meta description to 120-160 characters with key terms first.",
        location='<head><meta name="description">',
    ),
    Rule(
        "missing_h1", "error", "high", 15,
        "The page has no H1 heading.",
        "The main topic of the page is unclear and SEO evaluation drops significantly.",
        "Wrap the page's main heading in a single <h1> tag.",
        location="<body>",
    ),
    Rule(
        "multiple_h1", "warning", "medium", 5,
        "The page has {count} H1 headings.",
        "Search engines may struggle to identify the main content.",
        "Keep one H1 per page and change the other headings to H2 or H3.",
        location="<body>",
    ),
    Rule(
        "images_missing_alt", "warning", "medium", 20,
        "{count} image(s) have no alt attribute.",
        "Image search visibility drops and screen-reader users cannot understand the images.",
        'Add alt="description" to each <img>; use alt="" for decorative images.',
        per_unit=2,
        location="<img>",
    ),
    Rule(
        "meta_keywords", "info", "low", 0,
        "A meta keywords tag is present.",
        "Meta keywords have no effect on modern search engines and can look like spam.",
        'Remove the <meta name="keywords"> tag.',
        location="<head>",
    ),
    Rule(
        "incomplete_open_graph", "warning", "medium", 8,
        "Open Graph tags are incomplete (missing: {missing}).",
        "Shared links render poorly on social networks and attract fewer clicks.",
        "Add og:title, og:description and og:image meta tags.",
        location="<head>",
    ),
    Rule(
        "weak_heading_structure", "warning", "medium", 10,
        "The page has no H2 or H3 headings.",
        "The content structure is unclear, hurting both SEO and usability.",
        "Add H2 and H3 headings under the H1 to build a heading hierarchy.",
    ),
    Rule(
        "few_internal_links", "info", "low", 3,
        "The page has few internal links ({count}).",
        "Visitors and crawlers have fewer paths through the site.",
        "Add 3-10 internal links to related pages.",
    ),
    Rule(
        "not_https", "warning", "high", 10,
        "The page URL does not use HTTPS.",
        "Search engines use HTTPS as a ranking signal and browsers mark the page as not secure.",
        "Serve the page over HTTPS and redirect all HTTP requests.",
    ),
)

_OG_REQUIRED = ("og:title", "og:description", "og:image")


class SEOAnalyzer(BaseAnalyzer):
    category = Category.SEO
    rules = RULES

    def collect(self, snapshot: PageSnapshot) -> dict[str, Any]:
        soup = snapshot.soup
        title = dom.title_text(soup)
        description = dom.meta_content(soup, name="description")
        headings = dom.heading_counts(soup)

        return {
            "title": title,
            "title_length": len(title) if title else 0,
            "description": description,
            "description_length": len(description) if description else 0,
            "headings": headings,
            "images_without_alt": sum(1 for img in soup.find_all("img") if not img.has_attr("alt")),
            "meta_keywords": dom.meta_content(soup, name="keywords"),
            "open_graph": {prop: dom.meta_content(soup, prop=prop) for prop in _OG_REQUIRED},
            "internal_links": dom.internal_link_count(soup, snapshot.effective_url),
            "https": snapshot.is_https,
        }

    def evaluate(self, snapshot: PageSnapshot, details: dict[str, Any]) -> list[Hit]:
        hits: list[Hit] = []

        # ── Title ─────────────────────────────────────────────────────────────
        length = details["title_length"]
        if not details["title"]:
            hits.append(self.hit("missing_title"))
        elif length > TITLE_MAX_CHARS:
            hits.append(self.hit("title_too_long", length=length))
        elif length < TITLE_MIN_CHARS:
            hits.append(self.hit("title_too_short", length=length))

        # ── Description ───────────────────────────────────────────────────────
        if details["description"] is None:
            hits.append(self.hit("missing_description"))
        elif details["description_length"] > DESCRIPTION_MAX_CHARS:
            hits.append(self.hit("description_too_long", length=details["description_length"]))

        # ── Headings ──────────────────────────────────────────────────────────
        h1 = details["headings"]["h1"]
        if h1 == 0:
            hits.append(self.hit("missing_h1"))
        elif h1 > 1:
            hits.append(self.hit("multiple_h1", count=h1))

        # ── Images ────────────────────────────────────────────────────────────
        if details["images_without_alt"]:
            hits.append(self.hit("images_missing_alt", count=details["images_without_alt"]))

        if details["meta_keywords"]:
            hits.append(self.hit("meta_keywords"))

        # ── Social ────────────────────────────────────────────────────────────
        missing_og = [prop for prop, value in details["open_graph"].items() if not value]
        if missing_og:
            hits.append(self.hit("incomplete_open_graph", missing=", ".join(missing_og)))

        if details["headings"]["h2"] == 0 and details["headings"]["h3"] == 0:
            hits.append(self.hit("weak_heading_structure"))

        if details["internal_links"] < MIN_INTERNAL_LINKS:
            hits.append(self.hit("few_internal_links", count=details["internal_links"]))

        if not details["https"]:
            hits.append(self.hit("not_https"))

        return hits
