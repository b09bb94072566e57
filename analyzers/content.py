"""
Content quality analyzer: text volume, readability, structured data, broken
images, link profile and article metadata.
"""
from __future__ import annotations

import re
from typing import Any

from analyzers import dom
from analyzers.base import BaseAnalyzer, Hit, Rule, rule_table
from config import (
    AFFILIATE_LINKS_MAX,
    MIN_INTERNAL_LINKS,
    SENTENCE_LENGTH_MAX,
    THIN_CONTENT_CHARS,
    VERY_THIN_CONTENT_CHARS,
)
from models import Category, PageSnapshot, ResourceKind


RULES = rule_table(
    Rule(
        "very_thin_content", "error", "high", 25,
        "The page has very little text ({length} characters).",
        "Search engines may treat the page as low quality.",
        "Add at least 300 characters of useful, original text.",
    ),
    Rule(
        "thin_content", "warning", "medium", 15,
        "The page has little text ({length} characters).",
        "Thin pages struggle to rank for competitive queries.",
        "Add more detailed explanations, examples and answers to common questions.",
    ),
    Rule(
        "long_sentences", "warning", "medium", 10,
        "Sentences are long (average {average} characters).",
        "Long sentences are hard to read and visitors skim past them.",
        "Change long sentences into shorter ones and use bullet lists.",
    ),
    Rule(
        "no_structured_data", "info", "low", 5,
        "No structured data (JSON-LD) was found.",
        "The page is not eligible for rich results in search.",
        "Add schema.org markup as a JSON-LD script.",
        location="<head>",
    ),
    Rule(
        "broken_images", "error", "high", 25,
        "{count} image(s) failed to load.",
        "Broken images make the page look neglected and hurt trust.",
        "Fix or remove image URLs that return errors.",
        per_unit=5,
        location="<img>",
    ),
    Rule(
        "few_internal_links", "warning", "medium", 8,
        "The page has few internal links ({count}).",
        "Visitors have no obvious next page and crawlers find fewer pages.",
        "Add links to related articles and key pages in the body text.",
    ),
    Rule(
        "many_affiliate_links", "warning", "low", 5,
        "The page has many affiliate links ({count}).",
        "Heavy affiliate linking can look spammy to visitors and search engines.",
        'Reduce affiliate links and mark the remaining ones with rel="sponsored".',
    ),
    Rule(
        "missing_canonical", "warning", "medium", 8,
        "No canonical URL is declared.",
        "Duplicate URLs may split ranking signals.",
        'Add <link rel="canonical" href="…"> pointing at the preferred URL.',
        location="<head>",
    ),
    Rule(
        "missing_article_metadata", "info", "low", 3,
        "Neither author nor publication date is declared.",
        "Readers and search engines cannot judge how authoritative or fresh the content is.",
        'Add <meta name="author"> and an article:published_time meta tag.',
        location="<head>",
    ),
)

_SENTENCE_END_RE = re.compile(r"[。！？.!?]+")
_AFFILIATE_MARKERS = ("amazon", "affiliate")


def _link_profile(soup, page_url: str) -> dict[str, int]:
    page_host = dom.hostname(page_url)
    internal = external = affiliate = nofollow = 0
    for a in soup.find_all("a", href=True):
        href = a["href"].strip()
        rel = a.get("rel") or []
        if "nofollow" in (rel if isinstance(rel, list) else [rel]):
            nofollow += 1
        if dom.is_internal_href(href, page_host):
            internal += 1
        elif href.lower().startswith(("http://", "https://", "//")):
            external += 1
            if any(marker in href.lower() for marker in _AFFILIATE_MARKERS):
                affiliate += 1
    return {"internal": internal, "external": external, "affiliate": affiliate, "nofollow": nofollow}


def _text_stats(text: str) -> dict[str, int]:
    sentences = len(_SENTENCE_END_RE.findall(text))
    return {
        "length": len(text),
        "sentences": sentences,
        "average_sentence_length": round(len(text) / sentences) if sentences else 0,
    }


class ContentQualityAnalyzer(BaseAnalyzer):
    category = Category.CONTENT_QUALITY
    rules = RULES

    def collect(self, snapshot: PageSnapshot) -> dict[str, Any]:
        soup = snapshot.soup
        structured = dom.structured_data_types(soup)

        return {
            "text": _text_stats(dom.visible_text(soup)),
            "paragraphs": len(soup.find_all("p")),
            "structured_data": bool(soup.find("script", type="application/ld+json")),
            "structured_data_types": structured,
            "links": _link_profile(soup, snapshot.effective_url),
            "images": len(soup.find_all("img")),
            "broken_images": sum(
                1 for r in snapshot.resources if r.kind == ResourceKind.IMAGE and r.failed
            ),
            "metadata": {
                "author": dom.meta_content(soup, name="author") is not None or dom.has_link_rel(soup, "author"),
                "published": (
                    dom.meta_content(soup, prop="article:published_time") is not None
                    or soup.find("time", attrs={"pubdate": True}) is not None
                ),
                "modified": dom.meta_content(soup, prop="article:modified_time") is not None,
                "canonical": dom.has_link_rel(soup, "canonical"),
            },
        }

    def evaluate(self, snapshot: PageSnapshot, details: dict[str, Any]) -> list[Hit]:
        hits: list[Hit] = []
        text = details["text"]

        # ── Text ──────────────────────────────────────────────────────────────
        if text["length"] < VERY_THIN_CONTENT_CHARS:
            hits.append(self.hit("very_thin_content", length=text["length"]))
        elif text["length"] < THIN_CONTENT_CHARS:
            hits.append(self.hit("thin_content", length=text["length"]))
        if text["average_sentence_length"] > SENTENCE_LENGTH_MAX:
            hits.append(self.hit("long_sentences", average=text["average_sentence_length"]))

        if not details["structured_data"]:
            hits.append(self.hit("no_structured_data"))

        if details["broken_images"]:
            hits.append(self.hit("broken_images", count=details["broken_images"]))

        # ── Links ─────────────────────────────────────────────────────────────
        links = details["links"]
        if links["internal"] < MIN_INTERNAL_LINKS:
            hits.append(self.hit("few_internal_links", count=links["internal"]))
        if links["affiliate"] > AFFILIATE_LINKS_MAX:
            hits.append(self.hit("many_affiliate_links", count=links["affiliate"]))

        # ── Metadata ──────────────────────────────────────────────────────────
        meta = details["metadata"]
        if not meta["canonical"]:
            hits.append(self.hit("missing_canonical"))
        if not meta["author"] and not meta["published"]:
            hits.append(self.hit("missing_article_metadata"))

        return hits
