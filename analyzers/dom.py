"""
Read-only DOM helpers shared by the analyzers.

The snapshot's BeautifulSoup tree is shared by every analyzer thread, so
nothing here may modify it (no decompose/extract).
"""
from __future__ import annotations

import json
import re
from typing import Optional
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup, Comment, Doctype, Tag

_INVISIBLE_PARENTS = {"script", "style", "noscript", "template", "head", "title"}

_MEDIA_QUERY_RE = re.compile(r"@media[^{]*(max-width|min-width|screen)", re.IGNORECASE)
_FLEX_GRID_RE = re.compile(r"display\s*:\s*(inline-)?(flex|grid)", re.IGNORECASE)
_RELATIVE_UNIT_RE = re.compile(r"\d(\.\d+)?\s*(%|(r?em|vw|vh)\b)", re.IGNORECASE)


# ── Meta ──────────────────────────────────────────────────────────────────────

def meta_content(soup: BeautifulSoup, name: str = "", prop: str = "") -> Optional[str]:
    """Content of <meta name=…> or <meta property=…>, or None if the tag is absent."""
    for meta in soup.find_all("meta"):
        if name and (meta.get("name") or "").strip().lower() == name:
            return meta.get("content") or ""
        if prop and (meta.get("property") or "").strip().lower() == prop:
            return meta.get("content") or ""
    return None


def has_link_rel(soup: BeautifulSoup, rel: str) -> bool:
    return find_link_rel(soup, rel) is not None


def find_link_rel(soup: BeautifulSoup, rel: str) -> Optional[Tag]:
    return soup.find(rel=lambda r: r and rel in (r if isinstance(r, list) else [r]))


def title_text(soup: BeautifulSoup) -> Optional[str]:
    tag = soup.find("title")
    if tag is None:
        return None
    return tag.get_text(strip=True)


# ── Headings ──────────────────────────────────────────────────────────────────

def heading_counts(soup: BeautifulSoup) -> dict[str, int]:
    return {f"h{level}": len(soup.find_all(f"h{level}")) for level in range(1, 7)}


def empty_heading_count(soup: BeautifulSoup) -> int:
    return sum(
        1
        for level in range(1, 7)
        for tag in soup.find_all(f"h{level}")
        if not tag.get_text(strip=True) and tag.find("img", alt=True) is None
    )


def has_skipped_heading_levels(counts: dict[str, int]) -> bool:
    """True when the levels present jump by more than one (e.g. h1 and h3, no h2)."""
    present = [level for level in range(1, 7) if counts.get(f"h{level}", 0) > 0]
    return any(b - a > 1 for a, b in zip(present, present[1:]))


# ── Text ──────────────────────────────────────────────────────────────────────

def visible_text(soup: BeautifulSoup) -> str:
    root = soup.body or soup
    parts = []
    for text in root.find_all(string=True):
        if isinstance(text, (Comment, Doctype)):
            continue
        if text.parent is not None and text.parent.name in _INVISIBLE_PARENTS:
            continue
        stripped = text.strip()
        if stripped:
            parts.append(stripped)
    return re.sub(r"\s+", " ", " ".join(parts)).strip()


def accessible_name(tag: Tag) -> str:
    """Best-effort accessible name of a link or button."""
    for attr in ("aria-label", "aria-labelledby", "title"):
        value = (tag.get(attr) or "").strip()
        if value:
            return value
    text = tag.get_text(strip=True)
    if text:
        return text
    for img in tag.find_all("img"):
        alt = (img.get("alt") or "").strip()
        if alt:
            return alt
    return ""


def class_string(tag: Tag) -> str:
    classes = tag.get("class") or []
    if isinstance(classes, str):
        return classes.lower()
    return " ".join(classes).lower()


# ── Links ─────────────────────────────────────────────────────────────────────

def hostname(url: str) -> str:
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


def resolve(base_url: str, href: str) -> str:
    try:
        return urljoin(base_url, href.strip())
    except ValueError:
        return href


def is_internal_href(href: str, page_host: str) -> bool:
    href = href.strip()
    if href.startswith("//"):
        return hostname("https:" + href) == page_host
    if href.startswith(("/", "./", "../")):
        return True
    if href.lower().startswith(("http://", "https://")):
        return hostname(href) == page_host
    return False


def internal_link_count(soup: BeautifulSoup, page_url: str) -> int:
    page_host = hostname(page_url)
    return sum(1 for a in soup.find_all("a", href=True) if is_internal_href(a["href"], page_host))


# ── Scripts & styles ──────────────────────────────────────────────────────────

def inline_scripts(soup: BeautifulSoup) -> list[str]:
    out = []
    for script in soup.find_all("script"):
        if script.get("src"):
            continue
        kind = (script.get("type") or "").lower()
        if kind in ("application/ld+json", "application/json", "text/template"):
            continue
        out.append(script.string or script.get_text() or "")
    return out


def css_text(soup: BeautifulSoup, external_css: str = "") -> str:
    inline = [style.get_text() for style in soup.find_all("style")]
    inline.extend(tag.get("style", "") for tag in soup.find_all(style=True))
    return "\n".join(inline + [external_css or ""])


def has_media_queries(css: str) -> bool:
    return bool(_MEDIA_QUERY_RE.search(css))


def has_modern_layout(css: str) -> bool:
    return bool(_FLEX_GRID_RE.search(css))


def has_relative_units(css: str) -> bool:
    return bool(_RELATIVE_UNIT_RE.search(css))


def structured_data_types(soup: BeautifulSoup) -> list[str]:
    """@type values of parseable JSON-LD blocks; 'Unknown' for blocks without one."""
    types = []
    for script in soup.find_all("script", type="application/ld+json"):
        try:
            data = json.loads(script.string or script.get_text() or "")
        except (json.JSONDecodeError, TypeError):
            continue
        items = data if isinstance(data, list) else [data]
        for item in items:
            if isinstance(item, dict):
                kind = item.get("@type", "Unknown")
                types.append(kind if isinstance(kind, str) else ",".join(map(str, kind)))
    return types
