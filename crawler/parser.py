"""
Extracts the sub-resources (scripts, stylesheets, images, fonts) a page references.
"""
from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urljoin, urlparse

import tldextract
from bs4 import BeautifulSoup

from models import ResourceKind

# Bundled public suffix list only; no network fetch at runtime
_EXTRACT = tldextract.TLDExtract(suffix_list_urls=())


@dataclass(frozen=True)
class ResourceRef:
    kind: str
    url: str
    third_party: bool


def extract_resources(soup: BeautifulSoup, page_url: str) -> list[ResourceRef]:
    """
    Resource references in document order, resolved against <base> or the page URL.
    Duplicates and data: URIs are skipped.
    """
    base_url = _resolve_base_url(soup, page_url)
    seen: set[str] = set()
    refs: list[ResourceRef] = []

    for tag in soup.find_all(("script", "link", "img")):
        kind, raw = _classify(tag)
        if not kind or not raw or raw.startswith("data:"):
            continue
        url = urljoin(base_url, raw)
        if url in seen or urlparse(url).scheme not in ("http", "https"):
            continue
        seen.add(url)
        refs.append(ResourceRef(kind=kind, url=url, third_party=is_third_party(url, page_url)))

    return refs


def is_third_party(url: str, page_url: str) -> bool:
    host = (urlparse(url).hostname or "").lower()
    page_host = (urlparse(page_url).hostname or "").lower()
    if not host or host == page_host:
        return False
    ext = _EXTRACT(host)
    site_ext = _EXTRACT(page_host)
    if not ext.registered_domain or not site_ext.registered_domain:
        return True
    return ext.registered_domain != site_ext.registered_domain


def _classify(tag) -> tuple[str, str]:
    if tag.name == "script":
        return ResourceKind.SCRIPT, (tag.get("src") or "").strip()
    if tag.name == "img":
        return ResourceKind.IMAGE, (tag.get("src") or "").strip()

    rel = tag.get("rel") or []
    rel = [r.lower() for r in (rel if isinstance(rel, list) else [rel])]
    href = (tag.get("href") or "").strip()
    if "stylesheet" in rel:
        return ResourceKind.STYLESHEET, href
    if "preload" in rel and (tag.get("as") or "").lower() == "font":
        return ResourceKind.FONT, href
    if "icon" in rel:
        return ResourceKind.IMAGE, href
    return "", ""


def _resolve_base_url(soup: BeautifulSoup, fallback: str) -> str:
    base_tag = soup.find("base", href=True)
    if base_tag:
        return urljoin(fallback, base_tag["href"])
    return fallback
