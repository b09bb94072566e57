"""
Business metrics analyzer: calls to action, forms, contact details, trust
pages, social presence, structured data and user-experience features.
"""
from __future__ import annotations

import re
from typing import Any

from analyzers import dom
from analyzers.base import BaseAnalyzer, Hit, Rule, rule_table
from config import ALL_TRUST_PAGES, LONG_FORM_FIELDS, MIN_OG_TAGS, MIN_TRUST_PAGES, MIN_UX_FEATURES
from models import Category, PageSnapshot


RULES = rule_table(
    Rule(
        "no_cta", "error", "critical", 20,
        "No call-to-action button was found.",
        "Visitors are not prompted to act, so conversion rate drops.",
        'Add a clear call-to-action button such as "Contact us", "Get started" or "Buy now".',
        location="<body>",
    ),
    Rule(
        "single_cta", "warning", "medium", 10,
        "The page has only one call-to-action.",
        "Conversion opportunities further down the page are missed.",
        "Add call-to-action buttons after key sections and near the footer.",
    ),
    Rule(
        "no_form", "warning", "medium", 15,
        "No form was found.",
        "Visitors have limited ways to get in touch directly.",
        "Add a short contact or enquiry form.",
    ),
    Rule(
        "long_form", "warning", "medium", 8,
        "{count} form(s) ask for more than {limit} fields.",
        "Long forms are tiring to fill in and many visitors abandon them.",
        "Change the form to ask only for the essential fields and mark optional ones clearly.",
        location="<form>",
    ),
    Rule(
        "no_contact_info", "error", "high", 15,
        "No contact information (phone or e-mail) was found.",
        "Visitors cannot reach the business, which lowers trust.",
        "Add a phone number or e-mail address in the header or footer.",
    ),
    Rule(
        "missing_trust_pages", "error", "high", 20,
        "Trust pages are missing ({found} of {expected} found).",
        "Visitors cannot verify who runs the site and hesitate to convert.",
        "Add links to About, Privacy Policy, Terms of Service and Contact pages.",
        location="<footer>",
    ),
    Rule(
        "incomplete_trust_pages", "warning", "medium", 10,
        "Some trust pages are missing ({found} of {expected} found).",
        "Missing legal or company pages reduce credibility.",
        "Add the missing links among About, Privacy Policy, Terms of Service and Contact.",
        location="<footer>",
    ),
    Rule(
        "no_social_links", "info", "low", 10,
        "No social media links were found.",
        "Visitors cannot follow the business on social networks.",
        "Add links to the business's social media profiles.",
    ),
    Rule(
        "incomplete_open_graph", "warning", "medium", 12,
        "Open Graph tags are incomplete ({count} of 4 present).",
        "Shared links look unappealing on social networks.",
        "Add og:title, og:description, og:image and og:type meta tags.",
        location="<head>",
    ),
    Rule(
        "no_structured_data", "info", "low", 8,
        "No structured data (JSON-LD) was found.",
        "Rich results such as ratings or business details cannot appear in search.",
        "Add Organization or LocalBusiness schema.org markup as JSON-LD.",
        location="<head>",
    ),
    Rule(
        "few_ux_features", "info", "low", 8,
        "Few user-experience features were found ({count}).",
        "Visitors have fewer ways to find information and stay engaged.",
        "Add site search, breadcrumbs or a newsletter signup.",
    ),
)

_CTA_TAGS = ("button", "a", "input")
_CTA_PHRASES = (
    "buy", "order", "contact", "get started", "sign up", "signup", "subscribe",
    "free", "download", "register", "book", "request", "try", "join",
)
_CTA_CLASS_MARKERS = ("cta", "call-to-action", "primary")

_TRUST_PAGES = {
    "about": ("about",),
    "privacy": ("privacy",),
    "terms": ("terms", "conditions"),
    "contact": ("contact",),
}

_SOCIAL_DOMAINS = (
    "facebook.com", "twitter.com", "x.com", "instagram.com", "linkedin.com", "youtube.com", "tiktok.com",
)

_OG_PROPERTIES = ("og:title", "og:description", "og:image", "og:type")

_EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
_PHONE_RE = re.compile(r"(\+\d{1,3}[\s.-]?)?(\(\d{1,4}\)[\s.-]?)?\d{2,4}[\s.-]\d{2,4}[\s.-]\d{3,4}")


def _is_cta(tag) -> bool:
    if tag.name == "input":
        if (tag.get("type") or "").lower() not in ("submit", "button"):
            return False
        text = (tag.get("value") or "").lower()
    else:
        text = tag.get_text(" ", strip=True).lower()
    classes = dom.class_string(tag)
    if tag.name == "a" and not any(m in classes for m in ("btn", "button", "cta")) and tag.get("role") != "button":
        return False
    if any(marker in classes for marker in _CTA_CLASS_MARKERS):
        return True
    return bool(text) and any(phrase in text for phrase in _CTA_PHRASES)


def _cta_texts(soup) -> list[str]:
    out = []
    for tag in soup.find_all(_CTA_TAGS):
        if _is_cta(tag):
            out.append(tag.get("value") if tag.name == "input" else tag.get_text(" ", strip=True))
    return out


def _forms(soup) -> list[dict[str, Any]]:
    out = []
    for form in soup.find_all("form"):
        fields = [
            f for f in form.find_all(("input", "textarea", "select"))
            if (f.get("type") or "").lower() not in ("hidden", "submit", "button", "reset", "image")
        ]
        out.append({
            "field_count": len(fields),
            "required_fields": len(form.find_all(attrs={"required": True})),
            "method": (form.get("method") or "get").lower(),
        })
    return out


def _contact_info(soup, text: str) -> dict[str, Any]:
    email = phone = None
    for a in soup.find_all("a", href=True):
        href = a["href"].strip().lower()
        if email is None and href.startswith("mailto:"):
            email = a["href"].strip()[7:]
        if phone is None and href.startswith("tel:"):
            phone = a["href"].strip()[4:]
    if email is None:
        match = _EMAIL_RE.search(text)
        email = match.group(0) if match else None
    if phone is None:
        match = _PHONE_RE.search(text)
        phone = match.group(0) if match else None
    return {"email": email, "phone": phone}


def _trust_pages(soup) -> dict[str, bool]:
    found = {key: False for key in _TRUST_PAGES}
    for a in soup.find_all("a"):
        haystack = f"{a.get('href') or ''} {a.get_text(' ', strip=True)}".lower()
        for key, markers in _TRUST_PAGES.items():
            if not found[key] and any(m in haystack for m in markers):
                found[key] = True
    return found


def _social_links(soup) -> list[str]:
    links = []
    for a in soup.find_all("a", href=True):
        host = dom.hostname(a["href"])
        for domain in _SOCIAL_DOMAINS:
            if host == domain or host.endswith("." + domain):
                links.append(domain.split(".")[0])
                break
    return links


def _ux_features(soup) -> dict[str, bool]:
    def has_class(marker):
        return soup.find(class_=lambda c: c and marker in c.lower()) is not None

    return {
        "search": (
            soup.find("input", type="search") is not None
            or soup.find(attrs={"role": "search"}) is not None
            or soup.find(attrs={"placeholder": lambda p: p and "search" in p.lower()}) is not None
        ),
        "chat": has_class("chat") or has_class("messenger"),
        "newsletter": has_class("newsletter") or has_class("subscribe"),
        "breadcrumbs": (
            has_class("breadcrumb")
            or soup.find("nav", attrs={"aria-label": lambda v: v and "breadcrumb" in v.lower()}) is not None
        ),
    }


class BusinessMetricsAnalyzer(BaseAnalyzer):
    category = Category.BUSINESS_METRICS
    rules = RULES

    def collect(self, snapshot: PageSnapshot) -> dict[str, Any]:
        soup = snapshot.soup
        text = dom.visible_text(soup)

        return {
            "cta_buttons": _cta_texts(soup),
            "forms": _forms(soup),
            "contact_info": _contact_info(soup, text),
            "trust_pages": _trust_pages(soup),
            "social_links": _social_links(soup),
            "open_graph": {prop: dom.meta_content(soup, prop=prop) for prop in _OG_PROPERTIES},
            "structured_data": dom.structured_data_types(soup),
            "ux_features": _ux_features(soup),
        }

    def evaluate(self, snapshot: PageSnapshot, details: dict[str, Any]) -> list[Hit]:
        hits: list[Hit] = []

        # ── Conversion ────────────────────────────────────────────────────────
        ctas = len(details["cta_buttons"])
        if ctas == 0:
            hits.append(self.hit("no_cta"))
        elif ctas == 1:
            hits.append(self.hit("single_cta"))

        forms = details["forms"]
        if not forms:
            hits.append(self.hit("no_form"))
        else:
            long_forms = sum(1 for f in forms if f["field_count"] > LONG_FORM_FIELDS)
            if long_forms:
                hits.append(self.hit("long_form", count=long_forms, limit=LONG_FORM_FIELDS))

        contact = details["contact_info"]
        if not contact["email"] and not contact["phone"]:
            hits.append(self.hit("no_contact_info"))

        # ── Trust ─────────────────────────────────────────────────────────────
        found = sum(details["trust_pages"].values())
        if found < MIN_TRUST_PAGES:
            hits.append(self.hit("missing_trust_pages", found=found, expected=ALL_TRUST_PAGES))
        elif found < ALL_TRUST_PAGES:
            hits.append(self.hit("incomplete_trust_pages", found=found, expected=ALL_TRUST_PAGES))

        # ── Social & discovery ────────────────────────────────────────────────
        if not details["social_links"]:
            hits.append(self.hit("no_social_links"))
        og_count = sum(1 for value in details["open_graph"].values() if value)
        if og_count < MIN_OG_TAGS:
            hits.append(self.hit("incomplete_open_graph", count=og_count))
        if not details["structured_data"]:
            hits.append(self.hit("no_structured_data"))

        ux = sum(details["ux_features"].values())
        if ux < MIN_UX_FEATURES:
            hits.append(self.hit("few_ux_features", count=ux))

        return hits
