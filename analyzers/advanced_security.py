"""
Advanced security analyzer: subresource integrity, exposed personal data,
external dependencies, form transport, password autocomplete hints and
dangerous inline script patterns.
"""
from __future__ import annotations

import re
from typing import Any

from analyzers import dom
from analyzers.base import BaseAnalyzer, Hit, Rule, rule_table
from config import EXTERNAL_DOMAINS_MAX, INLINE_SCRIPTS_MAX, SRI_COVERAGE_MIN, TRACKING_HOSTS_MAX
from models import Category, PageSnapshot


RULES = rule_table(
    Rule(
        "low_sri_coverage", "warning", "medium", 15,
        "External scripts lack subresource integrity (coverage {coverage}%).",
        "A compromised CDN or third-party script would go undetected.",
        "Add an integrity attribute to external script tags.",
        location="<script src>",
    ),
    Rule(
        "exposed_emails", "warning", "medium", 10,
        "{count} e-mail address(es) appear in the page text.",
        "Harvesters collect the addresses for spam and phishing.",
        "Change plain e-mail addresses into a contact form or obfuscated links.",
        per_unit=2,
    ),
    Rule(
        "exposed_phones", "info", "low", 3,
        "{count} phone number(s) appear in the page text.",
        "Published numbers can attract unsolicited calls.",
        "Check that every published phone number is meant to be public.",
    ),
    Rule(
        "many_external_domains", "warning", "medium", 10,
        "Resources are loaded from {count} external domains.",
        "Every external domain is another party that can break or compromise the page.",
        "Reduce external dependencies and self-host critical assets.",
    ),
    Rule(
        "many_trackers", "warning", "medium", 8,
        "{count} tracking hosts were detected.",
        "Visitor privacy suffers and consent requirements grow.",
        "Remove tracking scripts you do not actively use.",
    ),
    Rule(
        "insecure_form_submission", "error", "critical", 25,
        "{count} of {total} form(s) do not submit over HTTPS.",
        "Form data can be intercepted in transit.",
        "Change every form action to an HTTPS endpoint.",
        location="<form>",
    ),
    Rule(
        "password_autocomplete", "warning", "medium", 8,
        "Password fields are missing autocomplete hints.",
        "Password managers cannot fill or generate credentials reliably.",
        'Set autocomplete="current-password" or "new-password" on password fields.',
        location='<input type="password">',
    ),
    Rule(
        "eval_usage", "error", "critical", 30,
        "Inline script calls eval().",
        "Evaluating strings as code opens the door to script injection.",
        "Rebuild the logic without eval() and parse data with JSON.parse.",
        location="<script>",
    ),
    Rule(
        "document_write", "warning", "high", 15,
        "Inline script uses document.write.",
        "document.write blocks parsing and can inject untrusted markup.",
        "Change document.write calls to DOM APIs such as appendChild.",
        location="<script>",
    ),
    Rule(
        "many_inline_scripts", "info", "low", 5,
        "The page contains {count} inline scripts.",
        "Inline scripts make a strict Content-Security-Policy hard to deploy.",
        "Move inline scripts into external files.",
    ),
)

_EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
_PHONE_RE = re.compile(r"\d{2,4}-\d{2,4}-\d{4}")
_TRACKING_MARKERS = ("google-analytics", "googletagmanager", "facebook", "tracking", "analytics")
_RESOURCE_ATTRS = (("script", "src"), ("link", "href"), ("img", "src"), ("iframe", "src"))


def _sri(soup) -> dict[str, int]:
    scripts = soup.find_all("script", src=True)
    stylesheets = [link for link in soup.find_all("link") if "stylesheet" in (link.get("rel") or [])]
    return {
        "scripts": len(scripts),
        "protected_scripts": sum(1 for s in scripts if s.has_attr("integrity")),
        "stylesheets": len(stylesheets),
        "protected_stylesheets": sum(1 for s in stylesheets if s.has_attr("integrity")),
    }


def _external_hosts(soup, page_url: str) -> list[str]:
    page_host = dom.hostname(page_url)
    hosts = []
    for tag_name, attr in _RESOURCE_ATTRS:
        for tag in soup.find_all(tag_name, attrs={attr: True}):
            host = dom.hostname(dom.resolve(page_url, tag[attr]))
            if host and host != page_host and host not in hosts:
                hosts.append(host)
    return hosts


def _form_security(soup, page_url: str) -> dict[str, int]:
    forms = soup.find_all("form")
    https_forms = 0
    password_fields = secure_password_fields = 0
    for form in forms:
        action = dom.resolve(page_url, form.get("action") or "") if form.get("action") else page_url
        if action.lower().startswith("https://"):
            https_forms += 1
        for field in form.find_all("input", type="password"):
            password_fields += 1
            if (field.get("autocomplete") or "").lower() in ("current-password", "new-password"):
                secure_password_fields += 1
    return {
        "forms": len(forms),
        "https_submission": https_forms,
        "password_fields": password_fields,
        "secure_password_fields": secure_password_fields,
    }


class AdvancedSecurityAnalyzer(BaseAnalyzer):
    category = Category.ADVANCED_SECURITY
    rules = RULES

    def collect(self, snapshot: PageSnapshot) -> dict[str, Any]:
        soup = snapshot.soup
        text = dom.visible_text(soup)
        scripts = dom.inline_scripts(soup)
        external = _external_hosts(soup, snapshot.effective_url)

        return {
            "sri": _sri(soup),
            "personal_data": {
                "emails": sorted(set(_EMAIL_RE.findall(text))),
                "phones": sorted(set(_PHONE_RE.findall(text))),
            },
            "external_domains": external,
            "tracking_hosts": [h for h in external if any(m in h for m in _TRACKING_MARKERS)],
            "form_security": _form_security(soup, snapshot.effective_url),
            "inline_scripts": len(scripts),
            "eval_usage": any("eval(" in s for s in scripts),
            "document_write": any("document.write" in s for s in scripts),
        }

    def evaluate(self, snapshot: PageSnapshot, details: dict[str, Any]) -> list[Hit]:
        hits: list[Hit] = []

        sri = details["sri"]
        if sri["scripts"]:
            coverage = sri["protected_scripts"] / sri["scripts"] * 100
            if coverage < SRI_COVERAGE_MIN:
                hits.append(self.hit("low_sri_coverage", coverage=round(coverage)))

        # ── Personal data ─────────────────────────────────────────────────────
        personal = details["personal_data"]
        if personal["emails"]:
            hits.append(self.hit("exposed_emails", count=len(personal["emails"])))
        if personal["phones"]:
            hits.append(self.hit("exposed_phones", count=len(personal["phones"])))

        # ── Dependencies ──────────────────────────────────────────────────────
        if len(details["external_domains"]) > EXTERNAL_DOMAINS_MAX:
            hits.append(self.hit("many_external_domains", count=len(details["external_domains"])))
        if len(details["tracking_hosts"]) > TRACKING_HOSTS_MAX:
            hits.append(self.hit("many_trackers", count=len(details["tracking_hosts"])))

        # ── Forms ─────────────────────────────────────────────────────────────
        forms = details["form_security"]
        if forms["forms"] and forms["https_submission"] < forms["forms"]:
            insecure = forms["forms"] - forms["https_submission"]
            hits.append(self.hit("insecure_form_submission", count=insecure, total=forms["forms"]))
        if forms["password_fields"] and forms["secure_password_fields"] < forms["password_fields"]:
            hits.append(self.hit("password_autocomplete"))

        # ── Inline scripts ────────────────────────────────────────────────────
        if details["eval_usage"]:
            hits.append(self.hit("eval_usage"))
        if details["document_write"]:
            hits.append(self.hit("document_write"))
        if details["inline_scripts"] > INLINE_SCRIPTS_MAX:
            hits.append(self.hit("many_inline_scripts", count=details["inline_scripts"]))

        return hits
