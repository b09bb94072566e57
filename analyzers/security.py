"""
Security analyzer: HTTPS, security headers, mixed content, form transport and CSRF, cookies.
"""
from __future__ import annotations

from typing import Any

from analyzers import dom
from analyzers.base import BaseAnalyzer, Hit, Rule, rule_table
from models import Category, PageSnapshot


RULES = rule_table(
    Rule(
        "not_https", "error", "critical", 40,
        "The page is not served over HTTPS.",
        "Traffic is not encrypted, which is a severe security risk.",
        "Obtain a TLS certificate and migrate all traffic to HTTPS.",
    ),
    Rule(
        "missing_hsts", "warning", "medium", 10,
        "No Strict-Transport-Security (HSTS) header.",
        "Browsers do not force HTTPS automatically, leaving room for man-in-the-middle attacks.",
        'Set "Strict-Transport-Security: max-age=31536000; includeSubDomains" on the web server.',
        location="HTTP response headers",
    ),
    Rule(
        "clickjacking", "warning", "medium", 10,
        "Clickjacking protection is insufficient.",
        "A malicious site can embed the page in a frame and trick users.",
        "Set X-Frame-Options: DENY or Content-Security-Policy: frame-ancestors 'none'.",
        location="HTTP response headers",
    ),
    Rule(
        "missing_csp", "warning", "medium", 8,
        "No Content-Security-Policy header.",
        "Protection against XSS and code injection is weak.",
        "Add a Content-Security-Policy header that restricts allowed resource origins.",
        location="HTTP response headers",
    ),
    Rule(
        "missing_referrer_policy", "info", "low", 5,
        "No Referrer-Policy header.",
        "Referrer information may leak to third parties.",
        "Set Referrer-Policy: strict-origin-when-cross-origin.",
        location="HTTP response headers",
    ),
    Rule(
        "missing_content_type_options", "warning", "medium", 5,
        "No X-Content-Type-Options header.",
        "The page is exposed to MIME type sniffing attacks.",
        "Set X-Content-Type-Options: nosniff.",
        location="HTTP response headers",
    ),
    Rule(
        "mixed_content", "error", "critical", 20,
        "Mixed content detected ({count} resource(s) loaded over HTTP).",
        "Browsers show security warnings and may block some content.",
        "Serve every image, stylesheet and script over HTTPS.",
    ),
    Rule(
        "insecure_form", "error", "critical", 25,
        "{count} form(s) submit over plain HTTP.",
        "Form data is sent in clear text and can be intercepted.",
        "Change the form action attribute to an HTTPS URL.",
        location="<form>",
    ),
    Rule(
        "missing_csrf", "warning", "high", 10,
        "{count} POST form(s) have no CSRF token.",
        "The forms are exposed to cross-site request forgery.",
        "Implement CSRF tokens in every state-changing form.",
        location="<form>",
    ),
    Rule(
        "cookie_flags", "info", "medium", 0,
        "Review the security attributes of the cookies set by this page.",
        "Secure, HttpOnly or SameSite may not be set on every cookie.",
        "Set the Secure, HttpOnly and SameSite attributes when issuing cookies.",
        location="Set-Cookie header",
    ),
)

_MIXED_CONTENT_TAGS = ("img", "script", "link", "iframe")
_CSRF_NAME_HINTS = ("csrf", "token")


def _mixed_content_count(soup) -> int:
    count = 0
    for tag in soup.find_all(_MIXED_CONTENT_TAGS):
        src = tag.get("src") or tag.get("href") or ""
        if src.strip().lower().startswith("http://"):
            count += 1
    return count


def _form_security(soup, page_url: str) -> dict[str, int]:
    forms = soup.find_all("form")
    insecure = 0
    without_csrf = 0
    for form in forms:
        action = (form.get("action") or "").strip()
        if action and dom.resolve(page_url, action).lower().startswith("http://"):
            insecure += 1
        if (form.get("method") or "").strip().lower() == "post":
            names = [(i.get("name") or "").lower() for i in form.find_all("input")]
            if not any(hint in name for name in names for hint in _CSRF_NAME_HINTS):
                without_csrf += 1
    return {"total_forms": len(forms), "insecure_forms": insecure, "forms_without_csrf": without_csrf}


class SecurityAnalyzer(BaseAnalyzer):
    category = Category.SECURITY
    rules = RULES

    def collect(self, snapshot: PageSnapshot) -> dict[str, Any]:
        https = snapshot.is_https
        return {
            "https": https,
            "headers": {
                "hsts": snapshot.has_header("strict-transport-security"),
                "csp": snapshot.has_header("content-security-policy"),
                "frame_options": snapshot.has_header("x-frame-options"),
                "referrer_policy": snapshot.has_header("referrer-policy"),
                "content_type_options": snapshot.has_header("x-content-type-options"),
            },
            "mixed_content": _mixed_content_count(snapshot.soup) if https else 0,
            "form_security": _form_security(snapshot.soup, snapshot.effective_url),
            "sets_cookies": bool(snapshot.header("set-cookie")),
        }

    def evaluate(self, snapshot: PageSnapshot, details: dict[str, Any]) -> list[Hit]:
        hits: list[Hit] = []
        headers = details["headers"]

        if not details["https"]:
            hits.append(self.hit("not_https"))

        # ── Headers ───────────────────────────────────────────────────────────
        if not headers["hsts"]:
            hits.append(self.hit("missing_hsts"))
        if not headers["frame_options"] and not headers["csp"]:
            hits.append(self.hit("clickjacking"))
        if not headers["csp"]:
            hits.append(self.hit("missing_csp"))
        if not headers["referrer_policy"]:
            hits.append(self.hit("missing_referrer_policy"))
        if not headers["content_type_options"]:
            hits.append(self.hit("missing_content_type_options"))

        if details["mixed_content"]:
            hits.append(self.hit("mixed_content", count=details["mixed_content"]))

        # ── Forms ─────────────────────────────────────────────────────────────
        forms = details["form_security"]
        if forms["insecure_forms"]:
            hits.append(self.hit("insecure_form", count=forms["insecure_forms"]))
        if forms["forms_without_csrf"]:
            hits.append(self.hit("missing_csrf", count=forms["forms_without_csrf"]))

        if details["https"] and details["sets_cookies"]:
            hits.append(self.hit("cookie_flags"))

        return hits
