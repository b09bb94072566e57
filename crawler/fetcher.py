"""
HTTP fetcher. Retrieves one page (following redirects), probes a bounded number
of its stylesheets and images, and builds the immutable PageSnapshot the
analyzers read.
"""
from __future__ import annotations

import time
from typing import Optional
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup

from crawler.parser import ResourceRef, extract_resources
from logger import get_logger
from models import AuditConfig, PageSnapshot, Resource, ResourceKind

logger = get_logger(__name__)

_MAX_REDIRECTS = 10
_REDIRECT_CODES = (301, 302, 303, 307, 308)


class FetchError(Exception):
    """The page could not be retrieved, so there is nothing to audit."""

    def __init__(self, url: str, reason: str, status_code: int = 0):
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason
        self.status_code = status_code


def fetch_snapshot(
    url: str,
    session: Optional[requests.Session] = None,
    config: Optional[AuditConfig] = None,
) -> PageSnapshot:
    """
    Fetch `url` and return a PageSnapshot.

    Raises FetchError on network failure, redirect loops, HTTP error statuses
    and non-HTML responses.
    """
    config = config or AuditConfig()
    session = session or requests.Session()
    headers = {"User-Agent": config.user_agent}

    t0 = time.perf_counter()
    resp = _follow_redirects(url, session, config.request_timeout, headers)
    response_time_ms = (time.perf_counter() - t0) * 1000

    if resp.status_code >= 400:
        raise FetchError(url, f"HTTP {resp.status_code}", resp.status_code)

    content_type = resp.headers.get("content-type", "").lower()
    if content_type and "html" not in content_type:
        raise FetchError(url, f"not an HTML page ({content_type})", resp.status_code)

    final_url = resp.url or url
    html = resp.text or ""
    logger.info("Fetched %s (%d, %.0f ms)", final_url, resp.status_code, response_time_ms)

    try:
        soup = BeautifulSoup(html, "lxml")
    except Exception:
        soup = BeautifulSoup(html, "html.parser")
    refs = extract_resources(soup, final_url)

    resources, stylesheet_text = _probe_resources(refs, session, config, headers)

    return PageSnapshot(
        url=url,
        final_url=final_url,
        http_status=resp.status_code,
        response_headers=dict(resp.headers),
        response_time_ms=response_time_ms,
        content_length=len(resp.content or b""),
        html=html,
        resources=tuple(resources),
        stylesheet_text=stylesheet_text,
    )


def _follow_redirects(
    url: str,
    session: requests.Session,
    timeout: int,
    headers: dict[str, str],
) -> requests.Response:
    """Follow redirects manually so loops are reported instead of retried."""
    current_url = url
    seen_urls: set[str] = set()

    for _ in range(_MAX_REDIRECTS):
        try:
            resp = session.get(current_url, headers=headers, timeout=timeout, allow_redirects=False)
        except requests.exceptions.SSLError as exc:
            raise FetchError(url, f"SSL error: {exc}") from exc
        except requests.exceptions.Timeout as exc:
            raise FetchError(url, "request timed out") from exc
        except requests.exceptions.ConnectionError as exc:
            raise FetchError(url, f"connection error: {exc}") from exc
        except requests.exceptions.RequestException as exc:
            raise FetchError(url, f"request failed: {exc}") from exc

        if resp.status_code not in _REDIRECT_CODES:
            return resp

        location = resp.headers.get("location", "")
        if not location:
            return resp

        try:
            next_url = urljoin(current_url, location)
        except ValueError as exc:
            raise FetchError(url, f"invalid redirect location: {location}", resp.status_code) from exc
        if next_url in seen_urls or next_url == current_url:
            raise FetchError(url, "redirect loop detected", resp.status_code)
        seen_urls.add(current_url)
        current_url = next_url

    raise FetchError(url, "too many redirects")


# ── Sub-resources ─────────────────────────────────────────────────────────────

def _probe_resources(
    refs: list[ResourceRef],
    session: requests.Session,
    config: AuditConfig,
    headers: dict[str, str],
) -> tuple[list[Resource], str]:
    """
    Stylesheets are downloaded (their text feeds the mobile CSS checks), images
    get a HEAD request; both are bounded by config. Everything else is listed
    without a network round-trip.
    """
    resources: list[Resource] = []
    css_parts: list[str] = []
    stylesheets_left = config.max_stylesheets if config.fetch_stylesheets else 0
    images_left = config.max_image_checks

    for ref in refs:
        if ref.kind == ResourceKind.STYLESHEET and stylesheets_left > 0:
            stylesheets_left -= 1
            resource, text = _fetch_stylesheet(ref, session, config.request_timeout, headers)
            resources.append(resource)
            if text:
                css_parts.append(text)
        elif ref.kind == ResourceKind.IMAGE and images_left > 0:
            images_left -= 1
            resources.append(_head_resource(ref, session, config.request_timeout, headers))
        else:
            resources.append(Resource(kind=ref.kind, url=ref.url, third_party=ref.third_party))

    return resources, "\n".join(css_parts)


def _fetch_stylesheet(ref, session, timeout, headers) -> tuple[Resource, str]:
    t0 = time.perf_counter()
    try:
        resp = session.get(ref.url, headers=headers, timeout=timeout)
    except requests.exceptions.RequestException as exc:
        logger.warning("Stylesheet %s could not be fetched: %s", ref.url, exc)
        return Resource(kind=ref.kind, url=ref.url, third_party=ref.third_party, failed=True), ""
    duration_ms = (time.perf_counter() - t0) * 1000

    failed = resp.status_code >= 400
    return Resource(
        kind=ref.kind,
        url=ref.url,
        transfer_size=len(resp.content or b""),
        cached=_is_cacheable(resp.headers),
        third_party=ref.third_party,
        failed=failed,
        duration_ms=duration_ms,
    ), ("" if failed else resp.text or "")


def _head_resource(ref, session, timeout, headers) -> Resource:
    t0 = time.perf_counter()
    try:
        resp = session.head(ref.url, headers=headers, timeout=timeout, allow_redirects=True)
        if resp.status_code == 405:
            # HEAD not allowed, retry with GET
            resp = session.get(ref.url, headers=headers, timeout=timeout, stream=True)
            resp.close()
    except requests.exceptions.RequestException as exc:
        logger.warning("Resource %s could not be checked: %s", ref.url, exc)
        return Resource(kind=ref.kind, url=ref.url, third_party=ref.third_party, failed=True)

    return Resource(
        kind=ref.kind,
        url=ref.url,
        transfer_size=_int_header(resp.headers, "content-length"),
        cached=_is_cacheable(resp.headers),
        third_party=ref.third_party,
        failed=resp.status_code >= 400,
        duration_ms=(time.perf_counter() - t0) * 1000,
    )


def _is_cacheable(headers) -> bool:
    """True when the response allows a browser to reuse it without revalidating."""
    cache_control = (headers.get("cache-control") or "").lower()
    if "no-store" in cache_control or "no-cache" in cache_control:
        return False
    for directive in cache_control.split(","):
        name, _, value = directive.strip().partition("=")
        if name == "max-age":
            return value.strip().isdigit() and int(value.strip()) > 0
    return bool(headers.get("expires"))


def _int_header(headers, name: str) -> int:
    try:
        return int(headers.get(name, 0) or 0)
    except ValueError:
        return 0
