import pytest

from models import PageSnapshot

SECURE_HEADERS = {
    "Content-Type": "text/html; charset=utf-8",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "Content-Security-Policy": "default-src 'self'",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "X-Content-Type-Options": "nosniff",
}

DEFAULT_TITLE = "Example Widgets: Handmade Tools for Modern Workshops"
DEFAULT_DESCRIPTION = (
    "Handmade planes, chisels and saws built to last a lifetime. "
    "Order online and get free shipping on every workshop tool."
)

_HEAD = """
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<meta name="author" content="Jane Doe">
<meta property="og:title" content="Example Widgets">
<meta property="og:description" content="Handmade workshop tools">
<meta property="og:image" content="https://example.com/og.png">
<meta property="og:type" content="website">
<link rel="canonical" href="https://example.com/">
<style>
body { display: flex; font-size: 1rem; }
@media (max-width: 600px) { body { display: block; } }
</style>
<script type="application/ld+json">{"@context": "https://schema.org", "@type": "Organization", "name": "Example Widgets"}</script>
"""

_BODY = """
<a class="skip-link" href="#main">Skip to main content</a>
<header>
  <nav aria-label="Breadcrumb" class="breadcrumb"><a href="/">Home</a> / <a href="/tools">Tools</a></nav>
  <form role="search" action="/search">
    <label for="q">Search</label>
    <input type="search" id="q" name="q">
    <button type="submit">Search</button>
  </form>
</header>
<main id="main">
  <h1>Handmade tools for modern workshops</h1>
  <h2>Why our tools last</h2>
  <p>Every plane we sell is cast from ductile iron. The soles are ground flat by hand.
  Each blade is hardened and tempered in small batches. We test every tool before it ships.
  Our chisels hold an edge through long days of paring. The handles are turned from local ash.</p>
  <p>We started in a small garage with one lathe. Today a team of twelve makers runs the shop.
  We still sharpen every blade ourselves. Customers send us photos of the furniture they build.
  Those photos hang on the wall above the bench.</p>
  <img src="/img/plane.jpg" alt="A hand plane resting on a workbench">
  <h2>Start your next project</h2>
  <p>Browse the full catalogue of planes, saws and chisels. Every order ships within two days.
  Returns are free for a full year. Questions are always welcome.</p>
  <a class="btn" href="/shop">Buy now</a>
  <button class="cta" type="button">Get started</button>
  <p><a href="mailto:hello@example.com">Email us</a> with any question.</p>
</main>
<footer>
  <a href="/about">About us</a>
  <a href="/privacy">Privacy policy</a>
  <a href="/terms">Terms of service</a>
  <a href="/contact">Contact</a>
  <a href="https://twitter.com/examplewidgets">Follow us on Twitter</a>
</footer>
"""


def build_page(
    title=DEFAULT_TITLE,
    description=DEFAULT_DESCRIPTION,
    head_extra="",
    body_extra="",
    lang="en",
):
    """HTML of a page that triggers no rule; None drops the title or description."""
    parts = [f'<!DOCTYPE html><html lang="{lang}"><head>']
    if title is not None:
        parts.append(f"<title>{title}</title>")
    if description is not None:
        parts.append(f'<meta name="description" content="{description}">')
    parts.append(_HEAD)
    parts.append(head_extra)
    parts.append("</head><body>")
    parts.append(_BODY)
    parts.append(body_extra)
    parts.append("</body></html>")
    return "".join(parts)


@pytest.fixture
def page_html():
    return build_page


@pytest.fixture
def make_snapshot():
    def _make(html=None, url="https://example.com/", headers=None, **kwargs):
        return PageSnapshot(
            url=url,
            final_url=kwargs.pop("final_url", url),
            http_status=kwargs.pop("http_status", 200),
            response_headers=dict(SECURE_HEADERS) if headers is None else headers,
            html=build_page() if html is None else html,
            **kwargs,
        )
    return _make


@pytest.fixture
def secure_headers():
    return dict(SECURE_HEADERS)
