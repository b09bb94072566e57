import pytest
from bs4 import BeautifulSoup

from crawler.parser import extract_resources, is_third_party
from models import ResourceKind


def _refs(html, page_url="https://example.com/blog/post"):
    return extract_resources(BeautifulSoup(html, "lxml"), page_url)


def test_kinds_in_document_order():
    refs = _refs(
        '<link rel="stylesheet" href="/css/site.css">'
        '<link rel="preload" as="font" href="/fonts/a.woff2">'
        '<link rel="icon" href="/favicon.ico">'
        '<link rel="canonical" href="https://example.com/blog/post">'
        '<script src="app.js"></script>'
        '<img src="/img/a.png">'
    )

    assert [(r.kind, r.url) for r in refs] == [
        (ResourceKind.STYLESHEET, "https://example.com/css/site.css"),
        (ResourceKind.FONT, "https://example.com/fonts/a.woff2"),
        (ResourceKind.IMAGE, "https://example.com/favicon.ico"),
        (ResourceKind.SCRIPT, "https://example.com/blog/app.js"),
        (ResourceKind.IMAGE, "https://example.com/img/a.png"),
    ]


def test_base_href_is_honoured():
    refs = _refs('<base href="https://static.example.com/assets/"><img src="logo.png">')

    assert refs[0].url == "https://static.example.com/assets/logo.png"
    assert refs[0].third_party is False


def test_duplicates_inline_and_data_uris_are_skipped():
    refs = _refs(
        '<img src="/a.png"><img src="/a.png">'
        '<img src="data:image/png;base64,AAAA">'
        "<script>var inline = 1;</script>"
        '<img src="javascript:void(0)">'
    )

    assert [r.url for r in refs] == ["https://example.com/a.png"]


@pytest.mark.parametrize("url,expected", [
    ("https://example.com/x.js", False),
    ("https://cdn.example.com/x.js", False),
    ("https://www.googletagmanager.com/gtm.js", True),
    ("https://example.co.uk/x.js", True),
])
def test_is_third_party(url, expected):
    assert is_third_party(url, "https://www.example.com/") is expected
