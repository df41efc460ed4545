"""Shared test fixtures."""

import asyncio
from typing import Dict, List, Optional, Union

import pytest

from llms_generator.crawler.fetcher import FetchResponse


HTML = "text/html; charset=utf-8"


def html_response(url: str, body: str, status: int = 200, content_type: str = HTML) -> FetchResponse:
    return FetchResponse(
        url=url,
        status=status,
        reason="OK" if status == 200 else "Not Found",
        headers={"Content-Type": content_type},
        body=body.encode("utf-8"),
        charset="utf-8"
    )


def xml_response(url: str, body: str) -> FetchResponse:
    return html_response(url, body, content_type="application/xml")


def sitemap_xml(*entries) -> str:
    """Build a urlset from (loc, lastmod) pairs or bare locs."""
    blocks = []
    for entry in entries:
        loc, lastmod = entry if isinstance(entry, tuple) else (entry, None)
        lastmod_tag = f"<lastmod>{lastmod}</lastmod>" if lastmod else ""
        blocks.append(f"<url><loc>{loc}</loc>{lastmod_tag}</url>")
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">'
        + "".join(blocks)
        + "</urlset>"
    )


def sitemap_index_xml(*locs: str) -> str:
    children = "".join(f"<sitemap><loc>{loc}</loc></sitemap>" for loc in locs)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<sitemapindex xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">'
        + children
        + "</sitemapindex>"
    )


def page_html(title: str, body: str, lang: str = "en") -> str:
    return (
        f'<html lang="{lang}"><head><title>{title}</title></head>'
        f"<body><nav>Menu Home About</nav><main>{body}</main>"
        f"<footer>Copyright</footer></body></html>"
    )


class FakeFetcher:
    """
    In-memory stand-in for Fetcher.

    Unknown URLs answer 404. An Exception value is raised instead of
    returned. Delays (seconds) are awaited before answering.
    """

    def __init__(
        self,
        responses: Optional[Dict[str, Union[FetchResponse, Exception]]] = None,
        delays: Optional[Dict[str, float]] = None
    ):
        self.responses = dict(responses or {})
        self.delays = dict(delays or {})
        self.calls: List[str] = []
        self.entered = False

    async def __aenter__(self) -> "FakeFetcher":
        self.entered = True
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.entered = False

    async def fetch(self, url: str) -> FetchResponse:
        self.calls.append(url)
        delay = self.delays.get(url)
        if delay:
            await asyncio.sleep(delay)
        response = self.responses.get(url)
        if response is None:
            return html_response(url, "missing", status=404)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def fake_fetcher():
    return FakeFetcher()
