"""Tests for recursive link discovery."""

import asyncio

from llms_generator.crawler.discovery import LinkDiscoverer, extract_links
from llms_generator.models import DiscoveryMethod, SitemapEntry
from llms_generator.utils.errors import NetworkError

from conftest import FakeFetcher, html_response


SITE = "https://example.com"


def links_page(*hrefs):
    anchors = "".join(f'<a href="{href}">link</a>' for href in hrefs)
    return f"<html><body>{anchors}</body></html>"


def test_extract_links_filters_and_normalizes():
    html = links_page(
        "/docs/",
        "/docs#section",
        "https://other.org/x",
        "mailto:me@example.com",
        "guide",
        "/start",
    )
    links = extract_links(html, f"{SITE}/start", SITE)
    assert links == [f"{SITE}/docs", f"{SITE}/guide"]


def test_extract_links_respects_cap():
    html = links_page("/a", "/b", "/c")
    assert extract_links(html, f"{SITE}/", SITE, max_links=2) == [f"{SITE}/a", f"{SITE}/b"]


def make_discoverer(fetcher, max_depth=3):
    return LinkDiscoverer(fetcher, SITE, max_depth=max_depth, request_delay_ms=0, concurrency=2)


def test_discover_walks_breadth_first_with_depths():
    fetcher = FakeFetcher({
        f"{SITE}/": html_response(f"{SITE}/", links_page("/a", "/b")),
        f"{SITE}/a": html_response(f"{SITE}/a", links_page("/", "/c")),
        f"{SITE}/b": html_response(f"{SITE}/b", links_page("/c", "/d")),
        f"{SITE}/c": html_response(f"{SITE}/c", links_page("/e")),
    })

    discovered = asyncio.run(make_discoverer(fetcher, max_depth=2).discover([SitemapEntry(loc=f"{SITE}/")]))
    depths = {d.url: d.depth for d in discovered}

    assert depths == {
        f"{SITE}/": 0,
        f"{SITE}/a": 1,
        f"{SITE}/b": 1,
        f"{SITE}/c": 2,
        f"{SITE}/d": 2,
    }
    by_url = {d.url: d for d in discovered}
    # First discovery wins
    assert by_url[f"{SITE}/c"].parent_url == f"{SITE}/a"
    assert by_url[f"{SITE}/c"].discovery_method is DiscoveryMethod.INTERNAL_LINK
    assert by_url[f"{SITE}/"].discovery_method is DiscoveryMethod.SITEMAP


def test_discover_stops_when_round_adds_nothing():
    fetcher = FakeFetcher({
        f"{SITE}/": html_response(f"{SITE}/", links_page("/")),
    })
    discovered = asyncio.run(make_discoverer(fetcher, max_depth=5).discover([SitemapEntry(loc=f"{SITE}/")]))
    assert [d.url for d in discovered] == [f"{SITE}/"]
    assert fetcher.calls == [f"{SITE}/"]


def test_failing_pages_contribute_no_links():
    fetcher = FakeFetcher({
        f"{SITE}/": html_response(f"{SITE}/", links_page("/a", "/b")),
        f"{SITE}/a": NetworkError("reset", f"{SITE}/a"),
        f"{SITE}/b": html_response(f"{SITE}/b", links_page("/c")),
    })
    discovered = asyncio.run(make_discoverer(fetcher, max_depth=2).discover([SitemapEntry(loc=f"{SITE}/")]))
    assert {d.url for d in discovered} == {f"{SITE}/", f"{SITE}/a", f"{SITE}/b", f"{SITE}/c"}


def test_non_html_pages_are_not_parsed():
    fetcher = FakeFetcher({
        f"{SITE}/": html_response(f"{SITE}/", links_page("/a"), content_type="application/json"),
    })
    discovered = asyncio.run(make_discoverer(fetcher).discover([SitemapEntry(loc=f"{SITE}/")]))
    assert [d.url for d in discovered] == [f"{SITE}/"]


def test_seed_lastmod_is_kept():
    fetcher = FakeFetcher()
    seeds = [SitemapEntry(loc=f"{SITE}/a", lastmod="2024-01-01")]
    discovered = asyncio.run(make_discoverer(fetcher, max_depth=1).discover(seeds))
    assert discovered[0].lastmod == "2024-01-01"
