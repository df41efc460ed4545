"""Tests for the crawl worker pool."""

import asyncio
from datetime import datetime, timezone

from llms_generator.crawler.extractor import ContentExtractor
from llms_generator.crawler.worker import CrawlWorkerPool
from llms_generator.models import DiscoveredFile, DiscoveredURL
from llms_generator.utils.errors import NetworkError

from conftest import FakeFetcher, html_response, page_html


SITE = "https://example.com"
BODY = "<h1>Heading</h1><p>" + "Plenty of useful documentation text. " * 5 + "</p>"


class ExplodingExtractor:
    """Extractor that must never be reached."""

    cleaner = None

    def extract(self, html, url):
        raise AssertionError("extractor should not be called")


def make_pool(fetcher, extractor=None, **kwargs):
    return CrawlWorkerPool(fetcher, extractor or ContentExtractor(use_readability=False), **kwargs)


def test_results_keep_input_order_under_reverse_completion():
    urls = [f"{SITE}/p{i}" for i in range(5)]
    fetcher = FakeFetcher(
        responses={url: html_response(url, page_html(f"Page {i}", BODY)) for i, url in enumerate(urls)},
        # First URL finishes last
        delays={url: 0.01 * (5 - i) for i, url in enumerate(urls)}
    )

    results = asyncio.run(make_pool(fetcher, concurrency=5).run([DiscoveredURL(url=u) for u in urls]))

    assert [r.url for r in results] == urls
    assert [r.title for r in results] == [f"Page {i}" for i in range(5)]
    assert all(r.success for r in results)


def test_each_target_is_fetched_once():
    urls = [f"{SITE}/p{i}" for i in range(7)]
    fetcher = FakeFetcher({url: html_response(url, page_html("T", BODY)) for url in urls})
    asyncio.run(make_pool(fetcher, concurrency=3).run([DiscoveredURL(url=u) for u in urls]))
    assert sorted(fetcher.calls) == sorted(urls)


def test_http_error_becomes_skip():
    fetcher = FakeFetcher()
    (result,) = asyncio.run(make_pool(fetcher).run([DiscoveredURL(url=f"{SITE}/gone", lastmod="2024-01-01")]))
    assert not result.success
    assert result.skip_reason == "http-404"
    assert result.error == "HTTP 404"
    assert result.status_code == 404
    assert result.title == "Skipped"
    assert result.content.startswith("Failed to fetch: 404")
    assert result.lastmod == "2024-01-01"


def test_non_html_becomes_content_type_skip():
    url = f"{SITE}/file.pdf"
    fetcher = FakeFetcher({url: html_response(url, "%PDF", content_type="application/pdf")})
    (result,) = asyncio.run(make_pool(fetcher, ExplodingExtractor()).run([DiscoveredURL(url=url)]))
    assert result.skip_reason == "content-type"
    assert result.error == "Non-HTML content type"
    assert result.title == "Skipped"


def test_oversized_page_is_skipped_without_extraction():
    url = f"{SITE}/huge"
    body = "<html><body>" + "x" * (6 * 1024 * 1024) + "</body></html>"
    fetcher = FakeFetcher({url: html_response(url, body)})

    (result,) = asyncio.run(make_pool(fetcher, ExplodingExtractor()).run([DiscoveredURL(url=url)]))

    assert not result.success
    assert result.skip_reason == "too-large"
    assert result.content == "No content extracted."
    assert result.title == "Skipped"


def test_transport_failure_becomes_parse_error_skip():
    url = f"{SITE}/flaky"
    fetcher = FakeFetcher({url: NetworkError("connection reset", url)})
    (result,) = asyncio.run(make_pool(fetcher).run([DiscoveredURL(url=url)]))
    assert result.skip_reason == "parse-error"
    assert result.error == "connection reset"
    assert result.content == "(Fetch/parse error: connection reset)"
    assert result.title == "Skipped"
    assert result.status_code == 0


def test_content_transformer_runs_once_per_page():
    calls = []

    def transform(content, url):
        calls.append(url)
        return content.upper()

    url = f"{SITE}/p"
    fetcher = FakeFetcher({url: html_response(url, page_html("T", BODY))})
    (result,) = asyncio.run(make_pool(fetcher, content_transformer=transform).run([DiscoveredURL(url=url)]))

    assert calls == [url]
    assert "PLENTY OF USEFUL" in result.content


def test_transformer_failure_is_contained():
    def transform(content, url):
        raise ValueError("bad transform")

    urls = [f"{SITE}/a", f"{SITE}/b"]
    fetcher = FakeFetcher({u: html_response(u, page_html("T", BODY)) for u in urls})
    results = asyncio.run(make_pool(fetcher, content_transformer=transform).run([DiscoveredURL(url=u) for u in urls]))
    assert [r.skip_reason for r in results] == ["parse-error", "parse-error"]


def test_empty_target_list():
    assert asyncio.run(make_pool(FakeFetcher()).run([])) == []


def discovered(path, relative, size=None):
    return DiscoveredFile(
        path=str(path),
        relative_path=relative,
        extension=path.suffix,
        size_bytes=size if size is not None else path.stat().st_size,
        modified_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        depth=relative.count("/")
    )


def test_crawl_markdown_file_uses_heading_as_title(tmp_path):
    path = tmp_path / "guide.md"
    path.write_text("intro line\n\n# Getting Started\n\nSome text.\n", encoding="utf-8")

    result = make_pool(FakeFetcher()).crawl_file(discovered(path, "guide.md"))

    assert result.success
    assert result.title == "Getting Started"
    assert result.url.startswith("file://")
    assert "Some text." in result.content
    assert result.lastmod.startswith("2024-01-01")


def test_crawl_text_file_without_heading_uses_stem(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("just text", encoding="utf-8")
    result = make_pool(FakeFetcher()).crawl_file(discovered(path, "notes.txt"))
    assert result.title == "notes"


def test_crawl_file_too_large(tmp_path):
    path = tmp_path / "big.md"
    path.write_text("small on disk", encoding="utf-8")
    result = make_pool(FakeFetcher()).crawl_file(discovered(path, "big.md", size=6 * 1024 * 1024))
    assert result.skip_reason == "too-large"


def test_crawl_unreadable_file(tmp_path):
    path = tmp_path / "vanished.md"
    result = make_pool(FakeFetcher()).crawl_file(discovered(path, "vanished.md", size=10))
    assert result.skip_reason == "parse-error"
