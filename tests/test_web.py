"""Tests for the /llms.txt web route."""

import pytest

from llms_generator.models import GenerationStats
from llms_generator.web import app as web_app
from llms_generator.web.app import ContentCache, RouteConfig, create_app, default_cache_key


SITE = "https://example.com"


@pytest.fixture
def calls(monkeypatch):
    """Replace document generation with a counting fake."""
    seen = []

    async def fake_generate(options, fetcher=None):
        seen.append(options)
        return f"# llms-full for {options.site_url}", GenerationStats(total_pages=1)

    monkeypatch.setattr(web_app, "generate", fake_generate)
    return seen


def make_client(**config):
    config.setdefault("generator_options", {"site_url": SITE})
    return create_app(RouteConfig(**config)).test_client()


def test_serves_generated_document(calls):
    response = make_client().get("/llms.txt")

    assert response.status_code == 200
    assert response.get_data(as_text=True) == f"# llms-full for {SITE}"
    assert response.headers["Content-Type"] == "text/plain; charset=utf-8"
    assert response.headers["Cache-Control"] == "public, max-age=3600"
    assert response.headers["X-Content-Length"] == str(len(f"# llms-full for {SITE}"))
    assert response.headers["X-Generated-At"].endswith("Z")
    assert calls[0].site_url == SITE


def test_document_is_cached(calls):
    client = make_client()
    client.get("/llms.txt")
    client.get("/llms.txt")
    assert len(calls) == 1


def test_cache_can_be_disabled(calls):
    client = make_client(enable_cache=False)
    first = client.get("/llms.txt")
    client.get("/llms.txt")

    assert len(calls) == 2
    assert first.headers["Cache-Control"] == "no-cache"


def test_custom_response_headers(calls):
    response = make_client(response_headers={"X-Robots-Tag": "noindex"}).get("/llms.txt")
    assert response.headers["X-Robots-Tag"] == "noindex"


def test_revalidation_requires_secret():
    with pytest.raises(ValueError):
        create_app(RouteConfig(enable_revalidation=True))


def test_revalidation_with_wrong_secret(calls):
    client = make_client(enable_revalidation=True, revalidation_secret="s3cret")
    response = client.get("/llms.txt?revalidate=true&secret=nope")

    assert response.status_code == 401
    assert calls == []


def test_revalidation_clears_cache(calls):
    client = make_client(enable_revalidation=True, revalidation_secret="s3cret")
    client.get("/llms.txt")
    client.get("/llms.txt")
    client.get("/llms.txt?revalidate=true&secret=s3cret")
    assert len(calls) == 2


def test_generation_failure_returns_error_document(monkeypatch):
    async def failing_generate(options, fetcher=None):
        raise RuntimeError("sitemap unreachable")

    monkeypatch.setattr(web_app, "generate", failing_generate)
    response = make_client().get("/llms.txt")

    assert response.status_code == 500
    assert response.headers["X-Error"] == "true"
    body = response.get_data(as_text=True)
    assert body.startswith("# Error\n\n")
    assert "sitemap unreachable" in body


def test_missing_site_url_returns_error_document(calls, monkeypatch):
    monkeypatch.delenv("LLMS_SITE_URL", raising=False)
    monkeypatch.delenv("SITE_URL", raising=False)
    response = make_client(generator_options={}).get("/llms.txt")
    assert response.status_code == 500
    assert calls == []


def test_cache_entries_expire(monkeypatch):
    now = [1000.0]
    monkeypatch.setattr(web_app.time, "time", lambda: now[0])

    cache = ContentCache(ttl_minutes=1)
    cache.set("key", "value")
    assert cache.get("key") == "value"

    now[0] += 61
    assert cache.get("key") is None
    assert len(cache) == 0


def test_default_cache_key_depends_on_crawl_options():
    base = default_cache_key({"site_url": SITE})
    assert base == default_cache_key({"siteUrl": SITE + "/"})
    assert base != default_cache_key({"site_url": SITE, "max_pages": 5})
