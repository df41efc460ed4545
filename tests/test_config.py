"""Tests for configuration loading and generator options."""

import json
import os
import re

import pytest

from llms_generator.analyzer.categorizer import ContentFilterConfig
from llms_generator.config import find_config_file, load_config, snake_case
from llms_generator.options import GeneratorOptions, parse_url_pattern
from llms_generator.utils.errors import InvalidURLError


SITE = "https://example.com"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("LLMS_SITE_URL", raising=False)
    monkeypatch.delenv("SITE_URL", raising=False)


@pytest.mark.parametrize("key, expected", [
    ("siteUrl", "site_url"),
    ("maxCharsPerPage", "max_chars_per_page"),
    ("max_pages", "max_pages"),
    ("concurrency", "concurrency"),
])
def test_snake_case(key, expected):
    assert snake_case(key) == expected


def test_load_config_file(tmp_path):
    path = tmp_path / "llms.config.json"
    path.write_text(json.dumps({"siteUrl": SITE, "maxPages": 10}), encoding="utf-8")

    assert load_config(str(path), env={}) == {"site_url": SITE, "max_pages": 10}


def test_default_config_file_lookup(tmp_path, monkeypatch):
    (tmp_path / ".llmsrc.json").write_text('{"headerTitle": "Docs"}', encoding="utf-8")
    monkeypatch.chdir(tmp_path)

    assert os.path.basename(find_config_file()) == ".llmsrc.json"
    assert load_config(env={})["header_title"] == "Docs"


def test_no_config_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert load_config(env={}) == {}


def test_missing_explicit_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.json"), env={})


@pytest.mark.parametrize("content", ["{not json", "[1, 2]"])
def test_invalid_config_raises(tmp_path, content):
    path = tmp_path / "bad.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(str(path), env={})


def test_env_fills_unset_keys(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    env = {"SITE_URL": "https://env.example.com", "LLMS_MAX_PAGES": "7", "LLMS_CONCURRENCY": "many"}

    config = load_config(env=env)

    assert config == {"site_url": "https://env.example.com", "max_pages": 7}


def test_env_does_not_override_file(tmp_path):
    path = tmp_path / "llms.config.json"
    path.write_text(json.dumps({"site_url": SITE}), encoding="utf-8")

    config = load_config(str(path), env={"LLMS_SITE_URL": "https://other.com"})

    assert config["site_url"] == SITE


def test_llms_site_url_takes_precedence(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    config = load_config(env={"LLMS_SITE_URL": "https://a.com", "SITE_URL": "https://b.com"})
    assert config["site_url"] == "https://a.com"


def test_options_defaults():
    options = GeneratorOptions(site_url=SITE + "//")

    assert options.site_url == SITE
    assert options.sitemap_url == f"{SITE}/sitemap.xml"
    assert options.output_format == "full"
    assert options.content_filter_config() is None


def test_options_site_url_from_env(monkeypatch):
    monkeypatch.setenv("SITE_URL", "https://env.example.com/")
    assert GeneratorOptions().site_url == "https://env.example.com"


@pytest.mark.parametrize("site_url", ["example.com", "ftp://example.com", "https://"])
def test_options_reject_invalid_site_url(site_url):
    with pytest.raises(InvalidURLError):
        GeneratorOptions(site_url=site_url)


def test_options_reject_unknown_format():
    with pytest.raises(ValueError):
        GeneratorOptions(site_url=SITE, output_format="huge")


def test_url_patterns():
    assert parse_url_pattern("/docs/") == "/docs/"
    assert parse_url_pattern("re:/v\\d+/").pattern == "/v\\d+/"

    compiled = re.compile("x")
    assert parse_url_pattern(compiled) is compiled

    options = GeneratorOptions(site_url=SITE, include_patterns=["/docs/", "re:^https://example\\.com/api"])
    assert options.include_patterns[0] == "/docs/"
    assert options.include_patterns[1].search("https://example.com/api/x")


def test_options_from_dict():
    options = GeneratorOptions.from_dict({
        "siteUrl": SITE,
        "maxPages": 12,
        "useSitemap": False,
        "headerTitle": "Example",
        "contentFilter": {"minContentLength": 5},
        "formatLimits": {"small": {"maxPages": 3}},
        "unknown": "ignored",
        "sitemapUrl": None,
    })

    assert options.max_pages == 12
    assert options.use_sitemap is False
    assert options.header_title == "Example"
    assert options.sitemap_url == f"{SITE}/sitemap.xml"
    assert isinstance(options.content_filter, ContentFilterConfig)
    assert options.content_filter.min_content_length == 5
    assert options.format_limits["small"]["max_pages"] == 3
    assert options.format_limits["small"]["max_chars_per_page"] == 50000
    assert options.format_limits["full"]["max_pages"] == 5000


def test_empty_content_filter_means_no_filtering():
    options = GeneratorOptions.from_dict({"site_url": SITE, "content_filter": {}})
    assert options.content_filter_config() is None


def test_effective_limits_use_preset_as_ceiling():
    options = GeneratorOptions(site_url=SITE, output_format="minimal", max_pages=5)
    limits = options.effective_limits()

    assert limits["max_pages"] == 5
    assert limits["max_chars_per_page"] == 10000
    assert limits["max_total_chars"] == 200000
    assert options.max_chars_per_page != 10000


def test_effective_limits_full_preset():
    assert GeneratorOptions(site_url=SITE).effective_limits() == {
        "max_pages": 5000,
        "max_chars_per_page": 200000,
        "max_total_chars": 50000000,
    }
