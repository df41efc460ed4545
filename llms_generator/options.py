"""
Generator options.

A single dataclass carries every knob of a generation run. Options can be
built directly or from a JSON-style mapping with snake_case or camelCase keys.
"""

import os
import re
from dataclasses import dataclass, field, fields
from typing import Any, Callable, Dict, List, Mapping, Optional, Union
from urllib.parse import urlparse

from .analyzer.categorizer import ContentFilterConfig
from .utils.constants import (
    DEFAULT_USER_AGENT,
    DEFAULT_TIMEOUT_MS,
    DEFAULT_RETRIES,
    DEFAULT_RETRY_BACKOFF_MS,
    DEFAULT_CONCURRENCY,
    DEFAULT_REQUEST_DELAY_MS,
    DEFAULT_MAX_PAGES,
    DEFAULT_MAX_CHARS_PER_PAGE,
    DEFAULT_MAX_TOTAL_CHARS,
    DEFAULT_MAX_RECURSIVE_DEPTH,
    DEFAULT_MAX_LINKS_PER_PAGE,
    DEFAULT_MAX_FILE_SYSTEM_DEPTH,
    DEFAULT_FILE_INCLUDE_PATTERNS,
    DEFAULT_FILE_EXCLUDE_PATTERNS,
    FORMAT_LIMITS,
)
from .config import snake_case
from .utils.errors import InvalidURLError
from .utils.urls import UrlPattern, strip_trailing_slashes


SITE_URL_ENV_VARS = ("LLMS_SITE_URL", "SITE_URL")
OUTPUT_FORMATS = tuple(FORMAT_LIMITS)

# "re:<pattern>" strings in URL pattern lists are regular expressions
REGEX_PREFIX = "re:"


def parse_url_pattern(value: UrlPattern) -> UrlPattern:
    """Turn a "re:<pattern>" string into a compiled pattern; other strings stay literal."""
    if isinstance(value, str) and value.startswith(REGEX_PREFIX):
        return re.compile(value[len(REGEX_PREFIX):])
    return value


@dataclass
class GeneratorOptions:
    """
    Options for one generation run.

    `site_url` falls back to the LLMS_SITE_URL or SITE_URL environment
    variable and always has its trailing slashes stripped.
    """

    site_url: str = ""
    sitemap_url: Optional[str] = None
    use_sitemap: bool = True
    respect_robots: bool = False
    include_patterns: List[UrlPattern] = field(default_factory=list)
    exclude_patterns: List[UrlPattern] = field(default_factory=list)
    strip_selectors: List[str] = field(default_factory=list)

    # Limits
    max_pages: int = DEFAULT_MAX_PAGES
    max_chars_per_page: int = DEFAULT_MAX_CHARS_PER_PAGE
    max_total_chars: int = DEFAULT_MAX_TOTAL_CHARS

    # Fetching
    concurrency: int = DEFAULT_CONCURRENCY
    request_timeout_ms: int = DEFAULT_TIMEOUT_MS
    retries: int = DEFAULT_RETRIES
    retry_backoff_ms: int = DEFAULT_RETRY_BACKOFF_MS
    header_title: str = "Site"
    keep_query_params: List[str] = field(default_factory=list)
    user_agent: str = DEFAULT_USER_AGENT
    custom_headers: Dict[str, str] = field(default_factory=dict)

    # Extraction
    use_readability: bool = True
    content_transformer: Optional[Callable[[str, str], str]] = None
    enable_content_cleaning: bool = False
    remove_images: bool = False
    enable_multiple_extraction_methods: bool = False

    # Recursive discovery
    enable_recursive_discovery: bool = False
    max_recursive_depth: int = DEFAULT_MAX_RECURSIVE_DEPTH
    max_links_per_page: int = DEFAULT_MAX_LINKS_PER_PAGE
    request_delay_ms: int = DEFAULT_REQUEST_DELAY_MS

    # File system discovery
    enable_file_system_discovery: bool = False
    file_system_base_path: str = field(default_factory=os.getcwd)
    file_include_patterns: List[str] = field(default_factory=lambda: list(DEFAULT_FILE_INCLUDE_PATTERNS))
    file_exclude_patterns: List[str] = field(default_factory=lambda: list(DEFAULT_FILE_EXCLUDE_PATTERNS))
    max_file_system_depth: int = DEFAULT_MAX_FILE_SYSTEM_DEPTH
    follow_symlinks: bool = False

    # Output
    output_format: str = "full"
    format_limits: Dict[str, Dict[str, int]] = field(
        default_factory=lambda: {name: dict(limits) for name, limits in FORMAT_LIMITS.items()}
    )
    content_filter: Optional[Union[ContentFilterConfig, Dict[str, Any]]] = None

    def __post_init__(self):
        site_url = self.site_url
        if not site_url:
            site_url = next((os.environ[v] for v in SITE_URL_ENV_VARS if os.environ.get(v)), "")
        if not site_url:
            raise InvalidURLError(
                "site_url is required (pass it or set LLMS_SITE_URL / SITE_URL)"
            )

        self.site_url = strip_trailing_slashes(site_url)
        parsed = urlparse(self.site_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise InvalidURLError(f"Invalid site URL: {site_url}", site_url)

        if not self.sitemap_url:
            self.sitemap_url = f"{self.site_url}/sitemap.xml"

        if self.output_format not in self.format_limits:
            raise ValueError(
                f"Unknown output format {self.output_format!r} "
                f"(expected one of: {', '.join(sorted(self.format_limits))})"
            )

        self.include_patterns = [parse_url_pattern(p) for p in self.include_patterns]
        self.exclude_patterns = [parse_url_pattern(p) for p in self.exclude_patterns]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GeneratorOptions":
        """
        Build options from a mapping.

        Unknown keys are ignored. A `content_filter` mapping becomes a
        ContentFilterConfig.

        Args:
            data: Option values keyed by snake_case or camelCase names

        Returns:
            GeneratorOptions
        """
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            name = snake_case(key)
            if name in known and value is not None:
                kwargs[name] = value

        content_filter = kwargs.get("content_filter")
        if isinstance(content_filter, Mapping):
            kwargs["content_filter"] = (
                ContentFilterConfig.from_dict(content_filter) if content_filter else None
            )

        format_limits = kwargs.get("format_limits")
        if isinstance(format_limits, Mapping):
            merged = {name: dict(limits) for name, limits in FORMAT_LIMITS.items()}
            for name, limits in format_limits.items():
                merged.setdefault(name, {}).update(
                    {snake_case(k): v for k, v in limits.items()}
                )
            kwargs["format_limits"] = merged

        return cls(**kwargs)

    def effective_limits(self) -> Dict[str, int]:
        """
        Page and character limits after applying the output format preset.

        Each preset value acts as a ceiling on the matching option, so the
        smaller of the two wins. The options themselves are not modified.
        """
        limits = {
            "max_pages": self.max_pages,
            "max_chars_per_page": self.max_chars_per_page,
            "max_total_chars": self.max_total_chars,
        }
        for name, ceiling in self.format_limits.get(self.output_format, {}).items():
            if name in limits and ceiling is not None:
                limits[name] = min(limits[name], ceiling)
        return limits

    def content_filter_config(self) -> Optional[ContentFilterConfig]:
        """The content filter configuration, or None when filtering is off."""
        if self.content_filter is None:
            return None
        if isinstance(self.content_filter, ContentFilterConfig):
            return self.content_filter
        if not self.content_filter:
            return None
        return ContentFilterConfig.from_dict(self.content_filter)
